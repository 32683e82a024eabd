"""
Application FastAPI : point d'entrée
===================================

Rôle
----
- Instancie l'app FastAPI, configure le CORS pour le front et les logs,
- Crée le moteur de partie (`GameService` + registre de sessions) rangé dans `app.state`,
- Traduit les refus du moteur en réponses HTTP 4xx,
- Monte les routeurs.

Lancement
---------
    uvicorn insider.main:app --reload
    # ou
    python -m insider

Notes
-----
- `create_app(service)` permet aux tests de démarrer une app isolée (registre vierge, RNG seedé).
- ⚠️ Le middleware CORS doit être ajouté AVANT les include_router.
"""
import logging
import random
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from insider.config.settings import settings
from insider.routes.game import router as game_router
from insider.routes.health import router as health_router
from insider.services.errors import GameError, InvalidInput, InvalidState
from insider.services.game_service import GameService

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _rejection(status_code: int, exc: GameError, request: Request) -> JSONResponse:
    # refus normal et corrigeable côté client : pas de stacktrace
    logger.info("Action rejected - path=%s, reason=%s", request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(service: Optional[GameService] = None) -> FastAPI:
    app = FastAPI(title="Insider Backend")
    app.state.game_service = service or GameService(rng=random.Random(settings.RNG_SEED))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput):
        return _rejection(400, exc, request)

    @app.exception_handler(InvalidState)
    async def invalid_state_handler(request: Request, exc: InvalidState):
        return _rejection(409, exc, request)

    app.include_router(game_router)
    app.include_router(health_router)

    @app.get("/")
    async def root():
        """Ping basique : permet de vérifier que l'app tourne."""
        return {"ok": True, "service": "insider-backend"}

    @app.on_event("startup")
    async def log_routes():
        logger.info("== Registered routes ==")
        for r in app.routes:
            logger.info("%s %s", getattr(r, "path", "?"), sorted(getattr(r, "methods", None) or []))

    return app


app = create_app()
