"""
Dépendances FastAPI d'accès au moteur de partie
===============================================

Le `GameService` (et son registre de sessions) est créé une seule fois par application
dans `insider.main` puis rangé dans `app.state`. Les routes le récupèrent via
`Depends(get_game_service)` ; les tests peuvent le remplacer avec
`app.dependency_overrides[get_game_service]`.
"""
from fastapi import Request

from insider.services.game_service import GameService


def get_game_service(request: Request) -> GameService:
    return request.app.state.game_service
