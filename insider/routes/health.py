"""
Module routes/health.py
Rôle:
- Endpoint de santé (service OK + nombre de parties en mémoire).
"""
from fastapi import APIRouter, Depends

from insider.config.settings import settings
from insider.deps.services import get_game_service
from insider.services.game_service import GameService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health(service: GameService = Depends(get_game_service)):
    """Renvoie un OK minimal avec le nom de service et le nombre de parties ouvertes."""
    return {"ok": True, "service": settings.APP_NAME, "games": service.registry.count()}
