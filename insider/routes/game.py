"""
Module routes/game.py
Rôle:
- Endpoints joueurs du jeu Insider : une route POST par action + lecture d'état + départ.

Intégrations:
- GameService (via `Depends(get_game_service)`) : toute la logique et les contrôles.
- Chaque route renvoie le `GameStateSnapshot` du joueur appelant (le front re-poll `/game/state`).
- Les refus du moteur (`InvalidInput` / `InvalidState`) sont traduits en 400 / 409
  par les handlers déclarés dans `insider.main`.

Notes:
- Les chemins reprennent `GameAction.route` (/game/assignRoles, /game/timeUp...).
- Handlers *synchrones* : FastAPI les exécute dans son threadpool, ce qui permet aux
  verrous du moteur de sérialiser les actions concurrentes d'une même partie.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from insider.deps.services import get_game_service
from insider.models.game import GameAction, GameSettings, GameStateSnapshot, PlayerRole
from insider.services.game_service import GameService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/game", tags=["game"])


# ---------------------------------------------------------------------------
# Modèles Pydantic
# ---------------------------------------------------------------------------
class PlayerPayload(BaseModel):
    player_id: str = Field(..., description="Identifiant stable fourni par le client")


class CreatePayload(PlayerPayload):
    player_name: Optional[str] = None
    settings: Optional[GameSettings] = Field(None, description="Réglages de partie (défauts si absent)")


class JoinPayload(PlayerPayload):
    player_name: Optional[str] = None
    game_code: Optional[str] = Field(None, description="Code partagé par le créateur")


class ReadyPayload(PlayerPayload):
    is_ready: bool = True
    claimed_role: Optional[PlayerRole] = None


class VotePayload(PlayerPayload):
    accused_player_id: str


# ---------------------------------------------------------------------------
# Lecture / appartenance
# ---------------------------------------------------------------------------
@router.post("/state", response_model=GameStateSnapshot)
def get_state(payload: PlayerPayload, service: GameService = Depends(get_game_service)):
    logger.debug("Getting state - player_id=%s", payload.player_id)
    return service.get_state(payload.player_id)


@router.post(f"/{GameAction.CREATE.route}", response_model=GameStateSnapshot)
def create_game(payload: CreatePayload, service: GameService = Depends(get_game_service)):
    logger.info("Creating game - player_id=%s, name=%s", payload.player_id, payload.player_name)
    return service.create(payload.player_id, payload.player_name, payload.settings)


@router.post(f"/{GameAction.JOIN.route}", response_model=GameStateSnapshot)
def join_game(payload: JoinPayload, service: GameService = Depends(get_game_service)):
    logger.info(
        "Joining game %s - player_id=%s, name=%s", payload.game_code, payload.player_id, payload.player_name
    )
    return service.join(payload.player_id, payload.player_name, payload.game_code)


@router.post("/leave", response_model=GameStateSnapshot)
def leave_game(payload: PlayerPayload, service: GameService = Depends(get_game_service)):
    logger.info("Player leaving - player_id=%s", payload.player_id)
    return service.leave(payload.player_id)


# ---------------------------------------------------------------------------
# Actions de partie
# ---------------------------------------------------------------------------
@router.post(f"/{GameAction.READY.route}", response_model=GameStateSnapshot)
def ready(payload: ReadyPayload, service: GameService = Depends(get_game_service)):
    """Prêt (avec rôle revendiqué éventuel) ou retour à l'état "pas prêt"."""
    logger.info(
        "Player ready change - player_id=%s, is_ready=%s, claimed_role=%s",
        payload.player_id,
        payload.is_ready,
        payload.claimed_role.value if payload.claimed_role else None,
    )
    if payload.is_ready:
        return service.set_ready(payload.player_id, payload.claimed_role)
    return service.set_not_ready(payload.player_id)


@router.post(f"/{GameAction.RESET.route}", response_model=GameStateSnapshot)
def reset_game(payload: PlayerPayload, service: GameService = Depends(get_game_service)):
    logger.info("Game reset - player_id=%s", payload.player_id)
    return service.reset(payload.player_id)


@router.post(f"/{GameAction.ASSIGN_ROLES.route}", response_model=GameStateSnapshot)
def assign_roles(payload: PlayerPayload, service: GameService = Depends(get_game_service)):
    logger.info("Assign roles - player_id=%s", payload.player_id)
    return service.assign_roles(payload.player_id)


@router.post(f"/{GameAction.EXCHANGE_WORD.route}", response_model=GameStateSnapshot)
def exchange_word(payload: PlayerPayload, service: GameService = Depends(get_game_service)):
    logger.info("Exchange word - player_id=%s", payload.player_id)
    return service.exchange_word(payload.player_id)


@router.post(f"/{GameAction.START.route}", response_model=GameStateSnapshot)
def start_game(payload: PlayerPayload, service: GameService = Depends(get_game_service)):
    logger.info("Start game - player_id=%s", payload.player_id)
    return service.start(payload.player_id)


@router.post(f"/{GameAction.GUESSED.route}", response_model=GameStateSnapshot)
def word_guessed(payload: PlayerPayload, service: GameService = Depends(get_game_service)):
    logger.info("Guess confirmed - player_id=%s", payload.player_id)
    return service.word_guessed(payload.player_id)


@router.post(f"/{GameAction.TIME_UP.route}", response_model=GameStateSnapshot)
def time_up(payload: PlayerPayload, service: GameService = Depends(get_game_service)):
    logger.info("Time up - player_id=%s", payload.player_id)
    return service.time_up(payload.player_id)


@router.post(f"/{GameAction.VOTE_PLAYER.route}", response_model=GameStateSnapshot)
def vote_player(payload: VotePayload, service: GameService = Depends(get_game_service)):
    logger.info("Vote player - player_id=%s", payload.player_id)
    return service.vote_player(payload.player_id, payload.accused_player_id)


@router.post(f"/{GameAction.COMPLETE_VOTING.route}", response_model=GameStateSnapshot)
def complete_voting(payload: PlayerPayload, service: GameService = Depends(get_game_service)):
    logger.info("Voting completed - player_id=%s", payload.player_id)
    return service.complete_voting(payload.player_id)


@router.post(f"/{GameAction.END.route}", response_model=GameStateSnapshot)
def end_game(payload: PlayerPayload, service: GameService = Depends(get_game_service)):
    logger.info("Game end requested - player_id=%s", payload.player_id)
    return service.end(payload.player_id)
