"""
Models / game.py
Rôle:
- Énumérations du jeu (statuts, actions, rôles) et réglages de partie.
- Snapshot typé renvoyé au client après chaque action (Pydantic).

Notes:
- Les enums héritent de `str` : elles sont sérialisées par leur nom ("WAITING", "LEADER"...).
- `GameAction.route` donne le segment d'URL exposé par le routeur HTTP.
- `GameStateSnapshot` est la vue *filtrée* d'un joueur (mot secret masqué selon le rôle).
"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from insider.config.settings import settings
from insider.models.player import PlayerView


class GameStatus(str, Enum):
    """Phase courante d'une partie. NO_GAME = le joueur n'est rattaché à aucune partie."""
    NO_GAME = "NO_GAME"
    WAITING = "WAITING"
    PRE_GAME = "PRE_GAME"
    PLAYING = "PLAYING"
    FIND_INSIDER = "FIND_INSIDER"
    SUMMARY = "SUMMARY"
    LOST = "LOST"


class GameAction(str, Enum):
    CREATE = "CREATE"
    JOIN = "JOIN"
    READY = "READY"
    RESET = "RESET"
    ASSIGN_ROLES = "ASSIGN_ROLES"
    EXCHANGE_WORD = "EXCHANGE_WORD"
    START = "START"
    GUESSED = "GUESSED"
    TIME_UP = "TIME_UP"
    VOTE_PLAYER = "VOTE_PLAYER"
    COMPLETE_VOTING = "COMPLETE_VOTING"
    END = "END"

    @property
    def route(self) -> str:
        return ACTION_ROUTES[self]


ACTION_ROUTES: Dict[GameAction, str] = {
    GameAction.CREATE: "create",
    GameAction.JOIN: "join",
    GameAction.READY: "ready",
    GameAction.RESET: "reset",
    GameAction.ASSIGN_ROLES: "assignRoles",
    GameAction.EXCHANGE_WORD: "exchangeWord",
    GameAction.START: "start",
    GameAction.GUESSED: "guessed",
    GameAction.TIME_UP: "timeUp",
    GameAction.VOTE_PLAYER: "votePlayer",
    GameAction.COMPLETE_VOTING: "complete",
    GameAction.END: "end",
}


class PlayerRole(str, Enum):
    LEADER = "LEADER"
    INSIDER = "INSIDER"
    COMMON = "COMMON"


class GameSettings(BaseModel):
    """Réglages figés à la création (valeurs par défaut issues de la configuration)."""
    can_claim_leader: bool = Field(default_factory=lambda: settings.CAN_CLAIM_LEADER)
    can_claim_insider: bool = Field(default_factory=lambda: settings.CAN_CLAIM_INSIDER)
    can_claim_common: bool = Field(default_factory=lambda: settings.CAN_CLAIM_COMMON)
    # secondes, simple indication transmise au front
    guess_time_limit: int = Field(default_factory=lambda: settings.GUESS_TIME_LIMIT, ge=1)


class GameSummary(BaseModel):
    """Bilan de fin de manche (statuts SUMMARY et LOST uniquement)."""
    secret_word: str
    insider_name: Optional[str] = None
    votes: Dict[str, int] = Field(default_factory=dict)  # nom accusé (ou "no vote") -> nb de votants actifs


class GameStateSnapshot(BaseModel):
    player_id: str
    code: str
    status: GameStatus
    players: List[PlayerView] = Field(default_factory=list)
    settings: GameSettings
    last_activity: datetime
    play_start_time: Optional[datetime] = None
    actions: List[GameAction] = Field(default_factory=list)  # actions légales dans le statut courant
    your_role: Optional[PlayerRole] = None
    secret_word: Optional[str] = None  # visible seulement pour LEADER / INSIDER
    summary: Optional[GameSummary] = None
