"""
Service: game_state.py
Rôle :
- Enregistrements runtime d'une partie (en mémoire uniquement, aucune persistance disque).
- `Game` : code, joueurs, statut, mot secret, réglages, horodatages + verrou par partie.
- `Player` : identité, drapeau "prêt", rôle revendiqué/attribué, accusation.

Notes :
- L'accusation est stockée par *id* (`accused_id`) et résolue au moment du snapshot :
  si l'accusé a quitté la partie, la référence est simplement ignorée.
- Toute mutation d'une partie se fait sous `game.lock` (RLock, réentrant).
- Les horodatages sont en UTC ; l'horloge est injectée par le service.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock
from typing import Callable, Dict, Optional

from insider.models.game import GameSettings, GameStatus, PlayerRole

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Player:
    id: str
    name: str
    is_active: bool = False
    role: Optional[PlayerRole] = None
    accused_id: Optional[str] = None

    def clear_round(self) -> None:
        """Remet le joueur à zéro pour une nouvelle manche."""
        self.role = None
        self.is_active = False
        self.accused_id = None


@dataclass
class Game:
    code: str
    lock: RLock = field(default_factory=RLock, init=False, repr=False, compare=False)
    players: Dict[str, Player] = field(default_factory=dict)
    status: GameStatus = GameStatus.WAITING
    secret_word: Optional[str] = None
    settings: GameSettings = field(default_factory=GameSettings)
    last_activity: datetime = field(default_factory=utc_now)
    play_start_time: Optional[datetime] = None

    def touch(self, clock: Clock = utc_now) -> None:
        self.last_activity = clock()

    def holder_of(self, role: PlayerRole) -> Optional[Player]:
        """Premier joueur détenant `role` (None si personne)."""
        for player in self.players.values():
            if player.role == role:
                return player
        return None

    def active_players(self) -> list[Player]:
        return [p for p in self.players.values() if p.is_active]


def no_game(player_id: str, clock: Clock = utc_now) -> tuple[Game, Player]:
    """Partie fantôme (NO_GAME, code vide) pour un joueur rattaché à rien."""
    game = Game(code="", status=GameStatus.NO_GAME, last_activity=clock())
    return game, Player(id=player_id, name="")
