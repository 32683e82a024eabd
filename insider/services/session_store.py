"""
Session store registry
======================

Registre en mémoire des parties en cours, avec deux index :
- `code -> Game` (join par code partagé),
- `player_id -> Game` (partie active d'un joueur).

Le registre est un objet (pas un global de module) : l'application en crée un au démarrage
et le passe au `GameService` ; les tests en instancient un neuf par cas.

Cohérence
---------
- Les deux index sont modifiés ensemble sous `self.lock` (RLock).
- Ordre des verrous : registre puis partie (`game.lock`), jamais l'inverse.
- Une partie sans joueur est retirée de l'index par code au moment même où le
  dernier joueur part (pas de nettoyage en tâche de fond).
"""
from __future__ import annotations

import logging
import random
from threading import RLock
from typing import Dict, Optional

from insider.models.game import GameSettings
from .game_code import generate_game_code
from .game_state import Game, utc_now

logger = logging.getLogger(__name__)


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class SessionRegistry:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.lock = RLock()
        self.rng = rng or random.Random()
        self._games: Dict[str, Game] = {}
        self._player_games: Dict[str, Game] = {}

    # -----------------------------
    # Parties
    # -----------------------------
    def _new_code(self) -> str:
        """Tire des codes jusqu'à en trouver un absent de l'index."""
        while True:
            code = generate_game_code(self.rng)
            if code not in self._games:
                return code

    def create_session(self, settings: Optional[GameSettings] = None, clock=utc_now) -> Game:
        with self.lock:
            game = Game(code=self._new_code(), settings=settings or GameSettings(), last_activity=clock())
            self._games[game.code] = game
            logger.info("Game created - code=%s", game.code)
            return game

    def find_by_code(self, code: Optional[str]) -> Optional[Game]:
        normalized = normalize_code(code)
        if not normalized:
            return None
        with self.lock:
            return self._games.get(normalized)

    def find_by_player(self, player_id: str) -> Optional[Game]:
        with self.lock:
            return self._player_games.get(player_id)

    def remove_if_empty(self, game: Game) -> bool:
        with self.lock, game.lock:
            if game.players:
                return False
            if self._games.get(game.code) is game:
                del self._games[game.code]
                logger.info("Game removed (no players left) - code=%s", game.code)
            return True

    def count(self) -> int:
        with self.lock:
            return len(self._games)

    # -----------------------------
    # Joueurs
    # -----------------------------
    def bind(self, player_id: str, game: Game) -> None:
        with self.lock:
            self._player_games[player_id] = game

    def unbind(self, player_id: str, game: Optional[Game] = None) -> bool:
        """
        Retire le lien joueur -> partie.
        Si `game` est fourni, ne retire le lien que s'il pointe toujours vers cette partie
        (le joueur a pu rejoindre une autre partie entre-temps).
        """
        with self.lock:
            current = self._player_games.get(player_id)
            if current is None or (game is not None and current is not game):
                return False
            del self._player_games[player_id]
            return True

    def detach(self, player_id: str) -> Optional[Game]:
        """
        Sort le joueur de sa partie courante (lien + liste des joueurs) en une seule étape,
        puis détruit la partie si elle est vide. Retourne la partie quittée (ou None).
        """
        with self.lock:
            game = self._player_games.pop(player_id, None)
            if game is None:
                return None
            with game.lock:
                game.players.pop(player_id, None)
                self.remove_if_empty(game)
            return game
