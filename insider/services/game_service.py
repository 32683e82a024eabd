"""
Service: game_service.py
Rôle:
- Machine à états d'une partie d'Insider : valide une action (statut, rôle, identité),
  mute la partie puis renvoie le snapshot du joueur qui agit.

Cycle d'une manche:
    WAITING --assignRoles--> PRE_GAME --start--> PLAYING --guessed--> FIND_INSIDER --complete--> SUMMARY
                                                         \\--timeUp--> LOST
    `reset` ramène à WAITING depuis n'importe quel statut de partie.

Concurrence:
- Une action = une unité atomique : tout se passe sous `game.lock`.
- Les opérations qui touchent l'appartenance (create/join/leave) prennent d'abord le verrou
  du registre, puis celui de la partie.
- Un refus (`InvalidInput` / `InvalidState`) laisse la partie strictement inchangée.

API exposée aux routes:
- get_state, create, join, leave
- set_ready, set_not_ready, reset, assign_roles, exchange_word
- start, word_guessed, time_up, vote_player, complete_voting, end
"""
from __future__ import annotations

import logging
import random
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

from insider.models.game import GameAction, GameSettings, GameStateSnapshot, GameStatus, PlayerRole
from .actions import is_legal
from .errors import InvalidInput, InvalidState
from .game_state import Clock, Game, Player, no_game, utc_now
from .projector import project
from .session_store import SessionRegistry
from .words import pick_random_word

logger = logging.getLogger(__name__)

NO_GAME_FOR_PLAYER = "No game found for player."

# rôles à pourvoir à chaque manche, dans l'ordre du tirage
ROLES_TO_FILL: Dict[PlayerRole, int] = {
    PlayerRole.LEADER: 1,
    PlayerRole.INSIDER: 1,
    PlayerRole.COMMON: 1,
}


def _clean_name(player_name: Optional[str]) -> str:
    name = (player_name or "").strip()
    if not name:
        raise InvalidInput("Player name cannot be blank.")
    return name


class GameService:
    def __init__(
        self,
        registry: Optional[SessionRegistry] = None,
        rng: Optional[random.Random] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.rng = rng or random.Random()
        self.registry = registry or SessionRegistry(rng=self.rng)
        self.clock = clock

    # ------------------------------------------------------------------
    # Helpers internes
    # ------------------------------------------------------------------
    @contextmanager
    def _acting(self, player_id: str) -> Iterator[Tuple[Game, Player]]:
        """
        Résout (partie, joueur) pour l'acteur et garde `game.lock` pendant l'action.
        Un lien registre orphelin (joueur absent de la partie) est supprimé avant le refus.
        """
        while True:
            game = self.registry.find_by_player(player_id)
            if game is None:
                raise InvalidInput(NO_GAME_FOR_PLAYER)
            with game.lock:
                player = game.players.get(player_id)
                if player is not None:
                    yield game, player
                    return
            if self.registry.unbind(player_id, game):
                logger.warning("Removed stale player binding - player_id=%s, code=%s", player_id, game.code)
                raise InvalidInput(NO_GAME_FOR_PLAYER)
            # le joueur a changé de partie entre-temps : nouvelle résolution

    @staticmethod
    def _require(game: Game, action: GameAction, message: str) -> None:
        if not is_legal(game.status, action):
            raise InvalidState(message)

    @staticmethod
    def _require_leader(player: Player, message: str) -> None:
        if player.role != PlayerRole.LEADER:
            raise InvalidInput(message)

    def _transition(self, game: Game, status: GameStatus) -> None:
        logger.info("Game status change - code=%s, %s -> %s", game.code, game.status.value, status.value)
        game.status = status
        game.touch(self.clock)

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------
    def get_state(self, player_id: str) -> GameStateSnapshot:
        game = self.registry.find_by_player(player_id)
        if game is None:
            return project(*no_game(player_id, self.clock))
        with game.lock:
            player = game.players.get(player_id) or Player(id=player_id, name="")
            return project(game, player)

    # ------------------------------------------------------------------
    # Appartenance
    # ------------------------------------------------------------------
    def create(
        self,
        player_id: str,
        player_name: Optional[str],
        settings: Optional[GameSettings] = None,
    ) -> GameStateSnapshot:
        name = _clean_name(player_name)
        with self.registry.lock:
            self.registry.detach(player_id)
            game = self.registry.create_session(
                settings.model_copy() if settings else None,
                clock=self.clock,
            )
            with game.lock:
                player = Player(id=player_id, name=name)
                game.players[player_id] = player
                self.registry.bind(player_id, game)
                return project(game, player)

    def join(self, player_id: str, player_name: Optional[str], game_code: Optional[str]) -> GameStateSnapshot:
        name = _clean_name(player_name)
        with self.registry.lock:
            game = self.registry.find_by_code(game_code)
            if game is None:
                raise InvalidInput(f"No game found with code {game_code}.")
            with game.lock:
                existing = game.players.get(player_id)
                if existing is not None and self.registry.find_by_player(player_id) is game:
                    return project(game, existing)

            self.registry.detach(player_id)
            if self.registry.find_by_code(game.code) is not game:
                raise InvalidInput(f"No game found with code {game_code}.")

            with game.lock:
                player = Player(id=player_id, name=name)
                game.players[player_id] = player
                game.touch(self.clock)
                self.registry.bind(player_id, game)
                logger.info("Player joined - player_id=%s, code=%s", player_id, game.code)
                return project(game, player)

    def leave(self, player_id: str) -> GameStateSnapshot:
        game = self.registry.detach(player_id)
        if game is not None:
            logger.info("Player left - player_id=%s, code=%s", player_id, game.code)
        return self.get_state(player_id)

    # ------------------------------------------------------------------
    # Salle d'attente
    # ------------------------------------------------------------------
    def set_ready(self, player_id: str, claimed_role: Optional[PlayerRole] = None) -> GameStateSnapshot:
        with self._acting(player_id) as (game, player):
            if game.status != GameStatus.WAITING:
                raise InvalidState("The game is not waiting for players to ready-up.")
            others = [p for p in game.players.values() if p is not player]
            if claimed_role == PlayerRole.LEADER:
                if not game.settings.can_claim_leader:
                    raise InvalidInput("Not allowed to claim Leader role.")
                if any(p.role == PlayerRole.LEADER for p in others):
                    raise InvalidState("There is already a Leader.")
            elif claimed_role == PlayerRole.INSIDER:
                if not game.settings.can_claim_insider:
                    raise InvalidInput("Not allowed to claim Insider role.")
                if any(p.role == PlayerRole.INSIDER for p in others):
                    raise InvalidState("There is already an Insider.")
            elif claimed_role == PlayerRole.COMMON:
                if not game.settings.can_claim_common:
                    raise InvalidInput("Not allowed to claim Common role.")

            player.role = claimed_role
            player.is_active = True
            game.touch(self.clock)
            return project(game, player)

    def set_not_ready(self, player_id: str) -> GameStateSnapshot:
        with self._acting(player_id) as (game, player):
            player.role = None
            player.is_active = False
            game.touch(self.clock)
            return project(game, player)

    def reset(self, player_id: str) -> GameStateSnapshot:
        with self._acting(player_id) as (game, player):
            self._require(game, GameAction.RESET, "Game cannot be reset in current status.")
            for member in game.players.values():
                member.clear_round()
            game.secret_word = None
            self._transition(game, GameStatus.WAITING)
            return project(game, player)

    def assign_roles(self, player_id: str) -> GameStateSnapshot:
        """
        Complète les rôles manquants parmi les joueurs actifs sans rôle.
        Le plan complet est calculé (et validé) avant toute écriture.
        """
        with self._acting(player_id) as (game, player):
            self._require(game, GameAction.ASSIGN_ROLES, "Roles cannot be assigned in current status.")

            needed = dict(ROLES_TO_FILL)
            pool = []
            for member in game.active_players():
                if member.role is None:
                    pool.append(member)
                else:
                    needed[member.role] -= 1  # peut devenir négatif : rien à pourvoir

            plan: Dict[str, PlayerRole] = {}
            for role, count in needed.items():
                for _ in range(count):
                    if not pool:
                        raise InvalidState("Not enough players to assign roles.")
                    chosen = pool.pop(self.rng.randrange(len(pool)))
                    plan[chosen.id] = role
            for member in pool:
                plan[member.id] = PlayerRole.COMMON

            for member_id, role in plan.items():
                game.players[member_id].role = role
            game.secret_word = pick_random_word(self.rng)
            self._transition(game, GameStatus.PRE_GAME)
            return project(game, player)

    # ------------------------------------------------------------------
    # Manche
    # ------------------------------------------------------------------
    def exchange_word(self, player_id: str) -> GameStateSnapshot:
        with self._acting(player_id) as (game, player):
            self._require_leader(player, "Word can only be exchanged by the leader.")
            self._require(game, GameAction.EXCHANGE_WORD, "Word cannot be exchanged in current status.")
            game.secret_word = pick_random_word(self.rng)
            game.touch(self.clock)
            return project(game, player)

    def start(self, player_id: str) -> GameStateSnapshot:
        with self._acting(player_id) as (game, player):
            self._require(game, GameAction.START, "Game cannot be started in current status.")
            self._transition(game, GameStatus.PLAYING)
            game.play_start_time = game.last_activity
            return project(game, player)

    def word_guessed(self, player_id: str) -> GameStateSnapshot:
        with self._acting(player_id) as (game, player):
            self._require_leader(player, "Only the leader can mark the word as guessed.")
            self._require(game, GameAction.GUESSED, "Word cannot be guessed in current status.")
            self._transition(game, GameStatus.FIND_INSIDER)
            return project(game, player)

    def time_up(self, player_id: str) -> GameStateSnapshot:
        with self._acting(player_id) as (game, player):
            self._require_leader(player, "Only the leader can claim time is up.")
            self._require(game, GameAction.TIME_UP, "Time cannot be up in current status.")
            self._transition(game, GameStatus.LOST)
            return project(game, player)

    def vote_player(self, player_id: str, accused_player_id: str) -> GameStateSnapshot:
        with self._acting(player_id) as (game, player):
            self._require(game, GameAction.VOTE_PLAYER, "Accusations cannot be cast in current status.")
            if accused_player_id not in game.players:
                raise InvalidInput("The accused player does not exist.")
            player.accused_id = accused_player_id
            game.touch(self.clock)
            return project(game, player)

    def complete_voting(self, player_id: str) -> GameStateSnapshot:
        with self._acting(player_id) as (game, player):
            # même fenêtre que le vote
            self._require(game, GameAction.VOTE_PLAYER, "Voting cannot be completed in current status.")
            self._transition(game, GameStatus.SUMMARY)
            return project(game, player)

    def end(self, player_id: str) -> GameStateSnapshot:
        # TODO: retirer tous les joueurs et détruire la partie une fois le flux "fin de soirée" validé côté front
        raise InvalidState("Ending a game is not implemented yet.")
