"""
Service: projector.py
Rôle:
- Construire la vue d'une partie *pour un joueur donné* (`GameStateSnapshot`).

Règles de visibilité:
- `secret_word` n'est transmis qu'au LEADER et à l'INSIDER, jamais aux COMMON.
- `your_role` : toujours le rôle du demandeur (et seulement le sien).
- Les joueurs exposent le *nom* de la personne qu'ils accusent, pas son id.
- `summary` n'existe qu'en SUMMARY / LOST.

Décompte des votes:
- Seuls les joueurs actifs votent ; un actif sans accusation compte pour "no vote".
- Une accusation vers un joueur qui a quitté la partie compte aussi comme "no vote".
"""
from collections import Counter
from typing import Dict, Optional

from insider.models.game import GameStateSnapshot, GameStatus, GameSummary, PlayerRole
from insider.models.player import PlayerView
from .actions import legal_actions
from .game_state import Game, Player

NO_VOTE = "no vote"
NO_WORD = "NO WORD"
SUMMARY_STATUSES = (GameStatus.SUMMARY, GameStatus.LOST)
WORD_ROLES = (PlayerRole.LEADER, PlayerRole.INSIDER)


def _accused_name(game: Game, player: Player) -> Optional[str]:
    if not player.accused_id:
        return None
    accused = game.players.get(player.accused_id)
    return accused.name if accused else None


def vote_tally(game: Game) -> Dict[str, int]:
    votes = Counter(_accused_name(game, p) or NO_VOTE for p in game.active_players())
    return dict(votes)


def build_summary(game: Game) -> Optional[GameSummary]:
    if game.status not in SUMMARY_STATUSES:
        return None
    insider = game.holder_of(PlayerRole.INSIDER)
    return GameSummary(
        secret_word=game.secret_word or NO_WORD,
        insider_name=insider.name if insider else None,
        votes=vote_tally(game),
    )


def project(game: Game, player: Player) -> GameStateSnapshot:
    """Snapshot filtré pour `player` (à appeler sous `game.lock`)."""
    players = [
        PlayerView(id=p.id, name=p.name, active=p.is_active, accused_name=_accused_name(game, p))
        for p in game.players.values()
    ]
    return GameStateSnapshot(
        player_id=player.id,
        code=game.code,
        status=game.status,
        players=players,
        settings=game.settings.model_copy(),
        last_activity=game.last_activity,
        play_start_time=game.play_start_time,
        actions=legal_actions(game.status),
        your_role=player.role,
        secret_word=game.secret_word if player.role in WORD_ROLES else None,
        summary=build_summary(game),
    )
