"""
Service: actions.py
Rôle:
- Table statique statut -> actions légales, consultée par le front (boutons à afficher)
  ET revérifiée côté serveur avant chaque mutation.

Chaque statut possède une entrée, même vide (NO_GAME).
"""
from typing import Dict, List

from insider.models.game import GameAction, GameStatus

ACTION_LOOKUP: Dict[GameStatus, List[GameAction]] = {
    GameStatus.NO_GAME: [],
    GameStatus.WAITING: [GameAction.READY, GameAction.RESET, GameAction.ASSIGN_ROLES, GameAction.END],
    GameStatus.PRE_GAME: [GameAction.RESET, GameAction.EXCHANGE_WORD, GameAction.START, GameAction.END],
    GameStatus.PLAYING: [GameAction.RESET, GameAction.GUESSED, GameAction.TIME_UP, GameAction.END],
    GameStatus.FIND_INSIDER: [
        GameAction.RESET,
        GameAction.VOTE_PLAYER,
        GameAction.COMPLETE_VOTING,
        GameAction.END,
    ],
    GameStatus.SUMMARY: [GameAction.RESET, GameAction.END],
    GameStatus.LOST: [GameAction.RESET, GameAction.END],
}


def legal_actions(status: GameStatus) -> List[GameAction]:
    """Copie de la liste des actions légales (l'appelant peut la modifier sans risque)."""
    return list(ACTION_LOOKUP.get(status, []))


def is_legal(status: GameStatus, action: GameAction) -> bool:
    return action in ACTION_LOOKUP.get(status, [])
