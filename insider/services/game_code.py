"""
Service: game_code.py
Rôle:
- Générer un code de partie court, facile à dicter (ex: "K7QZM").

Notes:
- Tirage uniforme sur l'alphabet configuré (`settings.GAME_CODE_CHARS`).
- Le générateur ne connaît pas les parties existantes : l'unicité est vérifiée par le registre.
- `rng` permet un tirage reproductible (tests / démo), comme `random_teams(seed=...)`.
"""
import random
from typing import Optional

from insider.config.settings import settings


def generate_game_code(
    rng: Optional[random.Random] = None,
    length: Optional[int] = None,
    chars: Optional[str] = None,
) -> str:
    rng = rng or random
    length = length or settings.GAME_CODE_LENGTH
    alphabet = chars or settings.GAME_CODE_CHARS
    return "".join(rng.choice(alphabet) for _ in range(length))
