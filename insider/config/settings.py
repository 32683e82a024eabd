"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres du backend Insider (nom, host/port, logs, CORS, règles par défaut).
- Les valeurs par défaut conviennent pour un environnement de dev local.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from insider.config.settings import settings`.

Notes
-----
- `GUESS_TIME_LIMIT` est exprimé en secondes et n'est qu'une indication pour le front :
  le moteur ne déclenche jamais de timeout lui-même (le leader envoie `timeUp`).
- `RNG_SEED` rend les tirages (codes, rôles, mots) reproductibles, pratique pour une démo.

Exemples de `.env`
------------------
APP_NAME="Insider Backend (Staging)"
PORT=8080
LOG_LEVEL="DEBUG"
CAN_CLAIM_INSIDER=true
GUESS_TIME_LIMIT=240
"""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "Insider Backend"
    # Bind réseau (FastAPI / Uvicorn)
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Frontends autorisés (CORS)
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Codes de partie : 5 caractères, sans 0/O/1/I/L (lecture à voix haute)
    GAME_CODE_LENGTH: int = 5
    GAME_CODE_CHARS: str = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"

    # Graine RNG optionnelle (None = tirages non reproductibles)
    RNG_SEED: Optional[int] = None

    # Réglages par défaut d'une nouvelle partie
    CAN_CLAIM_LEADER: bool = True
    CAN_CLAIM_INSIDER: bool = False
    CAN_CLAIM_COMMON: bool = False
    GUESS_TIME_LIMIT: int = 300

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Instance unique importable partout : `settings`
settings = Settings()
