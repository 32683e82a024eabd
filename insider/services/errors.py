"""
Erreurs métier du moteur de partie.

- `InvalidInput` : argument manquant ou invalide (nom vide, code inconnu, rôle interdit...).
- `InvalidState` : action impossible dans l'état courant (statut, rôle déjà pris, pas assez de joueurs).

Les deux sont des conditions normales, corrigeables par le client : les routes les traduisent
en 400 / 409 avec le message tel quel.
"""


class GameError(Exception):
    """Base des refus du moteur de partie (message lisible par un humain)."""


class InvalidInput(GameError, ValueError):
    pass


class InvalidState(GameError, RuntimeError):
    pass
