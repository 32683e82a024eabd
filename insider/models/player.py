"""
Models / player.py
Rôle:
- Vue publique d'un joueur telle que renvoyée dans un snapshot.

Champs:
- id: identifiant fourni par le client (stable d'une requête à l'autre).
- name: nom d'affichage.
- active: True une fois le joueur "prêt" pour la manche courante.
- accused_name: nom (et non l'id) du joueur qu'il accuse, ou None.
"""
from typing import Optional

from pydantic import BaseModel


class PlayerView(BaseModel):
    """Profil joueur visible par tous les membres de la partie."""
    id: str
    name: str
    active: bool = False
    accused_name: Optional[str] = None
