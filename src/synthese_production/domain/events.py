"""
Events du domaine.

Les events représentent des faits qui se sont produits dans le système.
Ils sont immuables et nommés au passé (quelque chose s'est passé).
"""

from dataclasses import dataclass
from typing import Optional


class Event:
    """Classe de base pour tous les events du domaine."""
    pass


@dataclass(frozen=True)
class PrioritéModifiée(Event):
    """La priorité de service d'une commande a changé."""

    id_commande: int
    ancienne_priorité: Optional[int]
    nouvelle_priorité: int
