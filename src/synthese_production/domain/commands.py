"""
Commands du domaine.

Les commands représentent des intentions : quelque chose que
le système doit faire. Contrairement aux events (faits passés),
les commands sont des demandes qui peuvent échouer.

Le moteur de synthèse est en lecture seule ; les seules écritures
portent sur la priorité des commandes (glisser-déposer).
"""

from dataclasses import dataclass


class Command:
    """Classe de base pour toutes les commands."""
    pass


@dataclass(frozen=True)
class ModifierPrioritéCommande(Command):
    """Demande de changement de la priorité d'une commande."""

    id_commande: int
    priorité: int


@dataclass(frozen=True)
class RéordonnerCommandes(Command):
    """
    Demande de renumérotation des priorités selon un ordre complet :
    la première commande de la liste reçoit la priorité 1, etc.
    """

    ids_commandes: tuple[int, ...]
