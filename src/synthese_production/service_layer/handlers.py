"""
Handlers du côté écriture.

Le seul état modifiable par ce service est la priorité des commandes :
c'est elle qui ordonne l'allocation du stock au calcul suivant. Les
command handlers peuvent échouer (commande inconnue) ; le handler
d'event ne fait que publier le changement.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from synthese_production.domain import commands, events

if TYPE_CHECKING:
    from synthese_production.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


# --- Exceptions ---


class CommandeIntrouvable(Exception):
    """Levée quand un identifiant de commande n'existe pas dans le système."""
    pass


# --- Command Handlers ---


def modifier_priorité(
    cmd: commands.ModifierPrioritéCommande,
    uow: AbstractUnitOfWork,
) -> None:
    """Change la priorité d'une seule commande."""
    with uow:
        commande = uow.commandes.get(cmd.id_commande)
        if commande is None:
            raise CommandeIntrouvable(f"Commande inconnue : {cmd.id_commande}")
        commande.modifier_priorité(cmd.priorité)
        uow.commit()


def réordonner(
    cmd: commands.RéordonnerCommandes,
    uow: AbstractUnitOfWork,
) -> None:
    """
    Renumérote les priorités dans l'ordre donné (1, 2, 3...).

    Tout ou rien : si une commande est inconnue, aucune priorité
    n'est modifiée.
    """
    with uow:
        commandes = []
        for id_commande in cmd.ids_commandes:
            commande = uow.commandes.get(id_commande)
            if commande is None:
                raise CommandeIntrouvable(f"Commande inconnue : {id_commande}")
            commandes.append(commande)
        for rang, commande in enumerate(commandes, start=1):
            commande.modifier_priorité(rang)
        uow.commit()


# --- Event Handlers ---


def publier_changement_priorité(
    event: events.PrioritéModifiée,
    uow: AbstractUnitOfWork,
) -> None:
    """
    Publie le changement de priorité vers l'extérieur.

    Ici on se contente de le journaliser : la synthèse étant recalculée
    à chaque lecture, aucune vue n'est à invalider.
    """
    logger.info(
        "Priorité modifiée : commande %s, %s -> %s",
        event.id_commande, event.ancienne_priorité, event.nouvelle_priorité,
    )
