"""
Calcul de la synthèse de production.

Enchaîne les étapes du côté lecture : chargement de l'instantané,
agrégation des commandes actives, allocation, classement. Le calcul
est fait en entier à chaque appel, sur une seule transaction : il
n'y a ni cache ni état partagé entre deux requêtes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from synthese_production.domain import agregation, allocation, classement, model
from synthese_production.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


class LectureInstantanéImpossible(Exception):
    """
    Levée quand le stock, la production en cours ou les commandes ne
    peuvent pas être lus. Le calcul entier est abandonné : une allocation
    sur un instantané partiel tromperait la planification.
    """
    pass


@dataclass(frozen=True)
class RésultatSynthèse:
    """Toutes les commandes actives allouées, et l'instantané utilisé."""

    commandes: tuple[model.SynthèseCommande, ...]
    instantané: model.Instantané

    def commande(self, id_commande: int) -> model.SynthèseCommande | None:
        return next((s for s in self.commandes if s.commande.id == id_commande), None)

    @property
    def lignes(self) -> list[model.LigneAllocation]:
        return [ligne for s in self.commandes for ligne in s.lignes]


def _lire_instantané(
    uow: AbstractUnitOfWork, statuts_exclus: Iterable[str]
) -> tuple[list[model.Commande], model.Instantané]:
    try:
        commandes = uow.commandes.actives(statuts_exclus)
        ids_articles = {ligne.article_id for c in commandes for ligne in c.lignes}
        instantané = model.Instantané(
            articles=uow.stocks.articles(ids_articles),
            en_production=uow.fabrications.quantités_en_cours(ids_articles),
        )
    except SQLAlchemyError as e:
        logger.exception("Lecture de l'instantané impossible")
        raise LectureInstantanéImpossible(str(e)) from e
    return commandes, instantané


def calculer_synthèse(
    uow: AbstractUnitOfWork, statuts_exclus: Iterable[str] = ()
) -> RésultatSynthèse:
    """
    Calcule l'allocation de toutes les commandes actives.

    À appeler dans un bloc `with uow` : les entités lues restent
    attachées à la session jusqu'à la fin du formatage.

    Lève QuantitéIncohérente si une ligne porte une quantité invalide,
    LectureInstantanéImpossible si une lecture échoue.
    """
    commandes, instantané = _lire_instantané(uow, statuts_exclus)

    triées = agregation.trier_par_priorité(commandes)
    demande = agregation.lignes_de_demande(triées)
    lignes = allocation.allouer(demande, instantané.stock_de, instantané.en_production_de)
    groupes = classement.grouper_par_commande(lignes)

    synthèses = tuple(
        model.SynthèseCommande(
            commande=commande,
            lignes=tuple(groupes.get(commande.id, [])),
            état=classement.état_commande(groupes.get(commande.id, [])),
        )
        for commande in triées
    )
    logger.info(
        "Synthèse de production calculée : %d commandes, %d lignes",
        len(synthèses), len(lignes),
    )
    return RésultatSynthèse(commandes=synthèses, instantané=instantané)
