"""
Views (lecture) pour le pattern CQRS.

Les views sont des fonctions de lecture pure : elles ne passent pas
par le message bus et ne modifient rien. Chaque appel recalcule la
synthèse de production sur un instantané lu dans une seule transaction,
puis filtre et met en forme le résultat pour l'API.

Les clés des dictionnaires retournés suivent le contrat de l'API HTTP
(camelCase, en anglais) ; les quantités restent des Decimal à l'échelle 3.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from synthese_production.domain import classement, filtres as filtres_module, model
from synthese_production.domain.filtres import FiltresSynthèse
from synthese_production.service_layer import handlers, synthese, unit_of_work

PAR_ARTICLE = "article"
PAR_COMMANDE = "order"


def synthèse_production(
    filtres: FiltresSynthèse,
    uow: unit_of_work.AbstractUnitOfWork,
    statuts_exclus: Iterable[str] = (),
    grouper_par: str = PAR_ARTICLE,
    aujourdhui: Optional[date] = None,
) -> list[dict]:
    """
    Synthèse de production filtrée.

    L'allocation porte sur toutes les commandes actives ; les filtres
    ne choisissent que les commandes restituées. Par article, les lignes
    retenues sont cumulées ; par commande, chaque ligne est restituée
    avec l'état de sa commande.
    """
    if grouper_par not in (PAR_ARTICLE, PAR_COMMANDE):
        raise model.FiltreInvalide(f"Regroupement inconnu : {grouper_par!r}")

    with uow:
        résultat = synthese.calculer_synthèse(uow, statuts_exclus)
        retenues = filtres_module.filtrer(résultat.commandes, filtres, aujourdhui)
        lignes_retenues = [(s.état, ligne) for s in retenues for ligne in s.lignes]

    if grouper_par == PAR_ARTICLE:
        totaux = filtres_module.agréger_par_article(
            ligne for _, ligne in lignes_retenues
        )
        return [
            {
                "articleId": t.article_id,
                "ordered": t.commandé,
                "toPick": t.à_prélever,
                "toProduce": t.à_produire,
            }
            for t in totaux
        ]

    return [
        {
            "orderId": ligne.id_commande,
            "articleId": ligne.article_id,
            "ordered": ligne.commandé,
            "toPick": ligne.à_prélever,
            "inProgress": ligne.en_fabrication,
            "toProduce": ligne.à_produire,
            "status": état.value,
        }
        for état, ligne in lignes_retenues
    ]


def _progression(lignes: Iterable[model.LigneAllocation]) -> int:
    """Part (en %) de la quantité commandée servie depuis le stock."""
    lignes = list(lignes)
    total = sum((l.commandé for l in lignes), model.ZÉRO)
    if total == 0:
        return 0
    servi = sum((l.à_prélever for l in lignes), model.ZÉRO)
    return int((servi * 100 / total).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def détail_production(
    id_commande: int,
    uow: unit_of_work.AbstractUnitOfWork,
    statuts_exclus: Iterable[str] = (),
) -> dict:
    """
    Détail de production d'une commande, ligne par ligne.

    stockAvailable est le stock encore libre quand la ligne est servie
    (après les commandes plus prioritaires), stockRemaining ce qu'il en
    reste après elle.

    Lève handlers.CommandeIntrouvable si la commande n'est pas active.
    """
    with uow:
        résultat = synthese.calculer_synthèse(uow, statuts_exclus)
        synthèse = résultat.commande(id_commande)
        if synthèse is None:
            raise handlers.CommandeIntrouvable(f"Commande inconnue : {id_commande}")
        articles = résultat.instantané.articles
        items = [
            {
                "articleId": ligne.article_id,
                "articleName": articles[ligne.article_id].nom if ligne.article_id in articles else None,
                "quantity": ligne.commandé,
                "stockAvailable": ligne.stock_avant,
                "quantityAdjusted": ligne.à_prélever,
                "stockRemaining": ligne.stock_après,
                "inProduction": ligne.à_produire,
                "status": classement.statut_ligne(ligne).value,
            }
            for ligne in synthèse.lignes
        ]

    return {
        "orderId": id_commande,
        "status": synthèse.état.value,
        "progress": _progression(synthèse.lignes),
        "items": items,
    }


def états_production(
    uow: unit_of_work.AbstractUnitOfWork,
    statuts_exclus: Iterable[str] = (),
) -> list[dict]:
    """État de préparation de chaque commande active, dans l'ordre de priorité."""
    with uow:
        résultat = synthese.calculer_synthèse(uow, statuts_exclus)
        return [
            {"orderId": s.commande.id, "status": s.état.value}
            for s in résultat.commandes
        ]
