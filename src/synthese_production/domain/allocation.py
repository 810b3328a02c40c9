"""
Moteur d'allocation du stock entre commandes concurrentes.

Le moteur répartit un stock fini entre des lignes de demande déjà
triées par priorité, puis impute la production en cours sur les
manques restants. Il ne lit rien lui-même : le stock et la production
engagée lui sont fournis sous forme de fonctions de lecture, issues
d'un seul instantané.

Déroulé :
1. Le stock restant de chaque article est initialisé depuis l'instantané
2. Chaque ligne prélève min(commandé, stock restant), dans l'ordre
3. La production en cours couvre les manques, premières lignes d'abord
4. Ce qui n'est pas couvert reste à produire : par article, le total
   vaut max(0, manque total - production en cours)

Aucune mutation des articles ni des opérations d'inventaire :
les compteurs sont locaux à l'appel.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from decimal import Decimal

from synthese_production.domain.agregation import articles_référencés
from synthese_production.domain.model import (
    ZÉRO,
    LigneAllocation,
    LigneDeDemande,
    RéférenceArticleInconnue,
    niveau,
)

logger = logging.getLogger(__name__)

LectureQuantité = Callable[[int], Decimal]


def _lire(lecture: LectureQuantité, article_id: int, nature: str) -> Decimal:
    """
    Lit un niveau pour un article ; un article inconnu ou un niveau
    négatif vaut zéro.

    Toute autre erreur de lecture remonte : une allocation sur un
    instantané incomplet serait fausse.
    """
    try:
        return niveau(lecture(article_id))
    except RéférenceArticleInconnue:
        logger.warning("Article %s inconnu : %s considéré comme nul", article_id, nature)
        return ZÉRO


def _prélever(
    demande: Sequence[LigneDeDemande], stock_restant: dict[int, Decimal]
) -> list[tuple[Decimal, Decimal]]:
    """Passe 1 : (stock avant, quantité prélevée) pour chaque ligne."""
    prélèvements = []
    for ligne in demande:
        disponible = stock_restant[ligne.article_id]
        prélevé = min(ligne.quantité, disponible)
        stock_restant[ligne.article_id] = disponible - prélevé
        prélèvements.append((disponible, prélevé))
    return prélèvements


def _imputer_production(
    demande: Sequence[LigneDeDemande],
    manques: Sequence[Decimal],
    en_production: dict[int, Decimal],
) -> list[Decimal]:
    """
    Passe 2 : part de chaque manque couverte par la production en cours.

    Même ordre, même méthode gloutonne que le prélèvement : la production
    engagée couvre d'abord les commandes les plus prioritaires, et le
    reste à produire d'un article vaut max(0, manque total - en cours).
    """
    production_restante = dict(en_production)
    couvertures = []
    for ligne, manque in zip(demande, manques):
        restante = production_restante[ligne.article_id]
        couvert = min(manque, restante)
        production_restante[ligne.article_id] = restante - couvert
        couvertures.append(couvert)
    return couvertures


def allouer(
    demande: Sequence[LigneDeDemande],
    stock_de: LectureQuantité,
    en_production_de: LectureQuantité,
) -> list[LigneAllocation]:
    """
    Alloue le stock aux lignes de demande, dans l'ordre fourni.

    Retourne une LigneAllocation par ligne de demande, dans le même ordre.
    Le résultat ne dépend que de la demande et des deux lectures :
    deux appels sur le même instantané donnent les mêmes lignes.
    """
    articles = articles_référencés(demande)
    stock_restant = {a: _lire(stock_de, a, "stock") for a in articles}
    en_production = {a: _lire(en_production_de, a, "production en cours") for a in articles}

    prélèvements = _prélever(demande, stock_restant)
    manques = [ligne.quantité - prélevé for ligne, (_, prélevé) in zip(demande, prélèvements)]
    couvertures = _imputer_production(demande, manques, en_production)

    résultat = [
        LigneAllocation(
            id_commande=ligne.id_commande,
            article_id=ligne.article_id,
            commandé=ligne.quantité,
            à_prélever=prélevé,
            à_produire=manque - couvert,
            en_fabrication=couvert,
            stock_avant=stock_avant,
        )
        for ligne, (stock_avant, prélevé), manque, couvert in zip(
            demande, prélèvements, manques, couvertures
        )
    ]
    logger.debug(
        "Allocation calculée : %d lignes, %d articles", len(résultat), len(articles)
    )
    return résultat

