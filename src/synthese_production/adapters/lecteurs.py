"""
Lecteurs du stock et de la production en cours.

Ce sont les deux seules lectures dont le moteur a besoin en plus des
commandes. Elles passent par la session du Unit of Work : stock et
production sont ainsi lus dans la même transaction que les commandes.
"""

from __future__ import annotations

import abc
from collections.abc import Collection
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from synthese_production.adapters import orm
from synthese_production.domain import model


class AbstractLecteurStock(abc.ABC):
    @abc.abstractmethod
    def articles(self, ids: Collection[int]) -> dict[int, model.Article]:
        """Articles connus parmi `ids` ; les inconnus sont absents du résultat."""
        raise NotImplementedError


class AbstractLecteurProduction(abc.ABC):
    @abc.abstractmethod
    def quantités_en_cours(self, ids: Collection[int]) -> dict[int, Decimal]:
        """
        Quantité engagée par les fabrications en cours, par article.
        Un article sans fabrication en cours est absent du résultat.
        """
        raise NotImplementedError


class SqlAlchemyLecteurStock(AbstractLecteurStock):
    def __init__(self, session: Session):
        self.session = session

    def articles(self, ids: Collection[int]) -> dict[int, model.Article]:
        if not ids:
            return {}
        trouvés = (
            self.session.query(model.Article)
            .filter(model.Article.id.in_(list(ids)))
            .all()
        )
        return {article.id: article for article in trouvés}


class SqlAlchemyLecteurProduction(AbstractLecteurProduction):
    """Somme des lignes des opérations de type fabrication au statut en_cours."""

    def __init__(self, session: Session):
        self.session = session

    def quantités_en_cours(self, ids: Collection[int]) -> dict[int, Decimal]:
        if not ids:
            return {}
        items = orm.inventory_operation_items
        opérations = orm.inventory_operations
        requête = (
            select(items.c.article_id, func.sum(items.c.quantity))
            .join(opérations, opérations.c.id == items.c.operation_id)
            .where(
                opérations.c.type == model.TypeOpération.FABRICATION.value,
                opérations.c.status == model.StatutOpération.EN_COURS.value,
                items.c.article_id.in_(list(ids)),
            )
            .group_by(items.c.article_id)
        )
        return {
            article_id: model.niveau(total)
            for article_id, total in self.session.execute(requête)
        }
