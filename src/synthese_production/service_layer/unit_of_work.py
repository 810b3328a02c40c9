"""
Unit of Work.

Une transaction = un instantané. Les commandes actives, le stock et
la production en cours sont lus par la même session : la synthèse ne
peut pas mélanger un stock lu avant un mouvement et une production lue
après. Le moteur est ouvert en SERIALIZABLE pour cette raison.

Côté écriture, seule la priorité des commandes change ; sans commit
explicite, tout est annulé à la sortie du bloc `with`.
"""

from __future__ import annotations

import abc
from collections.abc import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from synthese_production.adapters import lecteurs, repository
from synthese_production.config import paramètres
from synthese_production.domain import events


def _session_factory() -> sessionmaker:
    moteur = create_engine(paramètres.url_base_donnees, isolation_level="SERIALIZABLE")
    return sessionmaker(bind=moteur)


DEFAULT_SESSION_FACTORY = _session_factory()


class AbstractUnitOfWork(abc.ABC):
    """
    Donne accès à `commandes` (repository), `stocks` et `fabrications`
    (lecteurs) pour la durée d'un bloc `with`.
    """

    commandes: repository.AbstractRepository
    stocks: lecteurs.AbstractLecteurStock
    fabrications: lecteurs.AbstractLecteurProduction

    def __enter__(self) -> AbstractUnitOfWork:
        return self

    def __exit__(self, *args: object) -> None:
        # Sans effet après un commit
        self.rollback()

    def commit(self) -> None:
        self._commit()

    def collect_new_events(self) -> Iterator[events.Event]:
        """Vide et rend les événements des commandes consultées."""
        for commande in self.commandes.seen:
            while commande.événements:
                yield commande.événements.pop(0)

    @abc.abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """Une session par bloc `with`, partagée par le repository et les deux lecteurs."""

    def __init__(self, session_factory: sessionmaker = DEFAULT_SESSION_FACTORY):
        self.session_factory = session_factory

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session: Session = self.session_factory()
        self.commandes = repository.SqlAlchemyRepository(self.session)
        self.stocks = lecteurs.SqlAlchemyLecteurStock(self.session)
        self.fabrications = lecteurs.SqlAlchemyLecteurProduction(self.session)
        return self

    def __exit__(self, *args: object) -> None:
        try:
            super().__exit__(*args)
        finally:
            self.session.close()

    def _commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
