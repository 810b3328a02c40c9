"""
Repository des commandes.

Collection des agrégats Commande : add et get pour le côté écriture
(priorités), actives pour le calcul de la synthèse. Les noms du
pattern restent en anglais, ceux du domaine en français.
"""

from __future__ import annotations

import abc
from collections.abc import Iterable

from sqlalchemy.orm import Session, selectinload

from synthese_production.domain import model


class AbstractRepository(abc.ABC):
    """
    Interface abstraite du repository des commandes.

    Les méthodes publiques enregistrent les commandes rendues dans
    `seen` puis délèguent aux méthodes _ des implémentations.
    """

    seen: set[model.Commande]

    def __init__(self) -> None:
        # Commandes dont le UoW collectera les événements
        self.seen: set[model.Commande] = set()

    def add(self, commande: model.Commande) -> None:
        self._add(commande)
        self.seen.add(commande)

    def get(self, id_commande: int) -> model.Commande | None:
        """Récupère une commande par son identifiant et la marque comme vue."""
        commande = self._get(id_commande)
        if commande:
            self.seen.add(commande)
        return commande

    def actives(self, statuts_exclus: Iterable[str] = ()) -> list[model.Commande]:
        """
        Toutes les commandes dont le statut n'est pas exclu, avec leurs lignes.

        L'ordre de retour n'a pas d'importance : le tri par priorité
        est fait par le domaine.
        """
        commandes = self._actives(tuple(statuts_exclus))
        self.seen.update(commandes)
        return commandes

    @abc.abstractmethod
    def _add(self, commande: model.Commande) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, id_commande: int) -> model.Commande | None:
        raise NotImplementedError

    @abc.abstractmethod
    def _actives(self, statuts_exclus: tuple[str, ...]) -> list[model.Commande]:
        raise NotImplementedError


class SqlAlchemyRepository(AbstractRepository):
    """Commandes lues et écrites par la session du Unit of Work."""

    def __init__(self, session: Session):
        super().__init__()
        self.session = session

    def _add(self, commande: model.Commande) -> None:
        self.session.add(commande)

    def _get(self, id_commande: int) -> model.Commande | None:
        return self.session.get(model.Commande, id_commande)

    def _actives(self, statuts_exclus: tuple[str, ...]) -> list[model.Commande]:
        requête = self.session.query(model.Commande).options(
            selectinload(model.Commande.lignes)
        )
        if statuts_exclus:
            requête = requête.filter(model.Commande.statut.notin_(statuts_exclus))
        return requête.all()
