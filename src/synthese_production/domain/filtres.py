"""
Filtres et agrégats appliqués aux résultats d'allocation.

Les filtres ne font que choisir quelles commandes sont restituées :
l'allocation a déjà été calculée sur l'ensemble des commandes actives,
une commande masquée garde donc sa priorité sur le stock.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from synthese_production.domain.model import (
    ZÉRO,
    FiltreInvalide,
    LigneAllocation,
    SynthèseCommande,
)

AUJOURDHUI = "today"
HIER = "yesterday"
DEMAIN = "tomorrow"
PLAGE = "range"

_DÉCALAGES = {AUJOURDHUI: 0, HIER: -1, DEMAIN: 1}


def _lire_date(valeur: Optional[str], nom: str) -> Optional[date]:
    if not valeur:
        return None
    try:
        return datetime.fromisoformat(valeur).date()
    except ValueError:
        raise FiltreInvalide(f"Date invalide pour {nom} : {valeur!r}") from None


@dataclass(frozen=True)
class FiltresSynthèse:
    """
    Filtres de la synthèse de production.

    jour accepte today / yesterday / tomorrow / range ou une date ISO ;
    avec range (ou sans jour), date_début et date_fin bornent la plage,
    bornes incluses.
    """

    client_id: Optional[int] = None
    jour: Optional[str] = None
    date_début: Optional[str] = None
    date_fin: Optional[str] = None

    def plage(self, aujourdhui: Optional[date] = None) -> tuple[Optional[date], Optional[date]]:
        """Bornes (incluses) en jours calendaires locaux du serveur."""
        aujourdhui = aujourdhui or date.today()
        if self.jour in _DÉCALAGES:
            jour = aujourdhui + timedelta(days=_DÉCALAGES[self.jour])
            return jour, jour
        if self.jour and self.jour != PLAGE:
            jour = _lire_date(self.jour, "date")
            return jour, jour
        début = _lire_date(self.date_début, "startDate")
        fin = _lire_date(self.date_fin, "endDate")
        if début and fin and début > fin:
            raise FiltreInvalide(f"Plage de dates vide : {début} > {fin}")
        return début, fin

    def retient(self, synthèse: SynthèseCommande, aujourdhui: Optional[date] = None) -> bool:
        commande = synthèse.commande
        if self.client_id is not None and commande.client_id != self.client_id:
            return False
        début, fin = self.plage(aujourdhui)
        if début is None and fin is None:
            return True
        jour = jour_local(commande.date_commande)
        if jour is None:
            return False
        return (début is None or jour >= début) and (fin is None or jour <= fin)


def jour_local(moment: Optional[datetime]) -> Optional[date]:
    """Jour calendaire local ; les dates naïves sont déjà locales."""
    if moment is None:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def filtrer(
    synthèses: Iterable[SynthèseCommande],
    filtres: FiltresSynthèse,
    aujourdhui: Optional[date] = None,
) -> list[SynthèseCommande]:
    filtres.plage(aujourdhui)
    return [s for s in synthèses if filtres.retient(s, aujourdhui)]


@dataclass(frozen=True)
class TotalArticle:
    """Cumul par article, pour la vue de planification de production."""

    article_id: int
    commandé: Decimal
    à_prélever: Decimal
    à_produire: Decimal


def agréger_par_article(lignes: Iterable[LigneAllocation]) -> list[TotalArticle]:
    totaux: dict[int, list[Decimal]] = {}
    for ligne in lignes:
        cumul = totaux.setdefault(ligne.article_id, [ZÉRO, ZÉRO, ZÉRO])
        cumul[0] += ligne.commandé
        cumul[1] += ligne.à_prélever
        cumul[2] += ligne.à_produire
    return [
        TotalArticle(article_id=a, commandé=c, à_prélever=p, à_produire=r)
        for a, (c, p, r) in sorted(totaux.items())
    ]
