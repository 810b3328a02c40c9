"""
Classement des commandes et des lignes allouées.

L'état d'une commande est décidé par une table de règles évaluées
dans l'ordre : la première règle vérifiée l'emporte, la dernière
s'applique toujours. Chaque combinaison d'états de lignes donne
ainsi exactement un état de commande.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from synthese_production.domain.model import (
    LigneAllocation,
    StatutLigne,
    ÉtatPréparation,
)

Règle = Callable[[Sequence[LigneAllocation]], bool]


def _préparée(lignes: Sequence[LigneAllocation]) -> bool:
    return bool(lignes) and all(
        l.à_produire == 0 and l.à_prélever == l.commandé for l in lignes
    )


def _partiellement_préparée(lignes: Sequence[LigneAllocation]) -> bool:
    return any(l.à_prélever > 0 for l in lignes) and any(l.à_produire > 0 for l in lignes)


def _en_cours(lignes: Sequence[LigneAllocation]) -> bool:
    return not any(l.à_prélever > 0 for l in lignes) and any(
        l.en_fabrication > 0 for l in lignes
    )


RÈGLES: tuple[tuple[ÉtatPréparation, Règle], ...] = (
    (ÉtatPréparation.PRÉPARÉE, _préparée),
    (ÉtatPréparation.PARTIELLEMENT_PRÉPARÉE, _partiellement_préparée),
    (ÉtatPréparation.EN_COURS, _en_cours),
    (ÉtatPréparation.NON_PRÉPARÉE, lambda lignes: True),
)


def état_commande(lignes: Sequence[LigneAllocation]) -> ÉtatPréparation:
    """État d'une commande à partir de toutes ses lignes allouées."""
    return next(état for état, règle in RÈGLES if règle(lignes))


def statut_ligne(ligne: LigneAllocation) -> StatutLigne:
    if ligne.à_prélever == ligne.commandé:
        return StatutLigne.DISPONIBLE
    if ligne.à_prélever > 0:
        return StatutLigne.PARTIELLE
    if ligne.en_fabrication > 0:
        return StatutLigne.EN_PRODUCTION
    return StatutLigne.MANQUANTE


def grouper_par_commande(
    lignes: Sequence[LigneAllocation],
) -> dict[int, list[LigneAllocation]]:
    """Regroupe les lignes par commande en conservant l'ordre de priorité."""
    groupes: dict[int, list[LigneAllocation]] = {}
    for ligne in lignes:
        groupes.setdefault(ligne.id_commande, []).append(ligne)
    return groupes
