"""
Agrégation des commandes actives en lignes de demande.

Produit la séquence ordonnée que consomme le moteur d'allocation :
commandes triées par priorité (puis identifiant), lignes dans l'ordre
de saisie. Aucun filtre d'affichage n'intervient ici : l'allocation
doit toujours voir l'ensemble des commandes actives.
"""

from __future__ import annotations

from collections.abc import Iterable

from synthese_production.domain.model import (
    Commande,
    LigneDeDemande,
    QuantitéIncohérente,
    quantité,
)


def trier_par_priorité(commandes: Iterable[Commande]) -> list[Commande]:
    return sorted(commandes, key=lambda c: c.clé_priorité)


def lignes_de_demande(commandes: Iterable[Commande]) -> list[LigneDeDemande]:
    """
    Aplatit les commandes en lignes de demande, dans l'ordre de priorité.

    C'est la frontière de validation : une quantité négative ou non
    numérique lève QuantitéIncohérente avant que le moteur ne tourne.
    """
    demande: list[LigneDeDemande] = []
    for commande in trier_par_priorité(commandes):
        for ligne in commande.lignes:
            try:
                q = quantité(ligne.quantité)
            except QuantitéIncohérente as e:
                raise QuantitéIncohérente(
                    f"Commande {commande.id}, article {ligne.article_id} : {e}"
                ) from e
            demande.append(
                LigneDeDemande(
                    id_commande=commande.id,
                    article_id=ligne.article_id,
                    quantité=q,
                )
            )
    return demande


def articles_référencés(demande: Iterable[LigneDeDemande]) -> list[int]:
    """Identifiants d'articles distincts, dans l'ordre de première apparition."""
    return list(dict.fromkeys(ligne.article_id for ligne in demande))
