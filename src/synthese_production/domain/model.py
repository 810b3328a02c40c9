"""
Modèle de domaine de la synthèse de production.

Ce module contient les entités lues par le moteur d'allocation
(Article, Commande, OpérationInventaire) et les value objects
qu'il produit (LigneDeDemande, LigneAllocation).

Toutes les quantités sont des Decimal à l'échelle 3, comme les
colonnes numeric(10, 3) de la base : jamais de float, pour que
la conservation des quantités reste exacte.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from synthese_production.domain import events

ÉCHELLE = Decimal("0.001")
ZÉRO = Decimal("0.000")


# --- Exceptions du domaine ---


class RéférenceArticleInconnue(Exception):
    """Levée quand une ligne référence un article absent de l'instantané."""
    pass


class QuantitéIncohérente(ValueError):
    """Levée quand une quantité est négative ou n'est pas un nombre."""
    pass


class FiltreInvalide(ValueError):
    """Levée quand un filtre de date ou de client ne peut pas être interprété."""
    pass


def quantité(valeur: object) -> Decimal:
    """
    Convertit une valeur en Decimal à l'échelle 3.

    Lève QuantitéIncohérente si la valeur est négative, non finie
    ou non numérique. Les float sont passés par leur repr pour ne
    pas importer l'erreur binaire dans le Decimal.
    """
    if isinstance(valeur, bool):
        raise QuantitéIncohérente(f"Quantité invalide : {valeur!r}")
    try:
        décimal = Decimal(str(valeur)) if isinstance(valeur, float) else Decimal(valeur)
    except (InvalidOperation, TypeError, ValueError):
        raise QuantitéIncohérente(f"Quantité invalide : {valeur!r}") from None
    if not décimal.is_finite() or décimal < 0:
        raise QuantitéIncohérente(f"Quantité invalide : {valeur!r}")
    return décimal.quantize(ÉCHELLE)


def niveau(valeur: object) -> Decimal:
    """
    Niveau lu dans le registre (stock courant, production engagée),
    à l'échelle 3.

    Le registre peut être négatif après une sortie non couverte ;
    rien n'est alors disponible, la valeur est ramenée à zéro.
    """
    if valeur is None:
        return ZÉRO
    décimal = Decimal(str(valeur)) if isinstance(valeur, float) else Decimal(valeur)
    return max(ZÉRO, décimal.quantize(ÉCHELLE))


# --- Énumérations ---


class StatutCommande(str, enum.Enum):
    BROUILLON = "draft"
    CONFIRMÉE = "confirmed"
    VALIDÉE = "validated"
    PRÉPARÉE = "prepared"
    PRÊTE = "ready"
    PARTIELLEMENT_LIVRÉE = "partially_delivered"
    LIVRÉE = "delivered"
    ANNULÉE = "cancelled"


class TypeOpération(str, enum.Enum):
    RÉCEPTION = "reception"
    SORTIE = "sortie"
    AJUSTEMENT = "ajustement"
    TRANSFERT = "transfert"
    FABRICATION = "fabrication"


class StatutOpération(str, enum.Enum):
    BROUILLON = "draft"
    EN_COURS = "en_cours"
    TERMINÉE = "completed"
    ANNULÉE = "cancelled"


class ÉtatPréparation(str, enum.Enum):
    """État global d'une commande, calculé à partir de ses lignes allouées."""

    PRÉPARÉE = "prepared"
    PARTIELLEMENT_PRÉPARÉE = "partially_prepared"
    EN_COURS = "en_cours"
    NON_PRÉPARÉE = "non_prepare"


class StatutLigne(str, enum.Enum):
    """État d'une ligne de commande pour la vue détail."""

    DISPONIBLE = "available"
    PARTIELLE = "partial"
    EN_PRODUCTION = "in_production"
    MANQUANTE = "missing"


# --- Entités lues par le moteur ---


class Article:
    """
    Article du catalogue avec son stock courant.

    Le stock n'est modifié que par les opérations d'inventaire,
    jamais par le moteur d'allocation. Un article non géré en stock
    n'expose aucun stock prélevable.
    """

    def __init__(
        self,
        id: int,
        nom: str,
        stock_courant: Decimal = ZÉRO,
        géré_en_stock: bool = True,
    ):
        self.id = id
        self.nom = nom
        self.stock_courant = stock_courant
        self.géré_en_stock = géré_en_stock

    def __repr__(self) -> str:
        return f"<Article {self.id}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Article):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def stock_prélevable(self) -> Decimal:
        if not self.géré_en_stock:
            return ZÉRO
        return niveau(self.stock_courant)


@dataclass(unsafe_hash=True)
class LigneDeCommande:
    """
    Ligne d'une commande client : un article et une quantité commandée.

    Traitée comme immuable par le moteur. L'identifiant technique
    (ordre de saisie dans la commande) est ajouté par le mapping ORM.
    """

    article_id: int
    quantité: Decimal


class Commande:
    """
    Agrégat racine : une commande client et ses lignes.

    La priorité est la clé d'ordonnancement persistée, modifiée par
    glisser-déposer dans l'interface. C'est elle, et non la date de
    création, qui décide quelle commande est servie en premier.
    """

    def __init__(
        self,
        id: int,
        client_id: int,
        priorité: Optional[int] = None,
        statut: str = StatutCommande.CONFIRMÉE.value,
        date_commande: Optional[datetime] = None,
        date_livraison: Optional[datetime] = None,
        lignes: Optional[list[LigneDeCommande]] = None,
    ):
        self.id = id
        self.client_id = client_id
        self.priorité = priorité
        self.statut = statut
        self.date_commande = date_commande
        self.date_livraison = date_livraison
        self.lignes = lignes or []
        self.événements: list[events.Event] = []

    def __repr__(self) -> str:
        return f"<Commande {self.id}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Commande):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def clé_priorité(self) -> tuple[int, int, int]:
        """
        Clé de tri totale : priorité croissante, les commandes sans
        priorité en tête, puis identifiant croissant.
        """
        if self.priorité is None:
            return (0, 0, self.id)
        return (1, self.priorité, self.id)

    def modifier_priorité(self, priorité: int) -> None:
        """Change la priorité et émet PrioritéModifiée si elle a changé."""
        if priorité == self.priorité:
            return
        ancienne = self.priorité
        self.priorité = priorité
        self.événements.append(
            events.PrioritéModifiée(
                id_commande=self.id,
                ancienne_priorité=ancienne,
                nouvelle_priorité=priorité,
            )
        )


@dataclass(unsafe_hash=True)
class LigneOpération:
    article_id: int
    quantité: Decimal


class OpérationInventaire:
    """
    Opération d'inventaire (réception, sortie, fabrication...).

    Seules les fabrications en cours comptent comme production
    engagée pour le moteur.
    """

    def __init__(
        self,
        id: int,
        type: str,
        statut: str = StatutOpération.BROUILLON.value,
        lignes: Optional[list[LigneOpération]] = None,
    ):
        self.id = id
        self.type = type
        self.statut = statut
        self.lignes = lignes or []

    def __repr__(self) -> str:
        return f"<OpérationInventaire {self.id} {self.type}/{self.statut}>"

    @property
    def est_fabrication_en_cours(self) -> bool:
        return (
            self.type == TypeOpération.FABRICATION.value
            and self.statut == StatutOpération.EN_COURS.value
        )


# --- Value objects calculés (jamais persistés) ---


@dataclass(frozen=True)
class LigneDeDemande:
    """Une ligne de besoin, dans l'ordre de priorité global."""

    id_commande: int
    article_id: int
    quantité: Decimal


@dataclass(frozen=True)
class LigneAllocation:
    """
    Résultat de l'allocation pour une ligne de demande.

    - à_prélever : servi depuis le stock existant
    - en_fabrication : manque déjà couvert par une fabrication en cours
    - à_produire : manque restant à planifier

    Invariant : à_prélever + en_fabrication + à_produire == commandé.
    stock_avant est le stock encore libre quand la ligne a été servie.
    """

    id_commande: int
    article_id: int
    commandé: Decimal
    à_prélever: Decimal
    à_produire: Decimal
    en_fabrication: Decimal = ZÉRO
    stock_avant: Decimal = ZÉRO

    @property
    def stock_après(self) -> Decimal:
        return self.stock_avant - self.à_prélever


@dataclass(frozen=True)
class Instantané:
    """
    Photographie cohérente du stock et de la production en cours,
    lue dans une seule transaction.

    Les fonctions de lecture lèvent RéférenceArticleInconnue pour un
    article absent ; c'est au moteur de décider quoi en faire.
    """

    articles: dict[int, Article] = field(default_factory=dict)
    en_production: dict[int, Decimal] = field(default_factory=dict)

    def stock_de(self, article_id: int) -> Decimal:
        try:
            return self.articles[article_id].stock_prélevable
        except KeyError:
            raise RéférenceArticleInconnue(f"Article inconnu : {article_id}") from None

    def en_production_de(self, article_id: int) -> Decimal:
        if article_id not in self.articles:
            raise RéférenceArticleInconnue(f"Article inconnu : {article_id}")
        return niveau(self.en_production.get(article_id))


@dataclass(frozen=True)
class SynthèseCommande:
    """Une commande, ses lignes allouées et son état de préparation."""

    commande: Commande
    lignes: tuple[LigneAllocation, ...]
    état: ÉtatPréparation
