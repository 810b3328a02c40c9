"""
Tables du back-office et mapping impératif vers le domaine.

Le moteur ne lit que cinq tables : articles, commandes et leurs lignes,
opérations d'inventaire et leurs lignes. Les classes du domaine sont
mappées sans hériter de quoi que ce soit venant de SQLAlchemy.

Les noms de colonnes SQL restent en ASCII (et en anglais, comme
le reste du back-office), le mapping traduit vers les attributs
français du domaine.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    event,
)
from sqlalchemy.orm import registry, relationship

from synthese_production.domain import model

metadata = MetaData()
mapper_registry = registry(metadata=metadata)

# --- Définition des tables ---

articles = Table(
    "articles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("managed_in_stock", Boolean, nullable=False, server_default="1"),
    Column("current_stock", Numeric(10, 3), nullable=False, server_default="0"),
)

orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("client_id", Integer, nullable=False),
    # Ordre de service, modifié par glisser-déposer
    Column("priority", Integer, nullable=True),
    Column("status", String(50), nullable=False, server_default="draft"),
    Column("order_date", DateTime, nullable=True),
    Column("delivery_date", DateTime, nullable=True),
)

# Pas de clé étrangère vers articles : une ligne peut référencer
# un article supprimé depuis.
order_lines = Table(
    "order_lines",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey("orders.id"), nullable=False),
    Column("article_id", Integer, nullable=False),
    Column("quantity", Numeric(10, 3), nullable=False),
)

inventory_operations = Table(
    "inventory_operations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("type", String(50), nullable=False),
    Column("status", String(50), nullable=False, server_default="draft"),
)

inventory_operation_items = Table(
    "inventory_operation_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("operation_id", Integer, ForeignKey("inventory_operations.id"), nullable=False),
    Column("article_id", Integer, nullable=False),
    Column("quantity", Numeric(12, 3), nullable=False),
)

_mappers_démarrés = False


def start_mappers() -> None:
    """
    Mappe les classes du domaine sur les tables ci-dessus.

    Idempotent, le bootstrap et les tests peuvent
    l'appeler chacun de leur côté.
    """
    global _mappers_démarrés
    if _mappers_démarrés:
        return

    mapper_registry.map_imperatively(
        model.Article,
        articles,
        properties={
            "nom": articles.c.name,
            "géré_en_stock": articles.c.managed_in_stock,
            "stock_courant": articles.c.current_stock,
        },
    )
    lines_mapper = mapper_registry.map_imperatively(
        model.LigneDeCommande,
        order_lines,
        properties={
            "quantité": order_lines.c.quantity,
        },
    )
    mapper_registry.map_imperatively(
        model.Commande,
        orders,
        properties={
            "priorité": orders.c.priority,
            "statut": orders.c.status,
            "date_commande": orders.c.order_date,
            "date_livraison": orders.c.delivery_date,
            "lignes": relationship(lines_mapper, order_by=order_lines.c.id),
        },
    )
    operation_items_mapper = mapper_registry.map_imperatively(
        model.LigneOpération,
        inventory_operation_items,
        properties={
            "quantité": inventory_operation_items.c.quantity,
        },
    )
    mapper_registry.map_imperatively(
        model.OpérationInventaire,
        inventory_operations,
        properties={
            "statut": inventory_operations.c.status,
            "lignes": relationship(
                operation_items_mapper, order_by=inventory_operation_items.c.id
            ),
        },
    )
    _mappers_démarrés = True


@event.listens_for(model.Commande, "load")
def receive_load(commande: model.Commande, _: object) -> None:
    """Initialise la liste d'événements quand une Commande est chargée depuis la BDD."""
    commande.événements = []
