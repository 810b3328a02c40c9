"""
Configuration de l'application.

Les paramètres sont lus depuis l'environnement (ou un fichier .env)
par pydantic-settings ; chaque champ peut être surchargé par une
variable du même nom, par exemple URL_BASE_DONNEES.
"""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Paramètres(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    url_base_donnees: str = "sqlite:///synthese_production.db"

    # Commandes qui ne consomment plus de stock
    statuts_commande_exclus: list[str] = ["cancelled", "delivered"]

    niveau_log: str = "INFO"


paramètres = Paramètres()


def configurer_logging(niveau: str | None = None) -> None:
    """
    Configure le logger racine une seule fois, en format clé=valeur
    sur la sortie standard. Un second appel ne fait que changer le niveau.
    """
    niveau_str = (niveau or paramètres.niveau_log).upper().strip()
    level = getattr(logging, niveau_str, logging.INFO)

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s",
    )
