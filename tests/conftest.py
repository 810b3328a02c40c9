"""
Configuration partagée pour les tests.

Les classes du domaine sont mappées une seule fois pour toute la session :
les tests unitaires les manipulent comme des objets Python ordinaires,
les tests d'intégration et e2e les persistent dans SQLite en mémoire.
Le dossier tests/ étant sur le chemin d'import, les fakes en mémoire
(fakes.py) servent aussi bien aux tests unitaires qu'aux tests
d'intégration qui vérifient leur fidélité.
"""

import pytest

from synthese_production.adapters import orm


@pytest.fixture(scope="session", autouse=True)
def mappers():
    orm.start_mappers()
