"""
Tests du classement des commandes et des lignes.

Chaque état est testé seul, puis les règles de précédence : quand
plusieurs règles pourraient s'appliquer, la première l'emporte.
"""

from decimal import Decimal

from synthese_production.domain.classement import (
    RÈGLES,
    grouper_par_commande,
    statut_ligne,
    état_commande,
)
from synthese_production.domain.model import (
    LigneAllocation,
    StatutLigne,
    ÉtatPréparation,
)


def ligne(commandé, prélevé, fabrication="0", id_commande=1, article_id=10):
    commandé, prélevé, fabrication = Decimal(commandé), Decimal(prélevé), Decimal(fabrication)
    return LigneAllocation(
        id_commande=id_commande,
        article_id=article_id,
        commandé=commandé,
        à_prélever=prélevé,
        à_produire=commandé - prélevé - fabrication,
        en_fabrication=fabrication,
    )


class TestÉtatCommande:
    def test_préparée(self):
        assert état_commande([ligne("5", "5"), ligne("2", "2")]) == ÉtatPréparation.PRÉPARÉE

    def test_partiellement_préparée(self):
        lignes = [ligne("5", "5"), ligne("4", "0")]
        assert état_commande(lignes) == ÉtatPréparation.PARTIELLEMENT_PRÉPARÉE

    def test_partiellement_préparée_sur_une_seule_ligne(self):
        assert état_commande([ligne("10", "5")]) == ÉtatPréparation.PARTIELLEMENT_PRÉPARÉE

    def test_en_cours_de_production(self):
        lignes = [ligne("10", "0", fabrication="6"), ligne("3", "0")]
        assert état_commande(lignes) == ÉtatPréparation.EN_COURS

    def test_entièrement_couverte_par_la_production(self):
        assert état_commande([ligne("10", "0", fabrication="10")]) == ÉtatPréparation.EN_COURS

    def test_non_préparée(self):
        assert état_commande([ligne("10", "0"), ligne("1", "0")]) == ÉtatPréparation.NON_PRÉPARÉE

    def test_commande_sans_ligne(self):
        assert état_commande([]) == ÉtatPréparation.NON_PRÉPARÉE


class TestPrécédence:
    def test_un_prélèvement_empêche_l_état_en_cours(self):
        """Une ligne servie et une ligne en fabrication, sans reste à produire."""
        lignes = [ligne("5", "5"), ligne("4", "0", fabrication="4")]
        assert état_commande(lignes) == ÉtatPréparation.NON_PRÉPARÉE

    def test_partiel_l_emporte_sur_en_cours(self):
        lignes = [ligne("5", "2", fabrication="1"), ligne("4", "0", fabrication="4")]
        assert état_commande(lignes) == ÉtatPréparation.PARTIELLEMENT_PRÉPARÉE

    def test_la_table_couvre_les_quatre_états_et_termine_par_le_défaut(self):
        assert [état for état, _ in RÈGLES] == list(ÉtatPréparation)
        _, défaut = RÈGLES[-1]
        assert défaut([])


class TestStatutLigne:
    def test_disponible(self):
        assert statut_ligne(ligne("3", "3")) == StatutLigne.DISPONIBLE

    def test_partielle(self):
        assert statut_ligne(ligne("3", "1", fabrication="2")) == StatutLigne.PARTIELLE

    def test_en_production(self):
        assert statut_ligne(ligne("3", "0", fabrication="1")) == StatutLigne.EN_PRODUCTION

    def test_manquante(self):
        assert statut_ligne(ligne("3", "0")) == StatutLigne.MANQUANTE


def test_états_par_commande_dans_l_ordre_de_priorité():
    lignes = [
        ligne("5", "5", id_commande=7),
        ligne("5", "0", id_commande=3),
        ligne("1", "1", id_commande=7, article_id=11),
    ]

    groupes = grouper_par_commande(lignes)

    assert list(groupes) == [7, 3]
    assert état_commande(groupes[7]) == ÉtatPréparation.PRÉPARÉE
    assert état_commande(groupes[3]) == ÉtatPréparation.NON_PRÉPARÉE
