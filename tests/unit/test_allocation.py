"""
Tests unitaires du moteur d'allocation.

Le moteur est testé seul, avec des fonctions de lecture en mémoire :
pas de base de données, pas de repository. C'est le "low gear".
"""

from decimal import Decimal

import pytest

from synthese_production.domain.allocation import allouer
from synthese_production.domain.model import (
    Article,
    Instantané,
    LigneDeDemande,
    RéférenceArticleInconnue,
)

D = Decimal


# --- Helpers ---


def lecture(quantités: dict[int, str]):
    """Fonction de lecture sur un dict ; un article absent est inconnu."""

    def lire(article_id: int) -> Decimal:
        try:
            return D(quantités[article_id])
        except KeyError:
            raise RéférenceArticleInconnue(article_id) from None

    return lire


def demande(*lignes: tuple[int, int, str]) -> list[LigneDeDemande]:
    return [LigneDeDemande(id_commande=c, article_id=a, quantité=D(q)) for c, a, q in lignes]


# --- Prélèvement sur le stock ---


class TestPrélèvement:
    def test_respecte_la_priorité(self):
        """Stock 15, X (prioritaire) demande 10, Y demande 10 : X prend 10, Y prend 5."""
        lignes = allouer(
            demande((1, 100, "10.000"), (2, 100, "10.000")),
            stock_de=lecture({100: "15.000"}),
            en_production_de=lecture({100: "0"}),
        )

        x, y = lignes
        assert (x.à_prélever, x.à_produire) == (D("10.000"), D("0.000"))
        assert (y.à_prélever, y.à_produire) == (D("5.000"), D("5.000"))

    def test_ne_surconsomme_jamais_le_stock(self):
        lignes = allouer(
            demande((1, 100, "4"), (2, 100, "7"), (3, 200, "2"), (4, 100, "9")),
            stock_de=lecture({100: "12", 200: "1"}),
            en_production_de=lecture({100: "0", 200: "0"}),
        )

        prélevé_100 = sum(l.à_prélever for l in lignes if l.article_id == 100)
        prélevé_200 = sum(l.à_prélever for l in lignes if l.article_id == 200)
        assert prélevé_100 == D("12.000")
        assert prélevé_200 == D("1.000")
        assert [l.à_prélever for l in lignes] == [D("4"), D("7"), D("1"), D("1")]

    def test_conservation_exacte_en_décimal(self):
        """0.1 + 0.2 n'introduit aucune dérive : tout est en Decimal."""
        lignes = allouer(
            demande((1, 100, "0.100"), (2, 100, "0.200"), (3, 100, "0.333")),
            stock_de=lecture({100: "0.300"}),
            en_production_de=lecture({100: "0.111"}),
        )

        for l in lignes:
            assert l.à_prélever + l.en_fabrication + l.à_produire == l.commandé
        assert lignes[2].à_prélever == D("0.000")
        assert lignes[2].en_fabrication == D("0.111")
        assert lignes[2].à_produire == D("0.222")

    def test_stock_avant_et_après_chaque_ligne(self):
        lignes = allouer(
            demande((1, 100, "6"), (2, 100, "6")),
            stock_de=lecture({100: "10"}),
            en_production_de=lecture({100: "0"}),
        )

        assert (lignes[0].stock_avant, lignes[0].stock_après) == (D("10.000"), D("4.000"))
        assert (lignes[1].stock_avant, lignes[1].stock_après) == (D("4.000"), D("0.000"))

    def test_quantité_nulle(self):
        [ligne] = allouer(
            demande((1, 100, "0")),
            stock_de=lecture({100: "5"}),
            en_production_de=lecture({100: "0"}),
        )
        assert (ligne.à_prélever, ligne.à_produire) == (D("0"), D("0"))


# --- Production en cours ---


class TestProductionEnCours:
    def test_réduit_le_reste_à_produire(self):
        """Stock 0, 10 commandés, une fabrication en cours de 6 : reste 4 à produire."""
        [ligne] = allouer(
            demande((1, 100, "10.000")),
            stock_de=lecture({100: "0.000"}),
            en_production_de=lecture({100: "6.000"}),
        )

        assert ligne.à_prélever == D("0.000")
        assert ligne.en_fabrication == D("6.000")
        assert ligne.à_produire == D("4.000")

    def test_le_reste_à_produire_ne_devient_jamais_négatif(self):
        [ligne] = allouer(
            demande((1, 100, "10.000")),
            stock_de=lecture({100: "0.000"}),
            en_production_de=lecture({100: "15.000"}),
        )

        assert ligne.à_produire == D("0.000")
        assert ligne.en_fabrication == D("10.000")

    def test_couvre_d_abord_les_commandes_prioritaires(self):
        """La production engagée va d'abord aux manques des premières commandes."""
        lignes = allouer(
            demande((1, 100, "10"), (2, 100, "10"), (3, 100, "10")),
            stock_de=lecture({100: "5"}),
            en_production_de=lecture({100: "8"}),
        )

        assert [l.à_prélever for l in lignes] == [D("5"), D("0"), D("0")]
        assert [l.en_fabrication for l in lignes] == [D("5"), D("3"), D("0")]
        assert [l.à_produire for l in lignes] == [D("0"), D("7"), D("10")]

    def test_reste_à_produire_total_par_article(self):
        """Somme des à_produire = max(0, manque total - production en cours)."""
        lignes = allouer(
            demande((1, 100, "4"), (2, 200, "3"), (3, 100, "9"), (4, 200, "1")),
            stock_de=lecture({100: "2", 200: "0"}),
            en_production_de=lecture({100: "5", 200: "10"}),
        )

        à_produire = {
            a: sum(l.à_produire for l in lignes if l.article_id == a) for a in (100, 200)
        }
        assert à_produire == {100: D("6"), 200: D("0")}

    def test_ne_touche_pas_aux_lignes_servies_par_le_stock(self):
        [ligne] = allouer(
            demande((1, 100, "3")),
            stock_de=lecture({100: "3"}),
            en_production_de=lecture({100: "50"}),
        )
        assert ligne.en_fabrication == D("0")


# --- Robustesse ---


class TestRobustesse:
    def test_article_inconnu_vaut_stock_et_production_nuls(self, caplog):
        lignes = allouer(
            demande((1, 999, "7.500"), (1, 100, "1")),
            stock_de=lecture({100: "1"}),
            en_production_de=lecture({100: "0"}),
        )

        inconnu = lignes[0]
        assert inconnu.à_prélever == D("0.000")
        assert inconnu.à_produire == D("7.500")
        assert lignes[1].à_prélever == D("1.000")
        assert "999" in caplog.text

    def test_une_erreur_de_lecture_interrompt_tout(self):
        def stock_en_panne(article_id: int) -> Decimal:
            raise ConnectionError("stock indisponible")

        with pytest.raises(ConnectionError):
            allouer(
                demande((1, 100, "1")),
                stock_de=stock_en_panne,
                en_production_de=lecture({100: "0"}),
            )

    def test_idempotent_sur_le_même_instantané(self):
        instantané = Instantané(
            articles={100: Article(100, "Croissant", D("15.000"))},
            en_production={100: D("2.000")},
        )
        lignes_demande = demande((1, 100, "10"), (2, 100, "10"), (3, 100, "4"))

        premier = allouer(lignes_demande, instantané.stock_de, instantané.en_production_de)
        second = allouer(lignes_demande, instantané.stock_de, instantané.en_production_de)

        assert premier == second

    def test_ne_modifie_pas_le_stock_des_articles(self):
        article = Article(100, "Baguette", D("20.000"))
        instantané = Instantané(articles={100: article})

        allouer(demande((1, 100, "12")), instantané.stock_de, instantané.en_production_de)

        assert article.stock_courant == D("20.000")

    def test_article_non_géré_en_stock(self):
        instantané = Instantané(
            articles={100: Article(100, "Gâteau sur mesure", D("8.000"), géré_en_stock=False)}
        )

        [ligne] = allouer(demande((1, 100, "2")), instantané.stock_de, instantané.en_production_de)

        assert ligne.à_prélever == D("0.000")
        assert ligne.à_produire == D("2.000")

    def test_stock_négatif_vaut_zéro_sans_bloquer_les_autres_articles(self):
        instantané = Instantané(
            articles={
                100: Article(100, "Baguette", D("-2.000")),
                200: Article(200, "Pain de campagne", D("5")),
            }
        )

        pain, baguette = allouer(
            demande((1, 200, "3"), (1, 100, "4")),
            instantané.stock_de,
            instantané.en_production_de,
        )

        assert (baguette.à_prélever, baguette.à_produire) == (D("0.000"), D("4.000"))
        assert baguette.stock_avant == D("0.000")
        assert (pain.à_prélever, pain.à_produire) == (D("3.000"), D("0.000"))

    def test_lecture_négative_ramenée_à_zéro(self):
        [ligne] = allouer(
            demande((1, 100, "4")),
            stock_de=lecture({100: "-2"}),
            en_production_de=lecture({100: "-1"}),
        )

        assert (ligne.à_prélever, ligne.en_fabrication, ligne.à_produire) == (
            D("0.000"), D("0.000"), D("4.000"),
        )
