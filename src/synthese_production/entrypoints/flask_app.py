"""
Point d'entrée Flask.

L'API Flask est un thin adapter : elle convertit les paramètres
HTTP en filtres ou en commands, appelle les views (lecture) ou le
message bus (écriture), et convertit les résultats en réponses HTTP.

L'API ne contient aucune logique métier.
"""

from __future__ import annotations

from flask import Flask, jsonify, request

from synthese_production.config import configurer_logging, paramètres
from synthese_production.domain import commands, model
from synthese_production.domain.filtres import FiltresSynthèse
from synthese_production.service_layer import bootstrap, handlers, synthese
from synthese_production.views import views

configurer_logging()

app = Flask(__name__)
bus = bootstrap.bootstrap()


def _statuts_exclus() -> tuple[str, ...]:
    return tuple(paramètres.statuts_commande_exclus)


def _entier(valeur: object, nom: str) -> int:
    if isinstance(valeur, bool):
        raise model.FiltreInvalide(f"{nom} doit être un entier : {valeur!r}")
    try:
        return int(valeur)
    except (TypeError, ValueError):
        raise model.FiltreInvalide(f"{nom} doit être un entier : {valeur!r}") from None


@app.errorhandler(model.FiltreInvalide)
def filtre_invalide(e):
    return jsonify({"message": str(e)}), 400


@app.errorhandler(handlers.CommandeIntrouvable)
def commande_introuvable(e):
    return jsonify({"message": str(e)}), 404


@app.errorhandler(model.QuantitéIncohérente)
def quantité_incohérente(e):
    return jsonify({"message": str(e)}), 422


@app.errorhandler(synthese.LectureInstantanéImpossible)
def lecture_impossible(e):
    return jsonify({"message": "Stock ou production en cours illisible, réessayer"}), 503


@app.route("/orders/production-summary", methods=["GET"])
def production_summary_endpoint():
    """
    GET /orders/production-summary
    Query : clientId?, date? (today|yesterday|tomorrow|range|AAAA-MM-JJ),
            startDate?, endDate?, groupBy? (article|order)

    Synthèse de production, cumulée par article ou détaillée par commande.
    """
    args = request.args
    client_id = args.get("clientId")
    filtres = FiltresSynthèse(
        client_id=_entier(client_id, "clientId") if client_id else None,
        jour=args.get("date") or None,
        date_début=args.get("startDate") or None,
        date_fin=args.get("endDate") or None,
    )
    result = views.synthèse_production(
        filtres,
        bus.uow,
        statuts_exclus=_statuts_exclus(),
        grouper_par=args.get("groupBy", views.PAR_ARTICLE),
    )
    return jsonify(result), 200


@app.route("/orders/production-status-batch", methods=["GET"])
def production_status_batch_endpoint():
    """
    GET /orders/production-status-batch

    État de préparation de toutes les commandes actives.
    """
    return jsonify(views.états_production(bus.uow, statuts_exclus=_statuts_exclus())), 200


@app.route("/orders/<int:order_id>/production-detail", methods=["GET"])
def production_detail_endpoint(order_id: int):
    """
    GET /orders/<id>/production-detail

    Détail ligne par ligne : stock disponible, quantité ajustée,
    stock restant, reste à produire et statut de chaque ligne.
    """
    result = views.détail_production(order_id, bus.uow, statuts_exclus=_statuts_exclus())
    return jsonify(result), 200


@app.route("/orders/<int:order_id>/priority", methods=["PUT"])
def priority_endpoint(order_id: int):
    """
    PUT /orders/<id>/priority
    Body JSON : { priority }
    """
    data = request.get_json(silent=True) or {}
    cmd = commands.ModifierPrioritéCommande(
        id_commande=order_id,
        priorité=_entier(data.get("priority"), "priority"),
    )
    bus.handle(cmd)
    return "", 204


@app.route("/orders/reorder", methods=["POST"])
def reorder_endpoint():
    """
    POST /orders/reorder
    Body JSON : { orderIds: [...] }

    Renumérote les priorités dans l'ordre donné (glisser-déposer).
    """
    data = request.get_json(silent=True) or {}
    ids = data.get("orderIds")
    if not isinstance(ids, list) or not ids:
        raise model.FiltreInvalide("orderIds doit être une liste non vide")
    ids_commandes = tuple(_entier(i, "orderIds") for i in ids)
    if len(set(ids_commandes)) != len(ids_commandes):
        raise model.FiltreInvalide("orderIds contient des doublons")
    cmd = commands.RéordonnerCommandes(ids_commandes=ids_commandes)
    bus.handle(cmd)
    return "", 204
