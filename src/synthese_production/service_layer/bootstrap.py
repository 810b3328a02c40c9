"""
Composition root.

Construit le message bus : choisit le Unit of Work (SQLAlchemy en
production, fake en test) et câble chaque handler avec les dépendances
qu'il nomme dans sa signature. Le reste de l'application ne connaît
que les abstractions.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from typing import Any

from synthese_production.adapters import orm
from synthese_production.domain import commands, events
from synthese_production.service_layer import handlers, messagebus, unit_of_work

EVENT_HANDLERS: dict[type[events.Event], list[Callable]] = {
    events.PrioritéModifiée: [handlers.publier_changement_priorité],
}

COMMAND_HANDLERS: dict[type[commands.Command], Callable] = {
    commands.ModifierPrioritéCommande: handlers.modifier_priorité,
    commands.RéordonnerCommandes: handlers.réordonner,
}


def _câbler(handler: Callable, dépendances: dict[str, Any]) -> Callable:
    """Lie au handler les dépendances portant le nom d'un de ses paramètres."""
    paramètres = inspect.signature(handler).parameters
    return functools.partial(
        handler, **{nom: dép for nom, dép in dépendances.items() if nom in paramètres}
    )


def bootstrap(
    start_orm: bool = True,
    uow: unit_of_work.AbstractUnitOfWork | None = None,
    **dépendances: Any,
) -> messagebus.MessageBus:
    """
    Retourne un MessageBus prêt à l'emploi.

    Les tests passent start_orm=False et un FakeUnitOfWork ; toute
    dépendance supplémentaire est injectée par nom dans les handlers.
    """
    if start_orm:
        orm.start_mappers()
    uow = uow or unit_of_work.SqlAlchemyUnitOfWork()
    dépendances = {"uow": uow, **dépendances}

    return messagebus.MessageBus(
        uow=uow,
        event_handlers={
            type_event: [_câbler(h, dépendances) for h in liste]
            for type_event, liste in EVENT_HANDLERS.items()
        },
        command_handlers={
            type_cmd: _câbler(h, dépendances)
            for type_cmd, h in COMMAND_HANDLERS.items()
        },
    )
