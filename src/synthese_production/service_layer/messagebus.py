"""
Message Bus du côté écriture.

Seules les priorités des commandes sont modifiables : les commands
expriment un changement d'ordre de service, les events signalent
qu'il a eu lieu. La synthèse elle-même est une lecture et passe par
les views, jamais par le bus.

Les handlers reçus sont déjà câblés avec leurs dépendances (voir
bootstrap) : le bus ne fait que router.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from typing import Union

from synthese_production.domain import commands, events
from synthese_production.service_layer import unit_of_work

logger = logging.getLogger(__name__)

Message = Union[commands.Command, events.Event]


class MessageBus:
    def __init__(
        self,
        uow: unit_of_work.AbstractUnitOfWork,
        event_handlers: dict[type[events.Event], list[Callable]],
        command_handlers: dict[type[commands.Command], Callable],
    ):
        self.uow = uow
        self.event_handlers = event_handlers
        self.command_handlers = command_handlers

    def handle(self, message: Message) -> None:
        """
        Traite le message, puis les events émis par les commandes
        modifiées, jusqu'à épuisement.

        L'échec d'une command remonte à l'appelant ; celui d'un event
        est journalisé sans annuler la modification déjà commitée.
        """
        file = deque([message])
        while file:
            courant = file.popleft()
            if isinstance(courant, commands.Command):
                self._exécuter(courant)
            elif isinstance(courant, events.Event):
                self._publier(courant)
            else:
                raise ValueError(f"Message de type inconnu : {type(courant)}")
            file.extend(self.uow.collect_new_events())

    def _exécuter(self, command: commands.Command) -> None:
        try:
            handler = self.command_handlers[type(command)]
        except KeyError:
            raise ValueError(f"Aucun handler pour la command {type(command)}") from None
        logger.debug("Command %s", command)
        handler(command)

    def _publier(self, event: events.Event) -> None:
        for handler in self.event_handlers.get(type(event), []):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler en échec pour l'event %s", event)
