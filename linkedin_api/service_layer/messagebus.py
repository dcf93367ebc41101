from __future__ import annotations

import logging
import uuid
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, List, Type, Union

from asgi_correlation_id import correlation_id

from linkedin_api.domain import commands, events
from linkedin_api.service_layer import unit_of_work

logger = logging.getLogger(__name__)

Message = Union[commands.Command, events.Event]
Handler = Callable[..., Awaitable[Any]]


class MessageBus:
    """
    Runs one command to completion, then every event the touched aggregates
    raised, in order. Command failures propagate to the caller; a failing
    event handler is logged and the remaining handlers still run.
    """

    def __init__(
        self,
        uow: unit_of_work.AbstractUnitOfWork,
        event_handlers: Dict[Type[events.Event], List[Handler]],
        command_handlers: Dict[Type[commands.Command], Handler],
    ) -> None:
        self.uow = uow
        self.event_handlers = event_handlers
        self.command_handlers = command_handlers

    async def handle(self, message: Message) -> List:
        # inside a request the correlation id ties bus logs to the access log
        trace = correlation_id.get() or uuid.uuid4().hex
        logger.debug("[%s] received %s", trace, message)

        results = []
        pending: Deque[Message] = deque([message])
        while pending:
            message = pending.popleft()
            if isinstance(message, commands.Command):
                results.append(await self._run_command(message, trace))
            elif isinstance(message, events.Event):
                await self._publish(message, trace)
            else:
                raise TypeError(f"{message!r} is neither a command nor an event")
            pending.extend(self.uow.collect_new_events())

        return results

    async def _run_command(self, command: commands.Command, trace: str) -> Any:
        handler = self.command_handlers.get(type(command))
        if handler is None:
            raise LookupError(f"No handler registered for {type(command).__name__}")
        logger.debug("[%s] running %s", trace, type(command).__name__)
        return await handler(command)

    async def _publish(self, event: events.Event, trace: str) -> None:
        for handler in self.event_handlers.get(type(event), []):
            try:
                await handler(event)
            except Exception:
                logger.exception("[%s] handler %s failed for %s", trace, handler, event)
