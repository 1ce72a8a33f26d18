"""Free-text listeners.

A listener runs whenever its regex is found anywhere in the raw message
text, whether or not the message was addressed to the bot.
"""
import logging
import re
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Tuple

from core.conversation import ListenerConversation
from core.models import Message
from utils.scheduling import Scheduler, spawn

if TYPE_CHECKING:
    from core.client import Connection

logger = logging.getLogger(__name__)

ListenerHandlerFn = Callable[[ListenerConversation], Awaitable[None]]


class Listener:
    """
    A regex plus the handler to run when it is found.

    Either pass ``handler`` or subclass and override ``handle``.
    The regex is compiled on construction; invalid ones raise ``re.error``.
    """

    def __init__(self, regex: str, handler: Optional[ListenerHandlerFn] = None) -> None:
        self._regex = re.compile(regex)
        self._handler = handler

    @property
    def regex(self) -> str:
        return self._regex.pattern

    def matches(self, text: str) -> bool:
        return self._regex.search(text) is not None

    async def handle(self, conversation: ListenerConversation) -> None:
        if self._handler is None:
            raise NotImplementedError
        await self._handler(conversation)


class ListenerRegistry:
    """Ordered, append-only collection of listeners."""

    def __init__(self) -> None:
        self._listeners: Tuple[Listener, ...] = ()

    def register(self, listener: Listener) -> None:
        self._listeners = self._listeners + (listener,)
        logger.debug("Registered listener %r", listener.regex)

    def __iter__(self):
        return iter(self._listeners)

    def __len__(self) -> int:
        return len(self._listeners)

    def search(
        self,
        message: Message,
        scheduler: Scheduler,
        connection: "Connection",
    ) -> bool:
        """Start every listener whose regex is found in the raw message text.

        Returns:
            True if at least one listener matched
        """
        matched = False
        for listener in self._listeners:
            if not listener.matches(message.raw_text):
                continue
            logger.debug("Listener matched: %r", listener.regex)
            spawn(
                scheduler,
                listener.handle,
                ListenerConversation(message, connection),
                name=f"listener:{listener.regex}",
            )
            matched = True
        return matched
