"""Event dispatching for inbound chat messages.

Routes each message through classification, the command pass and the
listener pass:

1. If the message is addressed to the bot (prefix, mention or direct
   channel), strip the mention, link markup and prefix.
   a. A help request is answered with the generated command list.
   b. Otherwise every matching command runs; if any matched, stop.
2. Every listener whose regex is found in the raw text runs.

Each message is processed in its own task and each matched handler in a
further task, so the receive loop never waits on handler work.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import trio

from core.client import Connection, connect
from core.commands import Command, CommandHandlerFn, CommandRegistry
from core.listeners import Listener, ListenerHandlerFn, ListenerRegistry
from core.models import Message
from utils.scheduling import Scheduler, spawn

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "!"


class Bot:
    """Owns the connection and both registries; the composition root.

    Attributes:
        id: The bot's own user ID, as reported by negotiation
        prefix: Command prefix for addressing the bot
        commands: Registered commands
        listeners: Registered listeners
    """

    def __init__(self, connection: Connection, bot_id: str, prefix: str = DEFAULT_PREFIX) -> None:
        self.connection = connection
        self.id = bot_id
        self.prefix = prefix
        self.commands = CommandRegistry()
        self.listeners = ListenerRegistry()

    def set_prefix(self, prefix: str) -> None:
        self.prefix = prefix

    def command(self, pattern: str, handler: CommandHandlerFn, description: str = "") -> None:
        """Register a handler for a command pattern such as ``hello {name}``."""
        self.commands.register(Command(pattern, handler, description))

    def hear(self, regex: str, handler: ListenerHandlerFn) -> None:
        """Register a handler for a free-text regex."""
        self.listeners.register(Listener(regex, handler))

    def register_command(self, command: Command) -> None:
        self.commands.register(command)

    def register_listener(self, listener: Listener) -> None:
        self.listeners.register(listener)

    async def process(self, message: Message, scheduler: Scheduler) -> None:
        """Run one message through classification and both matching passes.

        Args:
            message: Freshly received message
            scheduler: Where matched handlers are started
        """
        # skip our own replies so a listener cannot trigger itself in a loop
        if message.user == self.id:
            return

        if message.is_bot_message(self.prefix, self.id):
            message.strip_mention(self.id)
            message.strip_link_markup()
            message.strip_prefix(self.prefix)

            if message.is_help_request():
                await self.send_help(message)
                return
            if self.search_command(message, scheduler):
                return

        self.search_listener(message, scheduler)

    def search_command(self, message: Message, scheduler: Scheduler) -> bool:
        return self.commands.search(message, scheduler, self.connection)

    def search_listener(self, message: Message, scheduler: Scheduler) -> bool:
        return self.listeners.search(message, scheduler, self.connection)

    async def send_help(self, message: Message) -> None:
        """Reply with every command pattern and its description."""
        text = self.commands.help_text()
        if not message.is_direct_message():
            text = f"<@{message.user}>: {text}"
        await self.connection.send(message.with_text(text))

    async def listen(self) -> None:
        """Receive messages until the connection closes.

        Every message is processed in its own task; when the stream ends
        this returns once all outstanding tasks have finished.
        """
        logger.info("Bot %s is now listening for messages...", self.id)
        async with trio.open_nursery() as nursery:
            while True:
                message = await self.connection.receive()
                if message is None:
                    break
                logger.debug("Received message in channel=%s", message.channel)
                spawn(nursery, self.process, message, nursery, name="process-message")
        logger.info("Connection closed, stopped listening")


async def new(token: str, nursery: trio.Nursery, prefix: str = DEFAULT_PREFIX, **kwargs: Any) -> Bot:
    """Negotiate, open the socket and return a ready Bot.

    Extra keyword arguments are passed to ``core.client.connect``.

    Raises:
        AuthError: the service rejected the token
        TransportError: negotiation or socket failure
    """
    connection, bot_id = await connect(token, nursery, **kwargs)
    return Bot(connection, bot_id, prefix=prefix)


@asynccontextmanager
async def open_bot(token: str, prefix: str = DEFAULT_PREFIX, **kwargs: Any) -> AsyncIterator[Bot]:
    """Context manager owning the nursery the socket lives in."""
    async with trio.open_nursery() as nursery:
        bot = await new(token, nursery, prefix=prefix, **kwargs)
        try:
            yield bot
        finally:
            await bot.connection.aclose()
