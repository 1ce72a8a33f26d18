"""Small demo commands and listeners.

Shows both registration styles: Command/Listener subclasses registered with
``register_command``/``register_listener``, and plain async functions
registered with ``command``/``hear``.
"""
import logging

from core.commands import Command
from core.conversation import Conversation, ListenerConversation
from core.dispatcher import Bot
from core.listeners import Listener

logger = logging.getLogger(__name__)


class ShoutCommand(Command):
    """Repeats a word in capitals."""

    def __init__(self) -> None:
        super().__init__("shout {word}", description="Shout a word back at you")

    async def handle(self, conversation: Conversation) -> None:
        await conversation.reply("%s!", conversation.string("word").upper())


class WhisperCommand(Command):
    """Repeats a word in lower case."""

    def __init__(self) -> None:
        super().__init__("whisper {word}", description="Whisper a word back at you")

    async def handle(self, conversation: Conversation) -> None:
        await conversation.reply("_%s_", conversation.string("word").lower())


class AddCommand(Command):
    """Adds two integers."""

    def __init__(self) -> None:
        super().__init__("add {a:integer} {b:integer}", description="Add two integers")

    async def handle(self, conversation: Conversation) -> None:
        a = conversation.integer("a")
        b = conversation.integer("b")
        await conversation.reply("%d + %d = %d", a, b, a + b)


class GreetingListener(Listener):
    """Waves at anyone saying hi or hello."""

    def __init__(self) -> None:
        super().__init__(r"(?i)\b(hi|hello)\b")

    async def handle(self, conversation: ListenerConversation) -> None:
        logger.debug("Greeting from user=%s", conversation.message.user)
        await conversation.reply("hello there :wave:")


async def ping(conversation: Conversation) -> None:
    await conversation.reply("pong")


def register_features(bot: Bot) -> None:
    """Register every demo command and listener on ``bot``."""
    bot.command("ping", ping, description="Check that the bot is alive")
    for command in (ShoutCommand(), WhisperCommand(), AddCommand()):
        bot.register_command(command)
    bot.register_listener(GreetingListener())
