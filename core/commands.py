"""Command registration, matching and help generation.

A command pairs a pattern such as ``hello {name}`` with an async handler.
Every command whose pattern matches the normalized message text runs; this
is not first-match-wins.
"""
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Tuple

from core.conversation import Conversation
from core.models import Message
from utils.matching import MatchResult, PatternRule, compile_pattern
from utils.scheduling import Scheduler, spawn

if TYPE_CHECKING:
    from core.client import Connection

logger = logging.getLogger(__name__)

CommandHandlerFn = Callable[[Conversation], Awaitable[None]]

HELP_HEADER = "I can support you with those features:\n\n"


class Command:
    """
    A pattern plus the handler to run when it matches.

    Either pass ``handler`` or subclass and override ``handle``.
    """

    def __init__(
        self,
        pattern: str,
        handler: Optional[CommandHandlerFn] = None,
        description: str = "",
    ) -> None:
        self._rule: PatternRule = compile_pattern(pattern)
        self._handler = handler
        self._description = description

    @property
    def pattern(self) -> str:
        return self._rule.pattern

    @property
    def description(self) -> str:
        return self._description

    def match(self, text: str) -> Optional[MatchResult]:
        return self._rule.match(text)

    async def handle(self, conversation: Conversation) -> None:
        """Process one matched message.

        Args:
            conversation: Context bound to this command's match
        """
        if self._handler is None:
            raise NotImplementedError
        await self._handler(conversation)


class CommandRegistry:
    """Ordered, append-only collection of commands.

    Appends replace the stored tuple, so a pass iterating an older snapshot
    never sees a half-updated sequence.
    """

    def __init__(self) -> None:
        self._commands: Tuple[Command, ...] = ()

    def register(self, command: Command) -> None:
        self._commands = self._commands + (command,)
        logger.debug("Registered command %r", command.pattern)

    def __iter__(self):
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def search(
        self,
        message: Message,
        scheduler: Scheduler,
        connection: "Connection",
    ) -> bool:
        """Start the handler of every command matching the message text.

        Returns:
            True if at least one command matched
        """
        matched = False
        for command in self._commands:
            result = command.match(message.text)
            if result is None:
                continue
            logger.debug("Command matched: %r", command.pattern)
            spawn(
                scheduler,
                command.handle,
                Conversation(result, message, connection),
                name=f"command:{command.pattern}",
            )
            matched = True
        return matched

    def help_text(self) -> str:
        """One line per command in registration order, descriptions when set."""
        lines = []
        for command in self._commands:
            line = f"`{command.pattern}`"
            if command.description:
                line += f" *–* {command.description}"
            lines.append(line + "\n")
        return HELP_HEADER + "".join(lines)
