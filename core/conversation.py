"""Per-invocation context handed to command and listener handlers."""
from typing import TYPE_CHECKING, Any

from core.models import Message
from utils.matching import MatchResult

if TYPE_CHECKING:
    from core.client import Connection


class _Replier:
    """Reply support shared by both conversation kinds."""

    def __init__(self, message: Message, connection: "Connection") -> None:
        self.message = message
        self._connection = connection

    async def reply(self, text: str, *args: Any) -> None:
        """Send a reply to the channel the message came from.

        ``text`` is %-formatted with ``args`` when given. Outside direct
        channels the reply mentions the sender.
        """
        if args:
            text = text % args
        if not self.message.is_direct_message():
            text = f"<@{self.message.user}>: {text}"
        await self._connection.send(self.message.with_text(text))


class Conversation(_Replier):
    """Context for one matched command: the message plus extracted parameters."""

    def __init__(self, match: MatchResult, message: Message, connection: "Connection") -> None:
        super().__init__(message, connection)
        self.match = match

    def string(self, name: str) -> str:
        return self.match.string(name)

    def integer(self, name: str) -> int:
        return self.match.integer(name)


class ListenerConversation(_Replier):
    """Context for one matched listener."""
