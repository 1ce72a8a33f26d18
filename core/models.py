"""Data models for inbound chat messages.

Defines the Message dataclass, the classification helpers that decide whether
a message is addressed to the bot, and parsing of raw RTM events.
"""
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

HELP_KEYWORD = "help"

# <url|label> or <url>; user, channel and special mentions (<@..>, <#..>, <!..>) are kept
LINK_MARKUP_RE = re.compile(r"<([^@#!<>|][^<>|]*)(?:\|([^<>]*))?>")


def mention_pattern(bot_id: str) -> "re.Pattern[str]":
    """Regex for a mention token referencing ``bot_id``, with trailing ``:`` and spaces."""
    return re.compile(r"<@" + re.escape(bot_id) + r"(?:\|[^>]*)?>:?\s*")


@dataclass
class Message:  # pylint: disable=too-many-instance-attributes
    """Represents one inbound message event.

    Attributes:
        raw_text: Message text exactly as received
        user: ID of the user who sent the message
        channel: ID of the channel the message was posted in
        channel_type: Channel type reported by the backend ("im", "channel", ...)
        type: Event type, always "message" for parsed events
        text: Derived text, progressively stripped during classification
        raw_event: Original event dictionary from the socket
    """
    raw_text: str
    user: str
    channel: str
    channel_type: Optional[str] = None
    type: str = "message"
    text: Optional[str] = None
    raw_event: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.text is None:
            self.text = self.raw_text

    def is_direct_message(self) -> bool:
        if self.channel_type is not None:
            return self.channel_type == "im"
        return self.channel.startswith("D")

    def is_mention_for(self, bot_id: str) -> bool:
        return bool(bot_id) and mention_pattern(bot_id).search(self.text) is not None

    def is_bot_message(self, prefix: str, bot_id: str) -> bool:
        """Check whether the message is addressed to the bot.

        True when the text starts with the command prefix, mentions the bot,
        or was sent in a direct channel. An empty prefix never matches.
        """
        if prefix and self.text.startswith(prefix):
            return True
        return self.is_mention_for(bot_id) or self.is_direct_message()

    def strip_mention(self, bot_id: str) -> None:
        """Remove the first mention of the bot from the derived text."""
        if not bot_id:
            return
        stripped, count = mention_pattern(bot_id).subn("", self.text, count=1)
        if count:
            self.text = stripped.strip()

    def strip_link_markup(self) -> None:
        """Replace ``<url|label>`` with ``label`` and ``<url>`` with ``url``."""
        self.text = LINK_MARKUP_RE.sub(lambda m: m.group(2) or m.group(1), self.text)

    def strip_prefix(self, prefix: str) -> None:
        """Remove a single leading occurrence of the command prefix."""
        if prefix and self.text.startswith(prefix):
            self.text = self.text[len(prefix):]

    def is_help_request(self) -> bool:
        return self.text == HELP_KEYWORD

    def with_text(self, text: str) -> "Message":
        """Return a copy of this message carrying ``text`` for sending back."""
        return replace(self, text=text)

    def to_frame(self) -> Dict[str, Any]:
        """Outbound frame payload, routed to the originating channel."""
        return {
            "type": self.type,
            "channel": self.channel,
            "user": self.user,
            "text": self.text,
        }


def parse_message_event(event: Dict[str, Any]) -> Optional[Message]:
    """Parse an RTM event dictionary into a Message.

    Args:
        event: Decoded JSON frame from the socket

    Returns:
        Message if this is a user message event, None otherwise

    Raises:
        ValueError: a message event whose fields have the wrong types
    """
    if event.get("type") != "message":
        return None
    # edits, joins and other subtypes carry no fresh user text
    if event.get("subtype"):
        return None
    channel = event.get("channel")
    if not isinstance(channel, str):
        return None

    for key in ("text", "user", "channel_type"):
        value = event.get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"message field {key!r} is {type(value).__name__}, expected str")

    return Message(
        raw_text=event.get("text") or "",
        user=event.get("user") or "",
        channel=channel,
        channel_type=event.get("channel_type"),
        raw_event=event,
    )
