"""Error types raised by the bot engine.

Negotiation and connection failures are fatal and surface to whoever called
``connect``/``new``; nothing here retries.
"""


class BotError(Exception):
    """Base class for all bot engine errors."""


class AuthError(BotError):
    """The messaging backend rejected the credential.

    Attributes:
        error: Error string reported by the service (e.g. ``invalid_auth``)
    """

    def __init__(self, error: str) -> None:
        super().__init__(error)
        self.error = error


class TransportError(BotError):
    """Network, handshake or connection-open failure."""


class PatternError(BotError, ValueError):
    """A command pattern could not be compiled."""
