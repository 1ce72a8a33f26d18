"""Trio connection manager for the real-time messaging backend.

Connection lifecycle:
--------------------
1. Negotiation: an HTTP call carrying the bot token returns a socket URL and
   the bot's own user ID (``negotiate``).

2. Socket: a persistent websocket is opened to that URL (``connect``). Any
   failure up to this point is fatal and raised as AuthError/TransportError.

3. Receive loop: ``Connection.receive`` decodes one JSON frame per call.
   Malformed frames are skipped so the loop stays alive; an optional observer
   can be attached to see them. A closed socket is end-of-stream.

4. Send: ``Connection.send`` writes one JSON frame without waiting for an
   acknowledgement. Writes are serialized so handlers can reply concurrently.

There is no reconnect or backoff; callers decide what to do when the stream
ends.
"""
import itertools
import json
import logging
from typing import Any, Callable, Dict, Optional, Tuple

import httpx
import trio
from trio_websocket import ConnectionClosed, HandshakeError, WebSocketConnection, connect_websocket_url

from core.errors import AuthError, TransportError
from core.models import Message, parse_message_event

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://slack.com/api/rtm.connect"
DEFAULT_ORIGIN = "https://api.slack.com/"

FrameErrorObserver = Callable[[Any, Exception], None]


async def negotiate(
    token: str,
    api_url: str = DEFAULT_API_URL,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Tuple[str, str]:
    """Ask the backend for a socket URL.

    Args:
        token: Opaque bot credential
        api_url: Negotiation endpoint
        http_client: Client to use instead of a fresh one (tests pass a mock transport)

    Returns:
        (socket_url, bot_id)

    Raises:
        AuthError: the service answered ``ok: false``
        TransportError: network failure, non-2xx status or unparseable body
    """
    async def _get(client: httpx.AsyncClient) -> httpx.Response:
        return await client.get(api_url, params={"token": token})

    try:
        if http_client is not None:
            res = await _get(http_client)
        else:
            async with httpx.AsyncClient(timeout=30.0) as client:
                res = await _get(client)
    except httpx.HTTPError as e:
        raise TransportError(f"Failed to reach {api_url}: {e}") from e

    if not res.is_success:
        raise TransportError(f"Negotiation failed with HTTP code {res.status_code}")

    try:
        body = res.json()
    except ValueError as e:
        raise TransportError(f"Failed to decode negotiation response: {res.text!r}") from e
    if not isinstance(body, dict):
        raise TransportError(f"Unexpected negotiation response: {res.text!r}")

    if not body.get("ok"):
        raise AuthError(body.get("error") or "unknown_error")

    url = body.get("url")
    self_obj = body.get("self")
    bot_id = self_obj.get("id") if isinstance(self_obj, dict) else None
    if not isinstance(url, str) or not isinstance(bot_id, str) or not url or not bot_id:
        raise TransportError(f"Negotiation response missing url or self.id: {res.text!r}")
    return url, bot_id


class Connection:
    """
    Wraps one open websocket to the backend.
    Decodes inbound frames into Messages and serializes outbound ones.
    """

    def __init__(
        self,
        ws: WebSocketConnection,
        on_frame_error: Optional[FrameErrorObserver] = None,
    ) -> None:
        self._ws = ws
        self._send_lock = trio.Lock()
        self._ids = itertools.count(1)
        self.on_frame_error = on_frame_error

    async def receive(self) -> Optional[Message]:
        """Block until the next message event arrives.

        Returns:
            The decoded Message, or None once the socket is closed
        """
        while True:
            try:
                raw = await self._ws.get_message()
            except ConnectionClosed as e:
                logger.info("Socket closed: %s", e.reason)
                return None

            try:
                event = json.loads(raw)
                if not isinstance(event, dict):
                    raise ValueError(f"expected a JSON object, got {type(event).__name__}")
                message = parse_message_event(event)
            except ValueError as e:
                self._report_frame_error(raw, e)
                continue

            if message is None:
                logger.debug("Ignoring event: type=%s", event.get("type"))
                continue
            return message

    async def send(self, message: Message) -> None:
        """Write one message frame; no acknowledgement is awaited."""
        async with self._send_lock:
            frame: Dict[str, Any] = {"id": next(self._ids)}
            frame.update(message.to_frame())
            await self._ws.send_message(json.dumps(frame))

    async def aclose(self) -> None:
        await self._ws.aclose()

    def _report_frame_error(self, raw: Any, exc: Exception) -> None:
        logger.debug("Skipping malformed frame: %s", exc)
        if self.on_frame_error is not None:
            self.on_frame_error(raw, exc)


async def connect(
    token: str,
    nursery: trio.Nursery,
    api_url: str = DEFAULT_API_URL,
    origin: str = DEFAULT_ORIGIN,
    http_client: Optional[httpx.AsyncClient] = None,
    on_frame_error: Optional[FrameErrorObserver] = None,
) -> Tuple[Connection, str]:
    """Negotiate and open the socket.

    The websocket's background reader runs in ``nursery``.

    Returns:
        (connection, bot_id)
    """
    url, bot_id = await negotiate(token, api_url=api_url, http_client=http_client)
    logger.info("Negotiated socket for bot_id=%s", bot_id)

    try:
        ws = await connect_websocket_url(
            nursery,
            url,
            extra_headers=[(b"Origin", origin.encode("ascii"))],
        )
    except (OSError, HandshakeError, ValueError) as e:
        raise TransportError(f"Failed to connect to websocket: {e}") from e

    logger.info("Websocket connected")
    return Connection(ws, on_frame_error=on_frame_error), bot_id
