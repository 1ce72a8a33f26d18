"""Fire-and-forget task scheduling.

Matching passes never wait for handlers: every matched handler is started as
its own task and the pass moves on. A trio nursery is the production
scheduler; anything with the same ``start_soon`` signature will do.
"""
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Anything that can start a detached task, e.g. ``trio.Nursery``."""

    def start_soon(
        self,
        async_fn: Callable[..., Awaitable[Any]],
        *args: Any,
        name: Optional[str] = None,
    ) -> None:
        ...


def spawn(
    scheduler: Scheduler,
    async_fn: Callable[..., Awaitable[Any]],
    *args: Any,
    name: str,
) -> None:
    """Start ``async_fn(*args)`` as an independent task; its result is never awaited."""
    logger.debug("Spawning task %s", name)
    scheduler.start_soon(async_fn, *args, name=name)
