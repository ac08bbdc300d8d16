"""
In-process message bus — the inter-context transport.

Senders never touch the receiver's state; they enqueue a raw envelope and,
for requests, await a single reply. The receiver drains the queue one message
at a time in delivery order. A message the receiver does not answer closes
its reply channel empty (the sender sees None), and a receiver that never
gets to the message leaves the sender to its own timeout.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from ..config import config

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Awaitable[Optional[Dict[str, Any]]]]


class MessageBus:
    """
    Usage:
        bus = MessageBus()
        bus.set_handler(runtime.handle)
        await bus.start()
        reply = await bus.send_message({"type": "GET_REMAINING_TIME"})
        bus.post_message({"type": "PAUSE_RESOLVED", ...})
    """

    def __init__(self, reply_timeout_s: float = config.reply_timeout_s):
        self.reply_timeout_s = reply_timeout_s
        self._queue: asyncio.Queue[Tuple[Dict[str, Any], Optional[asyncio.Future]]] = asyncio.Queue()
        self._handler: Optional[Handler] = None
        self._consumer: Optional[asyncio.Task] = None

    def set_handler(self, handler: Handler) -> None:
        self._handler = handler

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if self._consumer is None:
            self._consumer = asyncio.create_task(self._consume())

    async def stop(self) -> None:
        consumer, self._consumer = self._consumer, None
        if consumer is None:
            return
        consumer.cancel()
        try:
            await consumer
        except asyncio.CancelledError:
            pass

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_message(
        self, payload: Dict[str, Any], timeout: Optional[float] = None
    ) -> Optional[Dict[str, Any]]:
        """Deliver *payload* and wait for at most one reply (None if none came)."""
        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((payload, fut))
        try:
            return await asyncio.wait_for(
                fut, timeout if timeout is not None else self.reply_timeout_s
            )
        except asyncio.TimeoutError:
            logger.debug("no reply to %r within timeout", _tag(payload))
            return None

    def post_message(self, payload: Dict[str, Any]) -> None:
        """Fire-and-forget delivery; no reply is ever expected."""
        self._queue.put_nowait((payload, None))

    # ------------------------------------------------------------------
    # Receiving
    # ------------------------------------------------------------------

    async def _consume(self) -> None:
        while True:
            payload, fut = await self._queue.get()
            try:
                reply = await self._dispatch(payload)
            except Exception:
                logger.exception("message handler failed for %r", _tag(payload))
                reply = None
            if fut is not None and not fut.done():
                fut.set_result(reply)
            self._queue.task_done()

    async def _dispatch(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if self._handler is None:
            logger.debug("no handler registered, dropping %r", _tag(payload))
            return None
        return await self._handler(payload)


def _tag(payload: Any) -> Any:
    return payload.get("type") if isinstance(payload, dict) else None
