"""
HTTP client for the runtime bridge — lets a surface in another process (a
popup, a browser shim) talk to the background runtime with the same
send_message()/post_message() shape as the in-process bus.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import config

logger = logging.getLogger(__name__)


class RuntimeClient:

    def __init__(
        self,
        base_url: str = f"http://{config.api_host}:{config.api_port}",
        timeout_s: float = config.reply_timeout_s,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout_s)

    async def send_message(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Returns the runtime's reply, or None when it sent none or was unreachable."""
        try:
            r = await self._client.post("/runtime/message", json=payload)
        except httpx.HTTPError as e:
            logger.warning("runtime unreachable: %s", e)
            return None
        if r.status_code != 200:
            return None
        return r.json()

    async def post_message(self, payload: Dict[str, Any]) -> None:
        await self.send_message(payload)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RuntimeClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
