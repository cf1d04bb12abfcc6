"""Discord adapter implementing the :class:`~scrim_bot.adapters.base.Adapter`.

It uses :mod:`httpx` to talk to Discord's HTTP API directly, which keeps the
scrim logic independent of the gateway client and easy to exercise with
``httpx.MockTransport`` in the tests.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ..errors import MessagingError, RecipientUnreachableError
from .base import Adapter

log = logging.getLogger("scrim.discord")

# Public threads last a week, matching the staleness window
THREAD_ARCHIVE_MINUTES = 10080


class DiscordAdapter(Adapter):
    """Adapter that sends requests directly to the Discord HTTP API."""

    api_base = "https://discord.com/api/v10"
    max_retries = 3

    def __init__(self, token: str, client: httpx.AsyncClient | None = None) -> None:
        """Store authentication ``token`` and optional HTTP ``client``."""
        self.token = token
        self.client = client or httpx.AsyncClient(timeout=15.0)

    # ------------------------------------------------------------------
    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Issue a request, waiting out rate limits.

        404 responses are returned to the caller; any other failure is raised
        as :class:`MessagingError`.
        """
        headers = {"Authorization": f"Bot {self.token}"}
        url = f"{self.api_base}{path}"
        for _attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(
                    method, url, json=json, headers=headers
                )
            except httpx.HTTPError as exc:
                raise MessagingError(f"{method} {path} failed: {exc}") from exc
            if response.status_code == 429:
                retry_after = float(response.json().get("retry_after", 1.0))
                log.warning("Rate limited on %s %s, retrying in %.2fs", method, path, retry_after)
                await asyncio.sleep(retry_after)
                continue
            if response.status_code == 404 or response.is_success:
                return response
            raise MessagingError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}"
            )
        raise MessagingError(f"{method} {path} still rate limited after retries")

    # ------------------------------------------------------------------
    async def post(
        self,
        channel_id: int,
        content: str | None = None,
        *,
        embed: dict[str, Any] | None = None,
        components: list[dict[str, Any]] | None = None,
    ) -> int:
        """Post a message with an optional embed and component rows."""
        payload: dict[str, Any] = {}
        if content:
            payload["content"] = content
        if embed:
            payload["embeds"] = [embed]
        if components:
            payload["components"] = components
        response = await self._request(
            "POST", f"/channels/{channel_id}/messages", json=payload
        )
        if response.status_code == 404:
            raise MessagingError(f"Channel {channel_id} not found")
        return int(response.json()["id"])

    async def send(self, channel_id: int, content: str) -> None:
        await self.post(channel_id, content)

    async def start_thread(self, channel_id: int, message_id: int, name: str) -> int:
        """Start a public thread on a message and return the thread id."""
        payload = {"name": name[:100], "auto_archive_duration": THREAD_ARCHIVE_MINUTES}
        response = await self._request(
            "POST", f"/channels/{channel_id}/messages/{message_id}/threads", json=payload
        )
        if response.status_code == 404:
            raise MessagingError(f"Message {message_id} not found")
        return int(response.json()["id"])

    async def delete_message(self, channel_id: int, message_id: int) -> bool:
        response = await self._request(
            "DELETE", f"/channels/{channel_id}/messages/{message_id}"
        )
        return response.status_code != 404

    async def delete_thread(self, thread_id: int) -> bool:
        response = await self._request("DELETE", f"/channels/{thread_id}")
        return response.status_code != 404

    async def archive_thread(self, thread_id: int) -> bool:
        response = await self._request(
            "PATCH", f"/channels/{thread_id}", json={"archived": True}
        )
        return response.status_code != 404

    async def send_direct(
        self,
        user_id: int,
        content: str | None = None,
        *,
        embed: dict[str, Any] | None = None,
    ) -> None:
        """Open (or reuse) the DM channel with ``user_id`` and post to it.

        Discord answers 403 when the user blocks DMs from server members.
        """
        try:
            response = await self._request(
                "POST", "/users/@me/channels", json={"recipient_id": str(user_id)}
            )
            if response.status_code == 404:
                raise RecipientUnreachableError(user_id)
            channel_id = int(response.json()["id"])
            await self.post(channel_id, content, embed=embed)
        except RecipientUnreachableError:
            raise
        except MessagingError as exc:
            raise RecipientUnreachableError(user_id) from exc

    async def close(self) -> None:
        """Close the underlying :class:`httpx.AsyncClient`."""
        await self.client.aclose()
