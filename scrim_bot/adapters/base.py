"""Base adapter interface for the chat platform the bot posts to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Adapter(ABC):
    """Abstract adapter for communication platforms."""

    @abstractmethod
    async def post(
        self,
        channel_id: int,
        content: str | None = None,
        *,
        embed: dict[str, Any] | None = None,
        components: list[dict[str, Any]] | None = None,
    ) -> int:
        """Post a message to ``channel_id`` and return the new message id."""

    @abstractmethod
    async def send(self, channel_id: int, content: str) -> None:
        """Send a plain message to a channel or thread."""

    @abstractmethod
    async def start_thread(self, channel_id: int, message_id: int, name: str) -> int:
        """Open a thread on a message and return the thread id."""

    @abstractmethod
    async def delete_message(self, channel_id: int, message_id: int) -> bool:
        """Delete a message. ``False`` means it was already gone."""

    @abstractmethod
    async def delete_thread(self, thread_id: int) -> bool:
        """Delete a thread. ``False`` means it was already gone."""

    @abstractmethod
    async def archive_thread(self, thread_id: int) -> bool:
        """Archive a thread. ``False`` means it no longer exists."""

    @abstractmethod
    async def send_direct(
        self,
        user_id: int,
        content: str | None = None,
        *,
        embed: dict[str, Any] | None = None,
    ) -> None:
        """Direct-message a user.

        Raises :class:`~scrim_bot.errors.RecipientUnreachableError` when the
        user cannot be reached.
        """
