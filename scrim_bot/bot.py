"""Discord bot wiring for scrim coordination.

The bot owns the long-lived pieces: the persistent posting buttons, the
periodic cleanup loop and the session sweep. Everything it needs is passed
in by :func:`scrim_bot.main.main`.
"""

from __future__ import annotations

import asyncio
from typing import Any

import discord
from discord.ext import commands, tasks

from .config import Settings
from .core.reaper import ExpiryReaper
from .core.sessions import SessionStore
from .core.wizard import ScrimWizard
from .logging_config import setup_logging
from .ui.views import PostingView

SESSION_SWEEP_MINUTES = 10.0


class ScrimBot(commands.Bot):
    """Small ``discord.py`` based bot used for coordinating scrims."""

    cleanup_task: tasks.Loop | None
    session_task: tasks.Loop | None

    def __init__(
        self,
        settings: Settings,
        wizard: ScrimWizard,
        reaper: ExpiryReaper,
        **kwargs: Any,
    ) -> None:
        intents = kwargs.pop("intents", None) or discord.Intents.default()
        # We use slash commands and components; message content intent not
        # needed.
        intents.message_content = False
        super().__init__(
            command_prefix=kwargs.pop("command_prefix", "!"),
            intents=intents,
        )
        self.log = setup_logging()
        self.settings = settings
        self.wizard = wizard
        self.reaper = reaper
        self.cleanup_task = None
        self.session_task = None

    @property
    def sessions(self) -> SessionStore:
        return self.wizard.sessions

    async def setup_hook(self) -> None:
        """Register persistent views, start background loops, sync commands."""
        self.add_view(PostingView(self.wizard.notifier, self.settings.admin_ids))

        self.cleanup_task = tasks.loop(
            hours=self.settings.cleanup_interval_hours, reconnect=True
        )(self.run_cleanup)
        self.cleanup_task.before_loop(self._cleanup_warmup)
        self.cleanup_task.start()
        self.log.info(
            "Cleanup service started, running every %g hour(s)",
            self.settings.cleanup_interval_hours,
        )

        self.session_task = tasks.loop(minutes=SESSION_SWEEP_MINUTES)(self.sweep_sessions)
        self.session_task.start()

        await self.tree.sync()
        await super().setup_hook()

    async def _cleanup_warmup(self) -> None:
        await self.wait_until_ready()
        await asyncio.sleep(self.settings.cleanup_warmup_seconds)

    async def run_cleanup(self) -> None:
        """One scheduled cleanup pass; failures are logged, never raised."""
        try:
            await self.reaper.run_pass()
        except Exception:
            self.log.exception("Error during cleanup process")

    async def sweep_sessions(self) -> None:
        dropped = self.sessions.sweep(self.settings.session_ttl_minutes * 60)
        if dropped:
            self.log.info("Dropped %d abandoned scrim wizard session(s)", dropped)

    async def close(self) -> None:
        for task in (self.cleanup_task, self.session_task):
            if task is not None:
                task.cancel()
        await super().close()

    async def on_ready(self) -> None:  # pragma: no cover - requires discord
        """Log a short confirmation once the bot connected successfully."""
        await self.change_presence(
            activity=discord.Activity(type=discord.ActivityType.watching, name="CS2 Scrims | /scrim")
        )
        self.log.info(
            "Logged in as %s (%s), serving %d server(s)",
            self.user,
            self.user.id if self.user else "?",
            len(self.guilds),
        )
        channel_id = self.wizard.store.scrim_channel_id(self.settings.scrim_channel_id)
        if channel_id is None:
            self.log.warning("No scrim channel configured; use /setup channel")


__all__ = ["ScrimBot"]
