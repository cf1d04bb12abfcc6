"""Retiring stale scrims.

A pass looks up active scrims that are more than a week old or whose
scheduled time has gone by, removes their post and thread, and moves them to
a terminal status. The stored status is authoritative: it is updated even
when the post could not be removed or had already been deleted by hand.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from ..adapters.base import Adapter
from ..data.models import Scrim, ScrimStatus, utcnow
from ..data.store import ScrimStore
from ..errors import MessagingError

log = logging.getLogger("scrim.reaper")

PACING_SECONDS = 1.0


@dataclass
class CleanupReport:
    status: ScrimStatus
    cleaned: int = 0
    errors: int = 0
    artifacts_missing: int = 0
    cleaned_ids: list[int] = field(default_factory=list)


@dataclass
class CleanupPreview:
    active: list[Scrim]
    expired: list[Scrim]


class ExpiryReaper:
    """Single-flight cleanup of expired scrims.

    Only one pass runs at a time. A trigger that arrives while a pass is in
    progress is skipped, not queued.
    """

    def __init__(
        self,
        store: ScrimStore,
        messenger: Adapter,
        default_channel_id: int | None = None,
        pacing: float = PACING_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.store = store
        self.messenger = messenger
        self.default_channel_id = default_channel_id
        self.pacing = pacing
        self._sleep = sleep
        self.running = False

    def preview(self, now: datetime.datetime | None = None) -> CleanupPreview:
        return CleanupPreview(self.store.list_active(), self.store.list_expired(now))

    async def run_pass(
        self,
        status: ScrimStatus = ScrimStatus.AUTO_CLEANED,
        now: datetime.datetime | None = None,
    ) -> CleanupReport | None:
        """Clean every expired scrim; ``None`` if another pass is running."""
        if self.running:
            log.info("Cleanup already running, skipping this cycle")
            return None
        self.running = True
        try:
            return await self._run(status, now or utcnow())
        finally:
            self.running = False

    async def manual_cleanup(self, now: datetime.datetime | None = None) -> CleanupReport | None:
        log.info("Manual cleanup requested")
        return await self.run_pass(ScrimStatus.CLEANED, now)

    async def _run(self, status: ScrimStatus, now: datetime.datetime) -> CleanupReport:
        report = CleanupReport(status=status)
        expired = self.store.list_expired(now)
        if not expired:
            log.info("No expired scrims found during cleanup")
            return report
        log.info("Found %d expired scrim(s) to clean up", len(expired))
        for position, scrim in enumerate(expired):
            if position:
                await self._sleep(self.pacing)
            try:
                missing = await self._remove_artifacts(scrim)
                if self.store.set_status(scrim.message_id, status):
                    report.cleaned += 1
                    report.cleaned_ids.append(scrim.id)
                report.artifacts_missing += missing
            except Exception:
                report.errors += 1
                log.exception("Error cleaning scrim #%s", scrim.id)
        log.info("Cleanup completed: %d cleaned, %d errors", report.cleaned, report.errors)
        return report

    async def _remove_artifacts(self, scrim: Scrim) -> int:
        """Delete the post and thread; return how many were already gone."""
        missing = 0
        channel_id = scrim.channel_id or self.store.scrim_channel_id(self.default_channel_id)
        if channel_id is None:
            log.warning("No channel known for scrim #%s, leaving its post alone", scrim.id)
        else:
            try:
                if await self.messenger.delete_message(channel_id, scrim.message_id):
                    log.info("Deleted message for scrim: %s", scrim.team_name)
                else:
                    missing += 1
                    log.info("Message %s already deleted or not found", scrim.message_id)
            except MessagingError as exc:
                log.warning("Could not delete message %s: %s", scrim.message_id, exc)
        if scrim.thread_id:
            try:
                if await self.messenger.delete_thread(scrim.thread_id):
                    log.info("Deleted thread for scrim: %s", scrim.team_name)
                else:
                    missing += 1
                    log.info("Thread %s already deleted or not found", scrim.thread_id)
            except MessagingError as exc:
                log.warning("Could not delete thread %s: %s", scrim.thread_id, exc)
        return missing
