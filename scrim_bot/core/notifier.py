"""Direct-message fan-out and the actions available on a posted scrim."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..adapters.base import Adapter
from ..data.models import Scrim, ScrimStatus
from ..data.store import ScrimStore
from ..errors import (
    MessagingError,
    NotAllowedError,
    ScrimNotActiveError,
    SelfInterestError,
)
from ..ui import embeds

log = logging.getLogger("scrim.notifier")

MAX_ALERTS = 50


class PostingAction(str, Enum):
    """Buttons on a scrim post; values are the component custom ids."""

    SHOW_INTEREST = "show_interest"
    MARK_FILLED = "scrim_filled"
    CANCEL = "cancel_scrim"


@dataclass
class BroadcastReport:
    sent: int = 0
    failed: int = 0


@dataclass
class InterestResult:
    scrim: Scrim
    delivered: bool


class Notifier:
    def __init__(self, store: ScrimStore, messenger: Adapter, max_alerts: int = MAX_ALERTS) -> None:
        self.store = store
        self.messenger = messenger
        self.max_alerts = max_alerts

    def recipients_for(self, scrim: Scrim) -> list[int]:
        """Subscribers to alert about ``scrim``: never its owner, at most ``max_alerts``."""
        subscribers = [uid for uid in self.store.alert_subscribers() if uid != scrim.owner_id]
        return subscribers[: self.max_alerts]

    async def broadcast(self, scrim: Scrim) -> BroadcastReport:
        """DM every subscriber about a new scrim.

        Each delivery stands alone; a failure is logged and counted and the
        rest of the batch still goes out.
        """
        report = BroadcastReport()
        payload = embeds.alert(scrim)
        for user_id in self.recipients_for(scrim):
            try:
                await self.messenger.send_direct(user_id, embed=payload)
            except MessagingError as exc:
                report.failed += 1
                log.info("Could not send alert to user %s: %s", user_id, exc)
            else:
                report.sent += 1
        log.info(
            "Alerted %d subscriber(s) about scrim #%s (%d failed)",
            report.sent, scrim.id, report.failed,
        )
        return report

    async def signal_interest(self, message_id: int, user_id: int, display_name: str) -> InterestResult:
        scrim = self.store.get_active(message_id)
        if scrim is None:
            raise ScrimNotActiveError()
        if scrim.owner_id == user_id:
            raise SelfInterestError()
        try:
            await self.messenger.send_direct(
                scrim.owner_id, embed=embeds.interest_for_owner(scrim, display_name, user_id)
            )
            await self.messenger.send_direct(user_id, embed=embeds.interest_confirmation(scrim))
        except MessagingError as exc:
            log.warning("Interest DMs for scrim #%s failed: %s", scrim.id, exc)
            return InterestResult(scrim, delivered=False)
        return InterestResult(scrim, delivered=True)

    async def close(
        self, message_id: int, actor_id: int, status: ScrimStatus, is_admin: bool = False
    ) -> Scrim:
        """Mark a scrim filled or cancelled on behalf of its owner or an admin."""
        if status not in (ScrimStatus.FILLED, ScrimStatus.CANCELLED):
            raise ValueError(f"Scrims cannot be closed as {status.value}")
        scrim = self.store.get_active(message_id)
        if scrim is None:
            raise ScrimNotActiveError()
        if scrim.owner_id != actor_id and not is_admin:
            verb = "mark this as filled" if status is ScrimStatus.FILLED else "cancel this scrim"
            raise NotAllowedError(f"Only the scrim creator or admins can {verb}.")
        if not self.store.set_status(message_id, status):
            raise ScrimNotActiveError()
        if scrim.thread_id:
            note = (
                "✅ **This scrim has been marked as filled!** Thanks to everyone who showed interest."
                if status is ScrimStatus.FILLED
                else "❌ **This scrim has been cancelled.** The thread will be archived shortly."
            )
            try:
                await self.messenger.send(scrim.thread_id, note)
            except MessagingError as exc:
                log.info("Could not post to thread %s: %s", scrim.thread_id, exc)
            if status is ScrimStatus.CANCELLED:
                try:
                    await self.messenger.archive_thread(scrim.thread_id)
                except MessagingError as exc:
                    log.info("Could not archive thread %s: %s", scrim.thread_id, exc)
        return scrim

    async def handle(
        self,
        action: PostingAction,
        message_id: int,
        actor_id: int,
        display_name: str,
        is_admin: bool = False,
    ) -> str:
        """Run ``action`` for a button press and return the reply text."""
        if action is PostingAction.SHOW_INTEREST:
            result = await self.signal_interest(message_id, actor_id, display_name)
            if result.delivered:
                return "✅ Interest registered! Both teams have been notified via DM."
            return "✅ Interest registered, but couldn't send DM notifications. Make sure your DMs are open!"
        if action is PostingAction.MARK_FILLED:
            await self.close(message_id, actor_id, ScrimStatus.FILLED, is_admin)
            return f"✅ Scrim marked as filled by {display_name}."
        if action is PostingAction.CANCEL:
            await self.close(message_id, actor_id, ScrimStatus.CANCELLED, is_admin)
            return f"❌ Scrim cancelled by {display_name}."
        raise ValueError(f"Unhandled posting action: {action!r}")
