"""The multi-step ``/scrim`` wizard.

Each public method is one step and is driven by a separate interaction
event. Between events the only state is the user's
:class:`~scrim_bot.core.sessions.WizardSession`; a step that finds no session
raises :class:`~scrim_bot.errors.SessionExpiredError` rather than guessing.

Steps, in order::

    entry -> basic info -> map select -> server select -> publish
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..adapters.base import Adapter
from ..data.models import MAP_SEPARATOR, Profile, Scrim
from ..data.store import ScrimStore
from ..errors import (
    ChannelNotConfiguredError,
    EmptyCatalogError,
    InputValidationError,
    MessagingError,
    SessionExpiredError,
)
from ..ui import embeds
from .notifier import BroadcastReport, Notifier
from .sessions import SessionStore, WizardSession, WizardStep

log = logging.getLogger("scrim.wizard")

TEAM_NAME_MAX = 50
DIVISION_MAX = 30
# Discord select menu limits
OPTIONS_PER_MENU = 25
MAX_PICKS_PER_MENU = 10
# A message holds at most five component rows
MAX_MENUS = 5


@dataclass(frozen=True)
class BasicInfoDefaults:
    team_name: str = ""
    division: str = ""


@dataclass(frozen=True)
class MapChunk:
    index: int
    options: tuple[str, ...]
    max_values: int


@dataclass
class PublishResult:
    scrim: Scrim
    channel_id: int
    thread_id: int
    broadcast: BroadcastReport | None


def chunk_maps(catalog: list[str]) -> list[MapChunk]:
    chunks = []
    for index, start in enumerate(range(0, len(catalog), OPTIONS_PER_MENU)):
        options = tuple(catalog[start : start + OPTIONS_PER_MENU])
        chunks.append(MapChunk(index, options, min(len(options), MAX_PICKS_PER_MENU)))
    return chunks


class ScrimWizard:
    def __init__(
        self,
        store: ScrimStore,
        sessions: SessionStore,
        messenger: Adapter,
        notifier: Notifier,
        default_channel_id: int | None = None,
    ) -> None:
        self.store = store
        self.sessions = sessions
        self.messenger = messenger
        self.notifier = notifier
        self.default_channel_id = default_channel_id

    # ------------------------------------------------------------------
    # Entry
    def entry(self, user_id: int) -> Profile | None:
        """Start over: drop any unfinished session and return the saved profile.

        The profile, when present, is offered as a shortcut for the first form.
        """
        if self.sessions.remove(user_id) is not None:
            log.info("Discarded unfinished scrim wizard for user %s", user_id)
        return self.store.get_profile(user_id)

    def basic_info_defaults(self, user_id: int, use_profile: bool) -> BasicInfoDefaults:
        """Pre-fill values for the basic info form. Does not touch the session."""
        profile = self.store.get_profile(user_id) if use_profile else None
        if profile is None:
            return BasicInfoDefaults()
        return BasicInfoDefaults(profile.team_name, profile.division)

    # ------------------------------------------------------------------
    # Basic info
    @staticmethod
    def validate_basic_info(
        team_name: str, division: str, scheduled_date: str, scheduled_time: str
    ) -> tuple[str, str, str, str]:
        values = tuple(v.strip() for v in (team_name, division, scheduled_date, scheduled_time))
        if not all(values):
            raise InputValidationError("All fields are required. Please try again.")
        if len(values[0]) > TEAM_NAME_MAX:
            raise InputValidationError(f"Team name must be at most {TEAM_NAME_MAX} characters.")
        if len(values[1]) > DIVISION_MAX:
            raise InputValidationError(f"Division must be at most {DIVISION_MAX} characters.")
        return values  # type: ignore[return-value]

    def submit_basic_info(
        self,
        user_id: int,
        team_name: str,
        division: str,
        scheduled_date: str,
        scheduled_time: str,
    ) -> list[MapChunk]:
        """Start a fresh session and return the map picker layout.

        Any unfinished session for the user is discarded. An empty map
        catalog aborts here with the new session left in place.
        """
        team_name, division, scheduled_date, scheduled_time = self.validate_basic_info(
            team_name, division, scheduled_date, scheduled_time
        )
        self.sessions.put(
            WizardSession(
                user_id=user_id,
                team_name=team_name,
                division=division,
                scheduled_date=scheduled_date,
                scheduled_time=scheduled_time,
                step=WizardStep.MAP_SELECT,
            )
        )
        catalog = self.store.list_maps()
        if not catalog:
            raise EmptyCatalogError()
        chunks = chunk_maps(catalog)
        if len(chunks) > MAX_MENUS:
            log.warning(
                "Map catalog has %d maps; only the first %d can be offered",
                len(catalog), MAX_MENUS * OPTIONS_PER_MENU,
            )
        return chunks[:MAX_MENUS]

    # ------------------------------------------------------------------
    # Map and server selection
    def _require(self, user_id: int, *steps: WizardStep) -> WizardSession:
        session = self.sessions.get(user_id)
        if session is None:
            raise SessionExpiredError()
        if session.step not in steps:
            log.debug("User %s skipped ahead from %s", user_id, session.step.value)
            raise InputValidationError("Please finish the previous step first.")
        return session

    def select_maps(self, user_id: int, maps: list[str]) -> WizardSession:
        # Picking again from a second menu replaces the earlier pick
        self._require(user_id, WizardStep.MAP_SELECT, WizardStep.SERVER_SELECT)
        picked = list(dict.fromkeys(m for m in maps if m))
        if not picked:
            raise InputValidationError("Select at least one map.")

        def apply(session: WizardSession) -> None:
            session.maps = picked
            session.step = WizardStep.SERVER_SELECT

        return self.sessions.update(user_id, apply)  # type: ignore[return-value]

    async def choose_server(
        self, user_id: int, has_server: bool, display_name: str
    ) -> PublishResult:
        """Record the server answer and publish the scrim.

        Only one publish per session may be in flight. A publish that fails
        before the scrim is stored releases the session so the choice can be
        made again.
        """
        # PUBLISH is allowed again so a failed post can be retried
        session = self._require(user_id, WizardStep.SERVER_SELECT, WizardStep.PUBLISH)
        if session.publishing:
            raise InputValidationError("Your scrim is already being posted.")

        def apply(s: WizardSession) -> None:
            s.has_server = has_server
            s.step = WizardStep.PUBLISH
            s.publishing = True

        def release(s: WizardSession) -> None:
            s.publishing = False

        self.sessions.update(user_id, apply)
        try:
            return await self.publish(user_id, display_name)
        except Exception:
            # only reached before the scrim is stored
            self.sessions.update(user_id, release)
            raise

    # ------------------------------------------------------------------
    # Publish
    async def publish(self, user_id: int, display_name: str) -> PublishResult:
        """Post the scrim, open its thread, store it and alert subscribers.

        If posting fails the session is kept so the user can retry. Once the
        scrim is stored the session is gone, whatever happens to the alerts.
        """
        session = self.sessions.get(user_id)
        if session is None or session.has_server is None:
            raise SessionExpiredError()
        channel_id = self.store.scrim_channel_id(self.default_channel_id)
        if channel_id is None:
            raise ChannelNotConfiguredError()

        draft = Scrim(
            id=0,
            message_id=0,
            team_name=session.team_name,
            division=session.division,
            scheduled_date=session.scheduled_date,
            scheduled_time=session.scheduled_time,
            maps=MAP_SEPARATOR.join(session.maps),
            has_server=session.has_server,
            owner_id=user_id,
        )
        message_id = await self.messenger.post(
            channel_id,
            embed=embeds.scrim_post(draft, display_name),
            components=embeds.posting_buttons(),
        )
        try:
            thread_id = await self.messenger.start_thread(
                channel_id, message_id, f"{draft.team_name} - {draft.scheduled_date}"
            )
        except Exception:
            log.exception("Could not open thread for message %s; removing post", message_id)
            await self._discard_artifacts(channel_id, message_id, None)
            raise
        try:
            self.store.create_scrim(
                message_id=message_id,
                thread_id=thread_id,
                channel_id=channel_id,
                team_name=draft.team_name,
                division=draft.division,
                scheduled_date=draft.scheduled_date,
                scheduled_time=draft.scheduled_time,
                maps=draft.maps,
                has_server=draft.has_server,
                owner_id=user_id,
            )
            scrim = self.store.scrims[message_id]
            log.info("User %s published scrim #%s", user_id, scrim.id)
        except Exception:
            log.exception("Could not store scrim for message %s; removing post", message_id)
            await self._discard_artifacts(channel_id, message_id, thread_id)
            raise

        report: BroadcastReport | None = None
        try:
            try:
                await self.messenger.send(
                    thread_id,
                    f"🎮 **Scrim Discussion Thread**\n\nTeam **{scrim.team_name}** is looking for a scrim!\n\n"
                    "Share your Steam profiles and coordinate the match details here. Good luck! 🍀",
                )
            except MessagingError as exc:
                log.warning("Could not post intro to thread %s: %s", thread_id, exc)
            try:
                report = await self.notifier.broadcast(scrim)
            except Exception:
                log.exception("Alert broadcast for scrim #%s failed", scrim.id)
        finally:
            self.sessions.remove(user_id)
        return PublishResult(scrim, channel_id, thread_id, report)

    async def _discard_artifacts(
        self, channel_id: int, message_id: int, thread_id: int | None
    ) -> None:
        try:
            if thread_id is not None:
                await self.messenger.delete_thread(thread_id)
            await self.messenger.delete_message(channel_id, message_id)
        except Exception:
            log.exception("Could not remove orphaned post %s", message_id)
