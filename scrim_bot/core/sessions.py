"""In-memory working state for users part-way through the scrim wizard."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum


class WizardStep(str, Enum):
    ENTRY = "entry"
    BASIC_INFO = "basic_info"
    MAP_SELECT = "map_select"
    SERVER_SELECT = "server_select"
    PUBLISH = "publish"


@dataclass
class WizardSession:
    user_id: int
    team_name: str = ""
    division: str = ""
    scheduled_date: str = ""
    scheduled_time: str = ""
    maps: list[str] = field(default_factory=list)
    has_server: bool | None = None
    publishing: bool = False
    step: WizardStep = WizardStep.MAP_SELECT
    touched_at: float = field(default_factory=time.monotonic)


class SessionStore:
    """One session per user; a new session always replaces the previous one.

    Sessions are volatile and vanish with the process. discord.py runs
    component callbacks as concurrent tasks, so steps that await must mark
    the session themselves (see ``WizardSession.publishing``).
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._sessions: dict[int, WizardSession] = {}
        self._clock = clock

    def put(self, session: WizardSession) -> WizardSession:
        session.touched_at = self._clock()
        self._sessions[session.user_id] = session
        return session

    def get(self, user_id: int) -> WizardSession | None:
        return self._sessions.get(user_id)

    def update(
        self, user_id: int, mutate: Callable[[WizardSession], None]
    ) -> WizardSession | None:
        """Apply ``mutate`` to the user's session; ``None`` if there is none."""
        session = self._sessions.get(user_id)
        if session is None:
            return None
        mutate(session)
        session.touched_at = self._clock()
        return session

    def remove(self, user_id: int) -> WizardSession | None:
        return self._sessions.pop(user_id, None)

    def sweep(self, max_age: float) -> int:
        """Drop sessions untouched for more than ``max_age`` seconds."""
        cutoff = self._clock() - max_age
        stale = [uid for uid, s in self._sessions.items() if s.touched_at < cutoff]
        for uid in stale:
            del self._sessions[uid]
        return len(stale)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions
