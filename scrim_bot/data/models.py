"""Persisted records for the scrim bot.

The models are implemented using :mod:`pydantic` so that they provide
runtime validation and convenient serialisation to and from the JSON
document kept by :class:`~scrim_bot.data.store.ScrimStore`.
"""

from __future__ import annotations

import datetime
from datetime import UTC
from enum import Enum

from pydantic import BaseModel, Field

MAP_SEPARATOR = ", "


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(tz=UTC)


class ScrimStatus(str, Enum):
    ACTIVE = "active"
    FILLED = "filled"
    CANCELLED = "cancelled"
    CLEANED = "cleaned"
    AUTO_CLEANED = "auto_cleaned"

    @property
    def is_terminal(self) -> bool:
        return self is not ScrimStatus.ACTIVE


class Scrim(BaseModel):
    """A posted match request.

    Attributes
    ----------
    message_id:
        Identifier of the posted message. Unique and never changed once set.
    thread_id:
        Discussion thread opened on the posting, if any.
    channel_id:
        Channel the posting was sent to. Older records may lack it, in which
        case the configured scrim channel is assumed.
    maps:
        Ordered map names joined with ``", "``.
    status:
        ``active`` until it moves to exactly one terminal status.

    """

    id: int
    message_id: int
    thread_id: int | None = None
    channel_id: int | None = None
    team_name: str
    division: str
    scheduled_date: str
    scheduled_time: str
    maps: str
    has_server: bool
    owner_id: int
    created_at: datetime.datetime = Field(default_factory=utcnow)
    status: ScrimStatus = ScrimStatus.ACTIVE

    @property
    def map_list(self) -> list[str]:
        return [m for m in self.maps.split(MAP_SEPARATOR) if m]

    @property
    def when(self) -> str:
        return f"{self.scheduled_date}, {self.scheduled_time}"


class Profile(BaseModel):
    """Saved team details used to pre-fill the scrim wizard."""

    user_id: int
    team_name: str
    division: str
    created_at: datetime.datetime = Field(default_factory=utcnow)
    updated_at: datetime.datetime = Field(default_factory=utcnow)


class AlertPreference(BaseModel):
    user_id: int
    enabled: bool
    updated_at: datetime.datetime = Field(default_factory=utcnow)
