"""JSON-backed persistence for scrims and the tables around them.

Data is persisted to a single JSON file on every mutation which keeps the
implementation simple while providing durability across process restarts.
Scrim records are never deleted; retiring one only changes its status.
"""

from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Any

from ..core.schedule import parse_schedule
from ..errors import DuplicateScrimError, InputValidationError
from .models import AlertPreference, Profile, Scrim, ScrimStatus, utcnow

log = logging.getLogger("scrim.store")

STALE_AFTER = datetime.timedelta(days=7)
DEFAULT_MAPS = (
    "Mirage",
    "Dust2",
    "Inferno",
    "Cache",
    "Overpass",
    "Vertigo",
    "Ancient",
    "Anubis",
    "Nuke",
)
SCRIM_CHANNEL_KEY = "scrim_channel_id"


class ScrimStore:
    def __init__(self, path: str | Path = "scrim_data.json") -> None:
        self.path = Path(path)
        self.scrims: dict[int, Scrim] = {}  # keyed by message id
        self.maps: list[str] = []
        self.profiles: dict[int, Profile] = {}
        self.alerts: dict[int, AlertPreference] = {}
        self.settings: dict[str, Any] = {}
        self._next_id = 1
        if self.path.exists():
            self._load()
        else:
            self.maps = list(DEFAULT_MAPS)
            self.save()

    # ------------------------------------------------------------------
    # Persistence
    def _load(self) -> None:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        for item in data.get("scrims", []):
            scrim = Scrim(**item)
            self.scrims[scrim.message_id] = scrim
        self.maps = list(data.get("maps", []))
        self.profiles = {
            p["user_id"]: Profile(**p) for p in data.get("profiles", [])
        }
        self.alerts = {a["user_id"]: AlertPreference(**a) for a in data.get("alerts", [])}
        self.settings = dict(data.get("settings", {}))
        self._next_id = data.get(
            "next_id", max((s.id for s in self.scrims.values()), default=0) + 1
        )

    def save(self) -> None:
        data = {
            "next_id": self._next_id,
            "scrims": [s.model_dump(mode="json") for s in self.scrims.values()],
            "maps": self.maps,
            "profiles": [p.model_dump(mode="json") for p in self.profiles.values()],
            "alerts": [a.model_dump(mode="json") for a in self.alerts.values()],
            "settings": self.settings,
        }
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    # ------------------------------------------------------------------
    # Scrims
    def create_scrim(
        self,
        *,
        message_id: int,
        thread_id: int | None,
        channel_id: int | None,
        team_name: str,
        division: str,
        scheduled_date: str,
        scheduled_time: str,
        maps: str,
        has_server: bool,
        owner_id: int,
        created_at: datetime.datetime | None = None,
    ) -> int:
        if message_id in self.scrims:
            raise DuplicateScrimError(message_id)
        scrim = Scrim(
            id=self._next_id,
            message_id=message_id,
            thread_id=thread_id,
            channel_id=channel_id,
            team_name=team_name,
            division=division,
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            maps=maps,
            has_server=has_server,
            owner_id=owner_id,
            created_at=created_at or utcnow(),
        )
        self.scrims[message_id] = scrim
        self._next_id += 1
        try:
            self.save()
        except OSError:
            # keep memory in line with the file
            del self.scrims[message_id]
            self._next_id -= 1
            raise
        log.info("Stored scrim #%s for %s (message %s)", scrim.id, team_name, message_id)
        return scrim.id

    def get_scrim(self, message_id: int) -> Scrim | None:
        return self.scrims.get(message_id)

    def get_active(self, message_id: int) -> Scrim | None:
        scrim = self.scrims.get(message_id)
        if scrim and scrim.status is ScrimStatus.ACTIVE:
            return scrim
        return None

    def list_active(self) -> list[Scrim]:
        """Return active scrims, newest first."""
        active = [s for s in self.scrims.values() if s.status is ScrimStatus.ACTIVE]
        return sorted(active, key=lambda s: s.created_at, reverse=True)

    def list_expired(self, now: datetime.datetime | None = None) -> list[Scrim]:
        """Active scrims older than a week or whose scheduled time has passed.

        The scheduled time is free text; when it cannot be parsed only the
        age rule applies.
        """
        now = now or utcnow()
        cutoff = now - STALE_AFTER
        expired = []
        for scrim in self.scrims.values():
            if scrim.status is not ScrimStatus.ACTIVE:
                continue
            if scrim.created_at < cutoff:
                expired.append(scrim)
                continue
            scheduled = parse_schedule(scrim.scheduled_date, scrim.scheduled_time)
            if scheduled is not None and scheduled < now:
                expired.append(scrim)
        return sorted(expired, key=lambda s: s.created_at)

    def set_status(self, message_id: int, status: ScrimStatus) -> int:
        """Move an active scrim to ``status``; return the number of rows changed."""
        scrim = self.scrims.get(message_id)
        if scrim is None or scrim.status is not ScrimStatus.ACTIVE:
            return 0
        if not status.is_terminal:
            return 0
        scrim.status = status
        self.save()
        log.info("Scrim #%s is now %s", scrim.id, status.value)
        return 1

    # ------------------------------------------------------------------
    # Map catalog
    def list_maps(self) -> list[str]:
        return sorted(self.maps, key=str.lower)

    def add_map(self, name: str) -> None:
        name = name.strip()
        if len(name) < 2 or len(name) > 30:
            raise InputValidationError("Map name must be between 2 and 30 characters.")
        if any(m.lower() == name.lower() for m in self.maps):
            raise InputValidationError(f'Map "{name}" already exists in the list.')
        self.maps.append(name)
        self.save()

    def remove_map(self, name: str) -> bool:
        name = name.strip()
        for existing in self.maps:
            if existing.lower() == name.lower():
                self.maps.remove(existing)
                self.save()
                return True
        return False

    # ------------------------------------------------------------------
    # Profiles
    def get_profile(self, user_id: int) -> Profile | None:
        return self.profiles.get(user_id)

    def update_profile(self, user_id: int, team_name: str, division: str) -> Profile:
        team_name = team_name.strip()
        division = division.strip()
        if len(team_name) < 2 or len(team_name) > 50:
            raise InputValidationError("Team name must be between 2 and 50 characters.")
        if len(division) < 2 or len(division) > 30:
            raise InputValidationError("Division must be between 2 and 30 characters.")
        existing = self.profiles.get(user_id)
        profile = Profile(
            user_id=user_id,
            team_name=team_name,
            division=division,
            created_at=existing.created_at if existing else utcnow(),
            updated_at=utcnow(),
        )
        self.profiles[user_id] = profile
        self.save()
        return profile

    # ------------------------------------------------------------------
    # Alert preferences
    def get_alert_preference(self, user_id: int) -> AlertPreference | None:
        return self.alerts.get(user_id)

    def set_alert_preference(self, user_id: int, enabled: bool) -> None:
        self.alerts[user_id] = AlertPreference(user_id=user_id, enabled=enabled)
        self.save()

    def alert_subscribers(self) -> list[int]:
        return [uid for uid, pref in self.alerts.items() if pref.enabled]

    # ------------------------------------------------------------------
    # Runtime settings
    def get_setting(self, key: str, default: Any = None) -> Any:
        return self.settings.get(key, default)

    def set_setting(self, key: str, value: Any) -> None:
        self.settings[key] = value
        self.save()

    def scrim_channel_id(self, fallback: int | None = None) -> int | None:
        value = self.settings.get(SCRIM_CHANNEL_KEY)
        return int(value) if value is not None else fallback
