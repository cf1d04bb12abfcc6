"""Best-effort parsing of the free-text scrim date and time.

Users type the date and time however they like (the form only suggests
``29/08/2025`` and ``7:00 PM ACDT``). Anything this module cannot make sense
of yields ``None`` so callers fall back to age-based rules instead of
guessing.
"""

from __future__ import annotations

import datetime
import re

_DATE_FORMATS = ("%d/%m/%Y", "%d/%m/%y", "%Y-%m-%d", "%d-%m-%Y", "%d.%m.%Y")
_TIME_FORMATS = ("%I:%M %p", "%I:%M%p", "%I %p", "%I%p", "%H:%M")

# Offsets in minutes from UTC
_ZONES = {
    "UTC": 0,
    "GMT": 0,
    "BST": 60,
    "CET": 60,
    "CEST": 120,
    "AWST": 480,
    "ACST": 570,
    "ACDT": 630,
    "AEST": 600,
    "AEDT": 660,
    "NZST": 720,
    "NZDT": 780,
    "EST": -300,
    "EDT": -240,
    "CST": -360,
    "CDT": -300,
    "MST": -420,
    "MDT": -360,
    "PST": -480,
    "PDT": -420,
}

_ZONE_RE = re.compile(r"\s+\(?([A-Za-z]{2,5})\)?\s*$")


def _split_zone(text: str) -> tuple[str, datetime.tzinfo]:
    match = _ZONE_RE.search(text)
    if match:
        name = match.group(1).upper()
        if name in _ZONES:
            offset = datetime.timedelta(minutes=_ZONES[name])
            return text[: match.start()].strip(), datetime.timezone(offset, name)
        if name not in ("AM", "PM"):
            # unknown zone label
            return text[: match.start()].strip(), datetime.UTC
    return text.strip(), datetime.UTC


def _parse_date(text: str) -> datetime.date | None:
    for fmt in _DATE_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _parse_time(text: str) -> datetime.time | None:
    normalised = re.sub(r"\s+", " ", text.replace(".", "")).upper()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.datetime.strptime(normalised, fmt).time()
        except ValueError:
            continue
    return None


def parse_schedule(date_text: str, time_text: str) -> datetime.datetime | None:
    """Return the aware datetime described by ``date_text`` and ``time_text``.

    A trailing timezone abbreviation on the time is honoured when known;
    otherwise the time is read as UTC.
    """
    day = _parse_date(date_text.strip())
    if day is None:
        return None
    clock, tz = _split_zone(time_text)
    moment = _parse_time(clock)
    if moment is None:
        return None
    return datetime.datetime.combine(day, moment, tzinfo=tz)
