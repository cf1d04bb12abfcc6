"""Embed and component payloads in Discord's JSON shape.

They are plain dictionaries so the same payload can be posted through the
HTTP adapter or turned into a ``discord.Embed`` with ``Embed.from_dict``.
"""

from __future__ import annotations

from typing import Any

from ..data.models import Scrim, utcnow

ORANGE = 0xFF6B35
BLUE = 0x0099FF
GREEN = 0x00FF00
RED = 0xFF0000
GREY = 0x6C757D

# Discord component type and style numbers
ACTION_ROW = 1
BUTTON = 2
PRIMARY, SECONDARY, SUCCESS, DANGER = 1, 2, 3, 4


def _field(name: str, value: str, inline: bool = True) -> dict[str, Any]:
    return {"name": name, "value": value or "-", "inline": inline}


def _detail_fields(
    team_name: str, division: str, when: str, maps: str, has_server: bool
) -> list[dict[str, Any]]:
    return [
        _field("🏷️ Team", team_name),
        _field("🎯 Division", division),
        _field("📅 When", when, inline=False),
        _field("🗺️ Maps", maps),
        _field("🌐 Server", "Yes" if has_server else "No"),
    ]


def scrim_post(scrim: Scrim, requested_by: str) -> dict[str, Any]:
    return {
        "title": "📢 Scrim Request",
        "color": ORANGE,
        "fields": _detail_fields(
            scrim.team_name, scrim.division, scrim.when, scrim.maps, scrim.has_server
        ),
        "footer": {"text": f"Requested by {requested_by}"},
        "timestamp": utcnow().isoformat(),
    }


def posting_buttons() -> list[dict[str, Any]]:
    """Action row attached to every scrim post.

    The custom ids match :class:`~scrim_bot.core.notifier.PostingAction` and
    are handled by the persistent ``PostingView``.
    """
    return [
        {
            "type": ACTION_ROW,
            "components": [
                {"type": BUTTON, "style": PRIMARY, "label": "Show Interest",
                 "custom_id": "show_interest", "emoji": {"name": "🤝"}},
                {"type": BUTTON, "style": SUCCESS, "label": "Mark as Filled",
                 "custom_id": "scrim_filled", "emoji": {"name": "✅"}},
                {"type": BUTTON, "style": DANGER, "label": "Cancel",
                 "custom_id": "cancel_scrim", "emoji": {"name": "❌"}},
            ],
        }
    ]


def closed_post(original: dict[str, Any], status_title: str, color: int, note: str) -> dict[str, Any]:
    embed = dict(original)
    embed["title"] = status_title
    embed["color"] = color
    footer = (original.get("footer") or {}).get("text", "")
    embed["footer"] = {"text": f"{footer} • {note}" if footer else note}
    return embed


def alert(scrim: Scrim) -> dict[str, Any]:
    return {
        "title": "🔔 New Scrim Alert",
        "description": "A new scrim request has been posted!",
        "color": ORANGE,
        "fields": _detail_fields(
            scrim.team_name, scrim.division, scrim.when, scrim.maps, scrim.has_server
        ),
        "footer": {"text": "You can disable these alerts with /alert off"},
    }


def interest_for_owner(scrim: Scrim, interested_name: str, interested_id: int) -> dict[str, Any]:
    return {
        "title": "🤝 Someone is interested in your scrim!",
        "description": f"**{interested_name}** has shown interest in your scrim request.",
        "color": GREEN,
        "fields": [
            _field("🏷️ Your Team", scrim.team_name),
            _field("📅 Scrim Date", scrim.when),
            _field("👤 Interested User", f"{interested_name} (<@{interested_id}>)", inline=False),
            _field("💬 Next Steps", "Reach out to coordinate the match details!", inline=False),
        ],
        "timestamp": utcnow().isoformat(),
    }


def interest_confirmation(scrim: Scrim) -> dict[str, Any]:
    return {
        "title": "✅ Interest Registered",
        "description": f"You've shown interest in **{scrim.team_name}**'s scrim!",
        "color": BLUE,
        "fields": [
            _field("📅 Scrim Details", scrim.when),
            _field("🗺️ Maps", scrim.maps),
            _field(
                "💬 What's Next?",
                "The team creator has been notified and should contact you soon!",
                inline=False,
            ),
        ],
    }


def scrim_list_page(scrims: list[Scrim], page: int, per_page: int) -> dict[str, Any]:
    if not scrims:
        return {
            "title": "📋 Active Scrims",
            "description": "No active scrim requests found.\n\nUse `/scrim` to create a new scrim request!",
            "color": 0xFFA500,
        }
    pages = max(1, -(-len(scrims) // per_page))
    start = page * per_page
    items = scrims[start : start + per_page]
    fields = []
    for offset, scrim in enumerate(items, start=start + 1):
        fields.append(
            _field(
                f"{offset}. {scrim.team_name}",
                f"**Division:** {scrim.division}\n**When:** {scrim.when}\n"
                f"**Maps:** {scrim.maps}\n**Server:** {'Yes' if scrim.has_server else 'No'}\n"
                f"**Posted:** {scrim.created_at:%d/%m/%Y}",
                inline=False,
            )
        )
    return {
        "title": "📋 Active Scrim Requests",
        "description": f"Showing {len(items)} of {len(scrims)} active scrims",
        "color": BLUE,
        "fields": fields,
        "footer": {"text": f"Page {page + 1} of {pages}"},
    }
