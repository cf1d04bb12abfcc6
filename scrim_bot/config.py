import os
from dataclasses import dataclass, field


def _int_list(raw: str) -> frozenset[int]:
    return frozenset(int(part) for part in raw.split(",") if part.strip().isdigit())


def _float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    token: str
    data_path: str = "scrim_data.json"
    # Fallback destination; /setup channel overrides it at runtime
    scrim_channel_id: int | None = None
    admin_ids: frozenset[int] = field(default_factory=frozenset)
    cleanup_interval_hours: float = 6.0
    cleanup_warmup_seconds: float = 30.0
    session_ttl_minutes: float = 60.0


def load_settings() -> Settings:
    token = os.getenv("DISCORD_BOT_TOKEN", "").strip()
    channel = os.getenv("SCRIM_CHANNEL_ID", "").strip()
    return Settings(
        token=token or "",
        data_path=os.getenv("SCRIM_DATA_PATH", "").strip() or "scrim_data.json",
        scrim_channel_id=int(channel) if channel.isdigit() else None,
        admin_ids=_int_list(os.getenv("ADMIN_IDS", "")),
        cleanup_interval_hours=_float("CLEANUP_INTERVAL_HOURS", 6.0),
        cleanup_warmup_seconds=_float("CLEANUP_WARMUP_SECONDS", 30.0),
        session_ttl_minutes=_float("SESSION_TTL_MINUTES", 60.0),
    )
