from __future__ import annotations

import asyncio

from .adapters.discord import DiscordAdapter
from .bot import ScrimBot
from .commands.register import register_commands
from .config import load_settings
from .core.notifier import Notifier
from .core.reaper import ExpiryReaper
from .core.sessions import SessionStore
from .core.wizard import ScrimWizard
from .data.store import ScrimStore
from .logging_config import setup_logging


def main() -> int:
    log = setup_logging()
    settings = load_settings()
    if not settings.token:
        log.error(
            "DISCORD_BOT_TOKEN is not set. "
            "Export it in your environment before running."
        )
        return 2
    store = ScrimStore(path=settings.data_path)
    adapter = DiscordAdapter(settings.token)
    notifier = Notifier(store, adapter)
    wizard = ScrimWizard(
        store, SessionStore(), adapter, notifier, settings.scrim_channel_id
    )
    reaper = ExpiryReaper(store, adapter, settings.scrim_channel_id)
    bot = ScrimBot(settings, wizard, reaper)
    register_commands(bot, wizard, reaper, settings)

    async def runner():
        try:
            async with bot:
                await bot.start(settings.token)
        except KeyboardInterrupt:
            log.info("Shutting down...")
        finally:
            await adapter.close()
        return 0

    return asyncio.run(runner())


if __name__ == "__main__":
    raise SystemExit(main())
