import py_compile
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent


def test_discord_modules_compile() -> None:
    """The Discord-facing modules should at least be syntactically valid.

    They are only imported for real when the bot runs, so compiling them here
    catches syntax slips without connecting to Discord.
    """
    for relative in (
        "scrim_bot/bot.py",
        "scrim_bot/main.py",
        "scrim_bot/ui/views.py",
        "scrim_bot/ui/modals.py",
        "scrim_bot/commands/register.py",
    ):
        py_compile.compile(str(ROOT / relative), doraise=True)
