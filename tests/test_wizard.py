import asyncio

import pytest

from conftest import CHANNEL_ID
from scrim_bot.core.sessions import WizardStep
from scrim_bot.core.wizard import chunk_maps
from scrim_bot.data.models import ScrimStatus
from scrim_bot.errors import (
    ChannelNotConfiguredError,
    EmptyCatalogError,
    InputValidationError,
    MessagingError,
    SessionExpiredError,
)


def run_to_server_select(wizard, user_id=1, team="Alpha"):
    wizard.entry(user_id)
    wizard.submit_basic_info(user_id, team, "Premier", "29/08/2025", "7:00 PM ACDT")
    wizard.select_maps(user_id, ["Mirage", "Dust2"])


def test_full_wizard_publishes_scrim(wizard, store, sessions, messenger):
    assert wizard.entry(1) is None
    chunks = wizard.submit_basic_info(1, "Alpha", "Premier", "29/08/2025", "7:00 PM ACDT")
    assert chunks[0].options == tuple(store.list_maps())
    wizard.select_maps(1, ["Mirage", "Dust2"])
    assert sessions.get(1) is not None

    result = asyncio.run(wizard.choose_server(1, True, "Alice"))

    scrims = store.list_active()
    assert len(scrims) == 1
    scrim = scrims[0]
    assert scrim.status is ScrimStatus.ACTIVE
    assert scrim.maps == "Mirage, Dust2"
    assert scrim.has_server is True
    assert scrim.owner_id == 1
    assert scrim.channel_id == CHANNEL_ID
    assert result.scrim.message_id == scrim.message_id
    assert scrim.thread_id == result.thread_id
    assert messenger.threads[result.thread_id][2] == "Alpha - 29/08/2025"
    channel_id, embed, components = messenger.posts[scrim.message_id]
    assert channel_id == CHANNEL_ID
    assert embed["footer"]["text"] == "Requested by Alice"
    assert [b["custom_id"] for b in components[0]["components"]] == [
        "show_interest", "scrim_filled", "cancel_scrim",
    ]
    assert messenger.sent[0][0] == result.thread_id
    assert sessions.get(1) is None


def test_second_entry_discards_first_session(wizard, sessions):
    run_to_server_select(wizard)
    wizard.entry(1)
    assert sessions.get(1) is None
    wizard.submit_basic_info(1, "Bravo", "Main", "30/08/2025", "8:00 PM")
    session = sessions.get(1)
    assert (session.team_name, session.division) == ("Bravo", "Main")
    assert session.maps == []
    assert session.has_server is None


def test_profile_shortcut_only_prefills(wizard, store, sessions):
    store.update_profile(1, "Alpha", "Premier")
    assert wizard.entry(1).team_name == "Alpha"
    defaults = wizard.basic_info_defaults(1, use_profile=True)
    assert (defaults.team_name, defaults.division) == ("Alpha", "Premier")
    fresh = wizard.basic_info_defaults(1, use_profile=False)
    assert (fresh.team_name, fresh.division) == ("", "")
    assert sessions.get(1) is None


@pytest.mark.parametrize(
    "fields",
    [
        ("", "Premier", "29/08/2025", "7:00 PM"),
        ("A" * 51, "Premier", "29/08/2025", "7:00 PM"),
        ("Alpha", "  ", "29/08/2025", "7:00 PM"),
        ("Alpha", "Premier", "29/08/2025", ""),
    ],
)
def test_invalid_basic_info_leaves_session_untouched(wizard, sessions, fields):
    run_to_server_select(wizard)
    with pytest.raises(InputValidationError):
        wizard.submit_basic_info(1, *fields)
    session = sessions.get(1)
    assert session.team_name == "Alpha"
    assert session.step is WizardStep.SERVER_SELECT


def test_empty_catalog_aborts_without_scrim(wizard, store, sessions):
    for name in list(store.maps):
        store.remove_map(name)
    with pytest.raises(EmptyCatalogError):
        wizard.submit_basic_info(1, "Alpha", "Premier", "29/08/2025", "7:00 PM")
    assert store.list_active() == []
    assert sessions.get(1) is not None


def test_steps_without_session_report_expired(wizard):
    with pytest.raises(SessionExpiredError):
        wizard.select_maps(1, ["Mirage"])
    with pytest.raises(SessionExpiredError):
        asyncio.run(wizard.choose_server(1, True, "Alice"))


def test_server_choice_before_maps_is_rejected(wizard, store):
    wizard.submit_basic_info(1, "Alpha", "Premier", "29/08/2025", "7:00 PM")
    with pytest.raises(InputValidationError):
        asyncio.run(wizard.choose_server(1, True, "Alice"))
    assert store.list_active() == []


def test_map_selection_is_deduplicated_and_ordered(wizard, sessions):
    wizard.submit_basic_info(1, "Alpha", "Premier", "29/08/2025", "7:00 PM")
    wizard.select_maps(1, ["Nuke", "Mirage", "Nuke"])
    assert sessions.get(1).maps == ["Nuke", "Mirage"]
    with pytest.raises(InputValidationError):
        wizard.select_maps(1, [])


def test_sessions_of_other_users_are_untouched(wizard, sessions):
    run_to_server_select(wizard, user_id=1)
    run_to_server_select(wizard, user_id=2, team="Bravo")
    asyncio.run(wizard.choose_server(1, False, "Alice"))
    assert sessions.get(1) is None
    assert sessions.get(2).team_name == "Bravo"


def test_publish_drops_session_even_if_alerts_fail(wizard, store, sessions, messenger):
    store.set_alert_preference(2, True)
    store.set_alert_preference(3, True)
    messenger.unreachable = {2, 3}
    run_to_server_select(wizard)
    result = asyncio.run(wizard.choose_server(1, True, "Alice"))
    assert result.broadcast.failed == 2
    assert sessions.get(1) is None
    assert len(store.list_active()) == 1


def test_publish_drops_session_when_broadcast_raises(wizard, store, sessions, notifier):
    async def broken(scrim):
        raise RuntimeError("boom")

    notifier.broadcast = broken
    run_to_server_select(wizard)
    result = asyncio.run(wizard.choose_server(1, True, "Alice"))
    assert result.broadcast is None
    assert sessions.get(1) is None
    assert len(store.list_active()) == 1


def test_failed_post_keeps_session_for_retry(wizard, store, sessions, messenger):
    run_to_server_select(wizard)
    messenger.fail_posts = True
    with pytest.raises(MessagingError):
        asyncio.run(wizard.choose_server(1, True, "Alice"))
    assert sessions.get(1) is not None
    assert store.list_active() == []

    messenger.fail_posts = False
    asyncio.run(wizard.choose_server(1, True, "Alice"))
    assert sessions.get(1) is None
    assert len(store.list_active()) == 1


def test_publish_requires_channel(store, sessions, messenger, notifier):
    from scrim_bot.core.wizard import ScrimWizard

    wizard = ScrimWizard(store, sessions, messenger, notifier, default_channel_id=None)
    run_to_server_select(wizard)
    with pytest.raises(ChannelNotConfiguredError):
        asyncio.run(wizard.choose_server(1, True, "Alice"))
    assert messenger.posts == {}

    store.set_setting("scrim_channel_id", 900)
    result = asyncio.run(wizard.choose_server(1, True, "Alice"))
    assert result.channel_id == 900


def test_chunk_maps_respects_widget_limits():
    catalog = [f"Map{i:02d}" for i in range(30)]
    chunks = chunk_maps(catalog)
    assert [len(c.options) for c in chunks] == [25, 5]
    assert [c.max_values for c in chunks] == [10, 5]
    assert [c.index for c in chunks] == [0, 1]
    assert chunk_maps([]) == []


def test_thread_intro_failure_still_alerts_subscribers(wizard, store, sessions, messenger):
    store.set_alert_preference(2, True)
    store.set_alert_preference(3, True)
    messenger.fail_sends = True
    run_to_server_select(wizard)

    result = asyncio.run(wizard.choose_server(1, True, "Alice"))

    assert result.broadcast.sent == 2
    assert [uid for uid, _ in messenger.direct] == [2, 3]
    assert sessions.get(1) is None


def test_double_click_on_server_choice_publishes_once(wizard, store, sessions, messenger):
    run_to_server_select(wizard)

    async def both():
        return await asyncio.gather(
            wizard.choose_server(1, True, "Alice"),
            wizard.choose_server(1, False, "Alice"),
            return_exceptions=True,
        )

    first, second = asyncio.run(both())
    assert first.scrim.has_server is True
    assert isinstance(second, InputValidationError)
    assert len(store.list_active()) == 1
    assert len(messenger.posts) == 1
    assert sessions.get(1) is None


def test_failed_persist_removes_post_and_allows_retry(wizard, store, sessions, messenger, monkeypatch):
    run_to_server_select(wizard)

    def broken_save():
        raise OSError("disk full")

    monkeypatch.setattr(store, "save", broken_save)
    with pytest.raises(OSError):
        asyncio.run(wizard.choose_server(1, True, "Alice"))
    assert store.list_active() == []
    assert messenger.posts == {}
    assert messenger.threads == {}
    assert sessions.get(1).publishing is False

    monkeypatch.undo()
    asyncio.run(wizard.choose_server(1, True, "Alice"))
    assert len(store.list_active()) == 1


def test_oversized_catalog_is_capped_with_warning(wizard, store, caplog):
    for i in range(130):
        store.add_map(f"Extra{i:03d}")
    with caplog.at_level("WARNING", logger="scrim.wizard"):
        chunks = wizard.submit_basic_info(1, "Alpha", "Premier", "29/08/2025", "7:00 PM")
    assert len(chunks) == 5
    assert sum(len(c.options) for c in chunks) == 125
    assert "only the first 125" in caplog.text
