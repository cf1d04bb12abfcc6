"""Shared test fixtures and import path setup."""

import asyncio
import itertools
import os
import sys

import pytest

# Add the repository root (the directory containing this file) to ``sys.path``
# so the tests import the working tree even without an editable install.
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from scrim_bot.adapters.base import Adapter  # noqa: E402
from scrim_bot.core.notifier import Notifier  # noqa: E402
from scrim_bot.core.reaper import ExpiryReaper  # noqa: E402
from scrim_bot.core.sessions import SessionStore  # noqa: E402
from scrim_bot.core.wizard import ScrimWizard  # noqa: E402
from scrim_bot.data.store import ScrimStore  # noqa: E402
from scrim_bot.errors import MessagingError, RecipientUnreachableError  # noqa: E402

CHANNEL_ID = 500


class FakeMessenger(Adapter):
    """In-memory stand-in for the chat platform."""

    def __init__(self):
        self._ids = itertools.count(1000)
        self.posts = {}  # message id -> (channel id, embed, components)
        self.threads = {}  # thread id -> (channel id, message id, name)
        self.sent = []  # (channel id, content)
        self.direct = []  # (user id, embed)
        self.deleted_messages = []
        self.deleted_threads = []
        self.archived = []
        self.unreachable = set()
        self.fail_posts = False
        self.fail_deletes = False
        self.fail_sends = False
        self.fail_archives = False
        self.calls = 0

    async def post(self, channel_id, content=None, *, embed=None, components=None):
        self.calls += 1
        await asyncio.sleep(0)
        if self.fail_posts:
            raise MessagingError("post failed")
        message_id = next(self._ids)
        self.posts[message_id] = (channel_id, embed, components)
        return message_id

    async def send(self, channel_id, content):
        self.calls += 1
        if self.fail_sends:
            raise MessagingError("send failed")
        self.sent.append((channel_id, content))

    async def start_thread(self, channel_id, message_id, name):
        self.calls += 1
        thread_id = next(self._ids)
        self.threads[thread_id] = (channel_id, message_id, name)
        return thread_id

    async def delete_message(self, channel_id, message_id):
        self.calls += 1
        if self.fail_deletes:
            raise MessagingError("delete failed")
        self.deleted_messages.append(message_id)
        return self.posts.pop(message_id, None) is not None

    async def delete_thread(self, thread_id):
        self.calls += 1
        if self.fail_deletes:
            raise MessagingError("delete failed")
        self.deleted_threads.append(thread_id)
        return self.threads.pop(thread_id, None) is not None

    async def archive_thread(self, thread_id):
        self.calls += 1
        if self.fail_archives:
            raise MessagingError("archive failed")
        self.archived.append(thread_id)
        return thread_id in self.threads

    async def send_direct(self, user_id, content=None, *, embed=None):
        self.calls += 1
        if user_id in self.unreachable:
            raise RecipientUnreachableError(user_id)
        self.direct.append((user_id, embed))


@pytest.fixture()
def store(tmp_path):
    return ScrimStore(path=tmp_path / "data.json")


@pytest.fixture()
def messenger():
    return FakeMessenger()


@pytest.fixture()
def notifier(store, messenger):
    return Notifier(store, messenger)


@pytest.fixture()
def sessions():
    return SessionStore()


@pytest.fixture()
def wizard(store, sessions, messenger, notifier):
    return ScrimWizard(store, sessions, messenger, notifier, default_channel_id=CHANNEL_ID)


@pytest.fixture()
def reaper(store, messenger):
    async def no_sleep(_seconds):
        return None

    return ExpiryReaper(store, messenger, default_channel_id=CHANNEL_ID, sleep=no_sleep)


@pytest.fixture()
def add_scrim(store):
    """Insert an active scrim directly into the store and return it."""

    def _add(message_id, *, owner_id=1, created_at=None, date="01/01/2999",
             time="7:00 PM", thread_id=None, channel_id=CHANNEL_ID, team="Alpha"):
        store.create_scrim(
            message_id=message_id,
            thread_id=thread_id,
            channel_id=channel_id,
            team_name=team,
            division="Premier",
            scheduled_date=date,
            scheduled_time=time,
            maps="Mirage, Dust2",
            has_server=True,
            owner_id=owner_id,
            created_at=created_at,
        )
        return store.get_scrim(message_id)

    return _add
