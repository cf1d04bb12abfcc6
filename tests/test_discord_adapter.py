"""Tests for the :mod:`scrim_bot.adapters.discord` module."""

import asyncio
import json
from typing import Any

import httpx
import pytest

from scrim_bot.adapters.discord import DiscordAdapter
from scrim_bot.errors import MessagingError, RecipientUnreachableError


def run(coro: Any) -> Any:
    """Run an async coroutine synchronously for tests."""
    return asyncio.run(coro)


def make_adapter(handler) -> DiscordAdapter:
    transport = httpx.MockTransport(handler)
    return DiscordAdapter("TOKEN", client=httpx.AsyncClient(transport=transport))


def test_post_sends_embed_and_components() -> None:
    """``post`` should send the payload and return the new message id."""
    captured: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, json={"id": "123"})

    adapter = make_adapter(handler)
    message_id = run(adapter.post(55, embed={"title": "t"}, components=[{"type": 1}]))

    request = captured["request"]
    assert message_id == 123
    assert request.headers["Authorization"] == "Bot TOKEN"
    assert request.url.path.endswith("/channels/55/messages")
    body = json.loads(request.content)
    assert body == {"embeds": [{"title": "t"}], "components": [{"type": 1}]}


def test_start_thread_returns_id() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/channels/1/messages/2/threads")
        assert json.loads(request.content)["name"] == "Alpha - 29/08/2025"
        return httpx.Response(201, json={"id": "555"})

    adapter = make_adapter(handler)
    assert run(adapter.start_thread(1, 2, "Alpha - 29/08/2025")) == 555


@pytest.mark.parametrize("status, expected", [(204, True), (404, False)])
def test_delete_message_reports_missing(status, expected) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        assert request.url.path.endswith("/channels/1/messages/2")
        return httpx.Response(status, json={"code": 10008} if status == 404 else None)

    adapter = make_adapter(handler)
    assert run(adapter.delete_message(1, 2)) is expected


def test_delete_thread_reports_missing() -> None:
    adapter = make_adapter(lambda request: httpx.Response(404, json={"code": 10003}))
    assert run(adapter.delete_thread(9)) is False


def test_archive_thread_patches_channel() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PATCH"
        assert request.url.path.endswith("/channels/9")
        assert json.loads(request.content) == {"archived": True}
        return httpx.Response(200, json={"id": "9"})

    adapter = make_adapter(handler)
    assert run(adapter.archive_thread(9)) is True


def test_server_errors_raise_messaging_error() -> None:
    adapter = make_adapter(lambda request: httpx.Response(500, text="oops"))
    with pytest.raises(MessagingError):
        run(adapter.delete_message(1, 2))


def test_rate_limit_is_retried() -> None:
    responses = [
        httpx.Response(429, json={"retry_after": 0.01}),
        httpx.Response(204),
    ]

    adapter = make_adapter(lambda request: responses.pop(0))
    assert run(adapter.delete_message(1, 2)) is True
    assert responses == []


def test_send_direct_opens_dm_channel() -> None:
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path.endswith("/users/@me/channels"):
            assert json.loads(request.content) == {"recipient_id": "42"}
            return httpx.Response(200, json={"id": "900"})
        return httpx.Response(200, json={"id": "901"})

    adapter = make_adapter(handler)
    run(adapter.send_direct(42, embed={"title": "hi"}))
    assert paths[-1].endswith("/channels/900/messages")


def test_send_direct_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/users/@me/channels"):
            return httpx.Response(200, json={"id": "900"})
        return httpx.Response(403, json={"code": 50007})

    adapter = make_adapter(handler)
    with pytest.raises(RecipientUnreachableError):
        run(adapter.send_direct(42, "hello"))
    run(adapter.close())
