"""Unit tests for TelegramClient."""

import pytest
from unittest.mock import patch

from brainbot.adapters.telegram.client import (
    MAX_MESSAGE_CHARS,
    TelegramClient,
    markdown_to_html,
    to_inline_keyboard,
    truncate_message,
)
from brainbot.domain.models import Button
from brainbot.ports.outbound import ChatPort


def _mock_aiohttp_session(responses, calls):
    """Return a mock that replaces aiohttp.ClientSession.
    responses: list of JSON bodies (or raw bytes for get()), consumed in order.
    calls: list that receives (method, url, kwargs) for every request.
    """
    call_idx = 0

    class FakeResponse:
        def __init__(self, data):
            self._data = data
            self.status = 200

        async def json(self):
            return self._data

        async def read(self):
            return self._data

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    class FakeSession:
        def _next(self, method, url, kwargs):
            nonlocal call_idx
            calls.append((method, url, kwargs))
            resp = FakeResponse(responses[call_idx])
            call_idx += 1
            return resp

        def post(self, url, **kwargs):
            return self._next("POST", url, kwargs)

        def get(self, url, **kwargs):
            return self._next("GET", url, kwargs)

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    return FakeSession


@pytest.fixture
def client():
    return TelegramClient(bot_token="123:abc")


class TestHelpers:
    def test_truncate(self):
        assert truncate_message("hi") == "hi"
        long = truncate_message("x" * 5000)
        assert len(long) == MAX_MESSAGE_CHARS
        assert long.endswith("...")

    def test_inline_keyboard(self):
        kb = to_inline_keyboard([[Button("✅ Done", "done:e1"), Button("⏰", "snzp:e1")]])
        assert kb == {"inline_keyboard": [[
            {"text": "✅ Done", "callback_data": "done:e1"},
            {"text": "⏰", "callback_data": "snzp:e1"},
        ]]}

    def test_is_configured(self):
        assert TelegramClient(bot_token="t").is_configured is True
        assert TelegramClient(bot_token="").is_configured is False

    def test_implements_chat_port(self, client):
        assert isinstance(client, ChatPort)

    def test_file_url(self, client):
        assert client.file_url("voice/a.oga") == "https://api.telegram.org/file/bot123:abc/voice/a.oga"


class TestMarkdownToHtml:
    def test_bold_and_italic(self):
        assert markdown_to_html("**big** and *also* _soft_") == "<b>big</b> and <b>also</b> <i>soft</i>"

    def test_escapes_html(self):
        assert markdown_to_html("a < b & c") == "a &lt; b &amp; c"

    def test_code_untouched(self):
        assert markdown_to_html("run `x *y* <z>`") == "run <code>x *y* &lt;z&gt;</code>"

    def test_code_block(self):
        assert markdown_to_html("```python\nprint(1)\n```") == "<pre>print(1)</pre>"

    def test_heading_and_bullets(self):
        assert markdown_to_html("## Today\n- one\n* two") == "<b>Today</b>\n• one\n• two"

    def test_link(self):
        assert markdown_to_html("[docs](https://example.com)") == '<a href="https://example.com">docs</a>'

    def test_snake_case_not_italic(self):
        assert markdown_to_html("my_var_name") == "my_var_name"


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_payload(self, client):
        calls = []
        session = _mock_aiohttp_session([{"ok": True, "result": {}}], calls)
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            await client.send_message(42, "*hi*", markdown=True, buttons=[[Button("x", "done:e1")]])
        method, url, kwargs = calls[0]
        assert url == "https://api.telegram.org/bot123:abc/sendMessage"
        payload = kwargs["json"]
        assert payload["chat_id"] == 42
        assert payload["parse_mode"] == "Markdown"
        assert payload["reply_markup"]["inline_keyboard"][0][0]["callback_data"] == "done:e1"

    @pytest.mark.asyncio
    async def test_plain_has_no_parse_mode(self, client):
        calls = []
        session = _mock_aiohttp_session([{"ok": True}], calls)
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            await client.send_message(42, "plain")
        assert "parse_mode" not in calls[0][2]["json"]

    @pytest.mark.asyncio
    async def test_api_error_raises(self, client):
        session = _mock_aiohttp_session([{"ok": False, "description": "chat not found"}], [])
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            with pytest.raises(RuntimeError, match="chat not found"):
                await client.send_message(42, "hi")

    @pytest.mark.asyncio
    async def test_unparseable_markdown_resent_as_plain_text(self, client):
        calls = []
        session = _mock_aiohttp_session([
            {"ok": False, "description": "Bad Request: can't parse entities: Can't find end of the entity"},
            {"ok": True, "result": {}},
        ], calls)
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            await client.send_message(
                42, "✅ Done! *fix my_script*", markdown=True,
                buttons=[[Button("x", "done:e1")]],
            )
        assert len(calls) == 2
        retry = calls[1][2]["json"]
        assert "parse_mode" not in retry
        assert retry["text"] == "✅ Done! *fix my_script*"
        assert retry["reply_markup"]["inline_keyboard"][0][0]["callback_data"] == "done:e1"

    @pytest.mark.asyncio
    async def test_other_markdown_errors_not_retried(self, client):
        calls = []
        session = _mock_aiohttp_session([{"ok": False, "description": "chat not found"}], calls)
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            with pytest.raises(RuntimeError, match="chat not found"):
                await client.send_message(42, "*hi*", markdown=True)
        assert len(calls) == 1


class TestSendFormatted:
    @pytest.mark.asyncio
    async def test_html(self, client):
        calls = []
        session = _mock_aiohttp_session([{"ok": True}], calls)
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            await client.send_formatted(42, "**Plan**")
        payload = calls[0][2]["json"]
        assert payload["parse_mode"] == "HTML"
        assert payload["text"] == "<b>Plan</b>"

    @pytest.mark.asyncio
    async def test_falls_back_to_plain_text(self, client):
        calls = []
        session = _mock_aiohttp_session([
            {"ok": False, "description": "can't parse entities"},
            {"ok": True},
        ], calls)
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            await client.send_formatted(42, "**Plan**")
        assert len(calls) == 2
        assert calls[1][2]["json"]["text"] == "**Plan**"
        assert "parse_mode" not in calls[1][2]["json"]


class TestOtherMethods:
    @pytest.mark.asyncio
    async def test_answer_callback(self, client):
        calls = []
        session = _mock_aiohttp_session([{"ok": True}], calls)
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            await client.answer_callback("cb-1", "Done")
        assert calls[0][1].endswith("/answerCallbackQuery")
        assert calls[0][2]["json"] == {"callback_query_id": "cb-1", "text": "Done"}

    @pytest.mark.asyncio
    async def test_answer_inline(self, client):
        calls = []
        session = _mock_aiohttp_session([{"ok": True}], calls)
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            await client.answer_inline("q1", [], cache_time=5)
        assert calls[0][2]["json"]["cache_time"] == 5

    @pytest.mark.asyncio
    async def test_get_file_and_download(self, client):
        calls = []
        session = _mock_aiohttp_session([
            {"ok": True, "result": {"file_path": "voice/a.oga"}},
            b"OggS",
        ], calls)
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            path = await client.get_file("f1")
            data = await client.download_file(path)
        assert path == "voice/a.oga"
        assert data == b"OggS"
        assert calls[1][0] == "GET"

    @pytest.mark.asyncio
    async def test_set_webhook(self, client):
        calls = []
        session = _mock_aiohttp_session([{"ok": True, "result": True}], calls)
        with patch("brainbot.adapters.telegram.client.aiohttp.ClientSession", session):
            await client.set_webhook("https://bot.example.com/telegram/webhook", "s3cret")
        payload = calls[0][2]["json"]
        assert payload["secret_token"] == "s3cret"
        assert payload["allowed_updates"] == ["message", "callback_query", "inline_query"]
