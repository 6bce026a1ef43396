"""Unit tests for the Telegram webhook routes."""

import pytest
from unittest.mock import AsyncMock, patch
from httpx import AsyncClient, ASGITransport

from brainbot.adapters.web.server import app
from brainbot.config import CONFIG
from brainbot.ports.inbound import TextMessage

UPDATE = {
    "update_id": 1,
    "message": {"message_id": 5, "chat": {"id": 42}, "date": 0, "text": "buy milk"},
}


@pytest.fixture
def transport():
    return ASGITransport(app=app)


@pytest.fixture(autouse=True)
def no_secret(monkeypatch):
    monkeypatch.setitem(CONFIG, "telegram_webhook_secret", "")


@pytest.fixture
def secret(monkeypatch, no_secret):
    monkeypatch.setitem(CONFIG, "telegram_webhook_secret", "s3cret")


class TestWebhook:
    @pytest.mark.asyncio
    async def test_update_routed(self, transport):
        with patch("brainbot.adapters.web.telegram_routes.update_router") as mock:
            mock.route = AsyncMock()
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.post("/telegram/webhook", json=UPDATE)
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
        mock.route.assert_awaited_once_with(TextMessage(chat_id=42, text="buy milk", entities=[]))

    @pytest.mark.asyncio
    async def test_malformed_body_acknowledged(self, transport):
        with patch("brainbot.adapters.web.telegram_routes.update_router") as mock:
            mock.route = AsyncMock()
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.post("/telegram/webhook", content=b"{not json")
                resp2 = await ac.post("/telegram/webhook", json={"message": {}})
        assert resp.status_code == 200
        assert resp2.status_code == 200
        mock.route.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_secret_mismatch_rejected(self, transport, secret):
        with patch("brainbot.adapters.web.telegram_routes.update_router") as mock:
            mock.route = AsyncMock()
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.post(
                    "/telegram/webhook", json=UPDATE,
                    headers={"X-Telegram-Bot-Api-Secret-Token": "wrong"},
                )
        assert resp.status_code == 401
        mock.route.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_secret_match_accepted(self, transport, secret):
        with patch("brainbot.adapters.web.telegram_routes.update_router") as mock:
            mock.route = AsyncMock()
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.post(
                    "/telegram/webhook", json=UPDATE,
                    headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
                )
        assert resp.status_code == 200
        mock.route.assert_awaited_once()


class TestWebhookAdmin:
    @pytest.mark.asyncio
    async def test_unconfigured(self, transport):
        with patch("brainbot.adapters.web.telegram_routes.telegram_client") as mock:
            mock.is_configured = False
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.get("/telegram/webhook?action=set")
        assert resp.status_code == 503

    @pytest.mark.asyncio
    async def test_set(self, transport):
        with patch("brainbot.adapters.web.telegram_routes.telegram_client") as mock:
            mock.is_configured = True
            mock.set_webhook = AsyncMock(return_value={"ok": True, "result": True})
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.get("/telegram/webhook?action=set")
        assert resp.status_code == 200
        assert resp.json()["url"].endswith("/telegram/webhook")
        mock.set_webhook.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_commands(self, transport):
        with patch("brainbot.adapters.web.telegram_routes.telegram_client") as mock:
            mock.is_configured = True
            mock.set_my_commands = AsyncMock(return_value={"ok": True, "result": True})
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.get("/telegram/webhook?action=commands")
        assert resp.status_code == 200
        commands = mock.set_my_commands.await_args.args[0]
        assert {c["command"] for c in commands} >= {"capture", "remind", "done", "stats"}

    @pytest.mark.asyncio
    async def test_api_failure(self, transport):
        with patch("brainbot.adapters.web.telegram_routes.telegram_client") as mock:
            mock.is_configured = True
            mock.delete_webhook = AsyncMock(side_effect=RuntimeError("Unauthorized"))
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.get("/telegram/webhook?action=delete")
        assert resp.status_code == 502

    @pytest.mark.asyncio
    async def test_unknown_action(self, transport):
        with patch("brainbot.adapters.web.telegram_routes.telegram_client") as mock:
            mock.is_configured = True
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.get("/telegram/webhook?action=explode")
        assert resp.status_code == 400


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, transport):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
