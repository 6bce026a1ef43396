"""Telegram webhook routes."""

import hmac
import json
import sys

from fastapi import APIRouter, HTTPException, Request

from brainbot.adapters.http.app_services import AppServicesClient
from brainbot.adapters.llm.openai_adapter import OpenAIAdapter
from brainbot.adapters.storage.json_store import JsonEntryStore
from brainbot.adapters.telegram.client import TelegramClient
from brainbot.adapters.telegram.schema import TgUpdate
from brainbot.config import CONFIG
from brainbot.domain.router import UpdateRouter
from brainbot.infrastructure.rate_limit import RateLimiter

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

# Shown in the client's command menu
BOT_COMMANDS = [
    {"command": "capture", "description": "Classify and save a thought"},
    {"command": "task", "description": "Save a task"},
    {"command": "idea", "description": "Save an idea"},
    {"command": "remind", "description": "Task with a due date"},
    {"command": "done", "description": "Mark an item done"},
    {"command": "snooze", "description": "Push an item's due date"},
    {"command": "edit", "description": "Change an item's status"},
    {"command": "search", "description": "Search entries"},
    {"command": "ask", "description": "Ask your brain"},
    {"command": "digest", "description": "Daily briefing or weekly review"},
    {"command": "stats", "description": "Counts per category"},
    {"command": "clear", "description": "Reset conversation"},
    {"command": "help", "description": "Show help"},
]

telegram_router = APIRouter(prefix="/telegram", tags=["Telegram"])

telegram_client = TelegramClient()
store = JsonEntryStore(CONFIG["storage_dir"])
update_router = UpdateRouter(
    chat=telegram_client,
    store=store,
    language=OpenAIAdapter(),
    relations=store,
    services=AppServicesClient(),
    allowed_chat_id=CONFIG["telegram_chat_id"],
    rate_limiter=RateLimiter(),
)


def _log(msg: str):
    print(msg, file=sys.stderr)


def _secret_matches(received: str) -> bool:
    secret = CONFIG.get("telegram_webhook_secret", "")
    if not secret:
        return True
    return hmac.compare_digest(secret.encode(), (received or "").encode())


@telegram_router.post("/webhook")
async def telegram_webhook(request: Request):
    """Receive one update. Always acknowledged once the secret checks out."""
    if not _secret_matches(request.headers.get(SECRET_HEADER, "")):
        _log("[webhook] secret token mismatch")
        raise HTTPException(status_code=401, detail="Unauthorized")

    raw_body = await request.body()
    try:
        update = TgUpdate.model_validate(json.loads(raw_body))
    except ValueError as e:
        # A non-200 makes Telegram redeliver the same bad payload forever
        _log(f"[webhook] malformed update ignored: {e}")
        return {"ok": True}

    await update_router.route(update.to_domain())
    return {"ok": True}


@telegram_router.get("/webhook")
async def telegram_webhook_admin(action: str = "debug"):
    """Webhook management: set, delete, commands, debug."""
    if not telegram_client.is_configured:
        raise HTTPException(status_code=503, detail="Telegram bot token not configured")

    try:
        if action == "set":
            url = f"{CONFIG['app_base_url']}/telegram/webhook"
            result = await telegram_client.set_webhook(url, CONFIG.get("telegram_webhook_secret", ""))
            return {"ok": True, "url": url, "result": result.get("result")}
        if action == "delete":
            result = await telegram_client.delete_webhook()
            return {"ok": True, "result": result.get("result")}
        if action == "commands":
            result = await telegram_client.set_my_commands(BOT_COMMANDS)
            return {"ok": True, "commands": len(BOT_COMMANDS), "result": result.get("result")}
        if action == "debug":
            result = await telegram_client.get_webhook_info()
            return {"ok": True, "webhook": result.get("result")}
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=str(e))

    raise HTTPException(status_code=400, detail=f"Unknown action: {action}")
