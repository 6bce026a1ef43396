"""FastAPI application."""

from fastapi import FastAPI

from brainbot.adapters.web.telegram_routes import telegram_client, telegram_router
from brainbot.config import CONFIG, __version__

app = FastAPI(title="Brainbot", version=__version__)
app.include_router(telegram_router)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "version": __version__,
        "telegram": telegram_client.is_configured,
        "allowlist": bool(CONFIG["telegram_chat_id"]),
    }
