"""Configuration and shared state."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


CONFIG = {
    "port": _int_env("PORT", 3000),
    # Telegram
    "telegram_bot_token": os.getenv("TELEGRAM_BOT_TOKEN", ""),
    # Allow-listed chat identity; empty allows everyone (dev mode)
    "telegram_chat_id": os.getenv("TELEGRAM_CHAT_ID", "").strip(),
    "telegram_webhook_secret": os.getenv("TELEGRAM_WEBHOOK_SECRET", ""),
    # Same-process HTTP collaborators (agent, digest, process-url, sessions)
    "app_base_url": os.getenv("APP_BASE_URL", "http://localhost:3000").rstrip("/"),
    # OpenAI
    "openai_api_key": os.getenv("OPENAI_API_KEY", ""),
    "openai_classify_model": os.getenv("OPENAI_CLASSIFY_MODEL", "gpt-4o-mini"),
    "openai_vision_model": os.getenv("OPENAI_VISION_MODEL", "gpt-4o-mini"),
    "openai_transcribe_model": os.getenv("OPENAI_TRANSCRIBE_MODEL", "whisper-1"),
    # Local entry store
    "storage_dir": os.getenv("STORAGE_DIR", "memory"),
    # Per-identity sliding window
    "rate_limit": {
        "max_requests": _int_env("RATE_LIMIT_MAX_REQUESTS", 30),
        "window_seconds": _int_env("RATE_LIMIT_WINDOW_SECONDS", 60),
    },
}

if not CONFIG["telegram_chat_id"]:
    _stderr_print("TELEGRAM_CHAT_ID not set: bot accepts updates from any chat")


# ── Typed config ────────────────────────────────────────────


@dataclass
class RateLimitConfig:
    max_requests: int = 30
    window_seconds: int = 60


@dataclass
class TelegramConfig:
    bot_token: str = ""
    chat_id: str = ""
    webhook_secret: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token)


@dataclass
class OpenAIConfig:
    api_key: str = ""
    classify_model: str = "gpt-4o-mini"
    vision_model: str = "gpt-4o-mini"
    transcribe_model: str = "whisper-1"


@dataclass
class AppConfig:
    """Typed view over CONFIG, built once at startup."""

    port: int = 3000
    app_base_url: str = "http://localhost:3000"
    storage_dir: str = "memory"
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            port=CONFIG["port"],
            app_base_url=CONFIG["app_base_url"],
            storage_dir=CONFIG["storage_dir"],
            telegram=TelegramConfig(
                bot_token=CONFIG["telegram_bot_token"],
                chat_id=CONFIG["telegram_chat_id"],
                webhook_secret=CONFIG["telegram_webhook_secret"],
            ),
            openai=OpenAIConfig(
                api_key=CONFIG["openai_api_key"],
                classify_model=CONFIG["openai_classify_model"],
                vision_model=CONFIG["openai_vision_model"],
                transcribe_model=CONFIG["openai_transcribe_model"],
            ),
            rate_limit=RateLimitConfig(**CONFIG["rate_limit"]),
        )
