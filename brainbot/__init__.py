"""Brainbot — Telegram front end for a personal knowledge and task manager."""

from brainbot.config import CONFIG, AppConfig, __version__
from brainbot.domain.router import UpdateRouter

__all__ = [
    "CONFIG",
    "AppConfig",
    "UpdateRouter",
    "__version__",
]
