#!/usr/bin/env python3
"""Brainbot server entry point."""

import sys

import uvicorn

from brainbot.config import CONFIG, __version__


def main():
    print(f"🧠 brainbot {__version__} on port {CONFIG['port']}", file=sys.stderr)
    if not CONFIG["telegram_bot_token"]:
        print("TELEGRAM_BOT_TOKEN not set — replies will fail", file=sys.stderr)
    uvicorn.run("brainbot.adapters.web.server:app", host="0.0.0.0", port=CONFIG["port"], log_level="info")


if __name__ == "__main__":
    main()
