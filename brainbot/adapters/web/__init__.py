"""Web adapters — FastAPI app and Telegram webhook routes."""
