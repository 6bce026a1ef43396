"""Command and message-text parsing helpers.

Pure Python, no framework dependencies.
"""

import re
from typing import List, Optional

from brainbot.domain.models import ParsedCommand
from brainbot.ports.inbound import MessageEntity

# /name args — args is everything after the first whitespace run
COMMAND_RE = re.compile(r"^/(\w+)(?:@\w+)?(?:\s+(.*))?$", re.DOTALL)

# Captures shorter than this are rejected before any collaborator call
MIN_CAPTURE_LENGTH = 3

CONFIDENCE_BAR_WIDTH = 10


def parse_command(text: str) -> Optional[ParsedCommand]:
    """Return the leading ``/command`` and its trimmed argument string."""
    m = COMMAND_RE.match(text or "")
    if not m:
        return None
    return ParsedCommand(name=m.group(1).lower(), args=(m.group(2) or "").strip())


def extract_url(text: str, entities: List[MessageEntity]) -> Optional[str]:
    """Return the first URL the platform marked up in ``text``."""
    # Entity offsets count UTF-16 code units, not code points
    encoded = (text or "").encode("utf-16-le")
    for entity in entities:
        if entity.type == "url":
            start = entity.offset * 2
            end = (entity.offset + entity.length) * 2
            return encoded[start:end].decode("utf-16-le", errors="ignore")
    return None


def confidence_bar(confidence: float) -> str:
    """10-character bar, filled to the nearest decile."""
    clamped = min(max(confidence, 0.0), 1.0)
    filled = int(clamped * CONFIDENCE_BAR_WIDTH + 0.5)
    return "█" * filled + "░" * (CONFIDENCE_BAR_WIDTH - filled)


def confidence_pct(confidence: float) -> int:
    return int(min(max(confidence, 0.0), 1.0) * 100 + 0.5)


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"
