"""Natural-language date prefixes for /remind.

Pure Python, no framework dependencies.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional, Tuple

from brainbot.domain.models import DateExpressionResult

# Dates are anchored at noon so a day never drifts across a timezone edge
NOON = time(12, 0)

WEEKDAYS = (
    "monday", "tuesday", "wednesday", "thursday",
    "friday", "saturday", "sunday",
)

_TOMORROW_RE = re.compile(r"^tomorrow\b\s*(.*)$", re.IGNORECASE | re.DOTALL)
_TODAY_RE = re.compile(r"^today\b\s*(.*)$", re.IGNORECASE | re.DOTALL)
_NEXT_WEEK_RE = re.compile(r"^next\s+week\b\s*(.*)$", re.IGNORECASE | re.DOTALL)
_WEEKDAY_RE = re.compile(
    r"^(" + "|".join(WEEKDAYS) + r")\b\s*(.*)$", re.IGNORECASE | re.DOTALL
)
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})\b\s*(.*)$", re.DOTALL)
_IN_DAYS_RE = re.compile(r"^in\s+(\d+)\s+days?\b\s*(.*)$", re.IGNORECASE | re.DOTALL)


def _at_noon(day: date) -> datetime:
    return datetime.combine(day, NOON)


def _tomorrow(m: re.Match, today: date) -> Tuple[Optional[date], str]:
    return today + timedelta(days=1), m.group(1)


def _today(m: re.Match, today: date) -> Tuple[Optional[date], str]:
    return today, m.group(1)


def _next_week(m: re.Match, today: date) -> Tuple[Optional[date], str]:
    return today + timedelta(days=7), m.group(1)


def _weekday(m: re.Match, today: date) -> Tuple[Optional[date], str]:
    target = WEEKDAYS.index(m.group(1).lower())
    ahead = (target - today.weekday()) % 7 or 7
    return today + timedelta(days=ahead), m.group(2)


def _iso(m: re.Match, today: date) -> Tuple[Optional[date], str]:
    try:
        day = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None, ""
    return day, m.group(4)


def _in_days(m: re.Match, today: date) -> Tuple[Optional[date], str]:
    try:
        day = today + timedelta(days=int(m.group(1)))
    except (OverflowError, ValueError):
        return None, ""
    return day, m.group(2)


# Order matters: first match wins
_PATTERNS: List[Tuple[re.Pattern, Callable]] = [
    (_TOMORROW_RE, _tomorrow),
    (_TODAY_RE, _today),
    (_NEXT_WEEK_RE, _next_week),
    (_WEEKDAY_RE, _weekday),
    (_ISO_RE, _iso),
    (_IN_DAYS_RE, _in_days),
]


def parse_date_expression(text: str, today: Optional[date] = None) -> DateExpressionResult:
    """Parse a leading date expression off ``text``.

    Returns the date (at noon) and the rest of the text. When nothing
    matches, ``date`` is None and ``remainder`` is the original text.
    """
    today = today or date.today()
    stripped = (text or "").strip()
    for pattern, resolve in _PATTERNS:
        m = pattern.match(stripped)
        if not m:
            continue
        day, remainder = resolve(m, today)
        if day is None:
            break
        return DateExpressionResult(date=_at_noon(day), remainder=remainder.strip())
    return DateExpressionResult(date=None, remainder=text)
