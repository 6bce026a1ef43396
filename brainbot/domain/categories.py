"""Category and status tables — the closed vocabularies callback tokens carry.

Pure Python, no framework dependencies.
"""

from typing import Dict, Tuple

from brainbot.domain.action_token import DELIMITER

# Categories the classifier may assign
CATEGORIES: Tuple[str, ...] = ("People", "Project", "Idea", "Admin")

# Store categories counted by /stats (Reading is created by URL ingestion)
STORE_CATEGORIES: Tuple[str, ...] = CATEGORIES + ("Reading",)

CATEGORY_EMOJI: Dict[str, str] = {
    "People": "👤",
    "Project": "📋",
    "Idea": "💡",
    "Admin": "✅",
    "Reading": "📚",
}

DEFAULT_EMOJI = "📝"

STATUS_OPTIONS: Dict[str, Tuple[str, ...]] = {
    "Admin": ("Todo", "Done"),
    "Project": ("Not Started", "Active", "Waiting", "Complete"),
    "People": ("New", "Active", "Dormant"),
    "Idea": ("Spark", "Developing", "Actionable"),
    "Reading": ("Unread", "Read"),
}

DEFAULT_STATUS: Dict[str, str] = {
    category: options[0] for category, options in STATUS_OPTIONS.items()
}

# Statuses meaning "finished" for their category
TERMINAL_STATUSES = frozenset({"Done", "Complete", "Dormant", "Read"})

# Counted by /stats next to the per-category totals
STATS_STATUSES: Tuple[str, ...] = ("Done", "Complete")

PRIORITY_OPTIONS: Tuple[str, ...] = ("High", "Medium", "Low")


def _check_delimiter_free() -> None:
    """Status and category names travel inside callback tokens."""
    for category, options in STATUS_OPTIONS.items():
        for value in (category,) + options:
            if DELIMITER in value:
                raise ValueError(
                    f"{value!r} contains the token delimiter {DELIMITER!r}"
                )


_check_delimiter_free()

ALL_STATUSES = frozenset(s for options in STATUS_OPTIONS.values() for s in options)


def category_emoji(category: str) -> str:
    return CATEGORY_EMOJI.get(category, DEFAULT_EMOJI)


def status_options(category: str) -> Tuple[str, ...]:
    return STATUS_OPTIONS.get(category, ())


def done_status(category: str) -> str:
    """Status that `done` sets: Complete for projects, Done for everything else."""
    return "Complete" if category == "Project" else "Done"


def is_active(status: str) -> bool:
    return status not in TERMINAL_STATUSES


def normalize_category(raw: str) -> str:
    """Map store/LLM spellings (``Projects``, ``ideas``) onto CATEGORIES.

    Unknown values fall back to ``Admin``.
    """
    value = (raw or "").strip().lower()
    for category in STORE_CATEGORIES:
        name = category.lower()
        if value == name or value == name + "s":
            return category
    return "Admin"
