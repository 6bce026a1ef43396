"""Tests for domain/categories.py."""

import pytest

from brainbot.domain.categories import (
    ALL_STATUSES,
    CATEGORIES,
    DEFAULT_EMOJI,
    DEFAULT_STATUS,
    STATUS_OPTIONS,
    category_emoji,
    done_status,
    is_active,
    normalize_category,
)


class TestDoneStatus:
    @pytest.mark.parametrize("category", list(CATEGORIES) + ["Reading", "Unknown"])
    def test_complete_only_for_project(self, category):
        expected = "Complete" if category == "Project" else "Done"
        assert done_status(category) == expected


class TestStatusTables:
    def test_no_delimiter_anywhere(self):
        for category, options in STATUS_OPTIONS.items():
            assert ":" not in category
            assert all(":" not in o for o in options)

    def test_defaults_are_first_option(self):
        assert DEFAULT_STATUS["Admin"] == "Todo"
        assert DEFAULT_STATUS["Project"] == "Not Started"

    def test_all_statuses_union(self):
        assert "Waiting" in ALL_STATUSES
        assert "Spark" in ALL_STATUSES


class TestHelpers:
    def test_emoji(self):
        assert category_emoji("Idea") == "💡"
        assert category_emoji("Mystery") == DEFAULT_EMOJI

    def test_is_active(self):
        assert is_active("Todo")
        assert is_active("")
        assert not is_active("Done")
        assert not is_active("Complete")

    @pytest.mark.parametrize("raw,expected", [
        ("Projects", "Project"),
        ("ideas", "Idea"),
        (" People ", "People"),
        ("reading", "Reading"),
        ("gibberish", "Admin"),
        ("", "Admin"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_category(raw) == expected
