"""Tests for filter handlers."""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from searchlens.core.query import DateFilter, FilterHandler, Sherlock
from searchlens.core.query.handlers import EMPTY, NOT_EMPTY

NOW = datetime(2024, 6, 15, 13, 45, tzinfo=UTC)


@pytest.fixture
def sherlock() -> MagicMock:
    return MagicMock(spec=Sherlock)


class TestFilterHandler:
    """Test the generic handler."""

    def test_apply(self, sherlock):
        FilterHandler("status", "=", "published", group="g1").apply(sherlock)
        sherlock.condition.assert_called_once_with("status", "published", "=", "g1")

    def test_empty_operators(self, sherlock):
        FilterHandler("rating", EMPTY).apply(sherlock)
        FilterHandler("rating", NOT_EMPTY).apply(sherlock)
        assert [c.args for c in sherlock.condition.call_args_list] == [
            ("rating", None, "=", None),
            ("rating", None, "<>", None),
        ]


class TestDateFilter:
    """Test DateFilter value handling."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2024-03-01", 1709251200),
            (1709251200, 1709251200),
            ("1709251200", 1709251200),
            (["2024-03-01"], 1709251200),
            ([["2024-03-01", "ignored"]], 1709251200),
            ("10:00", int(datetime(2024, 6, 15, 10, tzinfo=UTC).timestamp())),
        ],
    )
    def test_values_become_timestamps(self, sherlock, value, expected):
        DateFilter("created", ">=", value, now=NOW).apply(sherlock)
        sherlock.condition.assert_called_once_with("created", expected, ">=", None)

    @pytest.mark.parametrize("value", [None, "", [], ["not a date"], "soon"])
    def test_unusable_values_add_nothing(self, sherlock, value):
        DateFilter("created", "<", value, now=NOW).apply(sherlock)
        sherlock.condition.assert_not_called()

    def test_empty_operator(self, sherlock):
        DateFilter("created", EMPTY, "2024-03-01").apply(sherlock)
        sherlock.condition.assert_called_once_with("created", None, "=", None)

    def test_against_index(self, index):
        executor = Sherlock(index)
        DateFilter("created", ">=", "2024-01-01", now=NOW).apply(executor)
        executor.sort("created")
        result = executor.execute()
        assert [row.id for row in result.rows] == ["article/1", "article/2"]
