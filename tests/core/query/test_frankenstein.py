"""Tests for Frankenstein result materialization."""

import logging
from unittest.mock import MagicMock

import pytest

from searchlens.core.dto import ResultRow, StatusCode
from searchlens.core.item import ObjectState, ResultItem
from searchlens.core.query import Frankenstein, ResultMaterializer
from tests.utils import ARTICLES


@pytest.fixture
def frankenstein(index) -> Frankenstein:
    return Frankenstein(index)


def _items(index, *item_ids):
    return {item_id: index.create_result_item(item_id) for item_id in item_ids}


class TestMaterialize:
    """Test materialize()."""

    def test_alias(self):
        assert ResultMaterializer is Frankenstein

    def test_skeleton_rows_without_requested_fields(self, index, frankenstein):
        items = _items(index, "article/1", "article/2")
        items["article/1"].score = 0.75
        items["article/1"].excerpt = "<b>Python</b> tips"

        result = frankenstein.materialize(items)

        assert result.is_ok()
        assert [row.id for row in result.rows] == ["article/1", "article/2"]
        first = result.rows[0]
        assert first.datasource_id == "article"
        assert first.relevance == 0.75
        assert first.excerpt == "<b>Python</b> tips"
        assert first.item == "article/1"
        assert not first.hydrated
        assert first.values == {"title": ["Python tips"]}
        assert index.load_multiple_calls == []

    def test_single_bulk_load_for_rows_missing_fields(self, index, frankenstein):
        items = _items(index, "article/1", "article/2", "article/3", "user/ada")
        items["article/2"].set_original_object(ARTICLES["2"])

        result = frankenstein.materialize(items, ["title", "author_name"])

        assert index.load_multiple_calls == [["article/1", "article/3", "user/ada"]]
        assert index.load_item_calls == []
        assert result.loaded_ids == ["article/1", "article/3", "user/ada"]
        assert [row.get("author_name") for row in result.rows] == [
            ["Ada"],
            ["Linus"],
            ["Ada"],
            None,
        ]
        assert all(row.hydrated for row in result.rows)
        assert result.rows[3].item == {"name": "Ada", "mail": "ada@example.com"}

    def test_rows_with_all_fields_are_not_loaded(self, index, frankenstein):
        items = _items(index, "article/1", "article/2")
        items["article/2"].get_field("title").set_values([])

        frankenstein.materialize(items, ["title"])

        assert index.load_multiple_calls == [["article/2"]]

    def test_row_properties_count_as_present(self, index, frankenstein):
        items = _items(index, "article/1")
        result = frankenstein.materialize(items, ["id", "relevance", "excerpt"])
        assert index.load_multiple_calls == []
        assert result.rows[0].get("relevance") == 1.0

    def test_items_are_hydrated_too(self, index, frankenstein):
        items = _items(index, "article/1")
        frankenstein.materialize(items, ["author_name"])
        item = items["article/1"]
        assert item.object_state is ObjectState.LOADED
        assert item.get_original_object() is ARTICLES["1"]
        assert index.load_item_calls == []

    def test_partial_hydration(self, index, frankenstein, caplog):
        index.delete_object("article/2")
        items = _items(index, "article/1", "article/2")

        with caplog.at_level(logging.WARNING):
            result = frankenstein.materialize(items, ["title", "author_name"])

        assert result.is_ok()
        assert result.detail.code == StatusCode.PARTIAL_HYDRATION
        assert result.unavailable_ids == ["article/2"]
        stale = result.rows[1]
        assert stale.item == "article/2"
        assert not stale.hydrated
        assert stale.get("title") == ["Rust ownership"]
        assert stale.get("author_name") is None
        assert items["article/2"].object_state is ObjectState.UNAVAILABLE
        assert index.load_item_calls == []
        assert "article/2" in caplog.text

    def test_hydration_attempted_once_per_item(self, index, frankenstein):
        index.delete_object("article/2")
        items = _items(index, "article/2")
        frankenstein.materialize(items, ["author_name"])
        frankenstein.materialize(items, ["author_name"])
        assert index.load_multiple_calls == [["article/2"]]
        assert index.load_item_calls == []

    def test_bulk_load_exception_is_not_fatal(self, index, frankenstein, caplog):
        index.load_items_multiple = MagicMock(side_effect=ConnectionError("db down"))
        items = _items(index, "article/1")

        with caplog.at_level(logging.ERROR):
            result = frankenstein.materialize(items, ["author_name"])

        assert result.unavailable_ids == ["article/1"]
        assert result.rows[0].item == "article/1"
        assert "db down" in caplog.text

    def test_index_taken_from_items(self, index):
        items = _items(index, "article/1")
        result = Frankenstein().materialize(items, ["author_name"])
        assert result.rows[0].get("author_name") == ["Ada"]

    def test_empty_batch(self, frankenstein):
        result = frankenstein.materialize({}, ["title"])
        assert result.rows == []
        assert result.detail is None

    def test_duplicate_requested_fields(self, index, frankenstein):
        items = {"article/1": ResultItem(index, "article/1")}
        result = frankenstein.materialize(items, ["author_name", "author_name"])
        assert result.rows[0].values == {"author_name": ["Ada"]}


class TestLoadRowObjects:
    """Test load_row_objects()."""

    def test_loads_placeholders_in_one_call(self, index, frankenstein):
        rows = [
            ResultRow(id="article/1", item="article/1"),
            ResultRow(id="article/2", item=ARTICLES["2"], hydrated=True),
            ResultRow(id="article/3", item="article/3"),
        ]

        objects = frankenstein.load_row_objects(rows)

        assert objects == {0: ARTICLES["1"], 1: ARTICLES["2"], 2: ARTICLES["3"]}
        assert index.load_multiple_calls == [["article/1", "article/3"]]
        assert rows[0].hydrated

    def test_missing_objects_are_logged(self, index, frankenstein, caplog):
        index.delete_object("article/3")
        rows = [ResultRow(id="article/3", item="article/3"), ResultRow(id="user/ada", item="user/ada")]

        with caplog.at_level(logging.ERROR):
            objects = frankenstein.load_row_objects(rows)

        assert list(objects) == [1]
        assert "out of sync" in caplog.text
        assert "article/3" in caplog.text

    def test_nothing_to_load(self, index, frankenstein):
        rows = [ResultRow(id="article/1", item=ARTICLES["1"], hydrated=True)]
        assert frankenstein.load_row_objects(rows) == {0: ARTICLES["1"]}
        assert index.load_multiple_calls == []
