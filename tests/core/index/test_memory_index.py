"""Tests for the in-memory reference index."""

import pytest

from searchlens.core.index.exceptions import (
    SearchIndexError,
    UnknownFieldError,
    UnsupportedOperatorError,
)
from searchlens.core.index.memory import InMemoryIndex
from searchlens.core.index.protocols import BackendQuery, QueryFilter, SearchIndex
from searchlens.core.item import DatasourceError, FieldDescriptor, ResultItem


def _ids(result_set) -> list[str]:
    return list(result_set.items)


class TestIndexSetup:
    """Test datasources, fields and indexing."""

    def test_protocols(self, index):
        query = index.query()
        assert isinstance(index, SearchIndex)
        assert isinstance(query, BackendQuery)
        assert isinstance(query.create_filter("AND"), QueryFilter)

    def test_index_item_returns_combined_id(self):
        index = InMemoryIndex("tiny")
        index.add_datasource("page")
        index.add_field(FieldDescriptor("title", "title", "page"))
        assert index.index_item("page", "7", {"title": "Home"}) == "page/7"
        assert index.documents["page/7"] == {"title": ["Home"]}

    def test_index_item_unknown_datasource(self):
        index = InMemoryIndex("tiny")
        with pytest.raises(DatasourceError):
            index.index_item("page", "7", {})

    def test_field_with_unknown_datasource(self):
        index = InMemoryIndex("tiny")
        with pytest.raises(DatasourceError):
            index.add_field(FieldDescriptor("title", "title", "page"))

    def test_indexed_values_are_converted(self, index):
        document = index.documents["article/1"]
        assert document["rating"] == [4.5]
        assert document["created"] == [1709251200]
        assert document["tags"] == ["python", "howto"]

    def test_fields_by_datasource(self, index):
        assert list(index.get_fields_by_datasource("user")) == ["mail"]
        assert list(index.get_fields_by_datasource(None)) == ["language"]

    def test_result_items_carry_stored_fields_only(self, index):
        item = index.create_result_item("article/1")
        assert isinstance(item, ResultItem)
        assert list(item.get_fields()) == ["title"]

    def test_load_items(self, index):
        index.delete_object("article/2")
        assert index.load_item("article/2") is None
        assert set(index.load_items_multiple(["article/1", "article/2"])) == {"article/1"}
        assert "article/2" in index.documents


class TestQueryExecution:
    """Test InMemoryQuery."""

    @pytest.mark.parametrize(
        "field, value, operator, expected",
        [
            ("status", "published", "=", ["article/1", "article/3"]),
            ("status", "published", "<>", ["article/2", "user/ada"]),
            ("rating", 4, ">", ["article/1"]),
            ("rating", 3, ">=", ["article/1", "article/2"]),
            ("rating", 4.5, "<", ["article/2"]),
            ("rating", 3, "<=", ["article/2"]),
            ("tags", ["rust", "howto"], "IN", ["article/1", "article/2"]),
            ("tags", ["rust"], "NOT IN", ["article/1", "article/3", "user/ada"]),
            ("rating", None, "IS NULL", ["article/3", "user/ada"]),
            ("rating", None, "IS NOT NULL", ["article/1", "article/2"]),
        ],
    )
    def test_operators(self, index, field, value, operator, expected):
        query = index.query().condition(field, value, operator)
        assert _ids(query.execute()) == expected

    def test_equality_with_none_checks_existence(self, index):
        missing = index.query().condition("rating", None, "=")
        present = index.query().condition("rating", None, "<>")
        assert _ids(missing.execute()) == ["article/3", "user/ada"]
        assert _ids(present.execute()) == ["article/1", "article/2"]

    @pytest.mark.parametrize("operator", ["<", "<=", ">", ">=", "IN", "NOT IN"])
    def test_none_value_rejected_for_comparisons(self, index, operator):
        query = index.query().condition("rating", None, operator)
        with pytest.raises(UnsupportedOperatorError, match="cannot compare with None") as exc:
            query.execute()
        assert exc.value.operator == operator

    def test_none_value_rejected_in_nested_filter(self, index):
        query = index.query()
        query.filter(query.create_filter("OR").condition("rating", None, "<"))
        with pytest.raises(UnsupportedOperatorError):
            query.execute()

    def test_nested_conjunctions(self, index):
        query = index.query()
        either = query.create_filter("OR")
        either.condition("author_name", "Linus").condition("tags", "howto")
        query.filter(either)
        assert _ids(query.execute()) == ["article/1", "article/2"]

        query = index.query()
        query.filter(query.create_filter("NOT").condition("author_name", "Ada"))
        assert _ids(query.execute()) == ["article/2", "user/ada"]

    def test_keys_terms_and_phrase(self, index):
        assert _ids(index.query().keys("python wheels").execute()) == ["article/3"]
        phrase = index.query({"parse mode": "phrase"}).keys("python wheels")
        assert _ids(phrase.execute()) == []

    def test_sort_places_missing_values_last(self, index):
        query = index.query().sort("rating", "DESC")
        assert _ids(query.execute()) == ["article/1", "article/2", "article/3", "user/ada"]

    def test_multi_key_sort(self, index):
        query = index.query().sort("author_name").sort("created", "DESC")
        assert _ids(query.execute())[:3] == ["article/1", "article/3", "article/2"]

    def test_range_and_count(self, index):
        result = index.query().range(1, 2).execute()
        assert _ids(result) == ["article/2", "article/3"]
        assert result.count == 4
        assert index.query().range(0, 0).execute().items == {}
        assert len(index.query().range(None, None).execute().items) == 4

    def test_skip_result_count(self, index):
        query = index.query({"skip result count": True})
        assert query.execute().count is None

    def test_unknown_field(self, index):
        with pytest.raises(UnknownFieldError) as exc_info:
            index.query().condition("nope", 1).execute()
        assert isinstance(exc_info.value, SearchIndexError)
        assert exc_info.value.index_id == "articles"

    def test_unknown_sort_field(self, index):
        with pytest.raises(UnknownFieldError):
            index.query().sort("nope").execute()

    def test_unsupported_operator(self, index):
        with pytest.raises(UnsupportedOperatorError):
            index.query().condition("status", "x", "LIKE").execute()

    def test_options(self, index):
        query = index.query({"custom": 1})
        assert query.get_option("custom") == 1
        assert query.set_option("custom", 2) == 1
        assert query.get_option("missing", "default") == "default"
