"""Tests for property accessors and extract_fields()."""

import logging
from dataclasses import dataclass, field

import pytest

from searchlens.core.item import (
    AttributeAccessor,
    Field,
    MappingAccessor,
    PropertyAccessor,
    PropertyPathError,
    accessor_for,
    extract_fields,
    get_values,
    register_accessor,
)
from searchlens.core.item.accessors import _ACCESSORS, MISSING


@dataclass
class Author:
    name: str
    _secret: str = "hidden"


@dataclass
class Post:
    title: str
    author: Author
    tags: list[str] = field(default_factory=list)
    comments: list[dict] = field(default_factory=list)


@pytest.fixture
def post() -> Post:
    return Post(
        title="Hello",
        author=Author("Grace"),
        tags=["a", "b"],
        comments=[{"author": {"name": "Ada"}}, {"author": {"name": "Linus"}}, {"author": None}],
    )


class TestAccessorSelection:
    """Test accessor_for() and the registry."""

    def test_mapping_accessor_for_dicts(self):
        assert isinstance(accessor_for({"a": 1}), MappingAccessor)

    def test_attribute_accessor_is_the_default(self, post):
        assert isinstance(accessor_for(post), AttributeAccessor)

    def test_accessors_satisfy_protocol(self):
        assert isinstance(MappingAccessor(), PropertyAccessor)
        assert isinstance(AttributeAccessor(), PropertyAccessor)

    def test_registered_accessor_takes_precedence(self, monkeypatch):
        monkeypatch.setattr("searchlens.core.item.accessors._ACCESSORS", list(_ACCESSORS))

        class UpperAccessor:
            def get_property(self, obj, name):
                return obj.upper()

        register_accessor(lambda obj: isinstance(obj, str), UpperAccessor())
        assert get_values({"word": "hi"}, "word:anything") == ["HI"]

    def test_private_attributes_are_missing(self, post):
        assert AttributeAccessor().get_property(post.author, "_secret") is MISSING


class TestGetValues:
    """Test property path walking."""

    def test_simple_and_nested_paths(self, post):
        assert get_values(post, "title") == ["Hello"]
        assert get_values(post, "author:name") == ["Grace"]

    def test_list_values_fan_out(self, post):
        assert get_values(post, "tags") == ["a", "b"]
        assert get_values(post, "comments:author:name") == ["Ada", "Linus"]

    def test_missing_properties_yield_nothing(self, post):
        assert get_values(post, "subtitle") == []
        assert get_values(post, "author:email") == []
        assert get_values({"a": None}, "a:b") == []

    def test_empty_segments_are_ignored(self):
        assert get_values({"a": {"b": 1}}, "a::b") == [1]

    def test_empty_path_raises(self):
        with pytest.raises(PropertyPathError):
            get_values({"a": 1}, "")


class TestExtractFields:
    """Test extract_fields()."""

    def test_fields_sharing_a_path_get_the_same_values(self, post):
        as_string = Field("tags_string", "tags")
        as_text = Field("tags_text", "tags", type="text")
        extract_fields(post, {"tags": [as_string, as_text]})
        assert as_string.values == ["a", "b"]
        assert as_text.values == ["a", "b"]

    def test_values_are_converted(self):
        count = Field("count", "count", type="integer")
        extract_fields({"count": "42"}, {"count": [count]})
        assert count.values == [42]

    def test_inconvertible_values_are_dropped(self, caplog):
        count = Field("count", "count", type="integer")
        with caplog.at_level(logging.DEBUG):
            extract_fields({"count": ["1", "many", 3]}, {"count": [count]})
        assert count.values == [1, 3]
        assert "many" in caplog.text

    def test_bad_path_is_skipped(self, caplog):
        broken = Field("broken", "")
        title = Field("title", "title")
        with caplog.at_level(logging.WARNING):
            extract_fields({"title": "t"}, {"": [broken], "title": [title]})
        assert broken.is_empty()
        assert title.values == ["t"]
        assert "broken" in caplog.text
