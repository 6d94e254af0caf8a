"""Test helpers and shared constants."""

from typing import Any

from searchlens.core.index.memory import InMemoryIndex
from searchlens.core.item.field import FieldDescriptor

ARTICLES: dict[str, dict[str, Any]] = {
    "1": {
        "title": "Python tips",
        "body": "Write idiomatic python code",
        "author": {"name": "Ada"},
        "tags": [{"label": "python"}, {"label": "howto"}],
        "created": "2024-03-01",
        "published": True,
        "rating": "4.5",
        "status": "published",
    },
    "2": {
        "title": "Rust ownership",
        "body": "The borrow checker explained",
        "author": {"name": "Linus"},
        "tags": [{"label": "rust"}],
        "created": "2024-05-10",
        "published": False,
        "rating": 3,
        "status": "draft",
    },
    "3": {
        "title": "Python packaging",
        "body": "pyproject files and wheels",
        "author": {"name": "Ada"},
        "tags": [],
        "created": "2023-12-24",
        "published": True,
        "rating": None,
        "status": "published",
    },
}

USERS: dict[str, dict[str, Any]] = {
    "ada": {"name": "Ada", "mail": "ada@example.com"},
}


class CountingIndex(InMemoryIndex):
    """InMemoryIndex recording every source-object load."""

    def __init__(self, id: str = "articles"):
        super().__init__(id)
        self.load_item_calls: list[str] = []
        self.load_multiple_calls: list[list[str]] = []

    def load_item(self, item_id: str) -> Any | None:
        self.load_item_calls.append(item_id)
        return super().load_item(item_id)

    def load_items_multiple(self, item_ids) -> dict[str, Any]:
        item_ids = list(item_ids)
        self.load_multiple_calls.append(item_ids)
        return super().load_items_multiple(item_ids)

    def reset_counters(self) -> None:
        self.load_item_calls.clear()
        self.load_multiple_calls.clear()


def build_article_index() -> CountingIndex:
    """Return an index over ARTICLES and USERS, with title stored."""
    index = CountingIndex()
    index.add_datasource("article", "Article")
    index.add_datasource("user", "User")
    index.add_field(FieldDescriptor("title", "title", "article", type="text"), stored=True)
    index.add_field(FieldDescriptor("body", "body", "article", type="text"))
    index.add_field(FieldDescriptor("author_name", "author:name", "article"))
    index.add_field(FieldDescriptor("tags", "tags:label", "article"))
    index.add_field(FieldDescriptor("created", "created", "article", type="date"))
    index.add_field(FieldDescriptor("published", "published", "article", type="boolean"))
    index.add_field(FieldDescriptor("rating", "rating", "article", type="decimal"))
    index.add_field(FieldDescriptor("status", "status", "article"))
    index.add_field(FieldDescriptor("mail", "mail", "user"))
    index.add_field(FieldDescriptor("language", "language", None))
    for raw_id, article in ARTICLES.items():
        index.index_item("article", raw_id, article)
    for raw_id, user in USERS.items():
        index.index_item("user", raw_id, user)
    index.reset_counters()
    return index
