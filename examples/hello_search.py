"""Minimal hello-world demo: search an in-memory index and materialize rows."""

import logging
import sys
from pathlib import Path

# Allow running directly from the repo without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from searchlens.core.index.memory import InMemoryIndex  # noqa: E402
from searchlens.core.item.field import FieldDescriptor  # noqa: E402
from searchlens.core.query.handlers import DateFilter  # noqa: E402
from searchlens.core.searchlens import SearchLens  # noqa: E402

BOOKS = {
    "1": {"title": "Dune", "author": {"name": "Frank Herbert"}, "published": "1965-08-01"},
    "2": {"title": "Neuromancer", "author": {"name": "William Gibson"}, "published": "1984-07-01"},
    "3": {"title": "Hyperion", "author": {"name": "Dan Simmons"}, "published": "1989-05-26"},
}


def build_index() -> InMemoryIndex:
    index = InMemoryIndex("library")
    index.add_datasource("book", "Book")
    index.add_field(FieldDescriptor("title", "title", "book", type="text"), stored=True)
    index.add_field(FieldDescriptor("author", "author:name", "book"))
    index.add_field(FieldDescriptor("published", "published", "book", type="date"))
    for raw_id, book in BOOKS.items():
        index.index_item("book", raw_id, book)
    return index


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    index = build_index()
    lens = SearchLens.create(index=index, config={"searchlens": {"display_errors": True}})

    print("[hello] books published since 1980, newest first")
    sherlock = lens.query(display="hello", count_required=True)
    DateFilter("published", ">=", "1980-01-01").apply(sherlock)
    sherlock.sort("published", "DESC")
    sherlock.add_field("title")
    sherlock.add_field("author")

    result = sherlock.execute()
    for row in result.rows:
        print(f"[row] {row.id}: {row.get('title')[0]} by {row.get('author')[0]}")
    print(f"[done] count = {result.count}, elapsed = {result.elapsed_time:.4f}s")

    print("[hello] a search on an unknown field degrades to no results")
    broken = lens.query(display="hello")
    broken.condition("isbn", "0441013597")
    result = broken.execute()
    print(f"[done] status = {result.status}, messages = {result.messages}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
