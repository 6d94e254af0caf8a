"""Index and backend query protocols (contracts).

SearchLens does not own an index. It talks to one through these protocols:

- SearchIndex: datasource registry, field descriptors, source-object loading
  and the factory for backend queries.
- Datasource: a provider of source objects of one kind.
- BackendQuery / QueryFilter: the opaque query object a backend executes.
- ResultSet: what BackendQuery.execute() returns.

Any object implementing the methods works; InMemoryIndex in
searchlens.core.index.memory is the reference implementation.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from searchlens.core.item.field import FieldDescriptor

if TYPE_CHECKING:
    from searchlens.core.item.item import ResultItem


# =============================================================================
# RESULT SET
# =============================================================================


@dataclass(slots=True)
class ResultSet:
    """Raw outcome of a backend query.

    Attributes:
        count: Total number of matches (ignoring range), None when the
            backend skipped counting.
        items: Matched items keyed by combined id, in result order.
        extra: Backend-specific data (facets, warnings, ...).
    """

    count: int | None = 0
    items: dict[str, "ResultItem"] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# BACKEND QUERY
# =============================================================================


@runtime_checkable
class QueryFilter(Protocol):
    """A nested filter: conditions and sub-filters under one conjunction."""

    @property
    def conjunction(self) -> str:
        """The filter's conjunction ("AND", "OR" or "NOT")."""
        ...

    def condition(self, field: str, value: Any, operator: str = "=") -> "QueryFilter":
        """Add a condition. None values with IS NULL / IS NOT NULL are existence checks."""
        ...

    def filter(self, filter: "QueryFilter") -> "QueryFilter":
        """Add a nested filter."""
        ...


@runtime_checkable
class BackendQuery(Protocol):
    """The backend's query object.

    The query itself acts as the top-level AND filter. Backends reject
    unknown fields or malformed input by raising from execute().
    """

    def keys(self, keys: str | None) -> "BackendQuery":
        """Set the fulltext search keys."""
        ...

    def fields(self, fields: list[str]) -> "BackendQuery":
        """Restrict the fulltext fields the keys are matched against."""
        ...

    def condition(self, field: str, value: Any, operator: str = "=") -> "BackendQuery":
        """Add a condition to the top-level filter."""
        ...

    def create_filter(self, conjunction: str = "AND") -> QueryFilter:
        """Create a detached nested filter."""
        ...

    def filter(self, filter: QueryFilter) -> "BackendQuery":
        """Attach a nested filter to the top-level filter."""
        ...

    def sort(self, field: str, order: str = "ASC") -> "BackendQuery":
        """Add a sort key."""
        ...

    def range(self, offset: int | None = None, limit: int | None = None) -> "BackendQuery":
        """Set the result window. A None limit means unlimited."""
        ...

    def get_option(self, name: str, default: Any = None) -> Any:
        """Return a query option."""
        ...

    def set_option(self, name: str, value: Any) -> Any:
        """Set a query option, returning the previous value."""
        ...

    def execute(self) -> ResultSet:
        """Run the query."""
        ...


# =============================================================================
# INDEX AND DATASOURCES
# =============================================================================


@runtime_checkable
class Datasource(Protocol):
    """A provider of indexable source objects of one kind."""

    @property
    def plugin_id(self) -> str:
        """Identifier of the datasource."""
        ...


@runtime_checkable
class SearchIndex(Protocol):
    """A search index: datasources, fields, objects and queries."""

    @property
    def id(self) -> str:
        """Identifier of the index."""
        ...

    def query(self, options: dict[str, Any] | None = None) -> BackendQuery:
        """Create a new backend query on this index."""
        ...

    def get_datasource(self, datasource_id: str) -> Datasource:
        """Return a datasource.

        Raises:
            DatasourceError: If the index has no such datasource.
        """
        ...

    def get_fields_by_datasource(self, datasource_id: str | None) -> dict[str, FieldDescriptor]:
        """Return field descriptors of one datasource (None: datasource-agnostic)."""
        ...

    def load_item(self, item_id: str) -> Any | None:
        """Load one source object by combined id, None if it does not exist."""
        ...

    def load_items_multiple(self, item_ids: Iterable[str]) -> dict[str, Any]:
        """Load several source objects. Missing ids are absent from the mapping."""
        ...


__all__ = [
    "BackendQuery",
    "Datasource",
    "QueryFilter",
    "ResultSet",
    "SearchIndex",
]
