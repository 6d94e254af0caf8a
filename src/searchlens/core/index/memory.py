"""In-memory search index.

A complete, dependency-free implementation of the SearchIndex and
BackendQuery protocols, for tests, examples and small datasets. Documents
are indexed by extracting every field from the source object at index time.
Only fields registered as stored come back with results; everything else
must be extracted from the source object again, exactly like a real backend
returning ids plus a few stored values.

Source objects and indexed documents are kept apart, so deleting an object
without reindexing simulates a stale index entry.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, TypeAlias

from searchlens.core.index.exceptions import UnknownFieldError, UnsupportedOperatorError
from searchlens.core.index.protocols import ResultSet
from searchlens.core.item.accessors import get_values
from searchlens.core.item.exceptions import DatasourceError
from searchlens.core.item.field import FieldDescriptor
from searchlens.core.item.item import ResultItem
from searchlens.core.query.filter_group import (
    EQ,
    GT,
    GTE,
    IN,
    IS_NOT_NULL,
    IS_NULL,
    LT,
    LTE,
    NE,
    NOT_IN,
    Condition,
    Conjunction,
)
from searchlens.core.utils import create_combined_id

logger = logging.getLogger(__name__)

Document: TypeAlias = dict[str, list[Any]]


def _compare(values: list[Any], operator: str, value: Any) -> bool:
    if operator in (IS_NULL, IS_NOT_NULL):
        return bool(values) == (operator == IS_NOT_NULL)
    if value is None:
        # "=" and "<>" against None, as Condition.compile() rewrites them.
        return bool(values) == (operator == NE)
    if operator == EQ:
        return value in values
    if operator == NE:
        return value not in values
    if operator in (IN, NOT_IN):
        candidates = list(value) if isinstance(value, (list, tuple, set, frozenset)) else [value]
        found = any(v in candidates for v in values)
        return found if operator == IN else not found

    def check(v: Any) -> bool:
        try:
            if operator == LT:
                return v < value
            if operator == LTE:
                return v <= value
            if operator == GT:
                return v > value
            return v >= value
        except TypeError:
            return False

    return any(check(v) for v in values)


@dataclass(frozen=True, slots=True)
class InMemoryDatasource:
    """A datasource of the in-memory index."""

    plugin_id: str
    label: str | None = None


class InMemoryFilter:
    """A nested filter evaluated against in-memory documents."""

    def __init__(self, conjunction: str = "AND"):
        self._conjunction = Conjunction.coerce(conjunction).value
        self.conditions: list[Condition] = []
        self.filters: list[InMemoryFilter] = []

    def __repr__(self) -> str:
        return f"InMemoryFilter({self._conjunction}, {self.conditions}, {self.filters})"

    @property
    def conjunction(self) -> str:
        return self._conjunction

    def condition(self, field: str, value: Any, operator: str = EQ) -> "InMemoryFilter":
        self.conditions.append(Condition(field, value, operator))
        return self

    def filter(self, filter: "InMemoryFilter") -> "InMemoryFilter":
        self.filters.append(filter)
        return self

    def validate(self, index: "InMemoryIndex") -> None:
        """Reject unknown fields and operators.

        Raises:
            UnknownFieldError: If a condition references an unknown field.
            UnsupportedOperatorError: If an operator cannot be evaluated, or
                compares against None with anything but "=", "<>", IS NULL
                or IS NOT NULL.
        """
        for condition in self.conditions:
            if condition.field not in index.fields:
                raise UnknownFieldError(condition.field, index_id=index.id)
            if condition.operator not in _OPERATORS:
                raise UnsupportedOperatorError(condition.operator, index_id=index.id)
            if condition.value is None and condition.operator not in _NULL_OPERATORS:
                raise UnsupportedOperatorError(
                    condition.operator, index_id=index.id, reason="cannot compare with None"
                )
        for nested in self.filters:
            nested.validate(index)

    def matches(self, document: Document) -> bool:
        results = (
            *(
                _compare(document.get(c.field, []), c.operator, c.value)
                for c in self.conditions
            ),
            *(nested.matches(document) for nested in self.filters),
        )
        if self._conjunction == Conjunction.OR.value:
            return any(results) if results else True
        if self._conjunction == Conjunction.NOT.value:
            return not any(results)
        return all(results)


_OPERATORS = frozenset({EQ, NE, LT, LTE, GT, GTE, IN, NOT_IN, IS_NULL, IS_NOT_NULL})
_NULL_OPERATORS = frozenset({EQ, NE, IS_NULL, IS_NOT_NULL})


class InMemoryQuery:
    """BackendQuery over an InMemoryIndex.

    Options understood: "parse mode" ("terms": every key term must appear,
    anything else: the whole key string must appear) and "skip result
    count" (count is None when true).
    """

    def __init__(self, index: "InMemoryIndex", options: dict[str, Any] | None = None):
        self.index = index
        self._options: dict[str, Any] = {"search id": type(self).__name__, **(options or {})}
        self._filter = InMemoryFilter("AND")
        self._keys: str | None = None
        self._fulltext_fields: list[str] | None = None
        self._sorts: list[tuple[str, str]] = []
        self._offset: int | None = None
        self._limit: int | None = None

    @property
    def root_filter(self) -> InMemoryFilter:
        """The top-level AND filter conditions are added to."""
        return self._filter

    # BackendQuery protocol.

    def keys(self, keys: str | None) -> "InMemoryQuery":
        self._keys = keys
        return self

    def fields(self, fields: list[str]) -> "InMemoryQuery":
        self._fulltext_fields = list(fields)
        return self

    def condition(self, field: str, value: Any, operator: str = EQ) -> "InMemoryQuery":
        self._filter.condition(field, value, operator)
        return self

    def create_filter(self, conjunction: str = "AND") -> InMemoryFilter:
        return InMemoryFilter(conjunction)

    def filter(self, filter: InMemoryFilter) -> "InMemoryQuery":
        self._filter.filter(filter)
        return self

    def sort(self, field: str, order: str = "ASC") -> "InMemoryQuery":
        self._sorts.append((field, order.upper()))
        return self

    def range(self, offset: int | None = None, limit: int | None = None) -> "InMemoryQuery":
        self._offset = offset
        self._limit = limit
        return self

    def get_option(self, name: str, default: Any = None) -> Any:
        return self._options.get(name, default)

    def set_option(self, name: str, value: Any) -> Any:
        previous = self._options.get(name)
        self._options[name] = value
        return previous

    def _validate(self) -> None:
        self._filter.validate(self.index)
        for field in [name for name, _ in self._sorts] + (self._fulltext_fields or []):
            if field not in self.index.fields:
                raise UnknownFieldError(field, index_id=self.index.id)

    def _matches_keys(self, document: Document) -> bool:
        if not self._keys:
            return True
        fulltext = self._fulltext_fields or self.index.fulltext_fields
        haystack = " ".join(str(v) for f in fulltext for v in document.get(f, [])).lower()
        if self.get_option("parse mode", "terms") == "terms":
            return all(term in haystack for term in self._keys.lower().split())
        return self._keys.lower() in haystack

    def execute(self) -> ResultSet:
        """Run the query against the index's documents.

        Raises:
            UnknownFieldError: If a condition, sort or fulltext field is unknown.
            UnsupportedOperatorError: If a condition operator is unknown.
        """
        self._validate()
        matches = [
            item_id
            for item_id, document in self.index.documents.items()
            if self._filter.matches(document) and self._matches_keys(document)
        ]

        for field, order in reversed(self._sorts):
            present = [i for i in matches if self.index.documents[i].get(field)]
            absent = [i for i in matches if not self.index.documents[i].get(field)]
            present.sort(key=lambda i: self.index.documents[i][field][0], reverse=order == "DESC")
            matches = present + absent

        count = None if self.get_option("skip result count") else len(matches)
        start = self._offset or 0
        end = None if self._limit is None else start + self._limit
        items = {item_id: self.index.create_result_item(item_id) for item_id in matches[start:end]}
        logger.debug(
            "InMemoryQuery on %s matched %d, returning %d", self.index.id, len(matches), len(items)
        )
        return ResultSet(count=count, items=items)


class InMemoryIndex:
    """SearchIndex keeping source objects and documents in dicts."""

    def __init__(self, id: str = "default"):
        self._id = id
        self._datasources: dict[str, InMemoryDatasource] = {}
        self._fields: dict[str, FieldDescriptor] = {}
        self._stored: set[str] = set()
        self._objects: dict[str, Any] = {}
        self._documents: dict[str, Document] = {}
        logger.debug("InMemoryIndex '%s' created", id)

    @property
    def id(self) -> str:
        return self._id

    @property
    def fields(self) -> dict[str, FieldDescriptor]:
        return dict(self._fields)

    @property
    def fulltext_fields(self) -> list[str]:
        return [field_id for field_id, d in self._fields.items() if d.type == "text"]

    @property
    def documents(self) -> dict[str, Document]:
        return self._documents

    # =========================================================================
    # SETUP
    # =========================================================================

    def add_datasource(self, datasource_id: str, label: str | None = None) -> InMemoryDatasource:
        datasource = InMemoryDatasource(datasource_id, label)
        self._datasources[datasource_id] = datasource
        return datasource

    def add_field(self, descriptor: FieldDescriptor, *, stored: bool = False) -> None:
        """Declare a field.

        Args:
            descriptor: The field descriptor.
            stored: Whether results carry the field's values.
        """
        datasource_id = descriptor.datasource_id
        if datasource_id is not None and datasource_id not in self._datasources:
            raise DatasourceError(
                f"Unknown datasource {datasource_id!r}",
                context={"field_id": descriptor.field_id},
            )
        self._fields[descriptor.field_id] = descriptor
        if stored:
            self._stored.add(descriptor.field_id)

    def index_item(self, datasource_id: str, raw_id: str, obj: Any) -> str:
        """Store a source object and index its fields. Returns the combined id."""
        self.get_datasource(datasource_id)
        item_id = create_combined_id(datasource_id, raw_id)
        self._objects[item_id] = obj

        document: Document = {}
        for field_id, descriptor in self.get_fields_by_datasource(datasource_id).items():
            field = descriptor.create_field()
            for value in get_values(obj, descriptor.property_path):
                try:
                    field.add_value(value)
                except ValueError as e:
                    logger.debug("Not indexing value of %s.%s: %s", item_id, field_id, e)
            document[field_id] = field.values
        self._documents[item_id] = document
        return item_id

    def delete_object(self, item_id: str) -> None:
        """Remove a source object but keep its indexed document (stale entry)."""
        self._objects.pop(item_id, None)

    def create_result_item(self, item_id: str) -> ResultItem:
        """Return a result item carrying the stored fields of a document."""
        item = ResultItem(self, item_id)
        document = self._documents.get(item_id, {})
        for field_id in self._stored:
            if document.get(field_id):
                field = self._fields[field_id].create_field()
                field.set_values(document[field_id])
                item.set_field(field_id, field)
        return item

    # =========================================================================
    # SEARCH INDEX PROTOCOL
    # =========================================================================

    def query(self, options: dict[str, Any] | None = None) -> InMemoryQuery:
        return InMemoryQuery(self, options)

    def get_datasource(self, datasource_id: str) -> InMemoryDatasource:
        try:
            return self._datasources[datasource_id]
        except KeyError:
            raise DatasourceError(
                f"Index {self._id!r} has no datasource {datasource_id!r}",
                context={"datasource_id": datasource_id},
            ) from None

    def get_fields_by_datasource(self, datasource_id: str | None) -> dict[str, FieldDescriptor]:
        return {
            field_id: descriptor
            for field_id, descriptor in self._fields.items()
            if descriptor.datasource_id == datasource_id
        }

    def load_item(self, item_id: str) -> Any | None:
        return self._objects.get(item_id)

    def load_items_multiple(self, item_ids: Iterable[str]) -> dict[str, Any]:
        return {item_id: self._objects[item_id] for item_id in item_ids if item_id in self._objects}


__all__ = ["InMemoryDatasource", "InMemoryFilter", "InMemoryIndex", "InMemoryQuery"]
