"""Query builder.

QueryBuilder accumulates everything a view asks for before execution:
filter groups, sort keys, fulltext keys, requested fields and the result
range. assemble() then writes the filter tree and sorts onto the backend
query in one go.

Filter group folding:

- the ungrouped (default) group attaches its members to the query itself;
- with group_operator AND, every other group becomes one sub-filter added
  to the query;
- with group_operator OR, every other group becomes one sub-filter added to
  a single OR filter, which is added to the query;
- empty groups produce nothing.
"""

import logging
from dataclasses import dataclass
from typing import Any

from searchlens.core.index.protocols import BackendQuery, QueryFilter
from searchlens.core.query.filter_group import (
    DEFAULT_GROUP,
    EQ,
    Conjunction,
    FilterGroup,
)

logger = logging.getLogger(__name__)

_GLOBAL_CONJUNCTIONS = (Conjunction.AND, Conjunction.OR)


@dataclass(frozen=True, slots=True)
class SortKey:
    """A sort instruction."""

    field: str
    order: str = "ASC"


def _group_key(group_id: str | None) -> str:
    return DEFAULT_GROUP if group_id is None else str(group_id)


class QueryBuilder:
    """Accumulates filters, sorts, fields and range for one backend query."""

    def __init__(self, query: BackendQuery):
        """Create a builder for query.

        Args:
            query: The backend query assemble() writes to.
        """
        self.query = query
        self._groups: dict[str, FilterGroup] = {}
        self._sorts: list[SortKey] = []
        self._fields: dict[str, bool] = {}
        self._keys: str | None = None
        self._fulltext_fields: list[str] | None = None
        self.offset: int | None = None
        self.limit: Any = None
        self._assembled = False

    # =========================================================================
    # FILTER GROUPS
    # =========================================================================

    def group(self, group_id: str | None = DEFAULT_GROUP) -> FilterGroup:
        """Return the group with the given id, creating it if needed."""
        key = _group_key(group_id)
        group = self._groups.get(key)
        if group is None:
            group = self._groups[key] = FilterGroup(group_id=key)
        return group

    @property
    def groups(self) -> dict[str, FilterGroup]:
        return dict(self._groups)

    def set_group_conjunction(
        self, group_id: str | None, conjunction: Conjunction | str
    ) -> "QueryBuilder":
        """Set the conjunction used among one group's members."""
        self.group(group_id).conjunction = Conjunction.coerce(conjunction)
        return self

    def add_condition(
        self, group_id: str | None, field: str, value: Any, operator: str = EQ
    ) -> "QueryBuilder":
        """Record a condition under group_id. Fields are not validated here."""
        self.group(group_id).add_condition(field, value, operator)
        return self

    def add_filter(self, group_id: str | None, filter: QueryFilter) -> "QueryBuilder":
        """Record a pre-built backend filter under group_id."""
        self.group(group_id).add_filter(filter)
        return self

    # =========================================================================
    # SORTS, KEYS, FIELDS, RANGE
    # =========================================================================

    def add_sort(self, field: str, order: str = "ASC") -> "QueryBuilder":
        self._sorts.append(SortKey(field, str(order).upper()))
        return self

    @property
    def sorts(self) -> list[SortKey]:
        return list(self._sorts)

    def keys(self, keys: str | None) -> "QueryBuilder":
        self._keys = keys
        return self

    def fulltext_fields(self, fields: list[str]) -> "QueryBuilder":
        self._fulltext_fields = list(fields)
        return self

    def add_field(self, field_id: str) -> str:
        """Request a field for the result rows. Returns the name to refer to it."""
        self._fields[field_id] = True
        return field_id

    @property
    def requested_fields(self) -> list[str]:
        return list(self._fields)

    def range(self, offset: int | None = None, limit: Any = None) -> "QueryBuilder":
        """Store the result window. The limit is normalized at execution."""
        self.offset = offset
        self.limit = limit
        return self

    # =========================================================================
    # ASSEMBLY
    # =========================================================================

    def assemble(self, group_operator: Conjunction | str = Conjunction.AND) -> BackendQuery:
        """Write filter groups, keys and sorts onto the backend query.

        Args:
            group_operator: Conjunction combining the non-default groups,
                AND or OR.

        Returns:
            The backend query.

        Raises:
            InvalidConjunctionError: If group_operator is neither AND nor OR.
            RuntimeError: If called twice.
        """
        conjunction = Conjunction.coerce(group_operator, allowed=_GLOBAL_CONJUNCTIONS)
        if self._assembled:
            raise RuntimeError("Query was already assembled")
        self._assembled = True

        if self._keys is not None:
            self.query.keys(self._keys)
        if self._fulltext_fields is not None:
            self.query.fields(self._fulltext_fields)

        grouped = [g for g in self._groups.values() if not g.is_default and not g.is_empty()]
        default = self._groups.get(DEFAULT_GROUP)
        if default is not None:
            default.apply_to(self.query)

        if grouped:
            if conjunction is Conjunction.OR:
                base = self.query.create_filter(Conjunction.OR.value)
                self.query.filter(base)
            else:
                base = self.query
            for group in grouped:
                base.filter(group.compile(self.query))

        for sort in self._sorts:
            self.query.sort(sort.field, sort.order)

        logger.debug(
            "Assembled query: group_operator=%s groups=%d sorts=%d",
            conjunction.value,
            len(grouped),
            len(self._sorts),
        )
        return self.query


__all__ = ["QueryBuilder", "SortKey"]
