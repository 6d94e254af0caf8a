"""Filter groups.

A view's filters arrive one by one, each tagged with the group it belongs
to. A FilterGroup collects them: conditions as (field, value, operator)
triples and already built backend filters, all combined with the group's
own conjunction. QueryBuilder folds the groups into the backend query.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, NamedTuple

from searchlens.core.index.protocols import BackendQuery, QueryFilter
from searchlens.core.query.exceptions import InvalidConjunctionError

#: Key of the ungrouped group. Its conditions attach to the query itself.
DEFAULT_GROUP: Final = ""

# =============================================================================
# OPERATORS
# =============================================================================

EQ: Final = "="
NE: Final = "<>"
LT: Final = "<"
LTE: Final = "<="
GT: Final = ">"
GTE: Final = ">="
IN: Final = "IN"
NOT_IN: Final = "NOT IN"
IS_NULL: Final = "IS NULL"
IS_NOT_NULL: Final = "IS NOT NULL"

_OPERATOR_ALIASES: dict[str, str] = {"==": EQ, "!=": NE}


def normalize_operator(operator: str) -> str:
    """Return the canonical spelling of an operator.

    Unknown operators are returned upper-cased; the backend rejects them.
    """
    canonical = " ".join(str(operator).split()).upper()
    return _OPERATOR_ALIASES.get(canonical, canonical)


# =============================================================================
# CONJUNCTION
# =============================================================================


class Conjunction(str, Enum):
    """Boolean conjunction of a filter group or filter."""

    AND = "AND"
    OR = "OR"
    NOT = "NOT"

    @classmethod
    def coerce(
        cls, value: "Conjunction | str", *, allowed: tuple["Conjunction", ...] | None = None
    ):
        """Return value as a Conjunction.

        Args:
            value: Conjunction or its (case-insensitive) name.
            allowed: Optional subset of accepted conjunctions.

        Raises:
            InvalidConjunctionError: If value is not an (allowed) conjunction.
        """
        allowed = allowed or tuple(cls)
        try:
            conjunction = cls(str(value.value if isinstance(value, cls) else value).upper())
        except ValueError:
            conjunction = None
        if conjunction not in allowed:
            raise InvalidConjunctionError(value, allowed=tuple(c.value for c in allowed))
        return conjunction


# =============================================================================
# CONDITION
# =============================================================================


class Condition(NamedTuple):
    """One (field, value, operator) triple."""

    field: str
    value: Any
    operator: str = EQ

    def compile(self) -> "Condition":
        """Return the condition as the backend should receive it.

        A None value compared with "=" or "<>" becomes an existence check
        (IS NULL / IS NOT NULL) instead of a comparison against None.
        """
        operator = normalize_operator(self.operator)
        if self.value is None:
            if operator == EQ:
                operator = IS_NULL
            elif operator == NE:
                operator = IS_NOT_NULL
        return Condition(self.field, self.value, operator)


# =============================================================================
# FILTER GROUP
# =============================================================================


@dataclass(slots=True)
class FilterGroup:
    """Conditions and nested filters sharing one conjunction.

    Attributes:
        group_id: Caller-chosen key. DEFAULT_GROUP means ungrouped.
        conjunction: Conjunction among this group's members.
        conditions: Conditions in insertion order.
        filters: Pre-built backend filters in insertion order.
    """

    group_id: str = DEFAULT_GROUP
    conjunction: Conjunction = Conjunction.AND
    conditions: list[Condition] = field(default_factory=list)
    filters: list[QueryFilter] = field(default_factory=list)

    @property
    def is_default(self) -> bool:
        return self.group_id == DEFAULT_GROUP

    def is_empty(self) -> bool:
        return not self.conditions and not self.filters

    def add_condition(self, field: str, value: Any, operator: str = EQ) -> "FilterGroup":
        self.conditions.append(Condition(field, value, operator))
        return self

    def add_filter(self, filter: QueryFilter) -> "FilterGroup":
        self.filters.append(filter)
        return self

    def apply_to(self, target: BackendQuery | QueryFilter) -> None:
        """Add this group's conditions and filters to target."""
        for condition in self.conditions:
            target.condition(*condition.compile())
        for nested in self.filters:
            target.filter(nested)

    def compile(self, query: BackendQuery) -> QueryFilter:
        """Build a sub-filter of query holding this group's members."""
        sub_filter = query.create_filter(self.conjunction.value)
        self.apply_to(sub_filter)
        return sub_filter


__all__ = [
    "Condition",
    "Conjunction",
    "DEFAULT_GROUP",
    "EQ",
    "FilterGroup",
    "GT",
    "GTE",
    "IN",
    "IS_NOT_NULL",
    "IS_NULL",
    "LT",
    "LTE",
    "NE",
    "NOT_IN",
    "normalize_operator",
]
