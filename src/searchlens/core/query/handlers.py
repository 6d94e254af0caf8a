"""Filter handlers.

A filter handler turns one configured view filter (field, operator, value,
group) into conditions on a Sherlock executor. Handlers are where raw user
input is interpreted, so they are also the ones allowed to abort a search.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from searchlens.core.item.data_types import parse_date
from searchlens.core.query.filter_group import EQ, NE

if TYPE_CHECKING:
    from searchlens.core.query.sherlock import Sherlock

logger = logging.getLogger(__name__)

#: Pseudo-operators checking for the presence of a value.
EMPTY = "empty"
NOT_EMPTY = "not empty"


@dataclass(slots=True)
class FilterHandler:
    """A single view filter bound to one field.

    Attributes:
        field: Field the filter applies to.
        operator: Comparison operator, or EMPTY / NOT_EMPTY.
        value: Raw filter value as entered by the user.
        group: Filter group the condition belongs to (None: ungrouped).
    """

    field: str
    operator: str = EQ
    value: Any = None
    group: str | None = None

    def apply(self, sherlock: "Sherlock") -> None:
        """Add this filter's condition to sherlock."""
        if self.operator == EMPTY:
            sherlock.condition(self.field, None, EQ, self.group)
        elif self.operator == NOT_EMPTY:
            sherlock.condition(self.field, None, NE, self.group)
        else:
            sherlock.condition(self.field, self.value, self.operator, self.group)


@dataclass(slots=True)
class DateFilter(FilterHandler):
    """Filter on a date field.

    Values may be timestamps or date strings ("2024-03-01", "March 1 2024
    10:00"). Nested lists, as produced by some widgets, are unwrapped to their
    first element. A value that is not a date adds no condition.

    Attributes:
        now: Reference time for partial dates. Defaults to the current time.
    """

    now: datetime | None = None

    def apply(self, sherlock: "Sherlock") -> None:
        if self.operator in (EMPTY, NOT_EMPTY):
            FilterHandler.apply(self, sherlock)
            return

        value = self.value
        while isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if value is None or value == "":
            logger.debug("Date filter on '%s' has no value, skipping", self.field)
            return

        try:
            timestamp = parse_date(value, now=self.now)
        except ValueError as e:
            logger.debug("Date filter on '%s' ignored: %s", self.field, e)
            return
        sherlock.condition(self.field, timestamp, self.operator, self.group)


__all__ = ["DateFilter", "EMPTY", "FilterHandler", "NOT_EMPTY"]
