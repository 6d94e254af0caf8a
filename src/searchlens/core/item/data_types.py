"""Field data types.

A data type converts raw values pulled from a source object into the
representation stored on a Field. Backends receive converted values, so an
"integer" field always holds ints no matter what the source object stored.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from dateutil import parser as dt_parser

logger = logging.getLogger(__name__)

_FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})


def parse_date(value: Any, *, now: datetime | None = None) -> int:
    """Convert a date-like value into a UNIX timestamp.

    Args:
        value: datetime, number or numeric string (already a timestamp), or
            a date string in any format python-dateutil understands.
        now: Reference time filling missing components of partial dates.
            Defaults to the current UTC time.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a date: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            pass
        reference = (now or datetime.now(UTC)).replace(hour=0, minute=0, second=0, microsecond=0)
        try:
            parsed = dt_parser.parse(value, default=reference)
        except (dt_parser.ParserError, OverflowError) as e:
            raise ValueError(f"Not a date: {value!r}") from e
    else:
        raise ValueError(f"Not a date: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return int(parsed.timestamp())


def _to_boolean(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _to_integer(value: Any) -> int:
    if isinstance(value, str):
        return int(float(value))
    return int(value)


@dataclass(frozen=True, slots=True)
class DataType:
    """A named field data type.

    Attributes:
        id: Type identifier referenced by Field.type.
        label: Human-readable name.
        description: Short description.
        converter: Callable turning one raw value into the stored value.
    """

    id: str
    label: str
    description: str
    converter: Callable[[Any], Any]

    def convert(self, value: Any) -> Any:
        """Convert a raw value.

        Raises:
            ValueError: If the value cannot be represented in this type.
        """
        try:
            return self.converter(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError(f"Cannot convert {value!r} to {self.id}: {e}") from e


_DATA_TYPES: dict[str, DataType] = {}


def register_data_type(data_type: DataType) -> None:
    """Register (or replace) a data type."""
    if data_type.id in _DATA_TYPES:
        logger.debug("Replacing data type '%s'", data_type.id)
    _DATA_TYPES[data_type.id] = data_type


def get_data_type(type_id: str) -> DataType:
    """Return the data type with the given id, falling back to "string"."""
    data_type = _DATA_TYPES.get(type_id)
    if data_type is None:
        logger.debug("Unknown data type '%s', using 'string'", type_id)
        return _DATA_TYPES["string"]
    return data_type


def list_data_types() -> list[str]:
    """Return the ids of all registered data types."""
    return sorted(_DATA_TYPES)


for _data_type in (
    DataType("string", "String", "A string field", str),
    DataType("text", "Fulltext", "A fulltext field", str),
    DataType("integer", "Integer", "An integer field", _to_integer),
    DataType("decimal", "Decimal", "A decimal field", float),
    DataType("boolean", "Boolean", "A boolean field", _to_boolean),
    DataType("date", "Date", "A date field, stored as UNIX timestamp", parse_date),
):
    register_data_type(_data_type)


__all__ = [
    "DataType",
    "get_data_type",
    "list_data_types",
    "parse_date",
    "register_data_type",
]
