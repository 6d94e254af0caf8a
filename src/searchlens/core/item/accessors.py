"""Property accessors and field extraction.

Source objects come in different shapes: plain mappings (decoded JSON,
documents from a repository) or regular Python objects (dataclasses, pydantic
models, ORM rows). An accessor knows how to read one named property from one
shape; extract_fields() walks property paths with them.

Property paths are colon separated ("author:name"). When an intermediate
value is a list or tuple, the walk fans out over its elements, so
"tags:label" on {"tags": [{"label": "a"}, {"label": "b"}]} yields
["a", "b"].
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from searchlens.core.item.exceptions import PropertyPathError
from searchlens.core.item.field import Field
from searchlens.core.utils import split_property_path

logger = logging.getLogger(__name__)

# Sentinel for "property not present", distinct from a present None.
MISSING = object()


@runtime_checkable
class PropertyAccessor(Protocol):
    """Reads a single property of one kind of source object."""

    def get_property(self, obj: Any, name: str) -> Any:
        """Return the property value, or MISSING if absent."""
        ...


class MappingAccessor:
    """Accessor for mappings (dict-like objects)."""

    def get_property(self, obj: Mapping[str, Any], name: str) -> Any:
        return obj.get(name, MISSING)


class AttributeAccessor:
    """Accessor for plain objects, reading public attributes."""

    def get_property(self, obj: Any, name: str) -> Any:
        if name.startswith("_"):
            return MISSING
        return getattr(obj, name, MISSING)


_ACCESSORS: list[tuple[Callable[[Any], bool], PropertyAccessor]] = []
_DEFAULT_ACCESSOR = AttributeAccessor()


def register_accessor(predicate: Callable[[Any], bool], accessor: PropertyAccessor) -> None:
    """Register an accessor for objects matching predicate.

    Accessors registered later take precedence over earlier ones.
    """
    _ACCESSORS.insert(0, (predicate, accessor))


def accessor_for(obj: Any) -> PropertyAccessor:
    """Return the accessor handling obj."""
    for predicate, accessor in _ACCESSORS:
        if predicate(obj):
            return accessor
    return _DEFAULT_ACCESSOR


register_accessor(lambda obj: isinstance(obj, Mapping), MappingAccessor())


def get_values(obj: Any, property_path: str) -> list[Any]:
    """Return all values found at property_path in obj.

    Missing properties and None values contribute nothing.

    Raises:
        PropertyPathError: If the path has no segments.
    """
    segments = split_property_path(property_path)
    if not segments:
        raise PropertyPathError("Empty property path", property_path=property_path)

    current = [obj]
    for segment in segments:
        next_values = []
        for value in current:
            if value is None:
                continue
            found = accessor_for(value).get_property(value, segment)
            if found is MISSING or found is None:
                continue
            if isinstance(found, (list, tuple)):
                next_values.extend(found)
            else:
                next_values.append(found)
        current = next_values
        if not current:
            break
    return [value for value in current if value is not None]


def extract_fields(obj: Any, fields_by_property_path: Mapping[str, list[Field]]) -> None:
    """Populate fields with the values found in obj.

    Args:
        obj: The hydrated source object.
        fields_by_property_path: Fields to fill, grouped by the property path
            they read. All fields sharing a path receive the same values.

    Values the field's data type rejects are skipped with a debug log.
    """
    for property_path, fields in fields_by_property_path.items():
        try:
            values = get_values(obj, property_path)
        except PropertyPathError as e:
            logger.warning("Skipping fields %s: %s", [f.field_id for f in fields], e)
            continue
        for field in fields:
            for value in values:
                try:
                    field.add_value(value)
                except ValueError as e:
                    logger.debug("Dropping value for field '%s': %s", field.field_id, e)


__all__ = [
    "AttributeAccessor",
    "MISSING",
    "MappingAccessor",
    "PropertyAccessor",
    "accessor_for",
    "extract_fields",
    "get_values",
    "register_accessor",
]
