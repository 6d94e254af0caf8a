"""Result items, fields and field extraction."""

from searchlens.core.item.accessors import (
    AttributeAccessor,
    MappingAccessor,
    PropertyAccessor,
    accessor_for,
    extract_fields,
    get_values,
    register_accessor,
)
from searchlens.core.item.data_types import (
    DataType,
    get_data_type,
    list_data_types,
    parse_date,
    register_data_type,
)
from searchlens.core.item.exceptions import (
    DatasourceError,
    ItemError,
    ObjectLoadError,
    PropertyPathError,
)
from searchlens.core.item.field import Field, FieldDescriptor
from searchlens.core.item.item import ExtractionState, ObjectState, ResultItem

__all__ = [
    "AttributeAccessor",
    "DataType",
    "DatasourceError",
    "ExtractionState",
    "Field",
    "FieldDescriptor",
    "ItemError",
    "MappingAccessor",
    "ObjectLoadError",
    "ObjectState",
    "PropertyAccessor",
    "PropertyPathError",
    "ResultItem",
    "accessor_for",
    "extract_fields",
    "get_data_type",
    "get_values",
    "list_data_types",
    "parse_date",
    "register_accessor",
    "register_data_type",
]
