"""Field descriptors and field values.

A FieldDescriptor is declared once per index and says where a field's value
comes from. A Field is the per-item value holder created from a descriptor.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any

from searchlens.core.item.data_types import get_data_type


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Declares how to pull one named field from a source object.

    Attributes:
        field_id: Stable identifier, unique within the index.
        property_path: Colon-separated path into the source object
            (e.g. "author:name").
        datasource_id: Datasource the descriptor applies to. None means the
            field is datasource-agnostic (computed, not extracted).
        type: Data type id used to convert extracted values.
        label: Optional human-readable label.
    """

    field_id: str
    property_path: str
    datasource_id: str | None = None
    type: str = "string"
    label: str | None = None

    def create_field(self) -> "Field":
        """Return a new, empty Field for this descriptor."""
        return Field(
            field_id=self.field_id,
            property_path=self.property_path,
            datasource_id=self.datasource_id,
            type=self.type,
        )


@dataclass(slots=True)
class Field:
    """Values of one field on one result item.

    Attributes:
        field_id: Identifier of the field.
        property_path: Path the values were (or will be) extracted from.
        datasource_id: Datasource the field belongs to, None if agnostic.
        type: Data type id.
        values: Extracted or backend-provided values.
    """

    field_id: str
    property_path: str = ""
    datasource_id: str | None = None
    type: str = "string"
    values: list[Any] = field(default_factory=list)

    def is_empty(self) -> bool:
        """True while the field holds no values."""
        return not self.values

    def add_value(self, value: Any) -> None:
        """Convert a raw value with the field's data type and store it.

        Raises:
            ValueError: If the value cannot be converted.
        """
        self.values.append(get_data_type(self.type).convert(value))

    def set_values(self, values: list[Any]) -> None:
        """Replace the stored values without conversion."""
        self.values = list(values)

    def copy(self) -> "Field":
        """Return an independent copy (values list included)."""
        return Field(
            field_id=self.field_id,
            property_path=self.property_path,
            datasource_id=self.datasource_id,
            type=self.type,
            values=deepcopy(self.values),
        )


__all__ = ["Field", "FieldDescriptor"]
