"""DTOs for Frankenstein result materialization.

A ResultRow is the flat record a view renders: identity, relevance,
excerpt, the source object (or its id while not hydrated) and one entry per
requested field.
"""

from typing import Any, Final

from pydantic import BaseModel, Field

from searchlens.core.dto.result_dto import BaseResult

#: Row attributes that always count as present when computing missing fields.
ROW_PROPERTIES: Final = frozenset({"id", "datasource_id", "item", "relevance", "excerpt"})


class ResultRow(BaseModel):
    """One materialized result row.

    Attributes:
        id: Combined id of the matched item.
        datasource_id: Datasource of the item.
        item: The hydrated source object, or the id while not hydrated.
        hydrated: Whether item holds the source object.
        relevance: Score assigned by the backend.
        excerpt: Highlighted snippet, empty string if none.
        values: Field id to field values.
    """

    id: str = Field(description="Combined item id")
    datasource_id: str | None = Field(default=None, description="Datasource of the item")
    item: Any = Field(default=None, description="Source object, or the id when not hydrated")
    hydrated: bool = Field(default=False, description="True once item holds the source object")
    relevance: float = Field(default=1.0, description="Backend score")
    excerpt: str = Field(default="", description="Highlighted snippet")
    values: dict[str, list[Any]] = Field(default_factory=dict, description="Field values")

    model_config = {"extra": "forbid", "arbitrary_types_allowed": True}

    def attach(self, obj: Any) -> None:
        """Replace the id placeholder with the hydrated source object."""
        self.item = obj
        self.hydrated = True

    def present_fields(self) -> set[str]:
        """Names that already resolve on this row."""
        return set(self.values) | ROW_PROPERTIES

    def get(self, field_id: str, default: Any = None) -> Any:
        """Return a field's values or a row property."""
        if field_id in self.values:
            return self.values[field_id]
        if field_id in ROW_PROPERTIES:
            return getattr(self, field_id)
        return default


class MaterializeResult(BaseResult):
    """Result of Frankenstein.materialize().

    [Result Pattern] Rows are always present. A PARTIAL_HYDRATION detail lists
    ids whose source object could not be loaded; those rows keep the id
    placeholder and only the values known before hydration.

    Attributes:
        rows: Rows in original match order.
        loaded_ids: Ids hydrated by the bulk load.
        unavailable_ids: Ids the bulk load did not return.
    """

    rows: list[ResultRow] = Field(default_factory=list, description="Rows in match order")
    loaded_ids: list[str] = Field(default_factory=list, description="Ids hydrated by bulk load")
    unavailable_ids: list[str] = Field(
        default_factory=list, description="Ids missing from the bulk load"
    )


__all__ = ["MaterializeResult", "ROW_PROPERTIES", "ResultRow"]
