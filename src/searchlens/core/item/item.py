"""Result items.

A ResultItem is what the backend hands back for one match: the combined id,
whatever field values the index stored, score and excerpt. Everything else
is filled in on demand. The source object is loaded the first time it is
needed, and fields are extracted from it at most once per item.
"""

import logging
from collections.abc import Iterator, Mapping
from copy import deepcopy
from enum import Enum
from typing import TYPE_CHECKING, Any

from searchlens.core.item.accessors import extract_fields
from searchlens.core.item.exceptions import DatasourceError, ItemError, ObjectLoadError
from searchlens.core.item.field import Field
from searchlens.core.utils import split_combined_id

if TYPE_CHECKING:
    from searchlens.core.index.protocols import Datasource, SearchIndex

logger = logging.getLogger(__name__)

_IMMUTABLE_TYPES = (str, bytes, int, float, bool, complex, type(None), frozenset)


class ExtractionState(str, Enum):
    """Whether the extraction pass already ran for an item."""

    UNEXTRACTED = "unextracted"
    EXTRACTED = "extracted"


class ObjectState(str, Enum):
    """Hydration state of an item's source object."""

    UNLOADED = "unloaded"
    LOADED = "loaded"
    UNAVAILABLE = "unavailable"


class ResultItem:
    """One matched object of a search.

    Attributes:
        index: The index the item belongs to.
        id: Combined id ("<datasource_id>/<raw_id>").
        score: Relevance score assigned by the backend.
        boost: Index-time boost.
        excerpt: Optional highlighted snippet.

    Not safe for concurrent mutation. Use clone() before handing an item to a
    second consumer.
    """

    def __init__(
        self,
        index: "SearchIndex",
        id: str,
        datasource: "Datasource | None" = None,
        *,
        datasource_id: str | None = None,
    ):
        """Create a result item.

        Args:
            index: The item's search index.
            id: Combined id of the item.
            datasource: Optional datasource. Resolved from the index on demand
                if not given.
            datasource_id: Optional datasource id. Derived from id if not given.
        """
        self.index = index
        self.id = id
        self._datasource = datasource
        if datasource_id is None and datasource is not None:
            datasource_id = datasource.plugin_id
        if datasource_id is None:
            datasource_id, _ = split_combined_id(id)
        self._datasource_id = datasource_id
        self._original_object: Any = None
        self._object_state = ObjectState.UNLOADED
        self._fields: dict[str, Field] = {}
        self._extraction_state = ExtractionState.UNEXTRACTED
        self._diagnostics: list[str] = []
        self.score: float = 1.0
        self.boost: float = 1.0
        self.excerpt: str | None = None
        self._extra_data: dict[str, Any] = {}

    def __repr__(self) -> str:
        return (
            f"ResultItem(id={self.id!r}, fields={list(self._fields)}, "
            f"extraction={self._extraction_state.value}, object={self._object_state.value})"
        )

    # =========================================================================
    # DATASOURCE
    # =========================================================================

    @property
    def datasource_id(self) -> str | None:
        return self._datasource_id

    def get_datasource(self) -> "Datasource":
        """Return the item's datasource, resolving it through the index.

        Raises:
            DatasourceError: If the id carries no datasource or the index
                does not know it.
        """
        if self._datasource is None:
            if self._datasource_id is None:
                raise DatasourceError(
                    f"Item {self.id!r} has no datasource",
                    context={"item_id": self.id},
                )
            self._datasource = self.index.get_datasource(self._datasource_id)
        return self._datasource

    # =========================================================================
    # ORIGINAL OBJECT
    # =========================================================================

    @property
    def object_state(self) -> ObjectState:
        return self._object_state

    def get_original_object(self, load: bool = True) -> Any:
        """Return the source object.

        Args:
            load: Load the object from the index if not yet loaded. With
                load=False the object is returned only if already present.

        Returns:
            The source object, or None when load=False and it is not loaded.

        Raises:
            ObjectLoadError: If load=True and the object cannot be loaded.
                A failed load is remembered; it is never retried.
        """
        if self._object_state is ObjectState.LOADED:
            return self._original_object
        if not load:
            return None
        if self._object_state is ObjectState.UNAVAILABLE:
            raise ObjectLoadError(self.id, reason="previous load failed")

        try:
            obj = self.index.load_item(self.id)
        except Exception as e:
            self._object_state = ObjectState.UNAVAILABLE
            raise ObjectLoadError(self.id, reason=str(e)) from e
        if obj is None:
            self._object_state = ObjectState.UNAVAILABLE
            raise ObjectLoadError(self.id, reason="not found")
        self.set_original_object(obj)
        return obj

    def set_original_object(self, original_object: Any) -> "ResultItem":
        """Attach (or explicitly replace) the hydrated source object."""
        if original_object is None:
            raise ValueError("Use mark_object_unavailable() instead of setting None")
        self._original_object = original_object
        self._object_state = ObjectState.LOADED
        return self

    def mark_object_unavailable(self) -> "ResultItem":
        """Record that the source object cannot be loaded.

        Later get_original_object() calls raise without hitting the index.
        """
        if self._object_state is not ObjectState.LOADED:
            self._object_state = ObjectState.UNAVAILABLE
        return self

    # =========================================================================
    # FIELDS
    # =========================================================================

    @property
    def fields_extracted(self) -> bool:
        return self._extraction_state is ExtractionState.EXTRACTED

    @property
    def diagnostics(self) -> list[str]:
        """Non-fatal problems met while extracting this item's fields."""
        return list(self._diagnostics)

    def get_field(self, field_id: str, extract: bool = False) -> Field | None:
        """Return one field, or None if the item does not have it."""
        return self.get_fields(extract).get(field_id)

    def get_fields(self, extract: bool = False) -> dict[str, Field]:
        """Return the item's fields.

        Args:
            extract: Run the extraction pass if it did not run yet. With
                extract=False only what is already stored is returned and
                nothing is loaded.

        The extraction pass runs at most once. Its failures are logged and
        recorded in diagnostics, never raised.
        """
        if extract and self._extraction_state is ExtractionState.UNEXTRACTED:
            self._extract()
        return self._fields

    def _extract(self) -> None:
        try:
            datasource_ids: list[str | None] = [None, self.get_datasource().plugin_id]
        except ItemError as e:
            self._record("Cannot resolve datasource of item %s: %s", e)
            datasource_ids = [None]

        for datasource_id in datasource_ids:
            fields_by_property_path: dict[str, list[Field]] = {}
            for field_id, descriptor in self.index.get_fields_by_datasource(datasource_id).items():
                existing = self._fields.get(field_id)
                # Don't overwrite fields that were previously set.
                if existing is not None and not existing.is_empty():
                    continue
                field = descriptor.create_field()
                self._fields[field_id] = field
                fields_by_property_path.setdefault(descriptor.property_path, []).append(field)

            if datasource_id is None or not fields_by_property_path:
                continue
            try:
                extract_fields(self.get_original_object(), fields_by_property_path)
            except ItemError as e:
                self._record("Could not extract fields of item %s: %s", e)

        self._extraction_state = ExtractionState.EXTRACTED
        logger.debug("Extracted %d fields for item %s", len(self._fields), self.id)

    def _record(self, message: str, error: Exception) -> None:
        logger.warning(message, self.id, error)
        self._diagnostics.append(str(error))

    def set_field(self, field_id: str, field: Field | None = None) -> "ResultItem":
        """Set a field, or remove it when field is None."""
        if field is not None:
            self._fields[field_id] = field
        else:
            self._fields.pop(field_id, None)
        return self

    def set_fields(self, fields: Mapping[str, Field]) -> "ResultItem":
        """Replace all fields."""
        self._fields = dict(fields)
        return self

    def __iter__(self) -> Iterator[Field]:
        """Iterate over the extracted fields."""
        return iter(list(self.get_fields(extract=True).values()))

    # =========================================================================
    # EXTRA DATA
    # =========================================================================

    @property
    def extra_data(self) -> dict[str, Any]:
        """Shallow snapshot of all extra data."""
        return dict(self._extra_data)

    def has_extra_data(self, key: str) -> bool:
        return key in self._extra_data

    def get_extra_data(self, key: str, default: Any = None) -> Any:
        value = self._extra_data.get(key)
        return default if value is None else value

    def set_extra_data(self, key: str, data: Any = None) -> "ResultItem":
        """Set extra data, or remove the key when data is None."""
        if data is not None:
            self._extra_data[key] = data
        else:
            self._extra_data.pop(key, None)
        return self

    # =========================================================================
    # CLONING
    # =========================================================================

    def clone(self) -> "ResultItem":
        """Return a copy sharing no mutable state with this item.

        Fields and object-valued extra data are deep-copied. The index,
        datasource and source object are shared.
        """
        twin = ResultItem(self.index, self.id, self._datasource, datasource_id=self._datasource_id)
        twin._original_object = self._original_object
        twin._object_state = self._object_state
        twin._fields = {field_id: field.copy() for field_id, field in self._fields.items()}
        twin._extraction_state = self._extraction_state
        twin._diagnostics = list(self._diagnostics)
        twin.score = self.score
        twin.boost = self.boost
        twin.excerpt = self.excerpt
        twin._extra_data = {
            key: value if isinstance(value, _IMMUTABLE_TYPES) else deepcopy(value)
            for key, value in self._extra_data.items()
        }
        return twin

    __copy__ = clone


__all__ = ["ExtractionState", "ObjectState", "ResultItem"]
