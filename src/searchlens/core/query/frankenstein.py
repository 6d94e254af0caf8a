"""Frankenstein result materializer.

Frankenstein turns the raw items of a search into result rows. It first
collects every value available without touching the source objects, then
brings the rest to life: one bulk load for all items still missing
requested fields, followed by field extraction from the loaded objects.

"It's alive! It's alive!"
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from searchlens.core.dto.frankenstein_dto import MaterializeResult, ResultRow
from searchlens.core.dto.result_dto import StatusCode, StatusDetail
from searchlens.core.index.protocols import SearchIndex
from searchlens.core.item.item import ObjectState, ResultItem

logger = logging.getLogger(__name__)


class Frankenstein:
    """Materializes result items into rows with a single bulk load.

    Hydration is attempted at most once per distinct item: items already
    hydrated or already known to be unavailable are never loaded again, and
    all remaining loads go through one load_items_multiple() call.

    Famous quote from Frankenstein:
    "It's alive! It's alive!"
    """

    def __init__(self, index: SearchIndex | None = None):
        """Create a materializer.

        Args:
            index: Index used for bulk loads. Defaults to the index of the
                first item being materialized.
        """
        self.index = index
        logger.debug("Frankenstein created")

    def _index_for(self, items: Iterable[ResultItem]) -> SearchIndex | None:
        if self.index is not None:
            return self.index
        for item in items:
            return item.index
        return None

    def _load_multiple(self, index: SearchIndex, item_ids: list[str]) -> dict[str, Any]:
        try:
            loaded = index.load_items_multiple(item_ids)
        except Exception as e:
            logger.error("Bulk load of %d items failed: %s", len(item_ids), e)
            return {}
        return {item_id: obj for item_id, obj in loaded.items() if obj is not None}

    @staticmethod
    def _row_skeleton(item_id: str, item: ResultItem) -> ResultRow:
        obj = item.get_original_object(load=False)
        row = ResultRow(
            id=item_id,
            datasource_id=item.datasource_id,
            item=obj if obj is not None else item_id,
            hydrated=obj is not None,
            relevance=item.score,
            excerpt=item.excerpt or "",
        )
        for field_id, field in item.get_fields(extract=False).items():
            if not field.is_empty():
                row.values[field_id] = list(field.values)
        return row

    def materialize(
        self,
        items: Mapping[str, ResultItem],
        requested_fields: Iterable[str] = (),
    ) -> MaterializeResult:
        """Build result rows for items.

        Args:
            items: Matched items keyed by combined id, in match order.
            requested_fields: Field ids the rows must carry when available.

        Returns:
            MaterializeResult with one row per item, in input order.
        """
        requested = list(dict.fromkeys(requested_fields))
        rows: dict[str, ResultRow] = {}
        missing: dict[str, list[str]] = {}
        to_load: list[str] = []

        # First gather as many values as possible without loading anything.
        for item_id, item in items.items():
            row = self._row_skeleton(item_id, item)
            present = row.present_fields()
            missing_fields = [field_id for field_id in requested if field_id not in present]
            if missing_fields:
                missing[item_id] = missing_fields
                if not row.hydrated and item.object_state is ObjectState.UNLOADED:
                    to_load.append(item_id)
            rows[item_id] = row

        loaded_ids: list[str] = []
        unavailable_ids: list[str] = []
        index = self._index_for(items.values())
        if to_load and index is not None:
            loaded = self._load_multiple(index, to_load)
            for item_id in to_load:
                obj = loaded.get(item_id)
                if obj is None:
                    items[item_id].mark_object_unavailable()
                    unavailable_ids.append(item_id)
                    continue
                items[item_id].set_original_object(obj)
                rows[item_id].attach(obj)
                loaded_ids.append(item_id)
            logger.debug("Bulk loaded %d of %d items", len(loaded_ids), len(to_load))
            if unavailable_ids:
                logger.warning(
                    "Index returned %d items whose source objects could not be loaded: %s",
                    len(unavailable_ids),
                    unavailable_ids,
                )

        for item_id, missing_fields in missing.items():
            item = items[item_id]
            for field_id in missing_fields:
                field = item.get_field(field_id, extract=True)
                if field is not None and not field.is_empty():
                    rows[item_id].values[field_id] = list(field.values)

        detail = None
        if unavailable_ids:
            detail = StatusDetail(
                code=StatusCode.PARTIAL_HYDRATION,
                message=f"{len(unavailable_ids)} result rows could not be hydrated",
                context={"ids": list(unavailable_ids)},
            )
        return MaterializeResult.success(
            rows=list(rows.values()),
            loaded_ids=loaded_ids,
            unavailable_ids=unavailable_ids,
            detail=detail,
        )

    def load_row_objects(self, rows: Sequence[ResultRow]) -> dict[int, Any]:
        """Return the source object of every row, keyed by row position.

        Rows still carrying an id placeholder are hydrated with one bulk
        load. Ids the index no longer has are logged and left out.
        """
        objects: dict[int, Any] = {}
        pending: dict[str, list[int]] = {}
        for position, row in enumerate(rows):
            if row.hydrated:
                objects[position] = row.item
            else:
                pending.setdefault(row.id, []).append(position)

        if not pending:
            return objects
        if self.index is None:
            logger.error("Cannot load %d row objects without an index", len(pending))
            return objects

        loaded = self._load_multiple(self.index, list(pending))
        for item_id, positions in pending.items():
            obj = loaded.get(item_id)
            if obj is None:
                logger.error(
                    "The search index returned a reference to item %s, which no longer exists. "
                    "The index may be out of sync and should be rebuilt.",
                    item_id,
                )
                continue
            for position in positions:
                rows[position].attach(obj)
                objects[position] = obj
        return dict(sorted(objects.items()))


ResultMaterializer = Frankenstein
