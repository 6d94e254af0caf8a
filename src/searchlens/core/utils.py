"""Small core utilities used across the project."""

import logging

# Set up a module-level logger
logger = logging.getLogger(__name__)

#: Separator between the datasource id and the raw id in a combined item id.
COMBINED_ID_SEPARATOR = "/"

#: Separator between the segments of a property path ("author:name").
PROPERTY_PATH_SEPARATOR = ":"


def create_combined_id(datasource_id: str, raw_id: str) -> str:
    """Return the index-wide item id for a datasource-local id."""
    return f"{datasource_id}{COMBINED_ID_SEPARATOR}{raw_id}"


def split_combined_id(combined_id: str) -> tuple[str | None, str]:
    """Split a combined item id into (datasource_id, raw_id).

    Ids without separator have no datasource part.
    """
    if COMBINED_ID_SEPARATOR not in combined_id:
        return None, combined_id
    datasource_id, raw_id = combined_id.split(COMBINED_ID_SEPARATOR, 1)
    return datasource_id, raw_id


def split_property_path(property_path: str) -> list[str]:
    """Split a property path into its non-empty segments."""
    return [part for part in property_path.split(PROPERTY_PATH_SEPARATOR) if part]
