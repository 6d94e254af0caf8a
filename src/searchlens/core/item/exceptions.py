"""Exception classes for result items and field extraction.

Extraction problems for a single item are non-fatal: the item logs them and
leaves the affected fields empty. These exceptions travel between the
accessors, the item and the index, they do not reach query callers.
"""


class ItemError(Exception):
    """Base exception for result item errors."""

    def __init__(self, message: str, *, context: dict | None = None):
        """Initialize the exception.

        Args:
            message: Error description.
            context: Optional diagnostic context for tracing.
        """
        super().__init__(message)
        self.context = context or {}


class ObjectLoadError(ItemError):
    """The source object of an item could not be loaded.

    Usually a stale index entry: the index still references an object the
    datasource no longer has.
    """

    def __init__(self, item_id: str, *, reason: str | None = None):
        """Initialize the exception.

        Args:
            item_id: Combined id of the item whose object is missing.
            reason: Optional explanation (loader error message).
        """
        reason_info = f": {reason}" if reason else ""
        super().__init__(
            f"Source object for item {item_id!r} could not be loaded{reason_info}",
            context={"item_id": item_id},
        )
        self.item_id = item_id


class DatasourceError(ItemError):
    """The datasource of an item could not be resolved."""

    pass


class PropertyPathError(ItemError):
    """A property path is malformed for the object it is applied to."""

    def __init__(self, message: str, *, property_path: str, context: dict | None = None):
        """Initialize the exception.

        Args:
            message: Error description.
            property_path: The offending property path.
            context: Optional diagnostic context for tracing.
        """
        super().__init__(message, context=context)
        self.property_path = property_path
