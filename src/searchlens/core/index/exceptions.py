"""Exception classes raised by search index backends."""

from typing import Any


class SearchIndexError(Exception):
    """Base exception for index backend errors.

    Attributes:
        index_id: Optional id of the index that raised.
    """

    def __init__(self, message: str, *, index_id: str | None = None):
        """Initialize the exception.

        Args:
            message: Error description.
            index_id: Optional id of the index.
        """
        self.index_id = index_id
        index_info = f" (index={index_id!r})" if index_id else ""
        super().__init__(f"{message}{index_info}")


class UnknownFieldError(SearchIndexError):
    """A query referenced a field the index does not have."""

    def __init__(self, field: str, *, index_id: str | None = None):
        """Initialize the exception.

        Args:
            field: The unknown field id.
            index_id: Optional id of the index.
        """
        self.field = field
        super().__init__(f"Unknown field {field!r}", index_id=index_id)


class UnsupportedOperatorError(SearchIndexError):
    """A condition used an operator the backend cannot evaluate."""

    def __init__(self, operator: Any, *, index_id: str | None = None, reason: str | None = None):
        """Initialize the exception.

        Args:
            operator: The rejected operator.
            index_id: Optional id of the index.
            reason: Optional detail on why the operator was rejected.
        """
        self.operator = operator
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Unsupported operator {operator!r}{detail}", index_id=index_id)


__all__ = ["SearchIndexError", "UnknownFieldError", "UnsupportedOperatorError"]
