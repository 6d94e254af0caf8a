"""Exception classes for query building and execution.

These are SYSTEM errors. Sherlock catches them (and anything a backend
raises), records the message and degrades to an empty result, so callers of
Sherlock.execute() only ever see them as diagnostics.
"""


class QueryError(Exception):
    """Base exception for query errors."""

    def __init__(self, message: str, *, context: dict | None = None):
        """Initialize the exception.

        Args:
            message: Error description.
            context: Optional diagnostic context for tracing.
        """
        super().__init__(message)
        self.context = context or {}


class QueryConstructionError(QueryError):
    """The query could not be set up (missing index, bad option...)."""

    pass


class QueryExecutionError(QueryError):
    """The backend failed while executing the query."""

    pass


class InvalidConjunctionError(QueryError):
    """A conjunction other than AND, OR or NOT was requested."""

    def __init__(self, conjunction: object, *, allowed: tuple[str, ...] = ("AND", "OR", "NOT")):
        """Initialize the exception.

        Args:
            conjunction: The rejected value.
            allowed: Conjunctions valid in the failing context.
        """
        super().__init__(
            f"Invalid conjunction {conjunction!r}, expected one of {', '.join(allowed)}",
            context={"conjunction": conjunction},
        )
        self.conjunction = conjunction
