"""Base result types for SearchLens operations.

Query execution and materialization never raise for states a caller is
expected to handle (an aborted query, a backend failure that degrades to an
empty result, rows whose objects could not be hydrated). Those come back as a
Result carrying a status and a StatusDetail. Programming errors and broken
collaborators raise exceptions.
"""

from typing import Any, Final, Literal, Self

from pydantic import BaseModel, Field


class StatusDetail(BaseModel):
    """Structured status information attached to a result.

    Attributes:
        code: Machine-readable status code, one of StatusCode.
        message: Human-readable status description.
        context: Additional diagnostic data (safe to log/serialize).
    """

    code: str = Field(description="Status code: 'aborted', 'failed', 'partial', etc.")
    message: str = Field(description="Human-readable status description")
    context: dict[str, Any] = Field(default_factory=dict, description="Diagnostic context")


class BaseResult(BaseModel):
    """Base class for all SearchLens operation results.

    - status="success": the operation completed, payload fields are populated.
      A detail may still be present for informational states.
    - status="error": expected failure, detail explains why.

    Example:
        >>> result = sherlock.execute()
        >>> if result.is_error():
        ...     print(result.detail.code, result.messages)
    """

    status: Literal["success", "error"] = Field(default="success", description="Operation status")
    detail: StatusDetail | None = Field(
        default=None, description="Status details (present for error or partial success)"
    )

    model_config = {"extra": "forbid"}

    def is_ok(self) -> bool:
        """Check if operation succeeded."""
        return self.status == "success"

    def is_error(self) -> bool:
        """Check if operation failed with expected error."""
        return self.status == "error"

    @classmethod
    def success(cls, *, detail: StatusDetail | None = None, **kwargs: Any) -> Self:
        """Build a successful result.

        Args:
            detail: Optional informational detail (partial hydration, abort...).
            **kwargs: Subclass-specific fields.
        """
        return cls(status="success", detail=detail, **kwargs)

    @classmethod
    def fail(cls, detail: StatusDetail, **kwargs: Any) -> Self:
        """Build an expected-failure result.

        Args:
            detail: Required status details describing the failure.
            **kwargs: Subclass-specific fields (use defaults).
        """
        return cls(status="error", detail=detail, **kwargs)


# =============================================================================
# STATUS CODE REGISTRY
# =============================================================================


class StatusCode:
    """Centralized registry of status codes used across SearchLens."""

    # -------------------------------------------------------------------------
    # Common
    # -------------------------------------------------------------------------
    INVALID: Final = "invalid"
    """[Common] Invalid parameter, id or configuration."""

    NOT_FOUND: Final = "not_found"
    """[Common] Requested resource not found (expected state, not error)."""

    PARTIAL: Final = "partial"
    """[Common] Operation partially completed."""

    # -------------------------------------------------------------------------
    # Sherlock (query execution)
    # -------------------------------------------------------------------------
    ABORTED: Final = "aborted"
    """[Sherlock] Query was aborted by a composing handler, not executed."""

    FAILED: Final = "failed"
    """[Sherlock] Query failed during construction or execution."""

    NO_RESULTS: Final = "no_results"
    """[Sherlock] Query executed and matched nothing."""

    # -------------------------------------------------------------------------
    # Frankenstein (materialization)
    # -------------------------------------------------------------------------
    PARTIAL_HYDRATION: Final = "partial_hydration"
    """[Frankenstein] Some rows could not be hydrated with their source object."""


__all__ = ["BaseResult", "StatusDetail", "StatusCode"]
