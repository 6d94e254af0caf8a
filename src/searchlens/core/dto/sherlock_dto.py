"""DTOs for Sherlock query execution."""

from pydantic import Field

from searchlens.core.dto.frankenstein_dto import ResultRow
from searchlens.core.dto.result_dto import BaseResult


class ExecuteResult(BaseResult):
    """Result of Sherlock.execute().

    [Result Pattern] Check result.is_ok() before trusting count.

    Attributes:
        count: Total number of matches (0 on any degraded path).
        rows: Materialized rows in match order.
        elapsed_time: Seconds spent in the backend execute() call.
        messages: Diagnostics, only filled when errors are displayable.

    Status codes:
        - success: Query executed
        - success + detail(NO_RESULTS): Query executed, nothing matched
        - success + detail(PARTIAL_HYDRATION): Some rows are not hydrated
        - success + detail(ABORTED): Query aborted by a handler, not executed
        - error + detail(FAILED): Construction or execution failed
    """

    count: int = Field(default=0, description="Total number of matches")
    rows: list[ResultRow] = Field(default_factory=list, description="Rows in match order")
    elapsed_time: float = Field(default=0.0, description="Execution time in seconds")
    messages: list[str] = Field(default_factory=list, description="Displayable diagnostics")


__all__ = ["ExecuteResult"]
