"""Data transfer objects returned by SearchLens operations."""

from searchlens.core.dto.frankenstein_dto import MaterializeResult, ResultRow
from searchlens.core.dto.result_dto import BaseResult, StatusCode, StatusDetail
from searchlens.core.dto.sherlock_dto import ExecuteResult

__all__ = [
    "BaseResult",
    "ExecuteResult",
    "MaterializeResult",
    "ResultRow",
    "StatusCode",
    "StatusDetail",
]
