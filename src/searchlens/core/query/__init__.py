"""Query building, execution and result materialization."""

from searchlens.core.query.builder import QueryBuilder, SortKey
from searchlens.core.query.exceptions import (
    InvalidConjunctionError,
    QueryConstructionError,
    QueryError,
    QueryExecutionError,
)
from searchlens.core.query.filter_group import (
    DEFAULT_GROUP,
    Condition,
    Conjunction,
    FilterGroup,
    normalize_operator,
)
from searchlens.core.query.frankenstein import Frankenstein, ResultMaterializer
from searchlens.core.query.handlers import DateFilter, FilterHandler
from searchlens.core.query.sherlock import (
    GuardedQuery,
    QueryExecutor,
    QueryState,
    Sherlock,
    normalize_limit,
)

__all__ = [
    "Condition",
    "Conjunction",
    "DEFAULT_GROUP",
    "DateFilter",
    "FilterGroup",
    "FilterHandler",
    "Frankenstein",
    "GuardedQuery",
    "InvalidConjunctionError",
    "QueryBuilder",
    "QueryConstructionError",
    "QueryError",
    "QueryExecutionError",
    "QueryExecutor",
    "QueryState",
    "ResultMaterializer",
    "Sherlock",
    "SortKey",
    "normalize_limit",
    "normalize_operator",
]
