"""Sherlock query executor.

Sherlock is what a view talks to. It collects filters, sorts, fields and
range through its QueryBuilder, runs the assembled backend query and hands
the matches to Frankenstein for materialization.

States: BUILDING -> EXECUTING -> SUCCEEDED | FAILED | ABORTED.

Whatever goes wrong (the index is missing, the backend rejects an option,
execute() raises, a handler aborts) ends in the same place: an empty result
with count 0. Recorded messages are returned to the caller only when the
display_errors setting is on; they are always logged.

"When you have eliminated the impossible, whatever remains, however
improbable, must be the truth."
"""

import functools
import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from searchlens.core.dto.result_dto import StatusCode, StatusDetail
from searchlens.core.dto.sherlock_dto import ExecuteResult
from searchlens.core.index.protocols import BackendQuery, QueryFilter, ResultSet, SearchIndex
from searchlens.core.query.builder import QueryBuilder
from searchlens.core.query.exceptions import QueryConstructionError, QueryExecutionError
from searchlens.core.query.filter_group import EQ, Conjunction
from searchlens.core.query.frankenstein import Frankenstein
from searchlens.core.spock.spock import Spock

if TYPE_CHECKING:
    from searchlens.core.query.builder import SortKey

logger = logging.getLogger(__name__)

# Marker telling _building_only to return the executor itself when blocked.
_SELF = object()


class QueryState(str, Enum):
    """Lifecycle state of a Sherlock executor."""

    BUILDING = "building"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"


def normalize_limit(limit: Any) -> int | None:
    """Normalize a view's limit for BackendQuery.range().

    None (or an empty value) means unlimited. 0 and "0" mean zero results.

    Raises:
        ValueError: If limit is not a non-negative integer.
    """
    if limit is None or limit is False:
        return None
    if isinstance(limit, str):
        limit = limit.strip()
        if not limit:
            return None
    value = int(limit)
    if value < 0:
        raise ValueError(f"Limit must be non-negative, got {limit!r}")
    return value


def _building_only(blocked_return: Any = _SELF) -> Callable:
    """Turn a Sherlock method into a no-op outside the BUILDING state."""

    def decorator(method: Callable) -> Callable:
        @functools.wraps(method)
        def wrapper(self: "Sherlock", *args: Any, **kwargs: Any) -> Any:
            if self._state is not QueryState.BUILDING:
                logger.debug("Ignoring %s() on %s query", method.__name__, self._state.value)
                return self if blocked_return is _SELF else blocked_return
            return method(self, *args, **kwargs)

        return wrapper

    return decorator


def _blocked_call(*args: Any, **kwargs: Any) -> None:
    return None


class GuardedQuery:
    """Raw access to the backend query, short-circuited once the query failed.

    Every attribute is forwarded to the wrapped BackendQuery. When the
    executor has failed or was aborted, attributes resolve to a callable
    returning None instead, so callers holding the raw query cannot run it or
    mutate it any more.
    """

    def __init__(self, query: BackendQuery | None, is_blocked: Callable[[], bool]):
        self._query = query
        self._is_blocked = is_blocked

    def __getattr__(self, name: str) -> Any:
        if self._query is None or self._is_blocked():
            return _blocked_call
        return getattr(self._query, name)

    def __bool__(self) -> bool:
        return self._query is not None and not self._is_blocked()


class Sherlock:
    """Executes one search against an index.

    One instance serves one logical search request. It is not thread-safe.

    Famous quote from Sherlock Holmes:
    "When you have eliminated the impossible, whatever remains, however
    improbable, must be the truth."
    """

    def __init__(
        self,
        index: SearchIndex | None,
        *,
        spock: Optional[Spock] = None,
        options: dict[str, Any] | None = None,
        display: str = "default",
        count_required: bool = False,
        materializer: Frankenstein | None = None,
    ):
        """Create an executor and its backend query.

        Construction never raises: any failure is recorded and the executor
        starts in the FAILED state.

        Args:
            index: Index to search.
            spock: Optional configuration manager.
            options: Extra backend query options.
            display: Name of the display running the search (used in the
                search id).
            count_required: Whether the caller needs the total count. When
                False the backend is allowed to skip counting.
            materializer: Materializer for the matches. Defaults to a
                Frankenstein bound to index.
        """
        self.index = index
        self.display = display
        self.count_required = count_required
        self.group_operator = Conjunction.AND
        self._spock = spock
        self._state = QueryState.BUILDING
        self._errors: list[str] = []
        self._builder: QueryBuilder | None = None
        self._materializer = materializer
        self._results: ResultSet | None = None
        self._result: ExecuteResult | None = None

        try:
            if index is None:
                raise QueryConstructionError("No search index configured")
            query_options = {"parse mode": self._setting("parse_mode")}
            query_options.update(options or {})
            self._builder = QueryBuilder(index.query(query_options))
            if self._materializer is None:
                self._materializer = Frankenstein(index)
        except Exception as e:
            logger.error("Could not create search query: %s", e)
            self._fail(str(e))

        self.query = GuardedQuery(
            self._builder.query if self._builder is not None else None, self._is_blocked
        )
        logger.debug("Sherlock created: index=%s state=%s", self.index_id, self._state.value)

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def index_id(self) -> str | None:
        return getattr(self.index, "id", None)

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def errors(self) -> list[str]:
        """All recorded diagnostic messages."""
        return list(self._errors)

    @property
    def builder(self) -> QueryBuilder | None:
        return self._builder

    @property
    def results(self) -> ResultSet | None:
        """The raw backend result set, once executed."""
        return self._results

    @property
    def requested_fields(self) -> list[str]:
        return self._builder.requested_fields if self._builder is not None else []

    @property
    def sorts(self) -> list["SortKey"]:
        return self._builder.sorts if self._builder is not None else []

    def _is_blocked(self) -> bool:
        return self._state in (QueryState.FAILED, QueryState.ABORTED)

    def _fail(self, message: str) -> None:
        self._errors.append(message)
        if self._state is not QueryState.ABORTED:
            self._state = QueryState.FAILED

    def _setting(self, key: str, default: Any = None) -> Any:
        if self._spock is not None:
            return self._spock.get_setting(key, self.index_id, default)
        return Spock.default_config()["searchlens"].get(key, default)

    def abort(self, message: str | None = None) -> None:
        """Abort the search.

        Used by handlers that detect a condition which must produce an empty
        result without being reported as a backend error.

        Args:
            message: Optional diagnostic to record.
        """
        if message:
            self._errors.append(message)
        if self._state in (QueryState.BUILDING, QueryState.FAILED):
            self._state = QueryState.ABORTED
        logger.debug("Sherlock aborted: index=%s message=%r", self.index_id, message)

    # =========================================================================
    # BUILDING (no-ops once the query left the BUILDING state)
    # =========================================================================

    @_building_only()
    def keys(self, keys: str | None = None) -> "Sherlock":
        self._builder.keys(keys)
        return self

    @_building_only()
    def fields(self, fields: list[str]) -> "Sherlock":
        """Restrict the fulltext fields the keys are matched against."""
        self._builder.fulltext_fields(fields)
        return self

    @_building_only()
    def condition(
        self, field: str, value: Any, operator: str = EQ, group: str | None = None
    ) -> "Sherlock":
        """Add a condition, to the given filter group or ungrouped."""
        self._builder.add_condition(group, field, value, operator)
        return self

    @_building_only()
    def filter(self, filter: QueryFilter, group: str | None = None) -> "Sherlock":
        """Add a nested filter, to the given filter group or ungrouped."""
        self._builder.add_filter(group, filter)
        return self

    @_building_only(blocked_return=None)
    def create_filter(self, conjunction: Conjunction | str = Conjunction.AND) -> QueryFilter | None:
        """Create a backend filter to pass to filter()."""
        return self._builder.query.create_filter(Conjunction.coerce(conjunction).value)

    @_building_only()
    def set_group_conjunction(
        self, group: str | None, conjunction: Conjunction | str
    ) -> "Sherlock":
        self._builder.set_group_conjunction(group, conjunction)
        return self

    @_building_only()
    def sort(self, field: str, order: str = "ASC") -> "Sherlock":
        self._builder.add_sort(field, order)
        return self

    @_building_only()
    def range(self, offset: int | None = None, limit: Any = None) -> "Sherlock":
        self._builder.range(offset, limit)
        return self

    @_building_only(blocked_return=None)
    def add_field(self, field_id: str) -> str | None:
        """Request a field for the result rows."""
        return self._builder.add_field(field_id)

    @_building_only(blocked_return=None)
    def set_option(self, name: str, value: Any) -> Any:
        return self._builder.query.set_option(name, value)

    def get_option(self, name: str, default: Any = None) -> Any:
        if self._builder is None or self._is_blocked():
            return default
        return self._builder.query.get_option(name, default)

    # =========================================================================
    # EXECUTION
    # =========================================================================

    def execute(self) -> ExecuteResult:
        """Execute the search.

        [Result Pattern] Never raises for query problems.

        Returns:
            ExecuteResult with rows on success, or the empty result
            (count=0, rows=[], elapsed_time=0) when the query failed or was
            aborted. A succeeded query returns the same result on every call.
        """
        if self._result is not None:
            return self._result
        if self._is_blocked():
            return self._degrade()

        self._state = QueryState.EXECUTING
        try:
            result = self._run()
        except Exception as e:
            logger.error("Search on index %s failed: %s", self.index_id, e)
            self._fail(str(e))
            return self._degrade()

        self._state = QueryState.SUCCEEDED
        self._result = result
        return result

    def _prepare(self, query: BackendQuery) -> None:
        skip_result_count = query.get_option("skip result count", True)
        if skip_result_count:
            skip_result_count = bool(self._setting("skip_result_count", True)) and not (
                self.count_required
            )
            query.set_option("skip result count", skip_result_count)

        search_id = query.get_option("search id")
        if search_id is None or search_id == type(query).__name__:
            query.set_option("search id", f"searchlens:{self.index_id}:{self.display}")

        if self._setting("bypass_access", False):
            query.set_option("bypass access", True)

    def _run(self) -> ExecuteResult:
        builder = self._builder
        query = builder.assemble(self.group_operator)
        self._prepare(query)
        query.range(builder.offset, normalize_limit(builder.limit))

        start = time.perf_counter()
        results = query.execute()
        if not isinstance(results, ResultSet):
            raise QueryExecutionError(
                f"Backend returned {type(results).__name__} instead of a ResultSet",
                context={"index": self.index_id},
            )
        elapsed_time = time.perf_counter() - start
        self._results = results
        materialized = self._materializer.materialize(results.items, builder.requested_fields)

        rows = materialized.rows
        count = results.count if results.count is not None else len(rows)
        detail = materialized.detail
        if detail is None and not rows:
            detail = StatusDetail(code=StatusCode.NO_RESULTS, message="No results")
        logger.debug(
            "Search on index %s returned %d rows (count=%d) in %.4fs",
            self.index_id,
            len(rows),
            count,
            elapsed_time,
        )
        return ExecuteResult.success(
            count=count, rows=rows, elapsed_time=elapsed_time, detail=detail
        )

    def _degrade(self) -> ExecuteResult:
        """Return the empty result shared by every failure path.

        Never raises: if the display_errors setting cannot be read (for
        example a broken config file), messages stay hidden.
        """
        try:
            display_errors = bool(self._setting("display_errors", False))
        except Exception as e:
            logger.error("Could not read display_errors for index %s: %s", self.index_id, e)
            display_errors = False
        messages = list(self._errors) if display_errors else []
        context = {"index": self.index_id, "errors": len(self._errors)}

        if self._state is QueryState.ABORTED:
            logger.info("Search on index %s was aborted", self.index_id)
            return ExecuteResult.success(
                messages=messages,
                detail=StatusDetail(
                    code=StatusCode.ABORTED, message="Search was aborted", context=context
                ),
            )

        for message in self._errors:
            logger.warning("Search on index %s failed: %s", self.index_id, message)
        return ExecuteResult.fail(
            StatusDetail(code=StatusCode.FAILED, message="Search failed", context=context),
            messages=messages,
        )


QueryExecutor = Sherlock
