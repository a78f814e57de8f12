"""Detection and on-the-fly repair of schema drift.

A query that fails because a column or table the code expects is missing is
repaired with additive DDL and retried exactly once. Repairs are grouped by
name. Concurrent callers that hit the same drift wait on the first attempt
instead of starting their own; drift that reappears later is repaired again.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Protocol, TypeVar

import structlog

from core.exceptions import SchemaDriftUnrepairableError
from domain.entities.schema_repair import Repair, RepairStep

logger = structlog.get_logger()

T = TypeVar("T")

# MySQL: ER_BAD_FIELD_ERROR, ER_NO_SUCH_TABLE.
# PostgreSQL: undefined_column, undefined_table.
MISSING_ELEMENT_CODES = frozenset({1054, 1146, "42703", "42P01"})
MISSING_ELEMENT_MESSAGES = (
    "unknown column",
    "unknown table",
    "doesn't exist",
    "does not exist",
    "no such column",
    "no such table",
    "has no column named",
)

# MySQL: ER_TABLE_EXISTS_ERROR, ER_DUP_FIELDNAME, ER_DUP_KEYNAME.
# PostgreSQL: duplicate_column, duplicate_table (also raised for indexes).
DUPLICATE_ELEMENT_CODES = frozenset({1050, 1060, 1061, "42701", "42P07"})
DUPLICATE_ELEMENT_MESSAGES = (
    "duplicate column",
    "duplicate key name",
    "already exists",
)


class RepairExecutor(Protocol):
    """Runs one repair step against the live schema."""

    async def run(self, step: RepairStep) -> None: ...


def _error_code(exc: BaseException) -> Any:
    """Pull the driver error code out of a (possibly wrapped) DBAPI error."""
    for candidate in (getattr(exc, "orig", None), exc):
        if candidate is None:
            continue
        for attr in ("sqlstate", "pgcode"):
            code = getattr(candidate, attr, None)
            if code:
                return code
        args = getattr(candidate, "args", ())
        if args and isinstance(args[0], int):
            return args[0]
    return None


def _driver_message(exc: BaseException) -> str:
    """The driver's own message, without the SQL text SQLAlchemy appends."""
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc)


def is_missing_element_error(exc: BaseException) -> bool:
    """True when a failure reports an absent column or table."""
    if _error_code(exc) in MISSING_ELEMENT_CODES:
        return True
    message = _driver_message(exc).lower()
    return any(fragment in message for fragment in MISSING_ELEMENT_MESSAGES)


def is_duplicate_element_error(exc: BaseException) -> bool:
    """True when DDL failed only because the object is already there."""
    if _error_code(exc) in DUPLICATE_ELEMENT_CODES:
        return True
    message = _driver_message(exc).lower()
    return any(fragment in message for fragment in DUPLICATE_ELEMENT_MESSAGES)


class SchemaGuard:
    """Wraps persistence calls with one classify, repair, retry cycle."""

    def __init__(
        self,
        repairs: Iterable[Repair] = (),
        executor: RepairExecutor | None = None,
        *,
        enabled: bool = True,
    ) -> None:
        self._repairs = tuple(repairs)
        self._executor = executor
        self._enabled = enabled and executor is not None
        # Bumped after every completed repair; callers compare against the
        # value they saw when their own operation started.
        self._epoch = 0
        self._repaired_at: dict[str, int] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def completed_repairs(self) -> frozenset[str]:
        """Names of repairs this process has applied at least once."""
        return frozenset(self._repaired_at)

    def classify(self, exc: BaseException) -> Repair | None:
        """Return the repair for a drift failure, or None if it is not known drift."""
        if not is_missing_element_error(exc):
            return None
        message = _driver_message(exc)
        for repair in self._repairs:
            if repair.matches(message):
                return repair
        return None

    async def with_repair(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation``; on known drift, repair and run it once more.

        ``operation`` must open its own transaction so the retry starts clean.

        Raises:
            SchemaDriftUnrepairableError: If a repair step fails, or the retry
                still reports drift.
        """
        started_at = self._epoch
        try:
            return await operation()
        except Exception as exc:
            repair = self.classify(exc) if self._enabled else None
            if repair is None:
                raise
            logger.warning("schema_drift_detected", repair=repair.name, error=str(exc))
            await self.ensure_repaired(repair, since=started_at)

        try:
            return await operation()
        except Exception as exc:
            if self.classify(exc) is not None:
                raise SchemaDriftUnrepairableError(repair.name) from exc
            raise

    async def ensure_repaired(self, repair: Repair, *, since: int | None = None) -> None:
        """Apply a repair unless it already completed after ``since``.

        Callers that hit the same drift concurrently wait for the first
        attempt and then return. A drift seen after that attempt finished
        runs the repair again.

        Raises:
            SchemaDriftUnrepairableError: If no executor is configured or a
                step fails.
        """
        if since is None:
            since = self._epoch
        lock = self._locks.setdefault(repair.name, asyncio.Lock())
        async with lock:
            if self._repaired_at.get(repair.name, 0) > since:
                return
            executor = self._executor
            if executor is None:
                raise SchemaDriftUnrepairableError(repair.name)
            logger.info("schema_repair_started", repair=repair.name, steps=len(repair.steps))
            for step in repair.steps:
                await self._run_step(executor, repair, step)
            self._epoch += 1
            self._repaired_at[repair.name] = self._epoch
            logger.info("schema_repair_completed", repair=repair.name)

    async def _run_step(self, executor: RepairExecutor, repair: Repair, step: RepairStep) -> None:
        try:
            await executor.run(step)
        except Exception as exc:
            if is_duplicate_element_error(exc):
                logger.info(
                    "schema_repair_step_already_applied",
                    repair=repair.name,
                    step=step.name,
                )
                return
            logger.error(
                "schema_repair_step_failed",
                repair=repair.name,
                step=step.name,
                error=str(exc),
            )
            raise SchemaDriftUnrepairableError(repair.name, step.name) from exc
