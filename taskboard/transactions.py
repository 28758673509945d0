"""
Transaction wrapper for order-array mutations.

Every write to ``Board.column_order``, ``BoardColumn.task_order`` or
``Task.column_id`` goes through :func:`run_in_transaction`. The unit of work
reads, validates and writes inside one database transaction and either commits
as a whole or leaves the pre-operation state untouched.

Boards, columns and tasks carry a ``version`` counter (SQLAlchemy
``version_id_col``). Two requests that read the same order array cannot both
commit a rewrite of it: the second UPDATE matches no row and SQLAlchemy raises
``StaleDataError``, which is reported as ``TransactionConflict``. A conflicting
unit of work is re-run from scratch so it re-reads current state and
re-validates its indices.
"""
import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm.exc import StaleDataError

from taskboard.config import settings
from taskboard.errors import BoardServiceError, TransactionConflict, ValidationFailed

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CONFLICT_MARKERS = (
    "database is locked",
    "deadlock",
    "could not serialize",
    "serialization failure",
    "lock wait timeout",
)


def map_store_error(exc: Exception) -> Optional[BoardServiceError]:
    """Translate a store-level exception into a domain error, if it has one."""
    if isinstance(exc, StaleDataError):
        return TransactionConflict(
            "The board was modified concurrently, reload and try again",
            details={"original_error": str(exc)},
        )
    if isinstance(exc, OperationalError):
        text = str(exc.orig if exc.orig is not None else exc).lower()
        if any(marker in text for marker in _CONFLICT_MARKERS):
            return TransactionConflict(
                "The board was modified concurrently, reload and try again",
                details={"original_error": text},
            )
        return None
    if isinstance(exc, IntegrityError):
        return ValidationFailed("Data integrity violation", details={"original_error": str(exc.orig)})
    return None


def for_update(query: Query) -> Query:
    """Lock the selected rows and refresh any copies already in the session."""
    return query.with_for_update().populate_existing()


def _attempt(db: Session, work: Callable[[Session], T]) -> T:
    try:
        result = work(db)
        db.flush()
        db.commit()
        return result
    except BoardServiceError:
        db.rollback()
        raise
    except Exception as exc:
        db.rollback()
        mapped = map_store_error(exc)
        if mapped is None:
            logger.error("Unclassified store failure, transaction rolled back", exc_info=True)
            raise
        raise mapped from exc


def run_in_transaction(db: Session, work: Callable[[Session], T], retries: Optional[int] = None) -> T:
    """Run ``work(db)`` as one atomic unit and return its result.

    ``work`` must do all of its reads itself; it is called again from scratch
    after a ``TransactionConflict`` until ``retries`` attempts are used up.
    """
    attempts = max(1, retries if retries is not None else settings.TRANSACTION_MAX_RETRIES)
    for attempt in range(1, attempts + 1):
        logger.debug("Transaction attempt %d/%d", attempt, attempts)
        try:
            return _attempt(db, work)
        except TransactionConflict:
            if attempt == attempts:
                logger.warning("Transaction conflict, giving up after %d attempts", attempts)
                raise
            logger.warning("Transaction conflict on attempt %d/%d, retrying", attempt, attempts)
            db.expire_all()
    raise AssertionError("unreachable")  # pragma: no cover
