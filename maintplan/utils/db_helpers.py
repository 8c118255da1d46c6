"""
Database helper utilities for the maintenance scheduler
Maps storage driver failures onto the application exception hierarchy
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import OperationalError, SQLAlchemyError, TimeoutError as PoolTimeoutError

from maintplan.error_handlers.exceptions import DatabaseException, StorageTimeoutException

logger = logging.getLogger(__name__)

# Driver messages that mean "gave up waiting" rather than "broken"
_TIMEOUT_MARKERS = (
    'database is locked',
    'timeout',
    'timed out',
    'canceling statement due to statement timeout',
    'lock wait',
)


def is_timeout_error(error: Exception) -> bool:
    """True when a SQLAlchemy error is a pool or statement timeout"""
    if isinstance(error, PoolTimeoutError):
        return True
    if isinstance(error, OperationalError):
        message = str(getattr(error, 'orig', error)).lower()
        return any(marker in message for marker in _TIMEOUT_MARKERS)
    return False


@contextmanager
def storage_guard(operation: str, session=None):
    """
    Translate storage failures raised inside the block.

    Timeouts become StorageTimeoutException (503, retryable); any other
    SQLAlchemy error becomes DatabaseException. The session, when given,
    is rolled back before re-raising.

    Usage:
        with storage_guard('load executions', db.session):
            rows = db.session.query(MaintenanceExecution).all()
    """
    try:
        yield
    except SQLAlchemyError as e:
        if session is not None:
            session.rollback()
        if is_timeout_error(e):
            logger.warning(f"Storage timeout during {operation}: {e}")
            raise StorageTimeoutException(
                f"Storage timed out during {operation}",
                details={'operation': operation}
            ) from e
        logger.error(f"Storage failure during {operation}: {e}")
        raise DatabaseException(f"Storage failure during {operation}") from e
