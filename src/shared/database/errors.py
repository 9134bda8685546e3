"""Translation of SQLAlchemy and driver exceptions into DataAccessError."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    ProgrammingError,
    SQLAlchemyError,
)

from src.shared.exceptions import DataAccessError

logger = logging.getLogger(__name__)

# SQLSTATE raised by PostgreSQL for an unknown relation
UNDEFINED_TABLE = "42P01"


def _sqlstate(error: DBAPIError) -> str | None:
    """Extract the SQLSTATE code from the wrapped driver exception, if any."""
    orig = error.orig
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return None


def translate_error(error: Exception, action: str) -> DataAccessError:
    """
    Convert a persistence exception into a DataAccessError.

    Connection-level failures are marked retryable; constraint violations,
    malformed statements and bad data are terminal.

    Args:
        error: The exception raised by SQLAlchemy or the driver
        action: Short description of what was being done, used in the message

    Returns:
        The normalized DataAccessError
    """
    if isinstance(error, DataAccessError):
        return error

    if isinstance(error, IntegrityError):
        return DataAccessError(
            f"Failed to {action}: constraint violation",
            code=_sqlstate(error) or "integrity_error",
            details=error,
        )

    if isinstance(error, (DataError, ProgrammingError)):
        return DataAccessError(
            f"Failed to {action}: {error.orig}",
            code=_sqlstate(error) or "bad_request",
            details=error,
        )

    if isinstance(error, (OperationalError, InterfaceError)) or (
        isinstance(error, DBAPIError) and error.connection_invalidated
    ):
        return DataAccessError(
            f"Failed to {action}: database unavailable",
            code=_sqlstate(error) or "connection_error",
            details=error,
            retryable=True,
        )

    if isinstance(error, DBAPIError):
        return DataAccessError(
            f"Failed to {action}: {error.orig}",
            code=_sqlstate(error),
            details=error,
        )

    if isinstance(error, (TimeoutError, ConnectionError, OSError)):
        return DataAccessError(
            f"Failed to {action}: {error}",
            code="connection_error",
            details=error,
            retryable=True,
        )

    if isinstance(error, SQLAlchemyError):
        return DataAccessError(f"Failed to {action}: {error}", details=error)

    return DataAccessError(f"Unexpected error while trying to {action}: {error}", details=error)


@asynccontextmanager
async def translate_errors(action: str) -> AsyncIterator[None]:
    """Async context manager that re-raises persistence errors as DataAccessError."""
    try:
        yield
    except DataAccessError:
        raise
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        translated = translate_error(e, action)
        logger.debug("Translated %s into %r", type(e).__name__, translated)
        raise translated from e
