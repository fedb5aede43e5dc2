"""
Domain Errors

Every failure a ledger operation can report. Each error knows the HTTP
status it maps to, so the HTTP layer needs one handler for all of them.

Malformed input never gets this far: it is rejected by the request
models at the boundary (422).
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from src.logger import get_logger
from src.services.storage.interface import (
    DuplicateError,
    StorageError,
    StorageUnavailableError,
)


logger = get_logger(__name__)


class LedgerError(Exception):
    """Base class for failures reported to the caller."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthError(LedgerError):
    """Missing or unknown bearer token, or wrong password."""

    status_code = 401
    default_message = "Invalid token! Please login again!"


class ConflictError(LedgerError):
    """A uniqueness rule would be violated."""

    status_code = 409
    default_message = "Resource already exists!"


class NotFoundError(LedgerError):
    """
    The resource does not exist for this user.

    Deliberately the same whether it is missing or owned by someone else.
    """

    status_code = 404
    default_message = "Not found!"


class BadRequestError(LedgerError):
    """Well-formed input that references something invalid."""

    status_code = 400
    default_message = "Bad request!"


class UnavailableError(LedgerError):
    """The store could not be reached in time. Safe to retry."""

    status_code = 503
    default_message = "Service temporarily unavailable, please retry"
    retry_after_seconds = 1


class InternalStorageError(LedgerError):
    """The store rejected an operation. Details are logged, not returned."""

    status_code = 500
    default_message = "Internal server error"


@contextmanager
def translate_storage_errors(conflict_message: Optional[str] = None) -> Iterator[None]:
    """
    Map storage failures onto domain errors for the enclosed block.

    Args:
        conflict_message: Message for the ConflictError raised when the
            store reports a uniqueness violation. Without one, a
            violation is unexpected and surfaces as a server error.
    """
    try:
        yield
    except DuplicateError as e:
        if conflict_message is None:
            logger.error("unexpected_duplicate", error=str(e))
            raise InternalStorageError() from e
        raise ConflictError(conflict_message) from e
    except StorageUnavailableError as e:
        logger.warning("storage_unavailable", error=str(e))
        raise UnavailableError() from e
    except StorageError as e:
        logger.error("storage_error", error=str(e))
        raise InternalStorageError() from e
