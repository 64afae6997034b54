from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when no viewer identity could be resolved."""


class AuthorizationError(DomainError):
    """Raised when the viewer's scope does not cover the requested class/meeting."""


class NotFoundError(DomainError):
    """Raised when a referenced meeting/class/student does not exist."""

    def __init__(self, entity: str, entity_id: Optional[str] = None, message: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        if message is None:
            message = f"{entity} tidak ditemukan" if entity_id is None else f"{entity} {entity_id} tidak ditemukan"
        super().__init__(message)


class ReferentialIntegrityError(DomainError):
    """Raised when a row cannot be deleted because other rows still reference it."""


class OperationFailed(DomainError):
    """A collaborator (store, directory) failed while running an operation."""

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} gagal: {cause}")


class PartialBatchFailure(OperationFailed):
    """At least one chunk of a batched read failed; no partial result is returned."""

    def __init__(self, operation: str, *, failed: int, total: int, cause: BaseException):
        self.failed = failed
        self.total = total
        super().__init__(operation, cause)
        self.args = (f"{operation} gagal: {failed}/{total} batch error ({cause})",)


@contextmanager
def wrap_errors(operation: str) -> Iterator[None]:
    """Re-raise collaborator errors as OperationFailed tagged with the operation name.

    Domain errors pass through untouched.
    """

    try:
        yield
    except DomainError:
        raise
    except Exception as e:
        logger.error("%s failed: %s", operation, e)
        raise OperationFailed(operation, e) from e
