# ishop/core/errors.py
from enum import Enum

from fastapi import status


class ErrorKind(str, Enum):
    """
    Machine-readable failure categories reported by the ingestion service.
    """

    NOT_FOUND = "not_found"
    EMPTY_INPUT = "empty_input"
    OVERSIZE = "oversize"
    UNSUPPORTED_TYPE = "unsupported_type"
    PERSISTENCE_FAILURE = "persistence_failure"
    IO_FAILURE = "io_failure"
    INTERNAL = "internal"


# HTTP status used by routers when a ServiceResult reports a failure
ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.EMPTY_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.OVERSIZE: 413,  # Content Too Large
    ErrorKind.UNSUPPORTED_TYPE: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    ErrorKind.PERSISTENCE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.IO_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ServiceError(Exception):
    """Base class for failures raised inside a service pipeline."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, key: object):
        super().__init__(f"{entity} with id {key} was not found.")


class EmptyInputError(ServiceError):
    kind = ErrorKind.EMPTY_INPUT

    def __init__(self, name: str):
        super().__init__(f"{name} is missing or empty.")


class OversizeError(ServiceError):
    kind = ErrorKind.OVERSIZE

    def __init__(self, name: str, max_bytes: int):
        super().__init__(f"{name} exceeds the maximum size of {max_bytes} bytes.")


class UnsupportedTypeError(ServiceError):
    kind = ErrorKind.UNSUPPORTED_TYPE

    def __init__(self, name: str, extension: str):
        super().__init__(f"{name} has unsupported type '{extension or '(none)'}'.")


class PersistenceError(ServiceError):
    kind = ErrorKind.PERSISTENCE_FAILURE

    def __init__(self, entity: str, detail: str = ""):
        message = f"Saving {entity} failed."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class StorageIOError(ServiceError):
    """Raised by content stores when a blob cannot be written or removed."""

    kind = ErrorKind.IO_FAILURE
