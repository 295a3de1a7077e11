"""Domain error taxonomy shared by the storage, search and auth layers."""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced to API clients."""

    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    NOT_EMPTY = "not_empty"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    PATH_ESCAPE = "path_escape"
    IO_ERROR = "io_error"


class ContentError(Exception):
    """Base class for all domain errors.

    Each subclass fixes its kind and the HTTP status it maps to.

    Attributes:
        kind: Error kind discriminator.
        status_code: HTTP status returned to the client.
        path: Client-supplied path involved, if any.
    """

    kind: ErrorKind = ErrorKind.IO_ERROR
    status_code: int = 500

    def __init__(self, message: str, path: str | None = None) -> None:
        """Initialize content error.

        Args:
            message: Short human-readable description.
            path: The offending client path, if any.
        """
        super().__init__(message)
        self.message = message
        self.path = path


class BadRequest(ContentError):
    """Missing or invalid parameters, empty query, malformed body."""

    kind = ErrorKind.BAD_REQUEST
    status_code = 400


class Unauthorized(ContentError):
    """Missing, malformed or unknown bearer token."""

    kind = ErrorKind.UNAUTHORIZED
    status_code = 401


class NotFound(ContentError):
    """File or directory does not exist."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404


class AlreadyExists(ContentError):
    """Directory creation collided with an existing node."""

    kind = ErrorKind.ALREADY_EXISTS
    status_code = 409


class NotEmpty(ContentError):
    """Attempt to delete a directory that still has children."""

    kind = ErrorKind.NOT_EMPTY
    status_code = 400


class PayloadTooLarge(ContentError):
    """Upload exceeded the configured size cap."""

    kind = ErrorKind.PAYLOAD_TOO_LARGE
    status_code = 413


class PathEscape(ContentError):
    """Resolved path falls outside the storage root."""

    kind = ErrorKind.PATH_ESCAPE
    status_code = 400


class StorageIOError(ContentError):
    """Unclassified filesystem failure."""

    kind = ErrorKind.IO_ERROR
    status_code = 500
