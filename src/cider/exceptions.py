"""Exception classes for the Cider API client."""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Closed set of failure classifications produced by the client.

    Every CiderError carries exactly one of these, so callers can match
    on ``error.kind`` instead of walking the class hierarchy.
    """

    TRANSPORT = "transport"
    NOT_REACHABLE = "not_reachable"
    UNAUTHORIZED = "unauthorized"
    NOTHING_PLAYING = "nothing_playing"
    UNEXPECTED_RESPONSE = "unexpected_response"


class CiderError(Exception):
    """Base exception for all Cider API errors.

    Attributes:
        kind: Classification of the failure
        message: Human-readable description
        status_code: HTTP status when a response was received
        body: Raw response body when it is useful for diagnostics
    """

    kind: ErrorKind = ErrorKind.UNEXPECTED_RESPONSE

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        """Initialize Cider error.

        Args:
            message: Human-readable error message
            status_code: HTTP status code, if any
            body: Raw response body, if any
        """
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class CiderTransportError(CiderError):
    """Network or I/O failure other than a refused connection.

    The underlying httpx exception is kept on ``cause``.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class NotReachableError(CiderError):
    """Connection could not be established.

    Almost always means Cider is not running or the RPC server is disabled.
    """

    kind = ErrorKind.NOT_REACHABLE

    def __init__(self, message: str = "Cider is not running or not reachable"):
        super().__init__(message)


class UnauthorizedError(CiderError):
    """The API token was missing or rejected (HTTP 401/403)."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, status_code: int):
        super().__init__(f"Invalid or missing API token (HTTP {status_code})", status_code=status_code)


class NothingPlayingError(CiderError):
    """No track is currently loaded.

    This is a valid empty state rather than a failure of the call.
    """

    kind = ErrorKind.NOTHING_PLAYING

    def __init__(self, status_code: Optional[int] = None):
        super().__init__("No track currently playing", status_code=status_code)


class UnexpectedResponseError(CiderError):
    """Response did not match the API contract.

    Raised for uncategorized non-2xx statuses and for payloads that cannot
    be decoded into the expected model.
    """

    kind = ErrorKind.UNEXPECTED_RESPONSE
