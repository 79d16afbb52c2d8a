"""
etcd Client Error Hierarchy

Every failure a call can surface derives from EtcdClientError:

- InvalidOptionError: bad option name or value, raised before any request
- ClusterUnreachableError: retry budget exhausted by network failures / 500s
- RedirectError: a 307 the client could not follow
- MalformedResponseError: the server answered but the body is undecodable
- ResponseReadError: the server answered but the body could not be read
- EtcdError: the store rejected the operation (carries its error envelope)
"""

from typing import Dict, Type


class EtcdClientError(Exception):
    """Base exception for all etcd client errors."""


class InvalidOptionError(EtcdClientError, ValueError):
    """An option name is not allowed for the method, or its value has the wrong type."""


class ClusterUnreachableError(EtcdClientError):
    """No cluster member answered within the retry budget."""

    def __init__(self, message: str = "Cannot reach servers", attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class RedirectError(EtcdClientError):
    """A redirect carried no usable location, or redirects did not converge."""


class MalformedResponseError(EtcdClientError):
    """The server's answer could not be decoded as an etcd envelope."""

    def __init__(self, message: str, status_code: int = 0, body: bytes = b""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResponseReadError(EtcdClientError):
    """The response body could not be read from the connection."""


class EtcdError(EtcdClientError):
    """
    The store rejected the operation.

    Attributes:
        error_code: etcd error code (e.g. 100 for "Key not found")
        message: Human-readable message from the store
        cause: The key or condition that caused the error
        index: The store's index at the time of the error
        status_code: HTTP status of the response
    """

    def __init__(
            self,
            error_code: int,
            message: str = "",
            cause: str = "",
            index: int = 0,
            status_code: int = 0,
    ):
        super().__init__(f"{error_code}: {message} ({cause}) [{index}]")
        self.error_code = error_code
        self.message = message
        self.cause = cause
        self.index = index
        self.status_code = status_code


class KeyNotFoundError(EtcdError):
    """errorCode 100."""


class CompareFailedError(EtcdError):
    """errorCode 101: prevValue / prevIndex precondition did not hold."""


class NotAFileError(EtcdError):
    """errorCode 102."""


class NotDirectoryError(EtcdError):
    """errorCode 104."""


class NodeExistsError(EtcdError):
    """errorCode 105."""


class DirectoryNotEmptyError(EtcdError):
    """errorCode 108."""


ERROR_CODES: Dict[int, Type[EtcdError]] = {
    100: KeyNotFoundError,
    101: CompareFailedError,
    102: NotAFileError,
    104: NotDirectoryError,
    105: NodeExistsError,
    108: DirectoryNotEmptyError,
}


def error_for_code(error_code: int) -> Type[EtcdError]:
    """Get the exception class for an etcd error code."""
    return ERROR_CODES.get(error_code, EtcdError)


__all__ = [
    "EtcdClientError",
    "InvalidOptionError",
    "ClusterUnreachableError",
    "RedirectError",
    "MalformedResponseError",
    "ResponseReadError",
    "EtcdError",
    "KeyNotFoundError",
    "CompareFailedError",
    "NotAFileError",
    "NotDirectoryError",
    "NodeExistsError",
    "DirectoryNotEmptyError",
    "ERROR_CODES",
    "error_for_code",
]
