"""
Failure taxonomy for the gateway.

Every failure a download can run into is one of the classes below. The
SFTP layer converts paramiko and socket errors into them at the point
where they are caught, so the HTTP layer only ever sees a GatewayError.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Tag identifying which taxonomy member a GatewayError is."""
    PATH_TRAVERSAL = "path_traversal"
    CONNECTION_ERROR = "connection_error"
    AUTH_FAILURE = "auth_failure"
    REMOTE_PROTOCOL_ERROR = "remote_protocol_error"
    FILE_NOT_FOUND = "file_not_found"


class GatewayError(Exception):
    """Base class for all download failures."""
    kind: ErrorKind


class PathTraversalError(GatewayError):
    """Raised when a requested path tries to leave the base directory."""
    kind = ErrorKind.PATH_TRAVERSAL

    def __init__(self, requested_path: str):
        super().__init__(f"Path traversal in request: {requested_path!r}")
        self.requested_path = requested_path


class RemoteConnectionError(GatewayError):
    """Raised when the SSH transport or the SFTP channel cannot be set up."""
    kind = ErrorKind.CONNECTION_ERROR


class AuthFailureError(GatewayError):
    """Raised when the remote server rejects our credentials."""
    kind = ErrorKind.AUTH_FAILURE


class RemoteProtocolError(GatewayError):
    """Raised when an SFTP request for an existing file fails."""
    kind = ErrorKind.REMOTE_PROTOCOL_ERROR


class RemoteFileNotFoundError(GatewayError):
    """Raised when the target is absent or not a regular file."""
    kind = ErrorKind.FILE_NOT_FOUND

    def __init__(self, remote_path: str):
        super().__init__(f"No regular file at {remote_path}")
        self.remote_path = remote_path
