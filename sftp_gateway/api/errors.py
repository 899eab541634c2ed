"""
Mapping of gateway failures to HTTP responses.

Client-caused failures get a generic message. Server-caused failures
carry the underlying diagnostic text in the response body, which helps
operators at the cost of exposing internal details to clients.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from fastapi import Request, status
from fastapi.responses import JSONResponse

from sftp_gateway.errors import ErrorKind, GatewayError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorOutcome:
    """Status code and message returned to the client."""
    status_code: int
    message: str


# Kind -> (status code, fixed message or None to use the error's own text)
ERROR_OUTCOMES: Dict[ErrorKind, Tuple[int, Optional[str]]] = {
    ErrorKind.PATH_TRAVERSAL: (status.HTTP_400_BAD_REQUEST, "Request contains path traversal"),
    ErrorKind.FILE_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "File not found"),
    ErrorKind.CONNECTION_ERROR: (status.HTTP_500_INTERNAL_SERVER_ERROR, None),
    ErrorKind.AUTH_FAILURE: (status.HTTP_500_INTERNAL_SERVER_ERROR, None),
    ErrorKind.REMOTE_PROTOCOL_ERROR: (status.HTTP_500_INTERNAL_SERVER_ERROR, None),
}


def map_error(error: GatewayError) -> ErrorOutcome:
    """Translate a GatewayError into its HTTP outcome."""
    status_code, message = ERROR_OUTCOMES[error.kind]
    return ErrorOutcome(status_code=status_code, message=message or str(error))


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """FastAPI exception handler for GatewayError."""
    outcome = map_error(exc)

    if outcome.status_code >= 500:
        logger.error(f"GET {request.url.path} failed ({exc.kind.value}): {exc}")
    else:
        logger.info(f"GET {request.url.path} rejected ({exc.kind.value}): {exc}")

    return JSONResponse(
        status_code=outcome.status_code,
        content={"detail": outcome.message},
    )
