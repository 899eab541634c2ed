"""
API module for the SFTP gateway.

This module provides:
- The file download router
- The exception handler mapping gateway failures to HTTP responses
"""

from sftp_gateway.api.errors import (
    ErrorOutcome,
    gateway_error_handler,
    map_error,
)
from sftp_gateway.api.routes import (
    files_router,
    get_download_service,
)

__all__ = [
    # Routers
    "files_router",
    "get_download_service",
    # Errors
    "ErrorOutcome",
    "gateway_error_handler",
    "map_error",
]
