"""
FastAPI application for the SFTP gateway.

This is the main entry point for the HTTP server.

Run with:
    sftp-gateway

Or through uvicorn directly:
    uvicorn sftp_gateway.main:create_app --factory --port 8000
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI

from sftp_gateway import __version__
from sftp_gateway.api import files_router, gateway_error_handler
from sftp_gateway.config import ConfigError, GatewayConfig, load_config_from_env
from sftp_gateway.errors import GatewayError
from sftp_gateway.services.download import DownloadService

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
# paramiko logs every transport event at INFO
logging.getLogger("paramiko").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    config = app.state.config
    logger.info(
        f"Starting SFTP gateway for sftp://{config.sftp.host}:{config.sftp.port}"
        f"{config.sftp.remote_path} (host key policy: {config.sftp.host_key_policy})"
    )
    if config.sftp.host_key_policy == "accept-any":
        logger.warning("Remote host keys are not verified (SFTP_HOST_KEY_POLICY=accept-any)")

    yield

    logger.info("Shutting down SFTP gateway...")


def create_app(
    config: Optional[GatewayConfig] = None,
    download_service: Optional[DownloadService] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Gateway configuration, loaded from the environment if omitted
        download_service: Service serving downloads, built from config if omitted

    Returns:
        Configured FastAPI app
    """
    if config is None:
        config = load_config_from_env()
    if download_service is None:
        download_service = DownloadService(config)

    # Every path is a remote file name, so the docs routes are disabled
    app = FastAPI(
        title="SFTP Gateway",
        description="Serve files from a remote SFTP server over HTTP",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.download_service = download_service

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.include_router(files_router)

    return app


def main() -> None:
    """Console entry point: load configuration and serve with uvicorn."""
    import uvicorn

    try:
        config = load_config_from_env()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
    )


if __name__ == "__main__":
    main()
