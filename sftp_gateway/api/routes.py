"""
FastAPI routes for the SFTP gateway.

Endpoints:
- GET /{path}: Stream a remote file, bzip2-compressed when the name ends in ".bz2"
"""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from sftp_gateway.services.download import DownloadService

logger = logging.getLogger(__name__)

files_router = APIRouter(tags=["files"])


def get_download_service(request: Request) -> DownloadService:
    """Dependency returning the application's DownloadService."""
    return request.app.state.download_service


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header value.

    Non-ASCII names get an RFC 5987 filename* parameter alongside an
    ASCII fallback, since header values must be latin-1 encodable.
    """
    escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
    if escaped.isascii():
        return f'attachment; filename="{escaped}"'

    fallback = escaped.encode("ascii", "replace").decode("ascii")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@files_router.get("/{path:path}")
def download_file(path: str, service: DownloadService = Depends(get_download_service)):
    """
    Stream a file from the remote SFTP server.

    Runs in the threadpool: session setup and each chunk read block on
    the network. The stream is closed by a background task once the
    response has been sent or the client has gone away.
    """
    download = service.open_download(path)

    return StreamingResponse(
        download.stream,
        media_type="application/octet-stream",
        headers={"Content-Disposition": content_disposition(download.filename)},
        background=BackgroundTask(download.stream.close),
    )
