"""
Remote file fetching over an open SFTP client.

The target is stat'ed before it is opened, so a missing file is
detected without holding a remote handle.
"""

import errno
import logging
import stat

import paramiko

from sftp_gateway.errors import RemoteFileNotFoundError, RemoteProtocolError
from sftp_gateway.sftp.client import SFTPClient

logger = logging.getLogger(__name__)

# One SFTP read request per chunk (paramiko's maximum request size)
CHUNK_SIZE = 32768


class RemoteFileStream:
    """
    Lazy byte source over a remote file.

    Iterating yields chunks of at most chunk_size bytes, each fetched
    only when the consumer asks for it. The stream owns both the remote
    handle and the client it came from; closing it (explicitly, or by
    exhausting or abandoning iteration) closes the handle first, then
    the client.
    """

    def __init__(self, client: SFTPClient, handle, remote_path: str, chunk_size: int = CHUNK_SIZE):
        self.client = client
        self.remote_path = remote_path
        self.chunk_size = chunk_size
        self._handle = handle
        self._closed = False

    def __iter__(self):
        try:
            while True:
                chunk = self._handle.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk
        except (IOError, paramiko.SSHException) as e:
            logger.error(f"Read of {self.remote_path} failed mid-stream: {e}")
            raise
        finally:
            self.close()

    def __enter__(self) -> "RemoteFileStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        try:
            self._handle.close()
        except Exception as e:
            logger.warning(f"Error closing remote file {self.remote_path}: {e}")

        self.client.disconnect()


def _is_not_found(error: IOError) -> bool:
    return isinstance(error, FileNotFoundError) or error.errno == errno.ENOENT


def open_remote_file(client: SFTPClient, remote_path: str) -> RemoteFileStream:
    """
    Open a remote regular file for sequential reading.

    Args:
        client: Connected SFTPClient
        remote_path: Absolute remote path (already validated)

    Returns:
        RemoteFileStream owning the handle and the client

    Raises:
        RemoteFileNotFoundError: If the path is absent or not a regular file
        RemoteProtocolError: If stat or open fails for any other reason
    """
    sftp = client.sftp

    try:
        attrs = sftp.stat(remote_path)
    except (IOError, paramiko.SSHException) as e:
        if isinstance(e, IOError) and _is_not_found(e):
            raise RemoteFileNotFoundError(remote_path) from e
        raise RemoteProtocolError(f"Error accessing file: {e}") from e

    # stat() follows symlinks, so a link to a directory is rejected here too
    if attrs.st_mode is None or not stat.S_ISREG(attrs.st_mode):
        logger.info(f"Not a regular file: {remote_path}")
        raise RemoteFileNotFoundError(remote_path)

    try:
        handle = sftp.open(remote_path, "rb")
    except (IOError, paramiko.SSHException) as e:
        raise RemoteProtocolError(f"Error accessing file: {e}") from e

    logger.debug(f"Opened {remote_path} ({attrs.st_size} bytes)")
    return RemoteFileStream(client, handle, remote_path)
