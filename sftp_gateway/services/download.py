"""
Download orchestration service.

This module coordinates serving one requested path:
1. Strip a compression suffix (".bz2") from the requested name
2. Resolve the remaining path against the remote base directory
3. Open a fresh SFTP session
4. Stat and open the remote file
5. Wrap the stream in a compressor when a suffix was stripped
"""

import logging
import posixpath
from dataclasses import dataclass
from typing import Callable, Optional, Union

from sftp_gateway.config.models import GatewayConfig
from sftp_gateway.services.paths import resolve_remote_path
from sftp_gateway.services.transcoding import (
    TranscodingStream,
    split_compression_suffix,
    wrap_stream,
)
from sftp_gateway.sftp import (
    HostKeyPolicy,
    RemoteFileStream,
    build_host_key_policy,
    open_remote_file,
    open_session,
)

logger = logging.getLogger(__name__)


@dataclass
class Download:
    """
    A download that is ready to be streamed.

    Attributes:
        stream: Iterable of byte chunks; close() releases the SFTP session
        filename: Name offered to the client (as requested, suffix included)
        remote_path: Absolute remote path being read
        compressed: Whether the stream is compressed on the fly
    """
    stream: Union[RemoteFileStream, TranscodingStream]
    filename: str
    remote_path: str
    compressed: bool = False


def download_filename(requested_path: str) -> str:
    """Name of the final component of the requested path."""
    return posixpath.basename(requested_path.rstrip("/"))


class DownloadService:
    """
    Turns requested paths into streams of remote file content.

    Holds only the immutable configuration and the host key policy, so a
    single instance is shared by all concurrent requests. Every call to
    open_download() opens its own SFTP session.
    """

    def __init__(
        self,
        config: GatewayConfig,
        host_key_policy: Optional[HostKeyPolicy] = None,
        client_factory: Callable = open_session,
    ):
        """
        Args:
            config: Gateway configuration
            host_key_policy: Host key policy, defaults to the configured one
            client_factory: Callable(sftp_config, host_key_policy) returning
                a connected client
        """
        self.config = config
        self.host_key_policy = host_key_policy or build_host_key_policy(config.sftp)
        self._client_factory = client_factory

    def open_download(self, requested_path: str) -> Download:
        """
        Open the remote file behind a requested path.

        Args:
            requested_path: URL-decoded path from the request

        Returns:
            Download whose stream owns the SFTP session

        Raises:
            GatewayError: Any member of the failure taxonomy; no session is
                left open when this raises
        """
        remote_name, suffix = split_compression_suffix(requested_path)
        remote_path = resolve_remote_path(self.config.sftp.remote_path, remote_name)

        logger.info(f"Fetching {remote_path}" + (f" (compressing as {suffix})" if suffix else ""))

        client = self._client_factory(self.config.sftp, self.host_key_policy)
        try:
            stream = open_remote_file(client, remote_path)
        except Exception:
            client.disconnect()
            raise

        if suffix:
            stream = wrap_stream(stream, suffix, self.config.bz2_compress_level)

        return Download(
            stream=stream,
            filename=download_filename(requested_path),
            remote_path=remote_path,
            compressed=suffix is not None,
        )
