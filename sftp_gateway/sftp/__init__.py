"""
SFTP module for reading files from the remote server.

This module provides:
- SFTPClient: Context-managed, per-request SFTP client
- open_session: Open a connected client
- open_remote_file: Stat and open a remote file as a lazy byte stream
- Host key policies
"""

from sftp_gateway.sftp.client import (
    SFTPClient,
    open_session,
)
from sftp_gateway.sftp.fetcher import (
    CHUNK_SIZE,
    RemoteFileStream,
    open_remote_file,
)
from sftp_gateway.sftp.host_keys import (
    AcceptAnyHostKey,
    HostKeyPolicy,
    KnownHostsPolicy,
    build_host_key_policy,
)

__all__ = [
    "SFTPClient",
    "open_session",
    "CHUNK_SIZE",
    "RemoteFileStream",
    "open_remote_file",
    "AcceptAnyHostKey",
    "HostKeyPolicy",
    "KnownHostsPolicy",
    "build_host_key_policy",
]
