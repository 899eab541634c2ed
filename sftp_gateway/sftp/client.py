"""
SFTP client used to serve a single download.

This module provides a context-managed SFTP client that:
- Opens an SSH transport and checks the server's host key
- Authenticates with a password or an SSH key
- Negotiates the SFTP subsystem on a session channel

Each request gets its own client; clients are never shared or reused.
Every paramiko/socket failure is converted into the gateway's error
taxonomy here.
"""

import logging
import os
from typing import Optional

import paramiko

from sftp_gateway.config.models import SFTPConfig
from sftp_gateway.errors import AuthFailureError, RemoteConnectionError
from sftp_gateway.sftp.host_keys import HostKeyPolicy, build_host_key_policy

logger = logging.getLogger(__name__)


class SFTPClient:
    """
    SFTP client for reading files from a remote server.

    Supports both password and SSH key authentication.
    Use as a context manager to ensure proper cleanup.

    Example:
        ```python
        config = SFTPConfig(
            host="sftp.example.com",
            username="user",
            password="secret",
            remote_path="/exports/"
        )

        with SFTPClient(config, AcceptAnyHostKey()) as client:
            attrs = client.sftp.stat("/exports/report.csv")
        ```
    """

    def __init__(self, config: SFTPConfig, host_key_policy: Optional[HostKeyPolicy] = None):
        """
        Initialize SFTP client with configuration.

        Args:
            config: SFTPConfig with connection details
            host_key_policy: Policy deciding whether the server key is trusted
        """
        self.config = config
        self.host_key_policy = host_key_policy or build_host_key_policy(config)
        self._transport: Optional[paramiko.Transport] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    def __enter__(self) -> "SFTPClient":
        """Connect to SFTP server."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect."""
        self.disconnect()

    @property
    def sftp(self) -> paramiko.SFTPClient:
        """The negotiated SFTP channel."""
        if not self._sftp:
            raise RemoteConnectionError("Not connected to SFTP server")
        return self._sftp

    def connect(self) -> None:
        """
        Establish an authenticated SFTP session.

        Raises:
            RemoteConnectionError: If the transport, host key check or
                SFTP subsystem fails
            AuthFailureError: If authentication is rejected
        """
        try:
            self._open_transport()
            self._verify_host_key()
            self._authenticate()
            self._open_sftp()
        except Exception:
            self.disconnect()
            raise

        logger.info(f"Connected to SFTP server: {self.config.host}")

    def _open_transport(self) -> None:
        logger.info(f"Connecting to SFTP: {self.config.host}:{self.config.port}")
        try:
            self._transport = paramiko.Transport((self.config.host, self.config.port))
            self._transport.start_client()
        except (paramiko.SSHException, OSError) as e:
            raise RemoteConnectionError(f"ssh error: {e}") from e

    def _verify_host_key(self) -> None:
        key = self._transport.get_remote_server_key()
        if not self.host_key_policy.is_acceptable(self.config.host, self.config.port, key):
            raise RemoteConnectionError(
                f"ssh error: host key for {self.config.host} was rejected"
            )

    def _authenticate(self) -> None:
        try:
            if self.config.key_path:
                pkey = self._load_private_key(os.path.expanduser(self.config.key_path))
                self._transport.auth_publickey(self.config.username, pkey)
                logger.debug(f"Authenticated with SSH key: {self.config.key_path}")
            else:
                self._transport.auth_password(self.config.username, self.config.password)
                logger.debug("Authenticated with password")
        except (paramiko.SSHException, OSError) as e:
            raise AuthFailureError(
                f"failed to authenticate to remote server: {e}"
            ) from e

        if not self._transport.is_authenticated():
            raise AuthFailureError("failed to authenticate to remote server")

    def _load_private_key(self, key_path: str) -> paramiko.PKey:
        """
        Load private key from file, trying different key types.

        Args:
            key_path: Path to private key file

        Returns:
            Loaded private key

        Raises:
            AuthFailureError: If key cannot be loaded
        """
        if not os.path.exists(key_path):
            raise AuthFailureError(f"SSH key file not found: {key_path}")

        key_classes = [
            paramiko.RSAKey,
            paramiko.Ed25519Key,
            paramiko.ECDSAKey,
        ]

        last_error = None
        for key_class in key_classes:
            try:
                return key_class.from_private_key_file(key_path)
            except paramiko.SSHException as e:
                last_error = e
                continue

        raise AuthFailureError(f"Could not load SSH key {key_path}: {last_error}")

    def _open_sftp(self) -> None:
        try:
            self._sftp = paramiko.SFTPClient.from_transport(self._transport)
        except (paramiko.SSHException, OSError) as e:
            raise RemoteConnectionError(f"sftp error: {e}") from e

        if self._sftp is None:
            raise RemoteConnectionError("sftp error: could not open a session channel")

    def disconnect(self) -> None:
        """Close SFTP connection. Safe to call more than once."""
        if self._sftp:
            try:
                self._sftp.close()
            except Exception as e:
                logger.warning(f"Error closing SFTP client: {e}")
            self._sftp = None

        if self._transport:
            try:
                self._transport.close()
            except Exception as e:
                logger.warning(f"Error closing transport: {e}")
            self._transport = None

        logger.debug("SFTP connection closed")


def open_session(config: SFTPConfig, host_key_policy: Optional[HostKeyPolicy] = None) -> SFTPClient:
    """
    Open a new, connected SFTP client.

    The caller owns the returned client and must disconnect() it.

    Args:
        config: SFTPConfig with connection details
        host_key_policy: Optional policy, defaults to the configured one

    Returns:
        Connected SFTPClient
    """
    client = SFTPClient(config, host_key_policy)
    client.connect()
    return client
