"""
Host key verification policies.

The gateway asks a HostKeyPolicy whether the key presented by the SFTP
server is acceptable before sending any credentials.
"""

import logging
import os

import paramiko

from sftp_gateway.config.models import SFTPConfig

logger = logging.getLogger(__name__)


class HostKeyPolicy:
    """Decides whether a remote server's host key is trusted."""

    def is_acceptable(self, hostname: str, port: int, key: paramiko.PKey) -> bool:
        raise NotImplementedError


class AcceptAnyHostKey(HostKeyPolicy):
    """
    Accept whatever key the server presents.

    Only suitable for closed, trusted networks: nothing stops a
    man-in-the-middle from impersonating the server.
    """

    def is_acceptable(self, hostname: str, port: int, key: paramiko.PKey) -> bool:
        logger.debug(
            f"Accepting {key.get_name()} host key {key.get_fingerprint().hex()} "
            f"for {hostname}:{port} without verification"
        )
        return True


class KnownHostsPolicy(HostKeyPolicy):
    """
    Accept only keys listed for the host in an OpenSSH known_hosts file.

    Entries for non-default ports use the "[host]:port" form, as written
    by OpenSSH itself.
    """

    def __init__(self, known_hosts_path: str):
        self.known_hosts_path = os.path.expanduser(known_hosts_path)
        self._host_keys = paramiko.HostKeys()
        try:
            self._host_keys.load(self.known_hosts_path)
        except IOError as e:
            logger.warning(f"Could not read known_hosts file {self.known_hosts_path}: {e}")

    @staticmethod
    def _host_entry_name(hostname: str, port: int) -> str:
        if port == 22:
            return hostname
        return f"[{hostname}]:{port}"

    def is_acceptable(self, hostname: str, port: int, key: paramiko.PKey) -> bool:
        entry = self._host_keys.lookup(self._host_entry_name(hostname, port))
        if not entry:
            logger.warning(f"No known_hosts entry for {hostname}:{port}")
            return False

        presented = key.asbytes()
        return any(known.asbytes() == presented for known in entry.values())


def build_host_key_policy(config: SFTPConfig) -> HostKeyPolicy:
    """Create the host key policy selected in the SFTP configuration."""
    if config.host_key_policy == "known-hosts":
        return KnownHostsPolicy(config.known_hosts_path)
    return AcceptAnyHostKey()
