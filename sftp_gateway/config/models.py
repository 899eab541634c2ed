"""
Pydantic models for gateway configuration.

These models define the immutable settings the gateway is started with:
where to listen for HTTP requests and which SFTP server (and which
directory on it) to expose.
"""

import posixpath
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SFTPConfig(BaseModel):
    """
    SFTP connection configuration.

    Attributes:
        host: SFTP server hostname
        port: SFTP server port (default: 22)
        username: SFTP username
        password: SFTP password (use password OR key_path)
        key_path: Path to SSH private key file
        remote_path: Remote base directory that requests are resolved against
        host_key_policy: How the server's host key is verified
        known_hosts_path: known_hosts file used by the "known-hosts" policy
    """
    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1)
    port: int = Field(22, ge=1, le=65535)
    username: str = Field(..., min_length=1)
    password: Optional[str] = None
    key_path: Optional[str] = None
    remote_path: str = "/"
    host_key_policy: Literal["accept-any", "known-hosts"] = "accept-any"
    known_hosts_path: str = "~/.ssh/known_hosts"

    @field_validator("remote_path")
    @classmethod
    def require_absolute_remote_path(cls, v: str) -> str:
        """The base directory must be an absolute POSIX path."""
        if not posixpath.isabs(v):
            raise ValueError("remote_path must be an absolute path")
        return v

    @model_validator(mode="after")
    def require_credentials(self) -> "SFTPConfig":
        if not self.password and not self.key_path:
            raise ValueError(
                "No authentication method provided. "
                "Set either a password or a key path."
            )
        return self


class GatewayConfig(BaseModel):
    """
    Complete gateway configuration.

    Loaded once at startup and passed explicitly to the application
    factory; never mutated afterwards.

    Attributes:
        host: Address the HTTP server binds to
        port: Port the HTTP server listens on
        bz2_compress_level: Compression level used for ".bz2" downloads
        sftp: Remote server settings
    """
    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = Field(8000, ge=1, le=65535)
    bz2_compress_level: int = Field(9, ge=1, le=9)
    sftp: SFTPConfig
