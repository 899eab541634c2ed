"""
Configuration module for the SFTP gateway.

This module provides Pydantic models and the environment loader
for the gateway's process-wide settings.
"""

from sftp_gateway.config.models import (
    GatewayConfig,
    SFTPConfig,
)
from sftp_gateway.config.loader import (
    ConfigError,
    load_config_from_dict,
    load_config_from_env,
)

__all__ = [
    # Models
    "GatewayConfig",
    "SFTPConfig",
    # Loader
    "ConfigError",
    "load_config_from_dict",
    "load_config_from_env",
]
