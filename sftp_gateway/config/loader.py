"""
Environment configuration loader.

This module reads gateway settings from environment variables (a .env
file is loaded by the entry point beforehand) and validates them into a
GatewayConfig.
"""

import logging
import os
from typing import Dict, Mapping, Optional, Tuple

from pydantic import ValidationError

from sftp_gateway.config.models import GatewayConfig

logger = logging.getLogger(__name__)

# Environment variable -> location of the field it populates
ENV_FIELDS: Dict[str, Tuple[str, ...]] = {
    "HOST": ("host",),
    "PORT": ("port",),
    "BZ2_COMPRESS_LEVEL": ("bz2_compress_level",),
    "SFTP_HOST": ("sftp", "host"),
    "SFTP_PORT": ("sftp", "port"),
    "SFTP_USERNAME": ("sftp", "username"),
    "SFTP_PASSWORD": ("sftp", "password"),
    "SFTP_KEY_PATH": ("sftp", "key_path"),
    "SFTP_PATH": ("sftp", "remote_path"),
    "SFTP_HOST_KEY_POLICY": ("sftp", "host_key_policy"),
    "SFTP_KNOWN_HOSTS": ("sftp", "known_hosts_path"),
}

_FIELD_ENVS = {location: name for name, location in ENV_FIELDS.items()}
# SFTPConfig's model-level check is the password-or-key requirement
_FIELD_ENVS[("sftp",)] = "SFTP_PASSWORD / SFTP_KEY_PATH"


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


def _describe_location(loc: Tuple) -> str:
    """Name a validation error location by its environment variable."""
    location = tuple(str(part) for part in loc)
    if location in _FIELD_ENVS:
        return _FIELD_ENVS[location]
    return " -> ".join(location)


def load_config_from_dict(config_dict: dict) -> GatewayConfig:
    """
    Create a GatewayConfig from a (nested) dictionary.

    Args:
        config_dict: Dictionary with configuration values

    Returns:
        Validated GatewayConfig object

    Raises:
        ConfigError: If validation fails
    """
    try:
        return GatewayConfig(**config_dict)
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            location = _describe_location(error["loc"])
            error_messages.append(f"  {location}: {error['msg']}")

        raise ConfigError(
            "Invalid configuration:\n" + "\n".join(error_messages)
        ) from e


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> GatewayConfig:
    """
    Load and validate the gateway configuration from environment variables.

    Unset (or empty) variables fall back to the model defaults.

    Args:
        environ: Mapping to read instead of os.environ (useful for tests)

    Returns:
        Validated GatewayConfig object

    Raises:
        ConfigError: If a required variable is missing or a value is invalid

    Example:
        >>> config = load_config_from_env({
        ...     "SFTP_HOST": "sftp.example.com",
        ...     "SFTP_USERNAME": "reader",
        ...     "SFTP_PASSWORD": "secret",
        ...     "SFTP_PATH": "/exports",
        ... })
        >>> config.sftp.remote_path
        '/exports'
    """
    if environ is None:
        environ = os.environ

    raw_config: dict = {"sftp": {}}
    for name, location in ENV_FIELDS.items():
        value = environ.get(name)
        if not value:
            continue

        target = raw_config
        for key in location[:-1]:
            target = target[key]
        target[location[-1]] = value

    config = load_config_from_dict(raw_config)
    logger.info(
        f"Loaded configuration for sftp://{config.sftp.host}:{config.sftp.port}"
        f"{config.sftp.remote_path}"
    )
    return config
