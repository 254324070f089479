"""Configuration loading from YAML files and environment variables."""

import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from orbit.config.schemas import ClientConfig
from orbit.domain.base.exceptions import ConfigurationError
from orbit.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)

CONFIG_FILE_ENV = "ORBIT_CONFIG_FILE"

# Environment variable -> path inside the configuration document.
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "ORBIT_TOKEN": ("token",),
    "ORBIT_COMPUTE_URL": ("endpoints", "compute_url"),
    "ORBIT_NETWORK_URL": ("endpoints", "network_url"),
    "ORBIT_IMAGE_URL": ("endpoints", "image_url"),
    "ORBIT_CONNECT_TIMEOUT": ("http", "connect_timeout"),
    "ORBIT_READ_TIMEOUT": ("http", "read_timeout"),
    "ORBIT_VERIFY_TLS": ("http", "verify_tls"),
    "ORBIT_COMPUTE_MICROVERSION": ("http", "compute_microversion"),
    "ORBIT_LOG_LEVEL": ("logging", "level"),
    "ORBIT_LOG_FORMAT": ("logging", "format"),
    "ORBIT_LOG_FILE": ("logging", "file"),
}


def _read_file(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as stream:
            data = yaml.safe_load(stream)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file {path} does not exist", details={"path": str(path)}
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Configuration file {path} is not valid YAML: {e}", details={"path": str(path)}
        )

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {path} must contain a mapping", details={"path": str(path)}
        )
    return data


def _apply_env(data: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    for variable, path in ENV_OVERRIDES.items():
        if variable not in env:
            continue
        target = data
        for key in path[:-1]:
            section = target.get(key)
            if not isinstance(section, dict):
                section = {}
                target[key] = section
            target = section
        target[path[-1]] = env[variable]
        logger.debug("Configuration value %s overridden from %s", ".".join(path), variable)
    return data


def load_config(
    path: Optional[Union[str, Path]] = None, env: Optional[Mapping[str, str]] = None
) -> ClientConfig:
    """
    Load the client configuration.

    The YAML file named by ``path`` (or by ``ORBIT_CONFIG_FILE``) is read
    first, then ``ORBIT_*`` environment variables override single values.

    Args:
        path: Configuration file; optional when everything comes from env.
        env: Environment mapping, defaults to ``os.environ``.

    Raises:
        ConfigurationError: If the file cannot be read or the result is invalid.
    """
    env = os.environ if env is None else env
    path = path or env.get(CONFIG_FILE_ENV)

    data: dict[str, Any] = _read_file(Path(path)) if path else {}
    data = _apply_env(data, env)

    try:
        config = ClientConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid client configuration: {e.error_count()} error(s)",
            details={"errors": [
                {"loc": ".".join(str(part) for part in error["loc"]), "msg": error["msg"]}
                for error in e.errors()
            ]},
        )

    logger.debug(
        "Loaded configuration for compute endpoint %s",
        config.endpoints.compute_url,
        extra={"config_file": str(path) if path else None},
    )
    return config
