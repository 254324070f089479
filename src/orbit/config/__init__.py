"""Client configuration."""

from .loader import load_config
from .schemas import ClientConfig, EndpointConfig, HttpConfig, LoggingConfig

__all__: list[str] = [
    "ClientConfig",
    "EndpointConfig",
    "HttpConfig",
    "LoggingConfig",
    "load_config",
]
