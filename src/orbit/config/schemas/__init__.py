from .client_config import ClientConfig, EndpointConfig, HttpConfig, LoggingConfig

__all__: list[str] = ["ClientConfig", "EndpointConfig", "HttpConfig", "LoggingConfig"]
