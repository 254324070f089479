"""Client configuration schema."""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class EndpointConfig(BaseModel):
    """Service endpoints of the cloud."""

    compute_url: str = Field(..., description="Compute API base URL")
    network_url: Optional[str] = Field(None, description="Network API base URL")
    image_url: Optional[str] = Field(None, description="Image API base URL")

    @field_validator("compute_url", "network_url", "image_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else value


class HttpConfig(BaseModel):
    """HTTP transport settings."""

    connect_timeout: float = Field(5.0, gt=0, description="Connect timeout in seconds")
    read_timeout: float = Field(30.0, gt=0, description="Read timeout in seconds")
    verify_tls: bool = Field(True, description="Verify TLS certificates")
    compute_microversion: Optional[str] = Field(
        None, description="Compute API microversion to request"
    )


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field("INFO", description="Log level for the orbit logger")
    format: Literal["json", "console"] = Field("console", description="Log rendering")
    file: Optional[str] = Field(None, description="Log file path, stderr when unset")
    propagate: bool = Field(True, description="Propagate records to the root logger")


class ClientConfig(BaseModel):
    """Top level client configuration."""

    token: str = Field(..., min_length=1, description="Pre-issued authentication token")
    endpoints: EndpointConfig
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
