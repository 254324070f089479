"""Domain ports."""

from .logging_port import LoggingPort
from .session_port import ComputeSessionPort

__all__: list[str] = ["ComputeSessionPort", "LoggingPort"]
