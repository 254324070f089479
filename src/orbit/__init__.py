"""
Orbit - a compute server client.

Lists servers through lazily paginated queries, creates, reboots, starts,
stops and deletes them, and waits for the resulting state transitions.

Usage:
    >>> from orbit import Cloud
    >>> cloud = Cloud.from_file("orbit.yaml")
    >>> server = cloud.new_server("web-1", "m1.small").with_image("ubuntu").create().wait()
    >>> server.stop().wait(timeout=300)
"""

from orbit.cloud import Cloud
from orbit.compute import (
    DetailedServerQuery,
    NewServer,
    Server,
    ServerCreationWaiter,
    ServerQuery,
    ServerStatusWaiter,
    ServerSummary,
)
from orbit.config import ClientConfig, load_config
from orbit.domain.base.exceptions import (
    ConfigurationError,
    DomainException,
    OperationCancelledError,
    OperationFailedError,
    OperationTimedOutError,
    ResourceBusyError,
    ResourceNotFoundError,
    TooManyItemsError,
    TransportError,
    ValidationError,
)
from orbit.infrastructure.waiter import CancellationToken

__version__ = "0.1.0"

__all__: list[str] = [
    "CancellationToken",
    "ClientConfig",
    "Cloud",
    "ConfigurationError",
    "DetailedServerQuery",
    "DomainException",
    "NewServer",
    "OperationCancelledError",
    "OperationFailedError",
    "OperationTimedOutError",
    "ResourceBusyError",
    "ResourceNotFoundError",
    "Server",
    "ServerCreationWaiter",
    "ServerQuery",
    "ServerStatusWaiter",
    "ServerSummary",
    "TooManyItemsError",
    "TransportError",
    "ValidationError",
    "load_config",
]
