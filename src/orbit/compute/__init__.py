"""Server management via the compute API."""

from .new_server import NewServer
from .queries import DetailedServerQuery, ServerQuery
from .server import Server, ServerCreationWaiter, ServerStatusWaiter, ServerSummary

__all__: list[str] = [
    "DetailedServerQuery",
    "NewServer",
    "Server",
    "ServerCreationWaiter",
    "ServerQuery",
    "ServerStatusWaiter",
    "ServerSummary",
]
