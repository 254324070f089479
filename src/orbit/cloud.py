"""Entry point tying a compute session to the server operations."""

from pathlib import Path
from typing import Optional, Union

from orbit.compute import NewServer, Server, ServerQuery, ServerSummary
from orbit.config import ClientConfig, load_config
from orbit.domain.base.ports import ComputeSessionPort
from orbit.infrastructure.logging.logger import get_logger, setup_logging
from orbit.providers.openstack import RequestsComputeSession

logger = get_logger(__name__)


class Cloud:
    """
    Access to the servers of one cloud.

    All objects handed out share the session given here; it is never
    mutated after construction. Calls are expected from a single thread.
    """

    def __init__(self, session: ComputeSessionPort) -> None:
        self._session = session

    @classmethod
    def from_config(cls, config: ClientConfig, configure_logging: bool = False) -> "Cloud":
        """Build a cloud talking HTTP to the endpoints in ``config``."""
        if configure_logging:
            setup_logging(config.logging)
        logger.info("Connecting to compute endpoint %s", config.endpoints.compute_url)
        return cls(RequestsComputeSession(config))

    @classmethod
    def from_file(
        cls, path: Optional[Union[str, Path]] = None, configure_logging: bool = True
    ) -> "Cloud":
        """Load configuration (file and ``ORBIT_*`` variables) and connect."""
        return cls.from_config(load_config(path), configure_logging=configure_logging)

    @property
    def session(self) -> ComputeSessionPort:
        return self._session

    def get_server(self, server_id: str) -> Server:
        """
        Fetch a server by id.

        Raises:
            ResourceNotFoundError: If no server has this id.
        """
        return Server.load(self._session, server_id)

    def find_servers(self) -> ServerQuery:
        """Start a server query; nothing is fetched until it is iterated."""
        return ServerQuery(self._session)

    def list_servers(self) -> list[ServerSummary]:
        """Every server visible to the caller."""
        return self.find_servers().all()

    def new_server(self, name: str, flavor: str) -> NewServer:
        """Start a server creation request."""
        return NewServer(self._session, name, flavor)

    def __repr__(self) -> str:
        return f"Cloud({self._session.__class__.__name__})"
