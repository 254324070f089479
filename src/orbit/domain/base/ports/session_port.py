"""Domain port for the compute transport collaborator."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from orbit.infrastructure.query.filter import Query


class ComputeSessionPort(ABC):
    """
    Transport operations the compute layer depends on.

    Implementations return decoded JSON bodies. Every lookup raises
    ``ResourceNotFoundError`` when the resource is absent; any other
    failure surfaces as ``TransportError``. Retries, if any, belong to
    the implementation, never to callers of this port.
    """

    @abstractmethod
    def get_server(self, server_id: str) -> dict[str, Any]:
        """Fetch a detailed server record by id."""

    @abstractmethod
    def list_servers(self, query: "Query") -> list[dict[str, Any]]:
        """Fetch one chunk of server summaries (id and name)."""

    @abstractmethod
    def list_servers_detail(self, query: "Query") -> list[dict[str, Any]]:
        """Fetch one chunk of detailed server records."""

    @abstractmethod
    def create_server(self, request: dict[str, Any]) -> dict[str, Any]:
        """Create a server and return its reference (at least ``id``)."""

    @abstractmethod
    def delete_server(self, server_id: str) -> None:
        """Request server deletion."""

    @abstractmethod
    def server_action(
        self, server_id: str, action: str, args: Optional[dict[str, Any]] = None
    ) -> None:
        """Invoke a named server action."""

    @abstractmethod
    def get_flavor(self, id_or_name: str) -> dict[str, Any]:
        """Resolve a flavor by id or unique name."""

    @abstractmethod
    def get_image(self, id_or_name: str) -> dict[str, Any]:
        """Resolve an image by id or unique name."""

    @abstractmethod
    def get_keypair(self, name: str) -> dict[str, Any]:
        """Resolve a key pair by name."""

    @abstractmethod
    def get_network(self, id_or_name: str) -> dict[str, Any]:
        """Resolve a network by id or unique name."""

    @abstractmethod
    def get_port(self, id_or_name: str) -> dict[str, Any]:
        """Resolve a port by id or unique name."""
