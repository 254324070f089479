"""Server creation request."""

from ipaddress import IPv4Address
from typing import Optional, Union

from orbit.compute.server import Server, ServerCreationWaiter
from orbit.domain.base.exceptions import ValidationError
from orbit.domain.base.ports import ComputeSessionPort
from orbit.domain.server.value_objects import (
    FixedIpNIC,
    NetworkNIC,
    PortNIC,
    ServerCreateRequest,
    ServerNIC,
)
from orbit.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)


def convert_networks(session: ComputeSessionPort, nics: tuple) -> list[dict[str, str]]:
    """Resolve NIC references to the wire form of the ``networks`` field."""
    result = []
    for nic in nics:
        if isinstance(nic, NetworkNIC):
            result.append({"uuid": session.get_network(nic.network)["id"]})
        elif isinstance(nic, PortNIC):
            result.append({"port": session.get_port(nic.port)["id"]})
        elif isinstance(nic, FixedIpNIC):
            result.append({"fixed_ip": str(nic.fixed_ip)})
        else:
            raise ValidationError(f"Unsupported NIC specification: {nic!r}")
    return result


class NewServer:
    """
    A request to create a server.

    Builder methods return a new request and leave the original untouched.
    References (flavor, image, key pair, networks, ports) may be ids or
    names; they are verified against the session when ``create`` runs.
    """

    def __init__(
        self,
        session: ComputeSessionPort,
        name: str,
        flavor: str,
        image: Optional[str] = None,
        keypair: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
        nics: tuple = (),
    ) -> None:
        if not name:
            raise ValidationError("Server name cannot be empty")
        if not flavor:
            raise ValidationError("Server flavor cannot be empty")
        self._session = session
        self._name = name
        self._flavor = flavor
        self._image = image
        self._keypair = keypair
        self._metadata = dict(metadata or {})
        self._nics = tuple(nics)

    @property
    def name(self) -> str:
        return self._name

    @property
    def nics(self) -> tuple:
        return self._nics

    @property
    def metadata(self) -> dict[str, str]:
        return dict(self._metadata)

    def _copy(self, **changes) -> "NewServer":
        values = {
            "name": self._name,
            "flavor": self._flavor,
            "image": self._image,
            "keypair": self._keypair,
            "metadata": self._metadata,
            "nics": self._nics,
        }
        values.update(changes)
        return NewServer(self._session, **values)

    def with_image(self, image: str) -> "NewServer":
        """Boot the new server from this image."""
        return self._copy(image=image)

    def with_keypair(self, keypair: str) -> "NewServer":
        """Inject this key pair into the new server."""
        return self._copy(keypair=keypair)

    def with_metadata(self, key: str, value: str) -> "NewServer":
        metadata = dict(self._metadata)
        metadata[key] = value
        return self._copy(metadata=metadata)

    def with_nic(self, nic: ServerNIC) -> "NewServer":
        """Add a virtual NIC."""
        return self._copy(nics=self._nics + (nic,))

    def with_network(self, network: str) -> "NewServer":
        """Add a virtual NIC allocated from this network."""
        return self.with_nic(NetworkNIC(network=network))

    def with_port(self, port: str) -> "NewServer":
        """Add a virtual NIC bound to this port."""
        return self.with_nic(PortNIC(port=port))

    def with_fixed_ip(self, fixed_ip: Union[str, IPv4Address]) -> "NewServer":
        """Add a virtual NIC with this fixed IPv4 address."""
        return self.with_nic(FixedIpNIC(fixed_ip=fixed_ip))

    def build_request(self) -> ServerCreateRequest:
        """Verify every reference and build the creation payload."""
        session = self._session
        return ServerCreateRequest(
            name=self._name,
            flavor_ref=session.get_flavor(self._flavor)["id"],
            image_ref=session.get_image(self._image)["id"] if self._image else None,
            key_name=session.get_keypair(self._keypair)["name"] if self._keypair else None,
            metadata=self._metadata,
            networks=convert_networks(session, self._nics),
        )

    def create(self) -> ServerCreationWaiter:
        """
        Request creation of the server.

        Returns:
            A waiter resolving to the server once it is ACTIVE.

        Raises:
            ResourceNotFoundError: If a referenced resource does not exist.
            TooManyItemsError: If a name reference is ambiguous.
        """
        request = self.build_request()
        reference = self._session.create_server(request.to_wire())
        server_id = reference["id"]
        logger.info(
            "Requested creation of server %s (%s)",
            self._name,
            server_id,
            extra={"server_id": server_id, "flavor": request.flavor_ref},
        )
        return ServerCreationWaiter(Server.load(self._session, server_id))

    def __repr__(self) -> str:
        return f"NewServer(name={self._name!r}, flavor={self._flavor!r}, nics={len(self._nics)})"
