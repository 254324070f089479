"""Server entity, summary and status waiters."""

from datetime import datetime
from ipaddress import IPv4Address, IPv6Address
from typing import Any, Optional, Union

from orbit.domain.base.entity import RefreshableEntity
from orbit.domain.base.exceptions import OperationFailedError
from orbit.domain.base.ports import ComputeSessionPort
from orbit.domain.server.value_objects import (
    TERMINAL_FAILURE_STATUS,
    AddressType,
    RebootType,
    ServerAddress,
    ServerFlavor,
    ServerPowerState,
    ServerRecord,
    ServerStatus,
    ServerSummaryRecord,
)
from orbit.infrastructure.logging.logger import get_logger
from orbit.infrastructure.waiter import DeletionWaiter, PollOutcome, WaitContext, Waiter

logger = get_logger(__name__)


class Server(RefreshableEntity):
    """
    A compute server.

    Wraps the latest ``ServerRecord`` snapshot together with the flavor
    specs resolved when the object was built. The session is shared with
    every other object created from the same cloud and is never modified
    here.
    """

    resource_type = "server"

    def __init__(
        self, session: ComputeSessionPort, record: ServerRecord, flavor: ServerFlavor
    ) -> None:
        super().__init__()
        self._session = session
        self._record = record
        self._flavor = flavor

    @classmethod
    def new(cls, session: ComputeSessionPort, data: Union[dict[str, Any], ServerRecord]) -> "Server":
        """Build a server from a detailed record, resolving its flavor once."""
        record = data if isinstance(data, ServerRecord) else ServerRecord.model_validate(data)
        flavor_id = record.flavor.get("id")
        if flavor_id:
            flavor = ServerFlavor.from_flavor(session.get_flavor(flavor_id))
        else:
            # Recent API versions embed the flavor specs instead of a link.
            flavor = ServerFlavor.from_flavor(record.flavor)
        return cls(session, record, flavor)

    @classmethod
    def load(cls, session: ComputeSessionPort, server_id: str) -> "Server":
        """Fetch a server by id."""
        return cls.new(session, session.get_server(server_id))

    def _fetch_snapshot(self) -> ServerRecord:
        return ServerRecord.model_validate(self._session.get_server(self._record.id))

    def _replace_snapshot(self, snapshot: ServerRecord) -> None:
        self._record = snapshot

    @property
    def snapshot(self) -> ServerRecord:
        """The whole record as of the last refresh."""
        return self._record

    @property
    def id(self) -> str:
        return self._record.id

    @property
    def name(self) -> str:
        return self._record.name

    @property
    def status(self) -> ServerStatus:
        return self._record.status

    @property
    def power_state(self) -> ServerPowerState:
        return self._record.power_state

    @property
    def access_ipv4(self) -> Optional[IPv4Address]:
        return self._record.access_ipv4

    @property
    def access_ipv6(self) -> Optional[IPv6Address]:
        return self._record.access_ipv6

    @property
    def addresses(self) -> dict[str, list[ServerAddress]]:
        return self._record.addresses

    @property
    def availability_zone(self) -> str:
        return self._record.availability_zone

    @property
    def created_at(self) -> Optional[datetime]:
        return self._record.created_at

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._record.updated_at

    @property
    def description(self) -> Optional[str]:
        return self._record.description

    @property
    def flavor(self) -> ServerFlavor:
        """Flavor specs used to create this server."""
        return self._flavor

    @property
    def floating_ip(self) -> Optional[Union[IPv4Address, IPv6Address]]:
        """First floating address of the server, if any."""
        for addresses in self._record.addresses.values():
            for address in addresses:
                if address.addr_type == AddressType.FLOATING:
                    return address.addr
        return None

    @property
    def has_config_drive(self) -> bool:
        return self._record.has_config_drive

    @property
    def has_image(self) -> bool:
        """False when the server was booted from a volume."""
        return self._record.image is not None

    @property
    def image_id(self) -> Optional[str]:
        return self._record.image.id if self._record.image is not None else None

    @property
    def key_pair_name(self) -> Optional[str]:
        return self._record.key_pair_name

    @property
    def metadata(self) -> dict[str, str]:
        return self._record.metadata

    def delete(self) -> DeletionWaiter["Server"]:
        """Request deletion; the waiter resolves once the server is gone."""
        self._ensure_available()
        self._session.delete_server(self.id)
        logger.info("Requested deletion of server %s", self.id, extra={"server_id": self.id})
        return DeletionWaiter(self, timeout=120.0, delay=1.0)

    def reboot(self, reboot_type: RebootType = RebootType.SOFT) -> "ServerStatusWaiter":
        """Reboot the server; the waiter resolves once it is ACTIVE again."""
        self._ensure_available()
        self._session.server_action(self.id, "reboot", {"type": reboot_type.to_wire()})
        logger.info(
            "Requested %s reboot of server %s",
            reboot_type,
            self.id,
            extra={"server_id": self.id, "reboot_type": str(reboot_type)},
        )
        return ServerStatusWaiter(self, ServerStatus.ACTIVE)

    def start(self) -> "ServerStatusWaiter":
        """Power on the server; the waiter resolves once it is ACTIVE."""
        self._ensure_available()
        self._session.server_action(self.id, "os-start")
        logger.info("Requested start of server %s", self.id, extra={"server_id": self.id})
        return ServerStatusWaiter(self, ServerStatus.ACTIVE)

    def stop(self) -> "ServerStatusWaiter":
        """Power off the server; the waiter resolves once it is SHUTOFF."""
        self._ensure_available()
        self._session.server_action(self.id, "os-stop")
        logger.info("Requested stop of server %s", self.id, extra={"server_id": self.id})
        return ServerStatusWaiter(self, ServerStatus.SHUTOFF)

    def __repr__(self) -> str:
        return f"Server(id={self.id!r}, name={self.name!r}, status={self.status})"


class ServerSummary:
    """Id and name of a server, as returned by the summary listing."""

    def __init__(self, session: ComputeSessionPort, record: ServerSummaryRecord) -> None:
        self._session = session
        self._record = record

    @property
    def id(self) -> str:
        return self._record.id

    @property
    def name(self) -> str:
        return self._record.name

    def details(self) -> Server:
        """Fetch the full server."""
        return Server.load(self._session, self.id)

    def delete(self) -> None:
        """Request deletion without waiting for it to complete."""
        self._session.delete_server(self.id)
        logger.info("Requested deletion of server %s", self.id, extra={"server_id": self.id})

    def __repr__(self) -> str:
        return f"ServerSummary(id={self.id!r}, name={self.name!r})"


class ServerStatusWaiter(Waiter[Server, Server]):
    """Waits for a server to reach a target status."""

    def __init__(
        self,
        server: Server,
        target: ServerStatus,
        timeout: Optional[float] = 600.0,
        delay: float = 1.0,
    ) -> None:
        super().__init__(server)
        self._target = target
        self._timeout = timeout
        self._delay = delay

    @property
    def target(self) -> ServerStatus:
        return self._target

    def default_timeout(self) -> Optional[float]:
        return self._timeout

    def default_delay(self) -> float:
        return self._delay

    def check(self, context: Optional[WaitContext] = None) -> PollOutcome[Server]:
        server = self._entity
        server._refresh_for(self)

        if server.status == self._target:
            logger.debug("Server %s reached state %s", server.id, self._target)
            return PollOutcome.success(server)
        if server.status == TERMINAL_FAILURE_STATUS:
            logger.debug(
                "Failed to move server %s to %s - status is %s",
                server.id,
                self._target,
                server.status,
            )
            return PollOutcome.failure(
                OperationFailedError(server.id, self._target, server.status)
            )
        logger.debug(
            "Still waiting for server %s to get to state %s, current is %s",
            server.id,
            self._target,
            server.status,
        )
        return PollOutcome.pending()


class ServerCreationWaiter(ServerStatusWaiter):
    """Waits for a newly created server to become ACTIVE."""

    def __init__(self, server: Server, timeout: Optional[float] = 1800.0, delay: float = 5.0) -> None:
        super().__init__(server, ServerStatus.ACTIVE, timeout=timeout, delay=delay)


__all__ = [
    "Server",
    "ServerCreationWaiter",
    "ServerStatusWaiter",
    "ServerSummary",
]
