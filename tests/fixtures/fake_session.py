"""In-memory compute session for testing queries, entities and waiters."""

from typing import Any, Optional

from orbit.domain.base.exceptions import ResourceNotFoundError, TooManyItemsError
from orbit.domain.base.ports import ComputeSessionPort
from orbit.infrastructure.query.filter import LIMIT, MARKER, Query

# Status sequence entry meaning "the server no longer exists".
GONE = "GONE"

DEFAULT_FLAVOR = {
    "id": "flavor-small",
    "name": "m1.small",
    "vcpus": 2,
    "ram": 2048,
    "disk": 20,
    "OS-FLV-EXT-DATA:ephemeral": 5,
    "swap": "",
    "extra_specs": {"hw:cpu_policy": "shared"},
}


def make_server(
    server_id: str,
    name: Optional[str] = None,
    status: str = "ACTIVE",
    flavor_id: str = "flavor-small",
    **extra: Any,
) -> dict[str, Any]:
    """Build a detailed server record the way the compute API returns it."""
    record = {
        "id": server_id,
        "name": name or f"server-{server_id}",
        "status": status,
        "OS-EXT-STS:power_state": 1 if status == "ACTIVE" else 0,
        "OS-EXT-AZ:availability_zone": "nova",
        "accessIPv4": "",
        "accessIPv6": "",
        "addresses": {},
        "config_drive": "",
        "created": "2024-03-01T10:00:00Z",
        "updated": "2024-03-01T10:05:00Z",
        "flavor": {"id": flavor_id, "links": []},
        "image": "",
        "key_name": None,
        "metadata": {},
    }
    record.update(extra)
    return record


class FakeComputeSession(ComputeSessionPort):
    """
    Compute session backed by dictionaries.

    Servers are listed in insertion order. ``status_sequences`` scripts the
    status reported by successive ``get_server`` calls; the last entry
    sticks and ``GONE`` makes the server disappear.
    """

    def __init__(self) -> None:
        self.servers: dict[str, dict[str, Any]] = {}
        self.status_sequences: dict[str, list[str]] = {}
        self.flavors: dict[str, dict[str, Any]] = {DEFAULT_FLAVOR["id"]: DEFAULT_FLAVOR}
        self.images: dict[str, dict[str, Any]] = {}
        self.keypairs: dict[str, dict[str, Any]] = {}
        self.networks: dict[str, dict[str, Any]] = {}
        self.ports: dict[str, dict[str, Any]] = {}
        self.created_status_sequence: list[str] = ["BUILD", "ACTIVE"]
        self.list_errors: dict[int, Exception] = {}

        self.calls: list[tuple] = []
        self.list_queries: list[Query] = []
        self.create_requests: list[dict[str, Any]] = []
        self._counter = 0

    # Helpers for tests

    def add_servers(self, count: int, prefix: str = "srv") -> list[str]:
        ids = []
        for _ in range(count):
            self._counter += 1
            server_id = f"{prefix}-{self._counter:04d}"
            self.servers[server_id] = make_server(server_id)
            ids.append(server_id)
        return ids

    def call_count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    def _lookup(self, store: dict[str, dict[str, Any]], kind: str, id_or_name: str) -> dict[str, Any]:
        if id_or_name in store:
            return store[id_or_name]
        matches = [item for item in store.values() if item.get("name") == id_or_name]
        if not matches:
            raise ResourceNotFoundError(kind, id_or_name)
        if len(matches) > 1:
            raise TooManyItemsError(kind)
        return matches[0]

    def _listing(self, query: Query) -> list[dict[str, Any]]:
        self.list_queries.append(query)
        fetch_number = len(self.list_queries)
        if fetch_number in self.list_errors:
            raise self.list_errors[fetch_number]

        records = list(self.servers.values())
        if "name" in query:
            records = [r for r in records if r["name"] == query.get("name")]
        if "status" in query:
            records = [r for r in records if r["status"] == query.get("status")]

        marker = query.get(MARKER)
        if marker is not None:
            ids = [r["id"] for r in records]
            records = records[ids.index(marker) + 1:]
        limit = query.get(LIMIT)
        if limit is not None:
            records = records[: int(limit)]
        return records

    # ComputeSessionPort

    def get_server(self, server_id: str) -> dict[str, Any]:
        self.calls.append(("get_server", server_id))
        if server_id not in self.servers:
            raise ResourceNotFoundError("server", server_id)

        sequence = self.status_sequences.get(server_id)
        if sequence:
            status = sequence.pop(0) if len(sequence) > 1 else sequence[0]
            if status == GONE:
                del self.servers[server_id]
                raise ResourceNotFoundError("server", server_id)
            self.servers[server_id] = dict(self.servers[server_id], status=status)
        return dict(self.servers[server_id])

    def list_servers(self, query: Query) -> list[dict[str, Any]]:
        self.calls.append(("list_servers", query))
        return [{"id": r["id"], "name": r["name"], "links": []} for r in self._listing(query)]

    def list_servers_detail(self, query: Query) -> list[dict[str, Any]]:
        self.calls.append(("list_servers_detail", query))
        return [dict(r) for r in self._listing(query)]

    def create_server(self, request: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("create_server", request))
        self.create_requests.append(request)
        body = request["server"]
        self._counter += 1
        server_id = f"new-{self._counter:04d}"
        self.servers[server_id] = make_server(
            server_id,
            name=body["name"],
            status=self.created_status_sequence[0],
            flavor_id=body["flavorRef"],
            metadata=dict(body.get("metadata", {})),
            key_name=body.get("key_name"),
            image={"id": body["imageRef"]} if "imageRef" in body else "",
        )
        self.status_sequences[server_id] = list(self.created_status_sequence)
        return {"id": server_id, "links": []}

    def delete_server(self, server_id: str) -> None:
        self.calls.append(("delete_server", server_id))
        if server_id not in self.servers:
            raise ResourceNotFoundError("server", server_id)

    def server_action(
        self, server_id: str, action: str, args: Optional[dict[str, Any]] = None
    ) -> None:
        self.calls.append(("server_action", server_id, action, args))
        if server_id not in self.servers:
            raise ResourceNotFoundError("server", server_id)

    def get_flavor(self, id_or_name: str) -> dict[str, Any]:
        self.calls.append(("get_flavor", id_or_name))
        return self._lookup(self.flavors, "flavor", id_or_name)

    def get_image(self, id_or_name: str) -> dict[str, Any]:
        self.calls.append(("get_image", id_or_name))
        return self._lookup(self.images, "image", id_or_name)

    def get_keypair(self, name: str) -> dict[str, Any]:
        self.calls.append(("get_keypair", name))
        if name not in self.keypairs:
            raise ResourceNotFoundError("key pair", name)
        return self.keypairs[name]

    def get_network(self, id_or_name: str) -> dict[str, Any]:
        self.calls.append(("get_network", id_or_name))
        return self._lookup(self.networks, "network", id_or_name)

    def get_port(self, id_or_name: str) -> dict[str, Any]:
        self.calls.append(("get_port", id_or_name))
        return self._lookup(self.ports, "port", id_or_name)


class FakeClock:
    """Stands in for the ``time`` module inside the polling driver."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
