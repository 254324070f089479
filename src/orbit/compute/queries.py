"""Server list queries."""

from ipaddress import IPv4Address, IPv6Address
from typing import Optional, Union

from orbit.compute.server import Server, ServerSummary
from orbit.domain.base.ports import ComputeSessionPort
from orbit.domain.server.value_objects import ServerSortKey, ServerStatus, ServerSummaryRecord
from orbit.infrastructure.logging.logger import get_logger
from orbit.infrastructure.query import Query, ResourceIterator, ResourceQuery, Sort, SortDirection
from orbit.infrastructure.query.filter import MARKER, ParamValue

logger = get_logger(__name__)


class ServerQuery(ResourceQuery[ServerSummary]):
    """
    A query to the server list.

    Every filter method returns a new query; the original is left as is.
    Setting an explicit marker or limit disables automatic pagination.
    No request is made until the query is iterated.
    """

    default_limit = 100
    resource_type = "server"

    def __init__(
        self,
        session: ComputeSessionPort,
        query: Optional[Query] = None,
        can_paginate: bool = True,
    ) -> None:
        self._session = session
        self._query = query or Query()
        self._can_paginate = can_paginate

    @property
    def session(self) -> ComputeSessionPort:
        return self._session

    @property
    def query(self) -> Query:
        return self._query

    def _with(self, name: str, value: ParamValue, disables_pagination: bool = False) -> "ServerQuery":
        return ServerQuery(
            self._session,
            self._query.with_param(name, value),
            self._can_paginate and not disables_pagination,
        )

    def with_marker(self, marker: str) -> "ServerQuery":
        """Start listing after this marker. Disables automatic pagination."""
        return self._with(MARKER, marker, disables_pagination=True)

    def with_limit(self, limit: int) -> "ServerQuery":
        """Return at most this many servers. Disables automatic pagination."""
        return ServerQuery(
            self._session,
            self._query.with_marker_and_limit(limit, None),
            can_paginate=False,
        )

    def sort_by(
        self,
        key: Union[ServerSortKey, Sort],
        direction: SortDirection = SortDirection.ASC,
    ) -> "ServerQuery":
        sort = key if isinstance(key, Sort) else Sort(key, direction)
        return ServerQuery(self._session, self._query.with_sort(sort), self._can_paginate)

    def with_access_ip_v4(self, value: Union[str, IPv4Address]) -> "ServerQuery":
        return self._with("access_ip_v4", IPv4Address(value))

    def with_access_ip_v6(self, value: Union[str, IPv6Address]) -> "ServerQuery":
        return self._with("access_ip_v6", IPv6Address(value))

    def with_availability_zone(self, value: str) -> "ServerQuery":
        return self._with("availability_zone", value)

    def with_flavor(self, value: str) -> "ServerQuery":
        return self._with("flavor", value)

    def with_hostname(self, value: str) -> "ServerQuery":
        return self._with("hostname", value)

    def with_image(self, value: str) -> "ServerQuery":
        return self._with("image", value)

    def with_ip_v4(self, value: Union[str, IPv4Address]) -> "ServerQuery":
        return self._with("ip", IPv4Address(value))

    def with_ip_v6(self, value: Union[str, IPv6Address]) -> "ServerQuery":
        return self._with("ip6", IPv6Address(value))

    def with_name(self, value: str) -> "ServerQuery":
        """Filter by name; the server treats it as a regular expression."""
        return self._with("name", value)

    def with_project(self, value: str) -> "ServerQuery":
        return self._with("project_id", value)

    def with_status(self, value: ServerStatus) -> "ServerQuery":
        return self._with("status", value)

    def with_user(self, value: str) -> "ServerQuery":
        return self._with("user_id", value)

    def detailed(self) -> "DetailedServerQuery":
        """Same query, yielding full ``Server`` objects."""
        return DetailedServerQuery(self)

    def can_paginate(self) -> bool:
        return self._can_paginate

    def extract_marker(self, item: ServerSummary) -> str:
        return item.id

    def fetch_chunk(self, limit: Optional[int], marker: Optional[str]) -> list[ServerSummary]:
        query = self._query.with_marker_and_limit(limit, marker)
        return [
            ServerSummary(self._session, ServerSummaryRecord.model_validate(item))
            for item in self._session.list_servers(query)
        ]

    def __iter__(self) -> ResourceIterator[ServerSummary]:
        logger.debug("Fetching servers with %s", self._query)
        return ResourceIterator(self)

    def all(self) -> list[ServerSummary]:
        """Execute the query and return every result."""
        return iter(self).all()

    def one(self) -> ServerSummary:
        """
        Return exactly one result.

        Raises:
            ResourceNotFoundError: If the query matches nothing.
            TooManyItemsError: If the query matches more than one server.
        """
        logger.debug("Fetching one server with %s", self._query)
        return _probe_one(self).one()

    def __repr__(self) -> str:
        return f"ServerQuery({self._query!r}, can_paginate={self._can_paginate})"


class DetailedServerQuery(ResourceQuery[Server]):
    """A server list query yielding full ``Server`` objects."""

    default_limit = 50
    resource_type = "server"

    def __init__(self, inner: ServerQuery) -> None:
        self._inner = inner

    @property
    def query(self) -> Query:
        return self._inner.query

    def summary(self) -> ServerQuery:
        """Same query, yielding ``ServerSummary`` objects."""
        return self._inner

    def can_paginate(self) -> bool:
        return self._inner.can_paginate()

    def extract_marker(self, item: Server) -> str:
        return item.id

    def fetch_chunk(self, limit: Optional[int], marker: Optional[str]) -> list[Server]:
        session = self._inner.session
        query = self._inner.query.with_marker_and_limit(limit, marker)
        return [Server.new(session, item) for item in session.list_servers_detail(query)]

    def __iter__(self) -> ResourceIterator[Server]:
        logger.debug("Fetching server details with %s", self._inner.query)
        return ResourceIterator(self)

    def all(self) -> list[Server]:
        return iter(self).all()

    def one(self) -> Server:
        logger.debug("Fetching one detailed server with %s", self._inner.query)
        return _probe_one(self).one()

    def __repr__(self) -> str:
        return f"DetailedServerQuery({self._inner.query!r})"


def _probe_one(query: Union[ServerQuery, DetailedServerQuery]) -> ResourceIterator:
    """
    Iterator for a cardinality check.

    A paginating query gets ``limit=2`` and a single fetch: two items are
    enough to tell "one" from "more than one". A query with a caller set
    marker or limit is used as is.
    """
    if not query.can_paginate():
        return ResourceIterator(query)
    if isinstance(query, DetailedServerQuery):
        return ResourceIterator(query.summary().with_limit(2).detailed())
    return ResourceIterator(query.with_limit(2))


__all__ = ["DetailedServerQuery", "ServerQuery"]
