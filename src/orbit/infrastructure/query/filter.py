"""Ordered request filter used by list queries."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

from orbit.domain.base.enum_model import BaseEnumModel
from orbit.domain.base.exceptions import ValidationError

K = TypeVar("K", bound=BaseEnumModel)

ParamValue = Union[str, int, Enum]

MARKER = "marker"
LIMIT = "limit"
SORT_KEY = "sort_key"
SORT_DIR = "sort_dir"


class SortDirection(BaseEnumModel):
    """Sorting direction."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Sort(Generic[K]):
    """Sort key and direction pair."""

    key: K
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def asc(cls, key: K) -> "Sort[K]":
        return cls(key, SortDirection.ASC)

    @classmethod
    def desc(cls, key: K) -> "Sort[K]":
        return cls(key, SortDirection.DESC)


def _render(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Query:
    """
    Ordered mapping of request parameter name to rendered value.

    Instances are never mutated after construction: every ``with_*`` call
    returns a new query, so a query handed to an iterator cannot change
    underneath it.
    """

    def __init__(self, params: Optional[dict[str, str]] = None) -> None:
        self._params: dict[str, str] = dict(params or {})

    def with_param(self, name: str, value: ParamValue) -> "Query":
        """Return a copy with ``name`` set to ``value``.

        Setting an existing name replaces its value in place and keeps
        the original position.
        """
        if value is None:
            raise ValidationError(f"Query parameter {name} cannot be None")
        params = dict(self._params)
        params[name] = _render(value)
        return Query(params)

    def with_sort(self, sort: Sort) -> "Query":
        return self.with_param(SORT_KEY, sort.key).with_param(SORT_DIR, sort.direction)

    def with_marker_and_limit(self, limit: Optional[int], marker: Optional[str]) -> "Query":
        """Return a copy carrying pagination parameters for one chunk fetch."""
        query = self
        if limit is not None:
            if limit <= 0:
                raise ValidationError(f"Limit must be a positive integer, got {limit}")
            query = query.with_param(LIMIT, limit)
        if marker is not None:
            query = query.with_param(MARKER, marker)
        return query

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._params.get(name, default)

    def to_params(self) -> list[tuple[str, str]]:
        """Parameters as ordered pairs, ready to be used as a query string."""
        return list(self._params.items())

    def __contains__(self, name: object) -> bool:
        return name in self._params

    def __len__(self) -> int:
        return len(self._params)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return self.to_params() == other.to_params()

    def __repr__(self) -> str:
        return f"Query({self.to_params()!r})"
