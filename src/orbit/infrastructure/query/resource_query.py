"""
Marker based chunked pagination.

A ``ResourceQuery`` knows how to fetch one chunk of items and how to
derive the resume marker from an item. ``ResourceIterator`` turns it into
a lazy, finite, non-restartable iterator that issues further fetches only
while the previous chunk came back full.
"""

from abc import ABC, abstractmethod
from collections import deque
from typing import ClassVar, Generic, Iterator, Optional, TypeVar

from orbit.domain.base.exceptions import ResourceNotFoundError, TooManyItemsError
from orbit.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ResourceQuery(ABC, Generic[T]):
    """Capability interface every paginated listing implements."""

    #: Chunk size used for automatic pagination of this listing kind.
    default_limit: ClassVar[int] = 100

    #: Human readable item name used in error messages.
    resource_type: ClassVar[str] = "resource"

    @abstractmethod
    def can_paginate(self) -> bool:
        """Whether automatic continuation is allowed for this query."""

    @abstractmethod
    def extract_marker(self, item: T) -> str:
        """Marker to resume the listing after ``item``."""

    @abstractmethod
    def fetch_chunk(self, limit: Optional[int], marker: Optional[str]) -> list[T]:
        """Fetch a single chunk of items."""

    def __iter__(self) -> "ResourceIterator[T]":
        return ResourceIterator(self)


class ResourceIterator(Iterator[T]):
    """
    Lazy iterator over a ``ResourceQuery``.

    No request is made until the first item is demanded. When pagination
    is enabled, chunks of ``default_limit`` items are requested, each one
    after the marker of the last item of the previous chunk. A chunk
    shorter than the requested limit ends the iteration. When pagination
    is disabled exactly one fetch is made with the query's own parameters.

    A failed fetch propagates its error and leaves the iterator exhausted.
    """

    def __init__(self, query: ResourceQuery[T]) -> None:
        self._query = query
        self._buffer: deque = deque()
        self._marker: Optional[str] = None
        self._can_paginate: Optional[bool] = None
        self._exhausted = False
        self._fetch_count = 0

    @property
    def marker(self) -> Optional[str]:
        """Marker of the last item fetched so far."""
        return self._marker

    @property
    def fetch_count(self) -> int:
        """Number of chunk fetches issued."""
        return self._fetch_count

    def __iter__(self) -> "ResourceIterator[T]":
        return self

    def __next__(self) -> T:
        if not self._buffer and not self._exhausted:
            self._fetch_next_chunk()
        if not self._buffer:
            raise StopIteration
        return self._buffer.popleft()

    def _fetch_next_chunk(self) -> None:
        if self._can_paginate is None:
            self._can_paginate = self._query.can_paginate()

        if self._can_paginate:
            limit: Optional[int] = self._query.default_limit
            marker = self._marker
        else:
            limit, marker = None, None

        logger.debug(
            "Fetching %s chunk with limit %s after marker %s",
            self._query.resource_type,
            limit,
            marker,
        )
        self._fetch_count += 1
        try:
            items = self._query.fetch_chunk(limit, marker)
        except Exception:
            self._exhausted = True
            raise

        if not self._can_paginate or limit is None or len(items) < limit:
            self._exhausted = True

        if items:
            self._marker = self._query.extract_marker(items[-1])
            self._buffer.extend(items)
        else:
            self._exhausted = True

    def all(self) -> list[T]:
        """
        Drain the iterator into a list.

        The first error encountered propagates; items collected before it
        are discarded.
        """
        return list(self)

    def one(self) -> T:
        """
        Return exactly one item.

        Raises:
            ResourceNotFoundError: If the iterator yields nothing.
            TooManyItemsError: If it yields more than one item.
        """
        try:
            result = next(self)
        except StopIteration:
            raise ResourceNotFoundError(
                self._query.resource_type,
                message=f"Query returned no {self._query.resource_type}",
            ) from None

        try:
            next(self)
        except StopIteration:
            return result
        raise TooManyItemsError(self._query.resource_type)
