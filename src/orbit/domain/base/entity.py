"""Base class for entities backed by a refreshable server-side snapshot."""

import threading
import weakref
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from orbit.domain.base.exceptions import ResourceBusyError


class RefreshableEntity(ABC):
    """
    Entity with an immutable id and a snapshot replaced wholesale on refresh.

    While a waiter holds the entity, only that waiter may refresh it or
    start another operation on it. The hold is released when the waiter
    resolves, is closed, or is garbage collected.
    """

    resource_type: ClassVar[str] = "resource"

    def __init__(self) -> None:
        self._snapshot_lock = threading.Lock()
        self._holder: Optional[weakref.ReferenceType] = None

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier."""

    @abstractmethod
    def _fetch_snapshot(self) -> Any:
        """Fetch a fresh snapshot from the server."""

    @abstractmethod
    def _replace_snapshot(self, snapshot: Any) -> None:
        """Install ``snapshot`` as the current view."""

    @property
    def is_busy(self) -> bool:
        """Whether an unresolved waiter currently holds this entity."""
        return self._current_holder() is not None

    def refresh(self) -> None:
        """
        Re-fetch the entity and replace its snapshot.

        Raises:
            ResourceNotFoundError: If the entity no longer exists.
            ResourceBusyError: If a waiter currently holds the entity.
        """
        self._ensure_available()
        self._refresh()

    def _refresh(self) -> None:
        snapshot = self._fetch_snapshot()
        with self._snapshot_lock:
            self._replace_snapshot(snapshot)

    def _current_holder(self) -> Any:
        if self._holder is None:
            return None
        holder = self._holder()
        if holder is None:
            self._holder = None
        return holder

    def _ensure_available(self) -> None:
        if self._current_holder() is not None:
            raise ResourceBusyError(self.id, self.resource_type)

    def _bind(self, holder: Any) -> None:
        with self._snapshot_lock:
            current = self._current_holder()
            if current is not None and current is not holder:
                raise ResourceBusyError(self.id, self.resource_type)
            self._holder = weakref.ref(holder)

    def _unbind(self, holder: Any) -> None:
        with self._snapshot_lock:
            if self._current_holder() is holder:
                self._holder = None

    def _refresh_for(self, holder: Any) -> None:
        if self._current_holder() is not holder:
            raise ResourceBusyError(self.id, self.resource_type)
        self._refresh()
