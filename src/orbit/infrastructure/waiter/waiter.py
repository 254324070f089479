"""Waiter base class and the deletion waiter."""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from orbit.domain.base.entity import RefreshableEntity
from orbit.domain.base.exceptions import (
    OperationCancelledError,
    OperationTimedOutError,
    ResourceNotFoundError,
    ValidationError,
)
from orbit.infrastructure.logging.logger import get_logger
from orbit.infrastructure.waiter.polling import (
    CancellationToken,
    PollOutcome,
    WaitContext,
    wait_until,
)

logger = get_logger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=RefreshableEntity)


class Waiter(ABC, Generic[T, E]):
    """
    Polls a bound entity until it reaches a target condition.

    The waiter holds the entity exclusively from construction until it
    resolves (success, failure, timeout or cancellation) or is closed.
    Driving ``poll()`` by hand releases the entity as soon as an attempt
    reports success or failure.
    """

    def __init__(self, entity: E) -> None:
        self._entity = entity
        self._resolved = False
        self._outcome: Optional[PollOutcome[T]] = None
        entity._bind(self)

    @property
    @abstractmethod
    def target(self) -> Any:
        """Condition the waiter is waiting for, used in errors and logs."""

    @abstractmethod
    def default_timeout(self) -> Optional[float]:
        """Seconds to wait when the caller gives no timeout; None waits forever."""

    @abstractmethod
    def default_delay(self) -> float:
        """Seconds between poll attempts."""

    @abstractmethod
    def check(self, context: Optional[WaitContext] = None) -> PollOutcome[T]:
        """Refresh the entity once and evaluate the target condition."""

    def poll(self, context: Optional[WaitContext] = None) -> PollOutcome[T]:
        """
        Make one attempt.

        A resolved waiter returns its final outcome without touching the
        entity again.

        Raises:
            OperationCancelledError: If the context was cancelled.
            ValidationError: If the waiter was closed before resolving.
        """
        if self._resolved:
            return self._final_outcome()
        self._check_cancelled(context)
        outcome = self.check(context)
        self._finish(outcome)
        return outcome

    @property
    def resolved(self) -> bool:
        return self._resolved

    def current_state(self) -> E:
        """The entity as of its latest refresh."""
        return self._entity

    def timeout_error(self, timeout: Optional[float] = None) -> Exception:
        return OperationTimedOutError(
            self._entity.id, self.target, timeout, self._entity.resource_type
        )

    def cancel_error(self) -> Exception:
        return OperationCancelledError(self._entity.id, self.target, self._entity.resource_type)

    def wait(
        self,
        timeout: Optional[float] = None,
        delay: Optional[float] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[T]:
        """
        Block until the waiter resolves.

        Args:
            timeout: Overrides ``default_timeout()``.
            delay: Overrides ``default_delay()``.
            cancel: Token the caller may use to abandon the wait.

        Returns:
            The success value of the waiter.

        Raises:
            OperationFailedError: The entity reached a terminal failure state.
            OperationTimedOutError: The time budget ran out.
            OperationCancelledError: ``cancel`` fired.
            ValidationError: The waiter was closed before resolving.
            Any error raised while refreshing the entity.

        Calling it again on a resolved waiter returns the same value, or
        raises the same failure, without polling.
        """
        if self._resolved:
            outcome = self._final_outcome()
            if outcome.is_failure:
                raise outcome.error
            return outcome.value

        effective_timeout = timeout if timeout is not None else self.default_timeout()
        effective_delay = delay if delay is not None else self.default_delay()

        logger.debug(
            "Waiting for %s %s to reach %s (timeout %s, delay %s)",
            self._entity.resource_type,
            self._entity.id,
            self.target,
            effective_timeout,
            effective_delay,
        )
        try:
            return wait_until(
                self.poll,
                timeout=effective_timeout,
                delay=effective_delay,
                cancel=cancel,
                on_timeout=lambda context: self.timeout_error(context.timeout),
                on_cancel=lambda context: self.cancel_error(),
                description=f"{self._entity.resource_type} {self._entity.id}",
            )
        finally:
            self.close()

    def close(self) -> None:
        """Release the entity without waiting further."""
        self._resolved = True
        self._entity._unbind(self)

    def __enter__(self) -> "Waiter[T, E]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _finish(self, outcome: PollOutcome[T]) -> None:
        if outcome.is_pending:
            return
        self._outcome = outcome
        self.close()

    def _final_outcome(self) -> PollOutcome[T]:
        if self._outcome is None:
            raise ValidationError(
                f"Waiter for {self._entity.resource_type} {self._entity.id} was closed "
                f"before reaching {self.target}"
            )
        return self._outcome

    def _check_cancelled(self, context: Optional[WaitContext]) -> None:
        if context is not None and context.cancelled:
            self.close()
            raise self.cancel_error()


class DeletionWaiter(Waiter[None, E]):
    """Waits until the entity can no longer be resolved by id."""

    def __init__(self, entity: E, timeout: Optional[float] = 120.0, delay: float = 1.0) -> None:
        super().__init__(entity)
        self._timeout = timeout
        self._delay = delay

    @property
    def target(self) -> str:
        return "DELETED"

    def default_timeout(self) -> Optional[float]:
        return self._timeout

    def default_delay(self) -> float:
        return self._delay

    def check(self, context: Optional[WaitContext] = None) -> PollOutcome[None]:
        try:
            self._entity._refresh_for(self)
        except ResourceNotFoundError:
            logger.debug(
                "%s %s was deleted", self._entity.resource_type.capitalize(), self._entity.id
            )
            return PollOutcome.success()
        logger.debug(
            "Still waiting for %s %s to be deleted",
            self._entity.resource_type,
            self._entity.id,
        )
        return PollOutcome.pending()
