"""
Generic poll-until-resolved driver.

``wait_until`` repeatedly calls a poll function returning a tri-state
``PollOutcome`` and sleeps between attempts until the outcome resolves,
the time budget runs out or the caller cancels.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from orbit.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class PollStatus(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class PollOutcome(Generic[T]):
    """Result of a single poll attempt."""

    status: PollStatus
    value: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def pending(cls) -> "PollOutcome[T]":
        return cls(PollStatus.PENDING)

    @classmethod
    def success(cls, value: Optional[T] = None) -> "PollOutcome[T]":
        return cls(PollStatus.SUCCESS, value=value)

    @classmethod
    def failure(cls, error: Exception) -> "PollOutcome[T]":
        return cls(PollStatus.FAILURE, error=error)

    @property
    def is_pending(self) -> bool:
        return self.status is PollStatus.PENDING

    @property
    def is_success(self) -> bool:
        return self.status is PollStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status is PollStatus.FAILURE


class CancellationToken:
    """Thread-safe flag a caller sets to abandon a wait early."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; returns True if woken by cancellation."""
        return self._event.wait(seconds)


class WaitContext:
    """Deadline and cancellation state handed to every poll attempt."""

    def __init__(
        self, timeout: Optional[float] = None, token: Optional[CancellationToken] = None
    ) -> None:
        self.timeout = timeout
        self.token = token
        self.started = time.monotonic()
        self.deadline = None if timeout is None else self.started + timeout
        self.attempts = 0

    @property
    def cancelled(self) -> bool:
        return self.token is not None and self.token.cancelled

    def elapsed(self) -> float:
        return time.monotonic() - self.started

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def sleep(self, delay: float) -> None:
        """Sleep for ``delay``, shortened so the deadline is not overshot."""
        remaining = self.remaining()
        if remaining is not None:
            delay = min(delay, remaining)
        if delay <= 0:
            return
        if self.token is not None:
            self.token.sleep(delay)
        else:
            time.sleep(delay)


def wait_until(
    poll: Callable[[WaitContext], PollOutcome[T]],
    *,
    timeout: Optional[float],
    delay: float,
    on_timeout: Callable[[WaitContext], Exception],
    on_cancel: Callable[[WaitContext], Exception],
    cancel: Optional[CancellationToken] = None,
    description: str = "condition",
) -> Optional[T]:
    """
    Poll until the outcome resolves.

    Args:
        poll: Called once per attempt with the wait context.
        timeout: Time budget in seconds, ``None`` to wait indefinitely.
        delay: Seconds to sleep between attempts.
        on_timeout: Builds the error raised when the budget runs out.
        on_cancel: Builds the error raised when ``cancel`` fires.
        cancel: Optional cancellation token.
        description: Used in log messages.

    Returns:
        The value carried by the successful outcome.

    Raises:
        The error of a failed outcome, any exception raised by ``poll``,
        or the errors built by ``on_timeout`` and ``on_cancel``.
    """
    context = WaitContext(timeout, cancel)
    while True:
        if context.cancelled:
            logger.debug("Wait for %s cancelled after %d attempts", description, context.attempts)
            raise on_cancel(context)

        context.attempts += 1
        outcome = poll(context)
        if outcome.is_success:
            logger.debug(
                "Wait for %s succeeded after %d attempts", description, context.attempts
            )
            return outcome.value
        if outcome.is_failure:
            raise outcome.error

        if context.expired():
            logger.debug(
                "Wait for %s timed out after %.1fs", description, context.elapsed()
            )
            raise on_timeout(context)

        context.sleep(delay)
