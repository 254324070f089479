"""Polling waiters for eventually consistent state transitions."""

from .polling import CancellationToken, PollOutcome, PollStatus, WaitContext, wait_until
from .waiter import DeletionWaiter, Waiter

__all__: list[str] = [
    "CancellationToken",
    "DeletionWaiter",
    "PollOutcome",
    "PollStatus",
    "WaitContext",
    "Waiter",
    "wait_until",
]
