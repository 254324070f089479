"""Unit tests for the generic polling driver."""

from unittest.mock import Mock

import pytest

from orbit.infrastructure.waiter import CancellationToken, PollOutcome, WaitContext, wait_until


class Expired(Exception):
    pass


class Cancelled(Exception):
    pass


def run(poll, timeout=10.0, delay=1.0, cancel=None):
    return wait_until(
        poll,
        timeout=timeout,
        delay=delay,
        cancel=cancel,
        on_timeout=lambda context: Expired(context.attempts),
        on_cancel=lambda context: Cancelled(context.attempts),
    )


@pytest.mark.unit
class TestPollOutcome:
    """Test cases for PollOutcome."""

    def test_states(self):
        assert PollOutcome.pending().is_pending
        assert PollOutcome.success(42).is_success
        assert PollOutcome.success(42).value == 42

        error = ValueError("boom")
        outcome = PollOutcome.failure(error)
        assert outcome.is_failure
        assert outcome.error is error


@pytest.mark.unit
class TestWaitUntil:
    """Test cases for wait_until."""

    def test_immediate_success_does_not_sleep(self, clock):
        poll = Mock(return_value=PollOutcome.success("done"))

        assert run(poll) == "done"
        assert poll.call_count == 1
        assert clock.sleeps == []

    def test_success_after_pending_attempts(self, clock):
        poll = Mock(
            side_effect=[PollOutcome.pending(), PollOutcome.pending(), PollOutcome.success("ok")]
        )

        assert run(poll, delay=2.0) == "ok"
        assert poll.call_count == 3
        assert clock.sleeps == [2.0, 2.0]

    def test_poll_receives_context(self, clock):
        poll = Mock(return_value=PollOutcome.success())

        run(poll)

        context = poll.call_args[0][0]
        assert isinstance(context, WaitContext)
        assert context.attempts == 1

    def test_failure_raises_error(self, clock):
        error = RuntimeError("terminal")
        poll = Mock(side_effect=[PollOutcome.pending(), PollOutcome.failure(error)])

        with pytest.raises(RuntimeError) as exc_info:
            run(poll)

        assert exc_info.value is error

    def test_poll_exception_propagates_without_retry(self, clock):
        poll = Mock(side_effect=ConnectionError("down"))

        with pytest.raises(ConnectionError):
            run(poll)
        assert poll.call_count == 1

    def test_timeout_shortens_final_sleep(self, clock):
        poll = Mock(return_value=PollOutcome.pending())

        with pytest.raises(Expired) as exc_info:
            run(poll, timeout=10.0, delay=3.0)

        assert clock.sleeps == [3.0, 3.0, 3.0, 1.0]
        assert poll.call_count == 5
        assert exc_info.value.args == (5,)

    def test_zero_timeout_polls_once(self, clock):
        poll = Mock(return_value=PollOutcome.pending())

        with pytest.raises(Expired):
            run(poll, timeout=0.0)
        assert poll.call_count == 1

    def test_no_timeout_waits_until_resolved(self, clock):
        outcomes = [PollOutcome.pending()] * 50 + [PollOutcome.success(True)]
        poll = Mock(side_effect=outcomes)

        assert run(poll, timeout=None, delay=60.0) is True
        assert len(clock.sleeps) == 50

    def test_cancelled_before_start(self):
        token = CancellationToken()
        token.cancel()
        poll = Mock(return_value=PollOutcome.pending())

        with pytest.raises(Cancelled):
            run(poll, cancel=token)
        poll.assert_not_called()

    def test_cancel_during_wait(self):
        token = CancellationToken()

        def poll(context):
            if context.attempts == 1:
                token.cancel()
            return PollOutcome.pending()

        with pytest.raises(Cancelled) as exc_info:
            run(poll, timeout=None, delay=30.0, cancel=token)

        assert exc_info.value.args == (1,)


@pytest.mark.unit
class TestCancellationToken:
    """Test cases for CancellationToken."""

    def test_cancel(self):
        token = CancellationToken()
        assert not token.cancelled

        token.cancel()

        assert token.cancelled
        assert token.sleep(30.0) is True
