"""Global test configuration and fixtures."""

import logging
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from orbit.config.schemas import ClientConfig  # noqa: E402
from tests.fixtures.fake_session import FakeClock, FakeComputeSession  # noqa: E402


@pytest.fixture
def session() -> FakeComputeSession:
    """In-memory compute session with the default flavor registered."""
    return FakeComputeSession()


@pytest.fixture
def clock():
    """Patch the polling clock so waits complete instantly."""
    fake = FakeClock()
    with patch("orbit.infrastructure.waiter.polling.time", fake):
        yield fake


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        token="test-token",
        endpoints={
            "compute_url": "https://compute.example.com/v2.1/",
            "network_url": "https://network.example.com/v2.0",
            "image_url": "https://image.example.com/v2",
        },
    )


@pytest.fixture(autouse=True)
def reset_orbit_logger():
    """Undo handler changes made by setup_logging between tests."""
    logger = logging.getLogger("orbit")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate
