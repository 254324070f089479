"""Unit tests for logger setup and the logging adapter."""

import json
import logging

import pytest

from orbit.config.schemas import LoggingConfig
from orbit.infrastructure.adapters import LoggingAdapter
from orbit.infrastructure.logging import get_logger, setup_logging
from orbit.providers.openstack import RequestsComputeSession


@pytest.mark.unit
class TestGetLogger:
    """Test cases for get_logger."""

    def test_module_names_are_namespaced(self):
        assert get_logger("orbit.compute.server").name == "orbit.compute.server"
        assert get_logger("session").name == "orbit.session"
        assert get_logger("orbit").name == "orbit"


@pytest.mark.unit
class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_json_output_with_extra(self, tmp_path):
        log_file = tmp_path / "orbit.log"
        setup_logging(LoggingConfig(level="DEBUG", format="json", file=str(log_file), propagate=False))

        get_logger("orbit.compute.server").info(
            "Requested stop of server %s", "srv-1", extra={"server_id": "srv-1"}
        )
        for handler in logging.getLogger("orbit").handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["event"] == "Requested stop of server srv-1"
        assert entry["server_id"] == "srv-1"
        assert entry["level"] == "info"
        assert entry["logger"] == "orbit.compute.server"

    def test_level_is_applied(self, tmp_path):
        logger = setup_logging(LoggingConfig(level="WARNING", file=str(tmp_path / "a.log")))

        assert logger.name == "orbit"
        assert logger.level == logging.WARNING

    def test_setup_replaces_previous_handler(self, tmp_path):
        root = logging.getLogger("orbit")
        before = len(root.handlers)

        setup_logging(LoggingConfig(file=str(tmp_path / "a.log")))
        setup_logging(LoggingConfig(file=str(tmp_path / "b.log")))

        assert len(root.handlers) == before + 1


@pytest.mark.unit
class TestLoggingAdapter:
    """Test cases for LoggingAdapter."""

    def test_routes_to_package_logger(self, caplog):
        adapter = LoggingAdapter("providers.test")

        with caplog.at_level(logging.DEBUG, logger="orbit"):
            adapter.debug("fetching %s", "servers")
            adapter.warning("slow response", extra={"elapsed": 3.2})

        assert adapter.name == "orbit.providers.test"
        assert [r.getMessage() for r in caplog.records] == ["fetching servers", "slow response"]
        assert caplog.records[1].elapsed == 3.2

    def test_bound_context_is_attached_to_records(self, caplog):
        adapter = LoggingAdapter("providers.test", endpoint="https://compute.example.com")

        with caplog.at_level(logging.DEBUG, logger="orbit"):
            adapter.info("listing servers")
            adapter.error("request failed", extra={"status_code": 500})

        assert caplog.records[0].endpoint == "https://compute.example.com"
        assert caplog.records[1].endpoint == "https://compute.example.com"
        assert caplog.records[1].status_code == 500

    def test_call_extra_overrides_bound_context(self, caplog):
        adapter = LoggingAdapter("providers.test", region="one")

        with caplog.at_level(logging.DEBUG, logger="orbit"):
            adapter.info("moved", extra={"region": "two"})

        assert caplog.records[0].region == "two"
        assert adapter.context == {"region": "one"}

    def test_bind_returns_new_adapter(self, caplog):
        adapter = LoggingAdapter("providers.test", endpoint="https://compute.example.com")
        bound = adapter.bind(server_id="srv-1")

        with caplog.at_level(logging.DEBUG, logger="orbit"):
            bound.info("polling")
            adapter.info("listing")

        assert bound.name == adapter.name == "orbit.providers.test"
        assert bound.context == {"endpoint": "https://compute.example.com", "server_id": "srv-1"}
        assert adapter.context == {"endpoint": "https://compute.example.com"}
        assert caplog.records[0].server_id == "srv-1"
        assert not hasattr(caplog.records[1], "server_id")

    def test_session_logs_carry_compute_endpoint(self, caplog, client_config):
        with caplog.at_level(logging.DEBUG, logger="orbit"):
            RequestsComputeSession(client_config)

        record = next(r for r in caplog.records if r.name == "orbit.providers.openstack.session")
        assert record.endpoint == client_config.endpoints.compute_url
