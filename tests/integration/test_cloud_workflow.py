"""Integration tests driving server workflows through the Cloud facade."""

from unittest.mock import patch

import pytest

from orbit import Cloud, OperationTimedOutError, ResourceNotFoundError
from orbit.compute import ServerQuery
from orbit.domain.server.value_objects import ServerStatus
from orbit.providers.openstack import RequestsComputeSession
from tests.fixtures.fake_session import GONE


@pytest.fixture
def cloud(session):
    session.images["img-1"] = {"id": "img-1", "name": "ubuntu"}
    session.networks["net-1"] = {"id": "net-1", "name": "private"}
    return Cloud(session)


@pytest.mark.integration
class TestCloudWorkflow:
    """End-to-end server lifecycle against the in-memory session."""

    def test_create_stop_start_delete(self, cloud, session, clock):
        server = (
            cloud.new_server("web-1", "m1.small")
            .with_image("ubuntu")
            .with_network("private")
            .create()
            .wait()
        )
        assert server.status is ServerStatus.ACTIVE
        assert session.create_requests[0]["server"]["networks"] == [{"uuid": "net-1"}]

        session.status_sequences[server.id] = ["ACTIVE", "SHUTOFF"]
        assert server.stop().wait().status is ServerStatus.SHUTOFF

        session.status_sequences[server.id] = ["SHUTOFF", "ACTIVE"]
        assert server.start().wait().status is ServerStatus.ACTIVE

        session.status_sequences[server.id] = ["ACTIVE", GONE]
        server.delete().wait()

        with pytest.raises(ResourceNotFoundError):
            cloud.get_server(server.id)

    def test_listing(self, cloud, session):
        ids = session.add_servers(130)

        assert isinstance(cloud.find_servers(), ServerQuery)
        assert [s.id for s in cloud.list_servers()] == ids
        assert cloud.find_servers().with_name(f"server-{ids[5]}").one().id == ids[5]

    def test_summary_to_details(self, cloud, session):
        session.add_servers(1)

        server = cloud.list_servers()[0].details()

        assert server.flavor.original_name == "m1.small"

    def test_reboot_timeout(self, cloud, session, clock):
        session.add_servers(1)
        server = cloud.find_servers().detailed().one()
        session.status_sequences[server.id] = ["REBOOT"]

        with pytest.raises(OperationTimedOutError) as exc_info:
            server.reboot().wait(timeout=30)

        assert exc_info.value.resource_id == server.id
        assert not server.is_busy

    def test_session_is_shared(self, cloud, session):
        session.add_servers(2)

        servers = cloud.find_servers().detailed().all()

        assert all(s._session is session for s in servers)
        assert cloud.session is session


@pytest.mark.integration
class TestCloudFromConfig:
    """Test cases for building a Cloud from configuration."""

    def test_from_config_builds_http_session(self, client_config):
        cloud = Cloud.from_config(client_config)

        assert isinstance(cloud.session, RequestsComputeSession)

    def test_from_file_configures_logging(self, tmp_path):
        path = tmp_path / "orbit.yaml"
        path.write_text(
            "token: t\nendpoints:\n  compute_url: https://compute.example.com/v2.1\n"
            f"logging:\n  file: {tmp_path / 'orbit.log'}\n"
        )

        with patch("orbit.cloud.setup_logging") as setup:
            cloud = Cloud.from_file(path)

        setup.assert_called_once()
        assert setup.call_args[0][0].file == str(tmp_path / "orbit.log")
        assert isinstance(cloud.session, RequestsComputeSession)
