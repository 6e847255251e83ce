import re

import pytest
from conftest import FakeConnection

from kitchen_gce.errors import CollaboratorError, ProvisioningTimeoutError
from kitchen_gce.provisioners.readiness import tcp_probe, wait_for_up_instance
from kitchen_gce.schemas.compute import GCPServer
from kitchen_gce.schemas.state import InstanceState

IPV4_RE = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")


@pytest.fixture
def server():
    return GCPServer(
        name="ci-test-instance",
        zone="us-central1-b",
        status="PROVISIONING",
        machine_type="n1-standard-1",
    )


def no_sleep(_seconds):
    pass


def test_sets_the_hostname(server):
    state = InstanceState()
    wait_for_up_instance(
        FakeConnection(), server, state, sleep=no_sleep, probe=lambda h, p: True
    )
    assert IPV4_RE.match(state.hostname)
    assert state.hostname == "198.51.100.17"


def test_waits_for_an_address(server):
    conn = FakeConnection(addresses=[None, None, "203.0.113.5"])
    state = InstanceState()
    sleeps = []

    wait_for_up_instance(
        conn, server, state, delay=2, sleep=sleeps.append, probe=lambda h, p: True
    )

    assert state.hostname == "203.0.113.5"
    assert sleeps == [2, 2]
    assert [c[0] for c in conn.calls] == ["get_server"] * 3


def test_waits_for_the_service(server):
    answers = iter([False, False, True])
    probed = []

    def probe(host, port):
        probed.append((host, port))
        return next(answers)

    state = InstanceState()
    wait_for_up_instance(
        FakeConnection(), server, state, sleep=no_sleep, probe=probe, port=2222
    )

    assert probed == [("198.51.100.17", 2222)] * 3
    assert state.hostname == "198.51.100.17"


def test_rejects_malformed_address(server):
    state = InstanceState()
    with pytest.raises(ProvisioningTimeoutError):
        wait_for_up_instance(
            FakeConnection(addresses=["not-an-ip"]),
            server,
            state,
            attempts=3,
            sleep=no_sleep,
            probe=lambda h, p: True,
        )
    assert state.hostname is None


def test_timeout_writes_no_state(server):
    conn = FakeConnection(addresses=[None])
    state = InstanceState()

    with pytest.raises(ProvisioningTimeoutError, match="after 4 attempts"):
        wait_for_up_instance(
            conn, server, state, attempts=4, sleep=no_sleep, probe=lambda h, p: True
        )

    assert state.hostname is None
    assert len(conn.calls) == 4


def test_collaborator_errors_are_not_retried(server, mocker):
    conn = mocker.Mock()
    conn.get_server.side_effect = CollaboratorError("quota exceeded")

    with pytest.raises(CollaboratorError, match="quota exceeded"):
        wait_for_up_instance(conn, server, InstanceState(), sleep=no_sleep)

    conn.get_server.assert_called_once_with("ci-test-instance")


def test_tcp_probe_refused(mocker):
    mocker.patch(
        "kitchen_gce.provisioners.readiness.socket.create_connection",
        side_effect=ConnectionRefusedError,
    )
    assert tcp_probe("198.51.100.17", 22) is False


def test_tcp_probe_accepted(mocker):
    create = mocker.patch(
        "kitchen_gce.provisioners.readiness.socket.create_connection"
    )
    assert tcp_probe("198.51.100.17", 22) is True
    create.assert_called_once_with(("198.51.100.17", 22), timeout=5.0)
