import pytest

from kitchen_gce.schemas.compute import GCPAcknowledgment, GCPDisk, GCPServer
from kitchen_gce.schemas.config import DriverConfig

CREDENTIALS = {
    "google_client_email": "123456789012@developer.gserviceaccount.com",
    "google_key_location": "/home/user/gce/123456-privatekey.json",
    "google_project": "alpha-bravo-123",
}


class FakeConnection:
    """In-memory Connection that records every call."""

    def __init__(self, addresses=None, accept_delete=True):
        self.calls = []
        self.servers = {}
        # Addresses reported by successive get_server calls; the last repeats
        self.addresses = list(addresses or ["198.51.100.17"])
        self.accept_delete = accept_delete

    def create_disk(self, name, zone, image, size_gb):
        self.calls.append(("create_disk", name, zone, image, size_gb))
        return GCPDisk(name=name, zone=zone, size_gb=size_gb, source_image=image)

    def create_server(
        self,
        name,
        zone,
        machine_type,
        network,
        tags,
        boot_disk=None,
        autodelete_disk=True,
        metadata=None,
        scopes=None,
    ):
        self.calls.append(
            ("create_server", name, zone, machine_type, network, tags, boot_disk)
        )
        server = GCPServer(
            name=name, zone=zone, status="PROVISIONING", machine_type=machine_type
        )
        self.servers[name] = server
        return server

    def get_server(self, server_id):
        self.calls.append(("get_server", server_id))
        if len(self.addresses) > 1:
            address = self.addresses.pop(0)
        else:
            address = self.addresses[0]
        server = self.servers.get(server_id) or GCPServer(
            name=server_id,
            zone="us-central1-b",
            status="RUNNING",
            machine_type="n1-standard-1",
        )
        return server.model_copy(
            update={"status": "RUNNING", "public_ip_address": address}
        )

    def delete_server(self, server_id):
        self.calls.append(("delete_server", server_id))
        self.servers.pop(server_id, None)
        return GCPAcknowledgment(
            server_id=server_id, accepted=self.accept_delete, operation="op-123"
        )


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def config():
    return DriverConfig.from_mapping(CREDENTIALS, default_username=lambda: "kitchen")
