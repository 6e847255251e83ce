from __future__ import annotations

import concurrent.futures
import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import compute_v1
from google.oauth2 import service_account
from tenacity import retry

from .core import COMPUTE_SCOPES, OPERATION_TIMEOUT, PUBLIC_IMAGE_PROJECTS, RETRY_CONFIG
from .errors import CollaboratorError, ConfigurationError
from .logger import logger
from .schemas.compute import GCPAcknowledgment, GCPDisk, GCPServer
from .schemas.config import GoogleCredentials

# Call-time failures: rejected requests, expired or revoked credentials,
# and client-side retry deadlines
API_ERRORS = (
    google_exceptions.GoogleAPICallError,
    google_exceptions.RetryError,
    auth_exceptions.GoogleAuthError,
)


@contextmanager
def _api_errors(action: str) -> Iterator[None]:
    try:
        yield
    except API_ERRORS as e:
        raise CollaboratorError(f"{action} failed: {e}") from e


def load_credentials(credentials: GoogleCredentials) -> Any:
    """Loads service account credentials from key material or a key file."""
    try:
        if credentials.json_key:
            info = json.loads(credentials.json_key)
            sa = service_account.Credentials.from_service_account_info(
                info, scopes=COMPUTE_SCOPES
            )
        else:
            sa = service_account.Credentials.from_service_account_file(
                credentials.key_location, scopes=COMPUTE_SCOPES
            )
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Unable to load service account key: {e}") from e

    if sa.service_account_email != credentials.client_email:
        logger.warning(
            f"Key belongs to {sa.service_account_email}, "
            f"not google_client_email {credentials.client_email}"
        )
    return sa


def authenticate(credentials: GoogleCredentials) -> GoogleComputeConnection:
    sa = load_credentials(credentials)
    return GoogleComputeConnection(
        project=credentials.project,
        instances_client=compute_v1.InstancesClient(credentials=sa),
        disks_client=compute_v1.DisksClient(credentials=sa),
        service_account_email=credentials.client_email,
    )


def image_url(image: str, project: str) -> str:
    """Expands a bare image name to a global image path."""
    if "/" in image:
        return image
    for prefix, image_project in PUBLIC_IMAGE_PROJECTS.items():
        if image.startswith(f"{prefix}-"):
            return f"projects/{image_project}/global/images/{image}"
    return f"projects/{project}/global/images/{image}"


def _to_server(instance: Any, zone: str) -> GCPServer:
    m_type = instance.machine_type
    machine_type_clean = m_type.split("/")[-1] if m_type else "unknown"

    public_ip = None
    private_ip = None
    if instance.network_interfaces:
        nic = instance.network_interfaces[0]
        private_ip = nic.network_i_p or None
        if nic.access_configs:
            public_ip = nic.access_configs[0].nat_i_p or None

    return GCPServer(
        name=instance.name,
        id=str(instance.id),
        zone=zone,
        status=instance.status,
        machine_type=machine_type_clean,
        public_ip_address=public_ip,
        private_ip_address=private_ip,
    )


class GoogleComputeConnection:
    """Connection backed by google-cloud-compute."""

    def __init__(
        self,
        project: str,
        instances_client: Any,
        disks_client: Any,
        service_account_email: str | None = None,
        operation_timeout: int = OPERATION_TIMEOUT,
    ) -> None:
        self.project = project
        self.instances_client = instances_client
        self.disks_client = disks_client
        self.service_account_email = service_account_email
        self.operation_timeout = operation_timeout
        # instance name -> zone, for instances this connection has seen
        self._zones: dict[str, str] = {}

    def _wait(self, operation: Any, label: str) -> None:
        try:
            operation.result(timeout=self.operation_timeout)
        except concurrent.futures.TimeoutError as e:
            raise CollaboratorError(
                f"{label} timed out after {self.operation_timeout} seconds"
            ) from e

        if operation.error_code:
            raise CollaboratorError(
                f"{label} failed: [{operation.error_code}] {operation.error_message}"
            )

    def _locate(self, name: str) -> str | None:
        if name in self._zones:
            return self._zones[name]

        request = compute_v1.AggregatedListInstancesRequest(
            project=self.project, filter=f'name = "{name}"'
        )
        with _api_errors(f"Looking up instance {name}"):
            for zone_path, scoped in self.instances_client.aggregated_list(
                request=request
            ):
                for instance in scoped.instances or []:
                    if instance.name == name:
                        zone = zone_path.split("/")[-1]
                        self._zones[name] = zone
                        return zone
        return None

    def create_disk(self, name: str, zone: str, image: str, size_gb: int) -> GCPDisk:
        source_image = image_url(image, self.project)
        disk = compute_v1.Disk(name=name, size_gb=size_gb, source_image=source_image)

        with _api_errors(f"Creating disk {name}"):
            operation = self.disks_client.insert(
                project=self.project, zone=zone, disk_resource=disk
            )
            logger.info(f"Waiting for disk {name} to be created...")
            self._wait(operation, f"Disk {name} creation")

        return GCPDisk(
            name=name, zone=zone, size_gb=size_gb, source_image=source_image
        )

    def create_server(
        self,
        name: str,
        zone: str,
        machine_type: str,
        network: str,
        tags: list[str],
        boot_disk: GCPDisk | None = None,
        autodelete_disk: bool = True,
        metadata: dict[str, str] | None = None,
        scopes: list[str] | None = None,
    ) -> GCPServer:
        access_config = compute_v1.AccessConfig(
            name="External NAT", type_="ONE_TO_ONE_NAT"
        )
        network_interface = compute_v1.NetworkInterface(
            network=f"projects/{self.project}/global/networks/{network}",
            access_configs=[access_config],
        )

        instance = compute_v1.Instance(
            name=name,
            machine_type=f"zones/{zone}/machineTypes/{machine_type}",
            network_interfaces=[network_interface],
            tags=compute_v1.Tags(items=tags),
        )

        if boot_disk is not None:
            instance.disks = [
                compute_v1.AttachedDisk(
                    boot=True,
                    auto_delete=autodelete_disk,
                    mode="READ_WRITE",
                    device_name=boot_disk.name,
                    source=(
                        f"projects/{self.project}/zones/{boot_disk.zone}"
                        f"/disks/{boot_disk.name}"
                    ),
                )
            ]

        if metadata:
            instance.metadata = compute_v1.Metadata(
                items=[compute_v1.Items(key=k, value=v) for k, v in metadata.items()]
            )

        if scopes:
            instance.service_accounts = [
                compute_v1.ServiceAccount(
                    email=self.service_account_email or "default", scopes=scopes
                )
            ]

        with _api_errors(f"Creating instance {name}"):
            operation = self.instances_client.insert(
                project=self.project, zone=zone, instance_resource=instance
            )
            logger.info(f"Waiting for instance {name} to be created...")
            self._wait(operation, f"Instance {name} creation")
            self._zones[name] = zone
            created = self.instances_client.get(
                project=self.project, zone=zone, instance=name
            )

        return _to_server(created, zone)

    @retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
    def get_server(self, server_id: str) -> GCPServer:
        zone = self._locate(server_id)
        if zone is None:
            raise CollaboratorError(f"Instance {server_id} not found")

        with _api_errors(f"Fetching instance {server_id}"):
            instance = self.instances_client.get(
                project=self.project, zone=zone, instance=server_id
            )
        return _to_server(instance, zone)

    def delete_server(self, server_id: str) -> GCPAcknowledgment:
        zone = self._locate(server_id)
        if zone is None:
            logger.warning(f"Instance {server_id} not found, nothing to delete")
            return GCPAcknowledgment(
                server_id=server_id, accepted=True, already_absent=True
            )

        try:
            operation = self.instances_client.delete(
                project=self.project, zone=zone, instance=server_id
            )
        except google_exceptions.NotFound:
            logger.warning(f"Instance {server_id} already deleted")
            return GCPAcknowledgment(
                server_id=server_id, accepted=True, already_absent=True
            )
        except API_ERRORS as e:
            raise CollaboratorError(f"Deleting instance {server_id} failed: {e}") from e

        self._zones.pop(server_id, None)
        return GCPAcknowledgment(
            server_id=server_id,
            accepted=not operation.error_code,
            operation=operation.name,
        )
