"""
The subset of the Compute Engine API the driver relies on.

`clients.authenticate` is the production implementation; tests provide
their own objects satisfying these protocols.
"""

from collections.abc import Callable
from typing import Protocol

from .schemas.compute import GCPAcknowledgment, GCPDisk, GCPServer
from .schemas.config import GoogleCredentials


class Connection(Protocol):
    def create_disk(
        self, name: str, zone: str, image: str, size_gb: int
    ) -> GCPDisk: ...

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
    ) -> GCPServer: ...

    def get_server(self, server_id: str) -> GCPServer: ...

    def delete_server(self, server_id: str) -> GCPAcknowledgment: ...


Authenticator = Callable[[GoogleCredentials], Connection]
