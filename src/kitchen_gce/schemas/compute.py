from pydantic import BaseModel, Field


class GCPZone(BaseModel):
    name: str
    area: str = Field(description="Catalog area the zone belongs to, e.g. us")


class GCPDisk(BaseModel):
    name: str
    zone: str
    size_gb: int
    source_image: str | None = None
    status: str = Field(default="READY", description="e.g., CREATING, READY")


class GCPServer(BaseModel):
    name: str
    zone: str
    status: str = Field(description="e.g., PROVISIONING, STAGING, RUNNING")
    machine_type: str = Field(description="Cleaned machine type (e.g., n1-standard-1)")
    id: str | None = None
    public_ip_address: str | None = None
    private_ip_address: str | None = None

    @property
    def addresses(self) -> list[str]:
        """Assigned addresses, public first."""
        return [
            ip for ip in (self.public_ip_address, self.private_ip_address) if ip
        ]


class GCPAcknowledgment(BaseModel):
    server_id: str
    accepted: bool
    operation: str | None = None
    already_absent: bool = False
