import getpass
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core import (
    DEFAULT_DISK_SIZE_GB,
    DEFAULT_MACHINE_TYPE,
    DEFAULT_NETWORK,
    DEFAULT_READY_ATTEMPTS,
    DEFAULT_READY_DELAY,
    DEFAULT_SSH_PORT,
    MAX_NAME_LENGTH,
)
from ..errors import ConfigurationError


class Area(str, Enum):
    US = "us"
    EUROPE = "europe"
    ANY = "any"


class GoogleCredentials(BaseModel):
    """The three settings needed to open a Compute Engine session."""

    model_config = ConfigDict(frozen=True)

    client_email: str
    project: str
    key_location: str | None = None
    json_key: str | None = None


class DriverConfig(BaseModel):
    model_config = ConfigDict(
        frozen=True, extra="forbid", use_enum_values=True, validate_default=True
    )

    area: Area = Area.US
    zone_name: str | None = None
    inst_name: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    machine_type: str = DEFAULT_MACHINE_TYPE
    network: str = DEFAULT_NETWORK
    tags: list[str] = Field(default_factory=list)
    username: str
    image_name: str | None = None

    disk_size: int = Field(default=DEFAULT_DISK_SIZE_GB, gt=0)
    autodelete_disk: bool = True
    public_key_path: str | None = None
    service_account_scopes: list[str] = Field(default_factory=list)

    ssh_port: int = Field(default=DEFAULT_SSH_PORT, gt=0, lt=65536)
    ready_attempts: int = Field(default=DEFAULT_READY_ATTEMPTS, gt=0)
    ready_delay: float = Field(default=DEFAULT_READY_DELAY, ge=0)

    google_client_email: str | None = None
    google_key_location: str | None = None
    google_json_key: str | None = None
    google_project: str | None = None

    @classmethod
    def from_mapping(
        cls,
        values: Mapping[str, Any],
        default_username: Callable[[], str] = getpass.getuser,
    ) -> "DriverConfig":
        """
        Builds a config from plain settings.
        `default_username` is only consulted when no username is given.
        """
        data = {k: v for k, v in values.items() if v is not None}
        if "username" not in data:
            data["username"] = default_username()
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key)

    def credentials(self) -> GoogleCredentials:
        """Raises ConfigurationError if any credential setting is absent."""
        missing = []
        if not self.google_client_email:
            missing.append("google_client_email")
        if not (self.google_key_location or self.google_json_key):
            missing.append("google_key_location")
        if not self.google_project:
            missing.append("google_project")
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )

        return GoogleCredentials(
            client_email=self.google_client_email,  # type: ignore[arg-type]
            project=self.google_project,  # type: ignore[arg-type]
            key_location=self.google_key_location,
            json_key=self.google_json_key,
        )
