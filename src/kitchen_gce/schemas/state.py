import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict


class InstanceState(BaseModel):
    """
    Per-instance state owned by the caller.
    A set server_id means the instance is provisioned, whether or not it
    still exists on the provider side.
    """

    model_config = ConfigDict(validate_assignment=True)

    server_id: str | None = None
    hostname: str | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "InstanceState":
        return cls(
            server_id=values.get("server_id"), hostname=values.get("hostname")
        )

    def to_dict(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)

    def clear(self) -> None:
        self.server_id = None
        self.hostname = None


def load_state(path: Path) -> InstanceState:
    if not path.exists():
        return InstanceState()
    with path.open("r") as f:
        return InstanceState.from_mapping(json.load(f))


def save_state(state: InstanceState, path: Path) -> None:
    data = state.to_dict()
    if not data:
        path.unlink(missing_ok=True)
        return
    with path.open("w") as f:
        json.dump(data, f, indent=2)
