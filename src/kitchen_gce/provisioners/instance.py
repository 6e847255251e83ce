from pathlib import Path

from ..errors import ConfigurationError
from ..logger import logger
from ..provider import Connection
from ..schemas.compute import GCPDisk, GCPServer
from ..schemas.config import DriverConfig


def build_metadata(config: DriverConfig) -> dict[str, str]:
    """Publishes the configured public key for `config.username`."""
    if not config.public_key_path:
        return {}

    key_path = Path(config.public_key_path).expanduser()
    try:
        key = key_path.read_text().strip()
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read public_key_path {key_path}: {e}"
        ) from e

    return {"ssh-keys": f"{config.username}:{key}"}


def create_instance(
    connection: Connection,
    config: DriverConfig,
    name: str,
    zone: str,
    boot_disk: GCPDisk | None = None,
) -> GCPServer:
    """
    Requests the instance. The returned server exists but may not be
    reachable yet.
    """
    metadata = build_metadata(config)

    logger.info(f"Creating {config.machine_type} instance {name} in {zone}")
    server = connection.create_server(
        name=name,
        zone=zone,
        machine_type=config.machine_type,
        network=config.network,
        tags=list(config.tags),
        boot_disk=boot_disk,
        autodelete_disk=config.autodelete_disk,
        metadata=metadata or None,
        scopes=list(config.service_account_scopes) or None,
    )
    logger.debug(f"Instance {server.name} status: {server.status}")
    return server
