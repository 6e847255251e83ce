from ..logger import logger
from ..provider import Connection
from ..schemas.compute import GCPDisk


def create_disk(
    connection: Connection, name: str, zone: str, image: str, size_gb: int
) -> GCPDisk:
    """
    Requests a boot disk built from `image`.
    API errors propagate as-is; there is no retry here.
    """
    logger.info(f"Creating {size_gb}GB disk {name} from {image} in {zone}")
    disk = connection.create_disk(name=name, zone=zone, image=image, size_gb=size_gb)
    logger.debug(f"Disk {disk.name} status: {disk.status}")
    return disk
