import random
from collections.abc import Mapping, Sequence
from typing import Protocol

from .core import ZONE_CATALOG
from .errors import ConfigurationError
from .logger import logger
from .schemas.compute import GCPZone


class Chooser(Protocol):
    def choice(self, seq: Sequence[str]) -> str: ...


def zones_for_area(
    area: str, catalog: Mapping[str, list[str]] = ZONE_CATALOG
) -> list[GCPZone]:
    if area == "any":
        return [GCPZone(name=z, area=a) for a, zones in catalog.items() for z in zones]
    return [GCPZone(name=z, area=area) for z in catalog.get(area, [])]


def select_zone(
    area: str = "us",
    zone_name: str | None = None,
    catalog: Mapping[str, list[str]] = ZONE_CATALOG,
    rng: Chooser = random,  # type: ignore[assignment]
) -> str:
    """Returns the configured zone, or a random zone within `area`."""
    if zone_name:
        return zone_name

    candidates = zones_for_area(area, catalog)
    if not candidates:
        raise ConfigurationError(f"No zones available for area '{area}'")

    zone = rng.choice([z.name for z in candidates])
    logger.debug(f"Selected zone {zone} from area {area}")
    return zone
