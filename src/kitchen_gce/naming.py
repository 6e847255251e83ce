import uuid
from collections.abc import Callable

from .core import NAME_TRUNCATE_THRESHOLD


def generate_inst_name(
    base: str, uuid_factory: Callable[[], uuid.UUID] = uuid.uuid4
) -> str:
    """
    Builds a unique instance name from a suite/platform name.
    Long base names are cut to leave room for the "-<uuid>" suffix.
    """
    if len(base) >= NAME_TRUNCATE_THRESHOLD:
        base = base[: NAME_TRUNCATE_THRESHOLD - 1]
    return f"{base}-{uuid_factory()}"
