import logging

from rich.console import Console
from rich.logging import RichHandler

# Progress goes to stderr so stdout stays clean for status tables
_console = Console(stderr=True)

VERBOSITY_LEVELS = {0: logging.ERROR, 1: logging.INFO}


def setup_logger(
    name: str = "kitchen_gce", level: int = logging.ERROR
) -> logging.Logger:
    """Configures and returns a logger with RichHandler."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # setup may run more than once (tests, repeated CLI calls)
    if not logger.handlers:
        handler = RichHandler(
            console=_console, rich_tracebacks=True, markup=False, show_path=False
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger


def set_verbosity(verbose: int) -> None:
    """-v shows lifecycle progress, -vv adds API level detail."""
    logger.setLevel(VERBOSITY_LEVELS.get(verbose, logging.DEBUG))


# Quiet by default: the calling framework decides how chatty to be
logger = setup_logger(level=logging.ERROR)
