"""
Logging configuration using Loguru.

Every record carries a ``component`` extra: the emitting module relative
to the package (``core.state_store``, ``services.sync_session``), or
``notesync`` for records logged through the bare loguru logger.
"""

import sys
from pathlib import Path

from loguru import logger

PACKAGE = "notesync"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]}:{line} - {message}"

logger.configure(extra={"component": PACKAGE})


def component_name(module: str) -> str:
    """Strip the package prefix from a module name."""
    prefix = PACKAGE + "."
    return module[len(prefix):] if module.startswith(prefix) else module


def setup_logging(
    level: str = "INFO",
    log_to_file: bool = False,
    log_dir: str = "logs",
    file_rotation: str = "10 MB",
    file_retention: str = "7 days",
    compression: str = "zip",
    serialize: bool = True,
) -> None:
    """Replace all sinks with a console sink and, optionally, rotating files."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if not log_to_file:
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path / (PACKAGE + "_{time:YYYY-MM-DD}.log"),
        level=level,
        format=FILE_FORMAT,
        rotation=file_rotation,
        retention=file_retention,
        compression=compression,
        serialize=serialize,
        enqueue=True,
    )


def get_logger(name: str):
    """Get a logger bound to the component of module ``name``."""
    return logger.bind(component=component_name(name))
