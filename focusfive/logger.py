"""
FocusFive logging setup.

Log policy:
- <logs_dir>/system.log: routine operations (INFO+)
- <logs_dir>/error.log: failures with stack traces (ERROR+)
- <logs_dir>/corruption.log: raw dumps of sidecar content that failed to decode
- console: only what the user should see (WARNING+)

RotatingFileHandler keeps the files bounded.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "focusfive"
# Kept out of the main logs; see log_corruption
CORRUPTION_LOGGER_NAME = "focusfive.corruption"

MAX_BYTES = 5 * 1024 * 1024  # 5MB
BACKUP_COUNT = 3


def setup_logging(
    logs_dir: Path,
    log_level: int = logging.INFO,
    console_level: int = logging.WARNING
) -> logging.Logger:
    """
    Initialise logging for the application.

    Args:
        logs_dir: directory for the rotating log files
        log_level: file log level (default INFO)
        console_level: console log level (default WARNING)

    Returns:
        The configured root logger
    """
    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    corruption_logger = logging.getLogger(CORRUPTION_LOGGER_NAME)
    corruption_logger.setLevel(logging.INFO)
    corruption_logger.propagate = False

    # Avoid duplicate handlers on repeated setup
    for target in (logger, corruption_logger):
        for handler in list(target.handlers):
            handler.close()
        target.handlers.clear()

    file_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_format = logging.Formatter("[%(levelname)s] %(message)s")

    system_handler = RotatingFileHandler(
        logs_dir / "system.log",
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8"
    )
    system_handler.setLevel(log_level)
    system_handler.setFormatter(file_format)
    logger.addHandler(system_handler)

    error_handler = RotatingFileHandler(
        logs_dir / "error.log",
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8"
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(file_format)
    logger.addHandler(error_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    corruption_handler = RotatingFileHandler(
        logs_dir / "corruption.log",
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8"
    )
    corruption_handler.setFormatter(logging.Formatter("%(asctime)s\n%(message)s\n" + "-" * 50))
    corruption_logger.addHandler(corruption_handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return a module logger.

    Args:
        name: module name, e.g. "markdown", "storage"
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return logging.getLogger(ROOT_LOGGER_NAME)


def log_corruption(
    path: Optional[str],
    error_msg: str,
    raw: Optional[str] = None,
    line_number: Optional[int] = None,
) -> None:
    """
    Record a sidecar decode failure.

    The raw content goes to corruption.log only; the main logs get a one-line
    ERROR without the payload.

    Args:
        path: file that failed to decode
        error_msg: what was wrong
        raw: offending content, if available
        line_number: 1-based line for NDJSON records
    """
    where = f"{path}:{line_number}" if line_number is not None else str(path)
    dump = f"{where}: {error_msg}"
    if raw is not None:
        dump += f"\n  Raw: {raw}"
    logging.getLogger(CORRUPTION_LOGGER_NAME).info(dump)

    get_logger("sidecar").error(f"Corrupt data in {where}: {error_msg}")
