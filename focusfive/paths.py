"""
Default filesystem locations for FocusFive data.
"""
import os
from pathlib import Path

APP_DIR_NAME = "FocusFive"


def get_home_dir() -> Path:
    """
    Return the base directory for default paths.

    Priority:
    1. HOME env var
    2. Path.home()
    3. current working directory
    """
    raw = os.getenv("HOME", "").strip()
    if raw:
        return Path(raw).expanduser()
    try:
        return Path.home()
    except (KeyError, RuntimeError):
        return Path.cwd()


def get_data_dir() -> Path:
    """
    Return the data root directory.

    Priority:
    1. FOCUSFIVE_DATA_DIR env var
    2. <home>/FocusFive
    """
    raw = os.getenv("FOCUSFIVE_DATA_DIR", "").strip()
    if raw:
        return Path(raw).expanduser().resolve()
    return (get_home_dir() / APP_DIR_NAME).resolve()
