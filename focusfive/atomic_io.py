"""
Crash-safe file writes.

atomic_write: temp file in the target directory -> flush + fsync -> rename.
Readers observe either the old content or the new content, never a mix.

append_line: single O_APPEND write per record, used for the observations log.
"""
import os
import uuid
from pathlib import Path
from typing import Union

from focusfive.exceptions import IoFailure
from focusfive.logger import get_logger

logger = get_logger("atomic_io")

PathLike = Union[str, Path]


def _temp_path(target: Path) -> Path:
    # Unique per call so concurrent writers never share a temp file
    return target.with_name(f"{target.name}.{uuid.uuid4().hex[:12]}.tmp")


def atomic_write(path: PathLike, content: Union[str, bytes]) -> None:
    """
    Replace `path` with `content` atomically.

    Args:
        path: destination file; its parent directory must exist
        content: text (written as UTF-8) or bytes

    Raises:
        IoFailure: on any filesystem error; the temp file is removed and
            the destination is left untouched
    """
    target = Path(path)
    data = content.encode("utf-8") if isinstance(content, str) else content
    temp = _temp_path(target)

    try:
        with open(temp, "xb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp, target)
    except BaseException as e:
        try:
            temp.unlink()
        except FileNotFoundError:
            pass
        except OSError as cleanup_error:
            logger.warning(f"Could not remove temp file {temp}: {cleanup_error}")
        if isinstance(e, OSError):
            logger.error(f"Atomic write failed for {target}: {e}")
            raise IoFailure(f"Failed to write {target}: {e}", str(target)) from e
        raise

    logger.debug(f"Wrote {len(data)} bytes to {target}")


def append_line(path: PathLike, line: str) -> None:
    """
    Append one record plus `\\n` to `path`, creating the file if needed.

    The whole record goes out through a single O_APPEND descriptor, so
    concurrent appenders never interleave partial lines.

    Raises:
        ValueError: if `line` contains a newline
        IoFailure: on any filesystem error
    """
    if "\n" in line or "\r" in line:
        raise ValueError("Appended record must be a single line")

    target = Path(path)
    data = (line + "\n").encode("utf-8")

    try:
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o644)
        try:
            view = memoryview(data)
            while view:
                written = os.write(fd, view)
                view = view[written:]
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError as e:
        logger.error(f"Append failed for {target}: {e}")
        raise IoFailure(f"Failed to append to {target}: {e}", str(target)) from e
