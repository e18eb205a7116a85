"""Persistence of image bytes to the local filesystem.

Writes are best effort: the file is created or truncated and then written
in full. A failure partway through leaves a partial file behind; the
caller treats that as fatal for the current operation. Ownership and
permissions are left at OS defaults.
"""

import logging
import os
from pathlib import Path

from unattend_iso.iso.errors import ImageIOError

logger = logging.getLogger(__name__)


def write_image(path: str | Path, data: bytes) -> str:
    """Write image bytes to a file.

    Args:
        path: Destination file path. Created or truncated.
        data: Complete image bytes.

    Returns:
        The path of the written file.

    Raises:
        ImageIOError: If the file cannot be opened or written.
    """
    path_str = os.fspath(path)
    try:
        f = open(path_str, "wb")
    except OSError as e:
        raise ImageIOError(f"Error creating file {path_str}: {e}", path=path_str) from e

    with f:
        try:
            f.write(data)
            f.flush()
        except OSError as e:
            raise ImageIOError(
                f"Error writing file {path_str}: {e}", path=path_str
            ) from e

    logger.info("Wrote %d bytes to %s", len(data), f.name)
    return f.name


__all__ = ["write_image"]
