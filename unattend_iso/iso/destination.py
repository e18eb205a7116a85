"""Destination path resolution for generated images.

An explicit path override is treated as a directory and joined with the
file name. Without an override, a uniquely named file is created in the
temporary directory, using the file name as a hint; the returned path is
whatever name the temp-file mechanism picked.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from unattend_iso.iso.errors import ImageIOError

logger = logging.getLogger(__name__)


def _temp_name_parts(file_name: str) -> tuple[str, str]:
    """Split a name hint into a (prefix, suffix) pair for mkstemp."""
    stem, ext = os.path.splitext(os.path.basename(file_name))
    prefix = f"{stem}-" if stem else "unattend-"
    return prefix, ext


def _join_override(path_override: str, file_name: str) -> str:
    """Append a file name to an override prefix.

    A separator is inserted when the prefix lacks one. Leading separators
    on the file name are dropped so the prefix is always kept.
    """
    if not path_override:
        return file_name
    if not path_override.endswith(os.sep):
        path_override += os.sep
    return path_override + file_name.lstrip(os.sep)


def resolve_destination(
    path_override: str | None,
    file_name: str,
    tmp_dir: Path | str | None = None,
) -> str:
    """Compute the path an image will be written to.

    Args:
        path_override: Directory prefix, or None to use a temporary file.
        file_name: Base name of the image file.
        tmp_dir: Temporary directory to use instead of the system default.

    Returns:
        Destination path. In the temporary branch the (empty) file already
        exists when this returns.

    Raises:
        ImageIOError: If the temporary file cannot be created.
    """
    if path_override is not None:
        path = _join_override(path_override, file_name)
        logger.debug("Resolved override destination: %s", path)
        return path

    prefix, suffix = _temp_name_parts(file_name)
    directory = str(tmp_dir) if tmp_dir is not None else None
    try:
        fd, path = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=directory)
    except OSError as e:
        raise ImageIOError(
            f"Error creating temporary file for {file_name!r}: {e}",
            path=directory,
        ) from e
    os.close(fd)
    logger.debug("Resolved temporary destination: %s", path)
    return path


__all__ = ["resolve_destination"]
