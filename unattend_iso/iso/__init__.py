"""ISO image handling.

This module handles:
- Building ISO-9660 images in memory
- Resolving the destination path of an image
- Writing image bytes to disk
"""

from unattend_iso.iso.builder import build_image, entries_for_xml
from unattend_iso.iso.destination import resolve_destination
from unattend_iso.iso.errors import BuildError, ImageError, ImageIOError
from unattend_iso.iso.writer import write_image

__all__ = [
    "BuildError",
    "ImageError",
    "ImageIOError",
    "build_image",
    "entries_for_xml",
    "resolve_destination",
    "write_image",
]
