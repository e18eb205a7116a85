"""In-memory ISO-9660 image construction.

This module handles:
- Deriving the file entries for an answer-file payload
- Driving pycdlib to lay out an ISO-9660 image with Joliet and Rock Ridge
- Releasing the encoder on every exit path

The image is serialized into a byte string; writing it to disk is the job
of unattend_iso.iso.writer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from io import BytesIO

import pycdlib
from pycdlib.pycdlibexception import PyCdlibException

from unattend_iso.iso.errors import BuildError
from unattend_iso.types import BuildStage, FileEntry

logger = logging.getLogger(__name__)

UNATTEND_FILE_NAME = "unattend.xml"
DEFAULT_VOLUME_NAME = "unattend"

# Level 3 allows multi-extent files and relaxes name length limits
ISO_INTERCHANGE_LEVEL = 3
JOLIET_LEVEL = 3
ROCK_RIDGE_VERSION = "1.09"


def entries_for_xml(xml_content: str) -> list[FileEntry]:
    """Return the file entries for an answer-file payload.

    An empty payload produces an image with no files.

    Args:
        xml_content: Answer file XML.

    Returns:
        Zero or one FileEntry for unattend.xml.
    """
    if not xml_content:
        return []
    return [FileEntry(name=UNATTEND_FILE_NAME, content=xml_content.encode("utf-8"))]


def iso9660_path(name: str) -> str:
    """Map a file name to its ISO-9660 root path (e.g. '/UNATTEND.XML;1')."""
    return f"/{name.upper()};1"


def _add_entry(iso: pycdlib.PyCdlib, entry: FileEntry, buffers: list[BytesIO]) -> None:
    # pycdlib reads from the file object when mastering, so it must stay open
    fp = BytesIO(entry.content)
    buffers.append(fp)
    iso.add_fp(
        fp,
        len(entry.content),
        iso_path=iso9660_path(entry.name),
        rr_name=entry.name,
        joliet_path=f"/{entry.name}",
    )


def build_image(
    entries: Iterable[FileEntry | tuple[str, bytes]],
    volume_name: str = DEFAULT_VOLUME_NAME,
) -> bytes:
    """Build an ISO-9660 image containing the given files.

    Args:
        entries: Ordered (name, content) entries placed in the image root.
        volume_name: Volume identifier written to the volume descriptors.

    Returns:
        The complete image as bytes.

    Raises:
        BuildError: If the encoder cannot be initialized, a file cannot be
            added, the image cannot be serialized, or the encoder cannot be
            released.
    """
    file_entries: Sequence[FileEntry] = [
        e if isinstance(e, FileEntry) else FileEntry(name=e[0], content=e[1])
        for e in entries
    ]

    iso = pycdlib.PyCdlib()
    initialized = False
    buffers: list[BytesIO] = []
    failure: BuildError | None = None
    image = b""

    try:
        try:
            iso.new(
                interchange_level=ISO_INTERCHANGE_LEVEL,
                vol_ident=volume_name,
                joliet=JOLIET_LEVEL,
                rock_ridge=ROCK_RIDGE_VERSION,
            )
        except (PyCdlibException, ValueError) as e:
            # pycdlib encodes the volume identifier as ASCII
            raise BuildError(
                f"Unable to start ISO writer: {e}", stage=BuildStage.INIT
            ) from e
        initialized = True

        for entry in file_entries:
            try:
                _add_entry(iso, entry, buffers)
            except (PyCdlibException, ValueError) as e:
                raise BuildError(
                    f"Error adding {entry.name!r} to ISO: {e}",
                    stage=BuildStage.ADD_FILE,
                ) from e
            logger.debug("Added %s (%d bytes)", entry.name, len(entry.content))

        out = BytesIO()
        try:
            iso.write_fp(out)
        except PyCdlibException as e:
            raise BuildError(
                f"Error writing ISO: {e}", stage=BuildStage.SERIALIZE
            ) from e
        image = out.getvalue()
    except BuildError as e:
        failure = e
    finally:
        if initialized:
            try:
                iso.close()
            except PyCdlibException as e:
                if failure is None:
                    failure = BuildError(
                        f"Error releasing ISO writer: {e}", stage=BuildStage.CLEANUP
                    )
                else:
                    logger.warning("Error releasing ISO writer after failure: %s", e)
        for fp in buffers:
            fp.close()

    if failure is not None:
        logger.error("Image build failed at %s: %s", failure.stage.value, failure)
        raise failure

    logger.info(
        "Built image %r with %d file(s), %d bytes",
        volume_name,
        len(file_entries),
        len(image),
    )
    return image


__all__ = [
    "DEFAULT_VOLUME_NAME",
    "UNATTEND_FILE_NAME",
    "build_image",
    "entries_for_xml",
    "iso9660_path",
]
