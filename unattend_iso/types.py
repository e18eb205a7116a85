"""Shared type definitions for unattend_iso.

This module contains enums and dataclasses shared across subpackages
to avoid circular imports.
"""

from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    """Severity of a host-visible diagnostic."""

    ERROR = "error"
    WARNING = "warning"


class LifecycleOperation(str, Enum):
    """Lifecycle operation dispatched by the host."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    IMPORT = "import"


class BuildStage(str, Enum):
    """Stage of image construction that can fail."""

    INIT = "init"
    ADD_FILE = "add_file"
    SERIALIZE = "serialize"
    CLEANUP = "cleanup"


@dataclass(frozen=True)
class FileEntry:
    """A single file placed in the root of an image."""

    name: str
    content: bytes


__all__ = [
    "BuildStage",
    "FileEntry",
    "LifecycleOperation",
    "Severity",
]
