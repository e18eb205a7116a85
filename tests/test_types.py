"""Tests for shared types module."""

import dataclasses

import pytest

from unattend_iso.types import BuildStage, FileEntry, LifecycleOperation, Severity


class TestEnums:
    """Test enum definitions."""

    def test_severity_values(self) -> None:
        """Severity should have expected values."""
        assert Severity.ERROR.value == "error"
        assert Severity.WARNING.value == "warning"

    def test_lifecycle_operation_values(self) -> None:
        """LifecycleOperation should have expected values."""
        assert [op.value for op in LifecycleOperation] == [
            "create",
            "read",
            "update",
            "delete",
            "import",
        ]

    def test_build_stage_values(self) -> None:
        """BuildStage should have expected values."""
        assert BuildStage.INIT.value == "init"
        assert BuildStage.ADD_FILE.value == "add_file"
        assert BuildStage.SERIALIZE.value == "serialize"
        assert BuildStage.CLEANUP.value == "cleanup"


class TestFileEntry:
    """Test FileEntry dataclass."""

    def test_frozen(self) -> None:
        """FileEntry is immutable."""
        entry = FileEntry(name="unattend.xml", content=b"<x/>")
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.name = "other.xml"  # type: ignore[misc]

    def test_equality(self) -> None:
        """Entries compare by value."""
        assert FileEntry("a", b"1") == FileEntry("a", b"1")
