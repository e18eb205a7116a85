"""Tracked state ORM model.

This module defines the TrackedResource model, the local host's record of
one declaration's tracked state between reconciliation runs.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from unattend_iso.db import Base


class TrackedResource(Base):
    """ORM model for a managed resource's tracked state.

    Attributes:
        pk: Primary key.
        address: User-chosen resource address (unique).
        type_name: Resource type name (e.g. 'unattend_iso_file').
        resource_id: The resource's ``id`` attribute.
        file_name: Declared image file name.
        path_override: Declared directory override (None = temp file).
        xml_content: Declared answer file payload.
        result_path: Path the image was written to.
        created_at: Timestamp of the first commit of this state.
        updated_at: Timestamp of the last commit of this state.
    """

    __tablename__ = "tracked_resources"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    address: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    type_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Tracked attributes
    resource_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    path_override: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    xml_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    result_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        """Return string representation of TrackedResource."""
        return (
            f"<TrackedResource(address='{self.address}', "
            f"id='{self.resource_id}', result_path='{self.result_path}')>"
        )

    def to_state(self) -> dict[str, Any]:
        """Return the tracked attributes as a raw state mapping."""
        return {
            "id": self.resource_id,
            "file_name": self.file_name,
            "path_override": self.path_override,
            "xml_content": self.xml_content,
            "result_path": self.result_path,
        }

    def apply_state(self, state: dict[str, Any]) -> None:
        """Copy attributes from a raw state mapping onto this record."""
        self.resource_id = state.get("id")
        self.file_name = state.get("file_name")
        self.path_override = state.get("path_override")
        self.xml_content = state.get("xml_content")
        self.result_path = state.get("result_path")


__all__ = ["TrackedResource"]
