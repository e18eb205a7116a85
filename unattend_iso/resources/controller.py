"""Lifecycle controller for the unattend ISO resource.

The host dispatches one operation at a time per resource:

- create: build the image, resolve its destination, write it and record
  ``id`` and ``result_path``. Nothing is tracked if any step fails, and a
  temp file created for a failed write is removed.
- read: re-emit prior state unchanged. The image on disk is not checked,
  so drift between disk and tracked state goes unnoticed.
- update: re-emit the host-merged plan. The image is not regenerated, so
  changes to ``xml_content`` or ``file_name`` are not reflected on disk.
- delete: forget tracked state. The image file is left on disk.
- import_state: seed tracked state with an external ``id`` only.
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import TYPE_CHECKING, Protocol

from unattend_iso.config import Settings, get_settings
from unattend_iso.iso.builder import build_image, entries_for_xml
from unattend_iso.iso.destination import resolve_destination
from unattend_iso.iso.errors import ImageError
from unattend_iso.iso.writer import write_image
from unattend_iso.resources.schema import (
    RESOURCE_SCHEMA,
    ConfigurationError,
    ResourceSchema,
    UnattendISOModel,
)
from unattend_iso.resources.state import (
    CreateRequest,
    DeleteRequest,
    ImportStateRequest,
    LifecycleResponse,
    ReadRequest,
    UpdateRequest,
)

if TYPE_CHECKING:
    from unattend_iso.provider import ProviderData

logger = logging.getLogger(__name__)

RESOURCE_TYPE_SUFFIX = "_iso_file"


class Resource(Protocol):
    """Capabilities a host expects from a managed resource type."""

    def metadata(self, provider_type_name: str) -> str: ...

    def schema(self) -> ResourceSchema: ...

    def configure(self, provider_data: ProviderData | None) -> None: ...

    def create(self, req: CreateRequest) -> LifecycleResponse: ...

    def read(self, req: ReadRequest) -> LifecycleResponse: ...

    def update(self, req: UpdateRequest) -> LifecycleResponse: ...

    def delete(self, req: DeleteRequest) -> LifecycleResponse: ...

    def import_state(self, req: ImportStateRequest) -> LifecycleResponse: ...


def new_resource_id() -> str:
    """Return a fresh opaque resource identifier."""
    return uuid.uuid4().hex


def _discard_temp_file(path: str) -> None:
    """Remove a temp file left behind by a failed write."""
    try:
        os.unlink(path)
    except OSError as e:
        logger.warning("Could not remove temp file %s: %s", path, e)


class UnattendedISOResource:
    """Resource implementation for unattend ISO files."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    @property
    def settings(self) -> Settings:
        """Settings from the provider, or loaded from the environment."""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    def metadata(self, provider_type_name: str) -> str:
        """Return the resource type name."""
        return provider_type_name + RESOURCE_TYPE_SUFFIX

    def schema(self) -> ResourceSchema:
        """Return the declared schema surface."""
        return RESOURCE_SCHEMA

    def configure(self, provider_data: ProviderData | None) -> None:
        """Accept provider-level data.

        Args:
            provider_data: Data from the provider's configure step. None when
                the provider has not been configured yet.
        """
        if provider_data is None:
            return
        self._settings = provider_data.settings

    def create(self, req: CreateRequest) -> LifecycleResponse:
        """Build and write the image, then record id and result_path."""
        resp = LifecycleResponse()

        try:
            data = req.plan.get()
        except ConfigurationError as e:
            resp.diagnostics.add_exception(e)
            return resp

        resource_id = new_resource_id()
        settings = self.settings

        try:
            image = build_image(
                entries_for_xml(data.xml_content or ""),
                volume_name=settings.volume_name,
            )
            destination = resolve_destination(
                data.path_override, data.file_name or "", tmp_dir=settings.tmp_dir
            )
        except ImageError as e:
            logger.error("Create failed for %r: %s", data.file_name, e)
            resp.diagnostics.add_exception(e)
            return resp

        try:
            result_path = write_image(destination, image)
        except ImageError as e:
            if data.path_override is None:
                _discard_temp_file(destination)
            logger.error("Create failed for %r: %s", data.file_name, e)
            resp.diagnostics.add_exception(e)
            return resp

        data.id = resource_id
        data.result_path = result_path
        resp.state.set(data)
        logger.info("Created resource %s at %s", resource_id, result_path)
        return resp

    def read(self, req: ReadRequest) -> LifecycleResponse:
        """Re-emit prior state unchanged."""
        resp = LifecycleResponse()
        try:
            data = req.state.get()
        except ConfigurationError as e:
            resp.diagnostics.add_exception(e)
            return resp
        resp.state.set(data)
        return resp

    def update(self, req: UpdateRequest) -> LifecycleResponse:
        """Re-emit the planned state without touching the image."""
        resp = LifecycleResponse()
        try:
            data = req.plan.get()
        except ConfigurationError as e:
            resp.diagnostics.add_exception(e)
            return resp
        resp.state.set(data)
        logger.debug("Updated resource %s (image not regenerated)", data.id)
        return resp

    def delete(self, req: DeleteRequest) -> LifecycleResponse:
        """Forget tracked state, leaving the image file on disk."""
        resp = LifecycleResponse()
        try:
            data = req.state.get()
        except ConfigurationError as e:
            resp.diagnostics.add_exception(e)
            return resp
        logger.info(
            "Deleted resource %s; image %s left on disk", data.id, data.result_path
        )
        return resp

    def import_state(self, req: ImportStateRequest) -> LifecycleResponse:
        """Seed tracked state with an external id."""
        resp = LifecycleResponse()
        resp.state.set(UnattendISOModel(id=req.id))
        return resp


__all__ = [
    "RESOURCE_TYPE_SUFFIX",
    "Resource",
    "UnattendedISOResource",
    "new_resource_id",
]
