"""Local reconciliation host.

This module drives the resource lifecycle against tracked state kept in
the local database:
- apply(): plan a declaration and dispatch create or update
- refresh(): dispatch read
- import_resource(): dispatch import_state followed by read
- destroy(): dispatch delete and forget the record

Tracked state is only committed when the operation reported no error
diagnostics, so a failed create leaves the address unmanaged and the next
apply starts a fresh create.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from unattend_iso.diagnostics import Diagnostics
from unattend_iso.provider import PROVIDER_TYPE_NAME, UnattendISOProvider
from unattend_iso.resources.controller import RESOURCE_TYPE_SUFFIX, Resource
from unattend_iso.resources.models import TrackedResource
from unattend_iso.resources.schema import (
    ConfigurationError,
    ResourceSchema,
    validate_config,
)
from unattend_iso.resources.state import (
    CreateRequest,
    DeleteRequest,
    ImportStateRequest,
    ReadRequest,
    State,
    UpdateRequest,
)
from unattend_iso.types import LifecycleOperation

if TYPE_CHECKING:
    from unattend_iso.config import Settings

logger = logging.getLogger(__name__)

UNATTEND_ISO_FILE_TYPE = PROVIDER_TYPE_NAME + RESOURCE_TYPE_SUFFIX


class ResourceNotFoundError(Exception):
    """Raised when no state is tracked for an address."""

    def __init__(self, address: str, code: str = "resource_not_found") -> None:
        super().__init__(f"Resource not found: {address}")
        self.address = address
        self.code = code


class ResourceExistsError(Exception):
    """Raised when importing into an address that is already managed."""

    def __init__(self, address: str, code: str = "resource_exists") -> None:
        super().__init__(f"Resource already managed: {address}")
        self.address = address
        self.code = code


@dataclass
class ReconcileResult:
    """Outcome of one lifecycle dispatch.

    Attributes:
        address: Resource address.
        operation: Operation that was dispatched.
        state: Tracked state after the operation (None when untracked).
        diagnostics: Diagnostics reported by the operation.
    """

    address: str
    operation: LifecycleOperation
    state: dict[str, Any] | None = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def success(self) -> bool:
        """Return True if no error diagnostic was reported."""
        return not self.diagnostics.has_error()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": self.address,
            "operation": self.operation.value,
            "success": self.success,
            "state": self.state,
            "diagnostics": self.diagnostics.to_dict(),
        }


def default_resource(settings: Settings | None = None) -> Resource:
    """Instantiate a configured unattend ISO file resource."""
    provider = UnattendISOProvider()
    return provider.new_resource(UNATTEND_ISO_FILE_TYPE, provider.configure(settings))


def plan_resource(
    config: dict[str, Any],
    prior: dict[str, Any] | None,
    schema: ResourceSchema,
) -> dict[str, Any]:
    """Merge a declaration with prior state into a planned state.

    Computed-only attributes are unknown (None) in the plan unless they
    carry prior state forward.

    Args:
        config: Declared attributes.
        prior: Prior tracked state, or None for a new resource.
        schema: Resource schema.

    Returns:
        Planned attribute mapping.

    Raises:
        ConfigurationError: If the declaration does not match the schema.
    """
    planned = validate_config(config, schema)
    for attr in schema.attributes:
        if attr.required or attr.optional:
            continue
        if attr.use_state_for_unknown and prior is not None:
            planned[attr.name] = prior.get(attr.name)
        else:
            planned[attr.name] = None
    return planned


def get_tracked_or_none(session: Session, address: str) -> TrackedResource | None:
    """Get the tracked record for an address, or None if not managed.

    Args:
        session: Database session.
        address: Resource address.

    Returns:
        TrackedResource instance or None.
    """
    stmt = select(TrackedResource).where(TrackedResource.address == address)
    return session.execute(stmt).scalar_one_or_none()


def get_tracked(session: Session, address: str) -> TrackedResource:
    """Get the tracked record for an address.

    Raises:
        ResourceNotFoundError: If the address is not managed.
    """
    record = get_tracked_or_none(session, address)
    if record is None:
        raise ResourceNotFoundError(address)
    return record


def list_tracked(session: Session) -> list[TrackedResource]:
    """List all tracked records ordered by address."""
    stmt = select(TrackedResource).order_by(TrackedResource.address)
    return list(session.execute(stmt).scalars().all())


def _save_state(
    session: Session,
    address: str,
    record: TrackedResource | None,
    state: State,
) -> TrackedResource | None:
    """Commit a response state to the record for an address."""
    if state.is_empty():
        if record is not None:
            session.delete(record)
            session.flush()
        return None

    if record is None:
        record = TrackedResource(address=address, type_name=UNATTEND_ISO_FILE_TYPE)
        session.add(record)
    record.apply_state(state.raw or {})
    session.flush()
    return record


def apply(
    session: Session,
    address: str,
    config: dict[str, Any],
    resource: Resource | None = None,
) -> ReconcileResult:
    """Reconcile one declaration.

    Dispatches create when nothing is tracked for the address, update
    otherwise.

    Args:
        session: Database session.
        address: Resource address.
        config: Declared attributes.
        resource: Resource implementation; the configured default if None.

    Returns:
        ReconcileResult with the committed state and diagnostics.
    """
    if resource is None:
        resource = default_resource()

    record = get_tracked_or_none(session, address)
    prior = record.to_state() if record is not None else None
    operation = (
        LifecycleOperation.CREATE if prior is None else LifecycleOperation.UPDATE
    )
    result = ReconcileResult(address=address, operation=operation, state=prior)

    try:
        planned = plan_resource(config, prior, resource.schema())
    except ConfigurationError as e:
        result.diagnostics.add_exception(e)
        return result

    if prior is None:
        resp = resource.create(CreateRequest(plan=State(planned)))
    else:
        resp = resource.update(UpdateRequest(plan=State(planned), state=State(prior)))

    result.diagnostics.extend(resp.diagnostics)
    if resp.diagnostics.has_error():
        logger.error("%s of %s failed", operation.value, address)
        return result

    saved = _save_state(session, address, record, resp.state)
    result.state = saved.to_state() if saved is not None else None
    logger.info("%s of %s succeeded", operation.value, address)
    return result


def refresh(
    session: Session, address: str, resource: Resource | None = None
) -> ReconcileResult:
    """Re-read tracked state for an address.

    Raises:
        ResourceNotFoundError: If the address is not managed.
    """
    if resource is None:
        resource = default_resource()

    record = get_tracked(session, address)
    prior = record.to_state()
    result = ReconcileResult(
        address=address, operation=LifecycleOperation.READ, state=prior
    )

    resp = resource.read(ReadRequest(state=State(prior)))
    result.diagnostics.extend(resp.diagnostics)
    if resp.diagnostics.has_error():
        return result

    saved = _save_state(session, address, record, resp.state)
    result.state = saved.to_state() if saved is not None else None
    return result


def import_resource(
    session: Session,
    address: str,
    identifier: str,
    resource: Resource | None = None,
) -> ReconcileResult:
    """Bring an existing resource under management by its id.

    Raises:
        ResourceExistsError: If the address is already managed.
    """
    if resource is None:
        resource = default_resource()

    if get_tracked_or_none(session, address) is not None:
        raise ResourceExistsError(address)

    result = ReconcileResult(address=address, operation=LifecycleOperation.IMPORT)

    resp = resource.import_state(ImportStateRequest(id=identifier))
    result.diagnostics.extend(resp.diagnostics)
    if resp.diagnostics.has_error():
        return result

    read_resp = resource.read(ReadRequest(state=resp.state))
    result.diagnostics.extend(read_resp.diagnostics)
    if read_resp.diagnostics.has_error():
        return result

    saved = _save_state(session, address, None, read_resp.state)
    result.state = saved.to_state() if saved is not None else None
    logger.info("Imported %s as %s", identifier, address)
    return result


def destroy(
    session: Session, address: str, resource: Resource | None = None
) -> ReconcileResult:
    """Stop managing an address.

    The image file written by create stays on disk.

    Raises:
        ResourceNotFoundError: If the address is not managed.
    """
    if resource is None:
        resource = default_resource()

    record = get_tracked(session, address)
    prior = record.to_state()
    result = ReconcileResult(
        address=address, operation=LifecycleOperation.DELETE, state=prior
    )

    resp = resource.delete(DeleteRequest(state=State(prior)))
    result.diagnostics.extend(resp.diagnostics)
    if resp.diagnostics.has_error():
        return result

    session.delete(record)
    session.flush()
    result.state = None
    logger.info("Destroyed %s", address)
    return result


__all__ = [
    "ReconcileResult",
    "ResourceExistsError",
    "ResourceNotFoundError",
    "UNATTEND_ISO_FILE_TYPE",
    "apply",
    "default_resource",
    "destroy",
    "get_tracked",
    "get_tracked_or_none",
    "import_resource",
    "list_tracked",
    "plan_resource",
    "refresh",
]
