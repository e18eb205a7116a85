"""Tests for resources/service.py - the local reconciliation host.

Tests run against an in-memory SQLite state store.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from unattend_iso.config import Settings
from unattend_iso.db import Base
from unattend_iso.iso.errors import BuildError
from unattend_iso.resources.models import TrackedResource
from unattend_iso.resources.schema import RESOURCE_SCHEMA, ConfigurationError
from unattend_iso.resources.service import (
    UNATTEND_ISO_FILE_TYPE,
    ResourceExistsError,
    ResourceNotFoundError,
    apply,
    default_resource,
    destroy,
    get_tracked,
    get_tracked_or_none,
    import_resource,
    list_tracked,
    plan_resource,
    refresh,
)
from unattend_iso.types import BuildStage, LifecycleOperation


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def session_factory(engine):
    """Create a session factory for testing."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    """Create a session for testing."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def resource(tmp_path):
    """Create a configured resource writing temp files under tmp_path."""
    return default_resource(Settings(tmp_dir=tmp_path))


@pytest.fixture
def declaration(tmp_path):
    """A declaration writing into tmp_path/out/."""
    out = tmp_path / "out"
    out.mkdir()
    return {
        "file_name": "a.iso",
        "xml_content": "<x/>",
        "path_override": f"{out}/",
    }


class TestPlanResource:
    """Tests for plan_resource function."""

    def test_new_resource_has_unknown_computed(self) -> None:
        """Computed attributes are unknown for a new resource."""
        planned = plan_resource(
            {"file_name": "a.iso", "xml_content": "<x/>"}, None, RESOURCE_SCHEMA
        )
        assert planned["id"] is None
        assert planned["result_path"] is None
        assert planned["path_override"] is None

    def test_prior_computed_carried_forward(self) -> None:
        """id and result_path are carried over from prior state."""
        prior = {
            "id": "abc",
            "file_name": "a.iso",
            "xml_content": "<x/>",
            "path_override": None,
            "result_path": "/tmp/a.iso",
        }
        planned = plan_resource(
            {"file_name": "b.iso", "xml_content": "<y/>"}, prior, RESOURCE_SCHEMA
        )
        assert planned["id"] == "abc"
        assert planned["result_path"] == "/tmp/a.iso"
        assert planned["file_name"] == "b.iso"
        assert planned["xml_content"] == "<y/>"

    def test_invalid_declaration(self) -> None:
        """Invalid declarations raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            plan_resource({"file_name": "a.iso"}, None, RESOURCE_SCHEMA)


class TestApply:
    """Tests for apply function."""

    def test_first_apply_creates(self, session, resource, declaration) -> None:
        """The first apply dispatches create and tracks state."""
        result = apply(session, "answer", declaration, resource=resource)

        assert result.success
        assert result.operation is LifecycleOperation.CREATE
        record = get_tracked(session, "answer")
        assert record.type_name == UNATTEND_ISO_FILE_TYPE
        assert record.resource_id
        assert record.result_path == declaration["path_override"] + "a.iso"
        assert Path(record.result_path).exists()
        assert result.state == record.to_state()

    def test_second_apply_updates_without_rewrite(
        self, session, resource, declaration
    ) -> None:
        """A changed declaration is recorded but the image is not rebuilt."""
        first = apply(session, "answer", declaration, resource=resource)
        result_path = Path(first.state["result_path"])
        before = result_path.read_bytes()

        changed = {**declaration, "xml_content": "<changed/>"}
        second = apply(session, "answer", changed, resource=resource)

        assert second.success
        assert second.operation is LifecycleOperation.UPDATE
        assert second.state["id"] == first.state["id"]
        assert second.state["result_path"] == first.state["result_path"]
        assert second.state["xml_content"] == "<changed/>"
        assert result_path.read_bytes() == before

    def test_failed_create_tracks_nothing(
        self, session, resource, declaration
    ) -> None:
        """A failed create leaves the address unmanaged."""
        with patch(
            "unattend_iso.resources.controller.build_image",
            side_effect=BuildError("no encoder", stage=BuildStage.INIT),
        ):
            result = apply(session, "answer", declaration, resource=resource)

        assert not result.success
        assert result.state is None
        assert result.diagnostics[0].summary == "Build Error"
        assert get_tracked_or_none(session, "answer") is None

    def test_retry_after_failure_is_fresh_create(
        self, session, resource, declaration
    ) -> None:
        """The apply after a failure starts a new create."""
        with patch(
            "unattend_iso.resources.controller.build_image",
            side_effect=BuildError("no encoder", stage=BuildStage.INIT),
        ):
            apply(session, "answer", declaration, resource=resource)

        result = apply(session, "answer", declaration, resource=resource)

        assert result.success
        assert result.operation is LifecycleOperation.CREATE

    def test_invalid_declaration(self, session, resource) -> None:
        """Configuration errors are reported as diagnostics."""
        result = apply(session, "answer", {"file_name": "a.iso"}, resource=resource)

        assert not result.success
        assert result.diagnostics[0].code == "configuration_error"
        assert get_tracked_or_none(session, "answer") is None

    def test_to_dict(self, session, resource, declaration) -> None:
        """Results serialize for JSON output."""
        data = apply(session, "answer", declaration, resource=resource).to_dict()

        assert data["address"] == "answer"
        assert data["operation"] == "create"
        assert data["success"] is True
        assert data["diagnostics"] == []


class TestRefresh:
    """Tests for refresh function."""

    def test_refresh_keeps_state(self, session, resource, declaration) -> None:
        """Refresh re-emits tracked state."""
        created = apply(session, "answer", declaration, resource=resource)

        result = refresh(session, "answer", resource=resource)

        assert result.success
        assert result.operation is LifecycleOperation.READ
        assert result.state == created.state

    def test_refresh_unknown(self, session, resource) -> None:
        """Refreshing an unmanaged address raises."""
        with pytest.raises(ResourceNotFoundError):
            refresh(session, "missing", resource=resource)


class TestImport:
    """Tests for import_resource function."""

    def test_import_seeds_id(self, session, resource) -> None:
        """Import tracks only the supplied id."""
        result = import_resource(session, "answer", "ext-1", resource=resource)

        assert result.success
        record = get_tracked(session, "answer")
        assert record.resource_id == "ext-1"
        assert record.file_name is None
        assert record.result_path is None

    def test_import_existing_address(self, session, resource, declaration) -> None:
        """Importing into a managed address raises."""
        apply(session, "answer", declaration, resource=resource)

        with pytest.raises(ResourceExistsError):
            import_resource(session, "answer", "ext-1", resource=resource)

    def test_apply_after_import_updates(
        self, session, resource, declaration
    ) -> None:
        """An imported resource is reconciled by update, keeping its id."""
        import_resource(session, "answer", "ext-1", resource=resource)

        result = apply(session, "answer", declaration, resource=resource)

        assert result.operation is LifecycleOperation.UPDATE
        assert result.state["id"] == "ext-1"
        assert result.state["file_name"] == "a.iso"
        assert result.state["result_path"] is None


class TestDestroy:
    """Tests for destroy function."""

    def test_destroy_forgets_state_keeps_file(
        self, session, resource, declaration
    ) -> None:
        """Destroy removes tracked state but not the image."""
        created = apply(session, "answer", declaration, resource=resource)

        result = destroy(session, "answer", resource=resource)

        assert result.success
        assert result.state is None
        assert get_tracked_or_none(session, "answer") is None
        assert Path(created.state["result_path"]).exists()

    def test_destroy_unknown(self, session, resource) -> None:
        """Destroying an unmanaged address raises."""
        with pytest.raises(ResourceNotFoundError):
            destroy(session, "missing", resource=resource)


class TestListTracked:
    """Tests for list_tracked function."""

    def test_ordered_by_address(self, session) -> None:
        """Records come back sorted by address."""
        for address in ("b", "a", "c"):
            session.add(TrackedResource(address=address, type_name="t"))
        session.flush()

        assert [r.address for r in list_tracked(session)] == ["a", "b", "c"]

    def test_empty(self, session) -> None:
        """An empty store lists nothing."""
        assert list_tracked(session) == []
