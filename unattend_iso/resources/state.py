"""Host state interface and lifecycle request/response types.

The host hands the resource raw attribute mappings for the plan and the
prior state, and reads the new state back from the response. State.get()
converts a mapping into UnattendISOModel; State.set() stores a model.
"""

from dataclasses import dataclass, field
from typing import Any

from unattend_iso.diagnostics import Diagnostics
from unattend_iso.resources.schema import UnattendISOModel, parse_model


class State:
    """Mutable holder for one resource's raw attributes."""

    def __init__(self, raw: dict[str, Any] | None = None) -> None:
        self.raw: dict[str, Any] | None = dict(raw) if raw is not None else None

    def __repr__(self) -> str:
        return f"<State({self.raw!r})>"

    def is_empty(self) -> bool:
        """Return True if no state is held."""
        return self.raw is None

    def get(self) -> UnattendISOModel:
        """Return the held attributes as a typed model.

        Raises:
            ConfigurationError: If the attributes do not fit the model.
        """
        return parse_model(self.raw or {})

    def set(self, model: UnattendISOModel) -> None:
        """Replace the held attributes with the model's values."""
        self.raw = model.model_dump()

    def remove(self) -> None:
        """Forget all held attributes."""
        self.raw = None


@dataclass
class CreateRequest:
    plan: State


@dataclass
class ReadRequest:
    state: State


@dataclass
class UpdateRequest:
    plan: State
    state: State


@dataclass
class DeleteRequest:
    state: State


@dataclass
class ImportStateRequest:
    id: str


@dataclass
class LifecycleResponse:
    """Response of a lifecycle operation.

    Attributes:
        state: New tracked state; empty when nothing should be tracked.
        diagnostics: Errors and warnings for this operation.
    """

    state: State = field(default_factory=State)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


__all__ = [
    "CreateRequest",
    "DeleteRequest",
    "ImportStateRequest",
    "LifecycleResponse",
    "ReadRequest",
    "State",
    "UpdateRequest",
]
