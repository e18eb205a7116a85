"""Unattend ISO resource module.

This module handles:
- The declared schema surface and typed model
- The lifecycle controller dispatched by the host
- Tracked state records and the local reconciliation host
"""

from unattend_iso.resources.models import TrackedResource
from unattend_iso.resources.schema import RESOURCE_SCHEMA, UnattendISOModel

__all__ = ["RESOURCE_SCHEMA", "TrackedResource", "UnattendISOModel"]
