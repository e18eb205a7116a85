"""Unattend ISO - declarative management of unattended-install answer-file ISOs.

This package builds ISO-9660 images carrying an ``unattend.xml`` answer file
and exposes a create/read/update/delete/import lifecycle for a host
reconciliation engine.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
