"""Utility functions for EntInvoicing."""

from .activity import log_activity
from .authz import manager_required, role_required
from .cache import ProcessCache

__all__ = [
    "log_activity",
    "manager_required",
    "role_required",
    "ProcessCache",
]
