"""Hierarchy resolution shared by every module that scopes reads or writes."""

from .resolver import (
    HierarchyScope,
    authorize_action,
    ensure_authorized,
    resolve_company_owners,
    resolve_employee_ids,
    resolve_visible_owners,
)

__all__ = [
    "HierarchyScope",
    "resolve_employee_ids",
    "resolve_visible_owners",
    "resolve_company_owners",
    "authorize_action",
    "ensure_authorized",
]
