"""Derived views over the reference cache."""

from .dashboard import DashboardView
from .navigation import NavigationAction, Navigator
from .pipeline import (
    HeaderRow,
    ItemRow,
    QuickAccessSections,
    StatusGroup,
    filter_references,
    flatten_sections,
    group_for_dashboard,
    group_for_quick_access,
    navigable_references,
    sort_references,
)
from .quick_access import QuickAccessPanel

__all__ = [
    "DashboardView",
    "HeaderRow",
    "ItemRow",
    "NavigationAction",
    "Navigator",
    "QuickAccessPanel",
    "QuickAccessSections",
    "StatusGroup",
    "filter_references",
    "flatten_sections",
    "group_for_dashboard",
    "group_for_quick_access",
    "navigable_references",
    "sort_references",
]
