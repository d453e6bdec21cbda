"""Roster management authorization."""

from .policies import (
    ROSTER_MANAGE_PERMISSION,
    require_roster_manager,
    roster_management_guard,
    roster_management_policies,
)

__all__ = [
    "ROSTER_MANAGE_PERMISSION",
    "require_roster_manager",
    "roster_management_guard",
    "roster_management_policies",
]
