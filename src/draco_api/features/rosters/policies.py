"""Who may edit a team roster.

Acceptance paths are an ordered list: the fine-grained permission first, then
the structural TeamAdmin role. Adding a path means appending a guard.
"""

from __future__ import annotations

from draco_api.core.http.dependencies import GuardDependency, guard_dependency
from draco_api.core.rbac.guards import Guard, RouteGuards, first_allowed
from draco_api.core.rbac.types import RoleId

ROSTER_MANAGE_PERMISSION = "team.roster.manage"


def roster_management_policies(guards: RouteGuards) -> tuple[Guard, ...]:
    return (
        guards.require_permission(ROSTER_MANAGE_PERMISSION),
        guards.require_role(RoleId.TEAM_ADMIN),
    )


def roster_management_guard(guards: RouteGuards) -> Guard:
    return first_allowed(*roster_management_policies(guards))


def require_roster_manager() -> GuardDependency:
    """FastAPI dependency for roster-editing routes."""

    return guard_dependency(roster_management_guard)


__all__ = [
    "ROSTER_MANAGE_PERMISSION",
    "require_roster_manager",
    "roster_management_guard",
    "roster_management_policies",
]
