"""Canonical permission and role registry.

Keep permission keys stable: route guards and stored role names reference
them directly.
"""

from __future__ import annotations

from draco_api.core.rbac.types import PermissionDef, RoleDef, RoleId, ScopeType

WILDCARD_PERMISSION = "*"


def _permission(*, key: str, scope: ScopeType, label: str, description: str) -> PermissionDef:
    return PermissionDef(key=key, scope_type=scope, label=label, description=description)


PERMISSIONS: tuple[PermissionDef, ...] = (
    # Account permissions ------------------------------------------------
    _permission(
        key="account.manage",
        scope=ScopeType.ACCOUNT,
        label="Manage account",
        description="Edit account settings, URLs and branding.",
    ),
    _permission(
        key="account.contacts.manage",
        scope=ScopeType.ACCOUNT,
        label="Manage contacts",
        description="Create, edit and delete contacts in the account.",
    ),
    _permission(
        key="account.roles.manage",
        scope=ScopeType.ACCOUNT,
        label="Manage roles",
        description="Grant and revoke contextual roles for contacts.",
    ),
    _permission(
        key="account.games.manage",
        scope=ScopeType.ACCOUNT,
        label="Manage games",
        description="Schedule games and record results.",
    ),
    _permission(
        key="account.seasons.manage",
        scope=ScopeType.ACCOUNT,
        label="Manage seasons",
        description="Create seasons and change the current season.",
    ),
    _permission(
        key="account.communications.manage",
        scope=ScopeType.ACCOUNT,
        label="Manage communications",
        description="Send announcements and email to account members.",
    ),
    _permission(
        key="workout.manage",
        scope=ScopeType.ACCOUNT,
        label="Manage workouts",
        description="Create workouts and review registrations.",
    ),
    _permission(
        key="player-classified.manage",
        scope=ScopeType.ACCOUNT,
        label="Manage player classifieds",
        description="Moderate players-wanted and teams-wanted postings.",
    ),
    _permission(
        key="account.photos.manage",
        scope=ScopeType.ACCOUNT,
        label="Manage account photos",
        description="Approve and curate photo galleries across the account.",
    ),
    # League permissions -------------------------------------------------
    _permission(
        key="league.manage",
        scope=ScopeType.LEAGUE,
        label="Manage league",
        description="Edit league details for the current season.",
    ),
    _permission(
        key="league.teams.manage",
        scope=ScopeType.LEAGUE,
        label="Manage league teams",
        description="Add, remove and rename teams in the league season.",
    ),
    _permission(
        key="league.games.manage",
        scope=ScopeType.LEAGUE,
        label="Manage league games",
        description="Schedule league games and record scores.",
    ),
    # Team permissions ---------------------------------------------------
    _permission(
        key="team.manage",
        scope=ScopeType.TEAM,
        label="Manage team",
        description="Edit team details, announcements and handouts.",
    ),
    _permission(
        key="team.roster.manage",
        scope=ScopeType.TEAM,
        label="Manage roster",
        description="Sign, release and edit players on the team roster.",
    ),
    _permission(
        key="team.stats.manage",
        scope=ScopeType.TEAM,
        label="Manage statistics",
        description="Enter game statistics for the team.",
    ),
    _permission(
        key="team.photos.manage",
        scope=ScopeType.TEAM,
        label="Manage team photos",
        description="Upload and approve photos in the team gallery.",
    ),
)

PERMISSION_REGISTRY: dict[str, PermissionDef] = {perm.key: perm for perm in PERMISSIONS}


ROLES: tuple[RoleDef, ...] = (
    RoleDef(
        id=RoleId.ADMINISTRATOR,
        name="Administrator",
        scope_type=ScopeType.GLOBAL,
        description="Platform operator with every permission in every account.",
        permissions=(WILDCARD_PERMISSION,),
        implies=(RoleId.ACCOUNT_ADMIN,),
    ),
    RoleDef(
        id=RoleId.ACCOUNT_ADMIN,
        name="AccountAdmin",
        scope_type=ScopeType.ACCOUNT,
        description="Runs one account: contacts, roles, seasons, games.",
        permissions=(
            "account.manage",
            "account.contacts.manage",
            "account.roles.manage",
            "account.games.manage",
            "account.seasons.manage",
            "account.communications.manage",
            "workout.manage",
            "player-classified.manage",
        ),
        implies=(RoleId.LEAGUE_ADMIN, RoleId.ACCOUNT_PHOTO_ADMIN),
        label="Account Admin",
    ),
    RoleDef(
        id=RoleId.ACCOUNT_PHOTO_ADMIN,
        name="AccountPhotoAdmin",
        scope_type=ScopeType.ACCOUNT,
        description="Curates photo galleries for the whole account.",
        permissions=("account.photos.manage",),
        label="Account Photo Admin",
    ),
    RoleDef(
        id=RoleId.LEAGUE_ADMIN,
        name="LeagueAdmin",
        scope_type=ScopeType.LEAGUE,
        description="Runs one league for the current season.",
        permissions=("league.manage", "league.teams.manage", "league.games.manage"),
        implies=(RoleId.TEAM_ADMIN,),
    ),
    RoleDef(
        id=RoleId.TEAM_ADMIN,
        name="TeamAdmin",
        scope_type=ScopeType.TEAM,
        description="Manages one team season: roster, stats and announcements.",
        permissions=("team.manage", "team.roster.manage", "team.stats.manage"),
        implies=(RoleId.TEAM_PHOTO_ADMIN,),
    ),
    RoleDef(
        id=RoleId.TEAM_PHOTO_ADMIN,
        name="TeamPhotoAdmin",
        scope_type=ScopeType.TEAM,
        description="Curates the photo gallery of one team season.",
        permissions=("team.photos.manage",),
    ),
)

__all__ = [
    "PERMISSIONS",
    "PERMISSION_REGISTRY",
    "ROLES",
    "WILDCARD_PERMISSION",
]
