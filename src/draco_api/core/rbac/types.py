"""RBAC type definitions used across the stack.

Contextual grants carry a scope payload whose meaning depends on the role's
scope. Instead of an overloaded integer, each grant holds one of the
``GlobalGrant`` / ``AccountGrant`` / ``TeamGrant`` / ``LeagueGrant`` variants
and each variant knows which context field it matches against.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import ClassVar


class ScopeType(str, enum.Enum):
    """Scopes a role can be bound to."""

    GLOBAL = "global"
    ACCOUNT = "account"
    LEAGUE = "league"
    TEAM = "team"


class RoleLevel(str, enum.Enum):
    """Level at which a role check was satisfied."""

    GLOBAL = "global"
    ACCOUNT = "account"
    LEAGUE = "league"
    TEAM = "team"
    NONE = "none"

    @classmethod
    def for_scope(cls, scope: ScopeType | None) -> RoleLevel:
        if scope is None:
            return cls.NONE
        return cls(scope.value)


class RoleId:
    """Stable identifiers of the built-in roles (plain strings, as stored)."""

    ADMINISTRATOR = "administrator"
    ACCOUNT_ADMIN = "account-admin"
    ACCOUNT_PHOTO_ADMIN = "account-photo-admin"
    LEAGUE_ADMIN = "league-admin"
    TEAM_ADMIN = "team-admin"
    TEAM_PHOTO_ADMIN = "team-photo-admin"


@dataclass(frozen=True)
class PermissionDef:
    """Static permission definition."""

    key: str
    scope_type: ScopeType
    label: str
    description: str


@dataclass(frozen=True)
class RoleDef:
    """Static role definition: permissions plus direct hierarchy edges."""

    id: str
    name: str
    scope_type: ScopeType
    description: str
    permissions: tuple[str, ...]
    implies: tuple[str, ...] = ()
    label: str | None = None


@dataclass(frozen=True, slots=True)
class RoleContext:
    """Scope being evaluated by a role or permission check. Never persisted."""

    account_id: int | None = None
    team_id: int | None = None
    league_id: int | None = None
    season_id: int | None = None

    def merged_with(self, overrides: RoleContext | None) -> RoleContext:
        """Return a copy where every field supplied by ``overrides`` wins."""

        if overrides is None:
            return self
        changes = {
            name: value
            for name, value in (
                ("account_id", overrides.account_id),
                ("team_id", overrides.team_id),
                ("league_id", overrides.league_id),
                ("season_id", overrides.season_id),
            )
            if value is not None
        }
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class GlobalGrant:
    """A global role stored on a contact row.

    Global roles only count through user-level assignments, so this never matches.
    """

    scope_type: ClassVar[ScopeType] = ScopeType.GLOBAL

    def matches(self, context: RoleContext) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class AccountGrant:
    account_id: int
    scope_type: ClassVar[ScopeType] = ScopeType.ACCOUNT

    def matches(self, context: RoleContext) -> bool:
        return context.account_id is not None and self.account_id == context.account_id


@dataclass(frozen=True, slots=True)
class TeamGrant:
    team_season_id: int
    scope_type: ClassVar[ScopeType] = ScopeType.TEAM

    def matches(self, context: RoleContext) -> bool:
        return context.team_id is not None and self.team_season_id == context.team_id


@dataclass(frozen=True, slots=True)
class LeagueGrant:
    league_season_id: int
    scope_type: ClassVar[ScopeType] = ScopeType.LEAGUE

    def matches(self, context: RoleContext) -> bool:
        return context.league_id is not None and self.league_season_id == context.league_id


type GrantScope = GlobalGrant | AccountGrant | TeamGrant | LeagueGrant


def decode_grant_scope(scope_type: ScopeType, *, role_data: int, account_id: int) -> GrantScope:
    """Interpret a stored ``role_data`` integer for a role of ``scope_type``.

    Account-scoped grants are bound to the grant's own account, independent of
    what was stored in ``role_data``.
    """

    match scope_type:
        case ScopeType.GLOBAL:
            return GlobalGrant()
        case ScopeType.ACCOUNT:
            return AccountGrant(account_id=account_id)
        case ScopeType.TEAM:
            return TeamGrant(team_season_id=role_data)
        case ScopeType.LEAGUE:
            return LeagueGrant(league_season_id=role_data)
    raise ValueError(f"Unsupported scope type: {scope_type!r}")


@dataclass(frozen=True, slots=True)
class ContactRoleGrant:
    """A contextual role held by a contact inside one account.

    ``scope`` is ``None`` when the stored role id is unknown to the catalog;
    such grants never match any context. ``automatic`` grants are derived from
    team-manager assignments and have no storage row.
    """

    contact_id: int
    role_id: str
    role_data: int
    account_id: int
    scope: GrantScope | None
    id: int | None = None
    automatic: bool = False

    def matches(self, context: RoleContext) -> bool:
        return self.scope is not None and self.scope.matches(context)


@dataclass(frozen=True, slots=True)
class UserRoles:
    """Roles held by a principal: tenant-independent plus account-scoped."""

    global_roles: tuple[str, ...] = ()
    contact_roles: tuple[ContactRoleGrant, ...] = ()

    def context_valid_roles(self, context: RoleContext) -> set[str]:
        """Global roles plus contact roles whose scope matches ``context``."""

        held = set(self.global_roles)
        held.update(grant.role_id for grant in self.contact_roles if grant.matches(context))
        return held


@dataclass(frozen=True, slots=True)
class RoleCheckResult:
    has_role: bool
    role_level: RoleLevel
    context: RoleContext


__all__ = [
    "AccountGrant",
    "ContactRoleGrant",
    "GlobalGrant",
    "GrantScope",
    "LeagueGrant",
    "PermissionDef",
    "RoleCheckResult",
    "RoleContext",
    "RoleDef",
    "RoleId",
    "RoleLevel",
    "ScopeType",
    "TeamGrant",
    "UserRoles",
    "decode_grant_scope",
]
