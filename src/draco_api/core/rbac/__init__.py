"""Role catalog, context resolution and boundary guards."""

from .catalog import RoleCatalog, default_catalog
from .context import ContextSources, extract_role_context
from .errors import (
    RoleCatalogError,
    RoleConflictError,
    RoleError,
    RoleNotFoundError,
    RoleValidationError,
)
from .guards import DenyReason, GuardDecision, GuardRequest, RouteGuards, all_of, first_allowed
from .registry import PERMISSION_REGISTRY, PERMISSIONS, ROLES, WILDCARD_PERMISSION
from .service_interface import RoleServiceInterface
from .types import (
    AccountGrant,
    ContactRoleGrant,
    GlobalGrant,
    LeagueGrant,
    RoleCheckResult,
    RoleContext,
    RoleId,
    RoleLevel,
    ScopeType,
    TeamGrant,
    UserRoles,
)

__all__ = [
    "PERMISSIONS",
    "PERMISSION_REGISTRY",
    "ROLES",
    "WILDCARD_PERMISSION",
    "AccountGrant",
    "ContactRoleGrant",
    "ContextSources",
    "DenyReason",
    "GlobalGrant",
    "GuardDecision",
    "GuardRequest",
    "LeagueGrant",
    "RoleCatalog",
    "RoleCatalogError",
    "RoleCheckResult",
    "RoleConflictError",
    "RoleContext",
    "RoleError",
    "RoleId",
    "RoleLevel",
    "RoleNotFoundError",
    "RoleServiceInterface",
    "RoleValidationError",
    "RouteGuards",
    "ScopeType",
    "TeamGrant",
    "UserRoles",
    "all_of",
    "default_catalog",
    "extract_role_context",
    "first_allowed",
]
