"""Typed errors raised by role resolution and role assignment."""

from __future__ import annotations


class RoleError(Exception):
    """Base class for role-related errors."""


class RoleValidationError(RoleError):
    """Malformed or mismatched role data, or a missing/invalid context value."""


class RoleNotFoundError(RoleError):
    """Target contact, account owner or grant row does not exist."""


class RoleConflictError(RoleError):
    """An identical grant already exists."""


class RoleCatalogError(RoleError):
    """The static role catalog is inconsistent (unknown edge, cycle, ...)."""


__all__ = [
    "RoleCatalogError",
    "RoleConflictError",
    "RoleError",
    "RoleNotFoundError",
    "RoleValidationError",
]
