"""Interface for role resolution consumed by guards and feature modules."""

from __future__ import annotations

from draco_api.core.rbac.schemas import (
    AutomaticRoleHolders,
    ContactRoleRead,
    RoleAssignmentCreate,
)
from draco_api.core.rbac.types import ContactRoleGrant, RoleCheckResult, RoleContext, UserRoles


class RoleServiceInterface:
    """Interface describing role resolution and grant management.

    The implementation lives in ``features/roles/service.py``.
    """

    def get_user_roles(  # pragma: no cover - interface only
        self,
        user_id: str,
        account_id: int | None = None,
    ) -> UserRoles:
        raise NotImplementedError

    def has_role(  # pragma: no cover - interface only
        self,
        user_id: str,
        role_id: str,
        context: RoleContext,
    ) -> RoleCheckResult:
        raise NotImplementedError

    def has_role_or_higher(  # pragma: no cover - interface only
        self,
        user_id: str,
        required_role: str,
        context: RoleContext,
    ) -> bool:
        raise NotImplementedError

    def has_permission(  # pragma: no cover - interface only
        self,
        user_id: str,
        permission: str,
        context: RoleContext,
    ) -> bool:
        raise NotImplementedError

    def assign_role(  # pragma: no cover - interface only
        self,
        account_id: int,
        contact_id: int,
        assignment: RoleAssignmentCreate,
    ) -> ContactRoleRead:
        raise NotImplementedError

    def remove_role(  # pragma: no cover - interface only
        self,
        contact_id: int,
        role_id: str,
        role_data: int,
        account_id: int,
    ) -> ContactRoleGrant:
        raise NotImplementedError

    def get_users_with_role(  # pragma: no cover - interface only
        self,
        role_id: str,
        account_id: int,
    ) -> list[ContactRoleGrant]:
        raise NotImplementedError

    def get_automatic_role_holders(  # pragma: no cover - interface only
        self,
        account_id: int,
    ) -> AutomaticRoleHolders:
        raise NotImplementedError

    def get_role_name(self, role_id: str) -> str | None:  # pragma: no cover - interface only
        raise NotImplementedError

    def get_role_id(self, role_name: str) -> str | None:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = ["RoleServiceInterface"]
