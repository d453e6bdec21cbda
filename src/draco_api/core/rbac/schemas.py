"""Pydantic models exchanged with callers of the role service."""

from __future__ import annotations

from pydantic import Field

from draco_api.common.schema import BaseSchema
from draco_api.core.rbac.types import ContactRoleGrant


class RoleAssignmentCreate(BaseSchema):
    """Payload for granting a contextual role (``{"roleId": ..., "roleData": ...}``)."""

    role_id: str = Field(min_length=1)
    role_data: int = Field(gt=0)


class ContactRoleRead(BaseSchema):
    """A contextual grant with its resolved display label."""

    id: int | None = None
    contact_id: int
    role_id: str
    role_name: str | None = None
    role_data: int
    account_id: int
    context_name: str | None = None
    automatic: bool = False

    @classmethod
    def from_grant(
        cls,
        grant: ContactRoleGrant,
        *,
        role_name: str | None = None,
        context_name: str | None = None,
    ) -> ContactRoleRead:
        return cls(
            id=grant.id,
            contact_id=grant.contact_id,
            role_id=grant.role_id,
            role_name=role_name,
            role_data=grant.role_data,
            account_id=grant.account_id,
            context_name=context_name,
            automatic=grant.automatic,
        )


class AutomaticRoleHolders(BaseSchema):
    """Contacts holding roles implicitly: the account owner and current team managers."""

    account_owner_contact_id: int
    account_owner_user_id: str | None = None
    team_managers: list[ContactRoleRead] = Field(default_factory=list)


__all__ = ["AutomaticRoleHolders", "ContactRoleRead", "RoleAssignmentCreate"]
