"""Role resolution and contextual grant management."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from draco_api.common.logging import log_context
from draco_api.core.rbac.catalog import RoleCatalog
from draco_api.core.rbac.errors import (
    RoleConflictError,
    RoleNotFoundError,
    RoleValidationError,
)
from draco_api.core.rbac.repositories import (
    ContactRecord,
    ContactRepository,
    ContactRoleRow,
    LeagueRepository,
    RoleGrantRepository,
    SeasonRepository,
    TeamRepository,
)
from draco_api.core.rbac.schemas import (
    AutomaticRoleHolders,
    ContactRoleRead,
    RoleAssignmentCreate,
)
from draco_api.core.rbac.service_interface import RoleServiceInterface
from draco_api.core.rbac.types import (
    ContactRoleGrant,
    RoleCheckResult,
    RoleContext,
    RoleDef,
    RoleId,
    RoleLevel,
    ScopeType,
    TeamGrant,
    UserRoles,
    decode_grant_scope,
)

logger = logging.getLogger(__name__)


class RoleService(RoleServiceInterface):
    """Answer role/permission questions and grant or revoke contextual roles.

    The catalog is injected and never mutated; every call reads grants fresh
    from the repositories, so one instance can serve a whole request.
    """

    def __init__(
        self,
        *,
        catalog: RoleCatalog,
        grants: RoleGrantRepository,
        contacts: ContactRepository,
        seasons: SeasonRepository,
        teams: TeamRepository,
        leagues: LeagueRepository,
        synthesize_manager_roles: bool = True,
    ) -> None:
        self._catalog = catalog
        self._grants = grants
        self._contacts = contacts
        self._seasons = seasons
        self._teams = teams
        self._leagues = leagues
        self._synthesize_manager_roles = synthesize_manager_roles

    @classmethod
    def from_session(
        cls,
        session: Session,
        *,
        catalog: RoleCatalog,
        synthesize_manager_roles: bool = True,
    ) -> RoleService:
        """Build a service backed by the SQLAlchemy repositories."""

        from draco_api.features.roles.repository import (
            SqlContactRepository,
            SqlLeagueRepository,
            SqlRoleGrantRepository,
            SqlSeasonRepository,
            SqlTeamRepository,
        )

        return cls(
            catalog=catalog,
            grants=SqlRoleGrantRepository(session),
            contacts=SqlContactRepository(session),
            seasons=SqlSeasonRepository(session),
            teams=SqlTeamRepository(session),
            leagues=SqlLeagueRepository(session),
            synthesize_manager_roles=synthesize_manager_roles,
        )

    @property
    def catalog(self) -> RoleCatalog:
        return self._catalog

    @property
    def contacts(self) -> ContactRepository:
        return self._contacts

    # ------------- resolution --------------------

    def get_user_roles(self, user_id: str, account_id: int | None = None) -> UserRoles:
        global_roles = tuple(self._grants.list_global_role_ids(user_id))
        if account_id is None:
            return UserRoles(global_roles=global_roles)

        contact = self._contacts.get_contact_for_user(user_id, account_id)
        if contact is None:
            return UserRoles(global_roles=global_roles)

        grants = [
            self._to_grant(row) for row in self._grants.list_contact_grants(contact.id, account_id)
        ]
        if self._synthesize_manager_roles:
            grants.extend(self._manager_grants(contact, grants))
        return UserRoles(global_roles=global_roles, contact_roles=tuple(grants))

    def has_role(self, user_id: str, role_id: str, context: RoleContext) -> RoleCheckResult:
        roles = self.get_user_roles(user_id, context.account_id)

        if role_id in roles.global_roles:
            return RoleCheckResult(has_role=True, role_level=RoleLevel.GLOBAL, context=context)

        level = RoleLevel.for_scope(self._catalog.scope_of(role_id))
        for grant in roles.contact_roles:
            if grant.role_id == role_id and grant.matches(context):
                return RoleCheckResult(has_role=True, role_level=level, context=context)

        if self._catalog.has_role_or_higher(roles.context_valid_roles(context), role_id):
            return RoleCheckResult(has_role=True, role_level=level, context=context)

        return RoleCheckResult(has_role=False, role_level=RoleLevel.NONE, context=context)

    def has_role_or_higher(self, user_id: str, required_role: str, context: RoleContext) -> bool:
        roles = self.get_user_roles(user_id, context.account_id)
        return self._catalog.has_role_or_higher(roles.context_valid_roles(context), required_role)

    def has_permission(self, user_id: str, permission: str, context: RoleContext) -> bool:
        roles = self.get_user_roles(user_id, context.account_id)
        return any(
            self._catalog.grants_permission(role_id, permission)
            for role_id in roles.context_valid_roles(context)
        )

    # ------------- grants ------------------------

    def assign_role(
        self,
        account_id: int,
        contact_id: int,
        assignment: RoleAssignmentCreate,
    ) -> ContactRoleRead:
        role_id = assignment.role_id
        role_data = assignment.role_data
        extra = log_context(
            account_id=account_id,
            contact_id=contact_id,
            role_id=role_id,
            role_data=role_data,
        )

        contact = self._contacts.get_contact(contact_id, account_id)
        if contact is None:
            raise RoleNotFoundError("Contact not found in this account")

        if contact.user_id is not None and self._contacts.is_account_owner(
            contact.user_id, account_id
        ):
            logger.debug("rbac.assign.owner_rejected", extra=extra)
            raise RoleValidationError(
                "The account owner already holds every permission in the account"
            )

        role = self._catalog.get(role_id)
        season_id = self._seasons.get_current_season_id(account_id)

        if (
            role is not None
            and role.scope_type is ScopeType.TEAM
            and season_id is not None
            and role_data in self._teams.list_managed_team_season_ids(contact_id, season_id)
        ):
            raise RoleValidationError(
                "Contact is already a manager of this team and holds its team roles"
            )

        role = self._validate_role_data(role, role_id, role_data, account_id, season_id)

        existing = self._grants.find_grant(
            contact_id=contact_id,
            role_id=role_id,
            role_data=role_data,
            account_id=account_id,
        )
        if existing is not None:
            logger.debug("rbac.assign.conflict", extra=extra)
            raise RoleConflictError("Contact already holds this role")

        row = self._grants.create_grant(
            contact_id=contact_id,
            role_id=role_id,
            role_data=role_data,
            account_id=account_id,
        )
        logger.info("rbac.assign.created", extra=extra)
        return ContactRoleRead.from_grant(
            self._to_grant(row),
            role_name=role.name,
            context_name=self._resolve_label(role, role_data, season_id),
        )

    def remove_role(
        self,
        contact_id: int,
        role_id: str,
        role_data: int,
        account_id: int,
    ) -> ContactRoleGrant:
        row = self._grants.delete_grant(
            contact_id=contact_id,
            role_id=role_id,
            role_data=role_data,
            account_id=account_id,
        )
        if row is None:
            raise RoleNotFoundError("Role assignment not found")
        logger.info(
            "rbac.remove.deleted",
            extra=log_context(
                account_id=account_id,
                contact_id=contact_id,
                role_id=role_id,
                role_data=role_data,
            ),
        )
        return self._to_grant(row)

    def get_users_with_role(self, role_id: str, account_id: int) -> list[ContactRoleGrant]:
        rows = self._grants.list_grants_for_role(role_id, account_id)
        return [self._to_grant(row) for row in rows]

    def get_automatic_role_holders(self, account_id: int) -> AutomaticRoleHolders:
        owner = self._contacts.get_account_owner_contact(account_id)
        if owner is None:
            raise RoleNotFoundError("Account owner not found")

        managers: list[ContactRoleRead] = []
        season_id = self._seasons.get_current_season_id(account_id)
        if season_id is not None:
            team_admin = self._catalog.get(RoleId.TEAM_ADMIN)
            for manager in self._teams.list_team_managers(season_id):
                grant = self._manager_grant(manager.contact_id, manager.team_season_id, account_id)
                managers.append(
                    ContactRoleRead.from_grant(
                        grant,
                        role_name=team_admin.name if team_admin else None,
                        context_name=manager.team_name,
                    )
                )

        return AutomaticRoleHolders(
            account_owner_contact_id=owner.id,
            account_owner_user_id=owner.user_id,
            team_managers=managers,
        )

    # ------------- reference lookups -------------

    def get_role_name(self, role_id: str) -> str | None:
        return self._grants.get_role_name(role_id)

    def get_role_id(self, role_name: str) -> str | None:
        return self._grants.get_role_id(role_name)

    def sync_role_registry(self) -> int:
        """Ensure every catalog role exists in storage; return the number changed."""

        logger.debug("rbac.roles.sync.start")
        changed = sum(1 for role in self._catalog if self._grants.upsert_role(role.id, role.name))
        logger.info("rbac.roles.sync.success", extra={"changed": changed})
        return changed

    # ------------- internals ---------------------

    def _to_grant(self, row: ContactRoleRow) -> ContactRoleGrant:
        scope_type = self._catalog.scope_of(row.role_id)
        scope = (
            decode_grant_scope(scope_type, role_data=row.role_data, account_id=row.account_id)
            if scope_type is not None
            else None
        )
        return ContactRoleGrant(
            id=row.id,
            contact_id=row.contact_id,
            role_id=row.role_id,
            role_data=row.role_data,
            account_id=row.account_id,
            scope=scope,
        )

    def _manager_grant(
        self, contact_id: int, team_season_id: int, account_id: int
    ) -> ContactRoleGrant:
        return ContactRoleGrant(
            contact_id=contact_id,
            role_id=RoleId.TEAM_ADMIN,
            role_data=team_season_id,
            account_id=account_id,
            scope=TeamGrant(team_season_id=team_season_id),
            automatic=True,
        )

    def _manager_grants(
        self,
        contact: ContactRecord,
        explicit: list[ContactRoleGrant],
    ) -> list[ContactRoleGrant]:
        season_id = self._seasons.get_current_season_id(contact.account_id)
        if season_id is None:
            return []
        covered = {grant.role_data for grant in explicit if grant.role_id == RoleId.TEAM_ADMIN}
        return [
            self._manager_grant(contact.id, team_season_id, contact.account_id)
            for team_season_id in self._teams.list_managed_team_season_ids(contact.id, season_id)
            if team_season_id not in covered
        ]

    def _validate_role_data(
        self,
        role: RoleDef | None,
        role_id: str,
        role_data: int,
        account_id: int,
        season_id: int | None,
    ) -> RoleDef:
        if role is None:
            raise RoleValidationError(f"Unknown role '{role_id}'")

        match role.scope_type:
            case ScopeType.GLOBAL:
                raise RoleValidationError(f"{role.name} is a global role and cannot be granted")
            case ScopeType.ACCOUNT:
                if role_data != account_id:
                    raise RoleValidationError(
                        f"{role.name} requires roleData to equal the account id"
                    )
            case ScopeType.LEAGUE:
                if season_id is None:
                    raise RoleValidationError("Account has no current season")
                if self._leagues.get_league_season(role_data, season_id) is None:
                    raise RoleValidationError("League not found in the current season")
            case ScopeType.TEAM:
                if season_id is None:
                    raise RoleValidationError("Account has no current season")
                if self._teams.get_team_season(role_data, season_id) is None:
                    raise RoleValidationError("Team not found in the current season")
        return role

    def _resolve_label(self, role: RoleDef, role_data: int, season_id: int | None) -> str | None:
        if role.scope_type is ScopeType.ACCOUNT:
            return role.label or role.name
        if season_id is None:
            return None
        try:
            if role.scope_type is ScopeType.TEAM:
                team = self._teams.get_team_season(role_data, season_id)
                return team.name if team is not None else None
            if role.scope_type is ScopeType.LEAGUE:
                league = self._leagues.get_league_season(role_data, season_id)
                return league.name if league is not None else None
        except Exception:
            logger.warning(
                "rbac.assign.label_unresolved",
                extra=log_context(role_id=role.id, role_data=role_data),
                exc_info=True,
            )
        return None


__all__ = ["RoleService"]
