"""SQLAlchemy implementations of the role-resolution storage collaborators."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from draco_api.core.rbac.errors import RoleConflictError
from draco_api.core.rbac.repositories import (
    ContactRecord,
    ContactRoleRow,
    LeagueSeasonRecord,
    TeamManagerRecord,
    TeamSeasonRecord,
)
from draco_db.models import (
    Account,
    Contact,
    ContactRole,
    CurrentSeason,
    League,
    LeagueSeason,
    Role,
    TeamSeason,
    TeamSeasonManager,
    UserRole,
)

logger = logging.getLogger(__name__)


def _grant_row(model: ContactRole) -> ContactRoleRow:
    return ContactRoleRow(
        id=model.id,
        contact_id=model.contact_id,
        role_id=model.role_id,
        role_data=model.role_data,
        account_id=model.account_id,
    )


def _contact_record(model: Contact) -> ContactRecord:
    return ContactRecord(
        id=model.id,
        account_id=model.account_id,
        user_id=model.user_id,
        first_name=model.first_name,
        last_name=model.last_name,
    )


class SqlRoleGrantRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_global_role_ids(self, user_id: str) -> list[str]:
        stmt = (
            select(UserRole.role_id).where(UserRole.user_id == user_id).order_by(UserRole.role_id)
        )
        return list(self._session.execute(stmt).scalars())

    def list_contact_grants(self, contact_id: int, account_id: int) -> list[ContactRoleRow]:
        stmt = (
            select(ContactRole)
            .where(ContactRole.contact_id == contact_id, ContactRole.account_id == account_id)
            .order_by(ContactRole.id)
        )
        return [_grant_row(model) for model in self._session.execute(stmt).scalars()]

    def list_grants_for_role(self, role_id: str, account_id: int) -> list[ContactRoleRow]:
        stmt = (
            select(ContactRole)
            .where(ContactRole.role_id == role_id, ContactRole.account_id == account_id)
            .order_by(ContactRole.contact_id, ContactRole.role_data)
        )
        return [_grant_row(model) for model in self._session.execute(stmt).scalars()]

    def find_grant(
        self, *, contact_id: int, role_id: str, role_data: int, account_id: int
    ) -> ContactRoleRow | None:
        model = self._find(
            contact_id=contact_id, role_id=role_id, role_data=role_data, account_id=account_id
        )
        return _grant_row(model) if model is not None else None

    def create_grant(
        self, *, contact_id: int, role_id: str, role_data: int, account_id: int
    ) -> ContactRoleRow:
        model = ContactRole(
            contact_id=contact_id,
            role_id=role_id,
            role_data=role_data,
            account_id=account_id,
        )
        self._session.add(model)
        try:
            self._session.flush([model])
        except IntegrityError as exc:
            logger.debug(
                "rbac.assign.conflict",
                extra={
                    "contact_id": contact_id,
                    "role_id": role_id,
                    "role_data": role_data,
                    "account_id": account_id,
                },
            )
            raise RoleConflictError("Contact already holds this role") from exc
        return _grant_row(model)

    def delete_grant(
        self, *, contact_id: int, role_id: str, role_data: int, account_id: int
    ) -> ContactRoleRow | None:
        model = self._find(
            contact_id=contact_id, role_id=role_id, role_data=role_data, account_id=account_id
        )
        if model is None:
            return None
        row = _grant_row(model)
        self._session.delete(model)
        self._session.flush([model])
        return row

    def get_role_name(self, role_id: str) -> str | None:
        stmt = select(Role.name).where(Role.id == role_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_role_id(self, role_name: str) -> str | None:
        stmt = select(Role.id).where(Role.name == role_name)
        return self._session.execute(stmt).scalar_one_or_none()

    def upsert_role(self, role_id: str, role_name: str) -> bool:
        role = self._session.get(Role, role_id)
        if role is None:
            self._session.add(Role(id=role_id, name=role_name))
            self._session.flush()
            return True
        if role.name != role_name:
            role.name = role_name
            self._session.flush()
            return True
        return False

    def _find(
        self, *, contact_id: int, role_id: str, role_data: int, account_id: int
    ) -> ContactRole | None:
        stmt = select(ContactRole).where(
            ContactRole.contact_id == contact_id,
            ContactRole.role_id == role_id,
            ContactRole.role_data == role_data,
            ContactRole.account_id == account_id,
        )
        return self._session.execute(stmt).scalar_one_or_none()


class SqlContactRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_contact_for_user(self, user_id: str, account_id: int) -> ContactRecord | None:
        stmt = select(Contact).where(Contact.user_id == user_id, Contact.account_id == account_id)
        model = self._session.execute(stmt).scalars().first()
        return _contact_record(model) if model is not None else None

    def get_contact(self, contact_id: int, account_id: int) -> ContactRecord | None:
        stmt = select(Contact).where(Contact.id == contact_id, Contact.account_id == account_id)
        model = self._session.execute(stmt).scalar_one_or_none()
        return _contact_record(model) if model is not None else None

    def is_account_owner(self, user_id: str, account_id: int) -> bool:
        stmt = select(Account.id).where(Account.id == account_id, Account.owner_user_id == user_id)
        return self._session.execute(stmt).first() is not None

    def get_account_owner_contact(self, account_id: int) -> ContactRecord | None:
        stmt = (
            select(Contact)
            .join(Account, Account.id == Contact.account_id)
            .where(Account.id == account_id, Contact.user_id == Account.owner_user_id)
        )
        model = self._session.execute(stmt).scalars().first()
        return _contact_record(model) if model is not None else None


class SqlSeasonRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_current_season_id(self, account_id: int) -> int | None:
        stmt = select(CurrentSeason.season_id).where(CurrentSeason.account_id == account_id)
        return self._session.execute(stmt).scalar_one_or_none()


class SqlTeamRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_team_season(self, team_season_id: int, season_id: int) -> TeamSeasonRecord | None:
        stmt = (
            select(TeamSeason)
            .join(LeagueSeason, LeagueSeason.id == TeamSeason.league_season_id)
            .where(TeamSeason.id == team_season_id, LeagueSeason.season_id == season_id)
        )
        model = self._session.execute(stmt).scalar_one_or_none()
        if model is None:
            return None
        return TeamSeasonRecord(
            id=model.id,
            name=model.name,
            season_id=season_id,
            league_season_id=model.league_season_id,
        )

    def list_managed_team_season_ids(self, contact_id: int, season_id: int) -> list[int]:
        stmt = (
            select(TeamSeasonManager.team_season_id)
            .join(TeamSeason, TeamSeason.id == TeamSeasonManager.team_season_id)
            .join(LeagueSeason, LeagueSeason.id == TeamSeason.league_season_id)
            .where(TeamSeasonManager.contact_id == contact_id, LeagueSeason.season_id == season_id)
            .order_by(TeamSeasonManager.team_season_id)
            .distinct()
        )
        return list(self._session.execute(stmt).scalars())

    def list_team_managers(self, season_id: int) -> list[TeamManagerRecord]:
        stmt = (
            select(TeamSeasonManager.contact_id, TeamSeason.id, TeamSeason.name)
            .join(TeamSeason, TeamSeason.id == TeamSeasonManager.team_season_id)
            .join(LeagueSeason, LeagueSeason.id == TeamSeason.league_season_id)
            .where(LeagueSeason.season_id == season_id)
            .order_by(TeamSeason.name, TeamSeasonManager.contact_id)
        )
        return [
            TeamManagerRecord(contact_id=contact_id, team_season_id=team_season_id, team_name=name)
            for contact_id, team_season_id, name in self._session.execute(stmt)
        ]


class SqlLeagueRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_league_season(self, league_season_id: int, season_id: int) -> LeagueSeasonRecord | None:
        stmt = (
            select(LeagueSeason.id, League.name)
            .join(League, League.id == LeagueSeason.league_id)
            .where(LeagueSeason.id == league_season_id, LeagueSeason.season_id == season_id)
        )
        row = self._session.execute(stmt).first()
        if row is None:
            return None
        return LeagueSeasonRecord(id=row.id, name=row.name, season_id=season_id)


__all__ = [
    "SqlContactRepository",
    "SqlLeagueRepository",
    "SqlRoleGrantRepository",
    "SqlSeasonRepository",
    "SqlTeamRepository",
]
