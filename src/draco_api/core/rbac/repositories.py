"""Storage collaborators consumed by role resolution.

The SQLAlchemy implementations live in ``features/roles/repository.py``;
tests substitute in-memory versions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class ContactRecord:
    id: int
    account_id: int
    user_id: str | None
    first_name: str = ""
    last_name: str = ""


@dataclass(frozen=True, slots=True)
class ContactRoleRow:
    id: int
    contact_id: int
    role_id: str
    role_data: int
    account_id: int


@dataclass(frozen=True, slots=True)
class TeamSeasonRecord:
    id: int
    name: str
    season_id: int
    league_season_id: int | None = None


@dataclass(frozen=True, slots=True)
class LeagueSeasonRecord:
    id: int
    name: str
    season_id: int


@dataclass(frozen=True, slots=True)
class TeamManagerRecord:
    contact_id: int
    team_season_id: int
    team_name: str


class RoleGrantRepository(Protocol):
    def list_global_role_ids(self, user_id: str) -> list[str]: ...

    def list_contact_grants(self, contact_id: int, account_id: int) -> list[ContactRoleRow]: ...

    def list_grants_for_role(self, role_id: str, account_id: int) -> list[ContactRoleRow]: ...

    def find_grant(
        self, *, contact_id: int, role_id: str, role_data: int, account_id: int
    ) -> ContactRoleRow | None: ...

    def create_grant(
        self, *, contact_id: int, role_id: str, role_data: int, account_id: int
    ) -> ContactRoleRow:
        """Persist a grant; raise ``RoleConflictError`` if the tuple already exists."""
        ...

    def delete_grant(
        self, *, contact_id: int, role_id: str, role_data: int, account_id: int
    ) -> ContactRoleRow | None: ...

    def get_role_name(self, role_id: str) -> str | None: ...

    def get_role_id(self, role_name: str) -> str | None: ...

    def upsert_role(self, role_id: str, role_name: str) -> bool:
        """Insert or rename a role row; return ``True`` when something changed."""
        ...


class ContactRepository(Protocol):
    def get_contact_for_user(self, user_id: str, account_id: int) -> ContactRecord | None: ...

    def get_contact(self, contact_id: int, account_id: int) -> ContactRecord | None: ...

    def is_account_owner(self, user_id: str, account_id: int) -> bool: ...

    def get_account_owner_contact(self, account_id: int) -> ContactRecord | None: ...


class SeasonRepository(Protocol):
    def get_current_season_id(self, account_id: int) -> int | None: ...


class TeamRepository(Protocol):
    def get_team_season(self, team_season_id: int, season_id: int) -> TeamSeasonRecord | None: ...

    def list_managed_team_season_ids(self, contact_id: int, season_id: int) -> list[int]: ...

    def list_team_managers(self, season_id: int) -> list[TeamManagerRecord]: ...


class LeagueRepository(Protocol):
    def get_league_season(
        self, league_season_id: int, season_id: int
    ) -> LeagueSeasonRecord | None: ...


__all__ = [
    "ContactRecord",
    "ContactRepository",
    "ContactRoleRow",
    "LeagueRepository",
    "LeagueSeasonRecord",
    "RoleGrantRepository",
    "SeasonRepository",
    "TeamManagerRecord",
    "TeamRepository",
    "TeamSeasonRecord",
]
