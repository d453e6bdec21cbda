"""In-memory collaborators and a seeded league world for unit tests."""

from __future__ import annotations

from dataclasses import dataclass, field

from draco_api.core.rbac.catalog import RoleCatalog, default_catalog
from draco_api.core.rbac.errors import RoleConflictError
from draco_api.core.rbac.guards import RouteGuards
from draco_api.core.rbac.repositories import (
    ContactRecord,
    ContactRoleRow,
    LeagueSeasonRecord,
    TeamManagerRecord,
    TeamSeasonRecord,
)
from draco_api.core.rbac.types import RoleId
from draco_api.features.roles.service import RoleService


@dataclass
class InMemoryRbacStore:
    """Implements every repository protocol over plain dicts."""

    owners: dict[int, str | None] = field(default_factory=dict)
    contacts: dict[int, ContactRecord] = field(default_factory=dict)
    global_roles: dict[str, list[str]] = field(default_factory=dict)
    grants: list[ContactRoleRow] = field(default_factory=list)
    roles: dict[str, str] = field(default_factory=dict)
    current_seasons: dict[int, int] = field(default_factory=dict)
    team_seasons: dict[int, TeamSeasonRecord] = field(default_factory=dict)
    league_seasons: dict[int, LeagueSeasonRecord] = field(default_factory=dict)
    managers: list[tuple[int, int]] = field(default_factory=list)
    next_grant_id: int = 1

    # -- seeding helpers --------------------------------------------------

    def add_account(self, account_id: int, owner_user_id: str | None = None) -> None:
        self.owners[account_id] = owner_user_id

    def add_contact(self, contact_id: int, account_id: int, user_id: str | None) -> ContactRecord:
        record = ContactRecord(id=contact_id, account_id=account_id, user_id=user_id)
        self.contacts[contact_id] = record
        return record

    def add_global_role(self, user_id: str, role_id: str) -> None:
        self.global_roles.setdefault(user_id, []).append(role_id)

    def add_grant(self, contact_id: int, role_id: str, role_data: int, account_id: int) -> None:
        self.create_grant(
            contact_id=contact_id, role_id=role_id, role_data=role_data, account_id=account_id
        )

    def add_team_season(
        self, team_season_id: int, name: str, season_id: int, league_season_id: int | None = None
    ) -> None:
        self.team_seasons[team_season_id] = TeamSeasonRecord(
            id=team_season_id,
            name=name,
            season_id=season_id,
            league_season_id=league_season_id,
        )

    def add_league_season(self, league_season_id: int, name: str, season_id: int) -> None:
        self.league_seasons[league_season_id] = LeagueSeasonRecord(
            id=league_season_id, name=name, season_id=season_id
        )

    # -- RoleGrantRepository ----------------------------------------------

    def list_global_role_ids(self, user_id: str) -> list[str]:
        return list(self.global_roles.get(user_id, []))

    def list_contact_grants(self, contact_id: int, account_id: int) -> list[ContactRoleRow]:
        return [g for g in self.grants if g.contact_id == contact_id and g.account_id == account_id]

    def list_grants_for_role(self, role_id: str, account_id: int) -> list[ContactRoleRow]:
        return [g for g in self.grants if g.role_id == role_id and g.account_id == account_id]

    def find_grant(
        self, *, contact_id: int, role_id: str, role_data: int, account_id: int
    ) -> ContactRoleRow | None:
        key = (contact_id, role_id, role_data, account_id)
        for grant in self.grants:
            if (grant.contact_id, grant.role_id, grant.role_data, grant.account_id) == key:
                return grant
        return None

    def create_grant(
        self, *, contact_id: int, role_id: str, role_data: int, account_id: int
    ) -> ContactRoleRow:
        if self.find_grant(
            contact_id=contact_id, role_id=role_id, role_data=role_data, account_id=account_id
        ):
            raise RoleConflictError("duplicate")
        row = ContactRoleRow(
            id=self.next_grant_id,
            contact_id=contact_id,
            role_id=role_id,
            role_data=role_data,
            account_id=account_id,
        )
        self.next_grant_id += 1
        self.grants.append(row)
        return row

    def delete_grant(
        self, *, contact_id: int, role_id: str, role_data: int, account_id: int
    ) -> ContactRoleRow | None:
        row = self.find_grant(
            contact_id=contact_id, role_id=role_id, role_data=role_data, account_id=account_id
        )
        if row is not None:
            self.grants.remove(row)
        return row

    def get_role_name(self, role_id: str) -> str | None:
        return self.roles.get(role_id)

    def get_role_id(self, role_name: str) -> str | None:
        for role_id, name in self.roles.items():
            if name == role_name:
                return role_id
        return None

    def upsert_role(self, role_id: str, role_name: str) -> bool:
        if self.roles.get(role_id) == role_name:
            return False
        self.roles[role_id] = role_name
        return True

    # -- ContactRepository ------------------------------------------------

    def get_contact_for_user(self, user_id: str, account_id: int) -> ContactRecord | None:
        for contact in self.contacts.values():
            if contact.user_id == user_id and contact.account_id == account_id:
                return contact
        return None

    def get_contact(self, contact_id: int, account_id: int) -> ContactRecord | None:
        contact = self.contacts.get(contact_id)
        if contact is None or contact.account_id != account_id:
            return None
        return contact

    def is_account_owner(self, user_id: str, account_id: int) -> bool:
        owner = self.owners.get(account_id)
        return owner is not None and owner == user_id

    def get_account_owner_contact(self, account_id: int) -> ContactRecord | None:
        owner = self.owners.get(account_id)
        if owner is None:
            return None
        return self.get_contact_for_user(owner, account_id)

    # -- SeasonRepository / TeamRepository / LeagueRepository ---------------

    def get_current_season_id(self, account_id: int) -> int | None:
        return self.current_seasons.get(account_id)

    def get_team_season(self, team_season_id: int, season_id: int) -> TeamSeasonRecord | None:
        record = self.team_seasons.get(team_season_id)
        if record is None or record.season_id != season_id:
            return None
        return record

    def list_managed_team_season_ids(self, contact_id: int, season_id: int) -> list[int]:
        return [
            team_season_id
            for manager_id, team_season_id in self.managers
            if manager_id == contact_id
            and team_season_id in self.team_seasons
            and self.team_seasons[team_season_id].season_id == season_id
        ]

    def list_team_managers(self, season_id: int) -> list[TeamManagerRecord]:
        return [
            TeamManagerRecord(
                contact_id=contact_id,
                team_season_id=team_season_id,
                team_name=self.team_seasons[team_season_id].name,
            )
            for contact_id, team_season_id in self.managers
            if self.team_seasons[team_season_id].season_id == season_id
        ]

    def get_league_season(self, league_season_id: int, season_id: int) -> LeagueSeasonRecord | None:
        record = self.league_seasons.get(league_season_id)
        if record is None or record.season_id != season_id:
            return None
        return record


# Seeded ids used across the unit tests.
ACCOUNT = 7
OTHER_ACCOUNT = 42
CURRENT_SEASON = 70
PAST_SEASON = 60
MAJORS = 701
ROCKETS = 101
COMETS = 202
OLD_TEAM = 909

OWNER_CONTACT = 1
COACH_CONTACT = 2
PARENT_CONTACT = 3
MANAGER_CONTACT = 4


def league_world() -> InMemoryRbacStore:
    """Account 7 with a current season, one league and two teams.

    * ``owner-7`` owns the account (contact 1)
    * ``coach`` (contact 2) and ``parent`` (contact 3) have no grants
    * ``manager`` (contact 4) manages the Comets this season
    * ``root`` is a platform Administrator with no contact anywhere
    * account 42 is owned by ``owner-42`` and has no members from account 7
    """

    store = InMemoryRbacStore()
    store.add_account(ACCOUNT, owner_user_id="owner-7")
    store.add_account(OTHER_ACCOUNT, owner_user_id="owner-42")
    store.current_seasons[ACCOUNT] = CURRENT_SEASON
    store.add_league_season(MAJORS, "Majors", CURRENT_SEASON)
    store.add_team_season(ROCKETS, "Rockets", CURRENT_SEASON, MAJORS)
    store.add_team_season(COMETS, "Comets", CURRENT_SEASON, MAJORS)
    store.add_team_season(OLD_TEAM, "Old Timers", PAST_SEASON)

    store.add_contact(OWNER_CONTACT, ACCOUNT, "owner-7")
    store.add_contact(COACH_CONTACT, ACCOUNT, "coach")
    store.add_contact(PARENT_CONTACT, ACCOUNT, "parent")
    store.add_contact(MANAGER_CONTACT, ACCOUNT, "manager")
    store.add_contact(43, OTHER_ACCOUNT, "owner-42")
    store.managers.append((MANAGER_CONTACT, COMETS))

    store.add_global_role("root", RoleId.ADMINISTRATOR)
    return store


def build_service(
    store: InMemoryRbacStore,
    *,
    catalog: RoleCatalog | None = None,
    synthesize_manager_roles: bool = True,
) -> RoleService:
    return RoleService(
        catalog=catalog or default_catalog(),
        grants=store,
        contacts=store,
        seasons=store,
        teams=store,
        leagues=store,
        synthesize_manager_roles=synthesize_manager_roles,
    )


def build_guards(store: InMemoryRbacStore) -> RouteGuards:
    return RouteGuards(build_service(store), store)
