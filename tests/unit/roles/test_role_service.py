from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from draco_api.core.rbac.context import ContextSources
from draco_api.core.rbac.errors import (
    RoleConflictError,
    RoleNotFoundError,
    RoleValidationError,
)
from draco_api.core.rbac.guards import DenyReason, GuardRequest, RouteGuards
from draco_api.core.rbac.registry import PERMISSIONS, ROLES
from draco_api.core.rbac.schemas import RoleAssignmentCreate
from draco_api.core.rbac.types import RoleContext, RoleId, RoleLevel
from draco_api.features.roles.service import RoleService
from support import (
    ACCOUNT,
    COACH_CONTACT,
    COMETS,
    MAJORS,
    MANAGER_CONTACT,
    OLD_TEAM,
    OTHER_ACCOUNT,
    OWNER_CONTACT,
    PARENT_CONTACT,
    ROCKETS,
    InMemoryRbacStore,
    build_service,
)

ALL_CONTEXTS = [
    RoleContext(),
    RoleContext(account_id=ACCOUNT),
    RoleContext(account_id=OTHER_ACCOUNT, team_id=ROCKETS),
    RoleContext(account_id=ACCOUNT, league_id=MAJORS, season_id=70),
]


def _assign(role_id: str, role_data: int) -> RoleAssignmentCreate:
    return RoleAssignmentCreate(role_id=role_id, role_data=role_data)


# -- resolution ---------------------------------------------------------------


@pytest.mark.parametrize("context", ALL_CONTEXTS)
def test_administrator_holds_every_role_and_permission(
    service: RoleService, context: RoleContext
) -> None:
    for role in ROLES:
        result = service.has_role("root", role.id, context)
        assert result.has_role, role.id
        assert service.has_role_or_higher("root", role.id, context)
    for permission in PERMISSIONS:
        assert service.has_permission("root", permission.key, context), permission.key


def test_global_match_reports_global_level(service: RoleService) -> None:
    result = service.has_role("root", RoleId.ADMINISTRATOR, RoleContext())

    assert result.role_level is RoleLevel.GLOBAL


def test_team_admin_matches_only_its_team(service: RoleService, store: InMemoryRbacStore) -> None:
    store.add_grant(COACH_CONTACT, RoleId.TEAM_ADMIN, ROCKETS, ACCOUNT)

    in_team = RoleContext(account_id=ACCOUNT, team_id=ROCKETS)

    hit = service.has_role("coach", RoleId.TEAM_ADMIN, in_team)
    assert hit.has_role
    assert hit.role_level is RoleLevel.TEAM

    for context in (
        RoleContext(account_id=ACCOUNT, team_id=COMETS),
        RoleContext(account_id=ACCOUNT),
        RoleContext(account_id=OTHER_ACCOUNT, team_id=ROCKETS),
        RoleContext(team_id=ROCKETS),
    ):
        miss = service.has_role("coach", RoleId.TEAM_ADMIN, context)
        assert not miss.has_role, context
        assert miss.role_level is RoleLevel.NONE


def test_league_admin_implies_team_photo_admin_in_league_context(
    service: RoleService, store: InMemoryRbacStore
) -> None:
    store.add_grant(COACH_CONTACT, RoleId.LEAGUE_ADMIN, MAJORS, ACCOUNT)
    in_league = RoleContext(account_id=ACCOUNT, league_id=MAJORS)

    assert service.has_role_or_higher("coach", RoleId.TEAM_PHOTO_ADMIN, in_league)
    assert service.has_role("coach", RoleId.TEAM_PHOTO_ADMIN, in_league).has_role
    assert not service.has_role_or_higher("coach", RoleId.ACCOUNT_ADMIN, in_league)
    assert not service.has_role_or_higher(
        "coach", RoleId.TEAM_PHOTO_ADMIN, RoleContext(account_id=ACCOUNT, league_id=999)
    )


def test_account_admin_reaches_team_roles_through_hierarchy(
    service: RoleService, store: InMemoryRbacStore
) -> None:
    store.add_grant(COACH_CONTACT, RoleId.ACCOUNT_ADMIN, ACCOUNT, ACCOUNT)
    context = RoleContext(account_id=ACCOUNT, team_id=COMETS)

    result = service.has_role("coach", RoleId.TEAM_ADMIN, context)

    assert result.has_role
    assert result.role_level is RoleLevel.TEAM
    assert service.has_permission("coach", "team.roster.manage", context)
    assert not service.has_permission("coach", "team.roster.manage", RoleContext(account_id=42))


def test_get_user_roles_without_account_skips_contact_roles(
    service: RoleService, store: InMemoryRbacStore
) -> None:
    store.add_global_role("coach", RoleId.ADMINISTRATOR)
    store.add_grant(COACH_CONTACT, RoleId.TEAM_ADMIN, ROCKETS, ACCOUNT)

    roles = service.get_user_roles("coach")

    assert roles.global_roles == (RoleId.ADMINISTRATOR,)
    assert roles.contact_roles == ()


def test_unknown_principal_has_no_roles(service: RoleService) -> None:
    roles = service.get_user_roles("nobody", ACCOUNT)

    assert roles.global_roles == ()
    assert roles.contact_roles == ()
    assert not service.has_permission("nobody", "team.manage", RoleContext(account_id=ACCOUNT))


def test_grants_for_unknown_roles_never_match(
    service: RoleService, store: InMemoryRbacStore
) -> None:
    store.add_grant(COACH_CONTACT, "retired-role", ACCOUNT, ACCOUNT)

    roles = service.get_user_roles("coach", ACCOUNT)

    assert roles.contact_roles[0].scope is None
    assert roles.context_valid_roles(RoleContext(account_id=ACCOUNT)) == set()


def test_contact_grant_of_global_role_is_ignored(
    service: RoleService, store: InMemoryRbacStore, guards: RouteGuards
) -> None:
    store.add_grant(COACH_CONTACT, RoleId.ADMINISTRATOR, ACCOUNT, ACCOUNT)
    in_team = RoleContext(account_id=ACCOUNT, team_id=ROCKETS)

    roles = service.get_user_roles("coach", ACCOUNT)
    assert roles.context_valid_roles(in_team) == set()
    assert not service.has_permission("coach", "team.roster.manage", in_team)
    assert not service.has_role("coach", RoleId.TEAM_ADMIN, in_team).has_role

    request = GuardRequest(
        user_id="coach", sources=ContextSources(path={"accountId": ACCOUNT, "teamId": ROCKETS})
    )
    decision = guards.enforce_team_boundary()(request)
    assert decision.reason is DenyReason.FORBIDDEN


# -- team managers --------------------------------------------------------------


def test_current_manager_holds_team_admin(service: RoleService) -> None:
    context = RoleContext(account_id=ACCOUNT, team_id=COMETS)

    result = service.has_role("manager", RoleId.TEAM_ADMIN, context)

    assert result.has_role
    assert service.has_permission("manager", "team.roster.manage", context)
    assert not service.has_role(
        "manager", RoleId.TEAM_ADMIN, RoleContext(account_id=ACCOUNT, team_id=ROCKETS)
    ).has_role


def test_manager_grants_are_marked_automatic(service: RoleService) -> None:
    (grant,) = service.get_user_roles("manager", ACCOUNT).contact_roles

    assert grant.automatic
    assert grant.id is None
    assert grant.role_data == COMETS


def test_explicit_grant_suppresses_duplicate_manager_grant(
    service: RoleService, store: InMemoryRbacStore
) -> None:
    store.add_grant(MANAGER_CONTACT, RoleId.TEAM_ADMIN, COMETS, ACCOUNT)

    grants = service.get_user_roles("manager", ACCOUNT).contact_roles

    assert [g.automatic for g in grants] == [False]


def test_manager_synthesis_can_be_disabled(store: InMemoryRbacStore) -> None:
    service = build_service(store, synthesize_manager_roles=False)

    assert not service.has_role(
        "manager", RoleId.TEAM_ADMIN, RoleContext(account_id=ACCOUNT, team_id=COMETS)
    ).has_role


# -- assign_role ----------------------------------------------------------------


def test_assign_team_role_resolves_team_label(service: RoleService) -> None:
    created = service.assign_role(ACCOUNT, COACH_CONTACT, _assign(RoleId.TEAM_ADMIN, ROCKETS))

    assert created.id is not None
    assert created.role_name == "TeamAdmin"
    assert created.context_name == "Rockets"
    assert created.model_dump()["contextName"] == "Rockets"
    assert service.has_role(
        "coach", RoleId.TEAM_ADMIN, RoleContext(account_id=ACCOUNT, team_id=ROCKETS)
    ).has_role


def test_assign_league_role_resolves_league_label(service: RoleService) -> None:
    created = service.assign_role(ACCOUNT, COACH_CONTACT, _assign(RoleId.LEAGUE_ADMIN, MAJORS))

    assert created.context_name == "Majors"


def test_assign_account_role_uses_fixed_label(service: RoleService) -> None:
    created = service.assign_role(ACCOUNT, COACH_CONTACT, _assign(RoleId.ACCOUNT_ADMIN, ACCOUNT))

    assert created.context_name == "Account Admin"


def test_assign_twice_conflicts(service: RoleService, store: InMemoryRbacStore) -> None:
    assignment = _assign(RoleId.TEAM_ADMIN, ROCKETS)
    service.assign_role(ACCOUNT, COACH_CONTACT, assignment)

    with pytest.raises(RoleConflictError):
        service.assign_role(ACCOUNT, COACH_CONTACT, assignment)
    assert len(store.grants) == 1


def test_assign_rejects_account_owner_even_with_valid_data(service: RoleService) -> None:
    with pytest.raises(RoleValidationError, match="account owner"):
        service.assign_role(ACCOUNT, OWNER_CONTACT, _assign(RoleId.TEAM_ADMIN, ROCKETS))


def test_assign_requires_contact_in_account(service: RoleService) -> None:
    with pytest.raises(RoleNotFoundError):
        service.assign_role(ACCOUNT, 43, _assign(RoleId.TEAM_ADMIN, ROCKETS))


def test_missing_contact_is_checked_before_role_data(service: RoleService) -> None:
    with pytest.raises(RoleNotFoundError):
        service.assign_role(ACCOUNT, 999, _assign("ghost", 1))


def test_owner_check_precedes_role_data_validation(service: RoleService) -> None:
    with pytest.raises(RoleValidationError, match="account owner"):
        service.assign_role(ACCOUNT, OWNER_CONTACT, _assign("ghost", 1))


def test_assign_rejects_team_role_for_current_manager(service: RoleService) -> None:
    with pytest.raises(RoleValidationError, match="already a manager"):
        service.assign_role(ACCOUNT, MANAGER_CONTACT, _assign(RoleId.TEAM_PHOTO_ADMIN, COMETS))


def test_manager_may_receive_roles_for_other_teams(service: RoleService) -> None:
    created = service.assign_role(ACCOUNT, MANAGER_CONTACT, _assign(RoleId.TEAM_ADMIN, ROCKETS))

    assert created.context_name == "Rockets"


@pytest.mark.parametrize(
    ("role_id", "role_data", "message"),
    [
        ("ghost", ACCOUNT, "Unknown role"),
        (RoleId.ADMINISTRATOR, ACCOUNT, "global role"),
        (RoleId.ACCOUNT_ADMIN, OTHER_ACCOUNT, "account id"),
        (RoleId.ACCOUNT_PHOTO_ADMIN, ROCKETS, "account id"),
        (RoleId.LEAGUE_ADMIN, 999, "League not found"),
        (RoleId.TEAM_ADMIN, OLD_TEAM, "Team not found"),
        (RoleId.TEAM_PHOTO_ADMIN, 999, "Team not found"),
    ],
)
def test_assign_validates_role_data(
    service: RoleService, role_id: str, role_data: int, message: str
) -> None:
    with pytest.raises(RoleValidationError, match=message):
        service.assign_role(ACCOUNT, COACH_CONTACT, _assign(role_id, role_data))


def test_scoped_roles_need_a_current_season(
    service: RoleService, store: InMemoryRbacStore
) -> None:
    del store.current_seasons[ACCOUNT]

    with pytest.raises(RoleValidationError, match="no current season"):
        service.assign_role(ACCOUNT, COACH_CONTACT, _assign(RoleId.TEAM_ADMIN, ROCKETS))
    created = service.assign_role(ACCOUNT, COACH_CONTACT, _assign(RoleId.ACCOUNT_ADMIN, ACCOUNT))
    assert created.role_id == RoleId.ACCOUNT_ADMIN


def test_label_failure_degrades_to_unlabeled_grant(
    store: InMemoryRbacStore, caplog: pytest.LogCaptureFixture
) -> None:
    class FlakyTeams(InMemoryRbacStore):
        calls = 0

        def get_team_season(self, team_season_id, season_id):
            type(self).calls += 1
            if type(self).calls > 1:
                raise RuntimeError("team season vanished")
            return super().get_team_season(team_season_id, season_id)

    flaky = FlakyTeams(**vars(store))
    service = build_service(flaky)
    caplog.set_level(logging.WARNING, logger="draco_api.features.roles.service")

    created = service.assign_role(ACCOUNT, COACH_CONTACT, _assign(RoleId.TEAM_ADMIN, ROCKETS))

    assert created.context_name is None
    assert created.role_data == ROCKETS
    assert "rbac.assign.label_unresolved" in [r.getMessage() for r in caplog.records]


def test_assignment_payload_validation() -> None:
    parsed = RoleAssignmentCreate.model_validate({"roleId": "team-admin", "roleData": "101"})
    assert parsed.role_data == 101

    with pytest.raises(ValidationError):
        RoleAssignmentCreate.model_validate({"roleId": "team-admin", "roleData": 0})
    with pytest.raises(ValidationError):
        RoleAssignmentCreate.model_validate({"roleId": "", "roleData": 5})


# -- remove_role ----------------------------------------------------------------


def test_remove_role_is_exact_match(service: RoleService, store: InMemoryRbacStore) -> None:
    store.add_grant(COACH_CONTACT, RoleId.TEAM_ADMIN, ROCKETS, ACCOUNT)
    store.add_grant(COACH_CONTACT, RoleId.TEAM_ADMIN, COMETS, ACCOUNT)

    removed = service.remove_role(COACH_CONTACT, RoleId.TEAM_ADMIN, ROCKETS, ACCOUNT)

    assert removed.role_data == ROCKETS
    remaining = service.get_user_roles("coach", ACCOUNT).contact_roles
    assert [(g.role_id, g.role_data) for g in remaining] == [(RoleId.TEAM_ADMIN, COMETS)]


def test_remove_missing_grant_is_not_found(service: RoleService, store: InMemoryRbacStore) -> None:
    store.add_grant(COACH_CONTACT, RoleId.TEAM_ADMIN, ROCKETS, ACCOUNT)

    with pytest.raises(RoleNotFoundError):
        service.remove_role(COACH_CONTACT, RoleId.TEAM_ADMIN, ROCKETS, OTHER_ACCOUNT)
    with pytest.raises(RoleNotFoundError):
        service.remove_role(PARENT_CONTACT, RoleId.TEAM_ADMIN, ROCKETS, ACCOUNT)
    assert len(store.grants) == 1


# -- listings and reference lookups ---------------------------------------------


def test_get_users_with_role(service: RoleService, store: InMemoryRbacStore) -> None:
    store.add_grant(COACH_CONTACT, RoleId.TEAM_ADMIN, ROCKETS, ACCOUNT)
    store.add_grant(PARENT_CONTACT, RoleId.TEAM_ADMIN, COMETS, ACCOUNT)
    store.add_grant(PARENT_CONTACT, RoleId.LEAGUE_ADMIN, MAJORS, ACCOUNT)

    holders = service.get_users_with_role(RoleId.TEAM_ADMIN, ACCOUNT)

    assert {(g.contact_id, g.role_data) for g in holders} == {
        (COACH_CONTACT, ROCKETS),
        (PARENT_CONTACT, COMETS),
    }
    assert service.get_users_with_role(RoleId.TEAM_ADMIN, OTHER_ACCOUNT) == []


def test_automatic_role_holders(service: RoleService) -> None:
    holders = service.get_automatic_role_holders(ACCOUNT)

    assert holders.account_owner_contact_id == OWNER_CONTACT
    assert holders.account_owner_user_id == "owner-7"
    (manager,) = holders.team_managers
    assert manager.contact_id == MANAGER_CONTACT
    assert manager.role_id == RoleId.TEAM_ADMIN
    assert manager.context_name == "Comets"
    assert manager.automatic


def test_automatic_role_holders_need_an_owner(service: RoleService) -> None:
    with pytest.raises(RoleNotFoundError, match="owner"):
        service.get_automatic_role_holders(999)


def test_sync_role_registry_is_idempotent(service: RoleService) -> None:
    assert service.sync_role_registry() == len(ROLES)
    assert service.sync_role_registry() == 0

    assert service.get_role_name(RoleId.LEAGUE_ADMIN) == "LeagueAdmin"
    assert service.get_role_id("TeamPhotoAdmin") == RoleId.TEAM_PHOTO_ADMIN
    assert service.get_role_name("ghost") is None
