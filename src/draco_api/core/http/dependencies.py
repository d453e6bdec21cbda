"""FastAPI dependencies that bridge HTTP requests to the boundary guards."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from draco_api.common.problem_details import ApiError
from draco_api.db import get_db_session
from draco_api.settings import Settings, get_settings

from ..auth.errors import AuthenticationError, PermissionDeniedError
from ..auth.principal import AuthenticatedPrincipal, principal_from_request
from ..rbac.catalog import RoleCatalog, default_catalog
from ..rbac.context import ContextSources
from ..rbac.guards import (
    DenyReason,
    Guard,
    GuardDecision,
    GuardRequest,
    RouteGuards,
    all_of,
    first_allowed,
)
from ..rbac.repositories import ContactRepository
from ..rbac.service_interface import RoleServiceInterface
from ..rbac.types import RoleContext

SessionDep = Annotated[Session, Depends(get_db_session)]

type GuardFactory = Callable[[RouteGuards], Guard]
GuardDependency = Callable[..., GuardDecision]

_BODYLESS_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "DELETE"})


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_role_catalog(request: Request) -> RoleCatalog:
    return getattr(request.app.state, "role_catalog", None) or default_catalog()


def get_role_service(
    db: SessionDep,
    catalog: Annotated[RoleCatalog, Depends(get_role_catalog)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RoleServiceInterface:
    from draco_api.features.roles.service import RoleService

    return RoleService.from_session(
        db,
        catalog=catalog,
        synthesize_manager_roles=settings.rbac_synthesize_manager_roles,
    )


def get_contact_repository(db: SessionDep) -> ContactRepository:
    from draco_api.features.roles.repository import SqlContactRepository

    return SqlContactRepository(db)


def get_route_guards(
    roles: Annotated[RoleServiceInterface, Depends(get_role_service)],
    contacts: Annotated[ContactRepository, Depends(get_contact_repository)],
) -> RouteGuards:
    return RouteGuards(roles, contacts)


def get_current_principal(request: Request) -> AuthenticatedPrincipal | None:
    return principal_from_request(request)


async def get_context_sources(request: Request) -> ContextSources:
    """Collect path, JSON body and query identifiers, in that priority order."""

    body = None
    content_type = request.headers.get("content-type", "")
    if request.method not in _BODYLESS_METHODS and "json" in content_type:
        raw = await request.body()
        if raw:
            try:
                payload = json.loads(raw)
            except ValueError as exc:
                raise ApiError(error_type="bad_request", detail="Malformed JSON body") from exc
            if isinstance(payload, dict):
                body = payload
    return ContextSources(
        path=dict(request.path_params),
        body=body,
        query=dict(request.query_params),
    )


def raise_for_decision(decision: GuardDecision) -> None:
    """Raise the HTTP-mapped error for a denied decision."""

    if decision.allowed:
        return
    detail = decision.detail or "Access denied"
    match decision.reason:
        case DenyReason.UNAUTHENTICATED:
            raise AuthenticationError(detail)
        case DenyReason.BAD_REQUEST:
            raise ApiError(error_type="bad_request", detail=detail)
        case DenyReason.NOT_FOUND:
            raise ApiError(error_type="not_found", detail=detail)
    context = decision.context
    account_id = context.account_id if context is not None else None
    raise PermissionDeniedError(
        decision.requirement or "access",
        scope_type="account" if account_id is not None else None,
        scope_id=account_id,
    )


def guard_dependency(factory: GuardFactory) -> GuardDependency:
    """Return a dependency that evaluates a guard and stores the decision on the request."""

    def dependency(
        request: Request,
        guards: Annotated[RouteGuards, Depends(get_route_guards)],
        sources: Annotated[ContextSources, Depends(get_context_sources)],
        principal: Annotated[AuthenticatedPrincipal | None, Depends(get_current_principal)],
    ) -> GuardDecision:
        guard = factory(guards)
        decision = guard(
            GuardRequest(user_id=principal.user_id if principal else None, sources=sources)
        )
        raise_for_decision(decision)
        request.state.authorization = decision
        if decision.user_roles is not None:
            request.state.user_roles = decision.user_roles
        if decision.membership is not None:
            request.state.account_boundary = decision.membership
        return decision

    return dependency


def require_auth() -> GuardDependency:
    return guard_dependency(lambda guards: guards.require_auth())


def require_role(role_id: str, context: RoleContext | None = None) -> GuardDependency:
    return guard_dependency(lambda guards: guards.require_role(role_id, context))


def require_permission(permission: str, context: RoleContext | None = None) -> GuardDependency:
    return guard_dependency(lambda guards: guards.require_permission(permission, context))


def enforce_account_boundary() -> GuardDependency:
    return guard_dependency(lambda guards: guards.enforce_account_boundary())


def enforce_account_owner() -> GuardDependency:
    return guard_dependency(lambda guards: guards.enforce_account_owner())


def enforce_team_boundary() -> GuardDependency:
    return guard_dependency(lambda guards: guards.enforce_team_boundary())


def enforce_league_boundary() -> GuardDependency:
    return guard_dependency(lambda guards: guards.enforce_league_boundary())


def require_any(*factories: GuardFactory) -> GuardDependency:
    """Allow when any of the guards allows, trying them in order."""

    return guard_dependency(
        lambda guards: first_allowed(*(factory(guards) for factory in factories))
    )


def require_all(*factories: GuardFactory) -> GuardDependency:
    """Allow only when every guard allows, evaluated in order."""

    return guard_dependency(lambda guards: all_of(*(factory(guards) for factory in factories)))


__all__ = [
    "GuardDependency",
    "GuardFactory",
    "enforce_account_boundary",
    "enforce_account_owner",
    "enforce_league_boundary",
    "enforce_team_boundary",
    "get_context_sources",
    "get_contact_repository",
    "get_current_principal",
    "get_role_catalog",
    "get_role_service",
    "get_route_guards",
    "guard_dependency",
    "raise_for_decision",
    "require_all",
    "require_any",
    "require_auth",
    "require_permission",
    "require_role",
]
