"""Boundary guards: small allow/deny policies built on role resolution.

A guard is a callable taking a :class:`GuardRequest` and returning a
:class:`GuardDecision`. Guards never raise for the classified failures
(validation, not found, authentication, authorization); those become deny
decisions with a stable :class:`DenyReason`. Anything else propagates.

Guards compose with :func:`first_allowed` (ordered fallback, first allow wins)
and :func:`all_of` (every guard must allow, first deny wins).
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from functools import wraps

from draco_api.common.logging import log_context
from draco_api.core.auth.errors import AuthenticationError, PermissionDeniedError
from draco_api.core.rbac.context import ContextSources, extract_role_context
from draco_api.core.rbac.errors import RoleNotFoundError, RoleValidationError
from draco_api.core.rbac.repositories import ContactRecord, ContactRepository
from draco_api.core.rbac.service_interface import RoleServiceInterface
from draco_api.core.rbac.types import RoleContext, RoleId, RoleLevel, UserRoles

logger = logging.getLogger(__name__)

_ACCOUNT_WIDE_ROLES = frozenset({RoleId.ADMINISTRATOR, RoleId.ACCOUNT_ADMIN})

# Set while a composed guard runs its members; only the outermost guard reports at INFO.
_composing: ContextVar[bool] = ContextVar("rbac_guard_composing", default=False)


class DenyReason(str, enum.Enum):
    """Stable reason classes clients can branch on."""

    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class GuardRequest:
    user_id: str | None
    sources: ContextSources = field(default_factory=ContextSources)


@dataclass(frozen=True, slots=True)
class AccountMembership:
    """How the principal relates to an account."""

    account_id: int
    contact: ContactRecord | None
    is_owner: bool
    is_administrator: bool


@dataclass(frozen=True, slots=True)
class GuardDecision:
    allowed: bool
    reason: DenyReason | None = None
    detail: str | None = None
    requirement: str | None = None
    context: RoleContext | None = None
    user_roles: UserRoles | None = None
    membership: AccountMembership | None = None
    role_level: RoleLevel | None = None

    @classmethod
    def allow(cls, requirement: str, **attachments: object) -> GuardDecision:
        return cls(allowed=True, requirement=requirement, **attachments)  # type: ignore[arg-type]

    @classmethod
    def deny(
        cls,
        reason: DenyReason,
        detail: str,
        *,
        requirement: str | None = None,
        context: RoleContext | None = None,
    ) -> GuardDecision:
        return cls(
            allowed=False,
            reason=reason,
            detail=detail,
            requirement=requirement,
            context=context,
        )

    def merged_with(self, later: GuardDecision) -> GuardDecision:
        """Combine two allow decisions; attachments from ``later`` win when present."""

        return replace(
            self,
            requirement=later.requirement or self.requirement,
            context=later.context or self.context,
            user_roles=later.user_roles or self.user_roles,
            membership=later.membership or self.membership,
            role_level=later.role_level or self.role_level,
        )


type Guard = Callable[[GuardRequest], GuardDecision]


def _classified(requirement: str) -> Callable[[Guard], Guard]:
    """Turn classified errors into deny decisions and log every denial."""

    def decorator(func: Guard) -> Guard:
        @wraps(func)
        def guard(request: GuardRequest) -> GuardDecision:
            try:
                decision = func(request)
            except RoleValidationError as exc:
                decision = GuardDecision.deny(
                    DenyReason.BAD_REQUEST, str(exc), requirement=requirement
                )
            except RoleNotFoundError as exc:
                decision = GuardDecision.deny(
                    DenyReason.NOT_FOUND, str(exc), requirement=requirement
                )
            except AuthenticationError as exc:
                decision = GuardDecision.deny(
                    DenyReason.UNAUTHENTICATED,
                    str(exc) or "Authentication required",
                    requirement=requirement,
                )
            except PermissionDeniedError as exc:
                decision = GuardDecision.deny(
                    DenyReason.FORBIDDEN, str(exc), requirement=requirement
                )
            if not decision.allowed:
                _log_denial(request, decision)
            return decision

        return guard

    return decorator


def _log_denial(request: GuardRequest, decision: GuardDecision) -> None:
    context = decision.context
    logger.log(
        logging.DEBUG if _composing.get() else logging.INFO,
        "rbac.guard.denied",
        extra=log_context(
            user_id=request.user_id,
            account_id=context.account_id if context else None,
            requirement=decision.requirement,
            reason=decision.reason.value if decision.reason else None,
        ),
    )


def _run_composed(
    evaluate: Callable[[GuardRequest], GuardDecision], request: GuardRequest
) -> GuardDecision:
    token = _composing.set(True)
    try:
        decision = evaluate(request)
    finally:
        _composing.reset(token)
    if not decision.allowed:
        _log_denial(request, decision)
    return decision


def first_allowed(*guards: Guard) -> Guard:
    """Ordered fallback: try each guard in turn and stop at the first allow.

    When every guard denies, the last denial is returned.
    """

    if not guards:
        raise ValueError("first_allowed() needs at least one guard")

    def evaluate(request: GuardRequest) -> GuardDecision:
        decision = guards[0](request)
        for candidate in guards[1:]:
            if decision.allowed:
                return decision
            decision = candidate(request)
        return decision

    def guard(request: GuardRequest) -> GuardDecision:
        return _run_composed(evaluate, request)

    return guard


def all_of(*guards: Guard) -> Guard:
    """Sequential chain: every guard must allow; the first denial short-circuits."""

    if not guards:
        raise ValueError("all_of() needs at least one guard")

    def evaluate(request: GuardRequest) -> GuardDecision:
        combined = guards[0](request)
        for candidate in guards[1:]:
            if not combined.allowed:
                return combined
            decision = candidate(request)
            combined = combined.merged_with(decision) if decision.allowed else decision
        return combined

    def guard(request: GuardRequest) -> GuardDecision:
        return _run_composed(evaluate, request)

    return guard


class RouteGuards:
    """Factory for guards bound to one role service and contact repository."""

    def __init__(self, roles: RoleServiceInterface, contacts: ContactRepository) -> None:
        self._roles = roles
        self._contacts = contacts

    def require_auth(self) -> Guard:
        requirement = "authenticated"

        @_classified(requirement)
        def guard(request: GuardRequest) -> GuardDecision:
            if request.user_id is None:
                raise AuthenticationError("Authentication required")
            return GuardDecision.allow(requirement)

        return guard

    def require_role(self, role_id: str, context: RoleContext | None = None) -> Guard:
        requirement = f"role:{role_id}"

        @_classified(requirement)
        def guard(request: GuardRequest) -> GuardDecision:
            user_id = _require_user(request)
            ctx = extract_role_context(request.sources, overrides=context)
            result = self._roles.has_role(user_id, role_id, ctx)
            if not result.has_role:
                return GuardDecision.deny(
                    DenyReason.FORBIDDEN,
                    f"Role '{role_id}' is required",
                    requirement=requirement,
                    context=ctx,
                )
            return GuardDecision.allow(
                requirement,
                context=ctx,
                user_roles=self._roles.get_user_roles(user_id, ctx.account_id),
                role_level=result.role_level,
            )

        return guard

    def require_permission(self, permission: str, context: RoleContext | None = None) -> Guard:
        """Permission gate; the account owner holds every permission in their account."""

        requirement = f"permission:{permission}"

        @_classified(requirement)
        def guard(request: GuardRequest) -> GuardDecision:
            user_id = _require_user(request)
            ctx = extract_role_context(request.sources, overrides=context)
            allowed = self._roles.has_permission(user_id, permission, ctx) or (
                ctx.account_id is not None
                and self._contacts.is_account_owner(user_id, ctx.account_id)
            )
            if not allowed:
                return GuardDecision.deny(
                    DenyReason.FORBIDDEN,
                    f"Permission '{permission}' is required",
                    requirement=requirement,
                    context=ctx,
                )
            return GuardDecision.allow(
                requirement,
                context=ctx,
                user_roles=self._roles.get_user_roles(user_id, ctx.account_id),
            )

        return guard

    def enforce_account_boundary(self) -> Guard:
        requirement = "account-member"

        @_classified(requirement)
        def guard(request: GuardRequest) -> GuardDecision:
            user_id = _require_user(request)
            ctx, account_id = self._account_context(request)
            roles = self._roles.get_user_roles(user_id, account_id)
            membership = self._membership(user_id, account_id, roles)
            if not (
                membership.contact is not None
                or membership.is_owner
                or membership.is_administrator
            ):
                return GuardDecision.deny(
                    DenyReason.FORBIDDEN,
                    "Not a member of this account",
                    requirement=requirement,
                    context=ctx,
                )
            return GuardDecision.allow(
                requirement, context=ctx, user_roles=roles, membership=membership
            )

        return guard

    def enforce_account_owner(self) -> Guard:
        requirement = "account-owner"

        @_classified(requirement)
        def guard(request: GuardRequest) -> GuardDecision:
            user_id = _require_user(request)
            ctx, account_id = self._account_context(request)
            roles = self._roles.get_user_roles(user_id, account_id)
            membership = self._membership(user_id, account_id, roles)
            if not (membership.is_owner or membership.is_administrator):
                return GuardDecision.deny(
                    DenyReason.FORBIDDEN,
                    "Only the account owner can perform this action",
                    requirement=requirement,
                    context=ctx,
                )
            return GuardDecision.allow(
                requirement, context=ctx, user_roles=roles, membership=membership
            )

        return guard

    def enforce_team_boundary(self) -> Guard:
        return self._scoped_boundary(
            requirement="team-admin",
            role_id=RoleId.TEAM_ADMIN,
            field_name="team_id",
            label="Team",
        )

    def enforce_league_boundary(self) -> Guard:
        return self._scoped_boundary(
            requirement="league-admin",
            role_id=RoleId.LEAGUE_ADMIN,
            field_name="league_id",
            label="League",
        )

    def _scoped_boundary(
        self,
        *,
        requirement: str,
        role_id: str,
        field_name: str,
        label: str,
    ) -> Guard:
        @_classified(requirement)
        def guard(request: GuardRequest) -> GuardDecision:
            user_id = _require_user(request)
            ctx, account_id = self._account_context(request)
            if getattr(ctx, field_name) is None:
                raise RoleValidationError(f"{label} id is required")

            roles = self._roles.get_user_roles(user_id, account_id)
            if roles.context_valid_roles(ctx) & _ACCOUNT_WIDE_ROLES:
                return GuardDecision.allow(requirement, context=ctx, user_roles=roles)

            result = self._roles.has_role(user_id, role_id, ctx)
            if not result.has_role:
                return GuardDecision.deny(
                    DenyReason.FORBIDDEN,
                    f"{label} administration rights are required",
                    requirement=requirement,
                    context=ctx,
                )
            return GuardDecision.allow(
                requirement, context=ctx, user_roles=roles, role_level=result.role_level
            )

        return guard

    def _account_context(self, request: GuardRequest) -> tuple[RoleContext, int]:
        ctx = extract_role_context(request.sources)
        if ctx.account_id is None:
            raise RoleValidationError("Account id is required")
        return ctx, ctx.account_id

    def _membership(self, user_id: str, account_id: int, roles: UserRoles) -> AccountMembership:
        return AccountMembership(
            account_id=account_id,
            contact=self._contacts.get_contact_for_user(user_id, account_id),
            is_owner=self._contacts.is_account_owner(user_id, account_id),
            is_administrator=RoleId.ADMINISTRATOR in roles.global_roles,
        )


def _require_user(request: GuardRequest) -> str:
    if request.user_id is None:
        raise AuthenticationError("Authentication required")
    return request.user_id


__all__ = [
    "AccountMembership",
    "DenyReason",
    "Guard",
    "GuardDecision",
    "GuardRequest",
    "RouteGuards",
    "all_of",
    "first_allowed",
]
