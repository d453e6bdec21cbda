"""Immutable role catalog: permission sets plus a validated role hierarchy.

The hierarchy is a directed acyclic graph of "implies" edges. It is checked
once when the catalog is built, and the reachable set of every role is
precomputed so lookups never walk edges at request time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache
from graphlib import CycleError, TopologicalSorter
from types import MappingProxyType

from draco_api.core.rbac.errors import RoleCatalogError
from draco_api.core.rbac.registry import (
    PERMISSION_REGISTRY,
    ROLES,
    WILDCARD_PERMISSION,
)
from draco_api.core.rbac.types import PermissionDef, RoleDef, ScopeType

logger = logging.getLogger(__name__)


class RoleCatalog:
    """Read-only lookup table shared by every authorization call."""

    __slots__ = ("_roles", "_names", "_implied", "_permissions")

    def __init__(
        self,
        roles: Iterable[RoleDef],
        *,
        permissions: Mapping[str, PermissionDef] | None = None,
    ) -> None:
        by_id: dict[str, RoleDef] = {}
        for role in roles:
            if role.id in by_id:
                raise RoleCatalogError(f"Duplicate role id '{role.id}'")
            by_id[role.id] = role

        _validate_edges(by_id)
        _validate_permissions(by_id, permissions)
        order = _topological_order(by_id)

        implied: dict[str, frozenset[str]] = {}
        for role_id in order:
            reachable: set[str] = set()
            for child in by_id[role_id].implies:
                reachable.add(child)
                reachable.update(implied[child])
            implied[role_id] = frozenset(reachable)

        effective: dict[str, frozenset[str]] = {}
        for role_id, role in by_id.items():
            granted = set(role.permissions)
            for child in implied[role_id]:
                granted.update(by_id[child].permissions)
            effective[role_id] = frozenset(granted)

        self._roles: Mapping[str, RoleDef] = MappingProxyType(by_id)
        self._names: Mapping[str, str] = MappingProxyType(
            {role.name: role.id for role in by_id.values()}
        )
        self._implied: Mapping[str, frozenset[str]] = MappingProxyType(implied)
        self._permissions: Mapping[str, frozenset[str]] = MappingProxyType(effective)

    def __contains__(self, role_id: object) -> bool:
        return role_id in self._roles

    def __iter__(self) -> Iterator[RoleDef]:
        return iter(self._roles.values())

    def __len__(self) -> int:
        return len(self._roles)

    def get(self, role_id: str) -> RoleDef | None:
        return self._roles.get(role_id)

    def role_id_for_name(self, name: str) -> str | None:
        return self._names.get(name)

    def scope_of(self, role_id: str) -> ScopeType | None:
        role = self._roles.get(role_id)
        return role.scope_type if role is not None else None

    def permissions_of(self, role_id: str) -> frozenset[str]:
        """Effective permissions: the role's own plus those of every implied role."""

        return self._permissions.get(role_id, frozenset())

    def implied_roles(self, role_id: str) -> frozenset[str]:
        """Roles reachable from ``role_id`` through hierarchy edges (excluding itself)."""

        return self._implied.get(role_id, frozenset())

    def grants_permission(self, role_id: str, permission: str) -> bool:
        granted = self.permissions_of(role_id)
        return WILDCARD_PERMISSION in granted or permission in granted

    def has_role_or_higher(self, held_roles: Iterable[str], required_role: str) -> bool:
        for role_id in held_roles:
            if role_id == required_role or required_role in self.implied_roles(role_id):
                return True
        return False


def _validate_edges(roles: Mapping[str, RoleDef]) -> None:
    for role in roles.values():
        for child in role.implies:
            if child not in roles:
                raise RoleCatalogError(f"Role '{role.id}' implies unknown role '{child}'")
            if child == role.id:
                raise RoleCatalogError(f"Role '{role.id}' cannot imply itself")


def _validate_permissions(
    roles: Mapping[str, RoleDef],
    permissions: Mapping[str, PermissionDef] | None,
) -> None:
    if permissions is None:
        return
    for role in roles.values():
        for key in role.permissions:
            if key != WILDCARD_PERMISSION and key not in permissions:
                raise RoleCatalogError(f"Role '{role.id}' references unknown permission '{key}'")


def _topological_order(roles: Mapping[str, RoleDef]) -> tuple[str, ...]:
    # Implied roles are "predecessors", so they are ordered before the roles implying them.
    sorter = TopologicalSorter({role_id: role.implies for role_id, role in roles.items()})
    try:
        return tuple(sorter.static_order())
    except CycleError as exc:
        cycle = " -> ".join(exc.args[1])
        raise RoleCatalogError(f"Role hierarchy contains a cycle: {cycle}") from exc


@lru_cache(maxsize=1)
def default_catalog() -> RoleCatalog:
    """Build the catalog of built-in roles once per process."""

    catalog = RoleCatalog(ROLES, permissions=PERMISSION_REGISTRY)
    logger.debug("rbac.catalog.loaded", extra={"role_count": len(catalog)})
    return catalog


__all__ = ["RoleCatalog", "default_catalog"]
