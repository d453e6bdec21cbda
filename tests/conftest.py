"""Shared pytest fixtures for Draco tests."""

from __future__ import annotations

import pytest

from draco_api.core.rbac.catalog import RoleCatalog, default_catalog
from draco_api.core.rbac.guards import RouteGuards
from draco_api.features.roles.service import RoleService
from support import InMemoryRbacStore, build_guards, build_service, league_world


@pytest.fixture
def catalog() -> RoleCatalog:
    return default_catalog()


@pytest.fixture
def store() -> InMemoryRbacStore:
    return league_world()


@pytest.fixture
def service(store: InMemoryRbacStore) -> RoleService:
    return build_service(store)


@pytest.fixture
def guards(store: InMemoryRbacStore) -> RouteGuards:
    return build_guards(store)
