"""Build a :class:`RoleContext` from loosely typed request inputs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from draco_api.core.rbac.errors import RoleValidationError
from draco_api.core.rbac.types import RoleContext

# Context field -> accepted input keys, camelCase first.
CONTEXT_KEYS: dict[str, tuple[str, ...]] = {
    "account_id": ("accountId", "account_id"),
    "team_id": ("teamId", "team_id", "teamSeasonId", "team_season_id"),
    "league_id": ("leagueId", "league_id", "leagueSeasonId", "league_season_id"),
    "season_id": ("seasonId", "season_id"),
}


@dataclass(frozen=True, slots=True)
class ContextSources:
    """Raw identifier sources, listed in priority order."""

    path: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] | None = None
    query: Mapping[str, Any] = field(default_factory=dict)

    def ordered(self) -> tuple[Mapping[str, Any], ...]:
        return tuple(source for source in (self.path, self.body, self.query) if source)


def coerce_identifier(value: Any, *, field_name: str) -> int | None:
    """Return ``value`` as a positive integer id; ``None``/blank means not supplied."""

    if value is None:
        return None
    if isinstance(value, bool):
        raise RoleValidationError(f"Invalid {field_name}: expected an integer id")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = int(text, 10)
        except ValueError as exc:
            raise RoleValidationError(f"Invalid {field_name}: '{value}' is not an integer") from exc
    else:
        raise RoleValidationError(f"Invalid {field_name}: expected an integer id")
    if parsed <= 0:
        raise RoleValidationError(f"Invalid {field_name}: ids must be positive")
    return parsed


def extract_role_context(
    sources: ContextSources,
    *,
    overrides: RoleContext | None = None,
) -> RoleContext:
    """Resolve account/team/league/season ids; the first source supplying a field wins."""

    values: dict[str, int | None] = {}
    ordered = sources.ordered()
    for field_name, keys in CONTEXT_KEYS.items():
        values[field_name] = _first_supplied(ordered, keys, field_name)
    return RoleContext(**values).merged_with(overrides)


def _first_supplied(
    sources: tuple[Mapping[str, Any], ...],
    keys: tuple[str, ...],
    field_name: str,
) -> int | None:
    for source in sources:
        for key in keys:
            if key not in source:
                continue
            parsed = coerce_identifier(source[key], field_name=field_name)
            if parsed is not None:
                return parsed
    return None


__all__ = ["CONTEXT_KEYS", "ContextSources", "coerce_identifier", "extract_role_context"]
