"""Lightweight identity representation produced by the auth pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request


@dataclass(slots=True, frozen=True)
class AuthenticatedPrincipal:
    """Identity information available to downstream handlers.

    ``user_id`` is the opaque identifier issued by the (external) identity
    provider; accounts, contacts and global roles all key off it.
    """

    user_id: str
    username: str | None = None


def principal_from_request(request: Request) -> AuthenticatedPrincipal | None:
    """Return the principal the authentication layer attached, if any."""

    principal = getattr(request.state, "principal", None)
    if isinstance(principal, AuthenticatedPrincipal):
        return principal
    return None


__all__ = ["AuthenticatedPrincipal", "principal_from_request"]
