"""Shared auth/permission error types."""


class AuthenticationError(Exception):
    """Raised when a request cannot be authenticated."""


class PermissionDeniedError(Exception):
    """Raised when a principal lacks a required role, permission or ownership."""

    def __init__(
        self,
        requirement: str,
        *,
        scope_type: str | None = None,
        scope_id: int | None = None,
    ) -> None:
        self.requirement = requirement
        self.scope_type = scope_type
        self.scope_id = scope_id
        msg = f"'{requirement}' denied"
        if scope_type:
            msg = f"{msg} for {scope_type}"
            if scope_id is not None:
                msg = f"{msg} {scope_id}"
        super().__init__(msg)
