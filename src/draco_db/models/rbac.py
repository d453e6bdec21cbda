"""Role catalog rows and role grants."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from draco_db import Base, BigIntId, IntPrimaryKeyMixin


class Role(Base):
    """Reference row for a catalog role, synced from the in-process registry."""

    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class UserRole(Base):
    """Tenant-independent role held by a login identity (e.g. Administrator)."""

    __tablename__ = "user_roles"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    role_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    )


class ContactRole(IntPrimaryKeyMixin, Base):
    """Contextual grant; ``role_data`` is interpreted according to the role's scope."""

    __tablename__ = "contact_roles"
    __table_args__ = (
        UniqueConstraint("contact_id", "role_id", "role_data", "account_id"),
        Index("ix_contact_roles_account_role", "account_id", "role_id"),
    )

    contact_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False
    )
    role_data: Mapped[int] = mapped_column(BigIntId, nullable=False)
    account_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )


__all__ = ["ContactRole", "Role", "UserRole"]
