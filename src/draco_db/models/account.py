"""Tenant and membership models."""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from draco_db import Base, BigIntId, IntPrimaryKeyMixin


class Account(IntPrimaryKeyMixin, Base):
    """An organization running its own league program."""

    __tablename__ = "accounts"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_user_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)

    contacts: Mapped[list[Contact]] = relationship(back_populates="account")


class Contact(IntPrimaryKeyMixin, Base):
    """A person known to one account, optionally linked to a login identity."""

    __tablename__ = "contacts"
    __table_args__ = (UniqueConstraint("account_id", "user_id"),)

    account_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    account: Mapped[Account] = relationship(back_populates="contacts")


__all__ = ["Account", "Contact"]
