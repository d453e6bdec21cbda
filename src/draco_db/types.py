"""Column types shared by Draco models."""

from __future__ import annotations

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
BigIntId = BigInteger().with_variant(Integer(), "sqlite")


class IntPrimaryKeyMixin:
    """Autoincrementing 64-bit primary key named ``id``."""

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)


__all__ = ["BigIntId", "IntPrimaryKeyMixin"]
