"""SQLAlchemy metadata and models for the Draco database."""

from .metadata import NAMING_CONVENTION, Base, metadata
from .types import BigIntId, IntPrimaryKeyMixin

__all__ = ["NAMING_CONVENTION", "Base", "BigIntId", "IntPrimaryKeyMixin", "metadata"]
