"""Central exports for Draco SQLAlchemy models."""

from .account import Account, Contact
from .rbac import ContactRole, Role, UserRole
from .season import (
    CurrentSeason,
    League,
    LeagueSeason,
    Season,
    Team,
    TeamSeason,
    TeamSeasonManager,
)

__all__ = [
    "Account",
    "Contact",
    "ContactRole",
    "CurrentSeason",
    "League",
    "LeagueSeason",
    "Role",
    "Season",
    "Team",
    "TeamSeason",
    "TeamSeasonManager",
    "UserRole",
]
