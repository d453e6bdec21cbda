"""Season, league and team models used to validate scoped grants."""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from draco_db import Base, BigIntId, IntPrimaryKeyMixin


def _fk(target: str) -> ForeignKey:
    return ForeignKey(target, ondelete="CASCADE")


class Season(IntPrimaryKeyMixin, Base):
    __tablename__ = "seasons"

    account_id: Mapped[int] = mapped_column(BigIntId, _fk("accounts.id"), index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class CurrentSeason(Base):
    """Pointer from an account to its active season."""

    __tablename__ = "current_seasons"

    account_id: Mapped[int] = mapped_column(BigIntId, _fk("accounts.id"), primary_key=True)
    season_id: Mapped[int] = mapped_column(BigIntId, _fk("seasons.id"), nullable=False)


class League(IntPrimaryKeyMixin, Base):
    __tablename__ = "leagues"

    account_id: Mapped[int] = mapped_column(BigIntId, _fk("accounts.id"), index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class LeagueSeason(IntPrimaryKeyMixin, Base):
    __tablename__ = "league_seasons"
    __table_args__ = (UniqueConstraint("league_id", "season_id"),)

    league_id: Mapped[int] = mapped_column(BigIntId, _fk("leagues.id"), index=True)
    season_id: Mapped[int] = mapped_column(BigIntId, _fk("seasons.id"), index=True)


class Team(IntPrimaryKeyMixin, Base):
    __tablename__ = "teams"

    account_id: Mapped[int] = mapped_column(BigIntId, _fk("accounts.id"), index=True)


class TeamSeason(IntPrimaryKeyMixin, Base):
    """A team's participation in one league season; carries the season's team name."""

    __tablename__ = "team_seasons"

    team_id: Mapped[int] = mapped_column(BigIntId, _fk("teams.id"), index=True)
    league_season_id: Mapped[int] = mapped_column(BigIntId, _fk("league_seasons.id"), index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class TeamSeasonManager(IntPrimaryKeyMixin, Base):
    __tablename__ = "team_season_managers"
    __table_args__ = (UniqueConstraint("team_season_id", "contact_id"),)

    team_season_id: Mapped[int] = mapped_column(BigIntId, _fk("team_seasons.id"), index=True)
    contact_id: Mapped[int] = mapped_column(BigIntId, _fk("contacts.id"), index=True)


__all__ = [
    "CurrentSeason",
    "League",
    "LeagueSeason",
    "Season",
    "Team",
    "TeamSeason",
    "TeamSeasonManager",
]
