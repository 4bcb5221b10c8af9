from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Float,
    Boolean,
    Index,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from .db import Base


class Player(Base):
    __tablename__ = "player"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    disabled = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("uq_player_name_lower", func.lower(name), unique=True),
    )


class Team(Base):
    __tablename__ = "team"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    # Sorted player ids; the set identifies the team.
    player_ids = Column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False
    )
    player_key = Column(String, nullable=False, unique=True)


class Season(Base):
    __tablename__ = "season"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    score_type = Column(String, nullable=False)  # "elo" | "3-1-0" | "elo-individual-vs-team"
    initial_score = Column(Float, nullable=False)
    k_factor = Column(Integer, nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    rounds = Column(Integer, nullable=True)
    closed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class SeasonPlayer(Base):
    """An individual entrant: a player's rating within one season."""

    __tablename__ = "season_player"
    id = Column(String, primary_key=True)
    season_id = Column(String, ForeignKey("season.id"), nullable=False)
    player_id = Column(String, ForeignKey("player.id"), nullable=False)
    score = Column(Float, nullable=False)
    disabled = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint(
            "season_id", "player_id", name="uq_season_player_season_id_player_id"
        ),
    )


class SeasonTeam(Base):
    """A team entrant: a team's rating within one season."""

    __tablename__ = "season_team"
    id = Column(String, primary_key=True)
    season_id = Column(String, ForeignKey("season.id"), nullable=False)
    team_id = Column(String, ForeignKey("team.id"), nullable=False)
    score = Column(Float, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "season_id", "team_id", name="uq_season_team_season_id_team_id"
        ),
    )


class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)
    season_id = Column(String, ForeignKey("season.id"), nullable=False)
    # Registration order within the season; only the highest may be reverted.
    sequence = Column(Integer, nullable=False)
    home_score = Column(Integer, nullable=False)
    away_score = Column(Integer, nullable=False)
    home_expected_elo = Column(Float, nullable=True)
    away_expected_elo = Column(Float, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("season_id", "sequence", name="uq_match_season_id_sequence"),
        Index("ix_match_season_id_created_at", "season_id", "created_at"),
    )


class MatchPlayer(Base):
    __tablename__ = "match_player"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    season_player_id = Column(String, ForeignKey("season_player.id"), nullable=False)
    home_team = Column(Boolean, nullable=False)
    score_before = Column(Float, nullable=False)
    score_after = Column(Float, nullable=False)
    result = Column(String(1), nullable=False)  # "W" | "D" | "L"

    __table_args__ = (
        Index("ix_match_player_season_player_id", "season_player_id"),
        Index("ix_match_player_match_id", "match_id"),
    )


class MatchTeam(Base):
    __tablename__ = "match_team"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    season_team_id = Column(String, ForeignKey("season_team.id"), nullable=False)
    home_team = Column(Boolean, nullable=False)
    score_before = Column(Float, nullable=False)
    score_after = Column(Float, nullable=False)
    result = Column(String(1), nullable=False)

    __table_args__ = (
        Index("ix_match_team_season_team_id", "season_team_id"),
        Index("ix_match_team_match_id", "match_id"),
    )


class Fixture(Base):
    __tablename__ = "fixture"
    id = Column(String, primary_key=True)
    season_id = Column(String, ForeignKey("season.id"), nullable=False)
    round = Column(Integer, nullable=False)
    home_player_id = Column(String, ForeignKey("season_player.id"), nullable=False)
    away_player_id = Column(String, ForeignKey("season_player.id"), nullable=False)
    match_id = Column(String, ForeignKey("match.id"), nullable=True)


class PlayerAchievement(Base):
    __tablename__ = "player_achievement"
    id = Column(String, primary_key=True)
    player_id = Column(String, ForeignKey("player.id"), nullable=False)
    type = Column(String, nullable=False)
    season_id = Column(String, ForeignKey("season.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "player_id",
            "type",
            name="uq_player_achievement_player_id_type",
        ),
    )
