from typing import Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, ConfigDict

from .time_utils import require_utc


class PlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError("name must be a string")
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("name must not be empty")
        return trimmed


class PlayerOut(BaseModel):
    id: str
    name: str
    disabled: bool = False


class PlayerListOut(BaseModel):
    players: List[PlayerOut]
    total: int
    limit: int
    offset: int


class AchievementOut(BaseModel):
    type: str
    group: Optional[str] = None
    title: Optional[str] = None
    icon: Optional[str] = None
    season_id: Optional[str] = None
    created_at: Optional[datetime] = None


class PlayerAchievementsOut(BaseModel):
    player_id: str
    achievements: List[AchievementOut]
    top: List[str] = Field(default_factory=list)


class SeasonCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    score_type: str
    initial_score: Optional[float] = None
    k_factor: Optional[int] = Field(default=None, ge=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    rounds: Optional[int] = Field(default=None, ge=0, le=10)

    model_config = ConfigDict(extra="forbid")

    @field_validator("start_date", "end_date")
    @classmethod
    def _ensure_timezone(cls, value: Optional[datetime], info) -> Optional[datetime]:
        return require_utc(value, field_name=info.field_name)


class SeasonOut(BaseModel):
    id: str
    name: str
    score_type: str
    initial_score: float
    k_factor: int
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    rounds: Optional[int] = None
    closed: bool


class SeasonEnroll(BaseModel):
    player_id: str


class SeasonPlayerOut(BaseModel):
    season_id: str
    player_id: str
    score: float


class SeasonCloseOut(BaseModel):
    season_id: str
    winner_id: Optional[str] = None


class RecalculateOut(BaseModel):
    season_id: str
    matches: int


class FixtureOut(BaseModel):
    id: str
    round: int
    home_player_id: str
    away_player_id: str
    match_id: Optional[str] = None
    played: bool = False


class MatchCreate(BaseModel):
    home_player_ids: List[str] = Field(default_factory=list)
    away_player_ids: List[str] = Field(default_factory=list)
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)
    fixture_id: Optional[str] = None
    created_by: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class MatchPlayerOut(BaseModel):
    player_id: str
    home_team: bool
    score_before: float
    score_after: float
    result: str


class MatchTeamOut(BaseModel):
    team_id: str
    name: str
    home_team: bool
    score_before: float
    score_after: float
    result: str


class MatchOut(BaseModel):
    id: str
    season_id: str
    sequence: int
    home_score: int
    away_score: int
    home_expected_elo: Optional[float] = None
    away_expected_elo: Optional[float] = None
    created_by: Optional[str] = None
    created_at: datetime
    players: List[MatchPlayerOut] = Field(default_factory=list)
    teams: List[MatchTeamOut] = Field(default_factory=list)


class MatchCreateOut(BaseModel):
    match: MatchOut
    achievements: Dict[str, List[str]] = Field(default_factory=dict)


class MatchListOut(BaseModel):
    matches: List[MatchOut]
    total: int
    limit: int
    offset: int


class MatchRevertOut(BaseModel):
    match_id: str
    player_ids: List[str]
    team_ids: List[str] = Field(default_factory=list)


class StandingOut(BaseModel):
    rank: int
    entrant_id: str
    name: str
    current_rating: float
    match_count: int
    win_count: int
    draw_count: int
    loss_count: int
    form: List[str]
    point_diff: float
    player_ids: List[str] = Field(default_factory=list)


class StandingsOut(BaseModel):
    season_id: str
    rows: List[StandingOut]


class HighlightsOut(BaseModel):
    season_id: str
    on_fire: Optional[StandingOut] = None
    struggling: Optional[StandingOut] = None


class ProgressionPointOut(BaseModel):
    timestamp: datetime
    rating: float


class ProgressionOut(BaseModel):
    season_id: str
    entrants: Dict[str, List[ProgressionPointOut]]
