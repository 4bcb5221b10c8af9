"""Database-backed services built on the pure scoring package."""

from .achievements import award_achievements_for_players, load_player_achievements
from .matches import register_match, replay_season, revert_match
from .seasons import close_season, create_season, enroll_player
from .standings import season_progression, season_standings, team_standings

__all__ = [
    "award_achievements_for_players",
    "load_player_achievements",
    "register_match",
    "revert_match",
    "replay_season",
    "create_season",
    "enroll_player",
    "close_season",
    "season_standings",
    "team_standings",
    "season_progression",
]
