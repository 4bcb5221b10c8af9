"""Streak based achievement detection.

Detection always re-scans a player's full chronological history within one
season and returns every type the history qualifies for. Persisting the
result is an upsert keyed by (player, type), so running detection again after
each match never produces duplicates.

Tiers are cumulative. A running win streak passes 5 and 10 on its way to 15,
and the goal scoring check grants every lower tier along with the highest
one.

Redemption is a plain substring test on the concatenated result string, e.g.
``"LLLWWW"`` for the 3 tier. A longer losing run followed by a matching
winning run still contains the pattern (``"LLLLWWW"`` holds ``"LLLWWW"``),
while a draw anywhere inside the run breaks it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .results import LOSS, WIN

WIN_STREAK_TIERS = {
    "5_win_streak": 5,
    "10_win_streak": 10,
    "15_win_streak": 15,
}
REDEMPTION_TIERS = {
    "3_win_loss_redemption": 3,
    "5_win_loss_redemption": 5,
    "8_win_loss_redemption": 8,
}
CLEAN_SHEET_TIERS = {
    "5_clean_sheet_streak": 5,
    "10_clean_sheet_streak": 10,
    "15_clean_sheet_streak": 15,
}
GOAL_STREAK_TIERS = {
    "3_goals_5_games": 3,
    "5_goals_5_games": 5,
    "8_goals_5_games": 8,
}
GOAL_STREAK_WINDOW = 5

SEASON_WINNER = "season_winner"


@dataclass(frozen=True)
class AchievementDefinition:
    type: str
    group: str
    title: str
    icon: str
    level: int


def _tiered(group: str, tiers: dict[str, int], title: str) -> list[AchievementDefinition]:
    icons = ("🥉", "🥈", "🥇")
    return [
        AchievementDefinition(
            type=type_,
            group=group,
            title=title.format(n=threshold),
            icon=icons[index],
            level=threshold,
        )
        for index, (type_, threshold) in enumerate(tiers.items())
    ]


ACHIEVEMENT_DEFINITIONS: list[AchievementDefinition] = [
    *_tiered("win_streak", WIN_STREAK_TIERS, "{n} Win Streak"),
    *_tiered("win_loss_redemption", REDEMPTION_TIERS, "{n} win streak after {n} losses"),
    *_tiered("clean_sheet_streak", CLEAN_SHEET_TIERS, "{n} Clean Sheet Streak"),
    *_tiered("goals_5_games", GOAL_STREAK_TIERS, "{n} Goals 5 in a row"),
    AchievementDefinition(
        type=SEASON_WINNER, group="season_winner", title="Season Winner", icon="🏆", level=1
    ),
]
ACHIEVEMENTS_BY_TYPE = {d.type: d for d in ACHIEVEMENT_DEFINITIONS}
ACHIEVEMENT_TYPES = tuple(ACHIEVEMENTS_BY_TYPE)


def _check_streak(found: set[str], streak: int, tiers: dict[str, int]) -> None:
    for type_, threshold in tiers.items():
        if streak == threshold:
            found.add(type_)


def detect_redemptions(results: Sequence[str]) -> set[str]:
    result_string = "".join(results)
    return {
        type_
        for type_, count in REDEMPTION_TIERS.items()
        if LOSS * count + WIN * count in result_string
    }


def detect_goal_streaks(goals_scored: Sequence[Optional[int]]) -> set[str]:
    """Tiers met by every one of the last five matches."""
    if len(goals_scored) < GOAL_STREAK_WINDOW:
        return set()
    window = goals_scored[-GOAL_STREAK_WINDOW:]
    if any(goals is None for goals in window):
        return set()
    return {
        type_
        for type_, threshold in GOAL_STREAK_TIERS.items()
        if all(goals >= threshold for goals in window)
    }


def detect_achievements(
    results: Sequence[str],
    goals_conceded: Sequence[Optional[int]] | None = None,
    goals_scored: Sequence[Optional[int]] | None = None,
) -> set[str]:
    """Return every achievement type the chronological history qualifies for.

    Args:
        results: ``"W"``/``"D"``/``"L"`` per match, oldest first.
        goals_conceded: Goals conceded per match, aligned with ``results``.
            ``None`` entries (or a missing list) never count as clean sheets.
        goals_scored: Goals scored per match, aligned with ``results``.
    """
    found = detect_redemptions(results)
    if goals_scored is not None:
        found |= detect_goal_streaks(goals_scored)

    win_streak = 0
    clean_sheets = 0
    for index, result in enumerate(results):
        win_streak = win_streak + 1 if result == WIN else 0
        _check_streak(found, win_streak, WIN_STREAK_TIERS)

        conceded = None
        if goals_conceded is not None and index < len(goals_conceded):
            conceded = goals_conceded[index]
        if conceded == 0:
            clean_sheets += 1
            _check_streak(found, clean_sheets, CLEAN_SHEET_TIERS)
        else:
            clean_sheets = 0
    return found


def top_achievements(types: Sequence[str]) -> list[str]:
    """Highest owned tier per achievement group, in catalog order."""
    best: dict[str, AchievementDefinition] = {}
    for type_ in types:
        definition = ACHIEVEMENTS_BY_TYPE.get(type_)
        if definition is None:
            continue
        current = best.get(definition.group)
        if current is None or definition.level > current.level:
            best[definition.group] = definition
    return [d.type for d in ACHIEVEMENT_DEFINITIONS if best.get(d.group) is d]
