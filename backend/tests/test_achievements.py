import os, sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from scoretracker.scoring.achievements import (
    ACHIEVEMENT_TYPES,
    ACHIEVEMENTS_BY_TYPE,
    detect_achievements,
    detect_goal_streaks,
    detect_redemptions,
    top_achievements,
)


def test_five_wins():
    assert detect_achievements(["W"] * 5) == {"5_win_streak"}


def test_four_wins_is_not_enough():
    assert detect_achievements(["W"] * 4) == set()


def test_redemption_three():
    assert detect_achievements(["L", "L", "L", "W", "W", "W"]) == {"3_win_loss_redemption"}


def test_win_streak_tiers_are_cumulative():
    found = detect_achievements(["W"] * 15)
    assert {"5_win_streak", "10_win_streak", "15_win_streak"} <= found


def test_broken_streak_does_not_reach_ten():
    found = detect_achievements(["W"] * 9 + ["D"] + ["W"] * 9)
    assert "5_win_streak" in found
    assert "10_win_streak" not in found


def test_redemption_substring_semantics():
    # A longer losing run still contains the pattern.
    assert detect_redemptions("LLLLWWW") == {"3_win_loss_redemption"}
    # A draw inside either run breaks it.
    assert detect_redemptions("LLDLWWW") == set()
    assert detect_redemptions(list("L" * 5 + "W" * 5)) == {
        "3_win_loss_redemption",
        "5_win_loss_redemption",
    }


def test_clean_sheets():
    results = ["W", "D", "W", "W", "W"]
    assert "5_clean_sheet_streak" in detect_achievements(results, goals_conceded=[0] * 5)
    assert "5_clean_sheet_streak" not in detect_achievements(
        results, goals_conceded=[0, 0, 1, 0, 0]
    )


def test_missing_conceded_data_breaks_clean_sheets():
    assert detect_achievements(["D"] * 5, goals_conceded=[0, 0, None, 0, 0]) == set()
    assert detect_achievements(["D"] * 5) == set()


@pytest.mark.parametrize(
    "goals, expected",
    [
        ([3, 3, 3, 3, 3], {"3_goals_5_games"}),
        ([5, 6, 9, 5, 5], {"3_goals_5_games", "5_goals_5_games"}),
        ([8, 8, 9, 10, 8], {"3_goals_5_games", "5_goals_5_games", "8_goals_5_games"}),
        ([9, 9, 9, 9, 2], set()),
        ([9, 9, 9, 9], set()),
        ([0, 0, 4, 4, 4, 4, 4], {"3_goals_5_games"}),
    ],
)
def test_goal_streaks(goals, expected):
    assert detect_goal_streaks(goals) == expected


def test_detection_is_idempotent():
    results = ["L", "L", "L", "W", "W", "W", "W", "W"]
    conceded = [2, 1, 3, 0, 0, 0, 0, 0]
    scored = [0, 0, 1, 3, 4, 3, 5, 3]
    first = detect_achievements(results, goals_conceded=conceded, goals_scored=scored)
    second = detect_achievements(results, goals_conceded=conceded, goals_scored=scored)
    assert first == second == {
        "3_win_loss_redemption",
        "5_win_streak",
        "5_clean_sheet_streak",
        "3_goals_5_games",
    }


def test_catalog_covers_every_detected_type():
    found = detect_achievements(
        ["L"] * 8 + ["W"] * 15,
        goals_conceded=[1] * 8 + [0] * 15,
        goals_scored=[0] * 8 + [8] * 15,
    )
    assert found <= set(ACHIEVEMENT_TYPES)
    assert len(found) == 12


def test_top_achievements_keeps_highest_tier_per_group():
    top = top_achievements(
        ["5_win_streak", "10_win_streak", "3_goals_5_games", "season_winner", "unknown"]
    )
    assert top == ["10_win_streak", "3_goals_5_games", "season_winner"]
    assert ACHIEVEMENTS_BY_TYPE["10_win_streak"].group == "win_streak"
