import os, sys
from datetime import datetime, timedelta, timezone

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from scoretracker.scoring.form import (
    RatingChange,
    ResultEntry,
    calculate_point_diffs,
    filter_window,
    group_results_by_entrant,
    point_diff_for,
    rating_progression,
    recent_form,
)
from scoretracker.time_utils import day_window

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


def test_point_diffs_sum_per_entrant():
    changes = [
        RatingChange("a", 1200.0, 1216.0, _at(0)),
        RatingChange("b", 1200.0, 1184.0, _at(0)),
        RatingChange("a", 1216.0, 1201.5, _at(5)),
    ]
    diffs = calculate_point_diffs(changes)
    assert diffs["a"] == pytest.approx(1.5)
    assert diffs["b"] == pytest.approx(-16.0)
    assert point_diff_for(diffs, "nobody") == 0.0


def test_filter_window_is_half_open():
    start, end = day_window(datetime(2024, 3, 1, 18, 30, tzinfo=timezone.utc))
    changes = [
        RatingChange("a", 0.0, 3.0, start - timedelta(seconds=1)),
        RatingChange("a", 3.0, 4.0, start),
        RatingChange("a", 4.0, 7.0, end - timedelta(seconds=1)),
        RatingChange("a", 7.0, 10.0, end),
    ]
    kept = filter_window(changes, start, end)
    assert [c.rating_after for c in kept] == [4.0, 7.0]
    assert calculate_point_diffs(kept) == {"a": 4.0}


def test_filter_window_treats_naive_timestamps_as_utc():
    start, end = day_window(T0)
    naive = RatingChange("a", 0.0, 1.0, T0.replace(tzinfo=None))
    assert filter_window([naive], start, end) == [naive]


def test_form_is_last_five_most_recent_first():
    results = [
        ResultEntry("a", r, _at(i)) for i, r in enumerate(["W", "W", "L", "D", "W", "L", "L"])
    ]
    assert recent_form(results, "a") == ["L", "L", "W", "D", "L"]


def test_form_shorter_than_limit():
    results = [ResultEntry("a", "W", _at(0)), ResultEntry("a", "D", _at(1))]
    assert recent_form(results, "a") == ["D", "W"]
    assert recent_form(results, "b") == []


def test_group_results_sorts_unordered_input():
    results = [
        ResultEntry("a", "L", _at(10)),
        ResultEntry("b", "W", _at(3)),
        ResultEntry("a", "W", _at(1)),
        ResultEntry("b", "D", _at(7)),
    ]
    form = group_results_by_entrant(results, limit=5)
    assert form == {"a": ["L", "W"], "b": ["D", "W"]}


def test_group_results_equal_timestamps_keep_input_order():
    results = [ResultEntry("a", "W", _at(0)), ResultEntry("a", "L", _at(0))]
    assert group_results_by_entrant(results)["a"] == ["L", "W"]


def test_rating_progression_is_chronological():
    changes = [
        RatingChange("a", 1216.0, 1230.0, _at(5)),
        RatingChange("a", 1200.0, 1216.0, _at(0)),
        RatingChange("b", 1200.0, 1184.0, _at(0)),
    ]
    progression = rating_progression(changes)
    assert progression["a"] == [(_at(0), 1216.0), (_at(5), 1230.0)]
    assert progression["b"] == [(_at(0), 1184.0)]
