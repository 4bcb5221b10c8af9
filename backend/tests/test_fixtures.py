import os, sys
from collections import Counter
from itertools import combinations

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from scoretracker.scoring.fixtures import generate_round_robin


def test_even_field_single_cycle():
    ids = ["a", "b", "c", "d"]
    pairings = generate_round_robin(ids, 1)
    assert len(pairings) == 6
    assert {r.round for r in pairings} == {1, 2, 3}
    played = {frozenset((p.home_id, p.away_id)) for p in pairings}
    assert played == {frozenset(pair) for pair in combinations(ids, 2)}


def test_each_entrant_plays_once_per_round():
    pairings = generate_round_robin(["a", "b", "c", "d", "e", "f"], 1)
    for round_number in range(1, 6):
        seen = Counter()
        for p in pairings:
            if p.round == round_number:
                seen.update([p.home_id, p.away_id])
        assert set(seen.values()) == {1}
        assert len(seen) == 6


def test_odd_field_gets_a_bye():
    pairings = generate_round_robin(["a", "b", "c"], 1)
    assert len(pairings) == 3
    assert {r.round for r in pairings} == {1, 2, 3}
    assert all(len([p for p in pairings if p.round == r]) == 1 for r in (1, 2, 3))


def test_second_cycle_swaps_home_and_away():
    pairings = generate_round_robin(["a", "b", "c", "d"], 2)
    first = [(p.home_id, p.away_id) for p in pairings if p.round <= 3]
    second = [(p.home_id, p.away_id) for p in pairings if p.round > 3]
    assert len(pairings) == 12
    assert second == [(away, home) for home, away in first]


def test_degenerate_inputs():
    assert generate_round_robin(["a"], 2) == []
    assert generate_round_robin(["a", "b"], 0) == []
