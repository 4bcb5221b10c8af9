"""Win/draw/loss classification for a single match."""

from typing import Literal, NamedTuple

MatchResult = Literal["W", "D", "L"]

WIN: MatchResult = "W"
DRAW: MatchResult = "D"
LOSS: MatchResult = "L"

# Actual score fed into the Elo expectation formula.
OUTCOME_SCORES: dict[str, float] = {WIN: 1.0, DRAW: 0.5, LOSS: 0.0}


class MatchResultPair(NamedTuple):
    home_result: MatchResult
    away_result: MatchResult


def determine_match_result(home_score: int, away_score: int) -> MatchResultPair:
    """Classify a score pair from each side's point of view.

    Scores are not range checked; negative values are classified like any
    other integers.
    """
    if home_score > away_score:
        return MatchResultPair(WIN, LOSS)
    if home_score < away_score:
        return MatchResultPair(LOSS, WIN)
    return MatchResultPair(DRAW, DRAW)


def actual_score(result: str) -> float:
    return OUTCOME_SCORES[result]
