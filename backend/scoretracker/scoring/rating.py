"""Rating strategies for the supported season score types.

Each strategy is a pure function of the two rosters (with their current
ratings), the final score and the season's k-factor. Nothing here touches the
database; the registration service feeds in ratings as of immediately before
the match and persists what comes back.

Score types:

``elo``
    Team vs team. Each side is collapsed to the mean of its members' ratings
    and every member of a side receives the same delta.
``elo-individual-vs-team``
    Each player's own rating is measured against the opposing side's mean, so
    members of the same side can move by different amounts.
``3-1-0``
    Points table. Win +3, draw +1, loss +0 for every member of a side.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from ..exceptions import EmptyRoster, InvalidScoreType, OverlappingRosters
from .results import MatchResultPair, actual_score, determine_match_result

SCORE_TYPE_ELO = "elo"
SCORE_TYPE_ELO_INDIVIDUAL = "elo-individual-vs-team"
SCORE_TYPE_POINTS = "3-1-0"
SCORE_TYPES = (SCORE_TYPE_ELO, SCORE_TYPE_POINTS, SCORE_TYPE_ELO_INDIVIDUAL)

ELO_SCALE = 400.0


@dataclass(frozen=True)
class RosterEntry:
    id: str
    rating: float


@dataclass(frozen=True)
class SideRatings:
    winning_odds: float
    players: tuple[RosterEntry, ...]

    def rating_map(self) -> dict[str, float]:
        return {p.id: p.rating for p in self.players}


@dataclass(frozen=True)
class MatchRatingResult:
    result: MatchResultPair
    home: SideRatings
    away: SideRatings

    def rating_after(self, entrant_id: str) -> float:
        for side in (self.home, self.away):
            for player in side.players:
                if player.id == entrant_id:
                    return player.rating
        raise KeyError(entrant_id)


def expected_score(rating: float, opponent_rating: float) -> float:
    """Probability of ``rating`` beating ``opponent_rating`` under Elo."""
    return 1 / (1 + 10 ** ((opponent_rating - rating) / ELO_SCALE))


def side_rating(roster: Sequence[RosterEntry]) -> float:
    if len(roster) == 1:
        return roster[0].rating
    return sum(p.rating for p in roster) / len(roster)


class RatingStrategy(Protocol):
    score_type: str

    def calculate(
        self,
        *,
        home_score: int,
        away_score: int,
        home: Sequence[RosterEntry],
        away: Sequence[RosterEntry],
    ) -> MatchRatingResult:
        ...


class TeamVsTeam:
    score_type = SCORE_TYPE_ELO

    def __init__(self, k_factor: float) -> None:
        self.k_factor = k_factor

    def _player_expected(self, player: RosterEntry, own_side: float, opponent_side: float) -> float:
        return expected_score(own_side, opponent_side)

    def _apply(
        self,
        roster: Sequence[RosterEntry],
        own_side: float,
        opponent_side: float,
        actual: float,
    ) -> tuple[RosterEntry, ...]:
        return tuple(
            RosterEntry(
                p.id,
                p.rating
                + self.k_factor * (actual - self._player_expected(p, own_side, opponent_side)),
            )
            for p in roster
        )

    def calculate(
        self,
        *,
        home_score: int,
        away_score: int,
        home: Sequence[RosterEntry],
        away: Sequence[RosterEntry],
    ) -> MatchRatingResult:
        result = determine_match_result(home_score, away_score)
        home_rating = side_rating(home)
        away_rating = side_rating(away)
        return MatchRatingResult(
            result=result,
            home=SideRatings(
                winning_odds=expected_score(home_rating, away_rating),
                players=self._apply(
                    home, home_rating, away_rating, actual_score(result.home_result)
                ),
            ),
            away=SideRatings(
                winning_odds=expected_score(away_rating, home_rating),
                players=self._apply(
                    away, away_rating, home_rating, actual_score(result.away_result)
                ),
            ),
        )


class IndividualVsTeam(TeamVsTeam):
    score_type = SCORE_TYPE_ELO_INDIVIDUAL

    def _player_expected(self, player: RosterEntry, own_side: float, opponent_side: float) -> float:
        return expected_score(player.rating, opponent_side)


class PointsBased:
    score_type = SCORE_TYPE_POINTS

    POINTS = {"W": 3, "D": 1, "L": 0}

    def calculate(
        self,
        *,
        home_score: int,
        away_score: int,
        home: Sequence[RosterEntry],
        away: Sequence[RosterEntry],
    ) -> MatchRatingResult:
        result = determine_match_result(home_score, away_score)
        home_points = self.POINTS[result.home_result]
        away_points = self.POINTS[result.away_result]
        return MatchRatingResult(
            result=result,
            home=SideRatings(
                winning_odds=0.5,
                players=tuple(RosterEntry(p.id, p.rating + home_points) for p in home),
            ),
            away=SideRatings(
                winning_odds=0.5,
                players=tuple(RosterEntry(p.id, p.rating + away_points) for p in away),
            ),
        )


def get_strategy(score_type: str, k_factor: float) -> RatingStrategy:
    if score_type == SCORE_TYPE_ELO:
        return TeamVsTeam(k_factor)
    if score_type == SCORE_TYPE_ELO_INDIVIDUAL:
        return IndividualVsTeam(k_factor)
    if score_type == SCORE_TYPE_POINTS:
        return PointsBased()
    raise InvalidScoreType(score_type)


def validate_rosters(home_ids: Sequence[str], away_ids: Sequence[str]) -> None:
    """Raise if a side is empty or an entrant appears on both sides."""
    if not home_ids:
        raise EmptyRoster("home")
    if not away_ids:
        raise EmptyRoster("away")
    overlap = sorted(set(home_ids) & set(away_ids))
    if overlap:
        raise OverlappingRosters(overlap)


def calculate_match(
    score_type: str,
    k_factor: float,
    home_score: int,
    away_score: int,
    home: Sequence[RosterEntry],
    away: Sequence[RosterEntry],
) -> MatchRatingResult:
    """Compute every entrant's rating after one match plus each side's odds."""
    strategy = get_strategy(score_type, k_factor)
    validate_rosters([p.id for p in home], [p.id for p in away])
    return strategy.calculate(
        home_score=home_score,
        away_score=away_score,
        home=tuple(home),
        away=tuple(away),
    )
