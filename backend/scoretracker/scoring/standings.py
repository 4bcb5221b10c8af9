"""Fold a season's participations into ranked standings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Sequence

from ..time_utils import coerce_utc
from .form import (
    DEFAULT_FORM_LENGTH,
    RatingChange,
    ResultEntry,
    calculate_point_diffs,
    filter_window,
    group_results_by_entrant,
    point_diff_for,
)
from .results import DRAW, LOSS, WIN


@dataclass(frozen=True)
class Entrant:
    id: str
    name: str
    rating: float
    player_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Participation:
    entrant_id: str
    match_id: str
    sequence: int
    created_at: datetime
    home_team: bool
    rating_before: float
    rating_after: float
    result: str


@dataclass
class StandingRow:
    entrant_id: str
    name: str
    current_rating: float
    match_count: int = 0
    win_count: int = 0
    draw_count: int = 0
    loss_count: int = 0
    form: list[str] = field(default_factory=list)
    point_diff: float = 0.0
    rank: int = 0
    player_ids: tuple[str, ...] = ()


def chronological(participations: Iterable[Participation]) -> list[Participation]:
    return sorted(participations, key=lambda p: (coerce_utc(p.created_at), p.sequence))


def build_standings(
    entrants: Iterable[Entrant],
    participations: Iterable[Participation],
    *,
    point_diff_window: tuple[datetime, datetime] | None = None,
    form_length: int = DEFAULT_FORM_LENGTH,
) -> list[StandingRow]:
    """Return one row per entrant ordered by rating (desc) then entrant id.

    An entrant without participations keeps its stored rating. Participations
    for entrants not in ``entrants`` are ignored.
    """
    rows = {
        e.id: StandingRow(
            entrant_id=e.id,
            name=e.name,
            current_rating=e.rating,
            player_ids=e.player_ids,
        )
        for e in entrants
    }
    history = [p for p in chronological(participations) if p.entrant_id in rows]

    for p in history:
        row = rows[p.entrant_id]
        row.current_rating = p.rating_after
        row.match_count += 1
        if p.result == WIN:
            row.win_count += 1
        elif p.result == DRAW:
            row.draw_count += 1
        elif p.result == LOSS:
            row.loss_count += 1

    form = group_results_by_entrant(
        (ResultEntry(p.entrant_id, p.result, p.created_at) for p in history),
        form_length,
    )
    if point_diff_window is not None:
        changes = [
            RatingChange(p.entrant_id, p.rating_before, p.rating_after, p.created_at)
            for p in history
        ]
        diffs = calculate_point_diffs(filter_window(changes, *point_diff_window))
    else:
        diffs = {}

    ordered = rank_rows(rows.values())
    for row in ordered:
        row.form = form.get(row.entrant_id, [])
        row.point_diff = point_diff_for(diffs, row.entrant_id)
    return ordered


def rank_rows(rows: Iterable[StandingRow]) -> list[StandingRow]:
    ordered = sorted(rows, key=lambda r: (-r.current_rating, r.entrant_id))
    for index, row in enumerate(ordered, start=1):
        row.rank = index
    return ordered


def on_fire(rows: Sequence[StandingRow]) -> StandingRow | None:
    """Highest-rated entrant that has played, or ``None``."""
    played = [r for r in rows if r.match_count >= 1]
    if not played:
        return None
    return min(played, key=lambda r: (-r.current_rating, r.entrant_id))


def struggling(rows: Sequence[StandingRow], min_matches: int = 1) -> StandingRow | None:
    """Lowest-rated entrant with at least ``min_matches`` matches, or ``None``."""
    played = [r for r in rows if r.match_count >= max(min_matches, 1)]
    if not played:
        return None
    return min(played, key=lambda r: (r.current_rating, r.entrant_id))
