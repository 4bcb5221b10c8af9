"""Point differentials, recent form and rating progression from rating changes."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, Sequence

from ..time_utils import coerce_utc

DEFAULT_FORM_LENGTH = 5


@dataclass(frozen=True)
class RatingChange:
    entrant_id: str
    rating_before: float
    rating_after: float
    created_at: datetime


@dataclass(frozen=True)
class ResultEntry:
    entrant_id: str
    result: str
    created_at: datetime


def filter_window(
    changes: Iterable[RatingChange], start: datetime, end: datetime
) -> list[RatingChange]:
    """Keep the changes recorded in ``[start, end)``."""
    start_utc, end_utc = coerce_utc(start), coerce_utc(end)
    return [c for c in changes if start_utc <= coerce_utc(c.created_at) < end_utc]


def calculate_point_diffs(changes: Iterable[RatingChange]) -> Dict[str, float]:
    """Net rating swing per entrant over the given participations."""
    diffs: Dict[str, float] = defaultdict(float)
    for change in changes:
        diffs[change.entrant_id] += change.rating_after - change.rating_before
    return dict(diffs)


def point_diff_for(diffs: Dict[str, float], entrant_id: str) -> float:
    return diffs.get(entrant_id, 0.0)


def group_results_by_entrant(
    results: Iterable[ResultEntry], limit: int = DEFAULT_FORM_LENGTH
) -> Dict[str, list[str]]:
    """Return each entrant's last ``limit`` results, most recent first.

    Among results sharing a timestamp, the one appearing later in ``results``
    counts as more recent.
    """
    ordered = sorted(
        enumerate(results),
        key=lambda item: (coerce_utc(item[1].created_at), item[0]),
        reverse=True,
    )
    form: Dict[str, list[str]] = {}
    for _, entry in ordered:
        bucket = form.setdefault(entry.entrant_id, [])
        if len(bucket) < limit:
            bucket.append(entry.result)
    return form


def recent_form(
    results: Iterable[ResultEntry], entrant_id: str, limit: int = DEFAULT_FORM_LENGTH
) -> list[str]:
    return group_results_by_entrant(
        (r for r in results if r.entrant_id == entrant_id), limit
    ).get(entrant_id, [])


def rating_progression(
    changes: Sequence[RatingChange],
) -> Dict[str, list[tuple[datetime, float]]]:
    """Chronological ``(timestamp, rating_after)`` points per entrant."""
    progression: Dict[str, list[tuple[datetime, float]]] = defaultdict(list)
    for change in sorted(changes, key=lambda c: coerce_utc(c.created_at)):
        progression[change.entrant_id].append(
            (coerce_utc(change.created_at), change.rating_after)
        )
    return dict(progression)
