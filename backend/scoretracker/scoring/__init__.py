"""Pure rating, standings and achievement computations (no I/O)."""

from . import achievements, fixtures, form, rating, results, standings

__all__ = [
    "achievements",
    "fixtures",
    "form",
    "rating",
    "results",
    "standings",
]
