import os, sys

from sqlalchemy.exc import IntegrityError

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from scoretracker.db_errors import is_unique_violation_error


class _PgError(Exception):
    sqlstate = "23505"


def test_sqlite_unique_violation_matches_columns():
    exc = IntegrityError(
        "INSERT", {}, Exception("UNIQUE constraint failed: player_achievement.player_id, player_achievement.type")
    )
    assert is_unique_violation_error(exc)
    assert is_unique_violation_error(exc, "player_achievement.player_id")
    assert not is_unique_violation_error(exc, "match.sequence")


def test_postgres_sqlstate():
    exc = IntegrityError(
        "INSERT",
        {},
        _PgError('duplicate key value violates unique constraint "uq_match_season_id_sequence"'),
    )
    assert is_unique_violation_error(exc, "uq_match_season_id_sequence")


def test_other_integrity_errors_do_not_match():
    exc = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: match.season_id"))
    assert not is_unique_violation_error(exc)
