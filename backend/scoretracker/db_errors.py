"""Helpers for working with database/SQLAlchemy errors."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

_UNIQUE_VIOLATION_SQLSTATES = {"23505"}


def is_unique_violation_error(
    exc: SQLAlchemyError, constraint_name: str | None = None
) -> bool:
    """Return ``True`` if ``exc`` was raised by a unique constraint.

    Parameters
    ----------
    exc:
        The SQLAlchemy exception to inspect.
    constraint_name:
        Optional constraint or column substring (such as
        ``"uq_player_achievement_player_id_type"`` or ``"player_achievement.type"``)
        that must appear in the original database error message. PostgreSQL
        reports the constraint name while SQLite reports the columns, so callers
        may pass either. When omitted, any unique violation matches.
    """

    orig = getattr(exc, "orig", None)
    if orig is None:
        return False

    message = str(orig).lower()
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _UNIQUE_VIOLATION_SQLSTATES:
        return True if constraint_name is None else constraint_name.lower() in message

    if "unique constraint" not in message and "duplicate key" not in message:
        return False

    return True if constraint_name is None else constraint_name.lower() in message
