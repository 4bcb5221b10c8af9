from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        super().__init__(detail or title)
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class InvalidScoreType(DomainException):
    def __init__(self, score_type: object) -> None:
        super().__init__(
            status_code=422,
            title="Invalid score type",
            detail=f"score type {score_type!r} is not one of elo, 3-1-0, elo-individual-vs-team",
            code="invalid_score_type",
        )


class EmptyRoster(DomainException):
    def __init__(self, side: str) -> None:
        super().__init__(
            status_code=422,
            title="Empty roster",
            detail=f"{side} side must have at least one entrant",
            code="empty_roster",
        )


class OverlappingRosters(DomainException):
    def __init__(self, entrant_ids: list[str]) -> None:
        super().__init__(
            status_code=422,
            title="Overlapping rosters",
            detail="entrants on both sides: " + ", ".join(entrant_ids),
            code="overlapping_rosters",
        )


class InvalidRevertOrder(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=409,
            title="Invalid revert order",
            detail=f"match '{match_id}' is not the latest match of its season",
            code="invalid_revert_order",
        )


class SeasonClosed(DomainException):
    def __init__(self, season_id: str) -> None:
        super().__init__(
            status_code=409,
            title="Season closed",
            detail=f"season '{season_id}' is closed",
            code="season_closed",
        )


class SeasonNotFound(DomainException):
    def __init__(self, season_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Season not found",
            detail=f"season '{season_id}' not found",
            code="season_not_found",
        )


class MatchNotFound(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Match not found",
            detail=f"match '{match_id}' not found",
            code="match_not_found",
        )


class FixtureNotFound(DomainException):
    def __init__(self, fixture_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Fixture not found",
            detail=f"fixture '{fixture_id}' not found",
            code="fixture_not_found",
        )


class FixtureAlreadyPlayed(DomainException):
    def __init__(self, fixture_id: str) -> None:
        super().__init__(
            status_code=409,
            title="Fixture already played",
            detail=f"fixture '{fixture_id}' already has a registered match",
            code="fixture_already_played",
        )


class EntrantNotInSeason(DomainException):
    def __init__(self, entrant_ids: list[str]) -> None:
        super().__init__(
            status_code=422,
            title="Unknown entrants",
            detail="not enrolled in season: " + ", ".join(entrant_ids),
            code="entrant_not_in_season",
        )


class PlayerAlreadyExists(DomainException):
    def __init__(self, name: str) -> None:
        super().__init__(
            status_code=400,
            title="Player exists",
            detail=f"player name '{name}' already exists",
            code="player_exists",
        )


class PlayerNotFound(DomainException):
    def __init__(self, player_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Player not found",
            detail=f"player '{player_id}' not found",
            code="player_not_found",
        )
