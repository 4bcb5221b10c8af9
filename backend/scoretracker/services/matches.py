"""Match registration, reversal and season replay.

All three run under the season's write lock and apply their rating changes
in one commit, so a failure anywhere leaves every rating and participation
row untouched. Achievements are granted after a registration commits; a
failure there is logged and leaves the registered match in place.

Entrants are players, identified by player id. When both sides field two or
more players each side's exact player set is also rated as a team entrant
with the season's strategy, treating the team as a one-member side.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import uuid
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import standings_cache
from ..db_errors import is_unique_violation_error
from ..exceptions import (
    EntrantNotInSeason,
    FixtureAlreadyPlayed,
    FixtureNotFound,
    InvalidRevertOrder,
    MatchNotFound,
    SeasonClosed,
    SeasonNotFound,
)
from ..models import (
    Fixture,
    Match,
    MatchPlayer,
    MatchTeam,
    Player,
    Season,
    SeasonPlayer,
    SeasonTeam,
    Team,
)
from ..scoring.rating import (
    MatchRatingResult,
    RatingStrategy,
    RosterEntry,
    get_strategy,
    validate_rosters,
)
from ..time_utils import utcnow
from .achievements import award_achievements_for_players
from .locks import season_locks

logger = logging.getLogger(__name__)

TEAM_MIN_PLAYERS = 2


@dataclass
class RegisteredMatch:
    match: Match
    rating: MatchRatingResult
    team_rating: MatchRatingResult | None = None
    home_player_ids: list[str] = field(default_factory=list)
    away_player_ids: list[str] = field(default_factory=list)
    achievements: dict[str, list[str]] = field(default_factory=dict)

    @property
    def player_ids(self) -> list[str]:
        return [*self.home_player_ids, *self.away_player_ids]


@dataclass
class RevertedMatch:
    match_id: str
    season_id: str
    player_ids: list[str]
    team_ids: list[str]


@dataclass
class ReplayResult:
    matches: int
    ratings: dict[str, float]


def _unique(ids: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(ids))


async def _get_season(session: AsyncSession, season_id: str) -> Season:
    season = await session.get(Season, season_id)
    if season is None:
        raise SeasonNotFound(season_id)
    return season


async def _latest_sequence(session: AsyncSession, season_id: str) -> int:
    return (
        await session.execute(
            select(func.max(Match.sequence)).where(Match.season_id == season_id)
        )
    ).scalar_one_or_none() or 0


async def _season_players(
    session: AsyncSession, season_id: str, player_ids: Sequence[str]
) -> dict[str, SeasonPlayer]:
    rows = (
        await session.execute(
            select(SeasonPlayer).where(
                SeasonPlayer.season_id == season_id,
                SeasonPlayer.player_id.in_(player_ids),
                SeasonPlayer.disabled.is_(False),
            )
        )
    ).scalars().all()
    found = {sp.player_id: sp for sp in rows}
    missing = sorted(set(player_ids) - set(found))
    if missing:
        raise EntrantNotInSeason(missing)
    return found


async def _fixture_rosters(
    session: AsyncSession, season_id: str, fixture_id: str
) -> tuple[Fixture, list[str], list[str]]:
    fixture = await session.get(Fixture, fixture_id)
    if fixture is None or fixture.season_id != season_id:
        raise FixtureNotFound(fixture_id)
    if fixture.match_id is not None:
        raise FixtureAlreadyPlayed(fixture_id)
    home = await session.get(SeasonPlayer, fixture.home_player_id)
    away = await session.get(SeasonPlayer, fixture.away_player_id)
    return fixture, [home.player_id], [away.player_id]


async def _find_team(session: AsyncSession, player_key: str) -> Team | None:
    return (
        await session.execute(select(Team).where(Team.player_key == player_key))
    ).scalar_one_or_none()


async def _create_team(
    session: AsyncSession, ordered: Sequence[str], player_key: str
) -> Team:
    names = dict(
        (
            await session.execute(
                select(Player.id, Player.name).where(Player.id.in_(ordered))
            )
        ).all()
    )
    team = Team(
        id=uuid.uuid4().hex,
        name=" & ".join(names.get(pid, pid) for pid in ordered),
        player_ids=list(ordered),
        player_key=player_key,
    )
    # Teams are shared across seasons, so another season's writer may insert
    # the same player set first.
    try:
        async with session.begin_nested():
            session.add(team)
    except IntegrityError as exc:
        if not is_unique_violation_error(exc):
            raise
        existing = await _find_team(session, player_key)
        if existing is None:
            raise
        logger.info("Team %s created concurrently; reusing %s", player_key, existing.id)
        return existing
    return team


async def _season_team(
    session: AsyncSession, season: Season, player_ids: Sequence[str]
) -> SeasonTeam:
    """Return the season entry for the team made of exactly ``player_ids``."""
    ordered = sorted(player_ids)
    player_key = ",".join(ordered)
    team = await _find_team(session, player_key)
    if team is None:
        team = await _create_team(session, ordered, player_key)

    season_team = (
        await session.execute(
            select(SeasonTeam).where(
                SeasonTeam.season_id == season.id, SeasonTeam.team_id == team.id
            )
        )
    ).scalar_one_or_none()
    if season_team is None:
        season_team = SeasonTeam(
            id=uuid.uuid4().hex,
            season_id=season.id,
            team_id=team.id,
            score=season.initial_score,
        )
        session.add(season_team)
    return season_team


def _apply_player_rating(
    match: Match,
    rating: MatchRatingResult,
    home: Sequence[SeasonPlayer],
    away: Sequence[SeasonPlayer],
) -> list[MatchPlayer]:
    rows = []
    for home_team, side, outcome in (
        (True, home, rating.result.home_result),
        (False, away, rating.result.away_result),
    ):
        for sp in side:
            after = rating.rating_after(sp.player_id)
            rows.append(
                MatchPlayer(
                    id=uuid.uuid4().hex,
                    match_id=match.id,
                    season_player_id=sp.id,
                    home_team=home_team,
                    score_before=sp.score,
                    score_after=after,
                    result=outcome,
                )
            )
            sp.score = after
    return rows


def _rate_teams(
    strategy: RatingStrategy,
    match: Match,
    home_team: SeasonTeam,
    away_team: SeasonTeam,
) -> tuple[MatchRatingResult, list[MatchTeam]]:
    rating = strategy.calculate(
        home_score=match.home_score,
        away_score=match.away_score,
        home=(RosterEntry(home_team.id, home_team.score),),
        away=(RosterEntry(away_team.id, away_team.score),),
    )
    rows = []
    for is_home, team, outcome in (
        (True, home_team, rating.result.home_result),
        (False, away_team, rating.result.away_result),
    ):
        after = rating.rating_after(team.id)
        rows.append(
            MatchTeam(
                id=uuid.uuid4().hex,
                match_id=match.id,
                season_team_id=team.id,
                home_team=is_home,
                score_before=team.score,
                score_after=after,
                result=outcome,
            )
        )
        team.score = after
    return rating, rows


async def register_match(
    session: AsyncSession,
    season_id: str,
    home_player_ids: Sequence[str],
    away_player_ids: Sequence[str],
    home_score: int,
    away_score: int,
    *,
    created_by: str | None = None,
    fixture_id: str | None = None,
) -> RegisteredMatch:
    """Record a match and apply its rating changes atomically.

    With ``fixture_id`` the rosters come from the fixture and the supplied
    ones are ignored.
    """
    async with season_locks.hold(season_id):
        try:
            registered = await _register(
                session,
                season_id,
                home_player_ids,
                away_player_ids,
                home_score,
                away_score,
                created_by=created_by,
                fixture_id=fixture_id,
            )
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    await standings_cache.invalidate_season(season_id)
    logger.info(
        "Registered match %s (#%d) in season %s: %d-%d",
        registered.match.id,
        registered.match.sequence,
        season_id,
        home_score,
        away_score,
    )
    # Detached so the achievement commit (or its rollback) cannot expire it.
    session.expunge(registered.match)
    try:
        registered.achievements = await award_achievements_for_players(
            session, season_id, registered.player_ids
        )
    except Exception:
        # The match is committed; achievements catch up on the next registration.
        await session.rollback()
        logger.exception(
            "Awarding achievements failed after match %s in season %s",
            registered.match.id,
            season_id,
        )
    return registered


async def _register(
    session: AsyncSession,
    season_id: str,
    home_player_ids: Sequence[str],
    away_player_ids: Sequence[str],
    home_score: int,
    away_score: int,
    *,
    created_by: str | None,
    fixture_id: str | None,
) -> RegisteredMatch:
    season = await _get_season(session, season_id)
    if season.closed:
        raise SeasonClosed(season_id)
    strategy = get_strategy(season.score_type, season.k_factor)

    fixture = None
    if fixture_id is not None:
        fixture, home_player_ids, away_player_ids = await _fixture_rosters(
            session, season_id, fixture_id
        )
    home_ids = _unique(home_player_ids)
    away_ids = _unique(away_player_ids)
    validate_rosters(home_ids, away_ids)

    entrants = await _season_players(session, season_id, [*home_ids, *away_ids])
    home = [entrants[pid] for pid in home_ids]
    away = [entrants[pid] for pid in away_ids]

    rating = strategy.calculate(
        home_score=home_score,
        away_score=away_score,
        home=tuple(RosterEntry(sp.player_id, sp.score) for sp in home),
        away=tuple(RosterEntry(sp.player_id, sp.score) for sp in away),
    )

    match = Match(
        id=uuid.uuid4().hex,
        season_id=season_id,
        sequence=await _latest_sequence(session, season_id) + 1,
        home_score=home_score,
        away_score=away_score,
        home_expected_elo=rating.home.winning_odds,
        away_expected_elo=rating.away.winning_odds,
        created_by=created_by,
        created_at=utcnow(),
    )
    session.add(match)
    # Parent row first so participation foreign keys resolve on flush.
    await session.flush()
    session.add_all(_apply_player_rating(match, rating, home, away))

    team_rating = None
    if len(home_ids) >= TEAM_MIN_PLAYERS and len(away_ids) >= TEAM_MIN_PLAYERS:
        home_team = await _season_team(session, season, home_ids)
        away_team = await _season_team(session, season, away_ids)
        await session.flush()
        team_rating, team_rows = _rate_teams(strategy, match, home_team, away_team)
        session.add_all(team_rows)

    if fixture is not None:
        fixture.match_id = match.id

    await session.flush()
    return RegisteredMatch(
        match=match,
        rating=rating,
        team_rating=team_rating,
        home_player_ids=home_ids,
        away_player_ids=away_ids,
    )


async def revert_match(session: AsyncSession, season_id: str, match_id: str) -> RevertedMatch:
    """Undo the season's latest match, restoring every pre-match rating."""
    async with season_locks.hold(season_id):
        try:
            reverted = await _revert(session, season_id, match_id)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    await standings_cache.invalidate_season(season_id)
    logger.info("Reverted match %s in season %s", match_id, season_id)
    return reverted


async def _revert(session: AsyncSession, season_id: str, match_id: str) -> RevertedMatch:
    season = await _get_season(session, season_id)
    if season.closed:
        raise SeasonClosed(season_id)
    match = await session.get(Match, match_id)
    if match is None or match.season_id != season_id:
        raise MatchNotFound(match_id)
    if match.sequence != await _latest_sequence(session, season_id):
        raise InvalidRevertOrder(match_id)

    player_rows = (
        await session.execute(
            select(MatchPlayer, SeasonPlayer)
            .join(SeasonPlayer, SeasonPlayer.id == MatchPlayer.season_player_id)
            .where(MatchPlayer.match_id == match_id)
        )
    ).all()
    team_rows = (
        await session.execute(
            select(MatchTeam, SeasonTeam)
            .join(SeasonTeam, SeasonTeam.id == MatchTeam.season_team_id)
            .where(MatchTeam.match_id == match_id)
        )
    ).all()

    for mp, sp in player_rows:
        sp.score = mp.score_before
    for mt, st in team_rows:
        st.score = mt.score_before

    fixtures = (
        await session.execute(select(Fixture).where(Fixture.match_id == match_id))
    ).scalars().all()
    for fixture in fixtures:
        fixture.match_id = None
    await session.flush()

    for mp, _ in player_rows:
        await session.delete(mp)
    for mt, _ in team_rows:
        await session.delete(mt)
    await session.flush()
    await session.delete(match)
    await session.flush()

    return RevertedMatch(
        match_id=match_id,
        season_id=season_id,
        player_ids=[sp.player_id for _, sp in player_rows],
        team_ids=[st.team_id for _, st in team_rows],
    )


async def replay_season(
    session: AsyncSession, season_id: str, *, dry_run: bool = False
) -> ReplayResult:
    """Recompute every rating in the season from the initial score.

    Matches are replayed in sequence order and each participation row's
    before/after/result is rewritten. With ``dry_run`` the recomputed ratings
    are returned and the transaction is rolled back.
    """
    async with season_locks.hold(season_id):
        try:
            result = await _replay(session, season_id)
            if dry_run:
                await session.rollback()
            else:
                await session.commit()
        except Exception:
            await session.rollback()
            raise

    if not dry_run:
        await standings_cache.invalidate_season(season_id)
    logger.info(
        "Replayed %d matches in season %s%s",
        result.matches,
        season_id,
        " (dry run)" if dry_run else "",
    )
    return result


async def _replay(session: AsyncSession, season_id: str) -> ReplayResult:
    season = await _get_season(session, season_id)
    strategy = get_strategy(season.score_type, season.k_factor)

    season_players = (
        await session.execute(select(SeasonPlayer).where(SeasonPlayer.season_id == season_id))
    ).scalars().all()
    season_teams = (
        await session.execute(select(SeasonTeam).where(SeasonTeam.season_id == season_id))
    ).scalars().all()
    players_by_id = {sp.id: sp for sp in season_players}
    teams_by_id = {st.id: st for st in season_teams}
    for sp in season_players:
        sp.score = season.initial_score
    for st in season_teams:
        st.score = season.initial_score

    matches = (
        await session.execute(
            select(Match).where(Match.season_id == season_id).order_by(Match.sequence)
        )
    ).scalars().all()
    for match in matches:
        player_rows = (
            await session.execute(
                select(MatchPlayer).where(MatchPlayer.match_id == match.id)
            )
        ).scalars().all()
        rating = strategy.calculate(
            home_score=match.home_score,
            away_score=match.away_score,
            home=tuple(
                RosterEntry(mp.season_player_id, players_by_id[mp.season_player_id].score)
                for mp in player_rows
                if mp.home_team
            ),
            away=tuple(
                RosterEntry(mp.season_player_id, players_by_id[mp.season_player_id].score)
                for mp in player_rows
                if not mp.home_team
            ),
        )
        match.home_expected_elo = rating.home.winning_odds
        match.away_expected_elo = rating.away.winning_odds
        for mp in player_rows:
            sp = players_by_id[mp.season_player_id]
            mp.score_before = sp.score
            mp.score_after = rating.rating_after(mp.season_player_id)
            mp.result = rating.result.home_result if mp.home_team else rating.result.away_result
            sp.score = mp.score_after

        team_rows = (
            await session.execute(select(MatchTeam).where(MatchTeam.match_id == match.id))
        ).scalars().all()
        home_team = next((mt for mt in team_rows if mt.home_team), None)
        away_team = next((mt for mt in team_rows if not mt.home_team), None)
        if home_team is None or away_team is None:
            continue
        team_rating = strategy.calculate(
            home_score=match.home_score,
            away_score=match.away_score,
            home=(RosterEntry(home_team.season_team_id, teams_by_id[home_team.season_team_id].score),),
            away=(RosterEntry(away_team.season_team_id, teams_by_id[away_team.season_team_id].score),),
        )
        for mt in (home_team, away_team):
            st = teams_by_id[mt.season_team_id]
            mt.score_before = st.score
            mt.score_after = team_rating.rating_after(mt.season_team_id)
            mt.result = (
                team_rating.result.home_result if mt.home_team else team_rating.result.away_result
            )
            st.score = mt.score_after

    await session.flush()
    return ReplayResult(
        matches=len(matches),
        ratings={sp.player_id: sp.score for sp in season_players},
    )
