"""Calendar allocation for a whole season.

Competitions are placed window by window (state, then national, then
continental) so local competitions get first claim on weekend slots. Every
competition shares one OccupiedDateIndex, which is what keeps a team from
being booked twice on a date across competitions.

Placement is greedy and never backtracks: each round takes the first
allowed date on or after a rolling cursor where none of its teams is busy.
A round that cannot be placed before its window closes is dropped and
reported; it is not moved outside the window.
"""

import calendar
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta

from seasonsched.models import (
    Competition, DayOfWeek, DroppedRound, MatchPair, OccupiedDateIndex,
    ScheduledMatch, SchedulingWindow, WEEKENDS, WINDOW_ORDER,
)

logger = logging.getLogger(__name__)

# Window defaults as (days, start MM-DD, end MM-DD, gap days, rest days)
DEFAULT_WINDOWS = {
    "state": {
        "days": list(WEEKENDS),
        "start": (1, 15),
        "end": (5, 15),
        "gap_days": 7,
        "rest_days": 0,
    },
    "national": {
        "days": list(WEEKENDS),
        "start": (3, 15),
        "end": (12, 15),
        "gap_days": 7,
        "rest_days": 0,
    },
    "continental": {
        "days": [DayOfWeek.Wed],
        "start": (3, 1),
        "end": (11, 15),
        "gap_days": 14,
        "rest_days": 2,
    },
}


def _resolve_day(year: int, month: int, day: int) -> date:
    # 02-29 falls back to 02-28 outside leap years
    if (month, day) == (2, 29) and not calendar.isleap(year):
        day = 28
    return date(year, month, day)


def build_windows(year: int,
                  definitions: dict | None = None) -> dict[str, SchedulingWindow]:
    """Resolve window definitions (month/day pairs) to dates in ``year``."""
    definitions = definitions or DEFAULT_WINDOWS
    windows = {}
    for name, w in definitions.items():
        start_m, start_d = w["start"]
        end_m, end_d = w["end"]
        windows[name] = SchedulingWindow(
            name=name,
            days=list(w["days"]),
            start_date=_resolve_day(year, start_m, start_d),
            end_date=_resolve_day(year, end_m, end_d),
            gap_days=w.get("gap_days", 7),
            rest_days=w.get("rest_days", 0),
        )
    return windows


@dataclass
class ScheduleResult:
    matches: list[ScheduledMatch] = field(default_factory=list)
    dropped_rounds: list[DroppedRound] = field(default_factory=list)
    index: OccupiedDateIndex = field(default_factory=OccupiedDateIndex)


def group_by_round(fixtures: list[MatchPair]) -> list[list[MatchPair]]:
    """Group fixtures by round number.

    Rounds come out in order of first appearance; fixtures keep their
    generation order within a round.
    """
    rounds: dict[int, list[MatchPair]] = {}
    for f in fixtures:
        rounds.setdefault(f.round, []).append(f)
    return list(rounds.values())


def _round_teams(round_fixtures: list[MatchPair]) -> list[int]:
    teams = []
    for f in round_fixtures:
        teams.extend(f.teams())
    return teams


def is_continental(competition: Competition) -> bool:
    return competition.window == "continental" or competition.format == "group_knockout"


def schedule_competition(competition: Competition, fixtures: list[MatchPair],
                         window: SchedulingWindow, season_id: int,
                         index: OccupiedDateIndex) -> ScheduleResult:
    """Place one competition's rounds into its window.

    ``index`` is read and updated in place; pass a fresh one to schedule a
    competition in isolation.
    """
    result = ScheduleResult(index=index)
    continental = is_continental(competition)
    current = window.start_date

    for round_fixtures in group_by_round(fixtures):
        teams = _round_teams(round_fixtures)
        placed = None

        while current <= window.end_date:
            if (window.allows(current)
                    and index.is_free(current, teams)
                    and not index.played_continental_within(
                        current, teams, window.rest_days)):
                placed = current
                break
            current += timedelta(days=1)

        if placed is None:
            round_no = round_fixtures[0].round
            logger.warning(
                "%s: round %d could not be placed before %s, dropped",
                competition.name, round_no, window.end_date,
            )
            result.dropped_rounds.append(DroppedRound(
                competition_id=competition.id,
                round=round_no,
                window=window.name,
                fixtures=round_fixtures,
            ))
        else:
            index.occupy(placed, teams, continental=continental)
            for f in round_fixtures:
                result.matches.append(
                    ScheduledMatch.from_pair(f, competition.id, season_id, placed)
                )

        # The cursor moves on whether or not the round was placed
        current += timedelta(days=window.gap_days)

    return result


_WINDOW_RANK = {name: i for i, name in enumerate(WINDOW_ORDER)}


def _scheduling_key(competition: Competition) -> tuple[int, int]:
    return (_WINDOW_RANK.get(competition.window, _WINDOW_RANK["national"]),
            competition.priority)


def window_order(competitions: list[Competition]) -> list[Competition]:
    """Competitions in scheduling order: by window, then by priority."""
    return sorted(competitions, key=_scheduling_key)


def schedule_season(entries: list[tuple[Competition, list[MatchPair]]],
                    windows: dict[str, SchedulingWindow],
                    season_id: int,
                    index: OccupiedDateIndex | None = None) -> ScheduleResult:
    """Date every competition's fixtures for one season.

    ``entries`` pairs each competition with its generated fixtures. Returns
    the dated matches, the rounds that had to be dropped, and the occupancy
    index built along the way.
    """
    index = index if index is not None else OccupiedDateIndex()
    result = ScheduleResult(index=index)
    ordered = sorted(entries, key=lambda entry: _scheduling_key(entry[0]))

    for comp, fixtures in ordered:
        window = windows.get(comp.window)
        if window is None:
            logger.warning("%s: unknown window %r, using national",
                           comp.name, comp.window)
            window = windows["national"]

        part = schedule_competition(comp, fixtures, window, season_id, index)
        logger.info("%s: %d matches scheduled in %s window",
                    comp.name, len(part.matches), window.name)
        result.matches.extend(part.matches)
        result.dropped_rounds.extend(part.dropped_rounds)

    if result.dropped_rounds:
        per_comp = defaultdict(int)
        for d in result.dropped_rounds:
            per_comp[d.competition_id] += 1
        logger.warning("%d rounds dropped across %d competitions",
                       len(result.dropped_rounds), len(per_comp))

    return result
