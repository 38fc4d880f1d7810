"""Data models for the season scheduler."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class DayOfWeek(Enum):
    Mon = 0
    Tue = 1
    Wed = 2
    Thu = 3
    Fri = 4
    Sat = 5
    Sun = 6

    @classmethod
    def from_str(cls, s: str) -> "DayOfWeek":
        return cls[s[:3].capitalize()]

    def is_weekday(self) -> bool:
        return self.value < 5

    def is_weekend(self) -> bool:
        return self.value >= 5


WEEKDAYS = [DayOfWeek.Mon, DayOfWeek.Tue, DayOfWeek.Wed, DayOfWeek.Thu, DayOfWeek.Fri]
WEEKENDS = [DayOfWeek.Sat, DayOfWeek.Sun]

# Synthetic opponent used to pad odd-sized round-robin fields
BYE = -1

FORMATS = ("league", "knockout", "group_knockout")
# Scheduling order: earlier windows claim calendar slots first
WINDOW_ORDER = ("state", "national", "continental")


@dataclass
class Competition:
    """A league or cup entered by a subset of the teams."""
    id: int
    name: str
    tier: int = 1
    format: str = "league"  # "league", "knockout" or "group_knockout"
    window: str = "national"  # "state", "national" or "continental"
    team_count: int = 20
    priority: int = 1
    start_month: int = 1
    end_month: int = 12
    double_round: bool = True
    team_ids: list[int] = field(default_factory=list)
    group_size: int = 4
    qualifiers_per_group: int = 2

    @property
    def is_knockout(self) -> bool:
        return self.format in ("knockout", "group_knockout")


@dataclass
class MatchPair:
    """An undated fixture."""
    home_team_id: int
    away_team_id: int
    round: int
    group_name: Optional[str] = None

    def involves(self, team_id: int) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def teams(self) -> tuple[int, int]:
        return (self.home_team_id, self.away_team_id)


@dataclass
class ScheduledMatch:
    """A dated fixture belonging to a competition and season.

    Result fields (is_played, home_score, away_score) are written by the
    result recorder, never by the scheduler.
    """
    competition_id: int
    season_id: int
    home_team_id: int
    away_team_id: int
    date: date
    round: int
    is_played: bool = False
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    group_name: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_pair(cls, pair: MatchPair, competition_id: int, season_id: int,
                  d: date) -> "ScheduledMatch":
        return cls(
            competition_id=competition_id,
            season_id=season_id,
            home_team_id=pair.home_team_id,
            away_team_id=pair.away_team_id,
            date=d,
            round=pair.round,
            group_name=pair.group_name,
        )

    def teams(self) -> tuple[int, int]:
        return (self.home_team_id, self.away_team_id)

    def has_result(self) -> bool:
        return self.home_score is not None and self.away_score is not None


@dataclass
class SchedulingWindow:
    """Calendar tier: which days a competition may use, and when."""
    name: str
    days: list[DayOfWeek]
    start_date: date
    end_date: date
    gap_days: int = 7
    rest_days: int = 0  # min days since a team's last continental match

    def allows(self, d: date) -> bool:
        return DayOfWeek(d.weekday()) in self.days

    def contains(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date


@dataclass
class DroppedRound:
    """A round no date could be found for before its window closed."""
    competition_id: int
    round: int
    window: str
    fixtures: list[MatchPair] = field(default_factory=list)


@dataclass
class Season:
    id: int
    year: int
    start_date: date
    end_date: date
    is_active: bool = True


@dataclass
class Standing:
    """One row of a league table."""
    team_id: int
    team_name: str = ""
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    @property
    def points(self) -> int:
        return self.wins * 3 + self.draws


@dataclass
class SeasonSummary:
    season_year: int
    champion_name: str
    promoted_teams: list[int] = field(default_factory=list)
    relegated_teams: list[int] = field(default_factory=list)


class OccupiedDateIndex:
    """Which teams already have a fixture on which date.

    One index is shared by every competition in a scheduling pass, so a team
    can never be booked twice on the same day across competitions.
    """

    def __init__(self):
        self._busy: dict[date, set[int]] = {}
        self._continental: dict[int, list[date]] = {}

    def is_free(self, d: date, team_ids) -> bool:
        busy = self._busy.get(d)
        if not busy:
            return True
        return not any(t in busy for t in team_ids)

    def occupy(self, d: date, team_ids, continental: bool = False) -> None:
        team_ids = list(team_ids)
        if len(set(team_ids)) != len(team_ids):
            repeated = sorted({t for t in team_ids if team_ids.count(t) > 1})
            raise ValueError(f"Teams {repeated} listed more than once for {d}")
        busy = self._busy.setdefault(d, set())
        for t in team_ids:
            if t in busy:
                raise ValueError(f"Team {t} is already booked on {d}")
        for t in team_ids:
            busy.add(t)
            if continental:
                self._continental.setdefault(t, []).append(d)

    def played_continental_within(self, d: date, team_ids, days: int) -> bool:
        """True if any team had a continental match in the ``days`` before d."""
        if days <= 0:
            return False
        for t in team_ids:
            for prev in self._continental.get(t, ()):
                if 1 <= (d - prev).days <= days:
                    return True
        return False

    def teams_on(self, d: date) -> frozenset[int]:
        return frozenset(self._busy.get(d, ()))

    def dates(self) -> list[date]:
        return sorted(self._busy)

    def __contains__(self, d: date) -> bool:
        return d in self._busy

    def __len__(self) -> int:
        return len(self._busy)
