"""Collaborator interfaces and an in-memory implementation.

The scheduler reads teams and competitions from registries and writes dated
fixtures through a persistence layer. Real games plug in a database; the
in-memory store here backs the tests and the command-line tool.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol, runtime_checkable

from seasonsched.models import Competition, ScheduledMatch, Season, Standing
from seasonsched.stats import compute_standings

__all__ = [
    "MatchResult",
    "TeamRegistry",
    "CompetitionRegistry",
    "Persistence",
    "InMemoryStore",
]


@dataclass(frozen=True)
class MatchResult:
    """Notification that a match has been played."""
    match_id: int
    competition_id: int
    season_id: int
    round: int
    date: date
    home_team_id: int
    away_team_id: int
    home_score: int
    away_score: int
    group_name: Optional[str] = None

    @classmethod
    def from_match(cls, match: ScheduledMatch) -> "MatchResult":
        return cls(
            match_id=match.id,
            competition_id=match.competition_id,
            season_id=match.season_id,
            round=match.round,
            date=match.date,
            home_team_id=match.home_team_id,
            away_team_id=match.away_team_id,
            home_score=match.home_score,
            away_score=match.away_score,
            group_name=match.group_name,
        )


@runtime_checkable
class TeamRegistry(Protocol):
    def list_team_ids(self) -> list[int]:
        ...

    def team_name(self, team_id: int) -> str:
        ...


@runtime_checkable
class CompetitionRegistry(Protocol):
    def list_competitions(self) -> list[Competition]:
        ...


@runtime_checkable
class Persistence(Protocol):
    def create_matches(self, matches: list[ScheduledMatch]) -> list[ScheduledMatch]:
        ...

    def find_matches_by_competition_and_round(
        self, competition_id: int, round: int, season_id: int | None = None,
    ) -> list[ScheduledMatch]:
        ...

    def find_matches_by_competition(
        self, competition_id: int, season_id: int,
    ) -> list[ScheduledMatch]:
        ...

    def find_standings(self, competition_id: int, season_id: int) -> list[Standing]:
        ...

    def find_active_season(self) -> Season | None:
        ...

    def create_season(self, year: int, start_date: date, end_date: date) -> Season:
        ...

    def deactivate_season(self, season_id: int) -> None:
        ...


class InMemoryStore:
    """Dict-backed registries and persistence.

    Matches are copied on the way in and out so callers cannot mutate
    stored state behind the store's back.
    """

    def __init__(self, teams: dict[int, str] | None = None,
                 competitions: list[Competition] | None = None):
        self.teams: dict[int, str] = dict(teams or {})
        self.competitions: list[Competition] = list(competitions or [])
        self.matches: dict[int, ScheduledMatch] = {}
        self.seasons: dict[int, Season] = {}
        self._next_match_id = 1
        self._next_season_id = 1

    # -- registries ---------------------------------------------------------

    def list_team_ids(self) -> list[int]:
        return list(self.teams)

    def team_name(self, team_id: int) -> str:
        return self.teams.get(team_id, str(team_id))

    def list_competitions(self) -> list[Competition]:
        return list(self.competitions)

    # -- matches ------------------------------------------------------------

    def create_matches(self, matches: list[ScheduledMatch]) -> list[ScheduledMatch]:
        created = []
        for m in matches:
            stored = copy.copy(m)
            stored.id = self._next_match_id
            self._next_match_id += 1
            self.matches[stored.id] = stored
            created.append(copy.copy(stored))
        return created

    def find_match(self, match_id: int) -> ScheduledMatch | None:
        m = self.matches.get(match_id)
        return copy.copy(m) if m else None

    def find_matches_by_competition_and_round(
        self, competition_id: int, round: int, season_id: int | None = None,
    ) -> list[ScheduledMatch]:
        return [
            copy.copy(m) for m in self.matches.values()
            if m.competition_id == competition_id and m.round == round
            and (season_id is None or m.season_id == season_id)
        ]

    def find_matches_by_competition(
        self, competition_id: int, season_id: int,
    ) -> list[ScheduledMatch]:
        return [
            copy.copy(m) for m in self.matches.values()
            if m.competition_id == competition_id and m.season_id == season_id
        ]

    def find_matches_by_season(self, season_id: int) -> list[ScheduledMatch]:
        return sorted(
            (copy.copy(m) for m in self.matches.values() if m.season_id == season_id),
            key=lambda m: (m.date, m.competition_id, m.id),
        )

    def record_result(self, match_id: int, home_score: int,
                      away_score: int) -> MatchResult:
        """Mark a match played. Stands in for the external result recorder."""
        m = self.matches[match_id]
        m.home_score = home_score
        m.away_score = away_score
        m.is_played = True
        return MatchResult.from_match(m)

    def find_standings(self, competition_id: int, season_id: int) -> list[Standing]:
        matches = self.find_matches_by_competition(competition_id, season_id)
        team_ids = sorted({t for m in matches for t in m.teams()})
        return compute_standings(matches, team_ids, self.teams)

    # -- seasons ------------------------------------------------------------

    def find_active_season(self) -> Season | None:
        for s in self.seasons.values():
            if s.is_active:
                return s
        return None

    def create_season(self, year: int, start_date: date, end_date: date) -> Season:
        season = Season(self._next_season_id, year, start_date, end_date)
        self._next_season_id += 1
        self.seasons[season.id] = season
        return season

    def deactivate_season(self, season_id: int) -> None:
        if season_id in self.seasons:
            self.seasons[season_id].is_active = False
