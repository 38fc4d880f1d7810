"""Season start and end.

Starting a season builds every competition's fixtures, dates them in one
calendar pass and saves them. Ending a season reads the top two league
tables, reports champion, promoted and relegated teams, and starts the next
season.
"""

import logging
import random
from datetime import date

from seasonsched.models import Competition, MatchPair, Season, SeasonSummary
from seasonsched.roundrobin import (
    generate_group_stage_fixtures,
    generate_knockout_pairings,
    generate_league_fixtures,
)
from seasonsched.scheduler import ScheduleResult, build_windows, schedule_season

logger = logging.getLogger(__name__)

SEASON_START = (1, 15)
SEASON_END = (12, 15)
PROMOTION_RELEGATION_SLOTS = 4


def competition_entrants(competition: Competition, team_ids: list[int]) -> list[int]:
    """Teams entered in a competition.

    Explicit entrants win; otherwise the first ``team_count`` registered
    teams take part. A team listed twice is entered once.
    """
    if competition.team_ids:
        entrants = list(dict.fromkeys(competition.team_ids))
        if len(entrants) != len(competition.team_ids):
            logger.warning("%s: duplicate team_ids ignored", competition.name)
        return entrants
    return list(team_ids[:competition.team_count])


def build_fixtures(competition: Competition, team_ids: list[int],
                   rng: random.Random | None = None) -> list[MatchPair]:
    """Undated fixtures for a competition according to its format."""
    entrants = competition_entrants(competition, team_ids)
    if competition.format == "league":
        return generate_league_fixtures(entrants, competition.double_round)
    if competition.format == "knockout":
        return generate_knockout_pairings(entrants, 1, rng)
    if competition.format == "group_knockout":
        _, fixtures = generate_group_stage_fixtures(
            entrants, competition.group_size, competition.double_round, rng)
        return fixtures
    logger.warning("%s: unknown format %r, no fixtures generated",
                   competition.name, competition.format)
    return []


class SeasonOrchestrator:
    def __init__(self, teams, competitions, persistence,
                 windows: dict | None = None,
                 rng: random.Random | None = None,
                 swap_slots: int = PROMOTION_RELEGATION_SLOTS):
        self.teams = teams
        self.competitions = competitions
        self.persistence = persistence
        self.window_definitions = windows
        self.rng = rng or random.Random()
        self.swap_slots = swap_slots
        self.last_result: ScheduleResult | None = None

    def start_new_season(self, year: int) -> Season:
        """Create the season record and schedule all its fixtures."""
        logger.info("Starting season %d", year)

        active = self.persistence.find_active_season()
        if active is not None:
            self.persistence.deactivate_season(active.id)

        season = self.persistence.create_season(
            year, date(year, *SEASON_START), date(year, *SEASON_END))

        competitions = self.competitions.list_competitions()
        team_ids = self.teams.list_team_ids()

        entries = [(c, build_fixtures(c, team_ids, self.rng)) for c in competitions]
        windows = build_windows(year, self.window_definitions)
        result = schedule_season(entries, windows, season.id)

        self.persistence.create_matches(result.matches)
        self.last_result = result

        logger.info("Season %d started: %d matches scheduled, %d rounds dropped",
                    year, len(result.matches), len(result.dropped_rounds))
        return season

    def _league(self, competitions: list[Competition], tier: int) -> Competition | None:
        for c in competitions:
            if c.tier == tier and c.format == "league":
                return c
        return None

    def process_end_of_season(self, season_id: int) -> SeasonSummary | None:
        """Summarise the finished season and start the next one.

        Returns None when there is no active season.
        """
        active = self.persistence.find_active_season()
        if active is None:
            logger.warning("No active season to finish")
            return None

        competitions = self.competitions.list_competitions()
        tier1 = self._league(competitions, 1)
        tier2 = self._league(competitions, 2)

        champion = "Unknown"
        relegated: list[int] = []
        promoted: list[int] = []

        if tier1 is not None:
            table = self.persistence.find_standings(tier1.id, season_id)
            if table:
                champion = table[0].team_name or self.teams.team_name(table[0].team_id)
                if self.swap_slots:
                    relegated = [s.team_id for s in table[-self.swap_slots:]]

        if tier2 is not None:
            table = self.persistence.find_standings(tier2.id, season_id)
            promoted = [s.team_id for s in table[:self.swap_slots]]

        logger.info("Season %d champion: %s", active.year, champion)
        logger.info("Relegated: %s", ", ".join(str(t) for t in relegated) or "-")
        logger.info("Promoted: %s", ", ".join(str(t) for t in promoted) or "-")

        self.start_new_season(active.year + 1)

        return SeasonSummary(
            season_year=active.year,
            champion_name=champion,
            promoted_teams=promoted,
            relegated_teams=relegated,
        )
