"""Knockout bracket progression.

Called once per match result. When the last match of a knockout round is
played, the winners are paired into the next round, dated a fixed rest
period after the round's latest match, and persisted.

Per competition round the states are:

    round_incomplete -> next_round_generated      (round had several matches)
    round_incomplete -> round_complete_single_match  (the final; terminal)

Repeated or out-of-order notifications are no-ops. A watermark of the
highest round already progressed, seeded from persistence, keeps a round
from being progressed twice.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import timedelta

from seasonsched.models import Competition, ScheduledMatch
from seasonsched.roundrobin import (
    generate_knockout_pairings,
    generate_next_round_pairings,
    group_stage_qualifiers,
)

logger = logging.getLogger(__name__)

KNOCKOUT_REST_DAYS = 14

ROUND_INCOMPLETE = "round_incomplete"
NEXT_ROUND_GENERATED = "next_round_generated"
COMPETITION_FINISHED = "round_complete_single_match"
ALREADY_PROGRESSED = "already_progressed"
SKIPPED = "skipped"


@dataclass
class ProgressionOutcome:
    state: str
    competition_id: int | None = None
    round: int | None = None
    new_matches: list[ScheduledMatch] = field(default_factory=list)


def _by_id(matches: list[ScheduledMatch]) -> list[ScheduledMatch]:
    return sorted(matches, key=lambda m: (m.id is None, m.id or 0))


class BracketProgressor:
    def __init__(self, competitions, persistence,
                 rng: random.Random | None = None,
                 rest_days: int = KNOCKOUT_REST_DAYS):
        self.competitions = competitions
        self.persistence = persistence
        self.rng = rng or random.Random()
        self.rest_days = rest_days
        # (competition_id, season_id) -> highest round already progressed
        self._watermark: dict[tuple[int, int], int] = {}

    def _find_competition(self, competition_id) -> Competition | None:
        for c in self.competitions.list_competitions():
            if c.id == competition_id:
                return c
        return None

    def _already_progressed(self, key: tuple[int, int], round_no: int) -> bool:
        if self._watermark.get(key, 0) >= round_no:
            return True
        competition_id, season_id = key
        existing = self.persistence.find_matches_by_competition_and_round(
            competition_id, round_no + 1, season_id)
        if existing:
            self._watermark[key] = max(self._watermark.get(key, 0), round_no)
            return True
        return False

    def on_match_completed(self, event) -> ProgressionOutcome:
        """Advance the bracket if ``event`` completed a knockout round."""
        if event.competition_id is None or event.season_id is None or not event.round:
            return ProgressionOutcome(SKIPPED)

        comp = self._find_competition(event.competition_id)
        if comp is None:
            logger.debug("Result for unknown competition %s ignored",
                         event.competition_id)
            return ProgressionOutcome(SKIPPED, event.competition_id, event.round)
        if not comp.is_knockout:
            return ProgressionOutcome(SKIPPED, comp.id, event.round)

        if comp.format == "group_knockout" and event.group_name:
            return self._progress_group_stage(comp, event)
        return self._progress_round(comp, event)

    def _progress_round(self, comp: Competition, event) -> ProgressionOutcome:
        round_no = event.round
        key = (comp.id, event.season_id)
        round_matches = [
            m for m in self.persistence.find_matches_by_competition_and_round(
                comp.id, round_no, event.season_id)
            if m.group_name is None
        ]

        if not round_matches:
            return ProgressionOutcome(SKIPPED, comp.id, round_no)
        if any(not m.is_played for m in round_matches):
            return ProgressionOutcome(ROUND_INCOMPLETE, comp.id, round_no)

        if len(round_matches) == 1:
            logger.info("%s finished", comp.name)
            return ProgressionOutcome(COMPETITION_FINISHED, comp.id, round_no)

        if self._already_progressed(key, round_no):
            return ProgressionOutcome(ALREADY_PROGRESSED, comp.id, round_no)

        round_matches = _by_id(round_matches)
        pairs = generate_next_round_pairings(round_matches, round_no + 1, self.rng)
        if not pairs:
            logger.warning("%s: round %d produced no next-round fixtures",
                           comp.name, round_no)
            return ProgressionOutcome(SKIPPED, comp.id, round_no)

        next_date = max(m.date for m in round_matches) + timedelta(days=self.rest_days)
        created = self.persistence.create_matches([
            ScheduledMatch.from_pair(p, comp.id, event.season_id, next_date)
            for p in pairs
        ])
        self._watermark[key] = round_no

        logger.info("%s: round %d generated, %d matches on %s",
                    comp.name, round_no + 1, len(created), next_date)
        return ProgressionOutcome(NEXT_ROUND_GENERATED, comp.id, round_no, created)

    def _progress_group_stage(self, comp: Competition, event) -> ProgressionOutcome:
        """Draw the knockout round once every group match is played."""
        key = (comp.id, event.season_id)
        group_matches = [
            m for m in self.persistence.find_matches_by_competition(
                comp.id, event.season_id)
            if m.group_name
        ]

        if not group_matches:
            return ProgressionOutcome(SKIPPED, comp.id, event.round)
        if any(not m.is_played for m in group_matches):
            return ProgressionOutcome(ROUND_INCOMPLETE, comp.id, event.round)

        last_round = max(m.round for m in group_matches)
        if self._already_progressed(key, last_round):
            return ProgressionOutcome(ALREADY_PROGRESSED, comp.id, last_round)

        groups: dict[str, set[int]] = {}
        for m in group_matches:
            groups.setdefault(m.group_name, set()).update(m.teams())
        qualifiers = group_stage_qualifiers(
            group_matches,
            {name: sorted(teams) for name, teams in groups.items()},
            comp.qualifiers_per_group,
        )

        pairs = generate_knockout_pairings(qualifiers, last_round + 1, self.rng)
        next_date = max(m.date for m in group_matches) + timedelta(days=self.rest_days)
        created = self.persistence.create_matches([
            ScheduledMatch.from_pair(p, comp.id, event.season_id, next_date)
            for p in pairs
        ])
        self._watermark[key] = last_round

        logger.info("%s: group stage complete, %d qualifiers drawn into round %d",
                    comp.name, len(qualifiers), last_round + 1)
        return ProgressionOutcome(NEXT_ROUND_GENERATED, comp.id, last_round, created)
