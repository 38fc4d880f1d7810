"""Fixture generation: round-robin leagues, knockout draws and group stages."""

import random
from collections import defaultdict

from seasonsched.models import BYE, MatchPair
from seasonsched.stats import compute_standings


def generate_league_fixtures(team_ids: list[int],
                             double_round: bool = True) -> list[MatchPair]:
    """Generate league fixtures using the circle method.

    Position 0 stays fixed while the others rotate: after every round the
    last entry moves to index 1. Home/away alternates on round parity so
    every team gets a balanced share of home games. Pairs involving the bye
    are dropped.

    For N teams (padded to even), single round gives N*(N-1)/2 fixtures over
    N-1 rounds. The second leg mirrors the first with home/away swapped and
    rounds numbered N..2N-2.
    """
    teams = list(team_ids)
    if len(teams) < 2:
        return []

    if len(teams) % 2 == 1:
        teams.append(BYE)

    n = len(teams)
    num_rounds = n - 1
    half = n // 2

    fixtures = []
    for r in range(num_rounds):
        for i in range(half):
            t1 = teams[i]
            t2 = teams[n - 1 - i]
            if t1 == BYE or t2 == BYE:
                continue
            if r % 2 == 0:
                fixtures.append(MatchPair(t1, t2, r + 1))
            else:
                fixtures.append(MatchPair(t2, t1, r + 1))

        teams.insert(1, teams.pop())

    if double_round:
        return_legs = [
            MatchPair(m.away_team_id, m.home_team_id, m.round + num_rounds)
            for m in fixtures
        ]
        return fixtures + return_legs

    return fixtures


def _pair_consecutive(team_ids: list[int], round_number: int) -> list[MatchPair]:
    # A trailing odd entry gets no opponent and is left out
    return [
        MatchPair(team_ids[i], team_ids[i + 1], round_number)
        for i in range(0, len(team_ids) - 1, 2)
    ]


def generate_knockout_pairings(team_ids: list[int], round_number: int,
                               rng: random.Random | None = None) -> list[MatchPair]:
    """Draw a knockout round: shuffle the field and pair neighbours."""
    rng = rng or random.Random()
    shuffled = list(team_ids)
    rng.shuffle(shuffled)
    return _pair_consecutive(shuffled, round_number)


def match_winner(match, rng: random.Random | None = None) -> int:
    """Winner of a played match. A draw is settled by a coin flip."""
    if match.home_score > match.away_score:
        return match.home_team_id
    if match.away_score > match.home_score:
        return match.away_team_id
    rng = rng or random.Random()
    return match.home_team_id if rng.random() < 0.5 else match.away_team_id


def generate_next_round_pairings(completed_matches: list, next_round_number: int,
                                 rng: random.Random | None = None) -> list[MatchPair]:
    """Pair the winners of a completed knockout round.

    Winners keep the order of ``completed_matches``: winner 0 plays winner 1,
    winner 2 plays winner 3 and so on. Matches without a score are ignored.
    """
    rng = rng or random.Random()
    winners = [
        match_winner(m, rng)
        for m in completed_matches
        if m.home_score is not None and m.away_score is not None
    ]
    return _pair_consecutive(winners, next_round_number)


def group_names(count: int) -> list[str]:
    return [chr(ord("A") + i) for i in range(count)]


def generate_group_stage_fixtures(
    team_ids: list[int],
    group_size: int = 4,
    double_round: bool = True,
    rng: random.Random | None = None,
) -> tuple[dict[str, list[int]], list[MatchPair]]:
    """Split the field into groups and play a round robin in each.

    Returns (groups, fixtures) where groups maps "A", "B", ... to team ids.
    Round numbers are shared across groups, so round 1 of every group is
    played on the same matchday.
    """
    if group_size < 2:
        raise ValueError(f"Group size must be at least 2, got {group_size}")
    if len(team_ids) % group_size != 0:
        raise ValueError(
            f"Team count ({len(team_ids)}) must be divisible by "
            f"group size ({group_size})"
        )

    rng = rng or random.Random()
    shuffled = list(team_ids)
    rng.shuffle(shuffled)

    groups: dict[str, list[int]] = {}
    fixtures = []
    names = group_names(len(shuffled) // group_size)
    for i, name in enumerate(names):
        members = shuffled[i * group_size:(i + 1) * group_size]
        groups[name] = members
        for m in generate_league_fixtures(members, double_round):
            m.group_name = name
            fixtures.append(m)

    # Keep matchdays together so the allocator sees one round per date
    fixtures.sort(key=lambda m: m.round)
    return groups, fixtures


def group_stage_qualifiers(matches: list, groups: dict[str, list[int]],
                           qualifiers_per_group: int = 2) -> list[int]:
    """Top finishers of every group, position-major.

    All group winners (A, B, ...) come first, then all runners-up.
    """
    tables = {}
    for name, members in groups.items():
        group_matches = [m for m in matches if m.group_name == name]
        tables[name] = compute_standings(group_matches, members)

    qualifiers = []
    for position in range(qualifiers_per_group):
        for name in sorted(tables):
            table = tables[name]
            if position < len(table):
                qualifiers.append(table[position].team_id)
    return qualifiers


def verify_round_robin(fixtures: list[MatchPair], team_ids: list[int],
                       legs: int = 1) -> dict:
    """Verify league fixtures are valid and complete.

    Returns dict with:
    - valid: bool
    - errors: list of error strings
    - matchup_counts: dict of (team_a, team_b) -> count
    - games_per_team: dict of team -> game count
    """
    errors = []
    matchup_counts: dict[tuple[int, int], int] = {}
    games_per_team: dict[int, int] = {t: 0 for t in team_ids}
    teams_by_round: dict[int, set[int]] = defaultdict(set)

    for m in fixtures:
        h, a = m.home_team_id, m.away_team_id
        if h == a:
            errors.append(f"Round {m.round}: {h} is paired with itself")
        if BYE in (h, a):
            errors.append(f"Round {m.round}: fixture {h} vs {a} involves the bye")

        seen = teams_by_round[m.round]
        for t in (h, a):
            if t in seen:
                errors.append(f"Round {m.round}: {t} appears twice")
            seen.add(t)

        key = (min(h, a), max(h, a))
        matchup_counts[key] = matchup_counts.get(key, 0) + 1
        games_per_team[h] = games_per_team.get(h, 0) + 1
        games_per_team[a] = games_per_team.get(a, 0) + 1

    # Check every pair plays exactly `legs` times
    for i, t1 in enumerate(team_ids):
        for t2 in team_ids[i + 1:]:
            key = (min(t1, t2), max(t1, t2))
            count = matchup_counts.get(key, 0)
            if count != legs:
                errors.append(
                    f"{t1} vs {t2}: played {count} times (expected {legs})"
                )

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "matchup_counts": matchup_counts,
        "games_per_team": games_per_team,
    }
