"""League tables and schedule statistics."""

from collections import defaultdict

from seasonsched.models import DayOfWeek, Standing


def compute_standings(matches: list, team_ids: list[int] | None = None,
                      team_names: dict[int, str] | None = None) -> list[Standing]:
    """Build a league table from played matches.

    Win = 3 points, draw = 1. Sorted by points, goal difference, goals for,
    then team id so the order is stable. Teams listed in ``team_ids`` appear
    even if they have not played.
    """
    names = team_names or {}
    table: dict[int, Standing] = {}

    def _row(team_id: int) -> Standing:
        if team_id not in table:
            table[team_id] = Standing(team_id, names.get(team_id, str(team_id)))
        return table[team_id]

    for t in team_ids or []:
        _row(t)

    for m in matches:
        if not m.is_played or m.home_score is None or m.away_score is None:
            continue
        home = _row(m.home_team_id)
        away = _row(m.away_team_id)
        home.played += 1
        away.played += 1
        home.goals_for += m.home_score
        home.goals_against += m.away_score
        away.goals_for += m.away_score
        away.goals_against += m.home_score

        if m.home_score > m.away_score:
            home.wins += 1
            away.losses += 1
        elif m.home_score < m.away_score:
            away.wins += 1
            home.losses += 1
        else:
            home.draws += 1
            away.draws += 1

    return sorted(
        table.values(),
        key=lambda s: (-s.points, -s.goal_difference, -s.goals_for, s.team_id),
    )


def format_standings(standings: list[Standing]) -> str:
    lines = [f"{'Pos':>3}  {'Team':<20} {'P':>3} {'W':>3} {'D':>3} {'L':>3} "
             f"{'GF':>4} {'GA':>4} {'GD':>4} {'Pts':>4}"]
    for pos, s in enumerate(standings, 1):
        lines.append(
            f"{pos:>3}  {s.team_name:<20} {s.played:>3} {s.wins:>3} {s.draws:>3} "
            f"{s.losses:>3} {s.goals_for:>4} {s.goals_against:>4} "
            f"{s.goal_difference:>+4} {s.points:>4}"
        )
    return "\n".join(lines)


def compute_stats(matches: list, competitions: dict | None = None,
                  dropped_rounds: list | None = None) -> dict:
    """Compute statistics for a dated schedule.

    Returns dict with per-competition and per-team counts, home/away
    balance, day-of-week distribution and the rounds that were dropped.
    """
    competitions = competitions or {}
    dropped_rounds = dropped_rounds or []

    matches_per_comp = defaultdict(int)
    rounds_per_comp = defaultdict(set)
    first_date = {}
    last_date = {}

    home_counts = defaultdict(int)
    away_counts = defaultdict(int)
    total_games = defaultdict(int)
    day_counts = defaultdict(lambda: defaultdict(int))  # team -> day -> count
    matches_per_date = defaultdict(int)

    for m in matches:
        c = m.competition_id
        matches_per_comp[c] += 1
        rounds_per_comp[c].add(m.round)
        if c not in first_date or m.date < first_date[c]:
            first_date[c] = m.date
        if c not in last_date or m.date > last_date[c]:
            last_date[c] = m.date

        home_counts[m.home_team_id] += 1
        away_counts[m.away_team_id] += 1
        dow = DayOfWeek(m.date.weekday()).name
        for t in m.teams():
            total_games[t] += 1
            day_counts[t][dow] += 1
        matches_per_date[m.date] += 1

    dropped_per_comp = defaultdict(int)
    for d in dropped_rounds:
        dropped_per_comp[d.competition_id] += 1

    comp_ids = sorted(set(matches_per_comp) | set(dropped_per_comp) | set(competitions))

    return {
        "competition_ids": comp_ids,
        "competition_names": {c: competitions[c].name if c in competitions else str(c)
                              for c in comp_ids},
        "all_teams": sorted(total_games),
        "matches_per_competition": dict(matches_per_comp),
        "rounds_per_competition": {c: len(r) for c, r in rounds_per_comp.items()},
        "first_date": first_date,
        "last_date": last_date,
        "dropped_per_competition": dict(dropped_per_comp),
        "dropped_count": len(dropped_rounds),
        "home_counts": dict(home_counts),
        "away_counts": dict(away_counts),
        "total_games": dict(total_games),
        "day_counts": {k: dict(v) for k, v in day_counts.items()},
        "match_dates": len(matches_per_date),
        "busiest_date_matches": max(matches_per_date.values(), default=0),
    }


def format_stats_report(stats: dict) -> str:
    """Format statistics into a human-readable report."""
    lines = []
    lines.append("=" * 70)
    lines.append("SCHEDULE STATISTICS")
    lines.append("=" * 70)

    lines.append("\n--- COMPETITIONS ---")
    lines.append(f"{'Competition':<28} {'Games':>6} {'Rnds':>5} {'Drop':>5}  "
                 f"{'First':<10} {'Last':<10}")
    lines.append("-" * 70)
    for c in stats["competition_ids"]:
        first = stats["first_date"].get(c)
        last = stats["last_date"].get(c)
        dropped = stats["dropped_per_competition"].get(c, 0)
        flag = " ***" if dropped else ""
        lines.append(
            f"{stats['competition_names'][c]:<28} "
            f"{stats['matches_per_competition'].get(c, 0):>6} "
            f"{stats['rounds_per_competition'].get(c, 0):>5} "
            f"{dropped:>5}  "
            f"{first.isoformat() if first else '-':<10} "
            f"{last.isoformat() if last else '-':<10}{flag}"
        )

    if stats["dropped_count"]:
        lines.append(f"\n{stats['dropped_count']} round(s) could not be placed "
                     f"before their window closed.")

    lines.append("\n--- TEAM BALANCE ---")
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    header = f"{'Team':<8} {'Home':>5} {'Away':>5} {'Total':>5} {'Diff':>5} "
    for d in days:
        header += f" {d:>4}"
    lines.append(header)
    lines.append("-" * (32 + 5 * len(days)))
    for t in stats["all_teams"]:
        h = stats["home_counts"].get(t, 0)
        a = stats["away_counts"].get(t, 0)
        diff = h - a
        row = (f"{t:<8} {h:>5} {a:>5} {stats['total_games'].get(t, 0):>5} "
               f"{diff:>+5} ")
        for d in days:
            row += f" {stats['day_counts'].get(t, {}).get(d, 0):>4}"
        lines.append(row)

    lines.append(f"\n{stats['match_dates']} match dates, busiest date has "
                 f"{stats['busiest_date_matches']} matches")

    return "\n".join(lines)
