"""Constraint validation for a dated season schedule.

Can validate either the in-memory match list or a re-imported CSV.
"""

from collections import defaultdict
from datetime import date, timedelta

from seasonsched.models import BYE, DayOfWeek


def validate_schedule(matches: list, competitions: dict | None = None,
                      windows: dict | None = None) -> dict:
    """Validate a schedule against all constraints.

    ``competitions`` maps id -> Competition and ``windows`` maps window name
    -> SchedulingWindow; when both are given each match is also checked
    against its competition's window.

    Returns dict with:
    - valid: bool (True if no hard constraint violations)
    - errors: list of hard constraint violations
    - warnings: list of soft constraint issues
    """
    errors = []
    warnings = []
    competitions = competitions or {}
    windows = windows or {}

    teams_on_date: dict[date, dict[int, int]] = defaultdict(lambda: defaultdict(int))
    teams_in_round: dict[tuple[int, int, int], dict[int, int]] = defaultdict(
        lambda: defaultdict(int))
    team_dates: dict[int, set[date]] = defaultdict(set)

    for m in matches:
        h, a = m.home_team_id, m.away_team_id

        if h == a:
            errors.append(f"{m.date}: team {h} is drawn against itself")
        if BYE in (h, a):
            errors.append(f"{m.date}: fixture {h} vs {a} references the bye")

        teams_on_date[m.date][h] += 1
        teams_on_date[m.date][a] += 1
        teams_in_round[(m.competition_id, m.season_id, m.round)][h] += 1
        teams_in_round[(m.competition_id, m.season_id, m.round)][a] += 1
        team_dates[h].add(m.date)
        team_dates[a].add(m.date)

        comp = competitions.get(m.competition_id)
        if comp is None:
            if competitions:
                warnings.append(f"Match {h} vs {a} on {m.date} has unknown "
                                f"competition {m.competition_id}")
            continue

        window = windows.get(comp.window)
        if window is None:
            continue
        # Progressed knockout rounds are dated after the round, not by window
        if not comp.is_knockout or m.round == 1 or m.group_name:
            if not window.contains(m.date):
                errors.append(
                    f"{comp.name}: {h} vs {a} on {m.date} is outside the "
                    f"{window.name} window ({window.start_date} - {window.end_date})"
                )
            if not window.allows(m.date):
                dow = DayOfWeek(m.date.weekday())
                errors.append(
                    f"{comp.name}: {h} vs {a} on {dow.name} {m.date} is not a "
                    f"{window.name} playing day"
                )

    # Check: no team plays twice on one date, across all competitions
    for d in sorted(teams_on_date):
        for team, count in sorted(teams_on_date[d].items()):
            if count > 1:
                errors.append(f"Team {team} plays {count} matches on {d}")

    # Check: no team appears twice in one round of one competition
    for (comp_id, season_id, rnd), counts in sorted(teams_in_round.items()):
        for team, count in sorted(counts.items()):
            if count > 1:
                errors.append(
                    f"Competition {comp_id} round {rnd}: team {team} "
                    f"appears {count} times"
                )

    # Soft: both days of the same weekend
    for team in sorted(team_dates):
        for d in sorted(team_dates[team]):
            if d.weekday() == 5 and d + timedelta(days=1) in team_dates[team]:
                warnings.append(f"Team {team} plays Saturday and Sunday "
                                f"of weekend {d}")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "matches_checked": len(matches),
    }


def format_validation_report(result: dict, max_warnings: int = 50) -> str:
    """Format validation results as text.

    Only the first ``max_warnings`` warnings are listed; errors are always
    listed in full.
    """
    errors = result["errors"]
    warnings = result["warnings"]

    lines = ["=" * 60, "SCHEDULE VALIDATION REPORT", "=" * 60]
    lines.append(f"Matches checked: {result.get('matches_checked', 0)}")

    if result["valid"]:
        lines.append("\nRESULT: VALID (no double bookings or window violations)")
    else:
        lines.append(f"\nRESULT: INVALID ({len(errors)} violations)")

    if errors:
        lines.append(f"\n--- ERRORS ({len(errors)}) ---")
        lines.extend(f"  ERROR: {e}" for e in errors)

    if warnings:
        lines.append(f"\n--- WARNINGS ({len(warnings)}) ---")
        lines.extend(f"  WARN: {w}" for w in warnings[:max_warnings])
        if len(warnings) > max_warnings:
            lines.append(f"  ... {len(warnings) - max_warnings} more")

    return "\n".join(lines)
