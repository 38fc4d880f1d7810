"""Output formatters for the season scheduler."""

import csv
from io import StringIO
from pathlib import Path

from seasonsched.config import parse_date
from seasonsched.models import ScheduledMatch

CSV_COLUMNS = [
    "Match", "Date", "Day", "Competition_ID", "Competition", "Season_ID",
    "Round", "Group", "Home_ID", "Home", "Away_ID", "Away",
]


def _name(team_names: dict, team_id: int) -> str:
    return team_names.get(team_id, str(team_id))


def format_schedule(matches: list[ScheduledMatch], competitions: dict,
                    team_names: dict, dropped_rounds: list | None = None) -> str:
    """Format schedule as human-readable text, organized by week."""
    lines = []
    lines.append("=" * 80)
    lines.append("SEASON SCHEDULE")
    lines.append("=" * 80)

    def _comp(cid):
        return competitions[cid].name if cid in competitions else str(cid)

    # Group by ISO week
    by_week: dict[tuple[int, int], list[ScheduledMatch]] = {}
    for m in matches:
        iso_year, iso_week, _ = m.date.isocalendar()
        by_week.setdefault((iso_year, iso_week), []).append(m)

    for (year, week) in sorted(by_week):
        lines.append(f"\n--- {year} WEEK {week} ---")

        by_date: dict = {}
        for m in by_week[(year, week)]:
            by_date.setdefault(m.date, []).append(m)

        for d in sorted(by_date):
            lines.append(f"\n  {d.strftime('%A')} {d.isoformat()}")
            for m in sorted(by_date[d], key=lambda x: (x.competition_id, x.round)):
                group = f" Grp {m.group_name}" if m.group_name else ""
                lines.append(
                    f"    {_comp(m.competition_id):<24} R{m.round:<3}{group:<6} "
                    f"{_name(team_names, m.home_team_id):<16} vs "
                    f"{_name(team_names, m.away_team_id)}"
                )

    if dropped_rounds:
        lines.append(f"\n{'=' * 80}")
        lines.append(f"DROPPED ROUNDS ({len(dropped_rounds)})")
        lines.append("=" * 80)
        for d in dropped_rounds:
            lines.append(f"  {_comp(d.competition_id):<24} R{d.round:<3} "
                         f"({len(d.fixtures)} fixtures, {d.window} window)")

    # Per-team schedule
    lines.append("\n" + "=" * 80)
    lines.append("PER-TEAM SCHEDULES")
    lines.append("=" * 80)

    by_team: dict[int, list[ScheduledMatch]] = {}
    for m in matches:
        by_team.setdefault(m.home_team_id, []).append(m)
        by_team.setdefault(m.away_team_id, []).append(m)

    for team_id in sorted(by_team):
        team_matches = sorted(by_team[team_id], key=lambda m: m.date)
        lines.append(f"\n{_name(team_names, team_id)}:")
        for i, m in enumerate(team_matches, 1):
            is_home = m.home_team_id == team_id
            opponent = m.away_team_id if is_home else m.home_team_id
            h_a = "H" if is_home else "A"
            day = m.date.strftime("%a %Y-%m-%d")
            lines.append(
                f"  {i:>3}. {day} {h_a} vs {_name(team_names, opponent):<16} "
                f"[{_comp(m.competition_id)} R{m.round}]"
            )

    return "\n".join(lines)


def format_schedule_csv(matches: list[ScheduledMatch], competitions: dict,
                        team_names: dict) -> str:
    """Format schedule as one CSV row per match, sorted by date."""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)

    ordered = sorted(matches, key=lambda m: (m.date, m.competition_id, m.round,
                                             m.home_team_id))
    for i, m in enumerate(ordered, 1):
        comp = competitions.get(m.competition_id)
        writer.writerow([
            m.id if m.id is not None else i,
            m.date.isoformat(),
            m.date.strftime("%a"),
            m.competition_id,
            comp.name if comp else "",
            m.season_id,
            m.round,
            m.group_name or "",
            m.home_team_id,
            _name(team_names, m.home_team_id),
            m.away_team_id,
            _name(team_names, m.away_team_id),
        ])

    return output.getvalue()


def read_schedule_csv(csv_path: str | Path) -> list[ScheduledMatch]:
    """Parse a schedule CSV written by format_schedule_csv."""
    matches = []
    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            date_str = (row.get("Date") or "").strip()
            home = (row.get("Home_ID") or "").strip()
            away = (row.get("Away_ID") or "").strip()
            if not date_str or not home or not away:
                continue

            matches.append(ScheduledMatch(
                competition_id=int(row["Competition_ID"]),
                season_id=int(row.get("Season_ID") or 0),
                home_team_id=int(home),
                away_team_id=int(away),
                date=parse_date(date_str),
                round=int(row.get("Round") or 0),
                group_name=(row.get("Group") or "").strip() or None,
                id=int(row["Match"]) if row.get("Match") else None,
            ))

    return matches


def write_schedule(matches: list[ScheduledMatch], competitions: dict,
                   team_names: dict, output_prefix: str = "output",
                   dropped_rounds: list | None = None):
    """Write all output files into {output_prefix}/ directory."""
    out_dir = Path(output_prefix)
    out_dir.mkdir(parents=True, exist_ok=True)

    # Human-readable schedule
    schedule_text = format_schedule(matches, competitions, team_names,
                                    dropped_rounds)
    schedule_path = out_dir / "schedule.txt"
    schedule_path.write_text(schedule_text)
    print(f"Written: {schedule_path}")

    csv_text = format_schedule_csv(matches, competitions, team_names)
    csv_path = out_dir / "schedule.csv"
    csv_path.write_text(csv_text)
    print(f"Written: {csv_path}")
