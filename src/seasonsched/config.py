"""Config loading and validation for the season scheduler."""

import logging
from datetime import date
from pathlib import Path

import yaml

from seasonsched.models import FORMATS, WINDOW_ORDER, Competition, DayOfWeek
from seasonsched.scheduler import DEFAULT_WINDOWS

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a config file fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def parse_date(s: str) -> date:
    """Parse date string YYYY-MM-DD."""
    parts = s.strip().split("-")
    return date(int(parts[0]), int(parts[1]), int(parts[2]))


def parse_month_day(s: str) -> tuple[int, int]:
    """Parse 'MM-DD' (or a full YYYY-MM-DD, year ignored) into (month, day)."""
    parts = str(s).strip().split("-")
    if len(parts) == 3:
        parts = parts[1:]
    month, day = int(parts[0]), int(parts[1])
    # Validate against a leap year so 02-29 is accepted
    date(2000, month, day)
    return month, day


def _parse_windows(raw: dict, errors: list[str]) -> dict:
    windows = {name: dict(w) for name, w in DEFAULT_WINDOWS.items()}
    for name, wdata in (raw or {}).items():
        if name not in WINDOW_ORDER:
            errors.append(f"Unknown window {name!r}")
            continue
        w = windows[name]
        try:
            if "days" in wdata:
                w["days"] = [DayOfWeek.from_str(d) for d in wdata["days"]]
            if "start" in wdata:
                w["start"] = parse_month_day(wdata["start"])
            if "end" in wdata:
                w["end"] = parse_month_day(wdata["end"])
        except (KeyError, ValueError, IndexError) as e:
            errors.append(f"Window {name}: {e}")
            continue
        w["gap_days"] = int(wdata.get("gap_days", w["gap_days"]))
        w["rest_days"] = int(wdata.get("rest_days", w["rest_days"]))
        if not w["days"]:
            errors.append(f"Window {name} has no playing days")
        if w["gap_days"] < 1:
            errors.append(f"Window {name}: gap_days must be at least 1")
        if w["start"] > w["end"]:
            errors.append(f"Window {name} ends before it starts")
    return windows


def _parse_teams(raw) -> dict[int, str]:
    if isinstance(raw, int):
        # Auto-generate teams: Team 1, Team 2, ... for teams: 20
        return {i: f"Team {i}" for i in range(1, raw + 1)}
    teams = {}
    for i, entry in enumerate(raw or [], 1):
        if isinstance(entry, dict):
            teams[int(entry["id"])] = entry.get("name", str(entry["id"]))
        else:
            teams[i] = str(entry)
    return teams


def load_config(path: str | Path) -> dict:
    """Load and validate config YAML, returning structured data.

    Returns dict with:
    - season: {year, seed, name}
    - windows: window name -> {days, start, end, gap_days, rest_days}
    - teams: dict[id -> name]
    - competitions: list[Competition]

    Raises ConfigError listing every problem found.
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f)

    errors = []

    season_raw = raw.get("season", {})
    season = {
        "year": int(season_raw.get("year", date.today().year)),
        "seed": season_raw.get("seed"),
        "name": season_raw.get("name", ""),
    }

    windows = _parse_windows(raw.get("windows"), errors)
    teams = _parse_teams(raw.get("teams", []))

    competitions: list[Competition] = []
    seen_ids = set()
    for cdata in raw.get("competitions", []):
        comp = Competition(
            id=int(cdata["id"]),
            name=cdata.get("name", f"Competition {cdata['id']}"),
            tier=int(cdata.get("tier", 1)),
            format=cdata.get("format", "league"),
            window=cdata.get("window", "national"),
            team_count=int(cdata.get("teams", len(cdata.get("team_ids", [])) or 20)),
            priority=int(cdata.get("priority", 1)),
            start_month=int(cdata.get("start_month", 1)),
            end_month=int(cdata.get("end_month", 12)),
            double_round=bool(cdata.get("double_round", True)),
            team_ids=[int(t) for t in cdata.get("team_ids", [])],
            group_size=int(cdata.get("group_size", 4)),
            qualifiers_per_group=int(cdata.get("qualifiers_per_group", 2)),
        )

        if comp.id in seen_ids:
            errors.append(f"Duplicate competition id {comp.id}")
        seen_ids.add(comp.id)
        if comp.format not in FORMATS:
            errors.append(f"{comp.name}: unknown format {comp.format!r}")
        if comp.window not in WINDOW_ORDER:
            errors.append(f"{comp.name}: unknown window {comp.window!r}")

        entrants = comp.team_ids or list(teams)[:comp.team_count]
        for t in comp.team_ids:
            if t not in teams:
                errors.append(f"{comp.name}: team {t} is not a registered team")
        repeated = sorted({t for t in comp.team_ids if comp.team_ids.count(t) > 1})
        if repeated:
            errors.append(f"{comp.name}: team_ids lists {repeated} more than once")
        if not comp.team_ids and comp.team_count > len(teams):
            logger.warning("%s wants %d teams but only %d are registered",
                           comp.name, comp.team_count, len(teams))
        if comp.format == "group_knockout" and comp.group_size < 2:
            errors.append(f"{comp.name}: group_size must be at least 2")
        elif comp.format == "group_knockout" and len(entrants) % comp.group_size:
            errors.append(
                f"{comp.name}: {len(entrants)} teams cannot be split into "
                f"groups of {comp.group_size}"
            )

        competitions.append(comp)

    if errors:
        raise ConfigError(errors)

    return {
        "season": season,
        "windows": windows,
        "teams": teams,
        "competitions": competitions,
    }
