"""Tests for output.py — text and CSV schedule output."""

from datetime import date

from seasonsched.models import Competition, DroppedRound, MatchPair, ScheduledMatch
from seasonsched.output import (
    CSV_COLUMNS, format_schedule, format_schedule_csv, read_schedule_csv, write_schedule,
)

COMPETITIONS = {
    1: Competition(id=1, name="League"),
    6: Competition(id=6, name="Continental", format="group_knockout", window="continental"),
}
TEAM_NAMES = {1: "Rovers", 2: "United", 3: "City", 4: "Athletic"}


def _matches():
    return [
        ScheduledMatch(1, 1, 1, 2, date(2026, 3, 21), 1, id=1),
        ScheduledMatch(1, 1, 3, 4, date(2026, 3, 21), 1, id=2),
        ScheduledMatch(6, 1, 2, 3, date(2026, 3, 25), 1, group_name="A", id=3),
    ]


class TestFormatSchedule:
    def test_sections(self):
        text = format_schedule(_matches(), COMPETITIONS, TEAM_NAMES)
        assert "SEASON SCHEDULE" in text
        assert "2026 WEEK 12" in text
        assert "2026 WEEK 13" in text
        assert "Saturday 2026-03-21" in text
        assert "PER-TEAM SCHEDULES" in text
        assert "DROPPED ROUNDS" not in text

    def test_group_and_names(self):
        text = format_schedule(_matches(), COMPETITIONS, TEAM_NAMES)
        assert "Grp A" in text
        assert "Rovers" in text and "Athletic" in text

    def test_per_team_home_away(self):
        text = format_schedule(_matches(), COMPETITIONS, TEAM_NAMES)
        united = text.split("\nUnited:")[1].split("\n\n")[0]
        assert "Sat 2026-03-21 A vs Rovers" in united
        assert "Wed 2026-03-25 H vs City" in united

    def test_dropped_rounds_listed(self):
        dropped = [DroppedRound(1, 38, "national", [MatchPair(1, 2, 38)])]
        text = format_schedule(_matches(), COMPETITIONS, TEAM_NAMES, dropped)
        assert "DROPPED ROUNDS (1)" in text
        assert "(1 fixtures, national window)" in text


class TestScheduleCsv:
    def test_header_and_rows(self):
        lines = format_schedule_csv(_matches(), COMPETITIONS, TEAM_NAMES).splitlines()
        assert lines[0].split(",") == CSV_COLUMNS
        assert len(lines) == 4
        assert lines[1].startswith("1,2026-03-21,Sat,1,League,1,1,,1,Rovers,2,United")

    def test_read_back(self, tmp_path):
        path = tmp_path / "schedule.csv"
        path.write_text(format_schedule_csv(_matches(), COMPETITIONS, TEAM_NAMES))
        matches = read_schedule_csv(path)
        assert matches == _matches()

    def test_blank_rows_skipped(self, tmp_path):
        path = tmp_path / "schedule.csv"
        path.write_text(",".join(CSV_COLUMNS) + "\n" + "," * (len(CSV_COLUMNS) - 1) + "\n")
        assert read_schedule_csv(path) == []


class TestWriteSchedule:
    def test_writes_files(self, tmp_path, capsys):
        out = tmp_path / "season"
        write_schedule(_matches(), COMPETITIONS, TEAM_NAMES, output_prefix=str(out))
        assert (out / "schedule.txt").read_text().startswith("=" * 80)
        assert len(read_schedule_csv(out / "schedule.csv")) == 3
        assert "Written:" in capsys.readouterr().out
