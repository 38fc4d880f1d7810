"""Tests for config.py — parsing and loading."""

from datetime import date

from seasonsched.config import ConfigError, load_config, parse_date, parse_month_day
from seasonsched.models import DayOfWeek
from seasonsched.scheduler import build_windows


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


def _errors(path):
    try:
        load_config(path)
    except ConfigError as e:
        return e.errors
    raise AssertionError("expected ConfigError")


class TestParseDate:
    def test_basic(self):
        assert parse_date("2026-03-07") == date(2026, 3, 7)
        assert parse_date("2026-12-31") == date(2026, 12, 31)

    def test_whitespace(self):
        assert parse_date(" 2026-03-07 ") == date(2026, 3, 7)


class TestParseMonthDay:
    def test_basic(self):
        assert parse_month_day("03-15") == (3, 15)
        assert parse_month_day("12-01") == (12, 1)

    def test_full_date_ignores_year(self):
        assert parse_month_day("2031-11-15") == (11, 15)

    def test_leap_day_accepted(self):
        assert parse_month_day("02-29") == (2, 29)

    def test_invalid(self):
        try:
            parse_month_day("02-30")
        except ValueError:
            pass
        else:
            raise AssertionError("expected ValueError")


class TestLoadConfig:
    def test_loads_real_config(self):
        config = load_config("config.yaml")
        assert set(config) == {"season", "windows", "teams", "competitions"}

    def test_season(self):
        season = load_config("config.yaml")["season"]
        assert season["year"] == 2026
        assert season["seed"] == 42

    def test_teams(self):
        teams = load_config("config.yaml")["teams"]
        assert len(teams) == 40
        assert teams[1] == "Team 1"
        assert teams[40] == "Team 40"

    def test_windows(self):
        windows = load_config("config.yaml")["windows"]
        assert windows["state"]["days"] == [DayOfWeek.Sat, DayOfWeek.Sun]
        assert windows["national"]["start"] == (3, 15)
        assert windows["continental"]["days"] == [DayOfWeek.Wed]
        assert windows["continental"]["gap_days"] == 14
        assert windows["continental"]["rest_days"] == 2

    def test_competitions(self):
        comps = {c.id: c for c in load_config("config.yaml")["competitions"]}
        assert len(comps) == 6
        assert comps[1].window == "state" and not comps[1].double_round
        assert comps[2].team_ids == list(range(17, 33))
        assert comps[2].team_count == 16
        assert comps[3].tier == 1 and comps[3].team_count == 20
        assert comps[5].format == "knockout" and comps[5].priority == 2
        assert comps[6].format == "group_knockout"
        assert comps[6].group_size == 4 and comps[6].qualifiers_per_group == 2

    def test_minimal_config_uses_default_windows(self, tmp_path):
        path = _write(tmp_path, (
            "season:\n  year: 2030\n"
            "teams:\n  - {id: 10, name: Rovers}\n  - {id: 11, name: United}\n"
            "competitions:\n  - {id: 1, name: Derby, team_ids: [10, 11]}\n"
        ))
        config = load_config(path)
        assert config["season"]["year"] == 2030
        assert config["season"]["seed"] is None
        assert config["teams"] == {10: "Rovers", 11: "United"}
        assert config["windows"]["national"]["days"] == [DayOfWeek.Sat, DayOfWeek.Sun]
        comp = config["competitions"][0]
        assert comp.format == "league" and comp.window == "national"
        assert comp.team_count == 2

    def test_team_names_as_strings(self, tmp_path):
        path = _write(tmp_path, "teams: [Rovers, United]\ncompetitions: []\n")
        assert load_config(path)["teams"] == {1: "Rovers", 2: "United"}


class TestConfigErrors:
    def test_unknown_format_and_window(self, tmp_path):
        path = _write(tmp_path, (
            "teams: 4\n"
            "competitions:\n"
            "  - {id: 1, name: A, format: ladder}\n"
            "  - {id: 2, name: B, window: galactic}\n"
        ))
        errors = _errors(path)
        assert any("unknown format" in e for e in errors)
        assert any("unknown window" in e for e in errors)

    def test_duplicate_ids(self, tmp_path):
        path = _write(tmp_path, (
            "teams: 4\n"
            "competitions:\n  - {id: 1, name: A}\n  - {id: 1, name: B}\n"
        ))
        assert any("Duplicate" in e for e in _errors(path))

    def test_unregistered_team(self, tmp_path):
        path = _write(tmp_path, (
            "teams: 4\ncompetitions:\n  - {id: 1, name: A, team_ids: [1, 9]}\n"
        ))
        assert any("team 9" in e for e in _errors(path))

    def test_indivisible_groups(self, tmp_path):
        path = _write(tmp_path, (
            "teams: 10\n"
            "competitions:\n"
            "  - {id: 1, name: Cont, format: group_knockout, teams: 10, group_size: 4}\n"
        ))
        assert any("groups of 4" in e for e in _errors(path))

    def test_bad_window(self, tmp_path):
        path = _write(tmp_path, (
            "windows:\n"
            "  national: {start: '06-01', end: '02-01'}\n"
            "  continental: {gap_days: 0}\n"
            "  intergalactic: {}\n"
            "teams: 2\ncompetitions: []\n"
        ))
        errors = _errors(path)
        assert any("ends before it starts" in e for e in errors)
        assert any("gap_days" in e for e in errors)
        assert any("intergalactic" in e for e in errors)

    def test_every_problem_reported(self, tmp_path):
        path = _write(tmp_path, (
            "teams: 2\n"
            "competitions:\n"
            "  - {id: 1, name: A, format: ladder}\n"
            "  - {id: 2, name: B, team_ids: [5]}\n"
        ))
        assert len(_errors(path)) == 2

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)

    def test_oversized_competition_only_warns(self, tmp_path, caplog):
        path = _write(tmp_path, "teams: 4\ncompetitions:\n  - {id: 1, name: Big, teams: 8}\n")
        with caplog.at_level("WARNING", logger="seasonsched.config"):
            config = load_config(path)
        assert config["competitions"][0].team_count == 8
        assert "Big wants 8 teams" in caplog.text

    def test_repeated_team_ids(self, tmp_path):
        path = _write(tmp_path, (
            "teams: 4\ncompetitions:\n  - {id: 1, name: A, team_ids: [1, 1, 2, 3]}\n"
        ))
        assert any("team_ids lists [1] more than once" in e for e in _errors(path))

    def test_leap_day_window_survives_rollover(self, tmp_path):
        path = _write(tmp_path, (
            "windows:\n  national: {start: '02-29', end: '12-15'}\n"
            "teams: 2\ncompetitions: []\n"
        ))
        windows = build_windows(2027, load_config(path)["windows"])
        assert windows["national"].start_date == date(2027, 2, 28)
