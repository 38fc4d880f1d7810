"""Tests for season.py — season start and end."""

import random
from collections import defaultdict
from datetime import date

from seasonsched.models import BYE, Competition, DayOfWeek
from seasonsched.season import SeasonOrchestrator, build_fixtures, competition_entrants
from seasonsched.store import InMemoryStore


def _competitions():
    return [
        Competition(id=1, name="State", tier=3, format="league", window="state",
                    team_count=8, double_round=False),
        Competition(id=2, name="First Division", tier=1, format="league",
                    window="national", team_count=10),
        Competition(id=3, name="Second Division", tier=2, format="league",
                    window="national", team_ids=list(range(11, 21))),
        Competition(id=4, name="Cup", tier=1, format="knockout",
                    window="national", team_count=16, priority=2),
        Competition(id=5, name="Continental", tier=1, format="group_knockout",
                    window="continental", team_count=8),
    ]


def _setup(seed=3, competitions=None):
    store = InMemoryStore({i: f"Team {i}" for i in range(1, 21)},
                          competitions if competitions is not None else _competitions())
    orchestrator = SeasonOrchestrator(store, store, store, rng=random.Random(seed))
    return store, orchestrator


def _play_league(store, competition_id, season_id, ranking):
    """Record results so the league finishes in ``ranking`` order."""
    position = {t: i for i, t in enumerate(ranking)}
    for m in store.find_matches_by_competition(competition_id, season_id):
        if position[m.home_team_id] < position[m.away_team_id]:
            store.record_result(m.id, 2, 0)
        else:
            store.record_result(m.id, 0, 1)


class TestBuildFixtures:
    def test_entrants_from_registry_order(self):
        comp = Competition(id=1, name="L", team_count=4)
        assert competition_entrants(comp, [9, 8, 7, 6, 5]) == [9, 8, 7, 6]

    def test_explicit_entrants(self):
        comp = Competition(id=1, name="L", team_count=4, team_ids=[5, 6])
        assert competition_entrants(comp, [1, 2, 3, 4]) == [5, 6]

    def test_dispatch_by_format(self):
        teams = list(range(1, 9))
        league = Competition(id=1, name="L", team_count=8, format="league")
        cup = Competition(id=2, name="C", team_count=8, format="knockout")
        groups = Competition(id=3, name="G", team_count=8, format="group_knockout")

        assert len(build_fixtures(league, teams)) == 56
        cup_fx = build_fixtures(cup, teams, random.Random(1))
        assert len(cup_fx) == 4 and all(f.round == 1 for f in cup_fx)
        group_fx = build_fixtures(groups, teams, random.Random(1))
        assert len(group_fx) == 24 and all(f.group_name for f in group_fx)

    def test_unknown_format(self):
        comp = Competition(id=1, name="X", format="ladder")
        assert build_fixtures(comp, [1, 2, 3]) == []


class TestStartNewSeason:
    def test_creates_active_season(self):
        store, orch = _setup()
        season = orch.start_new_season(2026)
        assert season.year == 2026
        assert season.start_date == date(2026, 1, 15)
        assert season.end_date == date(2026, 12, 15)
        assert store.find_active_season() == season

    def test_persists_all_competitions(self):
        store, orch = _setup()
        season = orch.start_new_season(2026)
        matches = store.find_matches_by_season(season.id)

        per_comp = defaultdict(int)
        for m in matches:
            per_comp[m.competition_id] += 1
            assert m.season_id == season.id
            assert not m.is_played and m.home_score is None
            assert BYE not in m.teams()

        assert orch.last_result.dropped_rounds == []
        assert per_comp == {1: 28, 2: 90, 3: 90, 4: 8, 5: 24}

    def test_no_team_double_booked(self):
        store, orch = _setup()
        season = orch.start_new_season(2026)
        per_date = defaultdict(list)
        for m in store.find_matches_by_season(season.id):
            per_date[m.date].extend(m.teams())
        for d, teams in per_date.items():
            assert len(teams) == len(set(teams)), f"double booking on {d}"

    def test_previous_season_deactivated(self):
        store, orch = _setup()
        first = orch.start_new_season(2026)
        second = orch.start_new_season(2027)
        assert not store.seasons[first.id].is_active
        assert store.find_active_season() == second

    def test_odd_league_has_no_bye_fixtures(self):
        comps = [Competition(id=1, name="Odd", format="league", window="national",
                             team_count=5)]
        store, orch = _setup(competitions=comps)
        season = orch.start_new_season(2026)
        matches = store.find_matches_by_season(season.id)
        assert len(matches) == 20
        assert all(BYE not in m.teams() for m in matches)

    def test_same_seed_same_schedule(self):
        store1, orch1 = _setup(seed=8)
        store2, orch2 = _setup(seed=8)
        s1 = orch1.start_new_season(2026)
        s2 = orch2.start_new_season(2026)
        key = lambda m: (m.competition_id, m.round, m.home_team_id, m.away_team_id, m.date)
        assert [key(m) for m in store1.find_matches_by_season(s1.id)] == \
            [key(m) for m in store2.find_matches_by_season(s2.id)]

    def test_persistence_failure_propagates(self):
        class BrokenStore(InMemoryStore):
            def create_matches(self, matches):
                raise RuntimeError("disk full")

        store = BrokenStore({1: "A", 2: "B"}, [Competition(id=1, name="L", team_count=2)])
        orch = SeasonOrchestrator(store, store, store)
        try:
            orch.start_new_season(2026)
        except RuntimeError as e:
            assert "disk full" in str(e)
        else:
            raise AssertionError("expected RuntimeError")


class TestProcessEndOfSeason:
    def test_no_active_season(self):
        _, orch = _setup()
        assert orch.process_end_of_season(1) is None

    def test_summary_and_next_season(self):
        store, orch = _setup()
        season = orch.start_new_season(2026)

        first_div = list(range(1, 11))
        second_div = list(range(11, 21))
        _play_league(store, 2, season.id, first_div)
        _play_league(store, 3, season.id, list(reversed(second_div)))

        summary = orch.process_end_of_season(season.id)
        assert summary.season_year == 2026
        assert summary.champion_name == "Team 1"
        assert summary.relegated_teams == [7, 8, 9, 10]
        assert summary.promoted_teams == [20, 19, 18, 17]

        active = store.find_active_season()
        assert active.year == 2027
        assert active.id != season.id
        assert store.find_matches_by_season(active.id)

    def test_missing_leagues(self):
        comps = [Competition(id=4, name="Cup", format="knockout", team_count=4)]
        store, orch = _setup(competitions=comps)
        season = orch.start_new_season(2026)
        summary = orch.process_end_of_season(season.id)
        assert summary.champion_name == "Unknown"
        assert summary.promoted_teams == []
        assert summary.relegated_teams == []


class TestEntrantEdgeCases:
    def test_repeated_team_ids_entered_once(self, caplog):
        comps = [Competition(id=1, name="Derby", window="national",
                             team_ids=[1, 1, 2, 3], double_round=False)]
        store, orch = _setup(competitions=comps)
        with caplog.at_level("WARNING", logger="seasonsched.season"):
            season = orch.start_new_season(2026)
        assert "duplicate team_ids" in caplog.text

        matches = store.find_matches_by_season(season.id)
        assert len(matches) == 3
        per_date = defaultdict(list)
        for m in matches:
            per_date[m.date].extend(m.teams())
        for d, teams in per_date.items():
            assert len(teams) == len(set(teams)), f"double booking on {d}"

    def test_leap_day_window_rolls_into_common_year(self):
        comps = [Competition(id=1, name="League", window="national", team_count=4)]
        store = InMemoryStore({i: f"Team {i}" for i in range(1, 5)}, comps)
        windows = {"national": {"days": [DayOfWeek.Sat, DayOfWeek.Sun],
                                "start": (2, 29), "end": (12, 15),
                                "gap_days": 7, "rest_days": 0}}
        orch = SeasonOrchestrator(store, store, store, windows=windows,
                                  rng=random.Random(1))
        first = orch.start_new_season(2028)
        orch.process_end_of_season(first.id)

        active = store.find_active_season()
        assert active.year == 2029
        matches = store.find_matches_by_season(active.id)
        assert len(matches) == 12
        # 2029-03-03 is the first Saturday on or after the clamped 02-28 start
        assert min(m.date for m in matches) == date(2029, 3, 3)
