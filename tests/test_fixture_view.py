"""Tests for the match view model."""
from datetime import datetime, timedelta, timezone

from matchday.models.entities import Fixture, Injury, OddsOutcome, Prediction
from matchday.views.fixture_view import (
    TAB_ANALYSIS,
    TAB_EVENTS,
    TAB_H2H,
    TAB_INJURIES,
    TAB_ODDS,
    TAB_OVERVIEW,
    TAB_PREDICTION,
    TAB_STATISTICS,
    actual_result,
    build_fixture_view,
    confidence_tier,
    find_outcome,
    is_prediction_correct,
    pick_most_likely_score,
    relative_time,
    select_tab,
)


def _fixture(**overrides) -> Fixture:
    data = {
        "id": 1,
        "match_date": "2026-03-01T14:00:00Z",
        "status": "NS",
        "round": "Regular Season - 27",
        "home_team_id": 40,
        "away_team_id": 50,
        "home_team": {"id": 40, "name": "Manchester City"},
        "away_team": {"id": 50, "name": "Tottenham Hotspur"},
    }
    data.update(overrides)
    return Fixture.model_validate(data)


def _h2h_market(bookmaker, home, draw, away, home_name="Man City", away_name="Tottenham"):
    return {
        "bookmaker": bookmaker,
        "bet_type": "h2h",
        "values": [
            {"name": home_name, "price": home},
            {"name": "Draw", "price": draw},
            {"name": away_name, "price": away},
        ],
    }


class TestTabs:
    """Tests for tab gating."""

    def test_bare_fixture_only_overview(self):
        """Test a fixture with nothing joined shows only Overview."""
        view = build_fixture_view(_fixture())
        assert view.available_tabs == [TAB_OVERVIEW]

    def test_no_prediction_excludes_prediction_tab(self):
        """Test Prediction tab needs a prediction."""
        view = build_fixture_view(_fixture(odds=[_h2h_market("Bet365", 1.8, 3.9, 4.2)]))
        assert TAB_PREDICTION not in view.available_tabs
        assert TAB_ODDS in view.available_tabs

    def test_tab_order(self):
        """Test tabs keep the fixed order."""
        fixture = _fixture(
            status="FT",
            goals_home=2,
            goals_away=2,
            prediction={"prediction_result": "1"},
            odds=[_h2h_market("Bet365", 1.8, 3.9, 4.2)],
            head_to_head={"matches_played": 10, "team1_wins": 5, "team2_wins": 3, "draws": 2},
            statistics=[{"team_id": 40, "shots_total": 15}, {"team_id": 50, "shots_total": 8}],
            events=[{"type": "Goal", "elapsed": 12, "team_id": 40}],
            match_analysis={"prediction_correct": False},
        )
        injuries = [Injury(player_name="Rodri", team_id=40)]

        view = build_fixture_view(fixture, injuries=injuries)

        assert view.available_tabs == [
            TAB_OVERVIEW,
            TAB_PREDICTION,
            TAB_ODDS,
            TAB_H2H,
            TAB_INJURIES,
            TAB_STATISTICS,
            TAB_EVENTS,
            TAB_ANALYSIS,
        ]

    def test_h2h_needs_matches(self):
        """Test an empty h2h record hides the tab."""
        view = build_fixture_view(_fixture(head_to_head={"matches_played": 0}))
        assert TAB_H2H not in view.available_tabs

    def test_injuries_need_data(self):
        """Test Injuries tab hidden when not fetched or empty."""
        assert TAB_INJURIES not in build_fixture_view(_fixture()).available_tabs
        assert TAB_INJURIES not in build_fixture_view(_fixture(), injuries=[]).available_tabs

    def test_statistics_only_when_completed(self):
        """Test statistics of a live match are not shown as a tab."""
        fixture = _fixture(status="2H", statistics=[{"team_id": 40, "shots_total": 3}])
        assert TAB_STATISTICS not in build_fixture_view(fixture).available_tabs

    def test_only_key_events(self):
        """Test substitutions do not open the Events tab."""
        fixture = _fixture(status="FT", goals_home=0, goals_away=0, events=[{"type": "subst", "elapsed": 60}])
        view = build_fixture_view(fixture)
        assert view.events == []
        assert TAB_EVENTS not in view.available_tabs

    def test_separately_fetched_analysis(self):
        """Test analysis passed in opens the Analysis tab."""
        from matchday.models.entities import MatchAnalysis

        fixture = _fixture(status="FT", goals_home=1, goals_away=0)
        view = build_fixture_view(fixture, analysis=MatchAnalysis(prediction_correct=True))
        assert TAB_ANALYSIS in view.available_tabs

    def test_select_tab_falls_back(self):
        """Test unavailable tab falls back to Overview."""
        view = build_fixture_view(_fixture())
        assert select_tab(view, TAB_ODDS) == TAB_OVERVIEW
        assert select_tab(view, None) == TAB_OVERVIEW
        assert select_tab(view, TAB_OVERVIEW) == TAB_OVERVIEW

    def test_select_tab_keeps_available(self):
        """Test available tab is kept."""
        view = build_fixture_view(_fixture(prediction={"prediction_result": "1"}))
        assert select_tab(view, TAB_PREDICTION) == TAB_PREDICTION


class TestBestOdds:
    """Tests for best 1X2 odds."""

    def test_best_price_per_outcome(self):
        """Test highest price and its bookmaker per outcome."""
        fixture = _fixture(odds=[
            _h2h_market("Bet365", 1.80, 3.90, 4.20),
            _h2h_market("William Hill", 1.85, 3.75, 4.50),
            {"bookmaker": "Pinnacle", "bet_type": "totals", "values": [{"name": "Over", "price": 9.9, "point": 2.5}]},
        ])
        view = build_fixture_view(fixture)

        assert view.best_odds["home"].price == 1.85
        assert view.best_odds["home"].bookmaker == "William Hill"
        assert view.best_odds["draw"].price == 3.90
        assert view.best_odds["draw"].bookmaker == "Bet365"
        assert view.best_odds["away"].price == 4.50
        assert len(view.totals) == 1

    def test_odds_updated_at(self):
        """Test latest market update is reported."""
        fixture = _fixture(odds=[
            dict(_h2h_market("A", 2.0, 3.0, 4.0), updated_at="2026-02-28T10:00:00Z"),
            dict(_h2h_market("B", 2.1, 3.1, 4.1), updated_at="2026-02-28T12:00:00Z"),
        ])
        view = build_fixture_view(fixture)
        assert view.odds_updated_at == datetime(2026, 2, 28, 12, tzinfo=timezone.utc)

    def test_find_outcome_shortened_names(self):
        """Test bookmaker short names match full team names."""
        values = [
            OddsOutcome(name="Man City", price=1.8),
            OddsOutcome(name="Draw", price=3.9),
            OddsOutcome(name="Tottenham", price=4.2),
        ]
        assert find_outcome(values, "draw", "Manchester City", "Tottenham Hotspur").price == 3.9
        assert find_outcome(values, "away", "Manchester City", "Tottenham Hotspur").name == "Tottenham"


class TestAccuracy:
    """Tests for prediction accuracy on completed fixtures."""

    def test_actual_result(self):
        """Test 1/X/2 from goals."""
        assert actual_result(2, 1) == "1"
        assert actual_result(1, 1) == "X"
        assert actual_result(0, 3) == "2"
        assert actual_result(None, 1) is None

    def test_compound_prediction(self):
        """Test double-chance calls count when either outcome happens."""
        assert is_prediction_correct("1", "1X") is True
        assert is_prediction_correct("X", "1X") is True
        assert is_prediction_correct("2", "1X") is False
        assert is_prediction_correct("X", None) is False

    def test_compare_accuracy(self):
        """Test all four checks on a completed fixture."""
        fixture = _fixture(
            status="FT",
            goals_home=2,
            goals_away=1,
            prediction={
                "prediction_result": "1",
                "most_likely_score": "2-1",
                "over_under_2_5": "Over",
                "btts": "No",
            },
        )
        accuracy = build_fixture_view(fixture).accuracy

        assert accuracy.result_correct is True
        assert accuracy.score_correct is True
        assert accuracy.over_under_correct is True
        assert accuracy.btts_correct is False
        assert accuracy.correct_count == 3

    def test_no_accuracy_for_upcoming(self):
        """Test upcoming fixtures have no accuracy comparison."""
        view = build_fixture_view(_fixture(prediction={"prediction_result": "1"}))
        assert view.accuracy is None


class TestScorelines:
    """Tests for scoreline helpers."""

    def test_most_likely_skips_other(self):
        """Test the catch-all bucket is never the most likely score."""
        prediction = Prediction(score_predictions=[
            {"score": "Other", "probability": 30},
            {"score": "1-1", "probability": 14},
            {"score": "2-1", "probability": 12},
        ])
        assert pick_most_likely_score(prediction) == "1-1"

    def test_falls_back_to_column(self):
        """Test most_likely_score column used without scorelines."""
        assert pick_most_likely_score(Prediction(most_likely_score="0-0")) == "0-0"
        assert pick_most_likely_score(None) is None


class TestFormatting:
    """Tests for confidence tiers and relative times."""

    def test_confidence_tiers(self):
        """Test tier boundaries."""
        assert confidence_tier(70) == "high"
        assert confidence_tier(69.9) == "medium"
        assert confidence_tier(50) == "medium"
        assert confidence_tier(49) == "low"

    def test_view_confidence_falls_back_to_index(self):
        """Test overall index used when no confidence is stored."""
        view = build_fixture_view(_fixture(prediction={"overall_index": 62}))
        assert view.confidence == 62
        assert view.confidence_tier == "medium"

    def test_relative_time(self):
        """Test hours and days formatting."""
        now = datetime(2026, 3, 1, 12, tzinfo=timezone.utc)
        assert relative_time(now - timedelta(minutes=20), now) == "Just now"
        assert relative_time(now - timedelta(hours=5), now) == "5h ago"
        assert relative_time(now - timedelta(days=3, hours=2), now) == "3d ago"
        assert relative_time(None, now) == ""

    def test_relative_time_naive(self):
        """Test naive timestamps are treated as UTC."""
        now = datetime(2026, 3, 1, 12, tzinfo=timezone.utc)
        assert relative_time(datetime(2026, 3, 1, 9), now) == "3h ago"
