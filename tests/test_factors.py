"""Tests for factor breakdown."""
from matchday.views.factors import detect_factor_system, factor_breakdown, score_tier


class TestFactorSystem:
    """Tests for factor system detection."""

    def test_current_system(self):
        """Test A-F keys detected."""
        assert detect_factor_system({"A_base_strength": {}, "D_tactical": {}}) == "A-F"

    def test_legacy_system(self):
        """Test a legacy-only key marks A-I."""
        assert detect_factor_system({"A_base_strength": {}, "C_squad": {}}) == "A-I"

    def test_no_factors(self):
        """Test empty or unrelated blobs."""
        assert detect_factor_system(None) is None
        assert detect_factor_system({}) is None
        assert detect_factor_system({"home_win_pct": 40}) is None


class TestFactorBreakdown:
    """Tests for breakdown rows."""

    def test_rows_in_letter_order(self):
        """Test rows follow the system order with weights."""
        rows = factor_breakdown({
            "F_h2h": {"score": 40, "weighted": 4.0},
            "A_base_strength": {"score": 70, "weighted": 16.8, "notes": "xG edge"},
            "B_form": {"score": 52},
        })

        assert [r.letter for r in rows] == ["A", "B", "F"]
        assert rows[0].label == "Base Strength"
        assert rows[0].weight == 24
        assert rows[0].notes == "xG edge"
        assert rows[0].tier == "strong_home"
        assert rows[2].weight == 10

    def test_bare_scores(self):
        """Test numeric factor values are read as scores."""
        rows = factor_breakdown({"A_base_strength": 58, "B_form": 30})
        assert rows[0].score == 58
        assert rows[0].tier == "home"
        assert rows[1].tier == "strong_away"

    def test_ignores_other_keys(self):
        """Test market fields in the blob are not factors."""
        rows = factor_breakdown({"A_base_strength": {"score": 50}, "btts": "Yes"})
        assert [r.key for r in rows] == ["A_base_strength"]

    def test_score_tiers(self):
        """Test tier boundaries."""
        assert score_tier(65) == "strong_home"
        assert score_tier(55) == "home"
        assert score_tier(45) == "neutral"
        assert score_tier(35) == "away"
        assert score_tier(34.9) == "strong_away"
        assert score_tier(None) == "neutral"
