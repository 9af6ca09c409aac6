"""
Test suite for the Goal Projection Engine

SIP requirement, future values, timeline inversion, cost estimators and
goal records.
"""

import sys
import os
import math
import random

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from goals import (
    build_goal,
    calculate_tax_savings,
    car_purchase_cost,
    education_cost,
    future_value_lump_sum,
    future_value_of_sip,
    goal_milestones,
    goal_timeline_from_sip,
    inflation_adjusted_amount,
    project_goal,
    required_monthly_sip,
    retirement_corpus,
    validate_goal,
)


# =============================================================================
# CORE CALCULATORS
# =============================================================================

class TestRequiredMonthlySip:
    """Test the annuity inversion."""

    def test_scenario_c(self):
        sip = required_monthly_sip(1000000, 10, 12)
        assert sip == pytest.approx(4350, abs=5)
        assert sip == pytest.approx(4347.09, abs=0.01)

    def test_zero_rate(self):
        assert required_monthly_sip(120000, 10, 0) == pytest.approx(1000)

    def test_zero_years_is_immediate(self):
        assert required_monthly_sip(500000, 0, 12) == 500000

    @pytest.mark.parametrize("target,years,rate", [
        (0, 10, 12), (-5, 10, 12), (100000, -1, 12), (100000, 10, None), (100000, 10, "abc"), (None, None, None),
    ])
    def test_degrades_to_zero(self, target, years, rate):
        assert required_monthly_sip(target, years, rate) == 0

    def test_string_inputs(self):
        assert required_monthly_sip("10,00,000", "10", "12") == pytest.approx(4347.09, abs=0.01)


class TestFutureValues:
    """Test SIP and lump-sum compounding."""

    def test_sip_future_value_matches_target(self):
        sip = required_monthly_sip(1000000, 10, 12)
        assert future_value_of_sip(sip, 10, 12) == pytest.approx(1000000, rel=1e-9)

    def test_sip_future_value_zero_rate(self):
        assert future_value_of_sip(1000, 2, 0) == 24000

    def test_lump_sum(self):
        assert future_value_lump_sum(100000, 2, 10) == pytest.approx(121000)

    def test_lump_sum_zero_rate_keeps_value(self):
        assert future_value_lump_sum(100000, 5, 0) == 100000

    def test_bad_inputs(self):
        assert future_value_of_sip(0, 10, 12) == 0
        assert future_value_lump_sum(100000, 0, 12) == 0
        assert future_value_lump_sum(100000, 5, None) == 0


class TestGoalTimeline:
    """Test the logarithmic inversion."""

    def test_zero_sip(self):
        assert goal_timeline_from_sip(1000000, 0, 12) == 0
        assert goal_timeline_from_sip(1000000, -100, 12) == 0

    def test_zero_rate(self):
        assert goal_timeline_from_sip(120000, 1000, 0) == pytest.approx(10)

    def test_round_trip(self):
        rng = random.Random(42)
        for _ in range(500):
            target = rng.uniform(1e3, 5e7)
            years = rng.uniform(0.5, 40)
            rate = rng.uniform(0.5, 20)
            sip = required_monthly_sip(target, years, rate)
            back = goal_timeline_from_sip(target, sip, rate)
            assert math.isfinite(back)
            assert back == pytest.approx(years, abs=1e-6)


# =============================================================================
# COST ESTIMATORS
# =============================================================================

class TestCostEstimators:
    """Test inflation-based goal sizing."""

    def test_inflation_adjusted(self):
        assert inflation_adjusted_amount(100000, 2, 10) == pytest.approx(121000)
        assert inflation_adjusted_amount(100000, 0, 10) == 100000
        assert inflation_adjusted_amount(0, 5, 10) == 0

    def test_education_cost_default_inflation(self):
        assert education_cost(1000000, 1) == pytest.approx(1100000)

    def test_car_purchase(self):
        car = car_purchase_cost(1000000, 1)
        assert car["futurePrice"] == pytest.approx(1060000)
        assert car["downPayment"] == pytest.approx(212000)
        assert car["loanAmount"] == pytest.approx(848000)

    def test_retirement_corpus(self):
        result = retirement_corpus(50000, 80, 1, 25, 10)
        assert result["monthlyNeedAtRetirement"] == pytest.approx(44000)
        assert result["totalCorpusRequired"] == pytest.approx(44000 * 12 * 25)

    def test_retirement_corpus_missing_inputs(self):
        assert retirement_corpus(0, 80, 20, 25)["totalCorpusRequired"] == 0

    def test_tax_savings(self):
        elss = calculate_tax_savings(200000, "ELSS", 30)
        assert elss["eligibleAmount"] == 150000
        assert elss["taxSaved"] == pytest.approx(45000)
        assert elss["section"] == "80C"
        nps = calculate_tax_savings(250000, "nps", 20)
        assert nps["eligibleAmount"] == 200000
        other = calculate_tax_savings(100000, "FD")
        assert other["taxSaved"] == 0
        assert other["effectiveReturn"] == 0


# =============================================================================
# PROJECTIONS AND GOAL RECORDS
# =============================================================================

class TestProjections:
    """Test goal projection and milestones."""

    def test_project_goal_on_track(self):
        sip = required_monthly_sip(1000000, 10, 12)
        result = project_goal(1000000, 10, sip + 1, 12)
        assert result["onTrack"] is True
        assert result["shortfall"] == 0

    def test_project_goal_counts_savings(self):
        result = project_goal(1000000, 10, 0, 12, current_savings=200000)
        assert result["fromCurrentSavings"] == pytest.approx(200000 * 1.12 ** 10)
        assert result["shortfall"] == pytest.approx(1000000 - 200000 * 1.12 ** 10)
        assert result["onTrack"] is False
        assert result["requiredMonthlySIP"] > 0

    def test_milestones(self):
        sip = required_monthly_sip(1000000, 10, 12)
        ms = goal_milestones(1000000, 10, sip, 12, current_year=2025)
        assert [m["percentage"] for m in ms] == [25, 50, 75, 100]
        months = [m["monthsRequired"] for m in ms]
        assert months == sorted(months)
        assert months[-1] == 120
        assert all(m["onTrack"] for m in ms)
        assert ms[-1]["year"] == 2035

    def test_milestones_behind_schedule(self):
        ms = goal_milestones(1000000, 10, 1000, 12, current_year=2025)
        assert ms[-1]["onTrack"] is False

    def test_milestones_bad_inputs(self):
        assert goal_milestones(0, 10, 1000) == []


class TestGoalRecords:
    """Test goal construction and validation."""

    def test_build_goal(self):
        g = build_goal({"title": "House", "targetAmount": 5000000, "targetYear": 2035, "priority": "high"},
                       risk_profile="Moderate", current_year=2025)
        assert g.time_in_years == 10
        assert g.priority == "High"
        assert g.asset_allocation.expected_return == 12.0
        assert g.monthly_sip == pytest.approx(5 * 4347.09, abs=0.1)

    def test_build_goal_defaults(self):
        g = build_goal({"goalName": "Trip", "amount": 200000}, current_year=2025, index=2)
        assert g.target_year == 2030
        assert g.priority == "Medium"
        assert g.goal_id == "goal-3"
        assert g.title == "Trip"

    def test_build_goal_expected_return_override(self):
        g = build_goal({"targetAmount": 120000, "targetYear": 2035, "expectedReturn": 0}, current_year=2025)
        assert g.monthly_sip == pytest.approx(1000)

    def test_past_year_is_immediate(self):
        g = build_goal({"targetAmount": 100000, "targetYear": 2020}, current_year=2025)
        assert g.time_in_years == 0
        assert g.monthly_sip == 100000

    def test_to_dict_keeps_extra_fields(self):
        d = build_goal({"title": "Car", "targetAmount": 1, "targetYear": 2026, "category": "auto"},
                       current_year=2025).to_dict()
        assert d["category"] == "auto"
        assert d["assetAllocation"]["expectedReturn"] == 8.0

    def test_caller_fields_cannot_override_derived_values(self):
        d = build_goal({
            "targetAmount": 1000000, "targetYear": 2035,
            "monthlySIP": 0, "timeInYears": 99, "assetAllocation": {"equity": 0},
        }, current_year=2025, risk_profile="Aggressive").to_dict()
        assert d["timeInYears"] == 10
        assert d["monthlySIP"] == pytest.approx(4347.09, abs=0.01)
        assert d["assetAllocation"]["equity"] > 0

    def test_only_descriptive_fields_pass_through(self):
        g = build_goal({
            "title": "House", "targetAmount": 1, "targetYear": 2030,
            "notes": "near office", "internalScore": 7, "monthlySIP": 5,
        }, current_year=2025)
        assert g.extra == {"notes": "near office"}
        assert "internalScore" not in g.to_dict()

    def test_effective_rate_is_recorded(self):
        g = build_goal({"targetAmount": 1e6, "targetYear": 2035, "expectedReturn": 6}, current_year=2025)
        assert g.expected_return == 6
        assert g.to_dict()["expectedReturn"] == 6
        assert build_goal({"targetAmount": 1, "targetYear": 2026}, current_year=2025).expected_return == 8.0

    def test_validate_goal(self):
        issues = validate_goal({"targetAmount": 0, "targetYear": 2000}, current_year=2025)
        fields = {i.field: i.severity for i in issues}
        assert fields["targetAmount"] == "error"
        assert fields["targetYear"] == "warning"
        assert validate_goal("nope")[0].severity == "error"


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
