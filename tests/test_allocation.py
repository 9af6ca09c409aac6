"""
Test suite for the Allocation Planner

Both allocation models (age-based and timeline-based) plus the investment split.
"""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from allocation import (
    build_investment_plan,
    horizon_bucket,
    recommend_allocation_by_age,
    recommend_allocation_by_timeline,
    recommend_risk_profile,
)


class TestAgeBasedAllocation:
    """Equity = max(100 - age, 30), adjusted by risk tolerance."""

    def test_moderate(self):
        a = recommend_allocation_by_age(30, "Moderate")
        assert (a.equity, a.debt) == (70, 30)

    def test_floor_for_older_clients(self):
        a = recommend_allocation_by_age(80, "Moderate")
        assert (a.equity, a.debt) == (30, 70)

    def test_conservative_floor(self):
        a = recommend_allocation_by_age(75, "Conservative")
        assert a.equity == 20

    def test_aggressive_cap(self):
        a = recommend_allocation_by_age(25, "Aggressive")
        assert a.equity == 90
        assert a.debt == 10

    def test_unknown_age_defaults(self):
        assert recommend_allocation_by_age(None).equity == 70

    def test_sums_to_hundred(self):
        for age in range(0, 100, 7):
            for risk in ("Conservative", "Moderate", "Aggressive"):
                a = recommend_allocation_by_age(age, risk)
                assert a.equity + a.debt == 100


class TestTimelineAllocation:
    """Lookup by risk profile and horizon bucket."""

    @pytest.mark.parametrize("years,bucket", [(0, "short"), (3, "short"), (3.5, "medium"), (7, "medium"), (8, "long")])
    def test_buckets(self, years, bucket):
        assert horizon_bucket(years) == bucket

    def test_table(self):
        a = recommend_allocation_by_timeline(2, "Conservative")
        assert (a.equity, a.debt, a.expected_return) == (20, 80, 8.0)
        a = recommend_allocation_by_timeline(5, "Moderate")
        assert (a.equity, a.debt, a.expected_return) == (60, 40, 10.0)
        a = recommend_allocation_by_timeline(15, "Aggressive")
        assert (a.equity, a.debt, a.expected_return) == (80, 20, 12.0)

    def test_unknown_profile_uses_moderate(self):
        a = recommend_allocation_by_timeline(10, "whatever")
        assert (a.equity, a.debt) == (70, 30)

    def test_to_dict_carries_expected_return(self):
        assert recommend_allocation_by_timeline(1).to_dict()["expectedReturn"] == 8.0
        assert "expectedReturn" not in recommend_allocation_by_age(40).to_dict()


class TestRiskProfileAndInvestments:
    """Test the risk heuristic and monthly investment split."""

    def test_risk_profile_recommendation(self):
        assert recommend_risk_profile(30, 2).profile == "Conservative"
        assert recommend_risk_profile(30, 5).profile == "Moderate"
        assert recommend_risk_profile(30, 10).profile == "Aggressive"
        assert recommend_risk_profile(40, 10).profile == "Moderate-Aggressive"
        assert recommend_risk_profile(50, 10).expected_return == 10.0

    def test_investment_plan_split(self):
        plan = build_investment_plan(50000, 30, "Moderate")
        # 70% of surplus, split 70/30
        amounts = {line["category"]: line["amount"] for line in plan["monthlyInvestments"]}
        assert amounts == {"Equity": 24500, "Debt": 10500}
        assert plan["totalInvestmentAmount"] == 35000
        assert plan["assetAllocation"] == {"equity": 70, "debt": 30, "gold": 0.0}

    def test_no_investments_without_surplus(self):
        plan = build_investment_plan(-1000, 30)
        assert plan["monthlyInvestments"] == []
        assert plan["totalInvestmentAmount"] == 0
        assert "cash flow" in plan["strategy"]


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
