"""
Test suite for the Metric Aggregator

Monthly totals, surplus and ratio safety when income is zero.
"""

import sys
import os
import math
import random

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from metrics import (
    calculate_total_debt,
    calculate_total_emis,
    compute_monthly_metrics,
    total_investments,
)


SCENARIO_A = {
    "monthlyIncome": 100000,
    "monthlyExpenses": 60000,
    "debts": {
        "homeLoan": {"hasLoan": True, "monthlyEMI": 6000, "outstandingAmount": 500000},
        "carLoan": {"hasLoan": True, "monthlyPayment": 4000, "outstandingAmount": 150000},
    },
}


class TestMonthlyMetrics:
    """Test monthly cash-flow metrics."""

    def test_scenario_a(self):
        m = compute_monthly_metrics(SCENARIO_A)
        assert m.total_emis == 10000
        assert m.monthly_surplus == 30000
        assert m.emi_ratio == pytest.approx(10)
        assert m.savings_rate == pytest.approx(30)
        assert m.expense_ratio == pytest.approx(60)
        assert m.fixed_expenditure_ratio == pytest.approx(70)
        assert m.monthly_commitments == 70000

    def test_inactive_loans_ignored(self):
        m = compute_monthly_metrics({
            "monthlyIncome": 50000,
            "debts": {"personalLoan": {"hasLoan": False, "monthlyEMI": 9000}},
        })
        assert m.total_emis == 0

    def test_negative_surplus_allowed(self):
        m = compute_monthly_metrics({"monthlyIncome": 40000, "monthlyExpenses": 50000})
        assert m.monthly_surplus == -10000
        assert m.savings_rate == pytest.approx(-25)

    def test_to_dict_keys(self):
        d = compute_monthly_metrics(SCENARIO_A).to_dict()
        assert d["totalEMIs"] == 10000
        assert set(d) >= {"monthlyIncome", "emiRatio", "savingsRate", "expenseRatio", "fixedExpenditureRatio"}

    def test_deterministic(self):
        assert compute_monthly_metrics(SCENARIO_A) == compute_monthly_metrics(SCENARIO_A)


class TestRatioSafety:
    """With zero income every ratio is 0, never NaN or infinity."""

    def test_zero_income(self):
        m = compute_monthly_metrics({
            "monthlyIncome": 0,
            "monthlyExpenses": 20000,
            "debts": {"carLoan": {"hasLoan": True, "monthlyEMI": 5000}},
        })
        assert m.emi_ratio == 0
        assert m.savings_rate == 0
        assert m.expense_ratio == 0
        assert m.fixed_expenditure_ratio == 0

    def test_zero_income_random_profiles(self):
        rng = random.Random(7)
        for _ in range(200):
            profile = {
                "monthlyIncome": 0,
                "monthlyExpenses": rng.uniform(0, 1e6),
                "debts": {
                    "homeLoan": {"hasLoan": rng.random() < 0.5, "monthlyEMI": rng.uniform(0, 1e5)},
                    "creditCards": {"hasLoan": True, "monthlyEMI": rng.choice(["abc", None, rng.uniform(0, 1e4)])},
                },
            }
            m = compute_monthly_metrics(profile)
            for ratio in (m.emi_ratio, m.savings_rate, m.expense_ratio, m.fixed_expenditure_ratio):
                assert ratio == 0
                assert math.isfinite(ratio)


class TestTotals:
    """Test debt and investment totals."""

    def test_total_emis_and_debt(self):
        debts = SCENARIO_A["debts"]
        assert calculate_total_emis(debts) == 10000
        assert calculate_total_debt(debts) == 650000

    def test_total_investments(self):
        profile = {
            "assets": {
                "investments": {
                    "equity": {"mutualFunds": 200000, "directStocks": "50,000"},
                    "fixedIncome": {"ppf": 100000},
                },
            },
        }
        assert total_investments(profile) == 350000


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
