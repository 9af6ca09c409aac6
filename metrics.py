"""
Metric Aggregator - monthly income/expense/EMI totals and derived ratios.
"""

from dataclasses import dataclass
from typing import Any, Dict

from normalizer import ClientFinancialProfile, active_debts, ensure_profile


@dataclass
class MonthlyMetrics:
    monthly_income: float
    monthly_expenses: float
    total_emis: float
    monthly_surplus: float
    emi_ratio: float
    savings_rate: float
    expense_ratio: float
    fixed_expenditure_ratio: float

    @property
    def monthly_commitments(self) -> float:
        return self.monthly_expenses + self.total_emis

    def to_dict(self) -> Dict[str, float]:
        return {
            "monthlyIncome": self.monthly_income,
            "monthlyExpenses": self.monthly_expenses,
            "totalEMIs": self.total_emis,
            "monthlySurplus": self.monthly_surplus,
            "emiRatio": self.emi_ratio,
            "savingsRate": self.savings_rate,
            "expenseRatio": self.expense_ratio,
            "fixedExpenditureRatio": self.fixed_expenditure_ratio,
        }


def _pct(part: float, whole: float) -> float:
    # 0 instead of inf/nan when there is no income
    return (part / whole) * 100 if whole > 0 else 0.0


def calculate_total_emis(debts: Any) -> float:
    total = sum(d.monthly_emi for _, d in active_debts(debts) if d.monthly_emi > 0)
    return max(0.0, total)


def calculate_total_debt(debts: Any) -> float:
    total = sum(d.outstanding_amount for _, d in active_debts(debts) if d.outstanding_amount > 0)
    return max(0.0, total)


def total_investments(profile: Any) -> float:
    profile = ensure_profile(profile)
    return sum(v for holdings in profile.assets.investments.values() for v in holdings.values())


def compute_monthly_metrics(profile: Any) -> MonthlyMetrics:
    p: ClientFinancialProfile = ensure_profile(profile)
    income = p.monthly_income
    expenses = p.monthly_expenses
    emis = calculate_total_emis(p.debts)
    surplus = income - expenses - emis

    return MonthlyMetrics(
        monthly_income=income,
        monthly_expenses=expenses,
        total_emis=emis,
        monthly_surplus=surplus,
        emi_ratio=_pct(emis, income),
        savings_rate=_pct(surplus, income),
        expense_ratio=_pct(expenses, income),
        fixed_expenditure_ratio=_pct(expenses + emis, income),
    )
