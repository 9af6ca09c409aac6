"""
Health Scorer

Composite 0-100 financial health score. Five categories, 20 points each:

    income stability | expense management | debt management
    savings discipline | emergency preparedness

This is the only implementation; every caller that needs a health score
goes through score_financial_health().
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from emergency import evaluate_emergency_fund
from metrics import compute_monthly_metrics
from normalizer import ensure_profile

CATEGORY_MAX = 20
MAX_SCORE = 100


@dataclass
class HealthScore:
    score: int
    breakdown: Dict[str, int] = field(default_factory=dict)

    @property
    def rating(self) -> str:
        return health_rating(self.score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "maxScore": MAX_SCORE,
            "rating": self.rating,
            "breakdown": [
                {"category": k, "score": v, "maxScore": CATEGORY_MAX}
                for k, v in self.breakdown.items()
            ],
        }


def score_income_stability(monthly_income: float) -> int:
    return 20 if monthly_income > 0 else 0


def score_expense_management(expense_ratio: float) -> int:
    if expense_ratio < 50:
        return 20
    if expense_ratio < 70:
        return 10
    return 0


def score_debt_management(emi_ratio: float) -> int:
    if emi_ratio == 0:
        return 20
    if emi_ratio < 30:
        return 15
    if emi_ratio < 40:
        return 10
    if emi_ratio < 50:
        return 5
    return 0


def score_savings_discipline(savings_rate: float) -> int:
    if savings_rate > 30:
        return 20
    if savings_rate > 20:
        return 15
    if savings_rate > 10:
        return 10
    if savings_rate > 0:
        return 5
    return 0


def score_emergency_preparedness(months_of_coverage: float) -> int:
    if months_of_coverage >= 6:
        return 20
    if months_of_coverage >= 3:
        return 10
    if months_of_coverage >= 1:
        return 5
    return 0


def health_rating(score: int) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Fair"
    return "Needs Improvement"


def health_score_breakdown(profile: Any) -> HealthScore:
    p = ensure_profile(profile)
    m = compute_monthly_metrics(p)
    ef = evaluate_emergency_fund(p, m)

    breakdown = {
        "incomeStability": score_income_stability(m.monthly_income),
        "expenseManagement": score_expense_management(m.expense_ratio),
        "debtManagement": score_debt_management(m.emi_ratio),
        "savingsDiscipline": score_savings_discipline(m.savings_rate),
        "emergencyPreparedness": score_emergency_preparedness(ef.months_of_coverage),
    }
    breakdown = {k: min(v, CATEGORY_MAX) for k, v in breakdown.items()}
    total = max(0, min(sum(breakdown.values()), MAX_SCORE))
    return HealthScore(score=total, breakdown=breakdown)


def score_financial_health(profile: Any) -> int:
    return health_score_breakdown(profile).score
