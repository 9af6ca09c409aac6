"""
Emergency-Fund Evaluator - reserve target, shortfall and funding progress.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

import planning_config as cfg
from metrics import MonthlyMetrics, compute_monthly_metrics
from normalizer import ensure_profile


@dataclass
class EmergencyFundStatus:
    target_amount: float
    current_amount: float
    gap: float
    months_of_coverage: float
    completion_percentage: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "targetAmount": self.target_amount,
            "currentAmount": self.current_amount,
            "gap": self.gap,
            "monthsOfCoverage": self.months_of_coverage,
            "completionPercentage": self.completion_percentage,
        }


@dataclass
class EmergencyFundPlan:
    status: EmergencyFundStatus
    monthly_commitments: float
    suggested_contribution: float
    months_to_goal: int
    funding_label: str

    def to_dict(self) -> Dict[str, Any]:
        d = self.status.to_dict()
        d.update({
            "monthlyCommitments": self.monthly_commitments,
            "suggestedContribution": self.suggested_contribution,
            "monthsToGoal": self.months_to_goal,
            "fundingLabel": self.funding_label,
        })
        return d


def evaluate_emergency_fund(profile: Any, metrics: Optional[MonthlyMetrics] = None) -> EmergencyFundStatus:
    p = ensure_profile(profile)
    m = metrics or compute_monthly_metrics(p)
    commitments = m.monthly_expenses + m.total_emis

    target = max(commitments * cfg.EMERGENCY_FUND_MONTHS, cfg.EMERGENCY_FUND_FLOOR)
    current = p.assets.cash_bank_savings
    return EmergencyFundStatus(
        target_amount=target,
        current_amount=current,
        gap=max(0.0, target - current),
        months_of_coverage=current / commitments if commitments > 0 else 0.0,
        completion_percentage=(current / target) * 100 if target > 0 else 0.0,
    )


def funding_label(completion_percentage: float) -> str:
    if completion_percentage >= 100:
        return "Fully Funded"
    if completion_percentage >= 50:
        return "Partially Funded"
    return "Underfunded"


def plan_emergency_contribution(profile: Any, metrics: Optional[MonthlyMetrics] = None) -> EmergencyFundPlan:
    """
    Suggested monthly top-up: 30% of surplus, capped at gap/12 (one year),
    never below MIN_EMERGENCY_CONTRIBUTION while a gap remains.
    """
    p = ensure_profile(profile)
    m = metrics or compute_monthly_metrics(p)
    status = evaluate_emergency_fund(p, m)

    contribution = 0.0
    months_to_goal = 0
    if status.gap > 0:
        contribution = max(
            cfg.MIN_EMERGENCY_CONTRIBUTION,
            min(m.monthly_surplus * cfg.EMERGENCY_SURPLUS_SHARE, status.gap / 12),
        )
        months_to_goal = math.ceil(status.gap / contribution)

    return EmergencyFundPlan(
        status=status,
        monthly_commitments=m.monthly_commitments,
        suggested_contribution=contribution,
        months_to_goal=months_to_goal,
        funding_label=funding_label(status.completion_percentage),
    )
