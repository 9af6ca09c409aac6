"""
Planning Orchestrators

Two pipelines over the calculation modules:
1. Cash flow: Validation → Metrics → Debts → Emergency fund → Health → Investments
2. Goals: Validation → Goal records → Conflicts → Multi-goal optimization

Usage:
    from planner import CashFlowPlanner

    planner = CashFlowPlanner()
    result = planner.run({"clientData": client_data})

    if result.warnings:
        show_data_incomplete(result.warnings)
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

import planning_config as cfg
from allocation import AssetAllocation, build_investment_plan, recommend_allocation_by_age
from debts import DebtSummary, summarize_debts
from emergency import EmergencyFundPlan, plan_emergency_contribution
from goals import Goal, build_goal, goal_milestones, validate_goal
from health import HealthScore, health_score_breakdown
from metrics import MonthlyMetrics, compute_monthly_metrics
from normalizer import (
    ClientFinancialProfile,
    ValidationIssue,
    calculate_age,
    normalize_profile,
    normalize_risk_profile,
    safe_float,
    validate_profile,
)
from optimizer import Conflict, OptimizationResult, detect_timeline_conflicts, optimize_multiple_goals

logger = logging.getLogger(__name__)


def _client_data(payload: Any) -> Any:
    """Accept either {"clientData": {...}} or the client record itself."""
    if isinstance(payload, dict) and isinstance(payload.get("clientData"), dict):
        return payload["clientData"]
    return payload


# =============================================================================
# ACTION ITEMS
# =============================================================================

def generate_action_items(profile: Any) -> List[Dict[str, str]]:
    p = profile if isinstance(profile, ClientFinancialProfile) else normalize_profile(profile)
    m = compute_monthly_metrics(p)
    ef = plan_emergency_contribution(p, m).status
    debts = summarize_debts(p.debts).prioritized_debts
    items = []

    if m.emi_ratio > cfg.TARGET_EMI_RATIO:
        items.append({
            "action": f"Reduce EMI ratio to below {cfg.TARGET_EMI_RATIO:.0f}%",
            "priority": "high",
            "timeline": "0-3 months",
            "category": "debt",
            "description": "Your EMI commitments are high. Consider prepaying high-interest debts.",
        })

    if m.monthly_surplus <= 0:
        items.append({
            "action": "Review and optimize monthly expenses",
            "priority": "high",
            "timeline": "0-1 month",
            "category": "expense",
            "description": "You are spending more than earning. Immediate expense optimization needed.",
        })

    if ef.months_of_coverage < 3:
        items.append({
            "action": f"Build emergency fund to {cfg.EMERGENCY_FUND_MONTHS} months expenses",
            "priority": "high",
            "timeline": "0-12 months",
            "category": "savings",
            "description": f"Current coverage: {ef.months_of_coverage:.1f} months. "
                           f"Target: {cfg.EMERGENCY_FUND_MONTHS} months.",
        })

    high_interest = [d for d in debts if d.priority == "high"]
    if high_interest:
        top = high_interest[0]
        items.append({
            "action": f"Prioritize {top.name} repayment",
            "priority": "high",
            "timeline": "0-6 months",
            "category": "debt",
            "description": f"Interest rate: {top.interest_rate:g}%. Consider increasing EMI or prepayment.",
        })

    if m.savings_rate < cfg.TARGET_SAVINGS_RATE and m.monthly_surplus > 0:
        items.append({
            "action": f"Increase savings rate to {cfg.TARGET_SAVINGS_RATE:.0f}%",
            "priority": "medium",
            "timeline": "0-3 months",
            "category": "savings",
            "description": f"Current savings rate: {m.savings_rate:.1f}%. "
                           f"Aim for at least {cfg.TARGET_SAVINGS_RATE:.0f}%.",
        })

    return items


# =============================================================================
# CASH FLOW
# =============================================================================

@dataclass
class CashFlowPlanResult:
    """Result of a cash-flow planning run."""
    profile: ClientFinancialProfile
    metrics: MonthlyMetrics
    debts: DebtSummary
    emergency_fund: EmergencyFundPlan
    health: HealthScore
    asset_allocation: AssetAllocation
    investment_plan: Dict[str, Any] = field(default_factory=dict)
    action_items: List[Dict[str, str]] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    age: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "complete",
            "warnings": [w.to_dict() for w in self.warnings],
            "riskProfile": self.profile.risk_tolerance,
            "age": self.age,
            "metrics": self.metrics.to_dict(),
            "debtManagement": self.debts.to_dict(),
            "emergencyFund": self.emergency_fund.to_dict(),
            "healthScore": self.health.to_dict(),
            "assetAllocation": self.asset_allocation.to_dict(),
            "investmentRecommendations": self.investment_plan,
            "actionItems": self.action_items,
            "targets": {
                "emiRatio": cfg.TARGET_EMI_RATIO,
                "savingsRate": cfg.TARGET_SAVINGS_RATE,
                "fixedExpenditureRatio": cfg.TARGET_FIXED_EXPENDITURE_RATIO,
            },
        }


class CashFlowPlanner:
    """
    Runs the cash-flow pipeline. Validation never stops the run; gaps are
    reported as warnings next to degenerate (zero) results.
    """

    def __init__(self, today: Optional[date] = None):
        self.today = today

    def run(self, payload: Any) -> CashFlowPlanResult:
        raw = _client_data(payload)
        warnings = validate_profile(raw)
        profile = normalize_profile(raw)

        metrics = compute_monthly_metrics(profile)
        age = calculate_age(profile.date_of_birth, self.today)
        allocation_age = age if age is not None else cfg.DEFAULT_CLIENT_AGE

        result = CashFlowPlanResult(
            profile=profile,
            metrics=metrics,
            debts=summarize_debts(profile.debts),
            emergency_fund=plan_emergency_contribution(profile, metrics),
            health=health_score_breakdown(profile),
            asset_allocation=recommend_allocation_by_age(allocation_age, profile.risk_tolerance),
            investment_plan=build_investment_plan(metrics.monthly_surplus, allocation_age, profile.risk_tolerance),
            action_items=generate_action_items(profile),
            warnings=warnings,
            age=age,
        )
        logger.info(
            f"Cash flow plan: surplus={metrics.monthly_surplus:.2f} "
            f"health={result.health.score} debts={result.debts.debt_count}"
        )
        return result


# =============================================================================
# GOALS
# =============================================================================

@dataclass
class GoalPlanResult:
    """Result of a goal planning run."""
    goals: List[Goal] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
    optimization: OptimizationResult = field(default_factory=OptimizationResult)
    monthly_surplus: float = 0.0
    risk_profile: str = "Moderate"
    milestones: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    warnings: List[ValidationIssue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "complete",
            "warnings": [w.to_dict() for w in self.warnings],
            "riskProfile": self.risk_profile,
            "monthlySurplus": self.monthly_surplus,
            "goals": [g.to_dict() for g in self.goals],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "optimization": self.optimization.to_dict(),
            "milestones": self.milestones,
        }


class GoalPlanner:
    """
    Builds goal records and stages them against the surplus. The surplus
    defaults to the client's computed monthly surplus; an explicit
    monthly_surplus overrides it.
    """

    def run(self, payload: Any, goals: Optional[List[Any]] = None, risk_profile: Any = None,
            monthly_surplus: Any = None, current_year: Optional[int] = None) -> GoalPlanResult:
        raw = _client_data(payload)
        profile = normalize_profile(raw)
        year0 = current_year or date.today().year
        risk = normalize_risk_profile(risk_profile, default=profile.risk_tolerance)
        raw_goals = goals if isinstance(goals, list) else []

        warnings = validate_profile(raw)
        for i, g in enumerate(raw_goals):
            for issue in validate_goal(g, year0):
                issue.field = f"goals[{i}].{issue.field}"
                warnings.append(issue)

        built = [build_goal(g, risk, year0, index=i) for i, g in enumerate(raw_goals)]
        if monthly_surplus is None:
            surplus = compute_monthly_metrics(profile).monthly_surplus
        else:
            surplus = safe_float(monthly_surplus)

        milestones = {
            g.goal_id: goal_milestones(
                g.target_amount, g.time_in_years, g.monthly_sip, g.expected_return, current_year=year0,
            )
            for g in built
        }

        result = GoalPlanResult(
            goals=built,
            conflicts=detect_timeline_conflicts(built, year0),
            optimization=optimize_multiple_goals(built, surplus),
            monthly_surplus=surplus,
            risk_profile=risk,
            milestones=milestones,
            warnings=warnings,
        )
        logger.info(
            f"Goal plan: {len(built)} goals, required={result.optimization.total_required:.2f} "
            f"surplus={surplus:.2f} conflicts={len(result.conflicts)}"
        )
        return result


# =============================================================================
# PUBLIC API
# =============================================================================

def run_cash_flow_plan(payload: Any) -> Dict[str, Any]:
    """Public function: cash-flow plan as a JSON-ready dict."""
    return CashFlowPlanner().run(payload).to_dict()


def run_goal_plan(payload: Any) -> Dict[str, Any]:
    """
    Public function: goal plan as a JSON-ready dict. Reads goals,
    riskProfile, monthlySurplus and currentYear from the payload.
    """
    data = payload if isinstance(payload, dict) else {}
    year = safe_float(data.get("currentYear"))
    return GoalPlanner().run(
        data,
        goals=data.get("goals"),
        risk_profile=data.get("riskProfile"),
        monthly_surplus=data.get("monthlySurplus"),
        current_year=int(year) if year > 0 else None,
    ).to_dict()
