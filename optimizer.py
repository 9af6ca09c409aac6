"""
Multi-Goal Optimizer

Detects target-year clashes between goals and stages a goal set against the
monthly surplus: total SIP required, deficit, priority order, 3-year phases
and greedy per-goal funding.

Goals may be Goal records (goals.build_goal) or plain dicts carrying
targetYear, targetAmount, monthlySIP, timeInYears and priority.
"""

import math
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

import planning_config as cfg
from goals import Goal
from normalizer import safe_float

logger = logging.getLogger(__name__)

PRIORITY_WEIGHTS = {"High": 3, "Medium": 2, "Low": 1}
URGENT_GOAL_YEARS = 5
URGENT_TIMELINE_WEIGHT = 2


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class Conflict:
    year: int
    goals: List[str]
    total_amount: float
    severity: str  # "High" | "Medium"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "goals": list(self.goals),
            "totalAmount": self.total_amount,
            "severity": self.severity,
        }


@dataclass
class Phase:
    name: str
    start_year: int
    end_year: int
    goals: List[Any] = field(default_factory=list)

    @property
    def timeframe(self) -> str:
        return f"Years {self.start_year}-{self.end_year}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "timeframe": self.timeframe,
            "goals": [_goal_title(g) for g in self.goals],
        }


@dataclass
class GoalAllocation:
    title: str
    required_sip: float
    allocated_sip: float

    @property
    def funded_percentage(self) -> float:
        if self.required_sip <= 0:
            return 100.0
        return (self.allocated_sip / self.required_sip) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "requiredSIP": self.required_sip,
            "allocatedSIP": self.allocated_sip,
            "fundedPercentage": self.funded_percentage,
        }


@dataclass
class OptimizationResult:
    optimized_goals: List[Any] = field(default_factory=list)
    phases: List[Phase] = field(default_factory=list)
    allocations: List[GoalAllocation] = field(default_factory=list)
    total_required: float = 0.0
    monthly_surplus: float = 0.0
    deficit: float = 0.0

    @property
    def can_afford_all(self) -> bool:
        return self.deficit == 0

    @property
    def funded_percentage(self) -> float:
        if self.total_required <= 0:
            return 100.0
        return min(100.0, (self.monthly_surplus / self.total_required) * 100)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "optimizedGoals": [_goal_dict(g) for g in self.optimized_goals],
            "phases": [p.to_dict() for p in self.phases],
            "allocations": [a.to_dict() for a in self.allocations],
            "totalRequired": self.total_required,
            "monthlySurplus": self.monthly_surplus,
            "deficit": self.deficit,
            "canAffordAll": self.can_afford_all,
            "fundedPercentage": self.funded_percentage,
        }


# =============================================================================
# GOAL FIELD ACCESS
# =============================================================================

def _field(goal: Any, attr: str, key: str, default: Any = None) -> Any:
    if isinstance(goal, Goal):
        return getattr(goal, attr)
    if isinstance(goal, dict):
        return goal.get(key, default)
    return default


def _goal_title(goal: Any) -> str:
    if isinstance(goal, Goal):
        return goal.title
    if isinstance(goal, dict):
        return str(goal.get("title") or goal.get("goalName") or goal.get("name") or "")
    return ""


def _goal_dict(goal: Any) -> Dict[str, Any]:
    return goal.to_dict() if isinstance(goal, Goal) else dict(goal) if isinstance(goal, dict) else {}


def _goal_sip(goal: Any) -> float:
    return max(0.0, safe_float(_field(goal, "monthly_sip", "monthlySIP")))


def _goal_years(goal: Any) -> float:
    return max(0.0, safe_float(_field(goal, "time_in_years", "timeInYears")))


# =============================================================================
# CONFLICTS
# =============================================================================

def detect_timeline_conflicts(goals: Any, current_year: Optional[int] = None) -> List[Conflict]:
    """
    Years holding more than one goal whose combined target exceeds
    GOAL_CONFLICT_THRESHOLD. Goals without a year fall in current_year + 5.
    """
    if not isinstance(goals, (list, tuple)):
        return []
    year0 = current_year or date.today().year

    by_year: "OrderedDict[int, List[Any]]" = OrderedDict()
    for g in goals:
        year = int(safe_float(_field(g, "target_year", "targetYear")))
        if year <= 0:
            year = year0 + cfg.DEFAULT_GOAL_HORIZON_YEARS
        by_year.setdefault(year, []).append(g)

    conflicts = []
    for year, in_year in by_year.items():
        if len(in_year) < 2:
            continue
        total = sum(max(0.0, safe_float(_field(g, "target_amount", "targetAmount"))) for g in in_year)
        if total <= cfg.GOAL_CONFLICT_THRESHOLD:
            continue
        severity = "High" if total > cfg.GOAL_CONFLICT_HIGH_THRESHOLD else "Medium"
        conflicts.append(Conflict(year, [_goal_title(g) for g in in_year], total, severity))
        logger.debug(f"Goal conflict in {year}: {len(in_year)} goals, total={total}, {severity}")
    return conflicts


# =============================================================================
# OPTIMIZATION
# =============================================================================

def goal_priority_score(goal: Any) -> int:
    priority = _field(goal, "priority", "priority")
    weight = PRIORITY_WEIGHTS.get(priority, 1) if isinstance(priority, str) else 1
    timeline_weight = URGENT_TIMELINE_WEIGHT if _goal_years(goal) < URGENT_GOAL_YEARS else 1
    return weight * timeline_weight


def _phase_end(years: float) -> int:
    span = cfg.GOAL_PHASE_YEARS
    return max(span, int(math.ceil(years / span)) * span)


def build_phases(ordered_goals: List[Any]) -> List[Phase]:
    """
    Group goals into 3-year windows by due date. Goals keep priority order
    within a window; windows are listed earliest first.
    """
    by_end: Dict[int, Phase] = {}
    for g in ordered_goals:
        end = _phase_end(_goal_years(g))
        phase = by_end.get(end)
        if phase is None:
            phase = by_end[end] = Phase(
                name="",
                start_year=end - cfg.GOAL_PHASE_YEARS + 1,
                end_year=end,
            )
        phase.goals.append(g)

    phases = [by_end[end] for end in sorted(by_end)]
    for i, phase in enumerate(phases):
        phase.name = f"Phase {i + 1}"
    return phases


def optimize_multiple_goals(goals: Any, monthly_surplus: Any) -> OptimizationResult:
    if not isinstance(goals, (list, tuple)) or not goals:
        return OptimizationResult(monthly_surplus=max(0.0, safe_float(monthly_surplus)))

    surplus = max(0.0, safe_float(monthly_surplus))
    total_required = sum(_goal_sip(g) for g in goals)
    deficit = max(0.0, total_required - surplus)

    # sorted() is stable: equal scores keep input order
    ordered = sorted(goals, key=lambda g: -goal_priority_score(g))

    remaining = surplus
    allocations = []
    for g in ordered:
        needed = _goal_sip(g)
        given = min(needed, remaining)
        remaining -= given
        allocations.append(GoalAllocation(_goal_title(g), needed, given))

    logger.debug(f"Optimized {len(goals)} goals: required={total_required:.2f} surplus={surplus:.2f}")
    return OptimizationResult(
        optimized_goals=ordered,
        phases=build_phases(ordered),
        allocations=allocations,
        total_required=total_required,
        monthly_surplus=surplus,
        deficit=deficit,
    )
