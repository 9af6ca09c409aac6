"""
Goal Projection Engine

Required SIP, future values and timeline inversion for individual goals,
plus the goal record used by the optimizer.

All calculators follow the same failure policy: bad or missing numbers
give 0, never an exception, NaN or infinity.

Usage:
    from goals import required_monthly_sip, goal_timeline_from_sip

    sip = required_monthly_sip(1000000, 10, 12)      # ~4347
    years = goal_timeline_from_sip(1000000, sip, 12)  # ~10.0
"""

import math
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

import planning_config as cfg
from allocation import AssetAllocation, recommend_allocation_by_timeline
from normalizer import ValidationIssue, normalize_risk_profile, safe_float

logger = logging.getLogger(__name__)

GOAL_PRIORITIES = ("High", "Medium", "Low")
DEFAULT_GOAL_PRIORITY = "Medium"

MILESTONE_CHECKPOINTS = (0.25, 0.5, 0.75, 1.0)

# Tax-saving instruments -> (section, deduction limit)
SECTION_80C_LIMIT = 150000
SECTION_80CCD_LIMIT = 50000
TAX_SAVING_INSTRUMENTS = {
    "ELSS": ("80C", SECTION_80C_LIMIT),
    "PPF": ("80C", SECTION_80C_LIMIT),
    "EPF": ("80C", SECTION_80C_LIMIT),
    "NPS": ("80C + 80CCD", SECTION_80C_LIMIT + SECTION_80CCD_LIMIT),
}

RETIREMENT_COVERAGE_YEARS = 25
EDUCATION_INFLATION = 10.0
AUTO_INFLATION = 6.0
CAR_DOWN_PAYMENT_SHARE = 0.2

# Descriptive caller fields carried through to_dict(); everything else is dropped
GOAL_PASSTHROUGH_FIELDS = (
    "category",
    "notes",
    "type",
    "source",
    "status",
    "flexibility",
    "educationLevel",
    "downPaymentPercentage",
)


def _rate(value: Any) -> Optional[float]:
    """Annual rate %, or None when missing/unusable."""
    if value is None:
        return None
    r = safe_float(value, default=-1.0)
    return r if r >= 0 else None


def _finite(x: float) -> float:
    return x if math.isfinite(x) else 0.0


# =============================================================================
# CORE CALCULATORS
# =============================================================================

def required_monthly_sip(target_amount: Any, years: Any, expected_return_pct: Any) -> float:
    """
    SIP = target * r / ((1 + r)^n - 1), r = rate/1200, n = years*12.

    years == 0 means the money is needed now, so the whole target is due.
    """
    target = safe_float(target_amount)
    n_years = safe_float(years)
    rate = _rate(expected_return_pct)
    if target <= 0 or n_years < 0 or rate is None:
        return 0.0
    if n_years == 0:
        return target

    r = rate / 1200
    n = n_years * 12
    if r == 0:
        return target / n
    try:
        return _finite(target * r / ((1 + r) ** n - 1))
    except (OverflowError, ZeroDivisionError):
        return 0.0


def future_value_of_sip(monthly_sip: Any, years: Any, expected_return_pct: Any) -> float:
    """FV of an ordinary monthly annuity."""
    sip = safe_float(monthly_sip)
    n_years = safe_float(years)
    rate = _rate(expected_return_pct)
    if sip <= 0 or n_years <= 0 or rate is None:
        return 0.0

    r = rate / 1200
    n = n_years * 12
    if r == 0:
        return sip * n
    try:
        return _finite(sip * ((1 + r) ** n - 1) / r)
    except OverflowError:
        return 0.0


def future_value_lump_sum(present_value: Any, years: Any, expected_return_pct: Any) -> float:
    """Annual compounding; a 0% rate keeps the present value."""
    pv = safe_float(present_value)
    n_years = safe_float(years)
    rate = _rate(expected_return_pct)
    if pv <= 0 or n_years <= 0 or rate is None:
        return 0.0
    try:
        return _finite(pv * (1 + rate / 100) ** n_years)
    except OverflowError:
        return 0.0


def goal_timeline_from_sip(target_amount: Any, monthly_sip: Any, expected_return_pct: Any) -> float:
    """
    Years needed to reach target with a fixed SIP:
    n = ln(1 + target * r / sip) / ln(1 + r), in months.

    Returned unrounded so it inverts required_monthly_sip().
    """
    target = safe_float(target_amount)
    sip = safe_float(monthly_sip)
    rate = _rate(expected_return_pct)
    if target <= 0 or sip <= 0 or rate is None:
        return 0.0

    r = rate / 1200
    if r == 0:
        return target / (sip * 12)
    months = math.log(1 + target * r / sip) / math.log(1 + r)
    return _finite(months / 12)


# =============================================================================
# COST ESTIMATORS
# =============================================================================

def inflation_adjusted_amount(current_cost: Any, years: Any, inflation_pct: Any) -> float:
    cost = safe_float(current_cost)
    n_years = safe_float(years)
    inflation = safe_float(inflation_pct)
    if cost <= 0:
        return 0.0
    if n_years <= 0 or inflation <= 0:
        return cost
    try:
        return _finite(cost * (1 + inflation / 100) ** n_years)
    except OverflowError:
        return 0.0


def retirement_corpus(monthly_expenses: Any, lifestyle_pct: Any, years_to_retirement: Any,
                      years_in_retirement: Any, inflation_pct: Any = 6.0) -> Dict[str, float]:
    """Corpus sized at 25x annual need at retirement (the 4% withdrawal rule)."""
    expenses = safe_float(monthly_expenses)
    lifestyle = safe_float(lifestyle_pct)
    to_retire = safe_float(years_to_retirement)
    in_retirement = safe_float(years_in_retirement)
    if expenses <= 0 or lifestyle <= 0 or to_retire <= 0 or in_retirement <= 0:
        return {"monthlyNeedAtRetirement": 0.0, "totalCorpusRequired": 0.0}

    monthly_need = inflation_adjusted_amount(expenses * lifestyle / 100, to_retire, inflation_pct)
    return {
        "monthlyNeedAtRetirement": monthly_need,
        "totalCorpusRequired": monthly_need * 12 * RETIREMENT_COVERAGE_YEARS,
    }


def education_cost(current_cost: Any, years_to_education: Any,
                   education_inflation_pct: Any = EDUCATION_INFLATION) -> float:
    return inflation_adjusted_amount(current_cost, years_to_education, education_inflation_pct)


def car_purchase_cost(current_price: Any, years_to_purchase: Any,
                      auto_inflation_pct: Any = AUTO_INFLATION) -> Dict[str, float]:
    price = safe_float(current_price)
    years = safe_float(years_to_purchase)
    if price <= 0 or years <= 0:
        return {"futurePrice": 0.0, "downPayment": 0.0, "loanAmount": 0.0}
    future_price = inflation_adjusted_amount(price, years, auto_inflation_pct)
    down = future_price * CAR_DOWN_PAYMENT_SHARE
    return {"futurePrice": future_price, "downPayment": down, "loanAmount": future_price - down}


def calculate_tax_savings(investment_amount: Any, investment_type: str, tax_bracket_pct: Any = 30) -> Dict[str, Any]:
    amount = safe_float(investment_amount)
    bracket = safe_float(tax_bracket_pct)
    section, limit = TAX_SAVING_INSTRUMENTS.get((investment_type or "").upper(), ("", 0))
    eligible = max(0.0, min(amount, limit))
    tax_saved = eligible * bracket / 100
    return {
        "eligibleAmount": eligible,
        "taxSaved": tax_saved,
        "section": section,
        "effectiveReturn": (tax_saved / amount) * 100 if amount > 0 else 0.0,
    }


# =============================================================================
# PROJECTIONS
# =============================================================================

def project_goal(target_amount: Any, years: Any, monthly_sip: Any, expected_return_pct: Any,
                 current_savings: Any = 0) -> Dict[str, Any]:
    """Corpus from existing savings plus a SIP, compared with the target."""
    target = safe_float(target_amount)
    from_savings = future_value_lump_sum(current_savings, years, expected_return_pct)
    from_sip = future_value_of_sip(monthly_sip, years, expected_return_pct)
    projected = from_savings + from_sip
    shortfall = max(0.0, target - projected)

    remaining = max(0.0, target - from_savings)
    return {
        "targetAmount": target,
        "projectedValue": projected,
        "fromCurrentSavings": from_savings,
        "fromSIP": from_sip,
        "shortfall": shortfall,
        "onTrack": target > 0 and shortfall == 0,
        "requiredMonthlySIP": required_monthly_sip(remaining, years, expected_return_pct) if remaining > 0 else 0.0,
    }


def goal_milestones(target_amount: Any, years: Any, monthly_sip: Any, expected_return_pct: Any = 12,
                    current_year: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    When the SIP corpus crosses 25/50/75/100% of the target. Checkpoints not
    reached within the horizon are reported with on_track False.
    """
    target = safe_float(target_amount)
    n_years = safe_float(years)
    sip = safe_float(monthly_sip)
    if target <= 0 or n_years <= 0 or sip <= 0:
        return []

    year0 = current_year or date.today().year
    horizon_months = int(round(n_years * 12))
    milestones = []
    for checkpoint in MILESTONE_CHECKPOINTS:
        value = target * checkpoint
        months_needed = goal_timeline_from_sip(value, sip, expected_return_pct) * 12
        months = math.ceil(months_needed - 1e-9)
        on_track = months <= horizon_months
        milestones.append({
            "percentage": int(checkpoint * 100),
            "targetValue": value,
            "monthsRequired": months,
            "year": year0 + months // 12,
            "onTrack": on_track,
        })
    return milestones


# =============================================================================
# GOAL RECORDS
# =============================================================================

@dataclass
class Goal:
    goal_id: str
    title: str
    target_amount: float
    target_year: int
    priority: str = DEFAULT_GOAL_PRIORITY
    time_in_years: float = 0.0
    asset_allocation: Optional[AssetAllocation] = None
    monthly_sip: float = 0.0
    expected_return: float = cfg.DEFAULT_EXPECTED_RETURN
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        # derived fields are applied last so caller fields never override them
        d = dict(self.extra)
        d.update({
            "id": self.goal_id,
            "title": self.title,
            "targetAmount": self.target_amount,
            "targetYear": self.target_year,
            "priority": self.priority,
            "timeInYears": self.time_in_years,
            "monthlySIP": self.monthly_sip,
            "expectedReturn": self.expected_return,
            "assetAllocation": self.asset_allocation.to_dict() if self.asset_allocation else None,
        })
        return d


def normalize_priority(value: Any) -> str:
    if isinstance(value, str):
        for p in GOAL_PRIORITIES:
            if value.strip().lower() == p.lower():
                return p
    return DEFAULT_GOAL_PRIORITY


def build_goal(raw: Any, risk_profile: Any = None, current_year: Optional[int] = None,
               index: int = 0) -> Goal:
    """
    Goal record from a loose mapping. Accepts title/goalName/name,
    targetAmount/amount and targetYear; the SIP uses the timeline
    allocation's expected return unless expectedReturn is given.
    Only GOAL_PASSTHROUGH_FIELDS are kept from the remaining keys.
    """
    data = raw if isinstance(raw, dict) else {}
    year0 = current_year or date.today().year

    target_year_raw = safe_float(data.get("targetYear"))
    target_year = int(target_year_raw) if target_year_raw > 0 else year0 + cfg.DEFAULT_GOAL_HORIZON_YEARS
    time_in_years = max(0, target_year - year0)

    allocation = recommend_allocation_by_timeline(time_in_years, normalize_risk_profile(risk_profile))
    expected = data.get("expectedReturn")
    rate = safe_float(expected) if expected is not None else allocation.expected_return

    target = max(0.0, safe_float(data.get("targetAmount", data.get("amount"))))
    title = data.get("title") or data.get("goalName") or data.get("name") or f"Goal {index + 1}"
    logger.debug(f"Goal {title!r}: target={target} years={time_in_years} rate={rate}")
    return Goal(
        goal_id=str(data.get("id") or f"goal-{index + 1}"),
        title=str(title),
        target_amount=target,
        target_year=target_year,
        priority=normalize_priority(data.get("priority")),
        time_in_years=time_in_years,
        asset_allocation=allocation,
        monthly_sip=required_monthly_sip(target, time_in_years, rate),
        expected_return=rate,
        extra={k: data[k] for k in GOAL_PASSTHROUGH_FIELDS if k in data},
    )


def validate_goal(raw: Any, current_year: Optional[int] = None) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if not isinstance(raw, dict):
        return [ValidationIssue("goal", "Goal must be an object", "error")]

    year0 = current_year or date.today().year
    if safe_float(raw.get("targetAmount", raw.get("amount"))) <= 0:
        issues.append(ValidationIssue("targetAmount", "Target amount must be greater than 0", "error"))

    year = safe_float(raw.get("targetYear"))
    if raw.get("targetYear") is None:
        issues.append(ValidationIssue(
            "targetYear", f"No target year; assuming {cfg.DEFAULT_GOAL_HORIZON_YEARS} years", "info"))
    elif year < year0:
        issues.append(ValidationIssue("targetYear", "Target year is in the past", "warning"))

    if not (raw.get("title") or raw.get("goalName") or raw.get("name")):
        issues.append(ValidationIssue("title", "Goal has no name", "info"))
    return issues
