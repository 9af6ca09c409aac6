"""
Allocation Planner

Two allocation models coexist and are kept separate on purpose:

- recommend_allocation_by_age(): cash-flow planning, "100 - age" equity rule
  adjusted for risk tolerance.
- recommend_allocation_by_timeline(): goal planning, lookup by risk profile
  and goal horizon with an expected return per horizon.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import planning_config as cfg
from normalizer import normalize_risk_profile, safe_float

# =============================================================================
# TIMELINE MODEL TABLE
# =============================================================================

TIMELINE_ALLOCATIONS = {
    "Conservative": {
        "short": {"equity": 20, "debt": 80},
        "medium": {"equity": 40, "debt": 60},
        "long": {"equity": 60, "debt": 40},
    },
    "Moderate": {
        "short": {"equity": 30, "debt": 70},
        "medium": {"equity": 60, "debt": 40},
        "long": {"equity": 70, "debt": 30},
    },
    "Aggressive": {
        "short": {"equity": 40, "debt": 60},
        "medium": {"equity": 70, "debt": 30},
        "long": {"equity": 80, "debt": 20},
    },
}

HORIZON_EXPECTED_RETURNS = {"short": 8.0, "medium": 10.0, "long": 12.0}

SHORT_HORIZON_YEARS = 3
MEDIUM_HORIZON_YEARS = 7

# Age-based model bounds
MIN_EQUITY_BY_AGE = 30
CONSERVATIVE_EQUITY_FLOOR = 20
AGGRESSIVE_EQUITY_CAP = 90
RISK_ADJUSTMENT = 20


@dataclass
class AssetAllocation:
    equity: float
    debt: float
    gold: float = 0.0
    expected_return: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {"equity": self.equity, "debt": self.debt, "gold": self.gold}
        if self.expected_return is not None:
            d["expectedReturn"] = self.expected_return
        return d


@dataclass
class RiskProfileRecommendation:
    profile: str
    equity_allocation: int
    debt_allocation: int
    expected_return: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile,
            "equityAllocation": self.equity_allocation,
            "debtAllocation": self.debt_allocation,
            "expectedReturn": self.expected_return,
        }


def recommend_allocation_by_age(age: Any, risk_profile: Any = "Moderate") -> AssetAllocation:
    a = safe_float(age, float(cfg.DEFAULT_CLIENT_AGE)) if age is not None else float(cfg.DEFAULT_CLIENT_AGE)
    equity = max(100 - a, MIN_EQUITY_BY_AGE)

    profile = normalize_risk_profile(risk_profile)
    if profile == "Conservative":
        equity = max(equity - RISK_ADJUSTMENT, CONSERVATIVE_EQUITY_FLOOR)
    elif profile == "Aggressive":
        equity = min(equity + RISK_ADJUSTMENT, AGGRESSIVE_EQUITY_CAP)
    equity = min(equity, 100)

    return AssetAllocation(equity=equity, debt=100 - equity)


def horizon_bucket(timeline_years: Any) -> str:
    years = safe_float(timeline_years)
    if years <= SHORT_HORIZON_YEARS:
        return "short"
    if years <= MEDIUM_HORIZON_YEARS:
        return "medium"
    return "long"


def recommend_allocation_by_timeline(timeline_years: Any, risk_profile: Any = "Moderate") -> AssetAllocation:
    profile = TIMELINE_ALLOCATIONS[normalize_risk_profile(risk_profile)]
    bucket = horizon_bucket(timeline_years)
    split = profile[bucket]
    return AssetAllocation(
        equity=split["equity"],
        debt=split["debt"],
        expected_return=HORIZON_EXPECTED_RETURNS[bucket],
    )


def recommend_risk_profile(age: Any, horizon_years: Any) -> RiskProfileRecommendation:
    """Suggested profile for a goal from the client's age and the goal horizon."""
    horizon = safe_float(horizon_years)
    a = safe_float(age, float(cfg.DEFAULT_CLIENT_AGE)) if age is not None else float(cfg.DEFAULT_CLIENT_AGE)
    if horizon < 3:
        return RiskProfileRecommendation("Conservative", 20, 80, 8.0)
    if horizon < 7:
        return RiskProfileRecommendation("Moderate", 60, 40, 10.0)
    if a < 35:
        return RiskProfileRecommendation("Aggressive", 80, 20, 12.0)
    if a < 45:
        return RiskProfileRecommendation("Moderate-Aggressive", 70, 30, 11.0)
    return RiskProfileRecommendation("Moderate", 60, 40, 10.0)


_INSTRUMENTS = [
    ("equity", "Equity Mutual Funds", "Equity", "Long-term Wealth Creation"),
    ("debt", "Debt Mutual Funds / PPF", "Debt", "Stability & Regular Income"),
    ("gold", "Gold ETF / SGBs", "Gold", "Portfolio Diversification"),
]


def build_investment_plan(monthly_surplus: Any, age: Any, risk_profile: Any = "Moderate") -> Dict[str, Any]:
    """
    Split the investable part of a positive surplus across asset classes
    using the age-based model.
    """
    surplus = safe_float(monthly_surplus)
    profile = normalize_risk_profile(risk_profile)
    allocation = recommend_allocation_by_age(age, profile)

    lines: List[Dict[str, Any]] = []
    total = 0.0
    if surplus > 0:
        investable = surplus * cfg.INVESTABLE_SURPLUS_SHARE
        for attr, fund_name, category, purpose in _INSTRUMENTS:
            pct = getattr(allocation, attr)
            if pct <= 0:
                continue
            amount = investable * pct / 100
            lines.append({
                "fundName": fund_name,
                "category": category,
                "amount": round(amount),
                "purpose": purpose,
                "allocation": pct,
            })
            total += amount
        strategy = (
            f"Based on your {profile.lower()} risk profile, we recommend a diversified "
            "portfolio with systematic monthly investments."
        )
    else:
        strategy = "Focus on improving cash flow before starting investments. Clear high-interest debts first."

    return {
        "monthlyInvestments": lines,
        "totalInvestmentAmount": round(total),
        "riskProfile": profile,
        "assetAllocation": allocation.to_dict(),
        "strategy": strategy,
    }
