"""
Debt Prioritizer

Ranks outstanding debts by interest rate (avalanche order) and classifies
repayment urgency. Also estimates EMIs for loans recorded without one, using
a single table of fallback loan terms.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from normalizer import DebtRecord, active_debts, normalize_debts

# =============================================================================
# POLICY TABLES
# =============================================================================

HIGH_INTEREST_THRESHOLD = 15.0
MEDIUM_INTEREST_THRESHOLD = 10.0

PRIORITY_REASONS = {
    "high": "High interest rate - Priority repayment",
    "medium": "Moderate interest rate - Standard repayment",
    "low": "Low interest rate - Maintain minimum payment",
}

DEBT_DISPLAY_NAMES = {
    "homeLoan": "Home Loan",
    "personalLoan": "Personal Loan",
    "carLoan": "Car Loan",
    "educationLoan": "Education Loan",
    "creditCards": "Credit Card",
    "businessLoan": "Business Loan",
    "goldLoan": "Gold Loan",
    "otherLoans": "Other Loans",
}

# Fallback (annual rate %, tenure months) when a loan has no EMI on record
DEFAULT_LOAN_TERMS = {
    "homeLoan": (8.5, 240),
    "carLoan": (9.0, 60),
    "personalLoan": (12.0, 36),
    "educationLoan": (10.0, 120),
    "goldLoan": (11.0, 60),
    "businessLoan": (11.0, 60),
    "otherLoans": (11.0, 60),
}
CREDIT_CARD_MIN_PAYMENT_RATE = 0.03
CREDIT_CARD_DEFAULT_RATE = 18.0


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class PrioritizedDebt:
    debt_type: str
    name: str
    outstanding_amount: float
    current_emi: float
    interest_rate: float
    remaining_tenure_months: float
    priority_rank: int
    priority: str  # "high" | "medium" | "low"
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "debtType": self.name,
            "key": self.debt_type,
            "outstandingAmount": self.outstanding_amount,
            "currentEMI": self.current_emi,
            "interestRate": self.interest_rate,
            "remainingTenure": self.remaining_tenure_months,
            "priorityRank": self.priority_rank,
            "priority": self.priority,
            "reason": self.reason,
        }


@dataclass
class DebtSummary:
    prioritized_debts: List[PrioritizedDebt] = field(default_factory=list)
    total_debt: float = 0.0
    total_emi: float = 0.0
    estimated_total_emi: float = 0.0
    strategy: str = ""

    @property
    def debt_count(self) -> int:
        return len(self.prioritized_debts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prioritizedDebts": [d.to_dict() for d in self.prioritized_debts],
            "totalDebt": self.total_debt,
            "totalEMI": self.total_emi,
            "estimatedTotalEMI": self.estimated_total_emi,
            "strategy": self.strategy,
            "debtCount": self.debt_count,
        }


# =============================================================================
# PRIORITIZATION
# =============================================================================

def classify_interest_rate(rate: float) -> str:
    if rate >= HIGH_INTEREST_THRESHOLD:
        return "high"
    if rate >= MEDIUM_INTEREST_THRESHOLD:
        return "medium"
    return "low"


def prioritize_debts(debts: Any) -> List[PrioritizedDebt]:
    """
    Active debts with a balance, highest interest rate first.
    Equal rates keep their input order (sorted() is stable).
    """
    candidates = [(k, d) for k, d in active_debts(debts) if d.outstanding_amount > 0]
    ordered = sorted(candidates, key=lambda kv: -kv[1].interest_rate)

    result = []
    for rank, (debt_type, d) in enumerate(ordered, start=1):
        priority = classify_interest_rate(d.interest_rate)
        result.append(PrioritizedDebt(
            debt_type=debt_type,
            name=DEBT_DISPLAY_NAMES.get(debt_type, debt_type),
            outstanding_amount=d.outstanding_amount,
            current_emi=d.monthly_emi,
            interest_rate=d.interest_rate,
            remaining_tenure_months=d.remaining_tenure_months,
            priority_rank=rank,
            priority=priority,
            reason=PRIORITY_REASONS[priority],
        ))
    return result


# =============================================================================
# EMI ESTIMATION
# =============================================================================

def calculate_emi(principal: float, annual_rate_pct: float, months: float) -> float:
    """
    EMI = P * r * (1 + r)^n / [(1 + r)^n - 1], r = monthly rate.
    """
    if principal is None or principal <= 0 or months is None or months <= 0:
        return 0.0
    r = (annual_rate_pct or 0.0) / (12 * 100)
    if r <= 0:
        return principal / months
    growth = (1 + r) ** months
    return principal * r * growth / (growth - 1)


def estimate_emi(debt_type: str, debt: DebtRecord) -> float:
    """Recorded EMI if present; otherwise an estimate from the loan's terms."""
    if debt.monthly_emi > 0:
        return debt.monthly_emi
    if debt.outstanding_amount <= 0:
        return 0.0
    if debt_type == "creditCards":
        return debt.outstanding_amount * CREDIT_CARD_MIN_PAYMENT_RATE

    default_rate, default_months = DEFAULT_LOAN_TERMS.get(debt_type, DEFAULT_LOAN_TERMS["otherLoans"])
    rate = debt.interest_rate if debt.interest_rate > 0 else default_rate
    months = debt.remaining_tenure_months if debt.remaining_tenure_months > 0 else default_months
    return calculate_emi(debt.outstanding_amount, rate, months)


def _debt_strategy(prioritized: List[PrioritizedDebt]) -> str:
    if not prioritized:
        return "No active debts found. Excellent financial position!"
    high = [d.name for d in prioritized if d.priority == "high"]
    if high:
        return (
            f"Focus on clearing high-priority debts first: {', '.join(high)}. "
            "Consider using the avalanche method (highest interest rate first) for faster debt clearance."
        )
    return "Maintain regular EMI payments. Consider prepayments when possible to reduce interest burden."


def summarize_debts(debts: Any) -> DebtSummary:
    records = normalize_debts(debts)
    prioritized = prioritize_debts(records)

    total_debt = 0.0
    total_emi = 0.0
    estimated = 0.0
    for debt_type, d in active_debts(records):
        total_debt += d.outstanding_amount
        total_emi += d.monthly_emi
        estimated += estimate_emi(debt_type, d)

    return DebtSummary(
        prioritized_debts=prioritized,
        total_debt=total_debt,
        total_emi=total_emi,
        estimated_total_emi=round(estimated, 2),
        strategy=_debt_strategy(prioritized),
    )


def compare_payoff_orders(debts: Any) -> Dict[str, Any]:
    """Avalanche (rate desc) vs snowball (balance asc) orderings."""
    rows: List[Dict[str, Any]] = []
    for debt_type, d in active_debts(debts):
        if d.outstanding_amount <= 0:
            continue
        rate = d.interest_rate
        if rate <= 0:
            rate = CREDIT_CARD_DEFAULT_RATE if debt_type == "creditCards" else \
                DEFAULT_LOAN_TERMS.get(debt_type, DEFAULT_LOAN_TERMS["otherLoans"])[0]
        rows.append({
            "key": debt_type,
            "type": DEBT_DISPLAY_NAMES.get(debt_type, debt_type),
            "amount": d.outstanding_amount,
            "interestRate": rate,
            "minPayment": round(estimate_emi(debt_type, d)),
        })

    return {
        "avalanche": sorted(rows, key=lambda r: -r["interestRate"]),
        "snowball": sorted(rows, key=lambda r: r["amount"]),
        "totalMinPayments": sum(r["minPayment"] for r in rows),
    }
