"""
Normalization Layer

Turns loosely-typed client records (form payloads, backend documents, legacy
field names) into a ClientFinancialProfile with clean numeric fields.

Rules:
1. Every monetary field is parsed; absent or unparseable values become 0.
2. NaN / infinity never leave this module.
3. Inputs are non-negative; only derived figures (e.g. surplus) may go negative.
4. Nothing here raises for malformed input.

Usage:
    from normalizer import normalize_profile

    profile = normalize_profile(request_json)
    profile.monthly_income  # float, >= 0
"""

import math
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

# =============================================================================
# CANONICAL VOCABULARY
# =============================================================================

DEBT_TYPES = [
    "homeLoan",
    "personalLoan",
    "carLoan",
    "educationLoan",
    "creditCards",
    "businessLoan",
    "goldLoan",
    "otherLoans",
]

RISK_PROFILES = ("Conservative", "Moderate", "Aggressive")
DEFAULT_RISK_PROFILE = "Moderate"

# Canonical field -> accepted spellings, in lookup order
FIELD_ALIASES = {
    "monthlyIncome": ("monthlyIncome", "totalMonthlyIncome"),
    "monthlyExpenses": ("monthlyExpenses", "totalMonthlyExpenses"),
    "debts": ("debts", "debtsAndLiabilities"),
    "hasLoan": ("hasLoan", "hasDebt"),
    "monthlyEMI": ("monthlyEMI", "monthlyPayment", "emi"),
    "outstandingAmount": ("outstandingAmount", "totalOutstanding"),
    "interestRate": ("interestRate", "averageInterestRate", "rate"),
    "remainingTenureMonths": ("remainingTenureMonths", "remainingTenure", "tenure"),
    "riskTolerance": ("riskTolerance", "riskProfile"),
    "cashBankSavings": ("cashBankSavings", "savingsAccountBalance"),
}

DEBT_TYPE_ALIASES = {
    "creditCard": "creditCards",
    "otherLoan": "otherLoans",
}

_RISK_ALIASES = {
    "conservative": "Conservative",
    "low": "Conservative",
    "moderate": "Moderate",
    "medium": "Moderate",
    "med": "Moderate",
    "balanced": "Moderate",
    "aggressive": "Aggressive",
    "high": "Aggressive",
}

_TRUE_STRINGS = {"true", "yes", "y", "1"}


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class DebtRecord:
    """One liability as supplied by the caller. Never mutated by the engine."""
    has_loan: bool = False
    outstanding_amount: float = 0.0
    monthly_emi: float = 0.0
    interest_rate: float = 0.0
    remaining_tenure_months: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.has_loan

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasLoan": self.has_loan,
            "outstandingAmount": self.outstanding_amount,
            "monthlyEMI": self.monthly_emi,
            "interestRate": self.interest_rate,
            "remainingTenureMonths": self.remaining_tenure_months,
        }


@dataclass(frozen=True)
class AssetHoldings:
    cash_bank_savings: float = 0.0
    investments: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cashBankSavings": self.cash_bank_savings,
            "investments": {k: dict(v) for k, v in self.investments.items()},
        }


@dataclass(frozen=True)
class ClientFinancialProfile:
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    date_of_birth: Optional[date] = None
    risk_tolerance: str = DEFAULT_RISK_PROFILE
    debts: Dict[str, DebtRecord] = field(default_factory=dict)
    assets: AssetHoldings = field(default_factory=AssetHoldings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthlyIncome": self.monthly_income,
            "monthlyExpenses": self.monthly_expenses,
            "dateOfBirth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "riskTolerance": self.risk_tolerance,
            "debts": {k: v.to_dict() for k, v in self.debts.items()},
            "assets": self.assets.to_dict(),
        }


@dataclass
class ValidationIssue:
    """Represents a data-completeness issue (never raised, only reported)."""
    field: str
    message: str
    severity: str  # "error", "warning" or "info"

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "severity": self.severity}


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def safe_float(value: Any, default: float = 0.0) -> float:
    """Safely convert value to a finite float."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        v = float(value)
        return v if math.isfinite(v) else default
    try:
        # Handle strings with commas or currency symbols
        s = str(value).strip().replace(",", "")
        for sym in ["₹", "Rs.", "Rs", "$"]:
            s = s.replace(sym, "")
        s = s.strip()
        if s == "" or s.upper() == "N/A":
            return default
        v = float(s)
        return v if math.isfinite(v) else default
    except (ValueError, TypeError):
        return default


def _money(value: Any) -> float:
    return max(0.0, safe_float(value))


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _first_amount(data: Mapping[str, Any], canonical: str) -> float:
    """First alias of `canonical` holding a non-zero amount, else 0."""
    for key in FIELD_ALIASES[canonical]:
        v = _money(data.get(key))
        if v > 0:
            return v
    return 0.0


def _first_present(data: Mapping[str, Any], canonical: str) -> Any:
    for key in FIELD_ALIASES[canonical]:
        v = data.get(key)
        if v not in (None, ""):
            return v
    return None


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def parse_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if len(s) < 10:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def calculate_age(date_of_birth: Any, today: Optional[date] = None) -> Optional[int]:
    """Completed years since date_of_birth, or None when unknown."""
    dob = parse_date(date_of_birth)
    if dob is None:
        return None
    today = today or date.today()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return max(0, age)


def normalize_risk_profile(value: Any, default: str = DEFAULT_RISK_PROFILE) -> str:
    if value is None:
        return default
    return _RISK_ALIASES.get(str(value).strip().lower(), default)


# =============================================================================
# NORMALIZERS
# =============================================================================

def normalize_debt_record(raw: Any) -> DebtRecord:
    if isinstance(raw, DebtRecord):
        return raw
    data = _as_mapping(raw)
    return DebtRecord(
        has_loan=any(_truthy(data.get(k)) for k in FIELD_ALIASES["hasLoan"]),
        outstanding_amount=_first_amount(data, "outstandingAmount"),
        monthly_emi=_first_amount(data, "monthlyEMI"),
        interest_rate=_first_amount(data, "interestRate"),
        remaining_tenure_months=_first_amount(data, "remainingTenureMonths"),
    )


def normalize_debts(raw: Any) -> Dict[str, DebtRecord]:
    """
    Map debt records onto the canonical debt types, preserving input order.
    Unknown debt keys are dropped.
    """
    debts: Dict[str, DebtRecord] = {}
    for key, value in _as_mapping(raw).items():
        debt_type = DEBT_TYPE_ALIASES.get(key, key)
        if debt_type not in DEBT_TYPES:
            logger.debug(f"Dropping unknown debt type {key!r}")
            continue
        if debt_type in debts:
            continue
        debts[debt_type] = normalize_debt_record(value)
    return debts


def _normalize_investments(raw: Any) -> Dict[str, Dict[str, float]]:
    investments: Dict[str, Dict[str, float]] = {}
    for category, instruments in _as_mapping(raw).items():
        if isinstance(instruments, Mapping):
            investments[str(category)] = {str(k): _money(v) for k, v in instruments.items()}
        else:
            # flat value, e.g. {"mutualFunds": 250000}
            investments[str(category)] = {str(category): _money(instruments)}
    return investments


def normalize_assets(raw: Any) -> AssetHoldings:
    if isinstance(raw, AssetHoldings):
        return raw
    data = _as_mapping(raw)
    return AssetHoldings(
        cash_bank_savings=_first_amount(data, "cashBankSavings"),
        investments=_normalize_investments(data.get("investments")),
    )


def _expense_breakdown_total(raw: Any) -> float:
    breakdown = _as_mapping(raw)
    if isinstance(breakdown.get("details"), Mapping):
        breakdown = breakdown["details"]
    return sum(_money(v) for v in breakdown.values())


def normalize_profile(raw: Any) -> ClientFinancialProfile:
    """Build a ClientFinancialProfile from any caller payload."""
    if isinstance(raw, ClientFinancialProfile):
        return raw
    data = _as_mapping(raw)

    monthly_income = _first_amount(data, "monthlyIncome")
    if monthly_income == 0:
        monthly_income = _money(data.get("annualIncome")) / 12

    monthly_expenses = _first_amount(data, "monthlyExpenses")
    if monthly_expenses == 0:
        monthly_expenses = _expense_breakdown_total(data.get("expenseBreakdown"))

    return ClientFinancialProfile(
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        date_of_birth=parse_date(data.get("dateOfBirth")),
        risk_tolerance=normalize_risk_profile(_first_present(data, "riskTolerance")),
        debts=normalize_debts(_first_present(data, "debts")),
        assets=normalize_assets(data.get("assets")),
    )


def ensure_profile(value: Any) -> ClientFinancialProfile:
    return value if isinstance(value, ClientFinancialProfile) else normalize_profile(value)


def active_debts(debts: Any) -> Iterable[tuple]:
    """(debt_type, DebtRecord) pairs for loans flagged as active, in input order."""
    records = debts if _is_normalized(debts) else normalize_debts(debts)
    return [(k, d) for k, d in records.items() if d.has_loan]


def _is_normalized(debts: Any) -> bool:
    return isinstance(debts, Mapping) and all(isinstance(v, DebtRecord) for v in debts.values())


def validate_profile(raw: Any) -> List[ValidationIssue]:
    """
    Report gaps that make results degenerate. Calculations still run;
    the caller decides whether to surface "data incomplete".
    """
    if not isinstance(raw, (Mapping, ClientFinancialProfile)):
        return [ValidationIssue("clientData", "Client data is missing", "warning")]

    issues: List[ValidationIssue] = []
    profile = ensure_profile(raw)
    if profile.monthly_income <= 0:
        issues.append(ValidationIssue(
            "monthlyIncome",
            "Monthly income is missing or zero; ratios and scores default to 0",
            "warning",
        ))
    if profile.monthly_expenses <= 0:
        issues.append(ValidationIssue(
            "monthlyExpenses",
            "Monthly expenses are missing or zero",
            "warning",
        ))
    if profile.date_of_birth is None:
        issues.append(ValidationIssue(
            "dateOfBirth",
            "Date of birth not provided - age-based calculations may be inaccurate",
            "info",
        ))
    return issues
