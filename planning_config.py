"""
Planning policy configuration.

Business-policy constants used by the calculation modules. Each one can be
overridden from the environment (or a .env file) so advisors can recalibrate
without a code change:

    EMERGENCY_FUND_FLOOR=75000
    GOAL_CONFLICT_THRESHOLD=2500000
"""

import os
import logging

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw.replace(",", "").replace("_", ""))
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}; using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, float(default)))


# =============================================================================
# EMERGENCY FUND
# =============================================================================

# Minimum viable reserve regardless of expense level (₹)
EMERGENCY_FUND_FLOOR = _env_float("EMERGENCY_FUND_FLOOR", 50000.0)
EMERGENCY_FUND_MONTHS = 6
# Smallest monthly top-up we suggest while a reserve gap exists (₹)
MIN_EMERGENCY_CONTRIBUTION = _env_float("MIN_EMERGENCY_CONTRIBUTION", 5000.0)
EMERGENCY_SURPLUS_SHARE = 0.3

# =============================================================================
# GOALS
# =============================================================================

GOAL_CONFLICT_THRESHOLD = _env_float("GOAL_CONFLICT_THRESHOLD", 2000000.0)
GOAL_CONFLICT_HIGH_THRESHOLD = _env_float("GOAL_CONFLICT_HIGH_THRESHOLD", 5000000.0)
GOAL_PHASE_YEARS = 3
DEFAULT_GOAL_HORIZON_YEARS = 5
DEFAULT_EXPECTED_RETURN = 12.0

# =============================================================================
# CASH FLOW
# =============================================================================

# Share of a positive surplus that goes into monthly investments; the rest is buffer
INVESTABLE_SURPLUS_SHARE = 0.7
TARGET_EMI_RATIO = 40.0
TARGET_SAVINGS_RATE = 20.0
TARGET_FIXED_EXPENDITURE_RATIO = 50.0
DEFAULT_CLIENT_AGE = 30

# =============================================================================
# RECOMMENDATION CACHE
# =============================================================================

RECOMMENDATION_CACHE_TTL_SECONDS = _env_int("RECOMMENDATION_CACHE_TTL_SECONDS", 24 * 60 * 60)
