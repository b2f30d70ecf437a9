"""Configuration settings for the reconciliation core."""

import os

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# =============================================================================
# SOURCE COLLECTION
# =============================================================================

# Per-source fetch timeout in seconds
FETCH_TIMEOUT_SECONDS = float(os.environ.get("RECONCILE_FETCH_TIMEOUT", "15"))

# One worker per bureau
FETCH_MAX_WORKERS = 3

# =============================================================================
# DATA PATHS - Change these when switching to new payload files
# =============================================================================

# Directory of <bureau>.json payloads used by the demo entry point
PAYLOAD_DIR = os.environ.get(
    "RECONCILE_PAYLOAD_DIR", os.path.join(_PROJECT_ROOT, "data", "payloads")
)

# Deduction weights, readiness bands and tier thresholds
SCORING_POLICY_FILE = os.path.join(_PROJECT_ROOT, "config", "scoring_policy.yaml")

# =============================================================================
# SETTINGS
# =============================================================================

LOG_LEVEL = os.environ.get("RECONCILE_LOG_LEVEL", "INFO")
VERBOSE_MODE = True

# Valid range for bureau scores (VantageScore / FICO)
SCORE_MIN = 0
SCORE_MAX = 850

# Minimum characters left after normalizing an account number
ACCOUNT_ID_MIN_LENGTH = 4
