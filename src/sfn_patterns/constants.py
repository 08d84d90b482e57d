"""Constant values shared by the Step Functions constructs."""

import os
from pathlib import Path

# Step Functions rejects state names above this length at deploy time
MAX_STATE_NAME_LENGTH = 80
STATE_NAME_LENGTH_ERROR = (
    "Error: Stepfunction State Names must be less than 80 Characters long, "
    "please re-specify the name prefix to try and stay within these service limits"
)

STATE_NAME_MODE_ENV = "SFN_PATTERNS_STATE_NAMES"
STATE_NAME_MODES = ("strict", "legacy")

# Exponent base handed to the jitter calculator
JITTER_BACKOFF = 2
JITTER_ASSET = Path(__file__).resolve().parent / "assets" / "jitter"
JITTER_HANDLER = "main.lambda_handler"

DEFAULT_WAIT_SECONDS = 10
DEFAULT_VERIFY_PATH = "$.VerifyResult"
DEFAULT_VERIFY_STATUS_FIELD = "Status"

DEFAULT_FUNCTION_TIMEOUT_MINUTES = 15
DEFAULT_FUNCTION_MEMORY_MB = 512
DEFAULT_FUNCTION_HANDLER = "index.handler"
LIVE_ALIAS = "live"

DEFAULT_TRY_ERROR_PATH = "$.TryError"


def load_state_name_mode() -> str:
    """Return the state name validation mode from ``SFN_PATTERNS_STATE_NAMES``.

    Raises:
        RuntimeError: When the variable holds an unknown mode.

    Returns:
        str: ``"strict"`` (the default) or ``"legacy"``.
    """

    mode = os.getenv(STATE_NAME_MODE_ENV, "strict").strip().lower()
    if mode not in STATE_NAME_MODES:
        raise RuntimeError(
            f"{STATE_NAME_MODE_ENV} must be one of: " + ", ".join(STATE_NAME_MODES)
        )
    return mode
