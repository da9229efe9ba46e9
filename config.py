import os
import sys

from dotenv import load_dotenv

from enums.allocation_order import AllocationOrder
from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows tests to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)


def _exit_with_config_error(name: str, reason, expected: str):
    print(f"\n ERROR: Invalid {name} configuration\n", file=sys.stderr)
    print(f"Reason: {reason}", file=sys.stderr)
    print(f"Expected: {expected}", file=sys.stderr)
    print(f"Current value: {os.environ.get(name, '(not set)')}\n", file=sys.stderr)
    sys.exit(1)


try:
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(os.environ.get("RUNTIME_ENVIRONMENT", "DEV"))
except ValueError as e:
    _exit_with_config_error(
        "RUNTIME_ENVIRONMENT", e, ", ".join(env.value for env in RuntimeEnvironment)
    )

DB_NAME = os.environ.get("DB_NAME", "minipreorder.db")

WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
try:
    WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT", "5000"))
except ValueError as e:
    _exit_with_config_error("WEBAPP_PORT", e, "Port number (e.g., 5000)")

# Default language for API messages (vi/en), see l10n/
LANGUAGE = os.environ.get("LANGUAGE", "vi")

# Comma-separated origins of the storefront SPA
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",")
    if origin.strip()
]

# Combo pricing
# Upper bound on application-count tuples evaluated by the exhaustive search.
# Above it the engine falls back to the greedy pass and tags the result as approximate.
try:
    COMBO_SEARCH_MAX_TUPLES = int(os.environ.get("COMBO_SEARCH_MAX_TUPLES", "20000"))
    if COMBO_SEARCH_MAX_TUPLES <= 0:
        raise ValueError(f"COMBO_SEARCH_MAX_TUPLES must be positive (got: {COMBO_SEARCH_MAX_TUPLES})")
except ValueError as e:
    _exit_with_config_error("COMBO_SEARCH_MAX_TUPLES", e, "Positive integer (e.g., 20000)")

try:
    COMBO_ALLOCATION_ORDER = AllocationOrder(os.environ.get("COMBO_ALLOCATION_ORDER", "INPUT").upper())
except ValueError as e:
    _exit_with_config_error(
        "COMBO_ALLOCATION_ORDER", e, ", ".join(order.value for order in AllocationOrder)
    )

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true").lower() == "true"

# Log retention: longer in production for incident analysis
_default_retention = "30" if RUNTIME_ENVIRONMENT == RuntimeEnvironment.PROD else "7"
try:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", _default_retention))
except ValueError as e:
    _exit_with_config_error("LOG_RETENTION_DAYS", e, "Number of days (e.g., 7)")
