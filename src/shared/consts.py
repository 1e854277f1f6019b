from enum import Enum


class EnumEnvironment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class EnumLogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# Planning fallbacks used when the budget/capacity history is empty
DEFAULT_BUDGET = 10000.0
DEFAULT_WAREHOUSE_CAPACITY = 1000

# Warehouse whose capacity bounds every plan in a run
DEFAULT_WAREHOUSE_ID = 11

# Markup over the shortage cost that models the baseline acquisition cost
PURCHASE_PRICE_MARKUP = 10.0

# Two-sided 95% normal interval half-width in standard deviations
Z_95 = 1.96

# Deadline for a single reasoning-service call, in seconds
REASONING_DEADLINE_SECONDS = 30.0

# Finished workflows kept in memory before the oldest are evicted
MAX_STORED_WORKFLOWS = 1000
