"""
Shared module - Cross-cutting concerns / Shared Layer

Constants, enums and utilities used by more than one layer:
- environment names and log levels
- planning fallback constants (budget, warehouse capacity, markups)
- structlog configuration helpers

It must not depend on Domain, Application or Infrastructure code.
"""

from .consts import (
    DEFAULT_BUDGET,
    DEFAULT_WAREHOUSE_CAPACITY,
    DEFAULT_WAREHOUSE_ID,
    MAX_STORED_WORKFLOWS,
    PURCHASE_PRICE_MARKUP,
    REASONING_DEADLINE_SECONDS,
    Z_95,
    EnumEnvironment,
    EnumLogLevel,
)
from .logging import (
    bind_workflow_context,
    configure_logging,
    get_logger,
    update_logging_from_settings,
)

__all__ = [
    "DEFAULT_BUDGET",
    "DEFAULT_WAREHOUSE_CAPACITY",
    "DEFAULT_WAREHOUSE_ID",
    "MAX_STORED_WORKFLOWS",
    "PURCHASE_PRICE_MARKUP",
    "REASONING_DEADLINE_SECONDS",
    "Z_95",
    "EnumEnvironment",
    "EnumLogLevel",
    "bind_workflow_context",
    "configure_logging",
    "get_logger",
    "update_logging_from_settings",
]
