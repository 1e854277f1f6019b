"""
Application Settings - Main Layer

Use Pydantic Settings for configuration management.
This module handles configuration settings provided using
environment variables, .env files and default values.
"""

from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.domain.entities.demand import ConservatismLevel
from src.shared import (
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
from src.shared.env import load_secret_file_variables  # noqa: F401


class AppInfoSettings(BaseSettings):
    """Service metadata and server settings."""

    title: str = Field(default="Procurement Planner", description="Service title")
    description: str = Field(
        default="Forecast-driven procurement planning with budget, "
        "capacity and human-review constraints",
        description="Service description",
    )
    version: str = Field(default="1.0.0", description="Service version")
    git_commit: str = Field(
        default="unknown",
        description="Git commit hash",
        validation_alias=AliasChoices("APP_GIT_COMMIT", "GIT_COMMIT"),
    )
    build_time: str = Field(
        default="unknown",
        description="Build timestamp",
        validation_alias=AliasChoices("APP_BUILD_TIME", "BUILD_TIME"),
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    host: str = Field(default="0.0.0.0", description="Interface to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")
    reload: bool = Field(default=False, description="Enable auto-reload for development")

    model_config = SettingsConfigDict(
        env_prefix="APP_", case_sensitive=False, extra="ignore"
    )


class PlanningSettings(BaseSettings):
    """Planning data location and pipeline constants."""

    data_dir: str = Field(default="data", description="Directory holding the CSV tables")
    forecasts_file: str = Field(default="scored_df.csv")
    costs_file: str = Field(default="SKU_Costs.csv")
    budgets_file: str = Field(default="budget_df.csv")
    capacities_file: str = Field(default="warehouse_constraints.csv")
    businesses_file: str = Field(default="businesses.csv")

    warehouse_id: int = Field(
        default=DEFAULT_WAREHOUSE_ID,
        description="Warehouse whose capacity bounds every plan",
    )
    fallback_budget: float = Field(
        default=DEFAULT_BUDGET, gt=0, description="Budget used without budget history"
    )
    fallback_capacity: float = Field(
        default=DEFAULT_WAREHOUSE_CAPACITY,
        ge=0,
        description="Capacity used without capacity history",
    )
    price_markup: float = Field(
        default=PURCHASE_PRICE_MARKUP,
        description="Added to the shortage cost to obtain the purchasing price",
    )
    z_interval: float = Field(
        default=Z_95, gt=0, description="Forecast interval half-width in std deviations"
    )
    default_conservatism: ConservatismLevel = Field(
        default=ConservatismLevel.MEDIUM,
        description="Conservatism used by the CLI when none is given",
    )
    max_stored_workflows: int = Field(
        default=MAX_STORED_WORKFLOWS,
        ge=1,
        description="Workflows kept in memory before the oldest completed ones are evicted",
    )

    model_config = SettingsConfigDict(
        env_prefix="PLANNING_", case_sensitive=False, extra="ignore"
    )


class ReasoningSettings(BaseSettings):
    """Hosted language model used for explanation text."""

    api_key: Optional[str] = Field(
        default=None,
        description="Generative Language API key; deterministic text when unset",
        validation_alias=AliasChoices("REASONING_API_KEY", "GEMINI_API_KEY"),
    )
    model: str = Field(default="gemini-2.5-pro", description="Model name")
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="API root URL",
    )
    timeout_seconds: float = Field(
        default=REASONING_DEADLINE_SECONDS,
        gt=0,
        description="Deadline for a single reasoning call",
    )

    model_config = SettingsConfigDict(
        env_prefix="REASONING_", case_sensitive=False, extra="ignore"
    )

    @field_validator("api_key")
    @classmethod
    def blank_key_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def enabled(self) -> bool:
        return self.api_key is not None


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format",
    )
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_", case_sensitive=False, extra="ignore"
    )


class AppSettings(BaseSettings):
    """Main application settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    app: AppInfoSettings = Field(default_factory=AppInfoSettings)
    planning: PlanningSettings = Field(default_factory=PlanningSettings)
    reasoning: ReasoningSettings = Field(default_factory=ReasoningSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_settings() -> AppSettings:
    """
    Get application settings instance Factory.

    Used to be mocked in tests, allowing different settings based on environment.
    """
    return AppSettings()
