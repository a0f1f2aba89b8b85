"""
Configuration Management for the Reporting Engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the spreadsheet holding the finance records"
    )

    # One worksheet per record type
    transactions_sheet_name: str = Field(default="Transactions")
    categories_sheet_name: str = Field(default="Categories")
    budgets_sheet_name: str = Field(default="Budgets")
    investments_sheet_name: str = Field(default="Investments")
    debts_sheet_name: str = Field(default="Debts")
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class ReportSettings(BaseSettings):
    """Limits applied while computing reports."""

    model_config = SettingsConfigDict(
        env_prefix="REPORTS_",
        extra="ignore"
    )

    query_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single record store query"
    )
    max_concurrent_budget_queries: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many per-budget spend queries may run at once"
    )
    top_categories_limit: int = Field(
        default=5,
        ge=1,
        description="Number of categories shown as top spending"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Which record store backs the reports"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def reports(self) -> ReportSettings:
        return ReportSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings(check_storage: bool = True) -> dict[str, Union[bool, str]]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus {setting_name}_error
    entries holding the message of each failure.
    Google Sheets is only checked when it is the selected backend and
    check_storage is set.
    """
    results = {}

    settings = get_settings()

    try:
        app = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)
        return results

    try:
        _ = settings.reports
        results["reports"] = True
    except Exception as e:
        results["reports"] = False
        results["reports_error"] = str(e)

    if check_storage and app.storage_backend == "google_sheets":
        try:
            _ = settings.google_sheets
            results["google_sheets"] = True
        except Exception as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)

    return results
