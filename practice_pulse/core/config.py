"""
Settings and environment management module for the Practice Pulse engine.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults matching the dashboard's policy constants
- Singleton pattern via @lru_cache for efficient access
- Explicit rosters for advisor and ops-staff round-robin fallbacks

Policy Constants:
- health_weight_*: 30/25/25/20 (Compliance, DocuSign, Tasks, Meetings), must sum to 100
- advisor_diversity_threshold: 1 (advisor field trusted when > 1 distinct value appears)
- staff_attribution_mode: 'simulated' (round-robin demo attribution) or 'field'
- risk_limit: 30 (maximum risk items in a snapshot)
- trend_weeks: 12 (weekly history length)

Revenue Defaults:
- default_avg_aum_per_household: 2,000,000
- default_fee_schedule_bps: 85
- default_pipeline_conversion_rate: 0.65
- default_pipeline_avg_aum: 1,500,000

Usage:
    from practice_pulse.core.config import get_settings

    settings = get_settings()
    roster = settings.known_advisors
"""

from functools import lru_cache
from typing import List

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from practice_pulse.models.enums import StaffAttributionMode


DEFAULT_KNOWN_ADVISORS: List[str] = [
    "Jon Cambras",
    "Marcus Rivera",
    "Diane Rivera",
    "James Wilder",
    "Amy Sato",
    "Kevin Trịnh",
    "Michelle Osei",
]

DEFAULT_KNOWN_STAFF: List[str] = [
    "Sarah Chen",
    "Tom Becker",
    "Priya Nair",
    "Luis Ortega",
]


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    The class inherits from pydantic-settings BaseSettings which provides:
    - Automatic loading from environment variables (case-insensitive)
    - Support for .env file loading
    - Type validation and coercion (list values are read as JSON)

    Attributes:
        app_name: Display name of the HTTP service.
        health_weight_compliance: Weight of compliance coverage in the health score.
        health_weight_docusign: Weight of DocuSign velocity in the health score.
        health_weight_tasks: Weight of tasks-on-time in the health score.
        health_weight_meetings: Weight of 90-day meeting coverage in the health score.
        known_advisors: Roster used by the round-robin advisor fallback.
        known_staff: Roster used by simulated ops-staff attribution.
        advisor_diversity_threshold: Distinct advisor-field values that must be
            exceeded before the advisor-of-record field is trusted.
        staff_attribution_mode: 'simulated' or 'field'.
        honor_revenue_directive: Whether 'Revenue Config:' lines in household
            descriptions override the default revenue assumptions.
        meeting_window_days: Lookback window for meeting coverage.
        docusign_stale_days: Age after which an unsigned envelope hurts velocity.
        risk_limit: Maximum number of risk items returned.
        trend_weeks: Number of 7-day windows in each weekly history.
        detail_item_limit: Maximum items in each detail-drawer list.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    app_name: str = 'Practice Pulse API'

    # =========================================================================
    # Health Score Weights
    # =========================================================================

    health_weight_compliance: int = Field(default=30, ge=0, le=100)
    health_weight_docusign: int = Field(default=25, ge=0, le=100)
    health_weight_tasks: int = Field(default=25, ge=0, le=100)
    health_weight_meetings: int = Field(default=20, ge=0, le=100)

    # =========================================================================
    # Attribution
    # =========================================================================

    known_advisors: List[str] = Field(default_factory=lambda: list(DEFAULT_KNOWN_ADVISORS))
    known_staff: List[str] = Field(default_factory=lambda: list(DEFAULT_KNOWN_STAFF))

    # The advisor field on live orgs is populated with many owners; a demo org
    # shows a single API service account on every household.
    advisor_diversity_threshold: int = Field(default=1, ge=0)

    # 'simulated' must never be used against production data
    staff_attribution_mode: StaffAttributionMode = StaffAttributionMode.SIMULATED

    # =========================================================================
    # Revenue Defaults
    # =========================================================================

    honor_revenue_directive: bool = True
    default_avg_aum_per_household: float = Field(default=2_000_000, ge=0)
    default_fee_schedule_bps: float = Field(default=85, ge=0)
    default_pipeline_conversion_rate: float = Field(default=0.65, ge=0.0, le=1.0)
    default_pipeline_avg_aum: float = Field(default=1_500_000, ge=0)

    # =========================================================================
    # Windows and Limits
    # =========================================================================

    meeting_window_days: int = Field(default=90, ge=1)
    docusign_stale_days: int = Field(default=7, ge=0)
    risk_limit: int = Field(default=30, ge=0)
    trend_weeks: int = Field(default=12, ge=2)
    detail_item_limit: int = Field(default=10, ge=0)

    @model_validator(mode='after')
    def _check_health_weights(self) -> 'Settings':
        total = (
            self.health_weight_compliance
            + self.health_weight_docusign
            + self.health_weight_tasks
            + self.health_weight_meetings
        )
        if total != 100:
            raise ValueError(f"Health score weights must sum to 100, got {total}")
        return self


@lru_cache()
def get_settings() -> Settings:
    """
    Get the engine settings singleton.

    Returns:
        Settings: The cached settings instance.

    Raises:
        pydantic.ValidationError: If environment values are invalid
            (e.g. health weights that do not sum to 100).

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
