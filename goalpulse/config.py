"""
Configuration management using pydantic-settings.
All settings loaded from environment variables (12-factor app).
"""

from datetime import date
from functools import lru_cache
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_reload: bool = Field(default=True, description="Enable hot reload")
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="CORS allowed origins (comma-separated)",
    )

    # Logging
    log_level: str = Field(default="info", description="Log level")
    log_format: str = Field(default="json", description="Log format (json|console)")

    # Aggregation windows
    short_window_days: int = Field(default=7, ge=2, description="Short-term window (days)")
    baseline_window_days: int = Field(default=30, ge=2, description="Baseline window (days)")

    # Importance weights for overall score and overall probability
    weight_critical: float = Field(default=1.2, gt=0.0, description="CRITICAL goal weight")
    weight_high: float = Field(default=1.0, gt=0.0, description="HIGH goal weight")
    weight_medium: float = Field(default=0.8, gt=0.0, description="MEDIUM goal weight")

    # Pattern detection
    burnout_variance_threshold: float = Field(
        default=4.0, ge=0.0, description="30-day score variance above which burnout is possible"
    )
    burnout_fatigue_threshold: float = Field(
        default=40.0, ge=0.0, description="Weekly activity load above which fatigue is accumulated"
    )
    stress_score_floor: float = Field(default=6.0, description="Daily score below which a day is a stress day")
    stress_min_low_days: int = Field(default=2, ge=1, description="Minimum stress days before correlating triggers")
    momentum_periods: int = Field(default=3, ge=2, description="Consecutive periods checked for momentum")
    trend_alert_delta: float = Field(default=0.5, ge=0.0, description="7-day score change reported as a trend")
    consistency_min_days: int = Field(default=30, ge=1, description="Logged days needed for consistency")
    low_application_volume: float = Field(default=10.0, ge=0.0, description="Weekly applications considered low")
    low_workout_volume: float = Field(default=5.0, ge=0.0, description="Weekly workouts considered low")
    trading_edge_win_rate: float = Field(default=60.0, ge=0.0, le=100.0, description="Win rate (%) marking an edge")
    trading_edge_lookback: int = Field(default=20, ge=1, description="Recent trades checked for an edge")
    trading_edge_min_trades: int = Field(default=5, ge=1, description="Minimum trades before an edge is reported")

    # Forecasting
    forecast_horizon_date: date = Field(default=date(2026, 12, 31), description="Default projection horizon")
    forecast_max_periods: int = Field(default=600, ge=1, description="Maximum compounding periods")
    forecast_max_monthly_rate: float = Field(default=1.0, gt=0.0, description="Upper clamp on monthly growth rate")
    net_worth_annual_return: float = Field(default=0.15, description="Assumed annual investment return")
    probability_floor: float = Field(default=0.1, gt=0.0, lt=1.0, description="Minimum achievement probability")
    probability_ceiling: float = Field(default=0.99, gt=0.0, lt=1.0, description="Maximum probability below target")

    # Recommendations
    max_recommendations: int = Field(default=10, ge=1, description="Recommendations returned per evaluation")
    enable_recommendation_cache: bool = Field(default=False, description="Enable per-goal recommendation cache")
    recommendation_cache_ttl_hours: int = Field(default=24, ge=1, description="Recommendation cache TTL (hours)")
    motivation_seed: int = Field(default=0, description="Seed for motivational message selection")

    # Development
    dev_mode: bool = Field(default=True, description="Development mode")
    debug: bool = Field(default=False, description="Debug mode")
    testing: bool = Field(default=False, description="Testing mode")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str) -> List[str]:
        """Parse comma-separated CORS origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def importance_weights(self) -> dict[str, float]:
        """Importance weights keyed by importance name."""
        return {
            "CRITICAL": self.weight_critical,
            "HIGH": self.weight_high,
            "MEDIUM": self.weight_medium,
        }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure singleton behavior.
    """
    return Settings()
