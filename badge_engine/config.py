"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict


DEFAULT_TIER_POINTS: dict[str, dict[str, int]] = {
    "standard": {"bronze": 3, "silver": 6, "gold": 10},
    "group": {"bronze": 3, "silver": 6, "gold": 15},
}


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Database ===
    database_url: str = Field(
        default="sqlite:///./badges.db",
        description="Database connection URL"
    )

    # === Scheduled jobs ===
    cron_secret: Optional[str] = Field(
        default=None,
        description="Bearer token expected by the scheduled badge check endpoint"
    )
    group_detection_enabled: bool = Field(default=False)
    group_detection_interval_seconds: int = Field(default=86400)
    group_lookback_hours: int = Field(default=24)

    # === Badge points ===
    # Points per tier, keyed by badge family. A delta is always computed
    # within a single family.
    tier_points: dict[str, dict[str, int]] = Field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_TIER_POINTS.items()}
    )

    @field_validator('database_url')
    @classmethod
    def fix_postgres_url(cls, v: str) -> str:
        """Fix Render/Railway postgres:// URL to postgresql://"""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator('tier_points')
    @classmethod
    def check_tier_points(cls, v: dict[str, dict[str, int]]) -> dict[str, dict[str, int]]:
        """Every family needs bronze < silver < gold."""
        for family, points in v.items():
            try:
                bronze, silver, gold = points["bronze"], points["silver"], points["gold"]
            except KeyError as e:
                raise ValueError(f"tier_points[{family!r}] is missing {e.args[0]}")
            if not 0 <= bronze < silver < gold:
                raise ValueError(
                    f"tier_points[{family!r}] must be increasing: {points}"
                )
        return v

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
