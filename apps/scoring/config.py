"""
Scoring engine configuration using Pydantic Settings.
"""

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Logging
    LOG_LEVEL: str = "INFO"

    # YouTube trend snapshots
    YOUTUBE_DEFAULT_REGION: str = "IN"
    TREND_MAX_RESULTS: int = 50

    # Hashtags / keywords
    HASHTAG_MIN_RELEVANCE: int = 50
    KEYWORD_EXTRACTION_LIMIT: int = 10

    # Outlier detection
    OUTLIER_VIRAL_Z: float = 2.0
    OUTLIER_ENGAGEMENT_Z: float = 2.0
    OUTLIER_FAST_GROWTH_DAYS: int = 7
    OUTLIER_FAST_GROWTH_PERCENTILE: float = 75.0
    OUTLIER_UNEXPECTED_HIT_Z: float = 1.5
    OUTLIER_UNEXPECTED_HIT_DAYS: int = 30
    NICHE_FAST_GROWTH_DAYS: int = 30

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()


def configure_logging(level: str = "") -> None:
    """Apply LOG_LEVEL to the root logger."""
    name = (level or settings.LOG_LEVEL or "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def validate_scoring_settings() -> None:
    """Fail fast when thresholds would make detection meaningless."""
    if settings.OUTLIER_FAST_GROWTH_DAYS <= 0 or settings.NICHE_FAST_GROWTH_DAYS <= 0:
        raise ValueError("Fast-growth windows must be positive day counts.")
    if settings.OUTLIER_UNEXPECTED_HIT_DAYS <= 0:
        raise ValueError("OUTLIER_UNEXPECTED_HIT_DAYS must be a positive day count.")
    if not 0 < settings.OUTLIER_FAST_GROWTH_PERCENTILE <= 100:
        raise ValueError("OUTLIER_FAST_GROWTH_PERCENTILE must be within (0, 100].")
    if not 0 <= settings.HASHTAG_MIN_RELEVANCE <= 100:
        raise ValueError("HASHTAG_MIN_RELEVANCE must be within [0, 100].")
    if settings.KEYWORD_EXTRACTION_LIMIT <= 0:
        raise ValueError("KEYWORD_EXTRACTION_LIMIT must be positive.")
