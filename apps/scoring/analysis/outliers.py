"""
Outlier detection over a batch of video metrics.

Each video is compared against its own batch: view and engagement-rate
z-scores (population standard deviation), a nearest-rank percentile on
views, and the video's age at detection time.
"""

import logging
import math
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import numpy as np
from pydantic import BaseModel

from config import settings

from .models import OutlierResult, OutlierType, VideoMetricRecord

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


class MetricStats(BaseModel):
    """Descriptive statistics for one metric across a batch."""
    mean: float = 0.0
    std_dev: float = 0.0
    sorted_values: List[float] = []

    @property
    def count(self) -> int:
        return len(self.sorted_values)

    def percentile(self, p: float) -> float:
        """Nearest-rank percentile; 0 for an empty batch or an out-of-range rank."""
        if not self.sorted_values:
            return 0.0
        index = math.ceil((p / 100) * len(self.sorted_values)) - 1
        if index < 0 or index >= len(self.sorted_values):
            return 0.0
        return self.sorted_values[index]


class OutlierCriteria(BaseModel):
    """Thresholds for each outlier rule; unexpected_hit_z=None disables that rule."""
    viral_z: float = 2.0
    engagement_z: float = 2.0
    fast_growth_days: float = 7
    fast_growth_percentile: float = 75.0
    unexpected_hit_z: Optional[float] = 1.5
    unexpected_hit_days: float = 30

    @classmethod
    def trending(cls) -> "OutlierCriteria":
        return cls(
            viral_z=settings.OUTLIER_VIRAL_Z,
            engagement_z=settings.OUTLIER_ENGAGEMENT_Z,
            fast_growth_days=settings.OUTLIER_FAST_GROWTH_DAYS,
            fast_growth_percentile=settings.OUTLIER_FAST_GROWTH_PERCENTILE,
            unexpected_hit_z=settings.OUTLIER_UNEXPECTED_HIT_Z,
            unexpected_hit_days=settings.OUTLIER_UNEXPECTED_HIT_DAYS,
        )

    @classmethod
    def niche(cls) -> "OutlierCriteria":
        # Keyword searches surface older videos, so "recent" is a month and
        # there is no separate unexpected-hit rule.
        return cls.trending().model_copy(
            update={
                "fast_growth_days": settings.NICHE_FAST_GROWTH_DAYS,
                "unexpected_hit_z": None,
            }
        )


def compute_stats(values: Sequence[float]) -> MetricStats:
    if len(values) == 0:
        return MetricStats()

    arr = np.asarray(values, dtype=float)
    return MetricStats(
        mean=float(np.mean(arr)),
        std_dev=float(np.std(arr)),
        sorted_values=sorted(float(v) for v in arr),
    )


def z_score(value: float, mean: float, std_dev: float) -> float:
    if std_dev == 0:
        return 0.0
    return (value - mean) / std_dev


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since(published_at: datetime, now: datetime) -> float:
    return (_as_utc(now) - _as_utc(published_at)).total_seconds() / SECONDS_PER_DAY


def _ratio(value: float, baseline: float) -> float:
    if baseline == 0:
        return 0.0
    return value / baseline


class OutlierDetector:
    """Flags videos that break away from their batch baseline."""

    def __init__(
        self,
        records: Sequence[VideoMetricRecord],
        criteria: Optional[OutlierCriteria] = None,
        now: Optional[datetime] = None,
    ):
        self.records = list(records)
        self.criteria = criteria or OutlierCriteria()
        self.now = now or datetime.now(timezone.utc)

        self.view_stats = compute_stats([r.view_count for r in self.records])
        self.engagement_stats = compute_stats([r.engagement_rate for r in self.records])
        self.growth_floor = self.view_stats.percentile(self.criteria.fast_growth_percentile)

    def detect(self) -> List[OutlierResult]:
        """Results in input order; records matching no rule are omitted."""
        outliers = []
        for record in self.records:
            result = self.evaluate(record)
            if result is not None:
                outliers.append(result)

        logger.debug(
            "outlier detection videos=%s outliers=%s mean_views=%.1f",
            len(self.records), len(outliers), self.view_stats.mean,
        )
        return outliers

    def evaluate(self, record: VideoMetricRecord) -> Optional[OutlierResult]:
        c = self.criteria
        view_z = z_score(record.view_count, self.view_stats.mean, self.view_stats.std_dev)
        engagement_z = z_score(
            record.engagement_rate, self.engagement_stats.mean, self.engagement_stats.std_dev
        )
        age_days = days_since(record.published_at, self.now)

        matched: List[OutlierType] = []
        if view_z > c.viral_z:
            matched.append(OutlierType.VIRAL)
        if engagement_z > c.engagement_z:
            matched.append(OutlierType.HIGH_ENGAGEMENT)
        if age_days < c.fast_growth_days and record.view_count >= self.growth_floor:
            matched.append(OutlierType.FAST_GROWTH)
        if (
            c.unexpected_hit_z is not None
            and view_z > c.unexpected_hit_z
            and age_days < c.unexpected_hit_days
        ):
            matched.append(OutlierType.UNEXPECTED_HIT)

        if not matched:
            return None

        primary = matched[0]
        score = engagement_z if primary == OutlierType.HIGH_ENGAGEMENT else view_z
        return OutlierResult(
            id=record.id,
            outlier_score=abs(score),
            outlier_type=primary,
            matched_types=matched,
            views_vs_baseline=_ratio(record.view_count, self.view_stats.mean),
            engagement_vs_baseline=_ratio(record.engagement_rate, self.engagement_stats.mean),
        )


def detect_outliers(
    records: Sequence[VideoMetricRecord],
    now: Optional[datetime] = None,
    criteria: Optional[OutlierCriteria] = None,
) -> List[OutlierResult]:
    return OutlierDetector(records, criteria=criteria, now=now).detect()
