"""
Scoring models and schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, computed_field


class Platform(str, Enum):
    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    BLOG = "blog"
    OTHER = "other"      # Anything we have no table for


class ContentKind(str, Enum):
    TITLE = "title"
    DESCRIPTION = "description"


class HashtagCategory(str, Enum):
    TRENDING = "trending"
    NICHE = "niche"
    BROAD = "broad"
    INSTAGRAM = "instagram"          # Platform-specific
    TIKTOK = "tiktok"                # Platform-specific
    PROFESSIONAL = "professional"    # LinkedIn
    BUSINESS = "business"            # LinkedIn
    EDUCATIONAL = "educational"
    ENTERTAINMENT = "entertainment"
    INSPIRATIONAL = "inspirational"
    GENERAL = "general"


class PerformanceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class OutlierType(str, Enum):
    VIRAL = "viral"                      # View z-score spike
    HIGH_ENGAGEMENT = "high_engagement"  # Engagement-rate z-score spike
    FAST_GROWTH = "fast_growth"          # Recent and already top-quartile
    UNEXPECTED_HIT = "unexpected_hit"    # Moderate spike on a recent video


PlatformLike = Union[Platform, str, None]


def resolve_platform(value: PlatformLike) -> Platform:
    """Case-insensitive platform lookup; unknown names fall back to OTHER."""
    if isinstance(value, Platform):
        return value
    text = str(value or "").strip().lower()
    try:
        return Platform(text)
    except ValueError:
        return Platform.OTHER


def platform_label(value: PlatformLike) -> str:
    """Lowercase platform name for user-facing messages."""
    if isinstance(value, Platform):
        return value.value
    return str(value or "").strip().lower() or Platform.OTHER.value


class HashtagScoreBreakdown(BaseModel):
    """Weighted sub-scores behind a hashtag's relevance score."""
    content_relevance: int
    platform_optimization: int
    audience_targeting: int
    quality: int
    overall_score: int


class HashtagAnalysis(BaseModel):
    hashtag: str
    score: int
    category: HashtagCategory
    performance: PerformanceLevel
    breakdown: HashtagScoreBreakdown
    issues: List[str] = []
    recommendation: str


class CategoryEffectiveness(BaseModel):
    count: int = 0
    effectiveness: PerformanceLevel = PerformanceLevel.LOW


class HashtagSetAnalysis(BaseModel):
    """Aggregate strategy view over a list of hashtags."""
    total_score: int
    category_distribution: Dict[str, int]
    trending_count: int
    niche_count: int
    broad_count: int
    recommendations: List[str]
    issues: List[str]


class SeoScoreBreakdown(BaseModel):
    title_score: int
    description_score: int
    keyword_score: int
    readability_score: int
    platform_optimization_score: int
    overall_score: int


class SeoAnalysisResult(BaseModel):
    score: int
    breakdown: SeoScoreBreakdown
    recommendations: List[str]
    issues: List[str]


class VideoMetricRecord(BaseModel):
    """One video's counters at collection time."""
    id: str
    view_count: int = Field(default=0, ge=0)
    like_count: int = Field(default=0, ge=0)
    comment_count: int = Field(default=0, ge=0)
    published_at: datetime
    title: str = ""
    channel_id: Optional[str] = None
    thumbnail_url: Optional[str] = None

    @computed_field
    @property
    def engagement_rate(self) -> float:
        if self.view_count <= 0:
            return 0.0
        return (self.like_count + self.comment_count) / self.view_count * 100


class OutlierResult(BaseModel):
    id: str
    outlier_score: float
    outlier_type: OutlierType
    matched_types: List[OutlierType]
    views_vs_baseline: float
    engagement_vs_baseline: float


class OutlierProfile(BaseModel):
    """Title/packaging signals recorded for a flagged video."""
    id: str
    outlier_type: OutlierType
    outlier_score: float
    views_vs_baseline: float
    engagement_vs_baseline: float
    title_length: int
    title_emojis: bool
    has_how_to: bool
    has_number: bool
    thumbnail_type: str
    detected_reasons: List[str]


class VideoRank(BaseModel):
    id: str
    rank_position: int
    percentile: float
    is_outlier: bool
    outlier_type: Optional[OutlierType] = None
    outlier_score: Optional[float] = None


class TrendSnapshot(BaseModel):
    """Batch summary of one trending or niche collection run."""
    snapshot_type: str
    region_code: str
    category_id: Optional[str] = None
    query_keyword: Optional[str] = None
    total_videos: int
    avg_views: float
    avg_likes: float
    avg_engagement_rate: float
    outlier_count: int
    outliers: List[OutlierResult]
    rankings: List[VideoRank]
    profiles: List[OutlierProfile]
