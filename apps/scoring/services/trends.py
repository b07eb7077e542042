"""
Trend snapshots for YouTube trending lists and keyword searches.

Takes raw Data API video items, runs outlier detection over the batch and
summarises it: averages, per-video rankings and a packaging profile for
every flagged video.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from config import settings
from analysis.common import mean_or_zero
from analysis.models import (
    OutlierProfile,
    OutlierResult,
    TrendSnapshot,
    VideoMetricRecord,
    VideoRank,
)
from analysis.outliers import OutlierCriteria, OutlierDetector

logger = logging.getLogger(__name__)

TRENDING_SNAPSHOT = "trending"
NICHE_SNAPSHOT = "niche_search"

YOUTUBE_CATEGORIES: Dict[str, str] = {
    "FILM_ANIMATION": "1",
    "AUTOS_VEHICLES": "2",
    "MUSIC": "10",
    "PETS_ANIMALS": "15",
    "SPORTS": "17",
    "SHORT_MOVIES": "18",
    "TRAVEL_EVENTS": "19",
    "GAMING": "20",
    "VIDEOBLOGGING": "21",
    "PEOPLE_BLOGS": "22",
    "COMEDY": "23",
    "ENTERTAINMENT": "24",
    "NEWS_POLITICS": "25",
    "HOWTO_STYLE": "26",
    "EDUCATION": "27",
    "SCIENCE_TECHNOLOGY": "28",
}

_EMOJI = re.compile("[\U0001F300-\U0001F9FF]")
_HOW_TO = re.compile(r"how to|how do i|tutorial|guide", re.IGNORECASE)
_DIGIT = re.compile(r"\d")
_THUMBNAIL_SIZES = ("high", "medium", "default")


def resolve_category_id(category: Optional[str]) -> Optional[str]:
    """Map a category name (or a raw numeric id) to its id; "ALL" means no filter."""
    if not category or category.upper() == "ALL":
        return None
    if category.isdigit():
        return category
    key = category.upper()
    if key not in YOUTUBE_CATEGORIES:
        raise ValueError(f"Unknown YouTube category: {category}")
    return YOUTUBE_CATEGORIES[key]


def _thumbnail_url(snippet: Dict[str, Any]) -> Optional[str]:
    thumbnails = snippet.get("thumbnails") or {}
    for size in _THUMBNAIL_SIZES:
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return None


def parse_video_item(item: Dict[str, Any]) -> VideoMetricRecord:
    """Build a record from a videos.list item (snippet + statistics parts)."""
    if not isinstance(item, dict):
        raise TypeError(f"Video item must be a mapping, got {type(item).__name__}")
    # parts the request did not ask for may come back as null
    snippet = item.get("snippet") or {}
    stats = item.get("statistics") or {}
    if not isinstance(snippet, dict) or not isinstance(stats, dict):
        raise TypeError("snippet and statistics must be objects")
    video_id = item.get("id")
    if isinstance(video_id, dict):
        # search.list items nest the id
        video_id = video_id.get("videoId")

    return VideoMetricRecord(
        id=video_id,
        view_count=int(stats.get("viewCount", 0)),
        like_count=int(stats.get("likeCount", 0)),
        comment_count=int(stats.get("commentCount", 0)),
        published_at=snippet.get("publishedAt"),
        title=snippet.get("title", ""),
        channel_id=snippet.get("channelId"),
        thumbnail_url=_thumbnail_url(snippet),
    )


def parse_video_items(items: Sequence[Dict[str, Any]], limit: Optional[int] = None) -> List[VideoMetricRecord]:
    """Parse a page of items, skipping malformed ones."""
    limit = settings.TREND_MAX_RESULTS if limit is None else limit
    records = []
    for item in items:
        if len(records) >= limit:
            break
        if not isinstance(item, dict):
            logger.warning("Skipping non-object video item %s", repr(item)[:80])
            continue
        try:
            records.append(parse_video_item(item))
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning("Skipping malformed video item %s: %s", item.get("id"), e)
    return records


def profile_outlier(
    record: VideoMetricRecord,
    outlier: OutlierResult,
    baseline_engagement: float,
) -> OutlierProfile:
    """Title and packaging signals for a flagged video."""
    title = record.title
    title_emojis = bool(_EMOJI.search(title))
    has_how_to = bool(_HOW_TO.search(title))
    has_number = bool(_DIGIT.search(title))

    if title_emojis:
        thumbnail_type = "text_heavy"
    elif has_how_to:
        thumbnail_type = "tutorial"
    elif has_number:
        thumbnail_type = "listicle"
    else:
        thumbnail_type = "unknown"

    reasons = []
    if outlier.outlier_score > 3:
        reasons.append("exceptional_performance")
    if record.engagement_rate > baseline_engagement * 1.5:
        reasons.append("high_engagement")
    if len(title) < 50:
        reasons.append("concise_title")
    if has_number:
        reasons.append("numbered_title")

    return OutlierProfile(
        id=record.id,
        outlier_type=outlier.outlier_type,
        outlier_score=outlier.outlier_score,
        views_vs_baseline=outlier.views_vs_baseline,
        engagement_vs_baseline=outlier.engagement_vs_baseline,
        title_length=len(title),
        title_emojis=title_emojis,
        has_how_to=has_how_to,
        has_number=has_number,
        thumbnail_type=thumbnail_type,
        detected_reasons=reasons,
    )


def build_trend_snapshot(
    records: Sequence[VideoMetricRecord],
    snapshot_type: str = TRENDING_SNAPSHOT,
    region_code: Optional[str] = None,
    category_id: Optional[str] = None,
    query_keyword: Optional[str] = None,
    now: Optional[datetime] = None,
    criteria: Optional[OutlierCriteria] = None,
) -> TrendSnapshot:
    """
    Summarise one collection run.

    Rankings follow the order the API returned the videos in. Niche
    searches use the longer fast-growth window unless criteria are given.
    """
    if snapshot_type not in (TRENDING_SNAPSHOT, NICHE_SNAPSHOT):
        raise ValueError(f"Unknown snapshot type: {snapshot_type}")
    if criteria is None:
        criteria = OutlierCriteria.niche() if snapshot_type == NICHE_SNAPSHOT else OutlierCriteria.trending()

    region = region_code or settings.YOUTUBE_DEFAULT_REGION
    records = list(records)
    detector = OutlierDetector(records, criteria=criteria, now=now)
    outliers = detector.detect()
    by_id = {o.id: o for o in outliers}

    total = len(records)
    rankings = []
    profiles = []
    for i, record in enumerate(records):
        outlier = by_id.get(record.id)
        rankings.append(VideoRank(
            id=record.id,
            rank_position=i + 1,
            percentile=(1 - i / total) * 100,
            is_outlier=outlier is not None,
            outlier_type=outlier.outlier_type if outlier else None,
            outlier_score=outlier.outlier_score if outlier else None,
        ))
        if outlier is not None:
            profiles.append(profile_outlier(record, outlier, detector.engagement_stats.mean))

    logger.info(
        "%s snapshot region=%s videos=%s outliers=%s",
        snapshot_type, region, total, len(outliers),
    )

    return TrendSnapshot(
        snapshot_type=snapshot_type,
        region_code=region,
        category_id=category_id,
        query_keyword=query_keyword,
        total_videos=total,
        avg_views=detector.view_stats.mean,
        avg_likes=mean_or_zero(r.like_count for r in records),
        avg_engagement_rate=detector.engagement_stats.mean,
        outlier_count=len(outliers),
        outliers=outliers,
        rankings=rankings,
        profiles=profiles,
    )
