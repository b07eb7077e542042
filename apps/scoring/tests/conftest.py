import pytest
from datetime import datetime, timedelta, timezone

from analysis.models import VideoMetricRecord


@pytest.fixture
def now():
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def video_batch(now):
    """A two-day-old breakout followed by nine old, ordinary uploads."""
    records = [
        VideoMetricRecord(
            id="breakout",
            view_count=1_000_000,
            like_count=50_000,
            comment_count=5_000,
            published_at=now - timedelta(days=2),
            title="Top 10 Python Tips \U0001F525",
        ),
        VideoMetricRecord(
            id="quiet",
            view_count=1000,
            like_count=10,
            comment_count=1,
            published_at=now - timedelta(days=100),
            title="My weekly vlog",
        ),
    ]
    records += [
        VideoMetricRecord(
            id=f"regular{i}",
            view_count=1000,
            like_count=20,
            comment_count=2,
            published_at=now - timedelta(days=100),
            title=f"Regular upload {i}",
        )
        for i in range(8)
    ]
    return records


@pytest.fixture
def youtube_items():
    """videos.list items as the Data API returns them (counts are strings)."""
    return [
        {
            "id": "vid1",
            "snippet": {
                "title": "How to bake bread",
                "publishedAt": "2024-05-30T12:00:00Z",
                "channelId": "UC_BAKER",
                "thumbnails": {
                    "default": {"url": "https://i.ytimg.com/vi/vid1/default.jpg"},
                    "medium": {"url": "https://i.ytimg.com/vi/vid1/mqdefault.jpg"},
                },
            },
            "statistics": {"viewCount": "1500", "likeCount": "120", "commentCount": "30"},
        },
        {
            "id": "vid2",
            "snippet": {
                "title": "Sourdough starter basics",
                "publishedAt": "2024-01-10T08:30:00Z",
                "channelId": "UC_BAKER",
                "thumbnails": {},
            },
            # likes hidden by the uploader
            "statistics": {"viewCount": "800", "commentCount": "4"},
        },
        {
            "id": "broken",
            "snippet": {"title": "No publish date"},
            "statistics": {"viewCount": "10"},
        },
    ]
