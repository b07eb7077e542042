import logging

import pytest

from analysis.models import OutlierResult, OutlierType, VideoMetricRecord
from services.trends import (
    YOUTUBE_CATEGORIES,
    build_trend_snapshot,
    parse_video_item,
    parse_video_items,
    profile_outlier,
    resolve_category_id,
)


def test_trending_snapshot_summary(video_batch, now):
    snapshot = build_trend_snapshot(video_batch, now=now)

    assert snapshot.snapshot_type == "trending"
    assert snapshot.region_code == "IN"
    assert snapshot.total_videos == 10
    assert snapshot.avg_views == pytest.approx(100_900)
    assert snapshot.avg_likes == pytest.approx(5017)
    assert snapshot.avg_engagement_rate == pytest.approx(2.42)
    assert snapshot.outlier_count == 1
    assert snapshot.outliers[0].id == "breakout"
    assert OutlierType.UNEXPECTED_HIT in snapshot.outliers[0].matched_types


def test_rankings_follow_input_order(video_batch, now):
    rankings = build_trend_snapshot(video_batch, now=now).rankings

    assert [r.rank_position for r in rankings] == list(range(1, 11))
    assert rankings[0].percentile == pytest.approx(100)
    assert rankings[1].percentile == pytest.approx(90)
    assert rankings[-1].percentile == pytest.approx(10)

    assert rankings[0].is_outlier
    assert rankings[0].outlier_type == OutlierType.VIRAL
    assert rankings[0].outlier_score == pytest.approx(3.0)
    assert not any(r.is_outlier for r in rankings[1:])
    assert rankings[1].outlier_type is None


def test_outlier_profile_signals(video_batch, now):
    profile = build_trend_snapshot(video_batch, now=now).profiles[0]

    assert profile.id == "breakout"
    assert profile.title_emojis
    assert profile.has_number
    assert not profile.has_how_to
    assert profile.thumbnail_type == "text_heavy"
    assert profile.title_length == 20
    for reason in ("high_engagement", "concise_title", "numbered_title"):
        assert reason in profile.detected_reasons


def test_niche_snapshot_uses_niche_rules(video_batch, now):
    snapshot = build_trend_snapshot(
        video_batch,
        snapshot_type="niche_search",
        region_code="US",
        query_keyword="python",
        now=now,
    )

    assert snapshot.region_code == "US"
    assert snapshot.query_keyword == "python"
    assert snapshot.outlier_count == 1
    assert OutlierType.UNEXPECTED_HIT not in snapshot.outliers[0].matched_types


def test_unknown_snapshot_type_rejected(video_batch, now):
    with pytest.raises(ValueError):
        build_trend_snapshot(video_batch, snapshot_type="weekly", now=now)


def test_empty_snapshot(now):
    snapshot = build_trend_snapshot([], now=now)
    assert snapshot.total_videos == 0
    assert snapshot.avg_views == 0
    assert snapshot.avg_likes == 0
    assert snapshot.rankings == []
    assert snapshot.profiles == []


@pytest.mark.parametrize(
    "title, expected",
    [
        ("How to fix a bike", "tutorial"),
        ("5 bikes compared", "listicle"),
        ("Sunday ride", "unknown"),
    ],
)
def test_thumbnail_type_heuristic(now, title, expected):
    record = VideoMetricRecord(id="v", view_count=10, published_at=now, title=title)
    outlier = OutlierResult(
        id="v",
        outlier_score=1.0,
        outlier_type=OutlierType.FAST_GROWTH,
        matched_types=[OutlierType.FAST_GROWTH],
        views_vs_baseline=1.0,
        engagement_vs_baseline=0.0,
    )
    assert profile_outlier(record, outlier, baseline_engagement=0).thumbnail_type == expected


def test_exceptional_performance_reason(now):
    record = VideoMetricRecord(id="v", view_count=10, published_at=now, title="x" * 60)
    outlier = OutlierResult(
        id="v",
        outlier_score=4.2,
        outlier_type=OutlierType.VIRAL,
        matched_types=[OutlierType.VIRAL],
        views_vs_baseline=9.0,
        engagement_vs_baseline=0.0,
    )
    assert profile_outlier(record, outlier, baseline_engagement=0).detected_reasons == [
        "exceptional_performance"
    ]


def test_parse_video_item(youtube_items, now):
    record = parse_video_item(youtube_items[0])

    assert record.id == "vid1"
    assert record.view_count == 1500
    assert record.like_count == 120
    assert record.comment_count == 30
    assert record.engagement_rate == pytest.approx(10.0)
    assert record.channel_id == "UC_BAKER"
    assert record.thumbnail_url.endswith("mqdefault.jpg")
    assert (now - record.published_at).days == 2


def test_parse_video_item_missing_statistics(youtube_items):
    record = parse_video_item(youtube_items[1])
    assert record.like_count == 0
    assert record.thumbnail_url is None


def test_parse_search_result_id():
    item = {
        "id": {"kind": "youtube#video", "videoId": "abc123"},
        "snippet": {"title": "t", "publishedAt": "2024-05-01T00:00:00Z"},
    }
    record = parse_video_item(item)
    assert record.id == "abc123"
    assert record.view_count == 0


def test_parse_video_items_skips_malformed(youtube_items, caplog):
    with caplog.at_level(logging.WARNING, logger="services.trends"):
        records = parse_video_items(youtube_items)

    assert [r.id for r in records] == ["vid1", "vid2"]
    assert "broken" in caplog.text


def test_null_parts_and_non_objects_are_skipped(youtube_items, caplog):
    items = [
        youtube_items[0],
        {"id": "nosnippet", "snippet": None, "statistics": {"viewCount": "5"}},
        "not-an-item",
        None,
        {"id": "liststats", "snippet": youtube_items[1]["snippet"], "statistics": ["5"]},
        youtube_items[1],
    ]
    with caplog.at_level(logging.WARNING, logger="services.trends"):
        records = parse_video_items(items)

    assert [r.id for r in records] == ["vid1", "vid2"]
    assert "nosnippet" in caplog.text
    assert "'not-an-item'" in caplog.text
    assert "liststats" in caplog.text


def test_null_statistics_default_to_zero(youtube_items):
    item = dict(youtube_items[0], statistics=None)
    item["snippet"] = dict(item["snippet"], thumbnails=None)

    record = parse_video_item(item)
    assert record.view_count == 0
    assert record.engagement_rate == 0
    assert record.thumbnail_url is None


def test_parse_video_item_rejects_non_objects():
    with pytest.raises(TypeError):
        parse_video_item(["vid1"])


def test_parse_video_items_limit(youtube_items):
    assert len(parse_video_items(youtube_items, limit=1)) == 1


def test_resolve_category_id():
    assert resolve_category_id("gaming") == "20"
    assert resolve_category_id("SCIENCE_TECHNOLOGY") == "28"
    assert resolve_category_id("ALL") is None
    assert resolve_category_id(None) is None
    assert resolve_category_id("27") == "27"
    assert len(YOUTUBE_CATEGORIES) == 16
    with pytest.raises(ValueError):
        resolve_category_id("cooking")
