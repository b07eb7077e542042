import pytest
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from analysis.models import OutlierType, VideoMetricRecord
from analysis.outliers import (
    OutlierCriteria,
    OutlierDetector,
    compute_stats,
    days_since,
    detect_outliers,
    z_score,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _record(vid, views, likes=20, comments=2, age_days=100, title=""):
    return VideoMetricRecord(
        id=vid,
        view_count=views,
        like_count=likes,
        comment_count=comments,
        published_at=NOW - timedelta(days=age_days),
        title=title,
    )


@pytest.fixture
def viral_batch():
    """One recent breakout against nine old, flat videos."""
    records = [
        _record("a", 1_000_000, likes=50_000, comments=5_000, age_days=2),
        _record("b", 1000, likes=10, comments=1, age_days=100),
    ]
    records += [_record(f"n{i}", 1000) for i in range(8)]
    return records


@pytest.fixture
def engagement_batch():
    """Flat views; one video with ten times the likes."""
    records = [_record("hot", 1000, likes=198, comments=2)]
    records += [_record(f"n{i}", 1000) for i in range(9)]
    return records


def test_compute_stats_population_std():
    stats = compute_stats([2, 4, 4, 4, 5, 5, 7, 9])
    assert stats.mean == 5
    assert stats.std_dev == 2
    assert stats.count == 8


def test_percentile_nearest_rank():
    stats = compute_stats([5, 1, 3, 2, 4])
    assert stats.percentile(75) == 4
    assert stats.percentile(100) == 5
    assert stats.percentile(20) == 1
    assert stats.percentile(0) == 0


def test_compute_stats_empty():
    stats = compute_stats([])
    assert stats.mean == 0
    assert stats.std_dev == 0
    assert stats.percentile(75) == 0


def test_z_score_zero_variance_guard():
    assert z_score(10, 10, 0) == 0
    assert z_score(12, 10, 2) == 1


def test_engagement_rate_computed():
    assert _record("x", 1000, likes=40, comments=10).engagement_rate == pytest.approx(5.0)
    assert _record("x", 0, likes=40, comments=10).engagement_rate == 0


def test_negative_counts_rejected():
    with pytest.raises(ValidationError):
        VideoMetricRecord(id="bad", view_count=-1, published_at=NOW)


def test_days_since_treats_naive_as_utc():
    naive = datetime(2024, 5, 30, 12, 0)
    assert days_since(naive, NOW) == pytest.approx(2.0)


def test_viral_breakout_flagged(viral_batch):
    results = detect_outliers(viral_batch, now=NOW)

    assert [r.id for r in results] == ["a"]
    a = results[0]
    assert a.outlier_type == OutlierType.VIRAL
    assert a.matched_types == [
        OutlierType.VIRAL,
        OutlierType.HIGH_ENGAGEMENT,
        OutlierType.FAST_GROWTH,
        OutlierType.UNEXPECTED_HIT,
    ]
    assert a.outlier_score == pytest.approx(3.0)
    assert a.views_vs_baseline == pytest.approx(1_000_000 / 100_900)


def test_high_engagement_scored_on_engagement_z(engagement_batch):
    results = detect_outliers(engagement_batch, now=NOW)

    assert [r.id for r in results] == ["hot"]
    hot = results[0]
    assert hot.outlier_type == OutlierType.HIGH_ENGAGEMENT
    assert hot.matched_types == [OutlierType.HIGH_ENGAGEMENT]
    assert hot.outlier_score == pytest.approx(3.0)
    assert hot.views_vs_baseline == pytest.approx(1.0)
    assert hot.engagement_vs_baseline == pytest.approx(20 / 3.98)


def test_flat_old_batch_has_no_outliers():
    records = [_record(f"v{i}", 5000) for i in range(6)]
    assert detect_outliers(records, now=NOW) == []


def test_flat_recent_batch_is_all_fast_growth():
    # every video sits at the 75th percentile and is under a week old
    records = [_record(f"v{i}", 5000, age_days=1) for i in range(4)]
    results = detect_outliers(records, now=NOW)
    assert len(results) == 4
    assert all(r.outlier_type == OutlierType.FAST_GROWTH for r in results)
    assert all(r.outlier_score == 0 for r in results)


def test_empty_batch():
    assert detect_outliers([], now=NOW) == []


def test_results_keep_input_order():
    records = [
        _record("late", 5000, age_days=1),
        _record("old", 10, age_days=300),
        _record("early", 5000, age_days=2),
        _record("older", 10, age_days=300),
    ]
    results = detect_outliers(records, now=NOW)
    assert [r.id for r in results] == ["late", "early"]


def test_niche_criteria_disable_unexpected_hit(viral_batch):
    niche = OutlierCriteria.niche()
    assert niche.unexpected_hit_z is None
    assert niche.fast_growth_days == 30

    detector = OutlierDetector(viral_batch, criteria=niche, now=NOW)
    result = detector.evaluate(viral_batch[0])
    assert OutlierType.UNEXPECTED_HIT not in result.matched_types


def test_trending_criteria_follow_defaults():
    assert OutlierCriteria.trending() == OutlierCriteria()


def test_scores_are_non_negative(viral_batch, engagement_batch):
    for batch in (viral_batch, engagement_batch):
        for result in detect_outliers(batch, now=NOW):
            assert result.outlier_score >= 0
