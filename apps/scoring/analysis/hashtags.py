"""
Hashtag scoring logic.

Relevance is a weighted blend of four heuristics, each capped at 100:
content relevance (40%), platform fit (25%), audience targeting (20%)
and tag quality (15%).
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .common import clip_score, mean_or_zero
from .models import (
    CategoryEffectiveness,
    HashtagAnalysis,
    HashtagCategory,
    HashtagScoreBreakdown,
    HashtagSetAnalysis,
    PerformanceLevel,
    Platform,
    PlatformLike,
    platform_label,
    resolve_platform,
)

logger = logging.getLogger(__name__)

CONTENT_WEIGHT = 0.40
PLATFORM_WEIGHT = 0.25
AUDIENCE_WEIGHT = 0.20
QUALITY_WEIGHT = 0.15

RELATED_KEYWORDS: Dict[str, List[str]] = {
    "tech": ["technology", "software", "digital", "computer", "programming"],
    "food": ["cooking", "recipe", "restaurant", "cuisine", "meal"],
    "travel": ["vacation", "trip", "journey", "adventure", "destination"],
    "fitness": ["workout", "exercise", "health", "gym", "training"],
    "fashion": ["style", "clothing", "outfit", "trend", "wear"],
    "business": ["startup", "entrepreneur", "company", "corporate", "industry"],
    "music": ["song", "album", "artist", "concert", "melody"],
    "art": ["creative", "design", "painting", "drawing", "artistic"],
    "gaming": ["game", "player", "video", "console", "esports"],
    "sports": ["athlete", "competition", "match", "team", "player"],
}

AGE_GROUPS = ["teen", "young", "adult", "mature", "senior", "genz", "millennial", "genx", "boomer"]
INTERESTS = ["tech", "fashion", "food", "travel", "fitness", "music", "art", "gaming", "sports"]
PROFESSIONAL_TERMS = ["business", "career", "startup", "entrepreneur", "marketing", "finance"]
GEO_TERMS = ["global", "local", "city", "country", "international", "regional"]

QUALITY_SPAM_INDICATORS = ["follow", "like", "comment", "share", "tagsforlikes", "instagood"]
TAG_SPAM_INDICATORS = ["follow", "like", "comment", "share", "tagsforlikes"]
SET_SPAM_INDICATORS = ["tagsforlikes", "follow4follow", "like4like", "instagood"]
COMMON_WORDS = {"the", "and", "for", "with", "best", "good", "new", "top"}

TRENDING_MARKERS = ("trending", "viral", "fyp", "hot")
NICHE_MARKERS = ("community", "niche", "specific")
BROAD_HASHTAGS = {
    "love", "instagood", "photooftheday", "fashion", "beautiful", "happy", "cute", "followme",
}

PLATFORM_CATEGORY_MARKERS: Dict[Platform, List[Tuple[Tuple[str, ...], HashtagCategory]]] = {
    Platform.INSTAGRAM: [
        (("reels", "igtv", "story"), HashtagCategory.INSTAGRAM),
    ],
    Platform.TIKTOK: [
        (("duet", "stitch", "challenge", "trend"), HashtagCategory.TIKTOK),
    ],
    Platform.LINKEDIN: [
        (("professional", "career"), HashtagCategory.PROFESSIONAL),
        (("business", "industry"), HashtagCategory.BUSINESS),
    ],
}

CONTENT_CATEGORY_MARKERS: List[Tuple[Tuple[str, ...], HashtagCategory]] = [
    (("tutorial", "howto", "guide", "tips", "learn"), HashtagCategory.EDUCATIONAL),
    (("funny", "meme", "humor", "lol", "comedy"), HashtagCategory.ENTERTAINMENT),
    (("motivation", "inspiration", "success", "goals"), HashtagCategory.INSPIRATIONAL),
]

_LETTERS = re.compile(r"[a-z]+")
_ALNUM = re.compile(r"[a-z0-9]+")
_SUBWORD_SPLIT = re.compile(r"[\s_-]")
_HASHTAG_PATTERN = re.compile(r"#\w+")


class HashtagCountRange(NamedTuple):
    min: int
    max: int
    ideal: int


OPTIMAL_COUNTS: Dict[Platform, HashtagCountRange] = {
    Platform.INSTAGRAM: HashtagCountRange(5, 30, 15),
    Platform.TIKTOK: HashtagCountRange(3, 10, 5),
    Platform.TWITTER: HashtagCountRange(1, 3, 2),
    Platform.LINKEDIN: HashtagCountRange(3, 10, 5),
    Platform.YOUTUBE: HashtagCountRange(3, 15, 8),
}


@dataclass(frozen=True)
class _PlatformRule:
    sweet_spot: Tuple[int, int]
    acceptable: Optional[Tuple[int, int]] = None
    sweet_bonus: int = 30
    acceptable_bonus: int = 15
    markers: Tuple[str, ...] = ()
    marker_bonus: int = 0
    charset: Optional[re.Pattern] = None
    charset_bonus: int = 0


PLATFORM_RULES: Dict[Platform, _PlatformRule] = {
    Platform.INSTAGRAM: _PlatformRule(
        sweet_spot=(5, 20), acceptable=(3, 25),
        markers=("trending", "viral"), marker_bonus=10,
        charset=_LETTERS, charset_bonus=10,
    ),
    Platform.TIKTOK: _PlatformRule(
        sweet_spot=(3, 15), acceptable=(0, 20),
        markers=("fyp", "viral", "trending"), marker_bonus=15,
        charset=_ALNUM, charset_bonus=5,
    ),
    Platform.TWITTER: _PlatformRule(
        sweet_spot=(0, 10), acceptable=(0, 15),
        charset=_LETTERS, charset_bonus=10,
    ),
    Platform.LINKEDIN: _PlatformRule(
        sweet_spot=(8, 25), acceptable=(5, 30),
        markers=("business", "professional", "career", "industry"), marker_bonus=10,
    ),
    Platform.YOUTUBE: _PlatformRule(
        sweet_spot=(5, 25), acceptable=(3, 30),
        markers=("tutorial", "review", "guide", "howto"), marker_bonus=10,
    ),
}
GENERIC_PLATFORM_RULE = _PlatformRule(sweet_spot=(5, 20), sweet_bonus=20)


def _tag_text(hashtag: str) -> str:
    """Lowercased tag with its first '#' removed."""
    return (hashtag or "").lower().replace("#", "", 1)


def _contains_any(text: str, needles: Sequence[str]) -> bool:
    return any(needle in text for needle in needles)


def normalize_hashtag(hashtag: str) -> str:
    text = re.sub(r"^#+", "", hashtag or "")
    text = re.sub(r"[^a-zA-Z0-9\s_-]", "", text)
    text = re.sub(r"\s+", "", text)
    return text.lower()


def extract_hashtags(text: str) -> List[str]:
    return _HASHTAG_PATTERN.findall(text or "")


def content_relevance_score(hashtag: str, content: str) -> int:
    if not content:
        return 30

    content_lower = content.lower()
    tag = _tag_text(hashtag)
    score = 30

    if tag in content_lower:
        score += 40

    words = content_lower.split()
    for part in _SUBWORD_SPLIT.split(tag):
        if part in words:
            score += 15

    for key, related in RELATED_KEYWORDS.items():
        if key in tag:
            score += 5 * sum(1 for keyword in related if keyword in content_lower)

    return min(score, 100)


def platform_optimization_score(hashtag: str, platform: PlatformLike) -> int:
    tag = _tag_text(hashtag)
    length = len(tag)
    rule = PLATFORM_RULES.get(resolve_platform(platform), GENERIC_PLATFORM_RULE)
    score = 50

    low, high = rule.sweet_spot
    if low <= length <= high:
        score += rule.sweet_bonus
    elif rule.acceptable and rule.acceptable[0] <= length <= rule.acceptable[1]:
        score += rule.acceptable_bonus

    if rule.markers and _contains_any(tag, rule.markers):
        score += rule.marker_bonus
    if rule.charset is not None and rule.charset.fullmatch(tag):
        score += rule.charset_bonus

    return min(score, 100)


def audience_targeting_score(hashtag: str, target_audience: Optional[str] = None) -> int:
    if not target_audience:
        return 50

    audience = target_audience.lower()
    tag = _tag_text(hashtag)
    score = 30

    for terms, bonus in (
        (AGE_GROUPS, 20),
        (INTERESTS, 15),
        (PROFESSIONAL_TERMS, 15),
        (GEO_TERMS, 10),
    ):
        score += bonus * sum(1 for term in terms if term in audience and term in tag)

    return min(score, 100)


def quality_score(hashtag: str) -> int:
    tag = _tag_text(hashtag)
    score = 50

    if 3 <= len(tag) <= 20:
        score += 20
    elif 2 <= len(tag) <= 25:
        score += 10

    if _LETTERS.fullmatch(tag):
        score += 15
    elif _ALNUM.fullmatch(tag):
        score += 10
    elif "_" in tag or "-" in tag:
        score += 5

    if not _contains_any(tag, QUALITY_SPAM_INDICATORS):
        score += 15

    if tag not in COMMON_WORDS and len(tag) > 4:
        score += 10

    return min(score, 100)


def performance_level(score: int) -> PerformanceLevel:
    if score >= 80:
        return PerformanceLevel.HIGH
    if score >= 60:
        return PerformanceLevel.MEDIUM
    return PerformanceLevel.LOW


class HashtagScorer:
    """Scores hashtags against one piece of content on one platform."""

    def __init__(
        self,
        content: str = "",
        platform: PlatformLike = None,
        target_audience: Optional[str] = None,
    ):
        self.content = content or ""
        self.platform = resolve_platform(platform)
        self.platform_name = platform_label(platform)
        self.target_audience = target_audience

    def score_breakdown(self, hashtag: str) -> HashtagScoreBreakdown:
        content = content_relevance_score(hashtag, self.content)
        platform = platform_optimization_score(hashtag, self.platform)
        audience = audience_targeting_score(hashtag, self.target_audience)
        quality = quality_score(hashtag)

        overall = (
            content * CONTENT_WEIGHT
            + platform * PLATFORM_WEIGHT
            + audience * AUDIENCE_WEIGHT
            + quality * QUALITY_WEIGHT
        )
        return HashtagScoreBreakdown(
            content_relevance=content,
            platform_optimization=platform,
            audience_targeting=audience,
            quality=quality,
            overall_score=clip_score(overall),
        )

    def relevance_score(self, hashtag: str) -> int:
        return self.score_breakdown(hashtag).overall_score

    def categorize(self, hashtag: str) -> HashtagCategory:
        """First matching rule wins."""
        tag = _tag_text(hashtag)

        if _contains_any(tag, TRENDING_MARKERS):
            return HashtagCategory.TRENDING
        if len(tag) > 15 or _contains_any(tag, NICHE_MARKERS):
            return HashtagCategory.NICHE
        if tag in BROAD_HASHTAGS:
            return HashtagCategory.BROAD

        for markers, category in PLATFORM_CATEGORY_MARKERS.get(self.platform, []):
            if _contains_any(tag, markers):
                return category

        for markers, category in CONTENT_CATEGORY_MARKERS:
            if _contains_any(tag, markers):
                return category

        return HashtagCategory.GENERAL

    def analyze_hashtag(self, hashtag: str) -> HashtagAnalysis:
        """Score one tag and explain what is holding it back."""
        tag = normalize_hashtag(hashtag)
        breakdown = self.score_breakdown(tag)
        score = breakdown.overall_score
        category = self.categorize(tag)

        return HashtagAnalysis(
            hashtag=f"#{tag}",
            score=score,
            category=category,
            performance=performance_level(score),
            breakdown=breakdown,
            issues=self._hashtag_issues(tag, score, category),
            recommendation=self._hashtag_recommendation(score, category),
        )

    def analyze_set(self, hashtags: Sequence[str]) -> HashtagSetAnalysis:
        analyses = [
            (hashtag, self.relevance_score(hashtag), self.categorize(hashtag))
            for hashtag in hashtags
        ]

        distribution: Dict[str, int] = {}
        for _, _, category in analyses:
            distribution[category.value] = distribution.get(category.value, 0) + 1

        mean_score = mean_or_zero(score for _, score, _ in analyses)
        result = HashtagSetAnalysis(
            total_score=clip_score(mean_score),
            category_distribution=distribution,
            trending_count=distribution.get(HashtagCategory.TRENDING.value, 0),
            niche_count=distribution.get(HashtagCategory.NICHE.value, 0),
            broad_count=distribution.get(HashtagCategory.BROAD.value, 0),
            recommendations=self._set_recommendations(analyses, distribution),
            issues=self._set_issues(analyses, mean_score),
        )
        logger.debug(
            "hashtag set scored platform=%s count=%s total=%s",
            self.platform_name, len(analyses), result.total_score,
        )
        return result

    def _hashtag_issues(self, tag: str, score: int, category: HashtagCategory) -> List[str]:
        issues = []
        if score < 50:
            issues.append("Low relevance score")
        if len(tag) < 3:
            issues.append("Too short")
        elif len(tag) > 20:
            issues.append("Too long")
        if re.search(r"\d", tag):
            issues.append("Contains numbers (may reduce readability)")
        if _contains_any(tag, TAG_SPAM_INDICATORS):
            issues.append("Appears spam-like")
        if category == HashtagCategory.BROAD and score < 60:
            issues.append("Broad hashtag with low relevance")
        return issues

    def _hashtag_recommendation(self, score: int, category: HashtagCategory) -> str:
        if score >= 80:
            return "Keep - high performing hashtag"
        if score < 50:
            return "Consider replacing with more relevant hashtag"
        if category == HashtagCategory.BROAD:
            return "Consider adding more specific hashtags"
        if category == HashtagCategory.NICHE and score < 60:
            return "May be too niche for broad reach"
        return "Monitor performance and adjust as needed"

    def _set_recommendations(
        self,
        analyses: List[Tuple[str, int, HashtagCategory]],
        distribution: Dict[str, int],
    ) -> List[str]:
        recommendations = []
        total = len(analyses)
        optimal = OPTIMAL_COUNTS.get(self.platform, OPTIMAL_COUNTS[Platform.INSTAGRAM])

        if total < optimal.min:
            recommendations.append(
                f"Add more hashtags (aim for {optimal.ideal}-{optimal.max} for {self.platform_name})"
            )
        elif total > optimal.max:
            recommendations.append(
                f"Reduce hashtags to {optimal.max} or fewer for better engagement on {self.platform_name}"
            )

        if not distribution.get(HashtagCategory.TRENDING.value):
            recommendations.append("Include 1-2 trending hashtags to increase discoverability")
        if not distribution.get(HashtagCategory.NICHE.value):
            recommendations.append("Add niche hashtags to target specific audiences")
        if distribution.get(HashtagCategory.BROAD.value, 0) > total * 0.5:
            recommendations.append("Reduce broad hashtags and add more specific, relevant tags")

        low_scoring = [hashtag for hashtag, score, _ in analyses if score < 60]
        if low_scoring:
            recommendations.append(
                f"Improve or replace low-scoring hashtags: {', '.join(low_scoring)}"
            )
        return recommendations

    def _set_issues(
        self,
        analyses: List[Tuple[str, int, HashtagCategory]],
        mean_score: float,
    ) -> List[str]:
        issues = []

        # An empty set has no relevance to judge; count guidance still applies.
        if analyses and mean_score < 60:
            issues.append("Overall hashtag relevance is low - consider revising your hashtag strategy")

        texts = [hashtag.lower() for hashtag, _, _ in analyses]
        if len(set(texts)) < len(texts):
            issues.append("Remove duplicate or very similar hashtags")

        if any(_contains_any(text, SET_SPAM_INDICATORS) for text in texts):
            issues.append("Remove spam-like hashtags that may reduce engagement")

        count = len(analyses)
        if self.platform == Platform.INSTAGRAM and count < 5:
            issues.append("Instagram performs best with 5-30 hashtags per post")
        elif self.platform == Platform.TIKTOK and count > 10:
            issues.append("TikTok works best with fewer, more targeted hashtags (3-5 is optimal)")
        elif self.platform == Platform.TWITTER and count > 3:
            issues.append("Twitter has character limits - use 1-3 highly relevant hashtags")
        return issues


def category_breakdown(analyses: Sequence[HashtagAnalysis]) -> Dict[str, CategoryEffectiveness]:
    """Count and effectiveness for the trending / niche / broad buckets."""
    breakdown = {}
    for category in (HashtagCategory.TRENDING, HashtagCategory.NICHE, HashtagCategory.BROAD):
        scores = [a.score for a in analyses if a.category == category]
        effectiveness = PerformanceLevel.LOW
        if scores:
            avg = mean_or_zero(scores)
            if avg >= 70:
                effectiveness = PerformanceLevel.HIGH
            elif avg >= 50:
                effectiveness = PerformanceLevel.MEDIUM
        breakdown[category.value] = CategoryEffectiveness(count=len(scores), effectiveness=effectiveness)
    return breakdown


def calculate_relevance_score(
    hashtag: str,
    content: str,
    platform: PlatformLike,
    target_audience: Optional[str] = None,
) -> int:
    return HashtagScorer(content, platform, target_audience).relevance_score(hashtag)


def categorize_hashtag(hashtag: str, platform: PlatformLike) -> HashtagCategory:
    return HashtagScorer(platform=platform).categorize(hashtag)


def analyze_hashtag_set(
    hashtags: Sequence[str],
    content: str,
    platform: PlatformLike,
    target_audience: Optional[str] = None,
) -> HashtagSetAnalysis:
    return HashtagScorer(content, platform, target_audience).analyze_set(hashtags)
