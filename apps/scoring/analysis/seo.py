"""
SEO scoring for titles and descriptions.

title       = 30% length + 25% keywords + 20% engagement  + 25% platform fit
description = 25% length + 30% keywords + 25% readability + 20% platform fit
"""

import logging
import re
from collections import Counter
from typing import Dict, List, NamedTuple, Optional, Sequence

from .common import clip_score, round_half_up
from .models import (
    ContentKind,
    Platform,
    PlatformLike,
    SeoAnalysisResult,
    SeoScoreBreakdown,
    platform_label,
    resolve_platform,
)

logger = logging.getLogger(__name__)


class LengthWindow(NamedTuple):
    min: int
    max: int
    optimal: int


# optimal == 0 means the platform has no such field (e.g. Instagram titles).
LENGTH_LIMITS: Dict[Platform, Dict[ContentKind, LengthWindow]] = {
    Platform.YOUTUBE: {
        ContentKind.TITLE: LengthWindow(30, 60, 50),
        ContentKind.DESCRIPTION: LengthWindow(100, 5000, 150),
    },
    Platform.INSTAGRAM: {
        ContentKind.TITLE: LengthWindow(0, 0, 0),
        ContentKind.DESCRIPTION: LengthWindow(50, 2200, 125),
    },
    Platform.TIKTOK: {
        ContentKind.TITLE: LengthWindow(30, 100, 70),
        ContentKind.DESCRIPTION: LengthWindow(50, 150, 100),
    },
    Platform.LINKEDIN: {
        ContentKind.TITLE: LengthWindow(0, 0, 0),
        ContentKind.DESCRIPTION: LengthWindow(100, 1300, 300),
    },
    Platform.TWITTER: {
        ContentKind.TITLE: LengthWindow(0, 0, 0),
        ContentKind.DESCRIPTION: LengthWindow(50, 280, 200),
    },
    Platform.BLOG: {
        ContentKind.TITLE: LengthWindow(40, 60, 55),
        ContentKind.DESCRIPTION: LengthWindow(120, 160, 150),
    },
}

EMOTIONAL_WORDS = [
    "amazing", "incredible", "shocking", "surprising", "ultimate", "essential", "critical", "urgent",
]
POWER_WORDS = ["how", "why", "what", "when", "where", "guide", "tutorial", "tips", "secrets", "hacks"]

STOP_WORDS = {
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
    "will", "would", "could", "should", "may", "might", "must", "can", "this", "that", "these", "those",
    "i", "you", "he", "she", "it", "we", "they", "me", "him", "her", "us", "them",
}

_YEAR = re.compile(r"\b20\d{2}\b")
_LISTICLE = re.compile(
    r"\b\d+\s*(ways|tips|steps|methods|techniques|reasons|facts|secrets)\b", re.IGNORECASE
)
_MENTION = re.compile(r"@[a-zA-Z0-9_]+")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_WHITESPACE = re.compile(r"\s+")
_YOUTUBE_TITLE_TERMS = re.compile(r"\b(how to|tutorial|guide|review|tips|tricks)\b")
_BLOG_TITLE_TERMS = re.compile(r"\b(ultimate|complete|definitive|comprehensive)\b")
_QUESTION_WORDS = re.compile(r"\b(how|why|what|when|where)\b")


def _has_link(text: str) -> bool:
    return "http" in text or "www." in text


def _has_separator(text: str) -> bool:
    return "|" in text or "–" in text


def length_score(text: str, platform: PlatformLike, kind: ContentKind) -> int:
    limits = LENGTH_LIMITS.get(resolve_platform(platform), LENGTH_LIMITS[Platform.BLOG])
    window = limits[ContentKind(kind)]

    if window.optimal == 0:
        return 100

    length = len(text or "")
    if not window.min <= length <= window.max:
        return 0

    deviation = abs(length - window.optimal)
    max_deviation = max(window.optimal - window.min, window.max - window.optimal)
    if max_deviation == 0:
        return 100
    return clip_score(100 - (deviation / max_deviation) * 50)


def keyword_score(text: str, keywords: Sequence[str]) -> int:
    if not keywords:
        return 50

    lower = (text or "").lower()
    present = 0
    total = 0
    for keyword in keywords:
        kw = keyword.lower()
        if kw not in lower:
            continue
        present += 1
        standalone = f" {kw} " in lower or lower.startswith(kw) or lower.endswith(kw)
        total += 100 if standalone else 80

    if present == 0:
        return 0
    return clip_score((total / len(keywords)) * (present / len(keywords)))


def engagement_score(title: str) -> int:
    title = title or ""
    lower = title.lower()
    score = 50

    if re.search(r"\d", title):
        score += 10
    if "?" in title:
        score += 8
    if any(word in lower for word in EMOTIONAL_WORDS):
        score += 8
    if any(word in lower for word in POWER_WORDS):
        score += 8
    if _YEAR.search(title):
        score += 6
    if _LISTICLE.search(title):
        score += 10

    return min(score, 100)


def readability_score(text: str) -> int:
    if not text:
        return 0

    sentences = [s for s in _SENTENCE_SPLIT.split(text) if s.strip()]
    words = text.split()
    if not sentences or not words:
        return 0

    avg_words = len(words) / len(sentences)
    avg_word_length = sum(len(word) for word in words) / len(words)
    score = 50

    if 15 <= avg_words <= 20:
        score += 20
    elif 10 <= avg_words <= 25:
        score += 10

    if 4 <= avg_word_length <= 6:
        score += 20
    elif 3 <= avg_word_length <= 7:
        score += 10

    # Leading whitespace counts as an empty token, matching the sentence split above.
    sentence_lengths = [len(_WHITESPACE.split(sentence)) for sentence in sentences]
    if max(sentence_lengths) - min(sentence_lengths) > 5:
        score += 10

    return min(score, 100)


def platform_score(text: str, platform: PlatformLike, kind: ContentKind) -> int:
    text = text or ""
    lower = text.lower()
    kind = ContentKind(kind)
    resolved = resolve_platform(platform)
    is_title = kind == ContentKind.TITLE
    score = 50

    if resolved == Platform.YOUTUBE:
        if is_title:
            if _has_separator(text):
                score += 10
            if _YOUTUBE_TITLE_TERMS.search(lower):
                score += 15
            if _YEAR.search(lower):
                score += 10
        else:
            if _has_link(text):
                score += 10
            if "#" in text:
                score += 10
            if len(text) > 1000:
                score += 10

    elif resolved == Platform.INSTAGRAM:
        if not is_title:
            if "#" in text:
                score += 15
            if _MENTION.search(text):
                score += 10
            if "\n" in text:
                score += 10

    elif resolved == Platform.TIKTOK:
        if "#" in text:
            score += 15
        if is_title and "?" in text:
            score += 10
        if not is_title and _MENTION.search(text):
            score += 10

    elif resolved == Platform.LINKEDIN:
        if not is_title:
            if _QUESTION_WORDS.search(lower):
                score += 10
            if _has_link(text):
                score += 10
            if len(text) > 500:
                score += 10

    elif resolved == Platform.TWITTER:
        if not is_title:
            if "#" in text:
                score += 15
            if _MENTION.search(text):
                score += 10
            if len(text) <= 280:
                score += 20

    elif resolved == Platform.BLOG:
        if is_title:
            if _has_separator(text):
                score += 10
            if _BLOG_TITLE_TERMS.search(lower):
                score += 15
            if _YEAR.search(lower):
                score += 10
        elif 120 <= len(text) <= 160:
            score += 20

    return min(score, 100)


class ContentSeoScorer:
    """Scores a title/description pair for one platform and keyword set."""

    def __init__(self, platform: PlatformLike = None, keywords: Optional[Sequence[str]] = None):
        self.platform = resolve_platform(platform)
        self.platform_name = platform_label(platform)
        self.keywords = [k for k in (keywords or []) if k]

    def title_score(self, title: str) -> int:
        score = (
            length_score(title, self.platform, ContentKind.TITLE) * 0.30
            + keyword_score(title, self.keywords) * 0.25
            + engagement_score(title) * 0.20
            + platform_score(title, self.platform, ContentKind.TITLE) * 0.25
        )
        return clip_score(score)

    def description_score(self, description: str) -> int:
        score = (
            length_score(description, self.platform, ContentKind.DESCRIPTION) * 0.25
            + keyword_score(description, self.keywords) * 0.30
            + readability_score(description) * 0.25
            + platform_score(description, self.platform, ContentKind.DESCRIPTION) * 0.20
        )
        return clip_score(score)

    def analyze(self, title: str, description: str) -> SeoAnalysisResult:
        title = title or ""
        description = description or ""
        combined = f"{title} {description}"

        title_score = self.title_score(title)
        description_score = self.description_score(description)
        kw_score = keyword_score(combined, self.keywords)
        read_score = readability_score(combined)
        plat_score = round_half_up(
            (
                platform_score(title, self.platform, ContentKind.TITLE)
                + platform_score(description, self.platform, ContentKind.DESCRIPTION)
            ) / 2
        )

        breakdown = SeoScoreBreakdown(
            title_score=title_score,
            description_score=description_score,
            keyword_score=kw_score,
            readability_score=read_score,
            platform_optimization_score=plat_score,
            overall_score=clip_score(
                (title_score + description_score + kw_score + read_score + plat_score) / 5
            ),
        )
        logger.debug(
            "seo analysis platform=%s overall=%s", self.platform_name, breakdown.overall_score
        )
        return SeoAnalysisResult(
            score=breakdown.overall_score,
            breakdown=breakdown,
            recommendations=self._recommendations(breakdown, title, description),
            issues=self._issues(breakdown),
        )

    def _recommendations(
        self, breakdown: SeoScoreBreakdown, title: str, description: str
    ) -> List[str]:
        recommendations = []

        if breakdown.title_score < 70:
            if len(title) < 30:
                recommendations.append("Make your title more descriptive and engaging")
            elif len(title) > 100:
                recommendations.append("Shorten your title to improve readability and click-through rate")
            if not re.search(r"\d", title):
                recommendations.append("Add numbers to your title to increase engagement")
            if "?" not in title and "!" not in title:
                recommendations.append("Consider using questions or emotional triggers in your title")

        if breakdown.description_score < 70:
            if len(description) < 100:
                recommendations.append("Expand your description to provide more value and context")
            if self.keywords and self.keywords[0] not in description:
                recommendations.append("Include your primary keyword in the description")
            if self.platform == Platform.YOUTUBE and "http" not in description:
                recommendations.append("Add relevant links to your description")

        if breakdown.keyword_score < 70:
            recommendations.append(
                "Ensure your target keywords are naturally included in both title and description"
            )
            recommendations.append("Consider using long-tail keywords for better targeting")

        if breakdown.readability_score < 70:
            recommendations.append("Improve readability with shorter sentences and simpler language")
            recommendations.append("Use formatting like line breaks and emojis for better engagement")

        if breakdown.platform_optimization_score < 70:
            recommendations.append(f"Add more platform-specific elements for {self.platform_name}")
            if self.platform in (Platform.INSTAGRAM, Platform.TIKTOK):
                recommendations.append("Include relevant hashtags to increase discoverability")

        return recommendations

    def _issues(self, breakdown: SeoScoreBreakdown) -> List[str]:
        issues = []
        if breakdown.title_score < 50:
            issues.append("Title needs significant improvement for better SEO performance")
        if breakdown.description_score < 50:
            issues.append("Description needs significant improvement for better SEO performance")
        if breakdown.keyword_score < 50:
            issues.append("Poor keyword optimization - target keywords are missing or poorly placed")
        if breakdown.readability_score < 50:
            issues.append("Content readability is poor - may affect user engagement")
        if breakdown.platform_optimization_score < 50:
            issues.append(f"Content is not optimized for {self.platform_name} platform best practices")
        return issues


def extract_keywords(content: str, max_keywords: int = 10) -> List[str]:
    """Most frequent non-stop-words; ties keep first-occurrence order."""
    if not content:
        return []

    cleaned = re.sub(r"[^\w\s]", " ", content.lower())
    words = [w for w in cleaned.split() if len(w) > 2 and w not in STOP_WORDS]
    # Counter keeps insertion order and most_common() sorts stably.
    return [word for word, _ in Counter(words).most_common(max(max_keywords, 0))]


def calculate_title_score(title: str, platform: PlatformLike, keywords: Sequence[str] = ()) -> int:
    return ContentSeoScorer(platform, keywords).title_score(title)


def calculate_description_score(
    description: str, platform: PlatformLike, keywords: Sequence[str] = ()
) -> int:
    return ContentSeoScorer(platform, keywords).description_score(description)


def generate_seo_analysis(
    title: str, description: str, platform: PlatformLike, keywords: Sequence[str] = ()
) -> SeoAnalysisResult:
    return ContentSeoScorer(platform, keywords).analyze(title, description)
