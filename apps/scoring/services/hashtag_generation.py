"""Hashtag generation: parse the model's suggestions and re-score them locally."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from config import settings
from analysis.hashtags import HashtagScorer, normalize_hashtag
from analysis.models import HashtagCategory, HashtagSetAnalysis, Platform, PlatformLike, resolve_platform
from services.llm_sections import SectionParser, content_lines, labelled_values

logger = logging.getLogger(__name__)

HASHTAG_GROUPS = ("trending", "niche", "broad")

DEFAULT_HASHTAG_COUNTS: Dict[Platform, int] = {
    Platform.INSTAGRAM: 15,
    Platform.TIKTOK: 5,
    Platform.TWITTER: 2,
    Platform.LINKEDIN: 5,
    Platform.YOUTUBE: 8,
}
FALLBACK_HASHTAG_COUNT = 10

GENERATION_GRAMMAR = SectionParser(
    ["CONTENT_ANALYSIS", "HASHTAGS", "OPTIMIZATION_TIPS", "PERFORMANCE_PREDICTION"],
    name="hashtag generation response",
)

_GROUP_HEADERS = {"TRENDING:": "trending", "NICHE:": "niche", "BROAD:": "broad"}
_SUGGESTION_LINE = re.compile(
    r"^\d+\.\s*(#\w+)\s*-\s*Relevance:\s*(\d+)/100\s*-\s*Reason:\s*(.+)$"
)


@dataclass(frozen=True)
class SuggestedHashtag:
    hashtag: str
    relevance_score: int
    reason: str


@dataclass
class ContentAnalysis:
    main_themes: List[str] = field(default_factory=list)
    target_audience: str = ""
    content_type: str = ""
    emotional_tone: str = ""


@dataclass
class PerformancePrediction:
    estimated_reach: str = ""
    engagement_potential: str = ""
    best_posting_time: str = ""


@dataclass
class HashtagGenerationResponse:
    content_analysis: ContentAnalysis
    hashtags: Dict[str, List[SuggestedHashtag]]
    optimization_tips: List[str]
    performance_prediction: PerformancePrediction
    missing_sections: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CuratedHashtag:
    hashtag: str
    relevance_score: int
    category: HashtagCategory
    reason: str


@dataclass
class CuratedHashtags:
    groups: Dict[str, List[CuratedHashtag]]
    analysis: HashtagSetAnalysis
    dropped: List[str] = field(default_factory=list)

    @property
    def hashtags(self) -> List[str]:
        return [h.hashtag for group in HASHTAG_GROUPS for h in self.groups[group]]


def default_hashtag_count(platform: PlatformLike) -> int:
    return DEFAULT_HASHTAG_COUNTS.get(resolve_platform(platform), FALLBACK_HASHTAG_COUNT)


def _parse_content_analysis(body: str) -> ContentAnalysis:
    values = labelled_values(body, {
        "Main themes": "main_themes",
        "Target audience": "target_audience",
        "Content type": "content_type",
        "Emotional tone": "emotional_tone",
    })
    themes = [t.strip() for t in values.pop("main_themes").split(",") if t.strip()]
    return ContentAnalysis(main_themes=themes, **values)


def _parse_suggestions(body: str) -> Dict[str, List[SuggestedHashtag]]:
    groups: Dict[str, List[SuggestedHashtag]] = {g: [] for g in HASHTAG_GROUPS}
    current = None
    for raw in body.splitlines():
        line = raw.strip()
        if line in _GROUP_HEADERS:
            current = _GROUP_HEADERS[line]
            continue
        if current is None:
            continue
        match = _SUGGESTION_LINE.match(line)
        if match:
            groups[current].append(SuggestedHashtag(
                hashtag=match.group(1),
                relevance_score=int(match.group(2)),
                reason=match.group(3).strip(),
            ))
    return groups


def _parse_prediction(body: str) -> PerformancePrediction:
    return PerformancePrediction(**labelled_values(body, {
        "Estimated reach": "estimated_reach",
        "Engagement potential": "engagement_potential",
        "Best posting time": "best_posting_time",
    }))


def parse_hashtag_generation(text: str) -> HashtagGenerationResponse:
    """Parse a generation response; raises SectionParseError when nothing is recognisable."""
    parsed = GENERATION_GRAMMAR.parse(text)
    return HashtagGenerationResponse(
        content_analysis=_parse_content_analysis(parsed.get("CONTENT_ANALYSIS")),
        hashtags=_parse_suggestions(parsed.get("HASHTAGS")),
        optimization_tips=content_lines(parsed.get("OPTIMIZATION_TIPS")),
        performance_prediction=_parse_prediction(parsed.get("PERFORMANCE_PREDICTION")),
        missing_sections=parsed.missing,
    )


def curate_generated_hashtags(
    response: HashtagGenerationResponse,
    content: str,
    platform: PlatformLike,
    target_audience: Optional[str] = None,
    min_relevance: Optional[int] = None,
) -> CuratedHashtags:
    """Re-score suggestions, drop duplicates and weak tags, regroup by category.

    Tags whose local category is not trending, niche or broad are dropped too.

    The model's own relevance numbers are ignored; only local scores count.
    """
    floor = settings.HASHTAG_MIN_RELEVANCE if min_relevance is None else min_relevance
    scorer = HashtagScorer(content, platform, target_audience)

    seen = set()
    kept: List[CuratedHashtag] = []
    dropped: List[str] = []
    for group in HASHTAG_GROUPS:
        for suggestion in response.hashtags.get(group, []):
            tag = normalize_hashtag(suggestion.hashtag)
            if not tag or tag in seen:
                dropped.append(suggestion.hashtag)
                continue
            seen.add(tag)

            score = scorer.relevance_score(suggestion.hashtag)
            if score < floor:
                dropped.append(suggestion.hashtag)
                continue
            category = scorer.categorize(suggestion.hashtag)
            if category.value not in HASHTAG_GROUPS:
                dropped.append(suggestion.hashtag)
                continue
            kept.append(CuratedHashtag(
                hashtag=tag,
                relevance_score=score,
                category=category,
                reason=suggestion.reason,
            ))

    groups = {
        group: [h for h in kept if h.category.value == group]
        for group in HASHTAG_GROUPS
    }
    final = [h.hashtag for group in HASHTAG_GROUPS for h in groups[group]]
    if dropped:
        logger.info("Dropped %s generated hashtags (duplicate, below %s or ungrouped)", len(dropped), floor)

    return CuratedHashtags(groups=groups, analysis=scorer.analyze_set(final), dropped=dropped)
