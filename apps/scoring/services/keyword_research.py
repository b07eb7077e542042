"""Keyword research: parse the model's keyword lists and rate difficulty."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from config import settings
from analysis.seo import extract_keywords
from services.llm_sections import SectionParser, content_lines

DEFAULT_STRATEGY = "Focus on relevant keywords with good search volume"

KEYWORD_GRAMMAR = SectionParser(
    [
        "PRIMARY_KEYWORDS",
        "SECONDARY_KEYWORDS",
        "LONG_TAIL_KEYWORDS",
        "TRENDING_KEYWORDS",
        "KEYWORD_STRATEGY",
        "CONTENT_GAPS",
    ],
    name="keyword research response",
)

_LEVEL_POINTS = {"high": 3, "medium": 2}
_NUMBERED = re.compile(r"^\d+\.")
_KEYWORD_LINE = re.compile(
    r"^\d+\.\s*(.+?)\s*-\s*Volume:\s*(\w+)\s*-\s*Competition:\s*(\w+)\s*-\s*Trend:\s*(\w+)"
)
_TRENDING_LINE = re.compile(r"^\d+\.\s*(.+?)\s*-\s*Reason for trend:\s*(.+)$")


@dataclass(frozen=True)
class KeywordSuggestion:
    keyword: str
    volume: str
    competition: str
    trend: str
    difficulty: int
    reason: str = ""


@dataclass
class KeywordResearch:
    primary: List[KeywordSuggestion] = field(default_factory=list)
    secondary: List[KeywordSuggestion] = field(default_factory=list)
    long_tail: List[KeywordSuggestion] = field(default_factory=list)
    trending: List[KeywordSuggestion] = field(default_factory=list)
    strategy: str = DEFAULT_STRATEGY
    content_gaps: List[str] = field(default_factory=list)
    missing_sections: List[str] = field(default_factory=list)


def keyword_difficulty(volume: str, competition: str) -> int:
    """1 (easy) .. 10 (hard): competition counts double, volume offsets it."""
    volume_points = _LEVEL_POINTS.get(volume.lower(), 1)
    competition_points = _LEVEL_POINTS.get(competition.lower(), 1)
    raw = competition_points * 2 - volume_points
    return max(1, min(10, raw * 2))


def _parse_keyword_list(body: str) -> List[KeywordSuggestion]:
    keywords = []
    for raw in body.splitlines():
        line = raw.strip()
        if not _NUMBERED.match(line):
            continue
        match = _KEYWORD_LINE.match(line)
        if not match:
            continue
        volume, competition, trend = (g.lower() for g in match.group(2, 3, 4))
        keywords.append(KeywordSuggestion(
            keyword=match.group(1).strip(),
            volume=volume,
            competition=competition,
            trend=trend,
            difficulty=keyword_difficulty(volume, competition),
        ))
    return keywords


def _parse_trending(body: str) -> List[KeywordSuggestion]:
    keywords = []
    for raw in body.splitlines():
        match = _TRENDING_LINE.match(raw.strip())
        if match:
            keywords.append(KeywordSuggestion(
                keyword=match.group(1).strip(),
                volume="high",
                competition="high",
                trend="rising",
                difficulty=keyword_difficulty("high", "high"),
                reason=match.group(2).strip(),
            ))
    return keywords


def seed_keywords(content: str, niche: str = "", limit: Optional[int] = None) -> List[str]:
    """Keywords to seed a research prompt: the niche first, then frequent content terms."""
    limit = settings.KEYWORD_EXTRACTION_LIMIT if limit is None else limit
    seeds = [niche.strip().lower()] if niche and niche.strip() else []
    for keyword in extract_keywords(content, limit):
        if keyword not in seeds:
            seeds.append(keyword)
    return seeds[:limit]


def parse_keyword_research(text: str) -> KeywordResearch:
    parsed = KEYWORD_GRAMMAR.parse(text)
    return KeywordResearch(
        primary=_parse_keyword_list(parsed.get("PRIMARY_KEYWORDS")),
        secondary=_parse_keyword_list(parsed.get("SECONDARY_KEYWORDS")),
        long_tail=_parse_keyword_list(parsed.get("LONG_TAIL_KEYWORDS")),
        trending=_parse_trending(parsed.get("TRENDING_KEYWORDS")),
        strategy=parsed.get("KEYWORD_STRATEGY") or DEFAULT_STRATEGY,
        content_gaps=content_lines(parsed.get("CONTENT_GAPS")),
        missing_sections=parsed.missing,
    )
