"""Section parser for bracket-marked LLM responses ([NAME] ... [NEXT] ... ---)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class SectionParseError(ValueError):
    """Raised when a response contains none of the expected sections."""


@dataclass(frozen=True)
class SectionParseResult:
    sections: Dict[str, str]
    missing: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing

    def get(self, name: str, default: str = "") -> str:
        return self.sections.get(name, default)


class SectionParser:
    """Splits a response into the named sections of a fixed grammar.

    A section's body runs from its marker to the next grammar marker that
    appears later in the text, the terminator, or the end of the text.
    """

    def __init__(self, markers: Sequence[str], terminator: Optional[str] = "---", name: str = "response"):
        if not markers:
            raise ValueError("SectionParser needs at least one marker")
        self.markers = [m.strip("[]").upper() for m in markers]
        self.terminator = terminator
        self.name = name

    def _locate(self, text: str) -> List[Tuple[int, int, str]]:
        found = []
        for marker in self.markers:
            match = re.search(re.escape(f"[{marker}]"), text)
            if match:
                found.append((match.start(), match.end(), marker))
        found.sort()
        return found

    def parse(self, text: Optional[str]) -> SectionParseResult:
        if not text or not text.strip():
            raise SectionParseError(f"Empty {self.name}")

        found = self._locate(text)
        if not found:
            raise SectionParseError(f"No sections found in {self.name}")

        sections: Dict[str, str] = {}
        for idx, (_, body_start, marker) in enumerate(found):
            end = found[idx + 1][0] if idx + 1 < len(found) else len(text)
            body = text[body_start:end]
            if self.terminator:
                cut = body.find(self.terminator)
                if cut != -1:
                    body = body[:cut]
            sections[marker] = body.strip()

        missing = [m for m in self.markers if m not in sections]
        if missing:
            logger.warning("%s is missing sections: %s", self.name, ", ".join(missing))
        return SectionParseResult(sections=sections, missing=missing)


def content_lines(body: str) -> List[str]:
    """Non-empty stripped lines, skipping bracketed placeholders."""
    return [line.strip() for line in body.splitlines() if line.strip() and not line.strip().startswith("[")]


def labelled_values(body: str, labels: Dict[str, str]) -> Dict[str, str]:
    """Read "Label: value" lines into the given keys; absent labels map to ""."""
    values = {key: "" for key in labels.values()}
    for line in body.splitlines():
        line = line.strip()
        for label, key in labels.items():
            prefix = f"{label}:"
            if line.startswith(prefix):
                values[key] = line[len(prefix):].strip()
                break
    return values
