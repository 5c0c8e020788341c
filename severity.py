"""
Severity taxonomy and mappers

Purpose: fold every severity vocabulary we receive (RxNav free text, rulebook wording, embedding
similarity scores) onto one three level scale.

Input: free text ("Contraindicated - major risk"), a float score in [0, 1], or a list of levels.

Output: SeverityLevel.low | SeverityLevel.medium | SeverityLevel.high

Example: severity_to_level("Monitor therapy") → SeverityLevel.medium
"""
from enum import Enum
from typing import Iterable, Optional

import config


class SeverityLevel(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"

    @property
    def rank(self) -> int:
        return _RANK[self]

    def outranks(self, other: "SeverityLevel") -> bool:
        return self.rank > other.rank


_RANK = {SeverityLevel.low: 1, SeverityLevel.medium: 2, SeverityLevel.high: 3}

# Order matters: the first group with a hit wins, so "major" means high whatever else the text says.
_KEYWORD_GROUPS = (
    (SeverityLevel.high, ("high", "contraindicated", "major")),
    (SeverityLevel.medium, ("moderate", "monitor")),
    (SeverityLevel.low, ("minor", "low")),
)


def severity_to_level(text: Optional[str]) -> SeverityLevel:
    """Map free-text severity (RxNav, label wording) to a level. Unrecognised text is low."""
    s = (text or "").lower()
    for level, keywords in _KEYWORD_GROUPS:
        if any(k in s for k in keywords):
            return level
    return SeverityLevel.low


def score_to_level(score: float) -> SeverityLevel:
    """Map an embedding similarity score to a level using the fixed thresholds."""
    if score >= config.HIGH_SCORE_THRESHOLD:
        return SeverityLevel.high
    if score >= config.MEDIUM_SCORE_THRESHOLD:
        return SeverityLevel.medium
    return SeverityLevel.low


def coerce_level(value) -> SeverityLevel:
    if isinstance(value, SeverityLevel):
        return value
    s = str(value or "").strip().lower()
    if s in ("moderate", "medium"):
        return SeverityLevel.medium
    if s in ("high", "low"):
        return SeverityLevel(s)
    return severity_to_level(s)


def max_level(levels: Iterable[SeverityLevel]) -> SeverityLevel:
    best = SeverityLevel.low
    for level in levels:
        if level.outranks(best):
            best = level
    return best
