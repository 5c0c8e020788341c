"""
Request scoped data records shared by the interaction engines.

Everything here is built fresh per request and thrown away once the response is serialised.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from severity import SeverityLevel

RULEBOOK_SOURCE = "CustomRule"
RULE_SOURCE = "Rule"
PROVIDER_SOURCE = "RxNav"


@dataclass
class RawInteraction:
    """One pairwise interaction exactly as the provider reported it (severity still free text)."""
    drug_a: str
    drug_b: str
    severity: str
    description: str
    source: str = PROVIDER_SOURCE


@dataclass
class InteractionRecord:
    drug_a: str
    drug_b: str
    level: SeverityLevel
    source: str
    description: str
    label_notes: Optional[str] = None

    @property
    def from_rulebook(self) -> bool:
        return self.source == RULEBOOK_SOURCE

    def to_dict(self) -> Dict[str, object]:
        out = {
            "drugA": self.drug_a,
            "drugB": self.drug_b,
            "level": self.level.value,
            "source": self.source,
            "description": self.description,
        }
        if self.label_notes:
            out["labelNotes"] = self.label_notes
        return out


@dataclass
class MergeResult:
    records: List[InteractionRecord]
    overall_level: SeverityLevel


@dataclass
class AttributionRecord:
    """A label snippet that may explain the reported symptom, scored by similarity."""
    drug: str
    section: str
    score: float
    level: SeverityLevel
    text: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "drug": self.drug,
            "section": self.section,
            "score": self.score,
            "level": self.level.value,
            "text": self.text,
        }


@dataclass
class SymptomAdvice:
    drug: str
    level: SeverityLevel
    reason: str
    matches: List[str] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)
    pill: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "drug": self.drug,
            "level": self.level.value,
            "reason": self.reason,
            "matches": list(self.matches),
            "tips": list(self.tips),
            "pill": self.pill,
        }
