"""
Custom rulebook: hand-authored, highest-precedence interaction levels

Purpose: pin the interaction level of specific medicines against every pill component, whatever RxNav
or the rule overlay say, and provide canned symptom advice for those medicines without any AI.

Input: pill components + the user's medications (+ symptom text for advice)

Output: CustomRule InteractionRecords, the forced level per normalized name, SymptomAdvice items

Example: meds=["Advil"] → Advil vs Ethinyl Estradiol → LOW (source "CustomRule")

Notes: a rulebook record wins the merge for its pair even when its level is lower than the
competing record. "low" entries still produce records; they are only excluded from the advice list.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping

from models import RULEBOOK_SOURCE, InteractionRecord, SymptomAdvice
from normalizer import normalize_drug_name, readable
from severity import SeverityLevel, coerce_level

FORCE_LEVELS: Dict[str, str] = {
    "rifampin": "high",
    "topiramate": "moderate",
    "ibuprofen": "low",
    "ferrous sulfate": "moderate",
    "ferrous gluconate": "moderate",
    "ferrous fumarate": "moderate",
    "iron": "moderate",
}


def _iron_advice() -> dict:
    return {
        "reason": "Iron salts often cause GI upset and can affect absorption of other medicines.",
        "keywords": ["nausea", "constipation", "stomach", "cramp", "abdominal", "pain"],
        "tips": [
            "Take with food if your stomach is upset (unless told otherwise).",
            "Separate iron from other medicines by ~2 hours to reduce absorption issues.",
            "Increase fluids and fiber if constipated.",
        ],
    }


ADVICE: Dict[str, dict] = {
    "rifampin": {
        "reason": "Rifampin induces liver enzymes and can lower contraceptive hormone levels.",
        "keywords": ["spotting", "breakthrough", "bleeding", "breast", "tenderness", "nausea", "headache"],
        "tips": [
            "Use a backup method (e.g., condoms) while on rifampin; confirm timing with your clinician.",
            "Track unexpected bleeding or cycle changes.",
            "If you miss pills or have GI illness, follow your pill's missed-dose instructions.",
        ],
    },
    "topiramate": {
        "reason": "Topiramate can reduce hormone exposure at higher doses and can cause headache or dizziness.",
        "keywords": ["headache", "dizzy", "dizziness", "fatigue", "nausea", "mood"],
        "tips": [
            "Hydrate regularly and avoid alcohol when symptomatic.",
            "Taking in the evening may help; confirm dose/timing with your prescriber.",
            "If symptoms persist or dose ≥100 mg/day, consider backup contraception and consult your clinician.",
        ],
    },
    "ferrous sulfate": _iron_advice(),
    "ferrous gluconate": _iron_advice(),
    "ferrous fumarate": _iron_advice(),
    "iron": _iron_advice(),
}


@dataclass
class RulebookResult:
    records: List[InteractionRecord]
    forced_levels: Dict[str, SeverityLevel]


class CustomRulebook:
    def __init__(self, force_levels: Mapping[str, str] = FORCE_LEVELS, advice: Mapping[str, dict] = ADVICE):
        # keys are normalized on load so lookups and the table always agree
        self.force_levels: Dict[str, SeverityLevel] = {
            normalize_drug_name(name): coerce_level(level) for name, level in force_levels.items()
        }
        self.advice: Dict[str, dict] = {normalize_drug_name(name): entry for name, entry in advice.items()}

    def level_for(self, med: str):
        return self.force_levels.get(normalize_drug_name(med))

    def apply(self, pill_components: Iterable[str], meds: Iterable[str]) -> RulebookResult:
        components = [c for c in pill_components if c and c.strip()]
        records: List[InteractionRecord] = []
        forced: Dict[str, SeverityLevel] = {}

        for raw in meds:
            norm = normalize_drug_name(raw)
            level = self.force_levels.get(norm)
            if level is None:
                continue
            forced[norm] = level
            for component in components:
                a, b = readable(raw.strip()), readable(component.strip())
                records.append(InteractionRecord(
                    drug_a=a,
                    drug_b=b,
                    level=level,
                    source=RULEBOOK_SOURCE,
                    description=f"Set by rulebook for demo purposes: {a} vs {b} → {level.value.upper()}.",
                ))
        return RulebookResult(records=records, forced_levels=forced)

    def build_symptom_advice(
        self,
        symptoms_text: str,
        meds: Iterable[str],
        forced_levels: Mapping[str, SeverityLevel],
        pill_components: Iterable[str] = (),
    ) -> List[SymptomAdvice]:
        """
        Keyword-only advice (no embeddings, no LLM).

        A medicine gets advice when its forced level is above low, it has an advice entry, and either
        no symptoms were given (generic guidance) or at least one of its keywords appears in the text.
        """
        text = (symptoms_text or "").strip().lower()
        pill = " + ".join(readable(c) for c in pill_components)
        out: List[SymptomAdvice] = []

        for raw in meds:
            norm = normalize_drug_name(raw)
            level = forced_levels.get(norm)
            if level is None or level == SeverityLevel.low:
                continue
            book = self.advice.get(norm)
            if not book:
                continue
            matched = [k for k in book.get("keywords", []) if k in text]
            if text and not matched:
                continue
            out.append(SymptomAdvice(
                drug=readable(raw.strip()),
                level=level,
                reason=book["reason"],
                matches=matched,
                tips=list(book.get("tips", [])),
                pill=pill,
            ))
        return out
