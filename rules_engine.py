"""
Deterministic pharmacology rule overlay

Purpose: apply hard rules independent of any external data: when a hormonal pill component meets a
known enzyme inducer, flag the pair as high risk.

Input: pill components (["ethinyl estradiol", "levonorgestrel"]) and the user's medications (["Rifampicin"]).

Output: [InteractionRecord(drug_a="Rifampicin", drug_b="Ethinyl Estradiol", level=high, source="Rule"), ...]

Notes: always run, even when RxNav is down; no I/O, so it cannot fail.
"""
from typing import Dict, FrozenSet, Iterable, List, Optional

from models import RULE_SOURCE, InteractionRecord
from normalizer import normalize_drug_name, readable
from severity import SeverityLevel

HORMONAL_COMPONENTS = frozenset({
    "ethinyl estradiol",
    "levonorgestrel",
    "norethindrone",
    "drospirenone",
})

ENZYME_INDUCERS = frozenset({
    "rifampin",
    "rifampicin",
    "st. john's wort",
    "carbamazepine",
    "phenytoin",
    "topiramate",
})

INDUCTION_NOTE = "Enzyme induction may reduce contraceptive hormone levels and effectiveness."


class RuleOverlay:
    def __init__(
        self,
        hormonal: Iterable[str] = HORMONAL_COMPONENTS,
        inducers: Iterable[str] = ENZYME_INDUCERS,
    ):
        self.hormonal: FrozenSet[str] = frozenset(s.lower() for s in hormonal)
        self.inducers: FrozenSet[str] = frozenset(s.lower() for s in inducers)

    def _match_inducer(self, med: str) -> Optional[str]:
        norm = normalize_drug_name(med)
        if norm in self.inducers:
            return norm
        lowered = " ".join(str(med).split()).lower()
        if lowered in self.inducers:
            return lowered
        return None

    def apply(self, pill_components: Iterable[str], meds: Iterable[str]) -> List[InteractionRecord]:
        hormonal = _ordered_unique(
            c.strip().lower() for c in pill_components if c and c.strip().lower() in self.hormonal
        )
        # one entry per inducer, named the way the user typed it first
        inducers: Dict[str, str] = {}
        for med in meds:
            if not med or not str(med).strip():
                continue
            inducer = self._match_inducer(med)
            if inducer and inducer not in inducers:
                inducers[inducer] = str(med).strip()
        if not hormonal or not inducers:
            return []

        return [
            InteractionRecord(
                drug_a=readable(name),
                drug_b=readable(component),
                level=SeverityLevel.high,
                source=RULE_SOURCE,
                description=INDUCTION_NOTE,
            )
            for name in inducers.values()
            for component in hormonal
        ]


def _ordered_unique(items: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out
