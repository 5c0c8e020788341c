"""
Interaction merge & ranking

Purpose: combine provider, rule-overlay and rulebook records into one list with a single record per
drug pair, then summarise the whole set with one overall level.

Input: InteractionRecord list (any mix of sources, any order)

Output: MergeResult(records=[...], overall_level=SeverityLevel)

Precedence for two records with the same pair key:
    1. a CustomRule record beats any other source, whatever the levels
    2. between non-rulebook records, a strictly higher level wins
    3. otherwise the first record seen stays

Notes: pure and I/O free. The surviving record for a pair keeps the slot of the first record seen
for that pair, so output order follows input order.
"""
from typing import Dict, Iterable, List

import config
from models import InteractionRecord, MergeResult
from normalizer import normalize_drug_name, pill_label, readable
from severity import SeverityLevel, max_level


def pair_key(record: InteractionRecord, canonical: bool = None) -> str:
    if canonical is None:
        canonical = config.CANONICAL_PAIR_KEYS
    # aliases share a key: "Topamax" and "topiramate" are the same drug
    a, b = normalize_drug_name(record.drug_a), normalize_drug_name(record.drug_b)
    if canonical:
        a, b = sorted((a, b))
    return f"{a}|{b}"


def _should_replace(existing: InteractionRecord, incoming: InteractionRecord) -> bool:
    if incoming.from_rulebook and not existing.from_rulebook:
        return True
    if existing.from_rulebook and not incoming.from_rulebook:
        return False
    return incoming.level.outranks(existing.level)


def merge_interactions(records: Iterable[InteractionRecord], canonical: bool = None) -> MergeResult:
    merged: Dict[str, InteractionRecord] = {}
    for record in records:
        key = pair_key(record, canonical)
        existing = merged.get(key)
        if existing is None or _should_replace(existing, record):
            merged[key] = record

    final = list(merged.values())
    return MergeResult(records=final, overall_level=max_level(r.level for r in final))


def synthesize_fallback(meds: Iterable[str], pill_type: str, provider: str = "RxNav") -> List[InteractionRecord]:
    """One explicit low-risk placeholder per medication, used when nothing at all was found."""
    label = pill_label(pill_type)
    return [
        InteractionRecord(
            drug_a=readable(med.strip()),
            drug_b=label,
            level=SeverityLevel.low,
            source=f"{provider} (no pairs)",
            description=(
                f"No interacting pairs were found by {provider} for this medicine and your pill; "
                "treated as low risk."
            ),
        )
        for med in meds
        if med and med.strip()
    ]


def merge_with_fallback(
    records: Iterable[InteractionRecord],
    meds: List[str],
    pill_type: str,
    provider: str = "RxNav",
) -> MergeResult:
    result = merge_interactions(records)
    if result.records or not meds:
        return result
    fallback = synthesize_fallback(meds, pill_type, provider)
    return MergeResult(records=fallback, overall_level=max_level(r.level for r in fallback))
