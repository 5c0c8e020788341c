"""
Symptom attribution

Purpose: link a free-text symptom description to the medicines most likely to explain it, using
similarity between the description and per-drug label snippets.

Input: symptom text ("headache and spotting"), the drugs in play (user meds + pill components),
a search callable (retriever.search_evidence by default).

Output: {"rifampin": [AttributionRecord(...), ...], "levonorgestrel": [...]}. At most
ATTRIBUTION_PER_DRUG records per drug, best score first. Drugs with no snippet above the floor are
left out entirely.

Notes: optional enrichment. If the search backend fails we log and return {} so the interaction
result is unaffected; the rulebook advice list is the no-AI fallback.
"""
import logging
from typing import Callable, Dict, Iterable, List, Optional

import config
from models import AttributionRecord
from normalizer import normalize_drug_name
from severity import score_to_level

logger = logging.getLogger(__name__)

SearchFn = Callable[[str, int], List[dict]]


def sanitize_symptoms(text: Optional[str], limit: int = config.MAX_SYMPTOM_CHARS) -> str:
    return " ".join(str(text or "").split())[:limit].strip()


def _default_search(query: str, top_k: int) -> List[dict]:
    import retriever
    return retriever.search_evidence(query, top_k)


def assemble_attribution(
    symptoms: str,
    drugs: Iterable[str],
    search: Optional[SearchFn] = None,
    top_k: int = config.ATTRIBUTION_TOP_K,
    min_score: float = config.ATTRIBUTION_MIN_SCORE,
    per_drug: int = config.ATTRIBUTION_PER_DRUG,
) -> Dict[str, List[AttributionRecord]]:
    text = sanitize_symptoms(symptoms)
    allowed = {normalize_drug_name(d) for d in drugs if d and str(d).strip()}
    if not text or not allowed:
        return {}

    search = search or _default_search
    try:
        candidates = search(text, top_k)
    except Exception as e:
        logger.warning(f"Evidence search failed, skipping attribution: {e}")
        return {}

    grouped: Dict[str, List[AttributionRecord]] = {}
    for c in candidates or []:
        drug = normalize_drug_name(c.get("drug", ""))
        try:
            score = float(c.get("score", 0.0))
        except (TypeError, ValueError):
            continue
        if drug not in allowed or score < min_score:
            continue
        grouped.setdefault(drug, []).append(AttributionRecord(
            drug=drug,
            section=c.get("section", ""),
            score=round(score, 3),
            level=score_to_level(score),
            text=c.get("text", ""),
        ))

    for drug in grouped:
        grouped[drug].sort(key=lambda r: r.score, reverse=True)
        grouped[drug] = grouped[drug][:per_drug]
    return grouped


def attribution_to_dict(attribution: Dict[str, List[AttributionRecord]]) -> Dict[str, List[dict]]:
    return {drug: [r.to_dict() for r in records] for drug, records in attribution.items()}
