"""
Parse raw provider payloads into typed records

Purpose: the only place that knows the JSON shapes RxNav and OpenFDA return. Everything downstream
works on RawInteraction / plain strings, so provider schema drift is absorbed here.

Input: decoded JSON bodies (dict) from rxnav_client / openfda_client.

Output: rxcui strings, RawInteraction lists, label snippet dicts.

Example: parse_rxcui({"idGroup": {"rxnormId": ["9384"]}}) → "9384"

Notes: malformed nodes are skipped, never raised on; a payload that is not a dict at all yields the
empty result.
"""
import re
from typing import Any, Dict, List, Optional

from models import PROVIDER_SOURCE, RawInteraction

LABEL_SECTIONS = {
    "warnings": ("warnings_and_cautions", "warnings"),
    "interactions": ("drug_interactions",),
    "patientInfo": ("information_for_patients", "patient_medication_information"),
}

_SENTENCE = re.compile(r"[^.!?]+[.!?]+")


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def parse_rxcui(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    id_group = payload.get("idGroup") or {}
    if not isinstance(id_group, dict):
        return None
    candidates = _as_list(id_group.get("rxnormId"))
    if not candidates or not candidates[0]:
        return None
    return str(candidates[0])


def parse_interaction_list(payload: Any, source: str = PROVIDER_SOURCE) -> List[RawInteraction]:
    """
    Flatten RxNav's interaction/list.json response.

    Shape walked:
        fullInteractionTypeGroup[] → fullInteractionType[] → {minConcept[2], interactionPair[]}
    Every interactionPair becomes one RawInteraction named after the two minConcepts.
    """
    if not isinstance(payload, dict):
        return []

    interactions: List[RawInteraction] = []
    for type_group in _as_list(payload.get("fullInteractionTypeGroup")):
        if not isinstance(type_group, dict):
            continue
        for interaction in _as_list(type_group.get("fullInteractionType")):
            if not isinstance(interaction, dict):
                continue
            concepts = [c for c in _as_list(interaction.get("minConcept")) if isinstance(c, dict)]
            drug_a = concepts[0].get("name") if len(concepts) > 0 else None
            drug_b = concepts[1].get("name") if len(concepts) > 1 else None
            for pair in _as_list(interaction.get("interactionPair")):
                if not isinstance(pair, dict):
                    continue
                interactions.append(RawInteraction(
                    drug_a=drug_a or "Unknown",
                    drug_b=drug_b or "Unknown",
                    severity=pair.get("severity") or "N/A",
                    description=pair.get("description") or "No description available",
                    source=source,
                ))
    return interactions


def first_sentences(text: str, count: int = 2) -> str:
    if not text:
        return ""
    sentences = _SENTENCE.findall(text) or [text]
    return " ".join(s.strip() for s in sentences[:count]).strip()


def parse_label_snippets(payload: Any) -> Dict[str, str]:
    """Pick the first two sentences of the warnings / interactions / patient info sections of the first label."""
    if not isinstance(payload, dict):
        return {}
    results = _as_list(payload.get("results"))
    if not results or not isinstance(results[0], dict):
        return {}

    label = results[0]
    snippets: Dict[str, str] = {}
    for name, fields in LABEL_SECTIONS.items():
        for field_name in fields:
            values = _as_list(label.get(field_name))
            if values and isinstance(values[0], str) and values[0].strip():
                snippets[name] = first_sentences(values[0], 2)
                break
    return snippets
