"""
INTERACTION & TRIAGE PIPELINE
Orchestrates identity resolution, provider lookup, deterministic rules
and merging into the payloads served by API.py.

check():  pill type + meds → merged interaction list + overall level
triage(): check() + symptom attribution + rulebook advice + summaries

Each external collaborator (RxNav, OpenFDA, evidence search, LLM) is
fault isolated: a failure shrinks its contribution to nothing and is
logged. The rule overlay and rulebook have no I/O and always run.
"""
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
import logging

import config
from attribution import assemble_attribution, attribution_to_dict, sanitize_symptoms
from merger import merge_with_fallback
from models import PROVIDER_SOURCE, InteractionRecord, RawInteraction
from normalizer import clean_med_list, pill_components, DEFAULT_PILL_TYPE, PILL_INGREDIENTS
from rulebook import CustomRulebook, RulebookResult
from rules_engine import RuleOverlay
from rxnav_client import ProviderError, create_rxnav_client
from severity import severity_to_level
from summarizer import Summarizer, build_assistant_message, build_deterministic_summary, create_summarizer

logger = logging.getLogger(__name__)


def filter_pill_pairs(raw: Iterable[RawInteraction], components: List[str]) -> List[InteractionRecord]:
    """
    Keep provider pairs where exactly one side is a pill ingredient, one record per
    (medicine, severity), with the severity text mapped onto our levels.
    """
    lowered = [c.lower() for c in components]

    def is_pill(name: str) -> bool:
        n = (name or "").lower()
        return any(c in n for c in lowered)

    seen = set()
    records = []
    for r in raw:
        a_pill, b_pill = is_pill(r.drug_a), is_pill(r.drug_b)
        if a_pill == b_pill:
            continue
        med = r.drug_b if a_pill else r.drug_a
        key = (med.lower(), (r.severity or "").lower())
        if key in seen:
            continue
        seen.add(key)
        records.append(InteractionRecord(
            drug_a=r.drug_a,
            drug_b=r.drug_b,
            level=severity_to_level(r.severity),
            source=r.source or PROVIDER_SOURCE,
            description=(r.description or "")[:config.DESCRIPTION_MAX_CHARS],
        ))
    return records


class InteractionPipeline:
    def __init__(
        self,
        resolver,
        provider,
        rule_overlay: Optional[RuleOverlay] = None,
        rulebook: Optional[CustomRulebook] = None,
        label_lookup: Optional[Callable[[str], Dict[str, str]]] = None,
        evidence_search: Optional[Callable[[str, int], List[dict]]] = None,
        summarizer: Optional[Summarizer] = None,
        provider_name: str = PROVIDER_SOURCE,
    ):
        self.resolver = resolver
        self.provider = provider
        self.rule_overlay = rule_overlay or RuleOverlay()
        self.rulebook = rulebook or CustomRulebook()
        self.label_lookup = label_lookup
        self.evidence_search = evidence_search
        self.summarizer = summarizer
        self.provider_name = provider_name

    # ═════════════════════════════════════════════════════════════
    # PROVIDER PATH
    # ═════════════════════════════════════════════════════════════

    def _provider_records(self, components: List[str], meds: List[str]) -> List[InteractionRecord]:
        if not meds:
            return []

        try:
            ids = self.resolver.resolve_many([*components, *meds])
        except Exception:
            logger.exception("Identity resolution failed; continuing with rules only")
            return []

        med_ids = [ids.get(m) for m in meds if ids.get(m)]
        if not med_ids:
            logger.info("No medication resolved to an RxCUI; skipping provider lookup")
            return []
        rxcuis = list(dict.fromkeys([*(ids.get(c) for c in components if ids.get(c)), *med_ids]))

        try:
            raw = self.provider.interactions_for(rxcuis)
        except ProviderError as e:
            logger.warning(f"Interaction provider unavailable, using rules only: {e}")
            return []
        except Exception:
            logger.exception("Interaction provider failed unexpectedly; using rules only")
            return []

        records = filter_pill_pairs(raw, components)
        if self.label_lookup is not None:
            self._attach_label_notes(records, components)
        return records

    def _attach_label_notes(self, records: List[InteractionRecord], components: List[str]) -> None:
        lowered = [c.lower() for c in components]

        def med_of(record: InteractionRecord) -> str:
            a_is_pill = any(c in record.drug_a.lower() for c in lowered)
            return record.drug_b if a_is_pill else record.drug_a

        meds = list(dict.fromkeys(med_of(r).strip().lower() for r in records))
        if not meds:
            return
        with ThreadPoolExecutor(max_workers=min(config.RESOLVER_WORKERS, len(meds))) as pool:
            notes = dict(zip(meds, pool.map(self._label_note, meds)))

        for record in records:
            note = notes.get(med_of(record).strip().lower())
            if note:
                record.label_notes = note

    def _label_note(self, med: str) -> Optional[str]:
        try:
            snippets = self.label_lookup(med) or {}
        except Exception as e:
            logger.warning(f"[OpenFDA] Failed to get label for {med}: {e}")
            return None
        return snippets.get("interactions") or None

    # ═════════════════════════════════════════════════════════════
    # PUBLIC API
    # ═════════════════════════════════════════════════════════════

    def _check(self, pill_type: str, meds: Iterable[str]) -> Tuple[Dict[str, Any], RulebookResult]:
        pill_type = (pill_type or DEFAULT_PILL_TYPE).strip().lower()
        if pill_type not in PILL_INGREDIENTS:
            pill_type = DEFAULT_PILL_TYPE
        meds = clean_med_list(meds, config.MAX_MEDS)
        components = pill_components(pill_type)

        provider_records = self._provider_records(components, meds)
        overlay_records = self.rule_overlay.apply(components, meds)
        book = self.rulebook.apply(components, meds)
        logger.info(
            "Records: provider=%d rule=%d rulebook=%d",
            len(provider_records), len(overlay_records), len(book.records),
        )

        merged = merge_with_fallback(
            [*provider_records, *overlay_records, *book.records],
            meds,
            pill_type,
            self.provider_name,
        )
        interactions = [r.to_dict() for r in merged.records]
        payload = {
            "pillType": pill_type,
            "pillComponents": components,
            "meds": meds,
            "interactions": interactions,
            "overall": merged.overall_level.value,
            "sources": list(dict.fromkeys(r.source for r in merged.records)),
        }
        return payload, book

    def check(self, pill_type: str, meds: Iterable[str]) -> Dict[str, Any]:
        payload, _ = self._check(pill_type, meds)
        return payload

    def triage(self, pill_type: str, meds: Iterable[str], symptoms: str = "") -> Dict[str, Any]:
        payload, book = self._check(pill_type, meds)
        symptoms = sanitize_symptoms(symptoms)
        components, meds = payload["pillComponents"], payload["meds"]

        attribution = {}
        if symptoms:
            attribution = attribution_to_dict(assemble_attribution(
                symptoms, [*meds, *components], search=self.evidence_search,
            ))
        advice = self.rulebook.build_symptom_advice(symptoms, meds, book.forced_levels, components)

        payload.update({
            "attribution": attribution,
            "advice": [a.to_dict() for a in advice],
            "symptoms": symptoms,
        })
        payload["message"] = build_deterministic_summary(
            payload["pillType"], components, meds, payload["interactions"], attribution, symptoms,
        )

        if self.summarizer is not None:
            summary = self.summarizer.summarize({
                "pillType": payload["pillType"],
                "pillComponents": components,
                "meds": meds,
                "interactions": payload["interactions"],
                "overall": payload["overall"],
                "attribution": attribution,
                "symptoms": symptoms,
            })
            if summary:
                payload["summary"] = summary
        return payload

    def assistant(self, pill_type: str, meds: Iterable[str], symptoms: str = "") -> Dict[str, Any]:
        data = self.check(pill_type, meds)
        return {"message": build_assistant_message(data, sanitize_symptoms(symptoms)), "data": data}


def create_pipeline() -> InteractionPipeline:
    """Pipeline wired to the real RxNav / OpenFDA / Qdrant / LLM collaborators from config."""
    client = create_rxnav_client()
    label_lookup = None
    if config.ENABLE_LABEL_NOTES:
        from openfda_client import get_label_snippets
        label_lookup = get_label_snippets
    return InteractionPipeline(
        resolver=client,
        provider=client,
        label_lookup=label_lookup,
        summarizer=create_summarizer(),
    )
