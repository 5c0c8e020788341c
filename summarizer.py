"""
TRIAGE SUMMARIES
Turns a triage result into short plain-English text.

- Summarizer: best-effort LLM summary through an OpenAI compatible
  chat completions endpoint (requests, API key from .env)
- build_deterministic_summary: template summary, no network, always available
- build_assistant_message: the one-paragraph answer used by the
  interaction assistant endpoint
"""

from typing import Any, Dict, List, Optional
import logging

import requests

import config
from prompt_builder import build_summary_prompt
from severity import SeverityLevel, coerce_level, max_level

logger = logging.getLogger(__name__)

DISCLAIMER = "This information is informational only and not medical advice."


class SummarizerError(Exception):
    """The LLM endpoint returned something we could not use."""


class Summarizer:
    """Calls the chat completions endpoint once per triage payload."""

    def __init__(
        self,
        api_key: str,
        endpoint: str = config.LLM_ENDPOINT,
        model: str = config.LLM_MODEL,
        timeout: float = config.LLM_TIMEOUT,
    ):
        if not api_key:
            raise ValueError("API key is required for the summarizer")
        self.api_key = api_key
        self.endpoint = endpoint
        self.model = model
        self.timeout = timeout

    def summarize(self, payload: Dict[str, Any]) -> str:
        """Return the summary text, or "" when the LLM call fails for any reason."""
        try:
            return self._call_llm(build_summary_prompt(payload))
        except (requests.exceptions.RequestException, SummarizerError) as e:
            logger.warning(f"[LLM] summary unavailable: {e}")
            return ""

    def _call_llm(self, messages: List[Dict[str, str]]) -> str:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}"
        }
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.2,
            "max_tokens": 220
        }

        logger.info(f"[LLM] Requesting summary from {self.model}")
        response = requests.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
        response.raise_for_status()

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise SummarizerError(f"unexpected LLM response shape: {e}") from e
        return (content or "").strip()


def create_summarizer() -> Optional[Summarizer]:
    """Summarizer wired from config, or None when no API key is configured."""
    if not config.LLM_API_KEY:
        logger.info("[LLM] No API key configured; LLM summaries disabled")
        return None
    return Summarizer(api_key=config.LLM_API_KEY)


# ═════════════════════════════════════════════════════════════
# DETERMINISTIC TEXT
# ═════════════════════════════════════════════════════════════

def _overall(interactions: List[Dict[str, Any]]) -> SeverityLevel:
    return max_level(coerce_level(x.get("level")) for x in interactions)


def build_deterministic_summary(
    pill_type: str,
    pill_components: List[str],
    meds: List[str],
    interactions: List[Dict[str, Any]],
    attribution: Optional[Dict[str, List[Dict[str, Any]]]] = None,
    symptoms: str = "",
) -> str:
    level = _overall(interactions)
    combos = [
        f"{x['drugA']} ↔ {x['drugB']}"
        for x in interactions
        if coerce_level(x.get("level")) == level
    ][:3]

    lines = [f"Overall interaction level: {level.value.upper()}."]
    if combos:
        lines.append(f"Key pairs: {', '.join(combos)}.")
    if pill_components:
        lines.append(f"Pill type: {pill_type} ({' + '.join(pill_components)}).")
    if meds:
        lines.append(f"Other medicines: {', '.join(meds)}.")
    if symptoms:
        lines.append(f"Reported symptoms: {symptoms}.")

    top = sorted(
        ((drug, items[0]) for drug, items in (attribution or {}).items() if items),
        key=lambda x: x[1]["score"],
        reverse=True,
    )[:3]
    if top:
        links = "; ".join(f"{drug} ({item['section']}, score {item['score']})" for drug, item in top)
        lines.append(f"Likely symptom links: {links}.")

    lines.append(DISCLAIMER)
    return " ".join(lines)


def build_assistant_message(result: Dict[str, Any], symptoms: str = "") -> str:
    level = str(result.get("overall") or "low").upper()
    pill = " + ".join(result.get("pillComponents") or [])
    meds = ", ".join(result.get("meds") or []) or "none"
    pairs = result.get("interactions") or []
    sources = ", ".join(result.get("sources") or []) or "RxNav"

    lines = [
        f"Overall interaction level: {level}.",
        f"Pill: {pill}. Other medicines: {meds}.",
    ]
    if pairs:
        listed = "; ".join(f"{p['drugA']} ↔ {p['drugB']} ({p['level']})" for p in pairs)
        lines.append(f"Pairs: {listed}.")
    else:
        lines.append("No interactions were found for the drugs checked.")
    if symptoms:
        lines.append("Note: symptom analysis is not altering the level; it's informational only.")
    lines.append(f"Sources: {sources}. Informational only, not medical advice.")
    return " ".join(lines)
