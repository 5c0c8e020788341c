"""
Build the summary prompt

Purpose: format a triage payload and task instructions into chat messages that keep the LLM short,
non-diagnostic and tied to the data it was given.

Input: triage payload dict (interactions, overall level, attribution, advice, symptoms).

Output: [{"role": "system", ...}, {"role": "user", ...}] ready for the chat completions API.

Example: build_summary_prompt({"overall": "high", ...})[1]["content"] starts with "Data:".

Notes: the payload is serialised and cut to SUMMARY_PAYLOAD_CHARS so one oversized request cannot
blow the context window.
"""
import json
from typing import Dict, List

import config

SYSTEM_PROMPT = (
    "You are a cautious, non-diagnostic assistant. Summarize interaction level (high/medium/low) and "
    "likely symptom attributions per medication. Add a one-line caution: informational only, not "
    "medical advice."
)


def build_summary_prompt(payload: Dict, max_chars: int = config.SUMMARY_PAYLOAD_CHARS) -> List[Dict[str, str]]:
    data = json.dumps(payload, ensure_ascii=False, default=str)[:max_chars]
    user_prompt = f"""Data:
{data}
Task: Produce a 3-5 sentence plain-English summary."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]
