"""
OpenFDA drug label client

Purpose: fetch short label snippets (warnings, interactions, patient info) for a medicine so provider
findings can carry a line of label context.

Input: drug name, e.g. "rifampin"

Output: {"warnings": "...", "interactions": "...", "patientInfo": "..."} or {} when nothing usable

Notes: optional enrichment. Rate limits, misses and network failures all yield {} and a log line.
"""
import logging
from typing import Dict

import requests

import config
import parser

logger = logging.getLogger(__name__)


def get_label_snippets(drug_name: str, timeout: float = config.HTTP_TIMEOUT) -> Dict[str, str]:
    name = (drug_name or "").strip()
    if not name:
        return {}

    search = f'(openfda.brand_name:"{name.upper()}" OR openfda.generic_name:"{name.upper()}") AND openfda.route:ORAL'
    try:
        response = requests.get(config.OPENFDA_BASE, params={"search": search, "limit": 1}, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.warning(f"[OpenFDA] label lookup error for '{name}': {e}")
        return {}

    if response.status_code == 429:
        logger.warning(f"[OpenFDA] rate limited for '{name}'")
        return {}
    if response.status_code != 200:
        logger.info(f"[OpenFDA] no label for '{name}' (HTTP {response.status_code})")
        return {}

    try:
        return parser.parse_label_snippets(response.json())
    except ValueError:
        logger.warning(f"[OpenFDA] non-JSON label response for '{name}'")
        return {}
