"""
Central configuration

Purpose: single source of truth for endpoints, API keys, thresholds, model names, and default params.

Input: none at runtime (read constants / environment variables, .env is honoured).

Output: variables used by other modules (strings, numbers, booleans).

Example: config.HIGH_SCORE_THRESHOLD → 0.75
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SERVICE_NAME = "PillSync API"
SERVICE_VERSION = "0.2.0"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
AUDIT_LOG_DIR = os.getenv("AUDIT_LOG_DIR")  # unset → no audit traces written

# External data providers
RXNAV_BASE = os.getenv("RXNAV_BASE", "https://rxnav.nlm.nih.gov/REST")
OPENFDA_BASE = os.getenv("OPENFDA_BASE", "https://api.fda.gov/drug/label.json")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))
RESOLVER_WORKERS = int(os.getenv("RESOLVER_WORKERS", "4"))
ENABLE_LABEL_NOTES = _env_bool("ENABLE_LABEL_NOTES", False)
ENABLE_RXCUI_CACHE = _env_bool("ENABLE_RXCUI_CACHE", False)
RXCUI_CACHE_TTL = 6 * 60 * 60  # seconds
RXCUI_CACHE_SIZE = 512

# Request limits
MAX_MEDS = 16
MAX_SYMPTOM_CHARS = 800
DESCRIPTION_MAX_CHARS = 240

# Severity
HIGH_SCORE_THRESHOLD = 0.75
MEDIUM_SCORE_THRESHOLD = 0.60
CANONICAL_PAIR_KEYS = _env_bool("CANONICAL_PAIR_KEYS", True)

# Symptom attribution (embedding search over label snippets)
EMBED_MODEL = os.getenv("EMBED_MODEL", "all-MiniLM-L6-v2")
QDRANT_URL = os.getenv("QDRANT_URL", ":memory:")
QDRANT_API_KEY = os.getenv("QDRANT_API_KEY")
COLLECTION_NAME = os.getenv("QDRANT_COLLECTION", "label_snippets")
ATTRIBUTION_TOP_K = 10
ATTRIBUTION_PER_DRUG = 3
ATTRIBUTION_MIN_SCORE = 0.30

# LLM summary (OpenAI compatible chat completions endpoint)
LLM_API_KEY = os.getenv("API_KEY") or os.getenv("OPENAI_API_KEY")
LLM_ENDPOINT = os.getenv("LLM_ENDPOINT", "https://api.openai.com/v1/chat/completions")
LLM_MODEL = os.getenv("AI_MODEL_CHAT", "gpt-4o-mini")
LLM_TIMEOUT = 30
SUMMARY_PAYLOAD_CHARS = 6000

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5050"))
