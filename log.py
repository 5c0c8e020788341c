"""
Logging & audit utilities

Purpose: configure process-wide logging once and persist request/response traces for later review.

Input: request artifacts (endpoint, pill type, meds, symptoms) and the response payload.

Output: log lines on stderr; when AUDIT_LOG_DIR is set, one JSON file per request.

Example: creates logs/query_20261016_142501_3fa2c1.json
"""
import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import config

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def log_query(
    endpoint: str,
    request: Dict[str, Any],
    response: Dict[str, Any],
    audit_dir: Optional[str] = None,
) -> Optional[str]:
    """Write one trace file; returns its path, or None when auditing is off or the write failed."""
    audit_dir = audit_dir if audit_dir is not None else config.AUDIT_LOG_DIR
    if not audit_dir:
        return None

    now = datetime.now(timezone.utc)
    query_id = uuid.uuid4().hex[:6]
    path = os.path.join(audit_dir, f"query_{now:%Y%m%d_%H%M%S}_{query_id}.json")
    trace = {
        "query_id": query_id,
        "time": now.isoformat(),
        "endpoint": endpoint,
        "request": request,
        "response": response,
    }
    try:
        os.makedirs(audit_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(trace, f, ensure_ascii=False, indent=2, default=str)
    except OSError as e:
        logger.warning(f"Could not write audit trace {path}: {e}")
        return None
    return path
