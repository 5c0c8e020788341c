"""
RETRIEVER MODULE: evidence search for symptom attribution
Embeds a symptom description, retrieves the top-K most similar
label snippets from Qdrant, and returns plain dicts ready for the
attribution assembler.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import config
import vector_index

logger = logging.getLogger(__name__)

QDRANT_RETRIES = 2


def _embed_query(query: str) -> list[float]:
    """
    Encode the query with the same model used at index time.
    normalize_embeddings=True keeps it consistent with vector_index.embed_texts.
    """
    vector = vector_index.get_embedder().encode(
        query,
        normalize_embeddings=True,
        convert_to_numpy=True,
    )
    return vector.tolist()


def _query_qdrant(query_vector: list[float], top_k: int) -> list[Any]:
    client = vector_index.get_qdrant()

    last_exc: Exception | None = None
    for attempt in range(1, QDRANT_RETRIES + 1):
        try:
            response = client.query_points(
                collection_name=config.COLLECTION_NAME,
                query=query_vector,  # type: ignore[arg-type]
                limit=top_k,
                with_payload=True,
                with_vectors=False,
            )
            return response.points
        except Exception as exc:
            last_exc = exc
            logger.warning("Qdrant query attempt %d/%d failed: %s", attempt, QDRANT_RETRIES, exc)
            if attempt < QDRANT_RETRIES:
                time.sleep(2 ** attempt)

    raise RuntimeError(
        f"Qdrant query failed after {QDRANT_RETRIES} attempts. "
        f"Last error: {last_exc}"
    )


def _format_hits(points: list[Any]) -> list[dict[str, Any]]:
    hits = []
    for point in points:
        payload = point.payload or {}
        hits.append({
            "drug": payload.get("drug", ""),
            "section": payload.get("section", ""),
            "text": payload.get("text", ""),
            "score": float(point.score),
        })
    return hits


# ============================================
# PUBLIC API
# ============================================

def search_evidence(query: str, top_k: int = config.ATTRIBUTION_TOP_K) -> list[dict[str, Any]]:
    """
    Semantic search over the label snippet corpus.

    Returns
    -------
    list of {"drug", "section", "text", "score"} sorted by descending score.
    Empty query → [] without touching the model or Qdrant.
    """
    if not query or not query.strip():
        return []

    vector_index.ensure_index()

    logger.info("Evidence search: %r (top_k=%d)", query[:80], top_k)
    query_vector = _embed_query(query)
    points = _query_qdrant(query_vector, top_k)
    hits = _format_hits(points)
    hits.sort(key=lambda h: h["score"], reverse=True)
    logger.info("  → %d evidence snippet(s)", len(hits))
    return hits
