"""
LABEL SNIPPET INDEX: Qdrant collection for symptom attribution
Embeds a fixed corpus of drug label snippets and upserts them into a
Qdrant collection (in-memory by default) so retriever.py can run
similarity search against a user's symptom description.

Features:
- Lazy, build-once index (first triage request pays the embedding cost)
- Collection management with dimension check
- Retry on upsert failure
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

from qdrant_client import QdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams
from sentence_transformers import SentenceTransformer

import config

logger = logging.getLogger(__name__)

MAX_RETRIES = 3

LABEL_SNIPPETS: list[dict[str, str]] = [
    # Ethinyl Estradiol + Levonorgestrel (combined pills)
    {"drug": "ethinyl estradiol", "section": "adverse_reactions",
     "text": "The most common adverse reactions reported by ≥5% of users include: nausea, breast tenderness, headache, and mood changes."},
    {"drug": "ethinyl estradiol", "section": "warnings",
     "text": "May cause increased risk of blood clots, stroke, and heart attack, especially in smokers over 35."},
    {"drug": "levonorgestrel", "section": "adverse_reactions",
     "text": "Common side effects include irregular bleeding or spotting, breast tenderness, abdominal pain, nausea, and headache."},
    {"drug": "levonorgestrel", "section": "warnings",
     "text": "May cause mood changes, depression, or anxiety. Contact healthcare provider if symptoms worsen."},
    # Norethindrone (progestin-only)
    {"drug": "norethindrone", "section": "adverse_reactions",
     "text": "Most frequently reported: irregular menstrual bleeding, spotting, amenorrhea, breast tenderness, acne, and mood changes."},
    {"drug": "norethindrone", "section": "warnings",
     "text": "May cause changes in menstrual patterns. Breakthrough bleeding and spotting are common in the first months."},
    # Common co-medications
    {"drug": "rifampin", "section": "drug_interactions",
     "text": "Strong CYP3A4 inducer. Significantly reduces contraceptive effectiveness. Use backup contraception."},
    {"drug": "rifampin", "section": "adverse_reactions",
     "text": "May cause gastrointestinal upset, headache, dizziness, and fatigue."},
    {"drug": "topiramate", "section": "drug_interactions",
     "text": "May reduce contraceptive efficacy at doses ≥200mg/day. Consider alternative or additional contraception."},
    {"drug": "topiramate", "section": "adverse_reactions",
     "text": "Common side effects include cognitive impairment, fatigue, dizziness, nausea, and mood changes."},
    {"drug": "st. john's wort", "section": "drug_interactions",
     "text": "Herbal supplement that induces CYP3A4. Reduces oral contraceptive levels. Avoid concurrent use."},
    {"drug": "st. john's wort", "section": "adverse_reactions",
     "text": "May cause photosensitivity, gastrointestinal symptoms, dizziness, confusion, and fatigue."},
    {"drug": "ibuprofen", "section": "adverse_reactions",
     "text": "Common side effects include stomach upset, nausea, heartburn, dizziness, and headache."},
    {"drug": "acetaminophen", "section": "adverse_reactions",
     "text": "Generally well tolerated. Rare side effects may include nausea, rash, and headache."},
    {"drug": "ferrous sulfate", "section": "adverse_reactions",
     "text": "Iron salts commonly cause constipation, dark stools, stomach cramps, and nausea."},
]


# ============================================
# LAZY-LOADED SINGLETONS
# ============================================

_embedder: SentenceTransformer | None = None
_qdrant: QdrantClient | None = None
_index_ready = False
_index_lock = threading.Lock()


def get_embedder() -> SentenceTransformer:
    global _embedder
    if _embedder is None:
        logger.info("Loading embedding model: %s", config.EMBED_MODEL)
        _embedder = SentenceTransformer(config.EMBED_MODEL)
    return _embedder


def get_qdrant() -> QdrantClient:
    global _qdrant
    if _qdrant is None:
        if config.QDRANT_URL == ":memory:":
            logger.info("Using in-memory Qdrant")
            _qdrant = QdrantClient(location=":memory:")
        else:
            logger.info("Connecting to Qdrant at %s", config.QDRANT_URL)
            _qdrant = QdrantClient(url=config.QDRANT_URL, api_key=config.QDRANT_API_KEY, timeout=config.HTTP_TIMEOUT)
    return _qdrant


def embed_texts(texts: list[str]) -> list[list[float]]:
    vectors = get_embedder().encode(texts, normalize_embeddings=True, convert_to_numpy=True)
    return [v.tolist() for v in vectors]


def reset_index() -> None:
    """Forget the built index and the cached clients (next call rebuilds everything)."""
    global _embedder, _qdrant, _index_ready
    with _index_lock:
        _embedder = None
        _qdrant = None
        _index_ready = False


# ============================================
# QDRANT SETUP
# ============================================

def setup_collection(client: QdrantClient, collection_name: str, vector_size: int) -> None:
    """
    Create the collection, or recreate it when the stored vector size no longer
    matches the embedding model (e.g. EMBED_MODEL was changed).
    """
    if client.collection_exists(collection_name):
        info = client.get_collection(collection_name)
        existing_dim = info.config.params.vectors.size
        if existing_dim == vector_size:
            return
        logger.warning(
            "Collection %s has %d dims, model produces %d; recreating",
            collection_name, existing_dim, vector_size,
        )
        client.delete_collection(collection_name)

    client.create_collection(
        collection_name=collection_name,
        vectors_config=VectorParams(size=vector_size, distance=Distance.COSINE),
    )


def upsert_points(client: QdrantClient, collection_name: str, points: list[PointStruct]) -> None:
    last_exc: Exception | None = None
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            client.upsert(collection_name=collection_name, points=points)
            return
        except Exception as exc:
            last_exc = exc
            logger.warning("Upsert attempt %d/%d failed: %s", attempt, MAX_RETRIES, exc)
            if attempt < MAX_RETRIES:
                time.sleep(attempt)
    raise RuntimeError(f"Upsert failed after {MAX_RETRIES} attempts. Last error: {last_exc}")


def build_index(snippets: list[dict[str, Any]] = LABEL_SNIPPETS) -> int:
    """Embed every snippet and (re)load them into the collection. Returns the number of points."""
    vectors = embed_texts([s["text"] for s in snippets])
    if not vectors:
        return 0

    client = get_qdrant()
    setup_collection(client, config.COLLECTION_NAME, len(vectors[0]))
    points = [
        PointStruct(id=i, vector=vector, payload=dict(snippet))
        for i, (snippet, vector) in enumerate(zip(snippets, vectors))
    ]
    upsert_points(client, config.COLLECTION_NAME, points)
    logger.info("Indexed %d label snippets into %s", len(points), config.COLLECTION_NAME)
    return len(points)


def ensure_index() -> None:
    global _index_ready
    if _index_ready:
        return
    with _index_lock:
        if not _index_ready:
            build_index()
            _index_ready = True
