from unittest.mock import MagicMock, patch

import numpy as np
import pytest

import retriever
import vector_index

VOCAB = ["headache", "nausea", "spotting", "bleeding", "dizziness", "constipation", "contraceptive", "clots"]


def bag_of_words(texts, **kwargs):
    """Tiny deterministic embedder: keyword counts plus a constant bias so no vector is all zeros."""
    single = isinstance(texts, str)
    rows = []
    for text in [texts] if single else texts:
        t = text.lower()
        row = np.array([float(t.count(w)) for w in VOCAB] + [0.1])
        rows.append(row / np.linalg.norm(row))
    arr = np.array(rows)
    return arr[0] if single else arr


@pytest.fixture
def fake_embedder():
    vector_index.reset_index()
    model = MagicMock()
    model.encode.side_effect = bag_of_words
    with patch("vector_index.get_embedder", return_value=model):
        yield model
    vector_index.reset_index()


def test_build_index_loads_every_snippet(fake_embedder):
    count = vector_index.build_index()
    assert count == len(vector_index.LABEL_SNIPPETS)


def test_search_ranks_matching_snippets_first(fake_embedder):
    hits = retriever.search_evidence("constipation", top_k=3)

    assert len(hits) == 3
    assert hits[0]["drug"] == "ferrous sulfate"
    assert hits[0]["score"] >= hits[1]["score"] >= hits[2]["score"]
    assert set(hits[0]) == {"drug", "section", "text", "score"}


def test_index_is_built_once(fake_embedder):
    retriever.search_evidence("headache", top_k=2)
    retriever.search_evidence("nausea", top_k=2)

    batch_calls = [c for c in fake_embedder.encode.call_args_list if isinstance(c.args[0], list)]
    assert len(batch_calls) == 1


def test_empty_query_skips_everything(fake_embedder):
    assert retriever.search_evidence("   ") == []
    fake_embedder.encode.assert_not_called()
