from attribution import assemble_attribution, attribution_to_dict, sanitize_symptoms
from severity import SeverityLevel


def hit(drug, score, section="adverse_reactions", text="snippet"):
    return {"drug": drug, "section": section, "text": text, "score": score}


def test_sanitize_symptoms_collapses_and_truncates():
    assert sanitize_symptoms("  headache \n and   nausea ") == "headache and nausea"
    assert len(sanitize_symptoms("x" * 2000)) == 800
    assert sanitize_symptoms(None) == ""


def test_groups_sorts_and_caps_per_drug():
    candidates = [
        hit("rifampin", 0.62), hit("rifampin", 0.81), hit("rifampin", 0.70), hit("rifampin", 0.66),
        hit("levonorgestrel", 0.40),
    ]

    result = assemble_attribution("headache", ["Rifampin", "levonorgestrel"], search=lambda q, k: candidates)

    assert [r.score for r in result["rifampin"]] == [0.81, 0.70, 0.66]
    assert [r.level for r in result["rifampin"]] == [SeverityLevel.high, SeverityLevel.medium, SeverityLevel.medium]
    assert result["levonorgestrel"][0].level is SeverityLevel.low


def test_drugs_without_candidates_above_floor_are_omitted():
    candidates = [hit("rifampin", 0.10), hit("ibuprofen", 0.55), hit("acetaminophen", 0.90)]

    result = assemble_attribution("nausea", ["rifampin", "Advil"], search=lambda q, k: candidates)

    assert list(result) == ["ibuprofen"]  # acetaminophen is not one of the user's drugs


def test_empty_symptoms_skip_search():
    calls = []
    result = assemble_attribution("   ", ["rifampin"], search=lambda q, k: calls.append(q) or [])
    assert result == {}
    assert calls == []


def test_search_failure_degrades_to_empty():
    def broken(query, top_k):
        raise RuntimeError("Qdrant query failed")

    assert assemble_attribution("headache", ["rifampin"], search=broken) == {}


def test_passes_sanitized_query_and_top_k():
    seen = {}

    def search(query, top_k):
        seen.update(query=query, top_k=top_k)
        return []

    assemble_attribution(" bad   cramps ", ["iron"], search=search, top_k=5)
    assert seen == {"query": "bad cramps", "top_k": 5}


def test_attribution_to_dict():
    result = assemble_attribution("x", ["rifampin"], search=lambda q, k: [hit("rifampin", 0.77777, text="t")])
    assert attribution_to_dict(result) == {
        "rifampin": [{"drug": "rifampin", "section": "adverse_reactions", "score": 0.778, "level": "high", "text": "t"}],
    }
