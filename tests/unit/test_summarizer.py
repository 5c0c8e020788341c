from unittest.mock import MagicMock, patch

import pytest
import requests

import config
from summarizer import (
    DISCLAIMER,
    Summarizer,
    build_assistant_message,
    build_deterministic_summary,
    create_summarizer,
)


def llm_response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    return resp


def test_summarize_returns_stripped_content():
    s = Summarizer(api_key="sk-test", endpoint="https://llm.test/v1/chat/completions", model="m")
    ok = llm_response({"choices": [{"message": {"content": "  Level is high.  "}}]})

    with patch("summarizer.requests.post", return_value=ok) as post:
        assert s.summarize({"overall": "high"}) == "Level is high."

    kwargs = post.call_args.kwargs
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["json"]["model"] == "m"
    assert kwargs["json"]["messages"][1]["content"].startswith("Data:\n")


@pytest.mark.parametrize("outcome", [
    requests.exceptions.Timeout("slow"),
    requests.exceptions.ConnectionError("down"),
])
def test_summarize_transport_errors_give_empty_string(outcome):
    s = Summarizer(api_key="sk-test")
    with patch("summarizer.requests.post", side_effect=outcome):
        assert s.summarize({}) == ""


def test_summarize_http_error_gives_empty_string():
    s = Summarizer(api_key="sk-test")
    resp = MagicMock()
    resp.raise_for_status.side_effect = requests.exceptions.HTTPError("401")
    with patch("summarizer.requests.post", return_value=resp):
        assert s.summarize({}) == ""


def test_summarize_unexpected_shape_gives_empty_string():
    s = Summarizer(api_key="sk-test")
    with patch("summarizer.requests.post", return_value=llm_response({"choices": []})):
        assert s.summarize({}) == ""


def test_summarizer_requires_key():
    with pytest.raises(ValueError):
        Summarizer(api_key="")


def test_create_summarizer_depends_on_key(monkeypatch):
    monkeypatch.setattr(config, "LLM_API_KEY", "")
    assert create_summarizer() is None

    monkeypatch.setattr(config, "LLM_API_KEY", "sk-test")
    assert isinstance(create_summarizer(), Summarizer)


INTERACTIONS = [
    {"drugA": "Rifampin", "drugB": "Ethinyl Estradiol", "level": "high"},
    {"drugA": "Rifampin", "drugB": "Levonorgestrel", "level": "high"},
    {"drugA": "Ibuprofen", "drugB": "Levonorgestrel", "level": "low"},
]


def test_deterministic_summary_lists_top_level_pairs():
    text = build_deterministic_summary(
        "combined", ["ethinyl estradiol", "levonorgestrel"], ["Rifampin", "Ibuprofen"], INTERACTIONS,
        attribution={"rifampin": [{"section": "adverse_reactions", "score": 0.71}]},
        symptoms="headache",
    )

    assert text.startswith("Overall interaction level: HIGH.")
    assert "Rifampin ↔ Ethinyl Estradiol, Rifampin ↔ Levonorgestrel" in text
    assert "Ibuprofen ↔" not in text
    assert "Reported symptoms: headache." in text
    assert "rifampin (adverse_reactions, score 0.71)" in text
    assert text.endswith(DISCLAIMER)


def test_deterministic_summary_without_interactions():
    text = build_deterministic_summary("progestin_only", ["norethindrone"], [], [])
    assert text.startswith("Overall interaction level: LOW.")
    assert "Key pairs" not in text
    assert "Other medicines" not in text


def test_assistant_message_with_pairs_and_symptoms():
    result = {
        "overall": "high",
        "pillComponents": ["ethinyl estradiol", "levonorgestrel"],
        "meds": ["Rifampin"],
        "interactions": INTERACTIONS[:1],
        "sources": ["CustomRule"],
    }
    text = build_assistant_message(result, symptoms="spotting")

    assert "Overall interaction level: HIGH." in text
    assert "Pairs: Rifampin ↔ Ethinyl Estradiol (high)." in text
    assert "symptom analysis is not altering the level" in text
    assert "Sources: CustomRule." in text


def test_assistant_message_empty_check():
    text = build_assistant_message({"overall": "low", "pillComponents": ["norethindrone"], "meds": [], "interactions": []})
    assert "Other medicines: none." in text
    assert "No interactions were found" in text
    assert "Sources: RxNav." in text
