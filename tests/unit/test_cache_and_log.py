import json

from cache import MISSING, LookupCache
from log import log_query
from prompt_builder import SYSTEM_PROMPT, build_summary_prompt


def test_cache_hit_and_miss():
    cache = LookupCache(ttl=60)
    assert cache.get("rifampin") is MISSING

    cache.set("rifampin", "9384")
    cache.set("unknownium", None)

    assert cache.get("rifampin") == "9384"
    assert cache.get("unknownium") is None
    assert len(cache) == 2


def test_cache_expired_entries_are_missing():
    cache = LookupCache(ttl=-1)
    cache.set("rifampin", "9384")
    assert cache.get("rifampin") is MISSING
    assert len(cache) == 0


def test_cache_evicts_least_recently_used():
    cache = LookupCache(ttl=60, max_entries=2)
    cache.set("a", "1")
    cache.set("b", "2")
    cache.get("a")
    cache.set("c", "3")

    assert cache.get("b") is MISSING
    assert cache.get("a") == "1"
    assert cache.get("c") == "3"

    cache.clear()
    assert len(cache) == 0


def test_log_query_writes_trace(tmp_path):
    path = log_query("/triage", {"meds": ["Rifampin"]}, {"overall": "high"}, audit_dir=str(tmp_path / "logs"))

    assert path is not None
    with open(path, encoding="utf-8") as f:
        trace = json.load(f)
    assert trace["endpoint"] == "/triage"
    assert trace["request"] == {"meds": ["Rifampin"]}
    assert trace["response"] == {"overall": "high"}
    assert len(trace["query_id"]) == 6


def test_log_query_disabled_without_dir():
    assert log_query("/triage", {}, {}, audit_dir="") is None


def test_log_query_write_failure_returns_none(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    assert log_query("/triage", {}, {}, audit_dir=str(blocker)) is None


def test_summary_prompt_truncates_payload():
    messages = build_summary_prompt({"meds": ["x" * 500]}, max_chars=50)

    assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
    data_line = messages[1]["content"].split("\n")[1]
    assert len(data_line) == 50
