import sys
from pathlib import Path

# Add project root to PYTHONPATH for pytest (flat module layout)
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from models import RawInteraction
from pipeline import InteractionPipeline
from rxnav_client import ProviderError


RXCUIS = {
    "ethinyl estradiol": "4124",
    "levonorgestrel": "6373",
    "norethindrone": "7514",
    "rifampin": "9384",
    "ibuprofen": "5640",
    "topiramate": "38404",
    "topamax": "38404",
    "carbamazepine": "2002",
}


class FakeRxNav:
    """Stands in for RxNavClient: static name → rxcui table and canned interactions."""

    def __init__(self, interactions=None, fail=False):
        self.interactions = interactions or []
        self.fail = fail
        self.resolved = []
        self.queried = []

    def resolve_many(self, names):
        self.resolved.extend(names)
        return {n: RXCUIS.get(n.strip().lower()) for n in names}

    def interactions_for(self, rxcuis):
        self.queried.append(list(rxcuis))
        if self.fail:
            raise ProviderError("RxNav interaction lookup failed: HTTP 503")
        return list(self.interactions)


@pytest.fixture
def fake_rxnav():
    return FakeRxNav()


@pytest.fixture
def make_pipeline():
    def _make(interactions=None, fail=False, **kwargs):
        rxnav = FakeRxNav(interactions=interactions, fail=fail)
        kwargs.setdefault("evidence_search", lambda query, top_k: [])
        return InteractionPipeline(resolver=rxnav, provider=rxnav, **kwargs), rxnav
    return _make


@pytest.fixture
def raw_interaction():
    def _raw(a, b, severity="high", description="Interaction text."):
        return RawInteraction(drug_a=a, drug_b=b, severity=severity, description=description)
    return _raw


@pytest.fixture
def client(make_pipeline, monkeypatch):
    from fastapi.testclient import TestClient
    import API

    pipeline, _ = make_pipeline()
    monkeypatch.setattr(API, "_pipeline", pipeline)
    monkeypatch.setattr(API, "log_query", lambda *args, **kwargs: None)
    with TestClient(API.app) as c:
        yield c
