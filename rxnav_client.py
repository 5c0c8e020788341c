"""
RxNav client: drug identity resolution + interaction lookup

Purpose: resolve free-text drug names to RxCUIs and fetch pairwise interactions between a set of
RxCUIs from the NLM RxNav REST API.

Input: drug names ("rifampin") / RxCUI lists (["9384", "4124"])

Output: rxcui strings (or None) / RawInteraction lists

Notes:
- resolve() never raises: not-found, HTTP errors and transport failures all come back as None so
  callers continue with a partial identity set.
- interactions_for() raises ProviderError on failure; the pipeline treats that as "no provider
  contribution" and keeps going with the deterministic engines.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

import requests

import config
import parser
from cache import MISSING, LookupCache
from models import RawInteraction
from normalizer import normalize_drug_name

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """The interaction provider could not produce an answer (network, HTTP status, bad body)."""


class RxNavClient:
    def __init__(
        self,
        base_url: str = config.RXNAV_BASE,
        timeout: float = config.HTTP_TIMEOUT,
        max_workers: int = config.RESOLVER_WORKERS,
        cache: LookupCache | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self.cache = cache
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Identity resolution
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> str | None:
        key = normalize_drug_name(name)
        if not key:
            return None

        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not MISSING:
                return cached

        rxcui = self._lookup_rxcui(name.strip())
        if self.cache is not None:
            self.cache.set(key, rxcui)
        return rxcui

    def _lookup_rxcui(self, name: str) -> str | None:
        try:
            response = self.session.get(
                f"{self.base_url}/rxcui.json",
                params={"name": name, "search": 2},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error("[RxNav] rxcui lookup error for %r: %s", name, e)
            return None

        if response.status_code != 200:
            logger.error("[RxNav] rxcui lookup failed for %r: HTTP %s", name, response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.error("[RxNav] rxcui lookup for %r returned a non-JSON body", name)
            return None

        rxcui = parser.parse_rxcui(payload)
        if rxcui is None:
            logger.info("[RxNav] no rxcui for %r", name)
        return rxcui

    def resolve_many(self, names: Iterable[str]) -> dict[str, str | None]:
        """
        Resolve several names concurrently (bounded by max_workers).

        The returned dict keeps the input order and maps each original name to its own result.
        """
        names = list(names)
        if not names:
            return {}
        workers = min(self.max_workers, len(names))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(self.resolve, names))
        return dict(zip(names, results))

    # ------------------------------------------------------------------
    # Interactions
    # ------------------------------------------------------------------

    def interactions_for(self, rxcuis: Iterable[str]) -> list[RawInteraction]:
        ids = [str(r) for r in rxcuis if r]
        if not ids:
            return []

        url = f"{self.base_url}/interaction/list.json"
        try:
            response = self.session.get(url, params={"rxcuis": "+".join(ids)}, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"RxNav interaction lookup failed: {e}") from e

        if response.status_code != 200:
            raise ProviderError(f"RxNav interaction lookup failed: HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError("RxNav interaction lookup returned a non-JSON body") from e

        interactions = parser.parse_interaction_list(payload)
        logger.info("[RxNav] %d raw interaction pair(s) for %d rxcui(s)", len(interactions), len(ids))
        return interactions


def create_rxnav_client() -> RxNavClient:
    cache = LookupCache(config.RXCUI_CACHE_TTL, config.RXCUI_CACHE_SIZE) if config.ENABLE_RXCUI_CACHE else None
    return RxNavClient(cache=cache)
