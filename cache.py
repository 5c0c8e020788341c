"""
Lookup cache for provider calls

Purpose: avoid repeating RxNav name → RxCUI lookups for names we have already resolved recently.

Input: normalized drug name (key) and the resolved rxcui or None (value).

Output: cached value, or the MISSING sentinel when nothing fresh is stored.

Example: cache.get("ibuprofen") → "5640"

Notes: strictly an optimisation; results are identical with the cache disabled. Negative results
(None) are cached too so unknown names are not re-queried on every request.
"""
import threading
import time
from collections import OrderedDict
from typing import Any, Optional

MISSING = object()


class LookupCache:
    def __init__(self, ttl: float, max_entries: int = 512):
        self.ttl = ttl
        self.max_entries = max_entries
        self._data: "OrderedDict[str, tuple[float, Optional[str]]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return MISSING
            stored_at, value = entry
            if time.monotonic() - stored_at > self.ttl:
                del self._data[key]
                return MISSING
            self._data.move_to_end(key)
            return value

    def set(self, key: str, value: Optional[str]) -> None:
        with self._lock:
            self._data[key] = (time.monotonic(), value)
            self._data.move_to_end(key)
            while len(self._data) > self.max_entries:
                self._data.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
