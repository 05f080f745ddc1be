"""
Name: In-Memory Signature Store Unit Tests

Responsibilities:
  - Verify get/set/delete per (root_id, pass_name)
  - Verify LRU eviction bound and stats
"""

from __future__ import annotations

import pytest
from runmark.domain.value_objects import Signature
from runmark.infrastructure.cache import InMemorySignatureStore

pytestmark = pytest.mark.unit

SIG = Signature(config="c", length=1)


class TestInMemorySignatureStore:
    def test_rejects_non_positive_bound(self):
        with pytest.raises(ValueError):
            InMemorySignatureStore(max_roots=0)

    def test_set_get_delete(self):
        store = InMemorySignatureStore()
        store.set("r", "custom", SIG)
        assert store.get("r", "custom") == SIG
        assert store.get("r", "locale") is None
        store.delete("r", "custom")
        assert "r" not in store

    def test_evicts_least_recently_used_root(self):
        store = InMemorySignatureStore(max_roots=2)
        store.set("a", "p", SIG)
        store.set("b", "p", SIG)
        store.get("a", "p")
        store.set("c", "p", SIG)
        assert "a" in store
        assert "b" not in store
        assert store.stats()["evictions"] == 1

    def test_evict_root_returns_count(self):
        store = InMemorySignatureStore()
        store.set("r", "custom", SIG)
        store.set("r", "locale", SIG)
        assert store.evict_root("r") == 2
        assert store.evict_root("r") == 0

    def test_stats_hit_rate(self):
        store = InMemorySignatureStore()
        store.set("r", "p", SIG)
        store.get("r", "p")
        store.get("r", "missing")
        stats = store.stats()
        assert stats["backend"] == "in-memory"
        assert (stats["hits"], stats["misses"]) == (1, 1)
        assert stats["hit_rate"] == 0.5

    def test_clear(self):
        store = InMemorySignatureStore()
        store.set("r", "p", SIG)
        store.clear()
        assert store.stats()["roots"] == 0
