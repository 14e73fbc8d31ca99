"""
Composition cache — ScoreRankings keyed by reaction composition.

One cache belongs to one validator run.  It must not outlive the rule
corpus it was filled against: a different corpus scores differently.

Single-threaded callers use :meth:`CompositionCache.get` /
:meth:`CompositionCache.put`.  Callers sharding reactions across threads
use :meth:`CompositionCache.get_or_compute`, which holds a per-key lock so
two reactions with the same composition pay the projection cost once.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional

from mechinspect.models import CompositionKey, ScoreRanking

__all__ = ["CompositionCache"]

logger = logging.getLogger(__name__)


class CompositionCache:
    """Composition key -> ScoreRanking, with optional per-key locking."""

    def __init__(self) -> None:
        self._entries: Dict[CompositionKey, ScoreRanking] = {}
        self._locks: Dict[CompositionKey, threading.Lock] = {}
        self._guard = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: CompositionKey) -> Optional[ScoreRanking]:
        with self._guard:
            ranking = self._entries.get(key)
            if ranking is None:
                self.misses += 1
            else:
                self.hits += 1
        return ranking

    def put(self, key: CompositionKey, ranking: ScoreRanking) -> None:
        with self._guard:
            self._entries[key] = ranking

    def get_or_compute(self, key: CompositionKey, compute: Callable[[], ScoreRanking]) -> ScoreRanking:
        """Return the cached ranking for *key*, computing it at most once.

        The per-key lock lives only while *key* is being computed, so the
        lock table holds in-flight keys, not every key ever cached.
        Exceptions from *compute* propagate and leave no entry behind.
        """
        ranking = self.get(key)
        if ranking is not None:
            return ranking

        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        try:
            with lock:
                with self._guard:
                    ranking = self._entries.get(key)
                if ranking is not None:
                    return ranking
                ranking = compute()
                self.put(key, ranking)
                return ranking
        finally:
            with self._guard:
                if self._locks.get(key) is lock:
                    del self._locks[key]

    def pending_keys(self) -> int:
        """Number of keys currently being computed through :meth:`get_or_compute`."""
        with self._guard:
            return len(self._locks)

    def clear(self) -> None:
        with self._guard:
            self._entries.clear()
            self._locks.clear()
            self.hits = 0
            self.misses = 0

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
