"""
Thread-safe transposition cache: position fingerprint -> result of an earlier search of that position.

One instance is shared by all workers of a parallel search. Entries are frozen dataclasses swapped in
under a lock, so a reader sees either no entry or a complete one.
"""

import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from thunderdome.chess.moves import Move


class Bound(Enum):
    """How the stored score relates to the true value of the position."""

    EXACT = auto()
    LOWER = auto()  # search failed high: true value >= score
    UPPER = auto()  # search failed low: true value <= score


@dataclass(frozen=True, slots=True)
class CacheEntry:
    depth: int
    score: int
    best_move: Optional[Move]
    bound: Bound = Bound.EXACT

    def is_usable(self, alpha: int, beta: int) -> bool:
        """Whether the score answers a search with window (alpha, beta)."""
        if self.bound == Bound.EXACT:
            return True
        if self.bound == Bound.LOWER:
            return self.score >= beta
        return self.score <= alpha


class TranspositionCache:
    """
    get(fingerprint) -> Optional[CacheEntry]
    put(fingerprint, entry) -> bool (whether the entry was kept)

    A write replaces the stored entry only when it is at least as deep.
    With `max_entries` set, writes for new fingerprints are dropped once the cache is full.
    """

    def __init__(self, max_entries: Optional[int] = None):
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.max_entries = max_entries
        self._table: dict[int, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, fingerprint: int) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._table.get(fingerprint)
            if entry is None:
                self.misses += 1
            else:
                self.hits += 1
            return entry

    def put(self, fingerprint: int, entry: CacheEntry) -> bool:
        with self._lock:
            stored = self._table.get(fingerprint)
            if stored is None:
                if self.max_entries is not None and len(self._table) >= self.max_entries:
                    return False
            elif entry.depth < stored.depth:
                return False
            self._table[fingerprint] = entry
            return True

    def clear(self) -> None:
        with self._lock:
            self._table.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)

    def __contains__(self, fingerprint: int) -> bool:
        with self._lock:
            return fingerprint in self._table
