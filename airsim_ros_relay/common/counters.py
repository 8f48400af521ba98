"""
Per-relay counters.

Lightweight, lock-guarded tallies owned by one RelayContext. Used for startup /
shutdown logs and by tests to check the discovery protocol (exactly one channel
creation per key).
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import threading


@dataclass
class RelayCounters:
    channels_created: int = 0
    first_publications: int = 0
    images_published: int = 0
    clouds_published: int = 0
    transforms_published: int = 0
    edges_created: int = 0
    lookup_misses: int = 0
    publish_failures: int = 0
    empty_samples_dropped: int = 0
    ticks: int = 0


class CounterBoard:
    """Thread-safe holder for a RelayCounters instance."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters = RelayCounters()

    def add(self, name: str, amount: int = 1) -> None:
        if amount <= 0:
            return
        with self._lock:
            setattr(self._counters, name, getattr(self._counters, name) + int(amount))

    def snapshot(self) -> RelayCounters:
        """Return a copy of the current counters (no reset)."""
        with self._lock:
            return replace(self._counters)

    def as_dict(self) -> dict[str, int]:
        snap = self.snapshot()
        return {f.name: getattr(snap, f.name) for f in fields(snap)}
