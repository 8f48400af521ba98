"""
Discovery registry.

Tracks which sensor keys have been promoted to an output channel. claim() is
the check-then-set step: under one short lock it tells exactly one caller per
key that it won, so channel creation happens once even when samples for a new
key arrive on several threads at the same time. The winner does the slow work
(advertise, first publish, first TF) after claim() returns, outside the lock.

Per-key state machine:
    UNDISCOVERED -> CHANNEL_CREATED -> ACTIVE
"""

from __future__ import annotations

from enum import Enum
import threading
from typing import Hashable, List


class DiscoveryState(str, Enum):
    UNDISCOVERED = "undiscovered"
    CHANNEL_CREATED = "channel_created"
    ACTIVE = "active"


class DiscoveryRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._claimed: dict[Hashable, None] = {}
        self._created: set = set()
        self._active: set = set()

    def claim(self, key: Hashable) -> bool:
        """Register ``key``; True only for the first caller."""
        with self._lock:
            if key in self._claimed:
                return False
            self._claimed[key] = None
            return True

    def release(self, key: Hashable) -> None:
        """Undo a claim whose channel could not be created, so a later sample retries."""
        with self._lock:
            if key not in self._created:
                self._claimed.pop(key, None)

    def mark_created(self, key: Hashable) -> None:
        with self._lock:
            self._created.add(key)

    def mark_active(self, key: Hashable) -> None:
        with self._lock:
            if key in self._created:
                self._active.add(key)

    def state(self, key: Hashable) -> DiscoveryState:
        with self._lock:
            if key in self._active:
                return DiscoveryState.ACTIVE
            if key in self._created:
                return DiscoveryState.CHANNEL_CREATED
            return DiscoveryState.UNDISCOVERED

    def is_claimed(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._claimed

    def keys(self) -> List[Hashable]:
        """Claimed keys in claim order."""
        with self._lock:
            return list(self._claimed)
