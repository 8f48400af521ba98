"""Append-only key -> output channel map."""

from __future__ import annotations

import threading
from typing import Dict, Generic, Hashable, List, Optional, TypeVar

C = TypeVar("C")


class ChannelMap(Generic[C]):
    """
    Lock-protected channel map. Channels are added once per key and never
    removed for the lifetime of the relay.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._channels: Dict[Hashable, C] = {}

    def add(self, key: Hashable, channel: C) -> None:
        with self._lock:
            if key in self._channels:
                raise KeyError(f"channel for {key!r} already exists")
            self._channels[key] = channel

    def get(self, key: Hashable) -> Optional[C]:
        with self._lock:
            return self._channels.get(key)

    def keys(self) -> List[Hashable]:
        with self._lock:
            return list(self._channels)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._channels

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)
