"""
In-memory transport.

Records every advertise / publish / TF batch. Used by the tests and for
headless runs where no ROS graph is available.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
import time
from typing import Callable, Dict, List, Optional, Sequence

from airsim_ros_relay.common.errors import TransportError
from airsim_ros_relay.sensors.pointcloud import PointCloudRecord
from airsim_ros_relay.transport.base import ImageMessage, TransformRecord


@dataclass
class _RecordingChannel:
    topic: str
    owner: "InMemoryTransport"
    messages: List[object] = field(default_factory=list)

    def publish(self, msg) -> None:
        if self.owner._on_publish is not None:
            self.owner._on_publish(self.topic)
        self.owner._check_failure(self.topic)
        with self.owner._lock:
            self.messages.append(msg)


class InMemoryTransport:
    """
    Recording transport.

    Args:
        clock: optional time source; defaults to time.monotonic
        on_advertise: optional hook called with the topic before a channel is
            created (tests use it to widen race windows)
        on_publish: optional hook called with the topic before a message is
            recorded on a channel
    """

    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        on_advertise: Optional[Callable[[str], None]] = None,
        on_publish: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._clock = clock or time.monotonic
        self._on_advertise = on_advertise
        self._on_publish = on_publish
        self.channels: Dict[str, _RecordingChannel] = {}
        self.advertise_log: List[str] = []
        self.tf_batches: List[List[TransformRecord]] = []
        self.failing_topics: set[str] = set()

    # Transport protocol

    def now(self) -> float:
        return float(self._clock())

    def create_image_channel(self, topic: str) -> _RecordingChannel:
        return self._advertise(topic)

    def create_point_cloud_channel(self, topic: str) -> _RecordingChannel:
        return self._advertise(topic)

    def send_transforms(self, transforms: Sequence[TransformRecord]) -> None:
        self._check_failure("/tf")
        with self._lock:
            self.tf_batches.append(list(transforms))

    # Inspection helpers

    def messages(self, topic: str) -> List[object]:
        with self._lock:
            channel = self.channels.get(topic)
            return list(channel.messages) if channel is not None else []

    def images(self, topic: str) -> List[ImageMessage]:
        return [m for m in self.messages(topic) if isinstance(m, ImageMessage)]

    def clouds(self, topic: str) -> List[PointCloudRecord]:
        return [m for m in self.messages(topic) if isinstance(m, PointCloudRecord)]

    def transforms(self) -> List[TransformRecord]:
        with self._lock:
            return [tf for batch in self.tf_batches for tf in batch]

    def latest_transform(self, parent: str, child: str) -> Optional[TransformRecord]:
        for tf in reversed(self.transforms()):
            if tf.parent_frame == parent and tf.child_frame == child:
                return tf
        return None

    def _advertise(self, topic: str) -> _RecordingChannel:
        if self._on_advertise is not None:
            self._on_advertise(topic)
        self._check_failure(topic)
        with self._lock:
            self.advertise_log.append(topic)
            channel = _RecordingChannel(topic=topic, owner=self)
            self.channels[topic] = channel
            return channel

    def _check_failure(self, topic: str) -> None:
        if topic in self.failing_topics:
            raise TransportError(f"publish to {topic} failed")
