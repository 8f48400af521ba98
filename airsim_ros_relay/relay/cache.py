"""
Latest-sample cache.

One slot per image key and one slot for LiDAR. Arrivals overwrite their slot
(latest wins, nothing is queued). The tick side takes a snapshot under the same
lock and then works on the snapshot without holding it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from typing import Dict, Optional

from airsim_ros_relay.sensors.samples import ImageKey, ImageSample, LidarSample


@dataclass(frozen=True)
class CacheSnapshot:
    images: Dict[ImageKey, ImageSample] = field(default_factory=dict)
    image_seq: Dict[ImageKey, int] = field(default_factory=dict)
    lidar: Optional[LidarSample] = None

    def latest_per_camera(self) -> Dict[str, ImageSample]:
        """Most recently arrived sample for each camera (any image kind)."""
        latest: Dict[str, ImageSample] = {}
        for key in sorted(self.images, key=lambda k: self.image_seq.get(k, 0)):
            latest[key.camera] = self.images[key]
        return latest


class SampleCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._images: Dict[ImageKey, ImageSample] = {}
        self._image_seq: Dict[ImageKey, int] = {}
        self._lidar: Optional[LidarSample] = None
        self._seq = 0

    def put_image(self, sample: ImageSample) -> bool:
        """Overwrite the slot for sample.key. Empty images are ignored (False)."""
        if sample.is_empty:
            return False
        key = sample.key
        with self._lock:
            self._seq += 1
            self._images[key] = sample
            self._image_seq[key] = self._seq
        return True

    def put_lidar(self, sample: LidarSample) -> bool:
        """Overwrite the LiDAR slot. Sweeps without points are ignored (False)."""
        if not sample.has_data:
            return False
        with self._lock:
            self._lidar = sample
        return True

    def image(self, key: ImageKey) -> Optional[ImageSample]:
        with self._lock:
            return self._images.get(key)

    def lidar(self) -> Optional[LidarSample]:
        with self._lock:
            return self._lidar

    def snapshot(self) -> CacheSnapshot:
        with self._lock:
            return CacheSnapshot(
                images=dict(self._images),
                image_seq=dict(self._image_seq),
                lidar=self._lidar,
            )
