"""
Transport protocol and message records.

The relay core only talks to these types. A transport turns them into wire
messages (sensor_msgs/Image, sensor_msgs/PointCloud2, TF) and owns the clock
used for "fresh" publish stamps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable

import numpy as np

from airsim_ros_relay.geometry.poses import Pose
from airsim_ros_relay.sensors.pointcloud import PointCloudRecord


@dataclass(frozen=True, eq=False)
class ImageMessage:
    frame_id: str
    stamp: float
    encoding: str
    pixels: np.ndarray

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0]) if self.pixels.ndim >= 1 else 0

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1]) if self.pixels.ndim >= 2 else 0


@dataclass(frozen=True, eq=False)
class TransformRecord:
    """One TF edge: pose of child_frame expressed in parent_frame (ENU)."""

    parent_frame: str
    child_frame: str
    stamp: float
    pose: Pose


@runtime_checkable
class ImageChannel(Protocol):
    topic: str

    def publish(self, msg: ImageMessage) -> None: ...


@runtime_checkable
class PointCloudChannel(Protocol):
    topic: str

    def publish(self, msg: PointCloudRecord) -> None: ...


@runtime_checkable
class Transport(Protocol):
    def now(self) -> float:
        """Current transport time in seconds."""
        ...

    def create_image_channel(self, topic: str) -> ImageChannel: ...

    def create_point_cloud_channel(self, topic: str) -> PointCloudChannel: ...

    def send_transforms(self, transforms: Sequence[TransformRecord]) -> None: ...
