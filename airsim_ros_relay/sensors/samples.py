"""
Sample types delivered by the AirSim sensor.

Poses on samples are always NED (AirSim world frame). Conversion to ENU happens
in the relay, never here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from airsim_ros_relay.common import constants
from airsim_ros_relay.geometry.poses import NED, Pose


class ImageKey(NamedTuple):
    """Case-normalized (camera, image kind) key; one output topic per key."""

    camera: str
    kind: str


def image_key(camera_name: str, image_kind_name: str) -> ImageKey:
    return ImageKey(str(camera_name).lower(), str(image_kind_name).lower())


@dataclass(frozen=True, eq=False)
class ImageSample:
    """One camera image plus the vehicle and camera poses at capture time."""

    camera_name: str
    image_kind_name: str
    pixels: np.ndarray
    pixels_as_float: bool
    vehicle_pose_ned: Pose
    sensor_pose_ned: Pose
    vehicle_name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "pixels", np.asarray(self.pixels))
        self.vehicle_pose_ned.require(NED)
        self.sensor_pose_ned.require(NED)

    @property
    def key(self) -> ImageKey:
        return image_key(self.camera_name, self.image_kind_name)

    @property
    def is_empty(self) -> bool:
        return self.pixels.size == 0

    @property
    def encoding(self) -> str:
        # Depth images (DepthPerspective / DepthPlanar) arrive as 1-channel floats
        return constants.ENCODING_32FC1 if self.pixels_as_float else constants.ENCODING_RGB8


@dataclass(frozen=True, eq=False)
class LidarSample:
    """One LiDAR sweep as a flat [x0, y0, z0, x1, ...] float list."""

    points: np.ndarray
    vehicle_pose_ned: Pose
    sensor_pose_ned: Pose

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", np.asarray(self.points, dtype=np.float32).reshape(-1))
        self.vehicle_pose_ned.require(NED)
        self.sensor_pose_ned.require(NED)

    @property
    def has_data(self) -> bool:
        return self.points.size >= constants.LIDAR_MIN_FLOATS

    @property
    def point_count(self) -> int:
        return int(self.points.size // constants.POINT_FLOATS)
