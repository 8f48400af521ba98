"""Topic and TF frame names for one relayed entity."""

from __future__ import annotations

from dataclasses import dataclass

from airsim_ros_relay.common import constants
from airsim_ros_relay.sensors.samples import ImageKey


@dataclass(frozen=True)
class FrameNames:
    namespace: str
    world: str = constants.WORLD_FRAME_DEFAULT

    @property
    def base_link(self) -> str:
        return f"{self.namespace}/{constants.BASE_LINK_SUFFIX}"

    @property
    def base_laser(self) -> str:
        return f"{self.namespace}/{constants.BASE_LASER_SUFFIX}"

    @property
    def scan_topic(self) -> str:
        return f"/{self.namespace}/{constants.BASE_SCAN_SUFFIX}"

    def image_topic(self, key: ImageKey) -> str:
        return f"/{self.namespace}/{key.camera}/{key.kind}"

    def camera_pose(self, camera: str) -> str:
        return f"{self.namespace}/{camera}/{constants.CAMERA_POSE_SUFFIX}"

    def camera_images(self, camera: str) -> str:
        return f"{self.namespace}/{camera}/{constants.CAMERA_IMAGES_SUFFIX}"
