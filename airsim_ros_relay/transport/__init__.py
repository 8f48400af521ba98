"""
Transport seam.

- base: Transport protocol and transport-neutral message records
- memory: in-process recording transport (tests, headless runs)
- ros2: rclpy / tf2_ros transport

ros2 is not imported here so the relay core can run without ROS installed:
  from airsim_ros_relay.transport.ros2 import RosTransport
"""

from airsim_ros_relay.transport.base import (
    ImageChannel,
    ImageMessage,
    PointCloudChannel,
    TransformRecord,
    Transport,
)
from airsim_ros_relay.transport.memory import InMemoryTransport

__all__ = [
    "Transport",
    "ImageChannel",
    "PointCloudChannel",
    "ImageMessage",
    "TransformRecord",
    "InMemoryTransport",
]
