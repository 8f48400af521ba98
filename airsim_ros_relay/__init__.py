"""
AirSim -> ROS 2 sensor relay.

Republishes asynchronously arriving AirSim camera images and LiDAR scans on
ROS 2 topics once per simulation step, together with the TF edges that place
each sensor on its vehicle (NED inputs, ENU outputs).

Subpackages:
- common/: constants, parameters, errors, counters
- geometry/: NED<->ENU conversion and rigid-transform composition
- sensors/: sample types and PointCloud2 payload encoding
- relay/: discovery, sample cache, transform table, tick driver
- transport/: transport seam (in-memory and ROS 2)
- viz/: optional Rerun preview
- node/: ROS 2 node entry point

ROS-dependent modules (transport.ros2, node.relay_node) are not imported here so
that the relay core can be used and tested without a ROS environment.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "0.1.0"

__all__ = [
    "RelayContext",
    "RelayParams",
    "TickDriver",
    "ImageSample",
    "LidarSample",
    "Pose",
]

_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "RelayContext": ("airsim_ros_relay.relay.context", "RelayContext"),
    "RelayParams": ("airsim_ros_relay.common.param_models", "RelayParams"),
    "TickDriver": ("airsim_ros_relay.relay.tick", "TickDriver"),
    "ImageSample": ("airsim_ros_relay.sensors.samples", "ImageSample"),
    "LidarSample": ("airsim_ros_relay.sensors.samples", "LidarSample"),
    "Pose": ("airsim_ros_relay.geometry.poses", "Pose"),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    return getattr(import_module(module_name), attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))
