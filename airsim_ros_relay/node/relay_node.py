"""
=============================================================================
AIRSIM ROS RELAY - ROS 2 node for one relayed AirSim entity
=============================================================================

Hosts one RelayContext on a RosTransport and drives TickDriver.step() from a
wall timer at tick_period_sec. The host simulation feeds samples in-process
through on_image_samples() / on_lidar_sample() from its own delivery thread.

Topic Flow:
    AirSim camera / LiDAR callbacks -> [this node] ->
        /<ns>/<camera>/<image kind>   (sensor_msgs/Image)
        /<ns>/base_scan               (sensor_msgs/PointCloud2)
        /tf                           (world, base_link, base_laser, camera poses)

Parameters come from ROS (declare_parameter) or, when config_path is set, from
a YAML file in ROS 2 parameter format (config/relay.yaml); parameter overrides
passed to the node still win over the file values.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import rclpy
from rclpy.executors import MultiThreadedExecutor
from rclpy.node import Node
from rclpy.parameter import Parameter

from airsim_ros_relay.common.config import load_relay_params
from airsim_ros_relay.common.param_models import RelayParams
from airsim_ros_relay.geometry.poses import Pose
from airsim_ros_relay.relay.context import RelayContext
from airsim_ros_relay.relay.tick import TickDriver
from airsim_ros_relay.sensors.samples import ImageSample, LidarSample
from airsim_ros_relay.transport.ros2 import RosTransport

NODE_NAME = "airsim_ros_relay"

# ROS parameters cannot be None; a negative entity_id means "prefix only".
_NO_ENTITY_ID = -1


def _declared_params(node: Node) -> RelayParams:
    defaults = RelayParams()
    for name in RelayParams.model_fields:
        default = getattr(defaults, name)
        if name == "entity_id" and default is None:
            default = _NO_ENTITY_ID
        node.declare_parameter(name, default)

    values: Dict[str, Any] = {name: node.get_parameter(name).value for name in RelayParams.model_fields}
    return RelayParams(**_entity_id_from_ros(values))


def _entity_id_from_ros(values: Dict[str, Any]) -> Dict[str, Any]:
    if values.get("entity_id") is not None and int(values["entity_id"]) < 0:
        values = {**values, "entity_id": None}
    return values


def _file_params(config_path: str, parameter_overrides: Optional[Dict[str, Any]]) -> RelayParams:
    """Parameters from a YAML file; node parameter overrides win over file values."""
    overrides = {k: v for k, v in (parameter_overrides or {}).items() if k != "config_path"}
    return load_relay_params(config_path, node_name=NODE_NAME, overrides=_entity_id_from_ros(overrides))


class RelayNode(Node):
    """
    ROS 2 relay node.

    Args:
        parameter_overrides: optional dict of ROS parameter overrides
        initial_world_pose: optional ENU pose of the entity, published as the
            initial world -> base_link edge
    """

    def __init__(
        self,
        parameter_overrides: Optional[Dict[str, Any]] = None,
        initial_world_pose: Optional[Pose] = None,
    ) -> None:
        overrides = None
        if parameter_overrides:
            overrides = [Parameter(k, value=v) for k, v in parameter_overrides.items()]
        super().__init__(NODE_NAME, parameter_overrides=overrides)

        self.declare_parameter("config_path", "")
        config_path = str(self.get_parameter("config_path").value).strip()
        if config_path:
            self.params = _file_params(config_path, parameter_overrides)
            self.get_logger().info(f"Relay parameters loaded from {config_path}")
        else:
            self.params = _declared_params(self)

        self.transport = RosTransport(self, qos_depth=self.params.qos_depth)
        self.context = RelayContext(
            self.params,
            self.transport,
            logger=self.get_logger(),
            initial_world_pose=initial_world_pose,
        )
        self.driver = TickDriver(self.context)

        self._last_tick: Optional[float] = None
        self._timer = self.create_timer(self.params.tick_period_sec, self._on_timer)
        self.get_logger().info(
            f"AirSim relay ready: namespace=/{self.params.namespace}, "
            f"tick={self.params.tick_period_sec:.3f}s, stamp_source={self.params.stamp_source}"
        )

    # Inbound API for the host simulation

    def on_image_samples(self, samples: Sequence[ImageSample]) -> None:
        self.context.on_image_samples(samples)

    def on_lidar_sample(self, sample: LidarSample) -> None:
        self.context.on_lidar_sample(sample)

    def _on_timer(self) -> None:
        t = self.transport.now()
        dt = 0.0 if self._last_tick is None else t - self._last_tick
        self._last_tick = t
        report = self.driver.step(t, dt)
        if report.publish_failures:
            self.get_logger().debug(f"Tick at {t:.3f}: {report.publish_failures} publish failures")

    def destroy_node(self) -> None:
        self.context.shutdown()
        super().destroy_node()


def main() -> None:
    rclpy.init()
    node = RelayNode()

    # AirSim delivers samples on its own threads; keep timer and callbacks parallel.
    executor = MultiThreadedExecutor(num_threads=2)
    executor.add_node(node)
    try:
        executor.spin()
    except KeyboardInterrupt:
        pass
    finally:
        executor.shutdown()
        node.destroy_node()
        rclpy.shutdown()


if __name__ == "__main__":
    main()
