"""
ROS 2 transport: sensor_msgs/Image, sensor_msgs/PointCloud2 and /tf.

Wraps an rclpy Node. Publishers are created on demand by the relay's discovery
step; TF edges go out through a single tf2_ros.TransformBroadcaster.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import tf2_ros
from builtin_interfaces.msg import Time
from geometry_msgs.msg import TransformStamped
from rclpy.node import Node
from rclpy.qos import QoSProfile, ReliabilityPolicy, HistoryPolicy, DurabilityPolicy
from sensor_msgs.msg import Image, PointCloud2, PointField

from airsim_ros_relay.common import constants
from airsim_ros_relay.sensors.pointcloud import PointCloudRecord
from airsim_ros_relay.transport.base import ImageMessage, TransformRecord


def stamp_to_msg(stamp_sec: float) -> Time:
    ns = int(round(float(stamp_sec) * 1e9))
    return Time(sec=ns // 1_000_000_000, nanosec=ns % 1_000_000_000)


def image_to_msg(msg: ImageMessage) -> Image:
    """ImageMessage -> sensor_msgs/Image (pixels copied as-is, no re-encoding)."""
    pixels = np.ascontiguousarray(msg.pixels)
    if msg.encoding == constants.ENCODING_32FC1:
        pixels = pixels.astype("<f4", copy=False)
    out = Image()
    out.header.frame_id = msg.frame_id
    out.header.stamp = stamp_to_msg(msg.stamp)
    out.height = msg.height
    out.width = msg.width
    out.encoding = msg.encoding
    out.is_bigendian = 0
    out.step = int(pixels.strides[0]) if pixels.ndim >= 1 and pixels.size else 0
    out.data = pixels.tobytes()
    return out


def point_cloud_to_msg(record: PointCloudRecord) -> PointCloud2:
    """PointCloudRecord -> sensor_msgs/PointCloud2 (fields copied verbatim)."""
    msg = PointCloud2()
    msg.header.frame_id = record.frame_id
    if record.stamp is not None:
        msg.header.stamp = stamp_to_msg(record.stamp)
    msg.height = record.height
    msg.width = record.width
    msg.fields = [
        PointField(name=f.name, offset=f.offset, datatype=f.datatype, count=f.count)
        for f in record.fields
    ]
    msg.is_bigendian = record.is_bigendian
    msg.point_step = record.point_step
    msg.row_step = record.row_step
    msg.data = record.data
    msg.is_dense = record.is_dense
    return msg


def transform_to_msg(tf: TransformRecord) -> TransformStamped:
    out = TransformStamped()
    out.header.frame_id = tf.parent_frame
    out.header.stamp = stamp_to_msg(tf.stamp)
    out.child_frame_id = tf.child_frame
    out.transform.translation.x = float(tf.pose.position[0])
    out.transform.translation.y = float(tf.pose.position[1])
    out.transform.translation.z = float(tf.pose.position[2])
    out.transform.rotation.x = float(tf.pose.orientation[0])
    out.transform.rotation.y = float(tf.pose.orientation[1])
    out.transform.rotation.z = float(tf.pose.orientation[2])
    out.transform.rotation.w = float(tf.pose.orientation[3])
    return out


class _RosImageChannel:
    def __init__(self, node: Node, topic: str, qos: QoSProfile) -> None:
        self.topic = topic
        self._pub = node.create_publisher(Image, topic, qos)

    def publish(self, msg: ImageMessage) -> None:
        self._pub.publish(image_to_msg(msg))


class _RosPointCloudChannel:
    def __init__(self, node: Node, topic: str, qos: QoSProfile) -> None:
        self.topic = topic
        self._pub = node.create_publisher(PointCloud2, topic, qos)

    def publish(self, msg: PointCloudRecord) -> None:
        self._pub.publish(point_cloud_to_msg(msg))


class RosTransport:
    """Transport backed by an rclpy Node."""

    def __init__(self, node: Node, qos_depth: int = constants.QOS_DEPTH_DEFAULT) -> None:
        self._node = node
        self._qos = QoSProfile(
            reliability=ReliabilityPolicy.RELIABLE,
            durability=DurabilityPolicy.VOLATILE,
            history=HistoryPolicy.KEEP_LAST,
            depth=int(qos_depth),
        )
        self._tf_broadcaster = tf2_ros.TransformBroadcaster(node)

    def now(self) -> float:
        return self._node.get_clock().now().nanoseconds * 1e-9

    def create_image_channel(self, topic: str) -> _RosImageChannel:
        return _RosImageChannel(self._node, topic, self._qos)

    def create_point_cloud_channel(self, topic: str) -> _RosPointCloudChannel:
        return _RosPointCloudChannel(self._node, topic, self._qos)

    def send_transforms(self, transforms: Sequence[TransformRecord]) -> None:
        if not transforms:
            return
        self._tf_broadcaster.sendTransform([transform_to_msg(tf) for tf in transforms])
