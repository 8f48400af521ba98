"""
Sensor sample types and payload encoding.

- samples: ImageSample / LidarSample as delivered by the AirSim sensor
- pointcloud: flat float list -> PointCloud2-shaped record
"""

from airsim_ros_relay.sensors.samples import ImageKey, ImageSample, LidarSample, image_key
from airsim_ros_relay.sensors.pointcloud import (
    PointCloudRecord,
    PointFieldSpec,
    decode_point_cloud,
    encode_point_cloud,
)

__all__ = [
    "ImageKey",
    "ImageSample",
    "LidarSample",
    "image_key",
    "PointCloudRecord",
    "PointFieldSpec",
    "encode_point_cloud",
    "decode_point_cloud",
]
