"""
Relay constants.

=============================================================================
CONVENTION QUICK REFERENCE
=============================================================================

AXES:
  AirSim (input):  NED  = [north, east, down], Z increases downward
  ROS (output):    ENU  = [east, north, up],  Z increases upward
  Position:        p_enu = (p_ned.y, p_ned.x, -p_ned.z)
  Orientation:     q_enu = Rz(+90deg) * (Rx(-180deg) * q_ned)   (left products, order matters)

QUATERNIONS:
  Stored as (x, y, z, w), Hamilton convention, same as ROS and scipy.

TF TREE (per relayed entity, <ns> = <prefix><entity_id>):
  world -> <ns>/base_link -> <ns>/base_laser
                          -> <ns>/<camera>/pose

TOPICS:
  /<ns>/<camera>/<image_kind>   sensor_msgs/Image
  /<ns>/base_scan               sensor_msgs/PointCloud2
=============================================================================
"""

import math

# Frame conversion angles (radians)
NED_TO_ENU_X_ANGLE = -180.0 * (math.pi / 180.0)  # -PI about world X
NED_TO_ENU_Z_ANGLE = 90.0 * (math.pi / 180.0)  # PI/2 about world Z (Up)

# Frame and topic naming
WORLD_FRAME_DEFAULT = "world"
BASE_LINK_SUFFIX = "base_link"
BASE_LASER_SUFFIX = "base_laser"
BASE_SCAN_SUFFIX = "base_scan"
CAMERA_POSE_SUFFIX = "pose"
CAMERA_IMAGES_SUFFIX = "images"
NAMESPACE_PREFIX_DEFAULT = "robot"

# Discovery key for the single LiDAR modality
LIDAR_KEY = "base_scan"

# LiDAR payload
# Point lists shorter than this are "no data" (AirSim sends [0,0,0] placeholders).
LIDAR_MIN_FLOATS = 4
POINT_FLOATS = 3
POINT_FIELD_NAMES = ("x", "y", "z")
POINT_FIELD_BYTES = 4
POINT_STEP = POINT_FIELD_BYTES * len(POINT_FIELD_NAMES)  # 12

# Image encodings (sensor_msgs/image_encodings)
ENCODING_RGB8 = "rgb8"
ENCODING_32FC1 = "32FC1"

# Timestamp source for republished messages
STAMP_SOURCE_TRANSPORT = "transport"
STAMP_SOURCE_SIMULATION = "simulation"
STAMP_SOURCES = (STAMP_SOURCE_TRANSPORT, STAMP_SOURCE_SIMULATION)

# QoS: latest-wins telemetry, keep a single message
QOS_DEPTH_DEFAULT = 1

# Node tick period when driven by a ROS timer (10 Hz)
TICK_PERIOD_SEC_DEFAULT = 0.1

# Preview
PREVIEW_APPLICATION_ID = "airsim_ros_relay"
# Float (depth) images arrive in [0, 255]; preview shows them in [0, 1]
PREVIEW_FLOAT_SCALE = 1.0 / 255.0
