"""
Geometry package for the relay.

Modules:
- frames: NED <-> ENU position/orientation conversion, quaternion helpers
- poses: Pose type and rigid-transform (isometry) composition

Usage:
    from airsim_ros_relay.geometry.frames import ned_pose_to_enu
    from airsim_ros_relay.geometry.poses import relative_pose
"""

from __future__ import annotations

from airsim_ros_relay.geometry.poses import (
    ENU,
    NED,
    Pose,
    compose,
    invert_isometry,
    matrix_to_pose,
    pose_to_matrix,
    quat_to_rotmat,
    relative_pose,
    rotmat_to_quat,
)
from airsim_ros_relay.geometry.frames import (
    ned_pose_to_enu,
    quat_from_axis_angle,
    quat_multiply,
    rotate_vector,
    to_enu_orientation,
    to_enu_position,
    to_ned_orientation,
    to_ned_position,
)

__all__ = [
    # Pose
    "ENU",
    "NED",
    "Pose",
    # Isometries
    "pose_to_matrix",
    "matrix_to_pose",
    "invert_isometry",
    "compose",
    "relative_pose",
    "quat_to_rotmat",
    "rotmat_to_quat",
    # Frame conversion
    "to_enu_position",
    "to_ned_position",
    "to_enu_orientation",
    "to_ned_orientation",
    "ned_pose_to_enu",
    "quat_multiply",
    "quat_from_axis_angle",
    "rotate_vector",
]
