"""
NED <-> ENU frame conversion.

AirSim reports vehicle and sensor poses in NED; ROS (and TF consumers) expect
ENU. Position conversion swaps the horizontal axes and negates the vertical.
Orientation conversion left-multiplies the NED quaternion by a fixed rotation:

    q_enu = Rz(+90deg) * (Rx(-180deg) * q_ned)

The order is significant; swapping the two factors gives a different rotation.
All functions are pure and safe to call from any thread.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from airsim_ros_relay.common import constants
from airsim_ros_relay.geometry.poses import ENU, NED, Pose, quat_to_rotmat


# =============================================================================
# Quaternion helpers (x, y, z, w)
# =============================================================================


def quat_multiply(a: Sequence[float], b: Sequence[float]) -> np.ndarray:
    """Hamilton product a * b."""
    ax, ay, az, aw = np.asarray(a, dtype=float).reshape(4)
    bx, by, bz, bw = np.asarray(b, dtype=float).reshape(4)
    return np.array([
        aw*bx + ax*bw + ay*bz - az*by,
        aw*by - ax*bz + ay*bw + az*bx,
        aw*bz + ax*by - ay*bx + az*bw,
        aw*bw - ax*bx - ay*by - az*bz,
    ], dtype=float)


def quat_from_axis_angle(axis: Sequence[float], angle: float) -> np.ndarray:
    """Unit quaternion for a rotation of ``angle`` radians about ``axis``."""
    axis = np.asarray(axis, dtype=float).reshape(3)
    axis = axis / np.linalg.norm(axis)
    half = 0.5 * float(angle)
    s = math.sin(half)
    return np.array([axis[0]*s, axis[1]*s, axis[2]*s, math.cos(half)], dtype=float)


def rotate_vector(q: Sequence[float], v: Sequence[float]) -> np.ndarray:
    """Rotate a 3-vector by quaternion q."""
    return quat_to_rotmat(q) @ np.asarray(v, dtype=float).reshape(3)


# Fixed NED->ENU factors (world axes)
_Q_X_NED_TO_ENU = quat_from_axis_angle((1.0, 0.0, 0.0), constants.NED_TO_ENU_X_ANGLE)
_Q_Z_NED_TO_ENU = quat_from_axis_angle((0.0, 0.0, 1.0), constants.NED_TO_ENU_Z_ANGLE)


# =============================================================================
# Positions
# =============================================================================


def to_enu_position(p_ned: Sequence[float]) -> np.ndarray:
    """NED position -> ENU position: (y, x, -z). Self-inverse."""
    x, y, z = np.asarray(p_ned, dtype=float).reshape(3)
    return np.array([y, x, -z], dtype=float)


def to_ned_position(p_enu: Sequence[float]) -> np.ndarray:
    """ENU position -> NED position (same mapping as to_enu_position)."""
    return to_enu_position(p_enu)


# =============================================================================
# Orientations
# =============================================================================


def to_enu_orientation(q_ned: Sequence[float]) -> np.ndarray:
    """NED orientation -> ENU orientation: Rz(90) * (Rx(-180) * q_ned)."""
    q = quat_multiply(_Q_X_NED_TO_ENU, q_ned)  # -PI rotation about X
    return quat_multiply(_Q_Z_NED_TO_ENU, q)  # PI/2 rotation about Z (Up)


def to_ned_orientation(q_enu: Sequence[float]) -> np.ndarray:
    """Inverse of to_enu_orientation."""
    q = quat_multiply(_conjugate(_Q_Z_NED_TO_ENU), q_enu)
    return quat_multiply(_conjugate(_Q_X_NED_TO_ENU), q)


def _conjugate(q: np.ndarray) -> np.ndarray:
    return np.array([-q[0], -q[1], -q[2], q[3]], dtype=float)


def ned_pose_to_enu(pose: Pose) -> Pose:
    """Convert a NED-tagged Pose to an ENU-tagged Pose."""
    pose.require(NED)
    return Pose(to_enu_position(pose.position), to_enu_orientation(pose.orientation), ENU)
