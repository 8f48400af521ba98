"""
Poses and rigid transforms (isometries).

Representation:
- Pose: position (x, y, z) + unit quaternion (x, y, z, w) + axis-convention tag.
- Isometry: 4x4 homogeneous matrix [[R, t], [0, 1]].

A pose read as a transform maps points from the posed body frame into the frame
the pose is expressed in (world_T_body). relative_pose() therefore returns
parent_T_child = (world_T_parent)^{-1} * world_T_child.

Numerical Policy:
    No normalization and no guards. A NaN or zero-norm quaternion produces NaN
    outputs instead of an exception; upstream samples are telemetry, and a bad
    value on one tick must not stop the relay.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Sequence, Tuple

import numpy as np

from airsim_ros_relay.common.errors import FrameMismatchError

NED = "NED"
ENU = "ENU"
_FRAMES = (NED, ENU)


@dataclass(frozen=True, eq=False)
class Pose:
    """Position + orientation in a tagged axis convention."""

    position: np.ndarray  # (3,)
    orientation: np.ndarray  # (4,) x, y, z, w
    frame: str = ENU

    def __post_init__(self) -> None:
        if self.frame not in _FRAMES:
            raise ValueError(f"Pose frame must be one of {_FRAMES}, got {self.frame!r}")
        object.__setattr__(self, "position", np.asarray(self.position, dtype=float).reshape(3))
        object.__setattr__(self, "orientation", np.asarray(self.orientation, dtype=float).reshape(4))

    @classmethod
    def identity(cls, frame: str = ENU) -> "Pose":
        return cls(np.zeros(3), np.array([0.0, 0.0, 0.0, 1.0]), frame)

    @classmethod
    def from_xyz_quat(
        cls,
        xyz: Sequence[float],
        quat_xyzw: Sequence[float],
        frame: str = ENU,
    ) -> "Pose":
        return cls(np.asarray(xyz, dtype=float), np.asarray(quat_xyzw, dtype=float), frame)

    def require(self, frame: str) -> "Pose":
        """Return self, or raise FrameMismatchError if not tagged ``frame``."""
        if self.frame != frame:
            raise FrameMismatchError(f"expected a {frame} pose, got {self.frame}")
        return self

    def __repr__(self) -> str:
        p = ", ".join(f"{v:.4f}" for v in self.position)
        q = ", ".join(f"{v:.4f}" for v in self.orientation)
        return f"Pose({self.frame}, position=[{p}], orientation=[{q}])"


# =============================================================================
# Quaternion <-> rotation matrix
# =============================================================================


def quat_to_rotmat(q: Sequence[float]) -> np.ndarray:
    """Convert quaternion (x, y, z, w) to rotation matrix. Assumes unit norm."""
    qx, qy, qz, qw = (float(v) for v in np.asarray(q, dtype=float).reshape(4))

    xx, yy, zz = qx*qx, qy*qy, qz*qz
    xy, xz, yz = qx*qy, qx*qz, qy*qz
    wx, wy, wz = qw*qx, qw*qy, qw*qz

    return np.array([
        [1.0 - 2.0*(yy + zz), 2.0*(xy - wz), 2.0*(xz + wy)],
        [2.0*(xy + wz), 1.0 - 2.0*(xx + zz), 2.0*(yz - wx)],
        [2.0*(xz - wy), 2.0*(yz + wx), 1.0 - 2.0*(xx + yy)]
    ], dtype=float)


def rotmat_to_quat(R: np.ndarray) -> Tuple[float, float, float, float]:
    """Convert rotation matrix to quaternion (x, y, z, w)."""
    R = np.asarray(R, dtype=float)
    trace = float(np.trace(R))

    if trace > 0:
        s = 0.5 / math.sqrt(trace + 1.0)
        qw = 0.25 / s
        qx = (R[2, 1] - R[1, 2]) * s
        qy = (R[0, 2] - R[2, 0]) * s
        qz = (R[1, 0] - R[0, 1]) * s
    elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
        s = 2.0 * math.sqrt(max(1.0 + R[0, 0] - R[1, 1] - R[2, 2], 0.0))
        qw = (R[2, 1] - R[1, 2]) / s
        qx = 0.25 * s
        qy = (R[0, 1] + R[1, 0]) / s
        qz = (R[0, 2] + R[2, 0]) / s
    elif R[1, 1] > R[2, 2]:
        s = 2.0 * math.sqrt(max(1.0 + R[1, 1] - R[0, 0] - R[2, 2], 0.0))
        qw = (R[0, 2] - R[2, 0]) / s
        qx = (R[0, 1] + R[1, 0]) / s
        qy = 0.25 * s
        qz = (R[1, 2] + R[2, 1]) / s
    else:
        # Also reached for NaN input: every comparison above is False.
        s = 2.0 * math.sqrt(max(1.0 + R[2, 2] - R[0, 0] - R[1, 1], 0.0))
        if s == 0.0:
            return (math.nan, math.nan, math.nan, math.nan)
        qw = (R[1, 0] - R[0, 1]) / s
        qx = (R[0, 2] + R[2, 0]) / s
        qy = (R[1, 2] + R[2, 1]) / s
        qz = 0.25 * s

    n = math.sqrt(qx*qx + qy*qy + qz*qz + qw*qw)
    return (float(qx/n), float(qy/n), float(qz/n), float(qw/n))


# =============================================================================
# Isometries
# =============================================================================


def pose_to_matrix(pose: Pose) -> np.ndarray:
    """Pose -> 4x4 isometry (translation * rotation)."""
    T = np.eye(4, dtype=float)
    T[:3, :3] = quat_to_rotmat(pose.orientation)
    T[:3, 3] = pose.position
    return T


def matrix_to_pose(T: np.ndarray, frame: str = ENU) -> Pose:
    """4x4 isometry -> Pose tagged ``frame``."""
    T = np.asarray(T, dtype=float)
    return Pose(T[:3, 3].copy(), np.array(rotmat_to_quat(T[:3, :3])), frame)


def invert_isometry(T: np.ndarray) -> np.ndarray:
    """
    Inverse of a rigid transform.

    For T = (R, t), T^{-1} = (R^T, -R^T t).
    """
    T = np.asarray(T, dtype=float)
    R_inv = T[:3, :3].T
    T_inv = np.eye(4, dtype=float)
    T_inv[:3, :3] = R_inv
    T_inv[:3, 3] = -R_inv @ T[:3, 3]
    return T_inv


def compose(a: Pose, b: Pose) -> Pose:
    """Compose two ENU poses: T_a * T_b."""
    a.require(ENU)
    b.require(ENU)
    return matrix_to_pose(pose_to_matrix(a) @ pose_to_matrix(b), ENU)


def relative_pose(world_to_parent: Pose, world_to_child: Pose) -> Pose:
    """
    Pose of the child expressed in the parent's frame.

    parent_T_child = (world_T_parent)^{-1} * world_T_child

    Both inputs must already be ENU; this function never converts conventions.
    relative_pose(P, P) is the identity transform.
    """
    world_to_parent.require(ENU)
    world_to_child.require(ENU)
    T = invert_isometry(pose_to_matrix(world_to_parent)) @ pose_to_matrix(world_to_child)
    return matrix_to_pose(T, ENU)
