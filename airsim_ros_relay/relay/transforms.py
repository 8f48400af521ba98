"""
Transform table and edge computations.

The table holds the last published ENU pose for every TF edge. Edges are added
once and never removed; every tick republishes all of them. The edge values are
recomputed from the latest cached samples each tick, never converted once and
reused.
"""

from __future__ import annotations

import threading
from typing import Dict, List, NamedTuple, Optional, Tuple

from airsim_ros_relay.geometry.frames import ned_pose_to_enu
from airsim_ros_relay.geometry.poses import ENU, Pose, relative_pose


class EdgeKey(NamedTuple):
    parent: str
    child: str


class TransformTable:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._edges: Dict[EdgeKey, Pose] = {}

    def add_if_absent(self, edge: EdgeKey, pose: Pose) -> bool:
        """Add a new edge; False (and no change) if it already exists."""
        pose.require(ENU)
        with self._lock:
            if edge in self._edges:
                return False
            self._edges[edge] = pose
            return True

    def set(self, edge: EdgeKey, pose: Pose) -> bool:
        """Add or update an edge. Returns True if the edge was new."""
        pose.require(ENU)
        with self._lock:
            is_new = edge not in self._edges
            self._edges[edge] = pose
            return is_new

    def update(self, edge: EdgeKey, pose: Pose) -> bool:
        """Update an existing edge only. Returns False if the edge does not exist yet."""
        pose.require(ENU)
        with self._lock:
            if edge not in self._edges:
                return False
            self._edges[edge] = pose
            return True

    def get(self, edge: EdgeKey) -> Optional[Pose]:
        with self._lock:
            return self._edges.get(edge)

    def items(self) -> List[Tuple[EdgeKey, Pose]]:
        with self._lock:
            return list(self._edges.items())

    def __contains__(self, edge: EdgeKey) -> bool:
        with self._lock:
            return edge in self._edges

    def __len__(self) -> int:
        with self._lock:
            return len(self._edges)


def vehicle_in_world(vehicle_pose_ned: Pose) -> Pose:
    """world_T_vehicle in ENU."""
    return ned_pose_to_enu(vehicle_pose_ned)


def sensor_in_vehicle(vehicle_pose_ned: Pose, sensor_pose_ned: Pose) -> Pose:
    """
    vehicle_T_sensor in ENU.

    AirSim reports both poses in the NED world frame; convert each to ENU, then
    take (world_T_vehicle)^{-1} * world_T_sensor.
    """
    return relative_pose(ned_pose_to_enu(vehicle_pose_ned), ned_pose_to_enu(sensor_pose_ned))
