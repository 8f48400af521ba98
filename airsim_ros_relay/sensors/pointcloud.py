"""
PointCloud2 payload encoding for LiDAR sweeps.

Schema: x, y, z (float32, count 1) at offsets 0/4/8, point_step 12, one row,
little-endian, dense. The payload is the raw little-endian float32 bytes of the
flat point list. Transport-neutral: the ROS 2 transport copies these fields
into sensor_msgs/PointCloud2 verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from airsim_ros_relay.common import constants

# sensor_msgs/PointField datatype constant
FLOAT32 = 7


@dataclass(frozen=True)
class PointFieldSpec:
    name: str
    offset: int
    datatype: int = FLOAT32
    count: int = 1


def _xyz_fields() -> List[PointFieldSpec]:
    return [
        PointFieldSpec(name=name, offset=i * constants.POINT_FIELD_BYTES)
        for i, name in enumerate(constants.POINT_FIELD_NAMES)
    ]


@dataclass
class PointCloudRecord:
    """Transport-neutral PointCloud2."""

    frame_id: str = ""
    stamp: Optional[float] = None
    height: int = 0
    width: int = 0
    fields: List[PointFieldSpec] = field(default_factory=_xyz_fields)
    is_bigendian: bool = False
    point_step: int = constants.POINT_STEP
    row_step: int = 0
    data: bytes = b""
    is_dense: bool = True


def encode_point_cloud(
    points: Sequence[float],
    frame_id: str = "",
    stamp: Optional[float] = None,
) -> PointCloudRecord:
    """
    Encode a flat [x0, y0, z0, x1, ...] list.

    Lists shorter than LIDAR_MIN_FLOATS produce an empty cloud (width 0, no
    payload); that is "no data", not an error. A trailing partial triplet is
    dropped.
    """
    flat = np.asarray(points, dtype=np.float32).reshape(-1)
    record = PointCloudRecord(frame_id=frame_id, stamp=stamp)
    if flat.size < constants.LIDAR_MIN_FLOATS:
        return record

    n = int(flat.size // constants.POINT_FLOATS)
    record.height = 1
    record.width = n
    record.row_step = record.point_step * n
    record.data = flat[: n * constants.POINT_FLOATS].astype("<f4").tobytes()
    return record


def decode_point_cloud(record: PointCloudRecord) -> np.ndarray:
    """Inverse of encode_point_cloud: payload -> (N, 3) float32 array."""
    n = record.width * record.height
    if n == 0:
        return np.empty((0, 3), dtype=np.float32)
    dtype = "<f4" if not record.is_bigendian else ">f4"
    return np.frombuffer(record.data, dtype=dtype).reshape(n, constants.POINT_FLOATS).astype(np.float32)
