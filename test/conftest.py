import os
import sys
import pytest

import numpy as np

# Ensure local package import works for pytest collection.
_TEST_DIR = os.path.dirname(__file__)
_PKG_ROOT = os.path.abspath(os.path.join(_TEST_DIR, ".."))
if _PKG_ROOT not in sys.path:
    sys.path.insert(0, _PKG_ROOT)

from airsim_ros_relay.common.param_models import RelayParams
from airsim_ros_relay.geometry.poses import NED, Pose
from airsim_ros_relay.sensors.samples import ImageSample, LidarSample
from airsim_ros_relay.transport.memory import InMemoryTransport


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def config_path() -> str:
    """Path to the shipped relay config (config/relay.yaml)."""
    path = os.path.join(_PKG_ROOT, "config", "relay.yaml")
    if not os.path.exists(path):
        pytest.skip("config/relay.yaml not found")
    return path


@pytest.fixture
def params() -> RelayParams:
    """Default relay parameters for entity 1 (namespace robot1)."""
    return RelayParams(entity_id=1)


# =============================================================================
# Transport Fixtures
# =============================================================================


class FakeClock:
    """Manually advanced clock for deterministic stamps."""

    def __init__(self, start: float = 100.0) -> None:
        self.t = start

    def __call__(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport(clock) -> InMemoryTransport:
    return InMemoryTransport(clock=clock)


# =============================================================================
# Sample Factories
# =============================================================================


def ned_pose(xyz=(0.0, 0.0, 0.0), quat=(0.0, 0.0, 0.0, 1.0)) -> Pose:
    return Pose.from_xyz_quat(xyz, quat, NED)


def make_image(
    camera: str = "front_center",
    kind: str = "Scene",
    vehicle_xyz=(0.0, 0.0, 0.0),
    sensor_xyz=(0.5, 0.0, 0.0),
    pixels=None,
    as_float: bool = False,
    vehicle_name: str = "drone",
) -> ImageSample:
    if pixels is None:
        if as_float:
            pixels = np.full((4, 6), 2.5, dtype=np.float32)
        else:
            pixels = np.arange(4 * 6 * 3, dtype=np.uint8).reshape(4, 6, 3)
    return ImageSample(
        camera_name=camera,
        image_kind_name=kind,
        pixels=pixels,
        pixels_as_float=as_float,
        vehicle_pose_ned=ned_pose(vehicle_xyz),
        sensor_pose_ned=ned_pose(sensor_xyz),
        vehicle_name=vehicle_name,
    )


def make_lidar(
    points=(1.0, 2.0, 3.0, 4.0, 5.0, 6.0),
    vehicle_xyz=(0.0, 0.0, 0.0),
    sensor_xyz=(0.0, 0.0, -1.0),
) -> LidarSample:
    return LidarSample(
        points=np.asarray(points, dtype=np.float32),
        vehicle_pose_ned=ned_pose(vehicle_xyz),
        sensor_pose_ned=ned_pose(sensor_xyz),
    )


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def lidar_factory():
    return make_lidar


# =============================================================================
# Test Utility Fixtures
# =============================================================================


@pytest.fixture
def numpy_seed():
    """Set numpy random seed for reproducible tests."""
    np.random.seed(42)
    yield


@pytest.fixture
def random_unit_quats(numpy_seed) -> np.ndarray:
    """A handful of random unit quaternions (x, y, z, w)."""
    q = np.random.randn(8, 4)
    return q / np.linalg.norm(q, axis=1, keepdims=True)
