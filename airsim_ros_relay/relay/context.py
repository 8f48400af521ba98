"""
Relay context: all state for one relayed entity.

Arrival side (called from the sensor's delivery thread):
    on_image_samples() / on_image_sample() / on_lidar_sample()
      1. drop empty samples
      2. overwrite the cache slot
      3. DiscoveryRegistry.claim(key); the single winner then, outside any lock,
         advertises the channel, republishes the sample it just received,
         publishes the initial TF edge(s) and only then registers the channel
         for the tick side

Tick side: TickDriver (relay/tick.py) reads the cache snapshot, the channel
maps and the transform table owned here.

No lock in this module is held across a transport call.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Hashable, List, Optional, Sequence

from airsim_ros_relay.common import constants
from airsim_ros_relay.common.counters import CounterBoard, RelayCounters
from airsim_ros_relay.common.param_models import RelayParams
from airsim_ros_relay.geometry.poses import ENU, Pose
from airsim_ros_relay.relay.cache import SampleCache
from airsim_ros_relay.relay.channels import ChannelMap
from airsim_ros_relay.relay.naming import FrameNames
from airsim_ros_relay.relay.registry import DiscoveryRegistry
from airsim_ros_relay.relay.transforms import (
    EdgeKey,
    TransformTable,
    sensor_in_vehicle,
    vehicle_in_world,
)
from airsim_ros_relay.sensors.pointcloud import encode_point_cloud
from airsim_ros_relay.sensors.samples import ImageSample, LidarSample
from airsim_ros_relay.transport.base import (
    ImageChannel,
    ImageMessage,
    PointCloudChannel,
    TransformRecord,
    Transport,
)
from airsim_ros_relay.viz.rerun_preview import RerunPreview, preview_window_name

_logger = logging.getLogger(__name__)


class RelayContext:
    """
    Owned relay state for one entity.

    Args:
        params: relay parameters (namespace, enabled modalities, preview)
        transport: output transport (ROS 2 or in-memory)
        logger: optional logger (e.g. an rclpy node logger); defaults to the
            module logger
        preview: optional preview surface; created from params when
            show_preview is set and none is given
        initial_world_pose: optional ENU pose of the entity, published once as
            world -> base_link before any sample arrives
    """

    def __init__(
        self,
        params: RelayParams,
        transport: Transport,
        logger: Any = None,
        preview: Optional[RerunPreview] = None,
        initial_world_pose: Optional[Pose] = None,
    ) -> None:
        self.params = params
        self.transport = transport
        self.names = FrameNames(namespace=params.namespace, world=params.world_frame)
        self.log = logger if logger is not None else _logger

        self.cache = SampleCache()
        self.registry = DiscoveryRegistry()
        self.image_channels: ChannelMap[ImageChannel] = ChannelMap()
        self.lidar_channels: ChannelMap[PointCloudChannel] = ChannelMap()
        self.transforms = TransformTable()
        self.counters = CounterBoard()

        self._miss_lock = threading.Lock()
        self._missing_warned: set = set()

        self.preview = preview
        if self.preview is None and params.show_preview:
            self.preview = RerunPreview(
                spawn=params.preview_spawn,
                recording_path=params.preview_recording_path or None,
            )
        if self.preview is not None:
            self.preview.init()

        if params.publish_images:
            self.log.info(f"Publishing AirSim images to ROS under /{self.names.namespace}")
        if params.publish_lidar:
            self.log.info(f"Publishing AirSim LiDAR data to ROS on {self.names.scan_topic}")
        if params.show_preview:
            self.log.info("Showing camera images in the Rerun preview")

        if initial_world_pose is not None:
            self._publish_initial_world(initial_world_pose)

    # ------------------------------------------------------------------
    # Arrival side
    # ------------------------------------------------------------------

    def on_image_samples(self, samples: Sequence[ImageSample]) -> None:
        """Handle one delivery from the AirSim camera sensor (a batch of images)."""
        for sample in samples:
            self.on_image_sample(sample)

    def on_image_sample(self, sample: ImageSample) -> None:
        if not self.params.publish_images:
            return
        if not self.cache.put_image(sample):
            self.counters.add("empty_samples_dropped")
            self.log.debug(f"Ignoring empty image for {sample.key}")
            return
        if self.registry.claim(sample.key):
            self._discover_image(sample)

    def on_lidar_sample(self, sample: LidarSample) -> None:
        if not self.params.publish_lidar:
            return
        if not self.cache.put_lidar(sample):
            self.counters.add("empty_samples_dropped")
            self.log.debug("Ignoring LiDAR sweep without points")
            return
        if self.registry.claim(constants.LIDAR_KEY):
            self._discover_lidar(sample)

    # ------------------------------------------------------------------
    # Discovery (winner only, outside the registry lock)
    # ------------------------------------------------------------------

    def _discover_image(self, sample: ImageSample) -> None:
        key = sample.key
        topic = self.names.image_topic(key)
        channel = self._advertise(key, topic, self.transport.create_image_channel)
        if channel is None:
            return
        self.counters.add("channels_created")
        self.log.info(f"New image stream: {topic}")

        # Publish the sample we just received so the first frame is not lost
        if self.publish_image(channel, sample, self.stamp()):
            self.counters.add("first_publications")

        # One pose edge per camera, shared by all of its image kinds
        new_edges: List[EdgeKey] = []
        camera_edge = EdgeKey(self.names.base_link, self.names.camera_pose(key.camera))
        if self.transforms.add_if_absent(
            camera_edge, sensor_in_vehicle(sample.vehicle_pose_ned, sample.sensor_pose_ned)
        ):
            new_edges.append(camera_edge)
            # Without LiDAR, the cameras carry the vehicle pose
            if not self.params.publish_lidar:
                world_edge = EdgeKey(self.names.world, self.names.base_link)
                self.transforms.set(world_edge, vehicle_in_world(sample.vehicle_pose_ned))
                new_edges.append(world_edge)
        self._publish_first_edges(new_edges)

        # Visible to the tick only once the first frame and edges are out
        self.image_channels.add(key, channel)
        self.registry.mark_created(key)

    def _discover_lidar(self, sample: LidarSample) -> None:
        key = constants.LIDAR_KEY
        topic = self.names.scan_topic
        channel = self._advertise(key, topic, self.transport.create_point_cloud_channel)
        if channel is None:
            return
        self.counters.add("channels_created")
        self.log.info(f"New point cloud stream: {topic}")

        if self.publish_cloud(channel, sample, self.stamp()):
            self.counters.add("first_publications")

        laser_edge = EdgeKey(self.names.base_link, self.names.base_laser)
        world_edge = EdgeKey(self.names.world, self.names.base_link)
        self.transforms.set(laser_edge, sensor_in_vehicle(sample.vehicle_pose_ned, sample.sensor_pose_ned))
        self.transforms.set(world_edge, vehicle_in_world(sample.vehicle_pose_ned))
        self._publish_first_edges([laser_edge, world_edge])

        self.lidar_channels.add(key, channel)
        self.registry.mark_created(key)

    def _advertise(self, key: Hashable, topic: str, create: Callable[[str], Any]) -> Any:
        try:
            return create(topic)
        except Exception as e:
            # Let the next sample for this key retry discovery
            self.registry.release(key)
            self.counters.add("publish_failures")
            self.log.warning(f"Failed to create channel {topic}: {e}")
            return None

    def _publish_first_edges(self, edges: List[EdgeKey]) -> None:
        if not edges:
            return
        stamp = self.stamp()
        records = []
        for edge in edges:
            pose = self.transforms.get(edge)
            if pose is not None:
                records.append(TransformRecord(edge.parent, edge.child, stamp, pose))
        if self.send_transforms(records):
            self.counters.add("edges_created", len(records))

    def _publish_initial_world(self, pose: Pose) -> None:
        pose.require(ENU)
        world_edge = EdgeKey(self.names.world, self.names.base_link)
        self.transforms.set(world_edge, pose)
        self._publish_first_edges([world_edge])

    # ------------------------------------------------------------------
    # Publication helpers (shared with the tick driver)
    # ------------------------------------------------------------------

    def stamp(self, sim_time: Optional[float] = None) -> float:
        """Fresh publish stamp: transport clock, or simulation time when configured."""
        if self.params.stamp_source == constants.STAMP_SOURCE_SIMULATION and sim_time is not None:
            return float(sim_time)
        return self.transport.now()

    def publish_image(self, channel: ImageChannel, sample: ImageSample, stamp: float) -> bool:
        msg = ImageMessage(
            frame_id=self.names.camera_images(sample.key.camera),
            stamp=stamp,
            encoding=sample.encoding,
            pixels=sample.pixels,
        )
        try:
            channel.publish(msg)
        except Exception as e:
            self.counters.add("publish_failures")
            self.log.warning(f"Image publish on {channel.topic} failed: {e}")
            return False
        self.counters.add("images_published")
        return True

    def publish_cloud(self, channel: PointCloudChannel, sample: LidarSample, stamp: float) -> bool:
        record = encode_point_cloud(sample.points, frame_id=self.names.base_laser, stamp=stamp)
        try:
            channel.publish(record)
        except Exception as e:
            self.counters.add("publish_failures")
            self.log.warning(f"Point cloud publish on {channel.topic} failed: {e}")
            return False
        self.counters.add("clouds_published")
        return True

    def send_transforms(self, records: List[TransformRecord]) -> bool:
        if not records:
            return False
        try:
            self.transport.send_transforms(records)
        except Exception as e:
            self.counters.add("publish_failures")
            self.log.warning(f"TF publish of {len(records)} edges failed: {e}")
            return False
        self.counters.add("transforms_published", len(records))
        return True

    def show_preview(self, sample: ImageSample, time_sec: float) -> None:
        if self.preview is None or not self.params.show_preview:
            return
        window = preview_window_name(sample.vehicle_name, sample.camera_name, sample.image_kind_name)
        try:
            self.preview.show_image(window, sample.pixels, sample.pixels_as_float, time_sec)
        except Exception as e:
            self.log.warning(f"Preview of {window} failed: {e}")

    def note_lookup_miss(self, key: Hashable) -> None:
        """A cached key has no channel yet (discovery still in flight); warn once."""
        self.counters.add("lookup_misses")
        with self._miss_lock:
            first = key not in self._missing_warned
            self._missing_warned.add(key)
        if first:
            self.log.warning(f"No channel for cached key {key}; skipping until discovery completes")

    # ------------------------------------------------------------------
    # Introspection / shutdown
    # ------------------------------------------------------------------

    def counters_snapshot(self) -> RelayCounters:
        return self.counters.snapshot()

    def shutdown(self) -> None:
        if self.preview is not None:
            try:
                self.preview.flush()
            except Exception as e:
                self.log.warning(f"Preview flush failed: {e}")
        self.log.info(f"Relay /{self.names.namespace} shutting down: {self.counters.as_dict()}")
