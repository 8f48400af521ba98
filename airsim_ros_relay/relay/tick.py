"""
Tick driver: one republish pass per simulation step.

step(t, dt):
  1. snapshot the sample cache (short lock, released before any publish)
  2. images: republish every cached sample on its channel with a fresh stamp,
     mirror to the preview
  3. lidar: re-encode the cached sweep and republish it
  4. transforms: recompute existing edges from the latest samples, then
     republish the whole table in one batch

Never blocks on discovery: a cached key whose channel does not exist yet is
skipped (warned once) and picked up on a later tick.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, List

from airsim_ros_relay.common import constants
from airsim_ros_relay.relay.cache import CacheSnapshot
from airsim_ros_relay.relay.context import RelayContext
from airsim_ros_relay.relay.transforms import EdgeKey, sensor_in_vehicle, vehicle_in_world
from airsim_ros_relay.transport.base import TransformRecord


@dataclass
class TickReport:
    t: float
    dt: float
    images_published: int = 0
    clouds_published: int = 0
    transforms_published: int = 0
    skipped_keys: List[Hashable] = field(default_factory=list)
    publish_failures: int = 0


class TickDriver:
    def __init__(self, context: RelayContext) -> None:
        self.context = context

    def step(self, t: float, dt: float) -> TickReport:
        ctx = self.context
        report = TickReport(t=float(t), dt=float(dt))

        snap = ctx.cache.snapshot()
        if ctx.params.publish_images:
            self._publish_images(snap, report)
        if ctx.params.publish_lidar:
            self._publish_lidar(snap, report)
        self._update_transforms(snap)
        self._publish_transforms(report)

        ctx.counters.add("ticks")
        return report

    def _publish_images(self, snap: CacheSnapshot, report: TickReport) -> None:
        ctx = self.context
        for key, sample in snap.images.items():
            channel = ctx.image_channels.get(key)
            if channel is None:
                ctx.note_lookup_miss(key)
                report.skipped_keys.append(key)
                continue
            if ctx.publish_image(channel, sample, ctx.stamp(report.t)):
                report.images_published += 1
                ctx.registry.mark_active(key)
            else:
                report.publish_failures += 1
            ctx.show_preview(sample, report.t)

    def _publish_lidar(self, snap: CacheSnapshot, report: TickReport) -> None:
        ctx = self.context
        if snap.lidar is None:
            return
        key = constants.LIDAR_KEY
        channel = ctx.lidar_channels.get(key)
        if channel is None:
            ctx.note_lookup_miss(key)
            report.skipped_keys.append(key)
            return
        if ctx.publish_cloud(channel, snap.lidar, ctx.stamp(report.t)):
            report.clouds_published += 1
            ctx.registry.mark_active(key)
        else:
            report.publish_failures += 1

    def _update_transforms(self, snap: CacheSnapshot) -> None:
        """Recompute edges that already exist; new edges are only added by discovery."""
        ctx = self.context
        names = ctx.names
        world_edge = EdgeKey(names.world, names.base_link)

        latest_cameras = snap.latest_per_camera() if ctx.params.publish_images else {}
        for camera, sample in latest_cameras.items():
            ctx.transforms.update(
                EdgeKey(names.base_link, names.camera_pose(camera)),
                sensor_in_vehicle(sample.vehicle_pose_ned, sample.sensor_pose_ned),
            )

        if ctx.params.publish_lidar:
            if snap.lidar is not None:
                ctx.transforms.update(
                    EdgeKey(names.base_link, names.base_laser),
                    sensor_in_vehicle(snap.lidar.vehicle_pose_ned, snap.lidar.sensor_pose_ned),
                )
                ctx.transforms.update(world_edge, vehicle_in_world(snap.lidar.vehicle_pose_ned))
        elif latest_cameras:
            newest = max(
                snap.images.items(),
                key=lambda item: snap.image_seq.get(item[0], 0),
            )[1]
            ctx.transforms.update(world_edge, vehicle_in_world(newest.vehicle_pose_ned))

    def _publish_transforms(self, report: TickReport) -> None:
        ctx = self.context
        edges = ctx.transforms.items()
        if not edges:
            return
        stamp = ctx.stamp(report.t)
        records = [TransformRecord(edge.parent, edge.child, stamp, pose) for edge, pose in edges]
        if ctx.send_transforms(records):
            report.transforms_published = len(records)
        else:
            report.publish_failures += 1
