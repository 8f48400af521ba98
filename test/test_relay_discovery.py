"""
Discovery tests: first non-empty sample of a key creates its channel once,
republishes that sample and publishes the initial TF edges.
"""

import logging
import threading

import numpy as np
import pytest

from airsim_ros_relay.common.param_models import RelayParams
from airsim_ros_relay.geometry.poses import ENU, NED, Pose
from airsim_ros_relay.relay.context import RelayContext
from airsim_ros_relay.relay.registry import DiscoveryState
from airsim_ros_relay.relay.tick import TickDriver
from airsim_ros_relay.sensors.samples import ImageKey
from airsim_ros_relay.transport.memory import InMemoryTransport

from conftest import make_image, make_lidar

SCENE_TOPIC = "/robot1/front_center/scene"


@pytest.fixture
def context(params, transport) -> RelayContext:
    return RelayContext(params, transport)


class TestImageDiscovery:
    def test_one_channel_per_key(self, context, transport):
        for i in range(5):
            context.on_image_samples([make_image(vehicle_xyz=(float(i), 0.0, 0.0))])
        assert transport.advertise_log == [SCENE_TOPIC]
        counters = context.counters_snapshot()
        assert counters.channels_created == 1
        assert counters.first_publications == 1
        # Later samples only update the cache; the tick republishes them
        assert len(transport.images(SCENE_TOPIC)) == 1

    def test_first_sample_published_immediately(self, context, transport):
        sample = make_image()
        context.on_image_sample(sample)
        (msg,) = transport.images(SCENE_TOPIC)
        assert msg.frame_id == "robot1/front_center/images"
        assert msg.encoding == "rgb8"
        assert msg.stamp == 100.0
        assert np.array_equal(msg.pixels, sample.pixels)

    def test_float_image_encoding(self, context, transport):
        context.on_image_sample(make_image(kind="DepthPlanar", as_float=True))
        (msg,) = transport.images("/robot1/front_center/depthplanar")
        assert msg.encoding == "32FC1"

    def test_channel_count_matches_distinct_keys(self, context, transport):
        batch = [
            make_image(camera="front_center", kind="Scene"),
            make_image(camera="Front_Center", kind="scene"),
            make_image(camera="front_center", kind="DepthPlanar", as_float=True),
            make_image(camera="bottom", kind="Scene"),
        ]
        context.on_image_samples(batch)
        assert sorted(transport.advertise_log) == [
            "/robot1/bottom/scene",
            "/robot1/front_center/depthplanar",
            "/robot1/front_center/scene",
        ]
        assert len(context.image_channels) == 3

    def test_camera_edge_shared_across_kinds(self, context, transport):
        context.on_image_samples([
            make_image(kind="Scene"),
            make_image(kind="DepthPlanar", as_float=True),
        ])
        edges = [(tf.parent_frame, tf.child_frame) for tf in transport.transforms()]
        assert edges.count(("robot1/base_link", "robot1/front_center/pose")) == 1

    def test_camera_edge_value(self, context, transport):
        context.on_image_sample(make_image(sensor_xyz=(0.5, 0.0, 0.0)))
        tf = transport.latest_transform("robot1/base_link", "robot1/front_center/pose")
        assert tf is not None
        assert tf.pose.frame == ENU
        assert np.allclose(tf.pose.position, [0.5, 0.0, 0.0], atol=1e-12)

    def test_no_world_edge_from_cameras_when_lidar_enabled(self, context, transport):
        context.on_image_sample(make_image())
        assert transport.latest_transform("world", "robot1/base_link") is None

    def test_world_edge_from_cameras_without_lidar(self, transport):
        ctx = RelayContext(RelayParams(entity_id=1, publish_lidar=False), transport)
        ctx.on_image_sample(make_image(vehicle_xyz=(1.0, 2.0, -3.0)))
        tf = transport.latest_transform("world", "robot1/base_link")
        assert tf is not None
        assert np.allclose(tf.pose.position, [2.0, 1.0, 3.0])

    def test_empty_image_creates_nothing(self, context, transport):
        context.on_image_sample(make_image(pixels=np.zeros((0, 0, 3), dtype=np.uint8)))
        assert transport.advertise_log == []
        assert context.cache.snapshot().images == {}
        assert context.counters_snapshot().empty_samples_dropped == 1
        assert context.registry.state(ImageKey("front_center", "scene")) == DiscoveryState.UNDISCOVERED

    def test_images_disabled(self, transport):
        ctx = RelayContext(RelayParams(entity_id=1, publish_images=False), transport)
        ctx.on_image_sample(make_image())
        assert transport.advertise_log == []
        assert ctx.cache.snapshot().images == {}

    def test_state_after_discovery(self, context):
        context.on_image_sample(make_image())
        assert context.registry.state(ImageKey("front_center", "scene")) == DiscoveryState.CHANNEL_CREATED


class TestLidarDiscovery:
    def test_lidar_channel_and_edges(self, context, transport):
        context.on_lidar_sample(make_lidar(vehicle_xyz=(1.0, 2.0, -3.0), sensor_xyz=(1.0, 2.0, -4.0)))
        assert transport.advertise_log == ["/robot1/base_scan"]
        (cloud,) = transport.clouds("/robot1/base_scan")
        assert cloud.frame_id == "robot1/base_laser"
        assert cloud.width == 2

        world = transport.latest_transform("world", "robot1/base_link")
        laser = transport.latest_transform("robot1/base_link", "robot1/base_laser")
        assert np.allclose(world.pose.position, [2.0, 1.0, 3.0])
        # Sensor 1 m above the vehicle; the converted NED body frame has z pointing down
        assert np.allclose(laser.pose.position, [0.0, 0.0, -1.0], atol=1e-12)
        assert context.counters_snapshot().edges_created == 2

    def test_undersized_sweep_ignored(self, context, transport):
        context.on_lidar_sample(make_lidar(points=[1.0, 2.0, 3.0]))
        assert transport.advertise_log == []
        assert context.cache.lidar() is None

    def test_one_channel_for_many_sweeps(self, context, transport):
        for _ in range(4):
            context.on_lidar_sample(make_lidar())
        assert transport.advertise_log == ["/robot1/base_scan"]

    def test_lidar_disabled(self, transport):
        ctx = RelayContext(RelayParams(entity_id=1, publish_lidar=False), transport)
        ctx.on_lidar_sample(make_lidar())
        assert transport.advertise_log == []


class TestConcurrentDiscovery:
    def test_racing_arrivals_single_winner(self, params, clock):
        entered = threading.Event()
        proceed = threading.Event()

        def slow_advertise(topic):
            entered.set()
            assert proceed.wait(timeout=5.0)

        transport = InMemoryTransport(clock=clock, on_advertise=slow_advertise)
        ctx = RelayContext(params, transport)
        winner_sample = make_image(pixels=np.full((2, 2, 3), 1, dtype=np.uint8))
        loser_sample = make_image(pixels=np.full((2, 2, 3), 2, dtype=np.uint8))

        winner = threading.Thread(target=ctx.on_image_sample, args=(winner_sample,))
        winner.start()
        assert entered.wait(timeout=5.0)
        # Arrives while the winner is still creating the channel
        ctx.on_image_sample(loser_sample)
        proceed.set()
        winner.join(timeout=5.0)

        assert transport.advertise_log == [SCENE_TOPIC]
        first = transport.images(SCENE_TOPIC)
        assert len(first) == 1
        assert np.all(first[0].pixels == 1)

        # The loser's sample is the cached one and goes out on the next tick
        TickDriver(ctx).step(1.0, 0.1)
        published = transport.images(SCENE_TOPIC)
        assert len(published) == 2
        assert np.all(published[-1].pixels == 2)

    def test_many_threads_one_channel(self, params, transport):
        ctx = RelayContext(params, transport)
        barrier = threading.Barrier(6)

        def arrive():
            barrier.wait()
            for _ in range(20):
                ctx.on_image_sample(make_image())

        threads = [threading.Thread(target=arrive) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert transport.advertise_log == [SCENE_TOPIC]
        assert ctx.counters_snapshot().channels_created == 1


class TestDiscoveryFailures:
    def test_advertise_failure_releases_claim(self, context, transport, caplog):
        transport.failing_topics.add(SCENE_TOPIC)
        with caplog.at_level(logging.WARNING):
            context.on_image_sample(make_image())
        assert transport.advertise_log == []
        assert not context.registry.is_claimed(ImageKey("front_center", "scene"))
        assert context.counters_snapshot().publish_failures == 1
        assert "Failed to create channel" in caplog.text

        transport.failing_topics.clear()
        context.on_image_sample(make_image())
        assert transport.advertise_log == [SCENE_TOPIC]

    def test_tf_failure_keeps_channel(self, context, transport):
        transport.failing_topics.add("/tf")
        context.on_image_sample(make_image())
        assert SCENE_TOPIC in transport.advertise_log
        assert ImageKey("front_center", "scene") in context.image_channels
        assert context.counters_snapshot().publish_failures == 1


class TestInitialWorldPose:
    def test_published_at_construction(self, params, transport):
        pose = Pose.from_xyz_quat([5.0, 6.0, 7.0], [0.0, 0.0, 0.0, 1.0], ENU)
        RelayContext(params, transport, initial_world_pose=pose)
        tf = transport.latest_transform("world", "robot1/base_link")
        assert np.allclose(tf.pose.position, [5.0, 6.0, 7.0])

    def test_ned_pose_rejected(self, params, transport):
        with pytest.raises(ValueError):
            RelayContext(params, transport, initial_world_pose=Pose.identity(NED))


class TestDiscoveryOrdering:
    def test_tick_waits_for_first_frame_and_edges(self, params, clock):
        in_first_publish = threading.Event()
        release = threading.Event()
        events = []

        def on_publish(topic):
            events.append(("image", threading.current_thread().name))
            if threading.current_thread().name == "arrival":
                in_first_publish.set()
                assert release.wait(timeout=5.0)

        transport = InMemoryTransport(clock=clock, on_publish=on_publish)
        ctx = RelayContext(params, transport)
        driver = TickDriver(ctx)

        arrival = threading.Thread(target=ctx.on_image_sample, args=(make_image(),), name="arrival")
        arrival.start()
        assert in_first_publish.wait(timeout=5.0)

        # Discovery is still in flight: the tick must not see the channel yet
        report = driver.step(1.0, 0.1)
        assert report.images_published == 0
        assert report.skipped_keys == [ImageKey("front_center", "scene")]
        assert report.transforms_published == 0
        assert ctx.registry.state(ImageKey("front_center", "scene")) == DiscoveryState.UNDISCOVERED

        release.set()
        arrival.join(timeout=5.0)

        assert events == [("image", "arrival")]
        first_tf = transport.tf_batches[0]
        assert [(tf.parent_frame, tf.child_frame) for tf in first_tf] == [
            ("robot1/base_link", "robot1/front_center/pose"),
        ]

        report = driver.step(1.1, 0.1)
        assert report.images_published == 1
        assert events[-1] == ("image", "MainThread")
