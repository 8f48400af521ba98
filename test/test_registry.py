"""Discovery registry, channel map and sample cache tests."""

import threading

import numpy as np
import pytest

from airsim_ros_relay.relay.cache import SampleCache
from airsim_ros_relay.relay.channels import ChannelMap
from airsim_ros_relay.relay.registry import DiscoveryRegistry, DiscoveryState
from airsim_ros_relay.sensors.samples import ImageKey

from conftest import make_image, make_lidar


class TestDiscoveryRegistry:
    def test_first_claim_wins(self):
        reg = DiscoveryRegistry()
        assert reg.claim("a")
        assert not reg.claim("a")
        assert reg.claim("b")
        assert reg.keys() == ["a", "b"]

    def test_state_machine(self):
        reg = DiscoveryRegistry()
        assert reg.state("k") == DiscoveryState.UNDISCOVERED
        reg.claim("k")
        assert reg.state("k") == DiscoveryState.UNDISCOVERED
        reg.mark_created("k")
        assert reg.state("k") == DiscoveryState.CHANNEL_CREATED
        reg.mark_active("k")
        assert reg.state("k") == DiscoveryState.ACTIVE

    def test_mark_active_requires_channel(self):
        reg = DiscoveryRegistry()
        reg.claim("k")
        reg.mark_active("k")
        assert reg.state("k") == DiscoveryState.UNDISCOVERED

    def test_release_allows_reclaim(self):
        reg = DiscoveryRegistry()
        assert reg.claim("k")
        reg.release("k")
        assert not reg.is_claimed("k")
        assert reg.claim("k")

    def test_release_after_creation_is_ignored(self):
        reg = DiscoveryRegistry()
        reg.claim("k")
        reg.mark_created("k")
        reg.release("k")
        assert reg.is_claimed("k")

    def test_concurrent_claims_single_winner(self):
        reg = DiscoveryRegistry()
        barrier = threading.Barrier(8)
        wins = []

        def worker():
            barrier.wait()
            if reg.claim("shared"):
                wins.append(threading.get_ident())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(wins) == 1


class TestChannelMap:
    def test_add_once(self):
        channels = ChannelMap()
        channels.add("k", object())
        assert "k" in channels
        assert len(channels) == 1
        with pytest.raises(KeyError):
            channels.add("k", object())

    def test_get_missing(self):
        assert ChannelMap().get("missing") is None


class TestSampleCache:
    def test_latest_wins(self):
        cache = SampleCache()
        first = make_image(vehicle_xyz=(1.0, 0.0, 0.0))
        second = make_image(vehicle_xyz=(2.0, 0.0, 0.0))
        assert cache.put_image(first)
        assert cache.put_image(second)
        assert cache.image(ImageKey("front_center", "scene")) is second

    def test_keys_are_lower_cased(self):
        cache = SampleCache()
        cache.put_image(make_image(camera="Front_Center", kind="DepthPlanar"))
        assert cache.image(ImageKey("front_center", "depthplanar")) is not None

    def test_empty_image_ignored(self):
        cache = SampleCache()
        empty = make_image(pixels=np.zeros((0, 0, 3), dtype=np.uint8))
        assert not cache.put_image(empty)
        assert cache.snapshot().images == {}

    def test_undersized_lidar_ignored(self):
        cache = SampleCache()
        assert not cache.put_lidar(make_lidar(points=[1.0, 2.0, 3.0]))
        assert cache.lidar() is None
        sweep = make_lidar()
        assert cache.put_lidar(sweep)
        assert cache.lidar() is sweep

    def test_snapshot_is_detached(self):
        cache = SampleCache()
        cache.put_image(make_image(camera="a"))
        snap = cache.snapshot()
        cache.put_image(make_image(camera="b"))
        assert list(snap.images) == [ImageKey("a", "scene")]

    def test_latest_per_camera(self):
        cache = SampleCache()
        scene = make_image(camera="cam", kind="scene")
        depth = make_image(camera="cam", kind="depthplanar", as_float=True)
        other = make_image(camera="other")
        for sample in (scene, other, depth):
            cache.put_image(sample)
        latest = cache.snapshot().latest_per_camera()
        assert latest["cam"] is depth
        assert latest["other"] is other
