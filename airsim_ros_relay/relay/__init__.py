"""
Relay core: discovery, latest-sample cache, transform table, tick driver.

One RelayContext per relayed entity. The host calls the context's arrival
handlers from whatever thread delivers AirSim samples, and TickDriver.step()
once per simulation step.
"""

from airsim_ros_relay.relay.cache import CacheSnapshot, SampleCache
from airsim_ros_relay.relay.channels import ChannelMap
from airsim_ros_relay.relay.context import RelayContext
from airsim_ros_relay.relay.naming import FrameNames
from airsim_ros_relay.relay.registry import DiscoveryRegistry, DiscoveryState
from airsim_ros_relay.relay.tick import TickDriver, TickReport
from airsim_ros_relay.relay.transforms import EdgeKey, TransformTable

__all__ = [
    "CacheSnapshot",
    "SampleCache",
    "ChannelMap",
    "RelayContext",
    "FrameNames",
    "DiscoveryRegistry",
    "DiscoveryState",
    "TickDriver",
    "TickReport",
    "EdgeKey",
    "TransformTable",
]
