"""
Common package for the relay.

Shared constants, parameter models, errors and counters used by the relay core,
the transports and the ROS 2 node.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "RelayParams",
    "RelayCounters",
    "constants",
]

_LAZY_ATTRS: dict[str, tuple[str, str | None]] = {
    "RelayParams": ("airsim_ros_relay.common.param_models", "RelayParams"),
    "RelayCounters": ("airsim_ros_relay.common.counters", "RelayCounters"),
    # Expose as a submodule, but do not eagerly import it at package import time.
    "constants": ("airsim_ros_relay.common.constants", None),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = import_module(module_name)
    return module if attr_name is None else getattr(module, attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))
