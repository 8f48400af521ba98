"""
YAML config loading for the relay.

Accepts either a flat mapping of parameters or a ROS 2 parameter file
(``/**: ros__parameters: {...}`` or ``<node_name>: ros__parameters: {...}``).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import yaml

from airsim_ros_relay.common.param_models import RelayParams


def _unwrap_ros_parameters(data: Dict[str, Any], node_name: Optional[str]) -> Dict[str, Any]:
    """Strip the ROS 2 ``ros__parameters`` wrapper if present."""
    for key in (node_name, "/**"):
        if key and isinstance(data.get(key), dict) and "ros__parameters" in data[key]:
            return dict(data[key]["ros__parameters"] or {})
    return data


def load_relay_config(path: str, node_name: Optional[str] = None) -> Dict[str, Any]:
    """Load a relay YAML file and return the raw parameter dict."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"relay config must be a YAML mapping (from {path})")
    return _unwrap_ros_parameters(data, node_name)


def load_relay_params(
    path: str,
    node_name: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> RelayParams:
    """
    Load and validate relay parameters.

    Overrides win over file values. Unknown keys are rejected by RelayParams.
    """
    raw = load_relay_config(path, node_name=node_name)
    merged = {**raw, **(overrides or {})}
    return RelayParams(**merged)
