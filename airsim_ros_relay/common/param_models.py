"""Pydantic parameter models for the relay."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from airsim_ros_relay.common import constants


class RelayParams(BaseModel):
    """Relay parameter model (one instance per relayed entity)."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    ros_namespace_prefix: str = constants.NAMESPACE_PREFIX_DEFAULT
    entity_id: Optional[int] = Field(None, ge=0)

    publish_images: bool = True
    publish_lidar: bool = True
    show_preview: bool = False

    stamp_source: str = constants.STAMP_SOURCE_TRANSPORT
    tick_period_sec: float = Field(constants.TICK_PERIOD_SEC_DEFAULT, gt=0.0)
    qos_depth: int = Field(constants.QOS_DEPTH_DEFAULT, ge=1)
    world_frame: str = constants.WORLD_FRAME_DEFAULT

    preview_spawn: bool = False
    preview_recording_path: str = ""

    @field_validator("stamp_source")
    @classmethod
    def _check_stamp_source(cls, value: str) -> str:
        value = str(value).lower()
        if value not in constants.STAMP_SOURCES:
            raise ValueError(f"stamp_source must be one of {constants.STAMP_SOURCES}, got {value!r}")
        return value

    @field_validator("ros_namespace_prefix", "world_frame")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = str(value).strip().strip("/")
        if not value:
            raise ValueError("frame/namespace names must be non-empty")
        return value

    @property
    def namespace(self) -> str:
        """ROS namespace for this entity, e.g. ``robot1``."""
        if self.entity_id is None:
            return self.ros_namespace_prefix
        return f"{self.ros_namespace_prefix}{self.entity_id}"
