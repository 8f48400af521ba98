"""
Rerun preview: mirror relayed camera images to a local viewer.

Purely a side effect of the tick. Optional: spawn the viewer or save to an .rrd
file and open it with `rerun recording.rrd`.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from airsim_ros_relay.common import constants

_logger = logging.getLogger(__name__)


def _ensure_rerun():
    """Lazy import so rerun is only loaded when the preview is enabled."""
    try:
        import rerun as rr
        return rr
    except ImportError:
        return None


def _set_rerun_time(rr, time_sec: float) -> None:
    """Set current time on the 'time' timeline across rerun API versions."""
    if hasattr(rr, "set_time_seconds"):
        rr.set_time_seconds("time", time_sec)
    else:
        rr.set_time("time", timestamp=time_sec)


def preview_window_name(vehicle_name: str, camera_name: str, image_kind_name: str) -> str:
    return f"{vehicle_name}_{camera_name}_{image_kind_name}"


class RerunPreview:
    """
    Log relayed images to Rerun, one entity per (vehicle, camera, image kind).

    Call init() once; show_image() is then a no-op if rerun is unavailable.
    """

    def __init__(
        self,
        application_id: str = constants.PREVIEW_APPLICATION_ID,
        spawn: bool = False,
        recording_path: Optional[str] = None,
    ):
        self._application_id = application_id
        self._spawn = spawn
        self._recording_path = recording_path
        self._initialized = False
        self._rr = None

    def init(self) -> bool:
        """Initialize Rerun (spawn viewer and/or record to file). Returns True if active."""
        if self._initialized:
            return self._rr is not None
        self._initialized = True
        rr = _ensure_rerun()
        if rr is None:
            _logger.warning("rerun-sdk not importable; image preview disabled")
            return False
        self._rr = rr
        rr.init(
            application_id=self._application_id,
            default_enabled=True,
            spawn=self._spawn,
        )
        # If recording to file: must call save() before any log (Rerun API).
        if self._recording_path and not self._spawn:
            rr.save(self._recording_path)
        return True

    @property
    def active(self) -> bool:
        return self._rr is not None

    def show_image(
        self,
        window_name: str,
        pixels: np.ndarray,
        pixels_as_float: bool,
        time_sec: float,
    ) -> None:
        """
        Log one image.

        Float (depth) images are scaled by 1/255 into [0, 1]; byte images are
        logged unchanged.
        """
        if self._rr is None:
            return
        rr = self._rr
        _set_rerun_time(rr, time_sec)
        path = f"{self._application_id}/{window_name}"
        if pixels_as_float:
            depth = np.asarray(pixels, dtype=np.float32) * np.float32(constants.PREVIEW_FLOAT_SCALE)
            if hasattr(rr, "DepthImage"):
                rr.log(path, rr.DepthImage(depth))
            else:
                rr.log(path, rr.Image(depth))
        else:
            rgb = np.asarray(pixels)
            if rgb.dtype != np.uint8:
                rgb = np.clip(rgb, 0, 255).astype(np.uint8)
            rr.log(path, rr.Image(rgb))

    def flush(self) -> None:
        """Flush recording (call at shutdown)."""
        if self._rr is None:
            return
        rec = self._rr.get_global_data_recording()
        if rec is not None:
            rec.flush()
