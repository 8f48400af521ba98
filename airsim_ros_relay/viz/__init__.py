"""Optional local preview (Rerun)."""

from airsim_ros_relay.viz.rerun_preview import RerunPreview

__all__ = ["RerunPreview"]
