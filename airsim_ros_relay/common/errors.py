"""Relay exception types."""

from __future__ import annotations


class RelayError(Exception):
    """Base class for relay errors."""


class FrameMismatchError(RelayError, ValueError):
    """A pose was used in the wrong axis convention (NED vs ENU)."""


class TransportError(RelayError):
    """A transport operation (advertise / publish) failed."""
