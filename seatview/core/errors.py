# seatview/core/errors.py

"""
Error taxonomy for the view-control engine.

None of these is fatal to a session: each is raised where the problem is
detected and caught at the public entry point that triggered it, which logs
it and leaves the previous state in place.
"""

from typing import Optional


class SeatViewError(Exception):
    """Base exception for all engine errors."""

    pass


class SensorUnavailable(SeatViewError):
    """No gyroscope or accelerometer data can be read."""

    def __init__(self, message: str = "No orientation sensor available", source: Optional[str] = None):
        self.source = source

        full_message = message
        if source:
            full_message = f"[{source}] {full_message}"

        super().__init__(full_message)


class InvalidCommandTarget(SeatViewError):
    """A seat or section key does not resolve to a venue target."""

    def __init__(self, message: str, key: Optional[str] = None, kind: str = "target"):
        self.key = key
        self.kind = kind

        full_message = message
        if key is not None:
            full_message = f"{full_message} ({kind}: {key!r})"

        super().__init__(full_message)


class ConcurrentTransitionRejected(SeatViewError):
    """A zoom/focus request arrived while another transition is in flight."""

    def __init__(self, requested: str, active: Optional[str] = None):
        self.requested = requested
        self.active = active

        full_message = f"Transition '{requested}' rejected"
        if active:
            full_message = f"{full_message}: '{active}' still in flight"

        super().__init__(full_message)


class CalibrationFailure(SeatViewError):
    """Calibration math failed on degenerate input."""

    pass
