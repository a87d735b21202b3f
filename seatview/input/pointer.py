# seatview/input/pointer.py

from enum import Enum
from typing import Optional
import numpy as np


class PointerPhase(Enum):
    BEGAN = 1
    MOVED = 2
    ENDED = 3
    CANCELED = 4


class PointerEvent:
    """A single press/drag/release sample from the touch or mouse stream."""

    def __init__(self, phase: PointerPhase, position, timestamp: float):
        self.phase = phase
        self.position = np.array(position, dtype=np.float32)
        self.timestamp = timestamp

    def __repr__(self):
        return f"PointerEvent({self.phase.name}, {self.position.tolist()}, t={self.timestamp:.3f})"


class DoubleTapDetector:
    """
    Counts presses landing within a time window of the previous press.
    The second press inside the window fires and restarts the count.
    """

    def __init__(self, window: float = 0.3):
        self.window = window
        self.last_press_time: Optional[float] = None
        self.press_count = 0

    def register_press(self, timestamp: float) -> bool:
        """Record a press. Returns True when it completes a double tap."""
        fired = False

        if self.last_press_time is not None and timestamp - self.last_press_time < self.window:
            self.press_count += 1
            if self.press_count >= 2:
                fired = True
                self.press_count = 0
        else:
            self.press_count = 1

        self.last_press_time = timestamp
        return fired

    def reset(self):
        self.last_press_time = None
        self.press_count = 0


class PointerTracker:
    """
    Turns a pointer event stream into drag deltas in pixels.
    """

    def __init__(self):
        self.is_touching = False
        self.last_position = np.zeros(2, dtype=np.float32)
        self.current_delta = np.zeros(2, dtype=np.float32)

    def process(self, event: PointerEvent) -> Optional[np.ndarray]:
        """Feed one event. Returns the drag delta for moves while pressed."""
        if event.phase == PointerPhase.BEGAN:
            self.last_position = event.position.copy()
            self.is_touching = True
            return None

        if event.phase == PointerPhase.MOVED:
            if not self.is_touching:
                return None
            delta = event.position - self.last_position
            self.last_position = event.position.copy()
            self.current_delta = delta
            return delta

        # ENDED / CANCELED
        self.is_touching = False
        self.current_delta = np.zeros(2, dtype=np.float32)
        return None

    def release(self):
        """Forget any press in progress."""
        self.is_touching = False
        self.current_delta = np.zeros(2, dtype=np.float32)
