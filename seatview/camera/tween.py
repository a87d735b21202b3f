# seatview/camera/tween.py

from enum import Enum
from typing import Callable, Optional
from seatview.camera.camera import Camera, CameraPose
from seatview.utils.easing import ease_in_out
from seatview.utils.math import lerp, quaternion_slerp


class TweenState(Enum):
    NOT_STARTED = 0
    RUNNING = 1
    DONE = 2


class CameraTween:
    """
    Blends the camera between two poses over a fixed duration.
    Position and size interpolate linearly on the eased parameter, rotation
    slerps from the start rotation. The last step writes the end pose exactly.
    """

    def __init__(self, camera: Camera, writer: str, start: CameraPose, end: CameraPose,
                 duration: float, curve: Optional[Callable[[float], float]] = None):
        self.camera = camera
        self.writer = writer
        self.start = start.copy()
        self.end = end.copy()
        self.duration = max(0.0, float(duration))
        self.curve = curve or ease_in_out

        self.elapsed = 0.0
        self.state = TweenState.NOT_STARTED

    @property
    def finished(self) -> bool:
        return self.state == TweenState.DONE

    @property
    def progress(self) -> float:
        if self.duration <= 0.0:
            return 1.0
        return min(self.elapsed / self.duration, 1.0)

    def advance(self, dt: float) -> bool:
        """Step the blend and write the camera. Returns True once finished."""
        if self.state == TweenState.DONE:
            return True

        self.state = TweenState.RUNNING
        self.elapsed += dt

        if self.progress >= 1.0:
            self.camera.apply_pose(self.writer, self.end)
            self.state = TweenState.DONE
            return True

        t = self.curve(self.progress)
        self.camera.write(
            self.writer,
            position=lerp(self.start.position, self.end.position, t),
            rotation=quaternion_slerp(self.start.rotation, self.end.rotation, t),
            size=lerp(self.start.size, self.end.size, t),
        )
        return False
