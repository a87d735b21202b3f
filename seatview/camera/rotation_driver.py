# seatview/camera/rotation_driver.py

from abc import ABC, abstractmethod
from typing import Callable, Optional
import numpy as np
from seatview.camera.camera import Camera
from seatview.camera.calibration import CalibrationEngine
from seatview.camera.control_lock import ControlToken, ExternalControlLock
from seatview.core.errors import CalibrationFailure, SensorUnavailable
from seatview.core.logging import get_logger
from seatview.input.orientation import OrientationProvider
from seatview.utils.math import (
    clamp,
    normalize_angle,
    quaternion_from_euler,
    quaternion_normalize,
    quaternion_slerp,
    quaternion_to_euler,
)

logger = get_logger()


def clamp_vertical_angle(rotation: np.ndarray, min_angle: float, max_angle: float) -> np.ndarray:
    """
    Clamp the pitch of a rotation, working in signed degrees.

    A pitch past +/-90 decomposes as (180 - x, y + 180, z + 180); the form with
    the smaller roll is used so an over-the-top pitch clamps to the near limit.
    """
    x, y, z = (normalize_angle(a) for a in quaternion_to_euler(rotation))

    flipped_z = normalize_angle(z + 180.0)
    if abs(flipped_z) < abs(z):
        x, y, z = normalize_angle(180.0 - x), normalize_angle(y + 180.0), flipped_z

    x = clamp(x, min_angle, max_angle)
    return quaternion_from_euler((x, y, z))


class RotationDriver(ABC):
    """
    Base class for input-driven camera rotation.

    Each frame the driver turns provider samples into a target rotation and
    blends the camera toward it, unless it is disabled or someone holds its
    external-control lock.
    """

    def __init__(self, camera: Camera, provider: OrientationProvider,
                 calibration: Optional[CalibrationEngine] = None,
                 smoothing: float = 0.1, name: Optional[str] = None):
        self.camera = camera
        self.provider = provider
        self.calibration = calibration or CalibrationEngine()
        self.smoothing = smoothing
        self.name = name or self.__class__.__name__

        self.enabled = False
        self.lock = ExternalControlLock(self.name)

        self.initial_rotation = camera.rotation.copy()
        self.target_rotation = camera.rotation.copy()

        # Status text sink (UI collaborator)
        self.on_status: Optional[Callable[[str], None]] = None

    def start(self):
        """Anchor the driver at the camera's current rotation."""
        self.initial_rotation = self.camera.rotation.copy()
        self.target_rotation = self.initial_rotation.copy()
        logger.debug(f"{self.name} started")

    @property
    def external_control(self) -> bool:
        """True while some other component owns the camera transform."""
        return self.lock.locked

    def acquire_external_control(self, owner: str) -> ControlToken:
        return self.lock.acquire(owner)

    def release_external_control(self, token: ControlToken):
        self.lock.release(token)

    def update(self, dt: float):
        """Per-frame tick."""
        if not self.enabled or self.lock.locked:
            self._on_idle()
            return

        try:
            rotation = self.compute_rotation(dt)
        except (CalibrationFailure, SensorUnavailable) as e:
            # Hold the last pose
            logger.debug(f"{self.name}: frame skipped: {e}")
            return

        if rotation is None:
            return

        rotation = self.apply_rotation_limits(rotation)
        self.target_rotation = rotation

        # Fixed blend per tick
        smoothed = quaternion_slerp(self.camera.rotation, rotation, self.smoothing)
        self.camera.write(self.name, rotation=smoothed)

    @abstractmethod
    def compute_rotation(self, dt: float) -> Optional[np.ndarray]:
        """Target rotation for this frame, or None to leave the camera alone."""
        pass

    @abstractmethod
    def settle(self):
        """Bring the driver to a clean state right after it is switched on."""
        pass

    def apply_rotation_limits(self, rotation: np.ndarray) -> np.ndarray:
        return rotation

    def _on_idle(self):
        pass

    def calibrate(self) -> bool:
        """Make the current input pose the zero orientation. No-op without sensors."""
        if not self.provider.available:
            logger.debug(f"{self.name}: calibration skipped, no orientation data")
            return False

        try:
            raw = self.provider.sample()
        except SensorUnavailable as e:
            logger.debug(f"{self.name}: calibration skipped: {e}")
            return False

        return self.calibration.calibrate(raw)

    def set_new_initial_rotation(self, rotation: np.ndarray):
        """Re-anchor the driver at a new pose and recalibrate against it."""
        self.initial_rotation = quaternion_normalize(rotation)
        self.calibrate()
        logger.info(f"{self.name}: new initial rotation {np.round(quaternion_to_euler(rotation), 1).tolist()}")

    def _status(self, text: str):
        if self.on_status is not None:
            self.on_status(text)
