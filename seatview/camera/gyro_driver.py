# seatview/camera/gyro_driver.py

from typing import Optional
import numpy as np
from seatview.camera.camera import Camera
from seatview.camera.calibration import CalibrationEngine
from seatview.camera.rotation_driver import RotationDriver, clamp_vertical_angle
from seatview.core.logging import get_logger
from seatview.input.orientation import MotionOrientationProvider

logger = get_logger()


class GyroRotationDriver(RotationDriver):
    """
    Looks around with the device's motion sensors.
    """

    def __init__(self, camera: Camera, provider: MotionOrientationProvider, settings: Optional[dict] = None):
        settings = settings or {}
        super().__init__(
            camera,
            provider,
            CalibrationEngine(apply_calibration=settings.get('apply_calibration', True)),
            smoothing=settings.get('smoothing', 0.1),
            name="gyro",
        )
        self.provider: MotionOrientationProvider = provider

        self.enable_device_rotation = settings.get('enable_device_rotation', True)
        self.enable_rotation_limits = settings.get('enable_rotation_limits', False)
        self.min_vertical_angle = settings.get('min_vertical_angle', -80.0)
        self.max_vertical_angle = settings.get('max_vertical_angle', 80.0)
        self.calibrate_on_start = settings.get('calibrate_on_start', True)
        self.recalibrate_touch_count = settings.get('recalibrate_touch_count', 3)

    def start(self):
        super().start()
        if self.calibrate_on_start:
            self.calibrate()

    def compute_rotation(self, dt: float) -> Optional[np.ndarray]:
        if not self.enable_device_rotation or not self.provider.available:
            return None

        if self.provider.sensors.touch_count == self.recalibrate_touch_count:
            logger.info(f"{self.recalibrate_touch_count}-finger touch detected: recalibrating")
            if self.calibrate():
                self._status("Calibrated!")

        raw = self.provider.sample()
        return self.calibration.apply(raw, self.initial_rotation)

    def apply_rotation_limits(self, rotation: np.ndarray) -> np.ndarray:
        if not self.enable_rotation_limits:
            return rotation
        return clamp_vertical_angle(rotation, self.min_vertical_angle, self.max_vertical_angle)

    def settle(self):
        self._status("Calibrating...")
        self.calibrate()

    def reset_orientation(self):
        """Drop the calibration offset and re-zero on the current pose."""
        logger.info("Resetting orientation")
        self.calibration.reset()
        self.calibrate()
        self._status("Orientation Reset")
