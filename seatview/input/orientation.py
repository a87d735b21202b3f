# seatview/input/orientation.py

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional
import math
import numpy as np
from seatview.core.errors import SensorUnavailable
from seatview.core.logging import get_logger
from seatview.core.scheduler import Scheduler, WaitForSeconds
from seatview.utils.math import clamp, quaternion_from_euler

logger = get_logger()


class DeviceSensors:
    """
    Platform sensor snapshot.
    The platform layer refreshes the readings once per frame.
    """

    def __init__(self, supports_gyroscope: bool = False, supports_accelerometer: bool = False,
                 gyro_attitude=None, acceleration=None, touch_count: int = 0):
        self.supports_gyroscope = supports_gyroscope
        self.supports_accelerometer = supports_accelerometer
        self.gyro_enabled = False

        # Raw readings: attitude [x, y, z, w] in device axes, acceleration in g
        self.gyro_attitude = np.array([0.0, 0.0, 0.0, 1.0] if gyro_attitude is None else gyro_attitude, dtype=np.float32)
        self.acceleration = np.array([0.0, 0.0, -1.0] if acceleration is None else acceleration, dtype=np.float32)
        self.touch_count = touch_count

    def enable_gyroscope(self):
        """Switch the gyroscope on. Platforms may raise if it cannot start."""
        if not self.supports_gyroscope:
            raise RuntimeError("Gyroscope not supported on this device")
        self.gyro_enabled = True


class SensorSource(Enum):
    NONE = 0
    GYROSCOPE = 1
    ACCELEROMETER = 2


def convert_gyro_attitude(q: np.ndarray) -> np.ndarray:
    """Remap a device attitude into the scene's coordinate convention."""
    return np.array([q[0], q[1], -q[2], -q[3]], dtype=np.float32)


def orientation_from_acceleration(acceleration: np.ndarray) -> np.ndarray:
    """
    Pitch and yaw from the gravity vector, roll fixed at zero.
    Yaw from gravity alone is unreliable; only used when there is no gyroscope.
    """
    norm = np.linalg.norm(acceleration)
    a = acceleration / norm if norm > 0 else acceleration

    pitch = math.degrees(math.atan2(-a[1], -a[2]))
    yaw = math.degrees(math.atan2(-a[0], -a[2]))

    return quaternion_from_euler((pitch, yaw, 0.0))


class OrientationProvider(ABC):
    """Source of raw orientation samples for a rotation driver."""

    @property
    @abstractmethod
    def available(self) -> bool:
        pass

    @abstractmethod
    def sample(self) -> np.ndarray:
        """Current raw orientation as a quaternion [x, y, z, w]."""
        pass


class MotionOrientationProvider(OrientationProvider):
    """
    Orientation from the gyroscope, falling back to the accelerometer.
    """

    def __init__(self, sensors: DeviceSensors,
                 permission_probe: Optional[Callable[[], bool]] = None,
                 permission_timeout: float = 15.0,
                 poll_interval: float = 0.2):
        self.sensors = sensors
        self.source = SensorSource.NONE

        # Permission state. Without a probe the platform grants implicitly.
        self.permission_probe = permission_probe
        self.permission_timeout = permission_timeout
        self.poll_interval = poll_interval
        self.permission_requested = False
        self.permission_granted = False

    @property
    def available(self) -> bool:
        return self.permission_granted and self.source != SensorSource.NONE

    def initialize_sensors(self) -> SensorSource:
        """Pick the best sensor the device offers."""
        self.source = SensorSource.NONE

        if self.sensors.supports_gyroscope:
            try:
                self.sensors.enable_gyroscope()
                self.source = SensorSource.GYROSCOPE
                logger.info("Using gyroscope for device orientation")
            except Exception as e:
                logger.warning(f"Failed to initialize gyroscope: {e}")

        if self.source == SensorSource.NONE and self.sensors.supports_accelerometer:
            self.source = SensorSource.ACCELEROMETER
            logger.info("Using accelerometer for device orientation")

        if self.source == SensorSource.NONE:
            logger.warning("No orientation sensor available")

        return self.source

    def request_permissions(self, scheduler: Scheduler, on_denied: Optional[Callable[[str], None]] = None):
        """Ask the platform for motion access. Repeated requests are ignored until a denial."""
        if self.permission_requested:
            return None

        logger.info("Requesting device orientation permission")
        self.permission_requested = True
        return scheduler.start(self._check_for_permission_grant(on_denied), name="permission_check")

    def _check_for_permission_grant(self, on_denied):
        if self.permission_probe is None:
            self.permission_granted = True
            logger.debug("Motion permission granted implicitly")
            return

        elapsed = 0.0
        while elapsed < self.permission_timeout:
            if self.permission_probe():
                self.permission_granted = True
                logger.info("Motion permission granted")
                return

            elapsed += self.poll_interval
            yield WaitForSeconds(self.poll_interval)

        logger.warning("Device orientation permission not granted or timed out")
        self.permission_requested = False
        if on_denied is not None:
            on_denied("Motion access denied. Please try again.")

    def sample(self) -> np.ndarray:
        if not self.available:
            raise SensorUnavailable(source=self.source.name.lower())

        if self.source == SensorSource.GYROSCOPE:
            return convert_gyro_attitude(self.sensors.gyro_attitude)
        return orientation_from_acceleration(self.sensors.acceleration)


class PointerOrientationProvider(OrientationProvider):
    """
    Orientation from accumulated drag angles.
    Dragging right turns right; dragging up tilts up.
    """

    def __init__(self, touch_sensitivity: float = 2.0,
                 invert_horizontal: bool = False, invert_vertical: bool = False,
                 enable_rotation_limits: bool = True,
                 min_vertical_angle: float = -80.0, max_vertical_angle: float = 80.0,
                 enable_horizontal_limits: bool = False,
                 min_horizontal_angle: float = -360.0, max_horizontal_angle: float = 360.0):
        self.touch_sensitivity = touch_sensitivity
        self.invert_horizontal = invert_horizontal
        self.invert_vertical = invert_vertical

        self.enable_rotation_limits = enable_rotation_limits
        self.min_vertical_angle = min_vertical_angle
        self.max_vertical_angle = max_vertical_angle
        self.enable_horizontal_limits = enable_horizontal_limits
        self.min_horizontal_angle = min_horizontal_angle
        self.max_horizontal_angle = max_horizontal_angle

        self.vertical_angle = 0.0
        self.horizontal_angle = 0.0

    @classmethod
    def from_settings(cls, settings: dict) -> 'PointerOrientationProvider':
        keys = (
            'touch_sensitivity', 'invert_horizontal', 'invert_vertical',
            'enable_rotation_limits', 'min_vertical_angle', 'max_vertical_angle',
            'enable_horizontal_limits', 'min_horizontal_angle', 'max_horizontal_angle',
        )
        return cls(**{key: settings[key] for key in keys if key in settings})

    @property
    def available(self) -> bool:
        return True

    def apply_drag(self, delta):
        """Convert a drag delta in pixels into degrees and accumulate it."""
        horizontal = float(delta[0]) * self.touch_sensitivity * 0.1
        vertical = float(delta[1]) * self.touch_sensitivity * 0.1

        if self.invert_horizontal:
            horizontal = -horizontal
        if self.invert_vertical:
            vertical = -vertical

        self.horizontal_angle += horizontal
        # Screen Y grows upward while positive pitch looks down
        self.vertical_angle -= vertical

        self.apply_limits()

    def apply_limits(self):
        if self.enable_rotation_limits:
            self.vertical_angle = clamp(self.vertical_angle, self.min_vertical_angle, self.max_vertical_angle)

        if self.enable_horizontal_limits:
            self.horizontal_angle = clamp(self.horizontal_angle, self.min_horizontal_angle, self.max_horizontal_angle)
        elif self.horizontal_angle > 360.0:
            self.horizontal_angle -= 360.0
        elif self.horizontal_angle < -360.0:
            self.horizontal_angle += 360.0

    def reset(self):
        self.vertical_angle = 0.0
        self.horizontal_angle = 0.0

    def sample(self) -> np.ndarray:
        return quaternion_from_euler((self.vertical_angle, self.horizontal_angle, 0.0))
