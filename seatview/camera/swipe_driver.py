# seatview/camera/swipe_driver.py

from collections import deque
from typing import Deque, Optional
import numpy as np
from seatview.camera.camera import Camera
from seatview.camera.rotation_driver import RotationDriver
from seatview.core.logging import get_logger
from seatview.input.orientation import PointerOrientationProvider
from seatview.input.pointer import DoubleTapDetector, PointerEvent, PointerPhase, PointerTracker

logger = get_logger()


class SwipeRotationDriver(RotationDriver):
    """
    Looks around by dragging on the screen.
    Double tap resets to the initial rotation.
    """

    def __init__(self, camera: Camera, provider: PointerOrientationProvider, settings: Optional[dict] = None):
        settings = settings or {}
        super().__init__(camera, provider, smoothing=settings.get('smoothing', 0.1), name="swipe")
        self.provider: PointerOrientationProvider = provider

        self.enable_touch_rotation = settings.get('enable_touch_rotation', True)
        self.reset_on_double_tap = settings.get('reset_on_double_tap', True)

        self.tracker = PointerTracker()
        self.double_tap = DoubleTapDetector(settings.get('double_tap_time', 0.3))
        self._events: Deque[PointerEvent] = deque()

    def queue_pointer(self, event: PointerEvent):
        """Buffer a pointer event for the next tick."""
        self._events.append(event)

    def compute_rotation(self, dt: float) -> Optional[np.ndarray]:
        if not self.enable_touch_rotation:
            self._events.clear()
            return None

        self._handle_pointer_events()

        raw = self.provider.sample()
        return self.calibration.apply(raw, self.initial_rotation)

    def _handle_pointer_events(self):
        while self._events:
            event = self._events.popleft()

            if event.phase == PointerPhase.BEGAN:
                self.tracker.process(event)
                if self.reset_on_double_tap and self.double_tap.register_press(event.timestamp):
                    logger.info("Double-tap detected: resetting rotation")
                    self.reset_rotation()
                continue

            delta = self.tracker.process(event)
            if delta is not None:
                self.provider.apply_drag(delta)

    def _on_idle(self):
        # Input arriving while locked or disabled is not replayed later
        self._events.clear()
        self.tracker.release()

    def calibrate(self) -> bool:
        """Zero the drag angles and take the resulting pose as the reference."""
        self.provider.reset()
        return super().calibrate()

    def reset_rotation(self):
        logger.info("Resetting camera rotation")
        self.calibrate()
        self.target_rotation = self.initial_rotation.copy()
        self._status("Camera rotation reset")

    def settle(self):
        self.reset_rotation()

    def set_touch_sensitivity(self, sensitivity: float):
        self.provider.touch_sensitivity = sensitivity
        logger.info(f"Touch sensitivity set to: {sensitivity}")

    def toggle_touch_rotation(self) -> bool:
        self.enable_touch_rotation = not self.enable_touch_rotation
        logger.info(f"Touch rotation enabled: {self.enable_touch_rotation}")
        self._status("Touch rotation enabled" if self.enable_touch_rotation else "Touch rotation disabled")
        return self.enable_touch_rotation
