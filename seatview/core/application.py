# seatview/core/application.py

from collections import deque
from typing import Callable, Deque, Mapping, Optional, Union
import time
from seatview.camera.camera import Camera
from seatview.camera.drive_mode import DriveMode, DriveModeSwitcher
from seatview.camera.gyro_driver import GyroRotationDriver
from seatview.camera.swipe_driver import SwipeRotationDriver
from seatview.core.config import Config
from seatview.core.errors import SeatViewError
from seatview.core.logging import init_logger
from seatview.core.scheduler import Scheduler
from seatview.core.time import TimeManager
from seatview.input.orientation import DeviceSensors, MotionOrientationProvider, PointerOrientationProvider
from seatview.input.pointer import PointerEvent
from seatview.navigation.command_router import CommandRouter, ViewCommand
from seatview.navigation.view_navigator import ViewNavigator
from seatview.scene.venue import Venue, VenueObject
from seatview.ui.affordances import UIAffordances


class SeatViewApplication:
    """
    Owns and wires the view-control engine.

    External input (touches, commands, UI button presses) is queued and
    applied at a fixed point of the frame, so each frame runs:
    clock, queued actions, rotation drivers, scheduled coroutines.
    """

    def __init__(self, config: Optional[Config] = None, sensors: Optional[DeviceSensors] = None,
                 venue: Optional[Venue] = None, camera: Optional[Camera] = None,
                 permission_probe: Optional[Callable[[], bool]] = None):
        # Configuration
        self.config = config or Config()

        # Logging
        self.logger = init_logger(
            level=self.config.get('logging.level', 'INFO'),
            log_dir=self.config.get('logging.log_dir'),
        )
        self.logger.info("Initializing SeatView")

        self.running = False
        self.started = False

        # Core subsystems
        self.time = TimeManager(max_frame_time=self.config.get('engine.max_frame_time', 0.25))
        self.scheduler = Scheduler()
        self.ui = UIAffordances()

        # Scene
        self.camera = camera or Camera()
        self.venue = venue or Venue.from_config(
            self.config.section('navigation'),
            self.config.section('commands'),
            center=(0.0, 0.0, 0.0),
        )

        # Input
        gyro_settings = self.config.section('gyro')
        swipe_settings = self.config.section('swipe')
        self.sensors = sensors or DeviceSensors()
        self.gyro_provider = MotionOrientationProvider(
            self.sensors,
            permission_probe=permission_probe,
            permission_timeout=gyro_settings.get('permission_timeout', 15.0),
            poll_interval=gyro_settings.get('permission_poll_interval', 0.2),
        )
        self.swipe_provider = PointerOrientationProvider.from_settings(swipe_settings)

        # Rotation drivers
        self.gyro = GyroRotationDriver(self.camera, self.gyro_provider, gyro_settings)
        self.swipe = SwipeRotationDriver(self.camera, self.swipe_provider, swipe_settings)
        for driver in (self.gyro, self.swipe):
            driver.on_status = self.ui.show_status

        self.switcher = DriveModeSwitcher(
            self.gyro,
            self.swipe,
            self.scheduler,
            self.ui,
            default_mode=DriveMode.parse(self.config.get('drive_mode.default_mode', 'gyro')),
        )

        # Navigation
        self.navigator = ViewNavigator(
            self.camera,
            self.venue,
            [self.gyro, self.swipe],
            self.scheduler,
            self.ui,
            self.config.section('navigation'),
        )
        self.router = CommandRouter(
            self.navigator,
            self.switcher,
            self.venue,
            self.scheduler,
            self.config.section('commands'),
        )

        self._actions: Deque[Callable[[], object]] = deque()

    def start(self):
        """Pick sensors, cache the overview pose and enable the default driver."""
        if self.started:
            return

        self.logger.info("Starting view control")
        self.gyro_provider.initialize_sensors()
        self.gyro_provider.request_permissions(self.scheduler, self.ui.show_status)

        # Origin placement comes before the drivers anchor themselves
        self.navigator.start()
        self.gyro.start()
        self.swipe.start()
        self.switcher.start()

        self.started = True

    # Frame loop

    def step(self, dt: float) -> float:
        """Run one frame with an explicit delta."""
        if not self.started:
            self.start()

        dt = self.time.advance(dt)

        self._process_actions()

        for driver in self.switcher.drivers:
            driver.update(dt)

        self.scheduler.tick(dt)
        return dt

    def run(self, max_frames: Optional[int] = None):
        """Live loop on the wall clock."""
        self.logger.info("Starting application loop")
        self.start()
        self.running = True

        frame_interval = 1.0 / self.config.get('engine.target_fps', 60)
        self.time.tick()

        while self.running:
            frame_start = time.perf_counter()

            try:
                self.step(self.time.tick())
            except Exception as e:
                self.logger.error(f"Frame failed: {e}", exc_info=True)

            if max_frames is not None and self.time.frame_count >= max_frames:
                self.quit()

            elapsed = time.perf_counter() - frame_start
            if elapsed < frame_interval:
                time.sleep(frame_interval - elapsed)

        self.logger.info(f"Loop stopped after {self.time.frame_count} frames at {self.time.fps:.1f} fps")
        self.shutdown()

    def quit(self):
        """Request application exit."""
        self.logger.info("Application quit requested")
        self.running = False

    def shutdown(self, save_config: bool = False):
        """Clean shutdown. Runtime config changes are only written back on request."""
        self.logger.info("Shutting down")
        self.scheduler.clear()
        if save_config:
            self.config.save()
        self.logger.info("Shutdown complete")

    def _process_actions(self):
        while self._actions:
            action = self._actions.popleft()
            try:
                action()
            except SeatViewError as e:
                self.logger.warning(f"Action rejected: {e}")
            except Exception as e:
                self.logger.error(f"Action failed: {e}", exc_info=True)

    # Input queues

    def queue_touch(self, target: Union[VenueObject, str]):
        """A touch that hit a scene object (or its name)."""
        def touch():
            obj = self.venue.get_object(target) if isinstance(target, str) else target
            self.navigator.handle_touch(obj)

        self._actions.append(touch)

    def queue_pointer(self, event: PointerEvent):
        """Raw press/drag/release sample for the swipe driver."""
        self.swipe.queue_pointer(event)

    def queue_command(self, command: Union[ViewCommand, Mapping[str, str]]):
        self._actions.append(lambda: self.router.handle(command))

    # UI entry points

    def calibrate(self):
        self._actions.append(self._calibrate)

    def switch_to_gyro(self):
        self._actions.append(self.switcher.switch_to_gyro)

    def switch_to_swipe(self):
        self._actions.append(self.switcher.switch_to_swipe)

    def reset_rotation(self):
        self._actions.append(self._reset_rotation)

    def zoom_to_original(self):
        self._actions.append(self.navigator.zoom_to_original)

    def go_to_seat(self, seat: Union[VenueObject, str]):
        def go():
            obj = self.venue.get_object(seat) if isinstance(seat, str) else seat
            self.navigator.go_to_seat(obj)

        self._actions.append(go)

    def _calibrate(self):
        driver = self.switcher.active_driver
        if driver is not None and driver.calibrate():
            self.ui.show_status("Calibrated!")
        else:
            self.ui.show_status("Calibration failed")

    def _reset_rotation(self):
        if self.switcher.current_mode == DriveMode.SWIPE:
            self.swipe.reset_rotation()
        else:
            self.gyro.reset_orientation()
