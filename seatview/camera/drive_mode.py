# seatview/camera/drive_mode.py

from enum import Enum
from typing import List, Optional
from seatview.camera.gyro_driver import GyroRotationDriver
from seatview.camera.rotation_driver import RotationDriver
from seatview.camera.swipe_driver import SwipeRotationDriver
from seatview.core.logging import get_logger
from seatview.core.scheduler import Coroutine, Scheduler
from seatview.ui.affordances import UIAffordances

logger = get_logger()


class DriveMode(Enum):
    GYRO = 'gyro'
    SWIPE = 'swipe'

    @classmethod
    def parse(cls, value) -> 'DriveMode':
        """Anything other than 'swipe' means gyro."""
        if isinstance(value, DriveMode):
            return value
        return cls.SWIPE if str(value).strip().lower() == cls.SWIPE.value else cls.GYRO


SWITCH_STATUS = {
    DriveMode.GYRO: "Switched to Gyro Control",
    DriveMode.SWIPE: "Switched to Touch Control",
}


class DriveModeSwitcher:
    """
    Keeps exactly one rotation driver enabled.

    A switch disables both drivers, enables the target one frame later and
    settles it one frame after that. A newer switch supersedes one still in
    progress.
    """

    def __init__(self, gyro: GyroRotationDriver, swipe: SwipeRotationDriver,
                 scheduler: Scheduler, ui: Optional[UIAffordances] = None,
                 default_mode: DriveMode = DriveMode.GYRO):
        self.gyro = gyro
        self.swipe = swipe
        self.scheduler = scheduler
        self.ui = ui
        self.default_mode = DriveMode.parse(default_mode)

        self.current_mode: Optional[DriveMode] = None
        self._generation = 0

    @property
    def drivers(self) -> List[RotationDriver]:
        return [self.gyro, self.swipe]

    def driver_for(self, mode: DriveMode) -> RotationDriver:
        return self.gyro if mode == DriveMode.GYRO else self.swipe

    @property
    def active_driver(self) -> Optional[RotationDriver]:
        for driver in self.drivers:
            if driver.enabled:
                return driver
        return None

    def start(self):
        """Enable the default driver straight away."""
        self.current_mode = self.default_mode
        for driver in self.drivers:
            driver.enabled = driver is self.driver_for(self.default_mode)

        if self.ui:
            self.ui.set_active_mode(self.default_mode.value)
        logger.info(f"Drive mode: {self.default_mode.value}")

    def switch_to(self, mode) -> Coroutine:
        mode = DriveMode.parse(mode)
        self._generation += 1

        for driver in self.drivers:
            driver.enabled = False

        self.current_mode = mode
        logger.info(f"Switching to {mode.value} mode")
        return self.scheduler.start(self._switch(mode, self._generation), name=f"switch_to_{mode.value}")

    def _switch(self, mode: DriveMode, generation: int):
        yield None
        if generation != self._generation:
            return

        driver = self.driver_for(mode)
        driver.enabled = True

        yield None
        if generation != self._generation:
            return

        try:
            driver.settle()
        except Exception as e:
            logger.warning(f"Failed to settle {driver.name} driver: {e}")

        if self.ui:
            self.ui.set_active_mode(mode.value)
            self.ui.show_status(SWITCH_STATUS[mode])

    def switch_to_gyro(self) -> Coroutine:
        return self.switch_to(DriveMode.GYRO)

    def switch_to_swipe(self) -> Coroutine:
        return self.switch_to(DriveMode.SWIPE)

    def toggle_mode(self) -> Coroutine:
        if self.current_mode == DriveMode.GYRO:
            return self.switch_to_swipe()
        return self.switch_to_gyro()

    def is_gyro_available(self) -> bool:
        return self.gyro.provider.available
