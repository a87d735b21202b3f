# seatview/navigation/command_router.py

from dataclasses import dataclass
from typing import Mapping, Optional, Union
from seatview.camera.drive_mode import DriveMode, DriveModeSwitcher
from seatview.core.errors import InvalidCommandTarget
from seatview.core.logging import get_logger
from seatview.core.scheduler import Scheduler, WaitForSeconds
from seatview.navigation.view_navigator import ViewNavigator
from seatview.scene.venue import Venue

logger = get_logger()


@dataclass
class ViewCommand:
    """A deep-link request: which drive mode, and optionally which seat."""
    mode: DriveMode = DriveMode.GYRO
    seat: Optional[str] = None


def parse_command(params: Mapping[str, str], default_mode: str = 'gyro') -> ViewCommand:
    """Build a command from already-decoded link parameters."""
    mode = DriveMode.parse(params.get('mode', default_mode))

    seat = params.get('seat')
    if seat is not None:
        seat = seat.strip().lower() or None

    return ViewCommand(mode, seat)


class CommandRouter:
    """
    Applies view commands.
    The seat hand-off starts first; the mode switch follows after a delay so
    it never resets a driver in the middle of the seat settle.
    """

    def __init__(self, navigator: ViewNavigator, switcher: DriveModeSwitcher, venue: Venue,
                 scheduler: Scheduler, settings: Optional[dict] = None):
        settings = settings or {}
        self.navigator = navigator
        self.switcher = switcher
        self.venue = venue
        self.scheduler = scheduler

        self.default_mode = settings.get('default_mode', 'gyro')
        self.mode_switch_delay = settings.get('mode_switch_delay', 1.0)

    def handle(self, command: Union[ViewCommand, Mapping[str, str]]) -> ViewCommand:
        if not isinstance(command, ViewCommand):
            command = parse_command(command, self.default_mode)

        logger.info(f"Handling command: mode={command.mode.value}, seat={command.seat}")

        if command.seat:
            self._focus_seat(command.seat)

        self.scheduler.start(self._apply_mode(command.mode), name="command_mode_switch")
        return command

    def _focus_seat(self, ref: str):
        try:
            seat = self.venue.resolve_seat_ref(ref)
        except InvalidCommandTarget as e:
            logger.warning(f"Command rejected: {e}")
            return

        if self.navigator.go_to_seat(seat):
            self.navigator.show_return_to_overview()

    def _apply_mode(self, mode: DriveMode):
        yield WaitForSeconds(self.mode_switch_delay)
        self.switcher.switch_to(mode)
