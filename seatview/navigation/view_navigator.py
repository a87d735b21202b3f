# seatview/navigation/view_navigator.py

from dataclasses import dataclass
from typing import List, Optional, Union
import numpy as np
from seatview.camera.camera import Camera, CameraPose
from seatview.camera.control_lock import ControlLease
from seatview.camera.rotation_driver import RotationDriver
from seatview.camera.tween import CameraTween
from seatview.core.errors import ConcurrentTransitionRejected, InvalidCommandTarget
from seatview.core.logging import get_logger
from seatview.core.scheduler import Coroutine, Scheduler, WaitForSeconds
from seatview.scene.venue import Venue, VenueObject
from seatview.ui.affordances import UIAffordances
from seatview.utils.easing import get_curve
from seatview.utils.math import look_rotation, quaternion_from_euler

logger = get_logger()


@dataclass
class Overview:
    pass


@dataclass(eq=False)
class SectionFocus:
    section_id: str
    origin: CameraPose


@dataclass(eq=False)
class SeatFocus:
    seat_id: str
    price: float
    section_id: Optional[str]
    origin: CameraPose


ViewState = Union[Overview, SectionFocus, SeatFocus]


class ViewNavigator:
    """
    Moves the camera between the venue overview, a zoomed section and a seat.

    While a transition runs the navigator holds every driver's external-control
    lock, so the camera has one writer. Requests arriving mid-transition are
    dropped; there is no cancellation.
    """

    WRITER = "navigator"

    def __init__(self, camera: Camera, venue: Venue, drivers: List[RotationDriver],
                 scheduler: Scheduler, ui: Optional[UIAffordances] = None,
                 settings: Optional[dict] = None):
        settings = settings or {}
        self.camera = camera
        self.venue = venue
        self.drivers = drivers
        self.scheduler = scheduler
        self.ui = ui

        self.zoom_duration = settings.get('zoom_duration', 1.5)
        self.curve = get_curve(settings.get('zoom_curve', 'ease_in_out'))
        self.seat_view_size = settings.get('seat_view_size', 1.0)
        self.seat_eye_height = settings.get('seat_eye_height', 0.5)
        self.seat_settle_delay = settings.get('seat_settle_delay', 0.5)
        self.origin_settings = settings.get('origin')

        self.state: ViewState = Overview()
        self.origin: Optional[CameraPose] = None
        self.active_tween: Optional[CameraTween] = None

        self._leases: List[ControlLease] = []
        self._transition: Optional[str] = None

    def start(self):
        """Cache the overview pose every zoom returns to."""
        if self.origin_settings:
            self.origin = CameraPose(
                np.array(self.origin_settings['position'], dtype=np.float32),
                float(self.origin_settings['size']),
                quaternion_from_euler(self.origin_settings['rotation']),
            )
            self.camera.apply_pose(self.WRITER, self.origin)
            logger.info("Camera placed at configured origin")
        else:
            self.origin = self.camera.get_pose()

        logger.debug(f"Origin pose: position={self.origin.position.tolist()}, size={self.origin.size}")

    @property
    def is_zooming(self) -> bool:
        return self._transition is not None

    @property
    def current_section(self) -> Optional[str]:
        if isinstance(self.state, (SectionFocus, SeatFocus)):
            return self.state.section_id
        return None

    @property
    def locked(self) -> bool:
        return any(lease.active for lease in self._leases)

    # Touch input

    def handle_touch(self, target: VenueObject) -> bool:
        """React to a touched scene object. Returns True if a transition started."""
        if self.is_zooming:
            logger.debug(f"Touch on '{target.name}' ignored: {self._transition} in flight")
            return False

        if isinstance(self.state, Overview):
            section_id = self.venue.get_object_section(target)
            if section_id is None:
                logger.debug(f"Touched '{target.name}' belongs to no section")
                return False
            return self.zoom_to_section(section_id)

        if target.is_seat and target.available:
            return self.go_to_seat(target)

        # Only a trip through the overview changes the focused section
        section_id = self.venue.get_object_section(target)
        if section_id == self.current_section:
            logger.debug(f"Section {section_id} already focused")
        else:
            logger.debug(f"Touch on section {section_id} ignored while {self.current_section} is focused")
        return False

    # Transitions

    def zoom_to_section(self, section_id: str) -> bool:
        try:
            self._check_idle("zoom_to_section")
            section = self.venue.get_section(section_id)
        except ConcurrentTransitionRejected as e:
            logger.debug(str(e))
            return False
        except InvalidCommandTarget as e:
            logger.warning(str(e))
            return False

        if not isinstance(self.state, Overview):
            logger.debug(f"Zoom to {section_id} ignored: {self.current_section} is focused")
            return False

        target = CameraPose(
            section.position.copy(),
            section.size,
            quaternion_from_euler((90.0, 90.0, section.rotation)),
        )

        self._begin("zoom_to_section")
        logger.info(f"Zooming to section {section_id}")

        def finish():
            self.state = SectionFocus(section_id, self.origin.copy())
            self.show_return_to_overview()
            self._transition = None

        self._animate(target, finish, "zoom_to_section")
        return True

    def go_to_seat(self, seat: VenueObject) -> bool:
        """Put the camera at a seat facing the venue centre and hand control back."""
        try:
            self._check_idle("go_to_seat")
        except ConcurrentTransitionRejected as e:
            logger.debug(str(e))
            return False

        if not seat.is_seat:
            logger.warning(f"'{seat.name}' is not a seat")
            return False

        section_id = seat.section or self.venue.get_object_section(seat)
        self._begin("go_to_seat")

        position = seat.position + np.array([0.0, self.seat_eye_height, 0.0], dtype=np.float32)
        facing = self.venue.center - position
        facing[1] = 0.0

        if np.linalg.norm(facing) < 1e-6:
            logger.warning(f"Seat '{seat.name}' sits on the venue centre, keeping current facing")
            rotation = self.camera.rotation.copy()
        else:
            rotation = look_rotation(facing)

        self.camera.write(self.WRITER, position=position, rotation=rotation, size=self.seat_view_size)
        self.state = SeatFocus(seat.name, seat.price, section_id, self.origin.copy())
        if self.ui:
            self.ui.show_price(seat.price)

        logger.info(f"Moved to seat {seat.name} (section {section_id})")
        self.scheduler.start(self._settle_at_seat(rotation), name="seat_settle")
        return True

    def zoom_to_original(self) -> bool:
        """Animate back to the overview pose."""
        try:
            self._check_idle("zoom_to_original")
        except ConcurrentTransitionRejected as e:
            logger.debug(str(e))
            return False

        if isinstance(self.state, Overview):
            logger.debug("Already at overview")
            return False

        origin = self.origin
        # Return rotation differs from the section zoom-in formula on purpose
        target = CameraPose(
            origin.position.copy(),
            origin.size,
            quaternion_from_euler((110.0, 90.0, origin.euler_angles[2] - 180.0)),
        )

        self._begin("zoom_to_original")
        logger.info("Zooming back to overview")

        def finish():
            self.state = Overview()
            if self.ui:
                self.ui.hide_price()
                self.ui.set_return_button_visible(False)

            for driver in self.drivers:
                driver.set_new_initial_rotation(origin.rotation)

            self._release_all()
            self._transition = None

        self._animate(target, finish, "zoom_to_original")
        return True

    def show_return_to_overview(self):
        if self.ui:
            self.ui.set_return_button_visible(True)

    # Internals

    def _check_idle(self, requested: str):
        if self._transition is not None:
            raise ConcurrentTransitionRejected(requested, self._transition)

    def _begin(self, name: str):
        """Lock every driver before the first write of a transition."""
        self._leases.append(ControlLease(name, [driver.lock for driver in self.drivers]))
        self._transition = name

    def _release_all(self):
        for lease in self._leases:
            lease.release()
        self._leases = []

    def _animate(self, target: CameraPose, on_complete, name: str) -> Coroutine:
        tween = CameraTween(self.camera, self.WRITER, self.camera.get_pose(), target, self.zoom_duration, self.curve)
        self.active_tween = tween
        return self.scheduler.start(self._run_tween(tween, on_complete), name=name)

    def _run_tween(self, tween: CameraTween, on_complete):
        try:
            while not tween.finished:
                yield None
                tween.advance(self.scheduler.delta_time)
        finally:
            self.active_tween = None
            if not tween.finished:
                logger.warning(f"{self._transition} interrupted, releasing camera")
                self._release_all()
                self._transition = None

        on_complete()

    def _settle_at_seat(self, rotation: np.ndarray):
        yield WaitForSeconds(self.seat_settle_delay)

        for driver in self.drivers:
            driver.set_new_initial_rotation(rotation)

        self._release_all()
        self._transition = None
