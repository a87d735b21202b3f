"""Pytest configuration and shared fixtures."""

from collections import defaultdict

import numpy as np
import pytest

from seatview.camera.camera import Camera
from seatview.core.application import SeatViewApplication
from seatview.core.config import Config
from seatview.input.orientation import DeviceSensors
from seatview.scene.venue import Venue, VenueObject
from seatview.utils.math import quaternion_from_euler


DT = 1.0 / 60.0

ORIGIN_POSITION = (45.0, 120.0, -0.22)
ORIGIN_SIZE = 5.0
ORIGIN_EULER = (70.0, 270.0, 0.0)


class WriteRecorder:
    """Records (frame, writer) for every camera write."""

    def __init__(self, camera: Camera, clock=None):
        self.clock = clock
        self.writes = []
        camera.add_write_listener(self)

    def __call__(self, writer, camera):
        frame = self.clock.frame_count if self.clock is not None else None
        self.writes.append((frame, writer))

    @property
    def writers(self):
        return [writer for _, writer in self.writes]

    def by_frame(self):
        frames = defaultdict(list)
        for frame, writer in self.writes:
            frames[frame].append(writer)
        return frames

    def clear(self):
        self.writes = []


@pytest.fixture
def config():
    """Default configuration with quiet console logging."""
    return Config(overrides={'logging': {'level': 'WARNING'}})


@pytest.fixture
def sensors():
    """A device with both gyroscope and accelerometer, held still."""
    return DeviceSensors(supports_gyroscope=True, supports_accelerometer=True)


@pytest.fixture
def venue(config):
    objects = [
        VenueObject("premium", (0.0, 1.0, -8.0), section="MainSection", is_seat=True, price=120.0),
        VenueObject("standard", (-5.0, 1.5, -8.0), section="LeftSection", is_seat=True, price=60.0),
        VenueObject("back", (0.0, 2.0, 9.0), section="BackSection", is_seat=True, price=35.0),
        VenueObject("sold", (1.0, 1.0, -8.0), section="MainSection", is_seat=True, available=False, price=90.0),
        VenueObject("MainStand", (0.0, 0.0, -9.0), section="MainSection"),
        VenueObject("LeftStand", (-5.0, 0.0, -9.0), section="LeftSection"),
        VenueObject("Scoreboard", (0.0, 10.0, 0.0)),
    ]
    return Venue.from_config(config.section('navigation'), config.section('commands'), (0.0, 0.0, 0.0), objects)


@pytest.fixture
def camera():
    """Camera at the overview pose."""
    return Camera(ORIGIN_POSITION, quaternion_from_euler(ORIGIN_EULER), ORIGIN_SIZE)


@pytest.fixture
def app(config, sensors, venue, camera):
    """Started application in gyro mode."""
    application = SeatViewApplication(config, sensors=sensors, venue=venue, camera=camera)
    application.start()
    yield application
    application.scheduler.clear()


@pytest.fixture
def recorder(app):
    return WriteRecorder(app.camera, app.time)


@pytest.fixture
def run_for():
    """Step an application for a span of frame time."""
    def run(application, seconds, dt=DT):
        for _ in range(int(round(seconds / dt))):
            application.step(dt)
    return run


@pytest.fixture
def rng():
    return np.random.default_rng(7)
