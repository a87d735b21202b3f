"""Tests for orientation providers and the gyro and swipe rotation drivers."""

import numpy as np
import pytest

from conftest import DT, WriteRecorder
from seatview.camera.camera import Camera
from seatview.camera.gyro_driver import GyroRotationDriver
from seatview.camera.swipe_driver import SwipeRotationDriver
from seatview.core.errors import SensorUnavailable
from seatview.core.scheduler import Scheduler
from seatview.input.orientation import (
    DeviceSensors,
    MotionOrientationProvider,
    PointerOrientationProvider,
    SensorSource,
    convert_gyro_attitude,
    orientation_from_acceleration,
)
from seatview.input.pointer import PointerEvent, PointerPhase, PointerTracker
from seatview.utils.math import (
    normalize_angle,
    quaternion_approx_equal,
    quaternion_chain,
    quaternion_from_euler,
    quaternion_identity,
    quaternion_to_euler,
)


def attitude_for(rotation):
    """Device attitude whose remapped sample equals the given rotation."""
    return np.array([rotation[0], rotation[1], -rotation[2], -rotation[3]], dtype=np.float32)


def make_gyro(sensors, camera=None, **settings):
    camera = camera or Camera()
    provider = MotionOrientationProvider(sensors)
    provider.initialize_sensors()
    provider.request_permissions(Scheduler())
    driver = GyroRotationDriver(camera, provider, settings)
    driver.start()
    driver.enabled = True
    return driver


def make_swipe(camera=None, **settings):
    camera = camera or Camera()
    provider = PointerOrientationProvider.from_settings(settings)
    driver = SwipeRotationDriver(camera, provider, settings)
    driver.start()
    driver.enabled = True
    return driver


def press(t, position=(100.0, 100.0)):
    return PointerEvent(PointerPhase.BEGAN, position, t)


def move(t, position):
    return PointerEvent(PointerPhase.MOVED, position, t)


def release(t, position=(100.0, 100.0)):
    return PointerEvent(PointerPhase.ENDED, position, t)


class TestMotionOrientationProvider:
    def test_prefers_gyroscope(self, sensors):
        provider = MotionOrientationProvider(sensors)
        assert provider.initialize_sensors() == SensorSource.GYROSCOPE
        assert sensors.gyro_enabled

    def test_falls_back_to_accelerometer(self):
        provider = MotionOrientationProvider(DeviceSensors(supports_accelerometer=True))
        assert provider.initialize_sensors() == SensorSource.ACCELEROMETER

    def test_no_sensor_is_unavailable(self):
        provider = MotionOrientationProvider(DeviceSensors())
        provider.initialize_sensors()
        provider.request_permissions(Scheduler())

        assert not provider.available
        with pytest.raises(SensorUnavailable):
            provider.sample()

    def test_gyro_attitude_is_remapped(self):
        q = np.array([0.1, 0.2, 0.3, 0.9], dtype=np.float32)
        np.testing.assert_allclose(convert_gyro_attitude(q), [0.1, 0.2, -0.3, -0.9])

    def test_acceleration_pitch_and_yaw(self):
        assert quaternion_approx_equal(orientation_from_acceleration(np.array([0.0, 0.0, -1.0])), quaternion_identity())
        assert quaternion_approx_equal(
            orientation_from_acceleration(np.array([0.0, -2.0, -2.0])),
            quaternion_from_euler((45.0, 0.0, 0.0)),
        )

    def test_permission_times_out_with_probe(self, sensors):
        scheduler = Scheduler()
        messages = []
        provider = MotionOrientationProvider(sensors, permission_probe=lambda: False,
                                             permission_timeout=1.0, poll_interval=0.2)
        provider.initialize_sensors()
        provider.request_permissions(scheduler, messages.append)

        for _ in range(30):
            scheduler.tick(0.1)

        assert not provider.available
        assert not provider.permission_requested
        assert messages == ["Motion access denied. Please try again."]

    def test_permission_granted_by_probe(self, sensors):
        scheduler = Scheduler()
        answers = iter([False, False, True])
        provider = MotionOrientationProvider(sensors, permission_probe=lambda: next(answers), poll_interval=0.1)
        provider.initialize_sensors()
        provider.request_permissions(scheduler)

        for _ in range(10):
            scheduler.tick(0.1)

        assert provider.permission_granted
        assert provider.available


class TestPointerInput:
    def test_tracker_reports_deltas_while_pressed(self):
        tracker = PointerTracker()
        assert tracker.process(move(0.0, (5.0, 5.0))) is None

        tracker.process(press(0.0, (10.0, 10.0)))
        np.testing.assert_allclose(tracker.process(move(0.1, (15.0, 7.0))), [5.0, -3.0])

        tracker.process(release(0.2))
        assert tracker.process(move(0.3, (30.0, 30.0))) is None

    def test_drag_converts_pixels_to_degrees(self):
        provider = PointerOrientationProvider(touch_sensitivity=2.0)
        provider.apply_drag((10.0, 5.0))

        assert provider.horizontal_angle == pytest.approx(2.0)
        assert provider.vertical_angle == pytest.approx(-1.0)

    def test_inversion(self):
        provider = PointerOrientationProvider(touch_sensitivity=1.0, invert_horizontal=True, invert_vertical=True)
        provider.apply_drag((10.0, 10.0))

        assert provider.horizontal_angle == pytest.approx(-1.0)
        assert provider.vertical_angle == pytest.approx(1.0)

    def test_vertical_limit(self):
        provider = PointerOrientationProvider(touch_sensitivity=2.0)
        provider.apply_drag((0.0, -1100.0))
        assert provider.vertical_angle == pytest.approx(80.0)

    def test_horizontal_wraps_without_limits(self):
        provider = PointerOrientationProvider(touch_sensitivity=1.0)
        provider.apply_drag((3700.0, 0.0))
        assert provider.horizontal_angle == pytest.approx(10.0)

    def test_horizontal_limits(self):
        provider = PointerOrientationProvider(touch_sensitivity=1.0, enable_horizontal_limits=True,
                                              min_horizontal_angle=-45.0, max_horizontal_angle=45.0)
        provider.apply_drag((1000.0, 0.0))
        assert provider.horizontal_angle == pytest.approx(45.0)


class TestGyroRotationDriver:
    def test_disabled_driver_never_writes(self, sensors):
        driver = make_gyro(sensors)
        recorder = WriteRecorder(driver.camera)
        driver.enabled = False

        driver.update(DT)
        assert recorder.writes == []

    def test_locked_driver_never_writes(self, sensors):
        driver = make_gyro(sensors)
        recorder = WriteRecorder(driver.camera)

        token = driver.acquire_external_control("zoom")
        driver.update(DT)
        assert recorder.writes == []
        assert driver.external_control

        driver.release_external_control(token)
        driver.update(DT)
        assert recorder.writers == ["gyro"]

    def test_no_sensor_means_no_write(self):
        driver = make_gyro(DeviceSensors())
        recorder = WriteRecorder(driver.camera)

        assert not driver.calibrate()
        driver.update(DT)
        assert recorder.writes == []

    def test_calibrated_pose_maps_to_initial_rotation(self, sensors):
        initial = quaternion_from_euler((70.0, 270.0, 0.0))
        sensors.gyro_attitude = attitude_for(quaternion_from_euler((15.0, 40.0, 5.0)))
        driver = make_gyro(sensors, Camera(rotation=initial))

        driver.update(DT)
        assert quaternion_approx_equal(driver.target_rotation, initial)
        assert quaternion_approx_equal(driver.camera.rotation, initial)

    def test_smoothing_blends_toward_target(self, sensors):
        driver = make_gyro(sensors, smoothing=0.5)
        sensors.gyro_attitude = attitude_for(quaternion_from_euler((0.0, 40.0, 0.0)))

        driver.update(DT)
        yaw = normalize_angle(quaternion_to_euler(driver.camera.rotation)[1])
        assert yaw == pytest.approx(20.0, abs=0.1)

    def test_new_initial_rotation_recalibrates_once(self, sensors):
        driver = make_gyro(sensors)
        sensors.gyro_attitude = attitude_for(quaternion_from_euler((0.0, 33.0, 0.0)))
        count = driver.calibration.calibration_count

        target = quaternion_from_euler((0.0, 120.0, 0.0))
        driver.set_new_initial_rotation(target)
        assert driver.calibration.calibration_count == count + 1

        driver.update(DT)
        assert quaternion_approx_equal(driver.target_rotation, target)

    @pytest.mark.parametrize("pitch, expected", [(95.0, 80.0), (-95.0, -80.0), (45.0, 45.0)])
    def test_vertical_clamp(self, sensors, pitch, expected):
        driver = make_gyro(sensors, enable_rotation_limits=True, max_vertical_angle=80.0, min_vertical_angle=-80.0)
        sensors.gyro_attitude = attitude_for(quaternion_from_euler((pitch, 0.0, 0.0)))

        driver.update(DT)
        effective = normalize_angle(quaternion_to_euler(driver.target_rotation)[0])
        assert effective == pytest.approx(expected, abs=1e-2)

    def test_three_finger_touch_recalibrates(self, sensors):
        driver = make_gyro(sensors)
        statuses = []
        driver.on_status = statuses.append

        sensors.gyro_attitude = attitude_for(quaternion_from_euler((0.0, 50.0, 0.0)))
        sensors.touch_count = 3
        driver.update(DT)

        assert statuses == ["Calibrated!"]
        assert quaternion_approx_equal(driver.target_rotation, driver.initial_rotation)

    def test_reset_orientation(self, sensors):
        driver = make_gyro(sensors)
        sensors.gyro_attitude = attitude_for(quaternion_from_euler((0.0, 50.0, 0.0)))

        driver.reset_orientation()
        driver.update(DT)
        assert quaternion_approx_equal(driver.target_rotation, driver.initial_rotation)


class TestSwipeRotationDriver:
    def test_drag_turns_camera(self):
        driver = make_swipe(smoothing=1.0)
        driver.queue_pointer(press(0.0, (100.0, 100.0)))
        driver.queue_pointer(move(0.016, (110.0, 100.0)))

        driver.update(DT)
        assert driver.provider.horizontal_angle == pytest.approx(2.0)
        assert quaternion_approx_equal(driver.camera.rotation, quaternion_from_euler((0.0, 2.0, 0.0)))

    def test_rotation_is_relative_to_initial(self):
        initial = quaternion_from_euler((0.0, 90.0, 0.0))
        driver = make_swipe(Camera(rotation=initial), smoothing=1.0)
        driver.queue_pointer(press(0.0))
        driver.queue_pointer(move(0.016, (150.0, 100.0)))

        driver.update(DT)
        expected = quaternion_chain(initial, quaternion_from_euler((0.0, 10.0, 0.0)))
        assert quaternion_approx_equal(driver.target_rotation, expected)

    def test_double_tap_inside_window_resets(self):
        driver = make_swipe()
        resets = []
        driver.reset_rotation = lambda: resets.append(True)

        driver.queue_pointer(press(1.0))
        driver.queue_pointer(release(1.05))
        driver.queue_pointer(press(1.2))
        driver.update(DT)

        assert resets == [True]

    def test_slow_taps_do_not_reset(self):
        driver = make_swipe()
        resets = []
        driver.reset_rotation = lambda: resets.append(True)

        driver.queue_pointer(press(1.0))
        driver.queue_pointer(release(1.05))
        driver.queue_pointer(press(1.5))
        driver.update(DT)

        assert resets == []

    def test_reset_rotation_zeroes_angles(self):
        driver = make_swipe()
        statuses = []
        driver.on_status = statuses.append
        driver.provider.apply_drag((100.0, 50.0))

        driver.reset_rotation()
        assert driver.provider.horizontal_angle == 0.0
        assert driver.provider.vertical_angle == 0.0
        assert statuses == ["Camera rotation reset"]

    def test_input_while_locked_is_dropped(self):
        driver = make_swipe()
        token = driver.acquire_external_control("zoom")

        driver.queue_pointer(press(0.0))
        driver.queue_pointer(move(0.016, (200.0, 100.0)))
        driver.update(DT)

        token.release()
        driver.update(DT)
        assert driver.provider.horizontal_angle == 0.0

    def test_toggle_touch_rotation(self):
        driver = make_swipe()
        recorder = WriteRecorder(driver.camera)

        assert driver.toggle_touch_rotation() is False
        driver.queue_pointer(press(0.0))
        driver.queue_pointer(move(0.016, (200.0, 100.0)))
        driver.update(DT)

        assert recorder.writes == []
        assert driver.provider.horizontal_angle == 0.0

    def test_set_touch_sensitivity(self):
        driver = make_swipe()
        driver.set_touch_sensitivity(5.0)
        driver.queue_pointer(press(0.0))
        driver.queue_pointer(move(0.016, (110.0, 100.0)))
        driver.update(DT)

        assert driver.provider.horizontal_angle == pytest.approx(5.0)


class TestDegenerateSensorInput:
    @pytest.mark.parametrize("attitude", [
        np.zeros(4, dtype=np.float32),
        np.array([np.nan, 0.0, 0.0, 1.0], dtype=np.float32),
    ])
    def test_bad_attitude_holds_last_pose(self, app, recorder, sensors, attitude):
        sensors.gyro_attitude = quaternion_from_euler((0.0, 20.0, 0.0))
        for _ in range(5):
            app.step(DT)
        held = app.camera.rotation.copy()
        recorder.clear()

        sensors.gyro_attitude = attitude
        for _ in range(5):
            app.step(DT)

        assert recorder.writes == []
        np.testing.assert_array_equal(app.camera.rotation, held)
        assert np.all(np.isfinite(app.camera.rotation))

        sensors.gyro_attitude = quaternion_from_euler((0.0, 20.0, 0.0))
        app.step(DT)
        assert recorder.writers == ["gyro"]

    def test_three_finger_touch_on_bad_attitude_keeps_offset(self, sensors):
        driver = make_gyro(sensors)
        statuses = []
        driver.on_status = statuses.append
        previous = driver.calibration.calibration.copy()

        sensors.gyro_attitude = np.zeros(4, dtype=np.float32)
        sensors.touch_count = 3
        driver.update(DT)

        assert statuses == []
        np.testing.assert_array_equal(driver.calibration.calibration, previous)
