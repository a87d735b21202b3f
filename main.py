"""
Scripted headless session.

    python main.py mode=swipe seat=premium frames=240 config=seatview.json

mode and seat are passed on as a view command; frames, dt and config
control the session itself.
"""

import sys
import numpy as np
from seatview.core.application import SeatViewApplication
from seatview.core.config import Config
from seatview.input.orientation import DeviceSensors
from seatview.input.pointer import PointerEvent, PointerPhase
from seatview.scene.venue import Venue, VenueObject
from seatview.utils.math import quaternion_from_euler


SESSION_KEYS = ('frames', 'dt', 'config')


def parse_args(argv):
    args = {}
    for arg in argv:
        if '=' not in arg:
            print(f"Ignoring argument without '=': {arg}")
            continue
        key, value = arg.split('=', 1)
        args[key.strip().lower()] = value.strip()
    return args


def demo_venue(config: Config) -> Venue:
    objects = [
        VenueObject("premium", (0.0, 1.0, -8.0), section="MainSection", is_seat=True, price=120.0),
        VenueObject("standard", (-5.0, 1.5, -8.0), section="LeftSection", is_seat=True, price=60.0),
        VenueObject("back", (0.0, 2.0, 9.0), section="BackSection", is_seat=True, price=35.0),
        VenueObject("MainStand", (0.0, 0.0, -9.0), section="MainSection"),
        VenueObject("RightStand", (5.0, 0.0, -9.0), section="RightSection"),
    ]
    return Venue.from_config(config.section('navigation'), config.section('commands'), (0.0, 0.0, 0.0), objects)


def main():
    args = parse_args(sys.argv[1:])

    config = Config(args.get('config'))
    frames = int(args.get('frames', 240))
    dt = float(args.get('dt', 1.0 / 60.0))

    sensors = DeviceSensors(supports_gyroscope=True, supports_accelerometer=True)
    app = SeatViewApplication(config, sensors=sensors, venue=demo_venue(config))
    app.start()

    command = {key: value for key, value in args.items() if key not in SESSION_KEYS}
    if command:
        app.queue_command(command)
    else:
        app.queue_touch("MainStand")

    for frame in range(frames):
        # Slow pan of the device plus a short drag halfway through
        sensors.gyro_attitude = quaternion_from_euler((0.0, 20.0 * np.sin(frame * dt), 0.0))
        if frame == frames // 2:
            app.queue_pointer(PointerEvent(PointerPhase.BEGAN, (100.0, 100.0), frame * dt))
        elif frame == frames // 2 + 1:
            app.queue_pointer(PointerEvent(PointerPhase.MOVED, (160.0, 90.0), frame * dt))
        elif frame == frames // 2 + 2:
            app.queue_pointer(PointerEvent(PointerPhase.ENDED, (160.0, 90.0), frame * dt))

        app.step(dt)

    pose = app.camera.get_pose()
    app.logger.info(f"View state: {app.navigator.state}")
    app.logger.info(f"Drive mode: {app.switcher.current_mode.value}")
    app.logger.info(
        f"Camera: position={np.round(pose.position, 2).tolist()}, size={pose.size:.2f}, "
        f"euler={np.round(pose.euler_angles, 1).tolist()}"
    )
    app.shutdown()


if __name__ == "__main__":
    main()
