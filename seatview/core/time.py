# seatview/core/time.py

import time


class TimeManager:
    """
    Central frame clock.
    Wall-clock ticking for the live loop, explicit stepping for scripted runs.
    """

    def __init__(self, max_frame_time: float = 0.25):
        self.delta_time = 0.0
        self.time_scale = 1.0
        self.max_frame_time = max_frame_time

        # Timing
        self._last_frame_time = time.perf_counter()
        self.time = 0.0

        # Frame counting
        self.frame_count = 0

        # FPS tracking
        self._fps_samples = []
        self._fps_sample_count = 60
        self.fps = 0.0

    def tick(self) -> float:
        """
        Call once per frame in the live loop.
        Returns frame delta time.
        """
        current_time = time.perf_counter()
        delta = current_time - self._last_frame_time
        self._last_frame_time = current_time
        return self.advance(delta)

    def advance(self, dt: float) -> float:
        """Step the clock by a given delta (clamped to max_frame_time)."""
        dt = min(max(dt, 0.0), self.max_frame_time) * self.time_scale
        self.delta_time = dt
        self.time += dt

        # Update FPS
        self._fps_samples.append(dt)
        if len(self._fps_samples) > self._fps_sample_count:
            self._fps_samples.pop(0)

        if self._fps_samples:
            avg_delta = sum(self._fps_samples) / len(self._fps_samples)
            self.fps = 1.0 / avg_delta if avg_delta > 0 else 0.0

        self.frame_count += 1
        return self.delta_time
