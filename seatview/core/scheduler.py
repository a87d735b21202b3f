# seatview/core/scheduler.py

from typing import Generator, List, Optional
from seatview.core.logging import get_logger

logger = get_logger()

# Remaining wait below this counts as elapsed (float drift over many frames)
WAIT_EPSILON = 1e-6


class WaitForSeconds:
    """Yield from a coroutine to suspend it for a span of frame time."""

    def __init__(self, seconds: float):
        self.seconds = max(0.0, float(seconds))


class Coroutine:
    """
    A generator driven one segment per frame.
    Yield None to resume on the next frame, WaitForSeconds to sleep.
    """

    def __init__(self, generator: Generator, name: Optional[str] = None):
        self.generator = generator
        self.name = name or getattr(generator, '__name__', 'coroutine')
        self.finished = False
        self.remaining = 0.0

    def step(self):
        """Run the generator until its next yield."""
        try:
            instruction = next(self.generator)
        except StopIteration:
            self.finished = True
            return
        except Exception as e:
            logger.error(f"Coroutine '{self.name}' failed: {e}", exc_info=True)
            self.finished = True
            return

        if isinstance(instruction, WaitForSeconds):
            self.remaining = instruction.seconds
        else:
            self.remaining = 0.0

    def __repr__(self):
        return f"Coroutine({self.name!r}, finished={self.finished})"


class Scheduler:
    """
    Cooperative frame scheduler.
    A coroutine runs its first segment inside start(); anything started during
    a frame is resumed for the first time on the following tick.
    """

    def __init__(self):
        self._tasks: List[Coroutine] = []
        self._pending: List[Coroutine] = []

        # Frame time of the tick in progress, readable from coroutines
        self.delta_time = 0.0

    def start(self, generator: Generator, name: Optional[str] = None) -> Coroutine:
        """Start a coroutine."""
        task = Coroutine(generator, name)
        task.step()
        if not task.finished:
            self._pending.append(task)
        return task

    def tick(self, dt: float):
        """Resume every due coroutine once."""
        self.delta_time = dt

        for task in self._tasks:
            if task.finished:
                continue

            if task.remaining > 0.0:
                task.remaining -= dt
                if task.remaining > WAIT_EPSILON:
                    continue

            task.step()

        self._tasks = [task for task in self._tasks if not task.finished]
        self._tasks.extend(task for task in self._pending if not task.finished)
        self._pending = []

    @property
    def active_count(self) -> int:
        return len(self._tasks) + len(self._pending)

    def is_running(self, name: str) -> bool:
        """Check whether a coroutine with this name is still alive."""
        return any(task.name == name and not task.finished for task in self._tasks + self._pending)

    def clear(self):
        """Drop all coroutines."""
        for task in self._tasks + self._pending:
            task.generator.close()
        self._tasks = []
        self._pending = []
