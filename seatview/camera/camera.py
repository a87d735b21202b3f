# seatview/camera/camera.py

from dataclasses import dataclass
from typing import Callable, List, Optional
import numpy as np
from seatview.scene.transform import Transform
from seatview.utils.math import quaternion_to_euler


# listener(writer_name, camera)
WriteListener = Callable[[str, 'Camera'], None]


@dataclass
class CameraPose:
    """Snapshot of everything a navigation animation moves."""
    position: np.ndarray
    size: float
    rotation: np.ndarray

    @property
    def euler_angles(self) -> np.ndarray:
        return quaternion_to_euler(self.rotation)

    def copy(self) -> 'CameraPose':
        return CameraPose(self.position.copy(), float(self.size), self.rotation.copy())


class Camera:
    """
    Orthographic venue camera.
    The transform is the one resource shared between rotation drivers and
    navigation animations, so every mutation goes through write() with the
    writer's name attached.
    """

    def __init__(self, position=None, rotation=None, orthographic_size: float = 5.0):
        self.transform = Transform(position, rotation)
        self.orthographic_size = float(orthographic_size)

        self._write_listeners: List[WriteListener] = []

    @property
    def position(self) -> np.ndarray:
        return self.transform.position

    @property
    def rotation(self) -> np.ndarray:
        return self.transform.rotation

    def write(self, writer: str, position: Optional[np.ndarray] = None,
              rotation: Optional[np.ndarray] = None, size: Optional[float] = None):
        """Mutate the camera on behalf of a named writer."""
        if position is not None:
            self.transform.set_position(position)
        if rotation is not None:
            self.transform.set_rotation(rotation)
        if size is not None:
            self.orthographic_size = float(size)

        for listener in self._write_listeners:
            listener(writer, self)

    def apply_pose(self, writer: str, pose: CameraPose):
        self.write(writer, position=pose.position, rotation=pose.rotation, size=pose.size)

    def get_pose(self) -> CameraPose:
        return CameraPose(
            self.transform.position.copy(),
            self.orthographic_size,
            self.transform.rotation.copy(),
        )

    def add_write_listener(self, listener: WriteListener):
        self._write_listeners.append(listener)
