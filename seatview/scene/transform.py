# seatview/scene/transform.py

import numpy as np
from seatview.utils.math import (
    quaternion_identity,
    quaternion_normalize,
    quaternion_to_euler,
)


class Transform:
    """
    World-space pose of a scene object.
    The venue camera has no parent, so position and rotation are stored directly.
    """

    def __init__(self, position=None, rotation=None):
        self.position = np.zeros(3, dtype=np.float32) if position is None else np.array(position, dtype=np.float32)
        self.rotation = quaternion_identity() if rotation is None else quaternion_normalize(rotation)

    def set_position(self, position: np.ndarray):
        """Set world position."""
        self.position = np.array(position, dtype=np.float32)

    def set_rotation(self, rotation: np.ndarray):
        """Set world rotation (as quaternion)."""
        self.rotation = quaternion_normalize(rotation)

    @property
    def euler_angles(self) -> np.ndarray:
        """Rotation as Euler angles in degrees, each in [0, 360)."""
        return quaternion_to_euler(self.rotation)
