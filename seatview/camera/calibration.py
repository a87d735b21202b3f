# seatview/camera/calibration.py

import numpy as np
from seatview.core.errors import CalibrationFailure
from seatview.core.logging import get_logger
from seatview.utils.math import (
    quaternion_chain,
    quaternion_identity,
    quaternion_inverse,
    quaternion_normalize,
)

logger = get_logger()


class CalibrationEngine:
    """
    Maps raw device orientation to a world-facing camera rotation.

    calibrate(raw) stores inverse(raw), so the pose held at calibration time
    maps onto the driver's initial rotation:

        rotation = initial * base * calibration * raw
    """

    def __init__(self, apply_calibration: bool = True):
        self.calibration = quaternion_identity()
        self.base = quaternion_identity()
        self.apply_calibration = apply_calibration
        self.calibration_count = 0

    def calibrate(self, raw: np.ndarray) -> bool:
        """
        Make the given raw sample the new zero orientation.
        On degenerate input the previous offset is kept.
        """
        try:
            offset = self._offset_for(raw)
        except CalibrationFailure as e:
            logger.warning(f"Calibration failed, keeping previous offset: {e}")
            return False

        self.calibration = offset
        self.calibration_count += 1
        logger.debug("Device orientation calibrated")
        return True

    def _offset_for(self, raw: np.ndarray) -> np.ndarray:
        raw = np.asarray(raw, dtype=np.float32)
        if raw.shape != (4,) or not np.all(np.isfinite(raw)):
            raise CalibrationFailure(f"Invalid orientation sample {raw}")

        try:
            return quaternion_inverse(quaternion_normalize(raw))
        except ValueError as e:
            raise CalibrationFailure(str(e)) from e

    def apply(self, raw: np.ndarray, initial: np.ndarray) -> np.ndarray:
        """
        Compose a raw sample into a world rotation anchored at initial.
        Raises CalibrationFailure on a zero or non-finite sample.
        """
        if self.apply_calibration:
            rotation = quaternion_chain(initial, self.base, self.calibration, raw)
        else:
            rotation = quaternion_chain(initial, self.base, raw)

        try:
            return quaternion_normalize(rotation)
        except ValueError as e:
            raise CalibrationFailure(f"Degenerate orientation sample {np.asarray(raw).tolist()}") from e

    def reset(self):
        """Drop the calibration offset."""
        self.calibration = quaternion_identity()
        logger.debug("Calibration offset reset")

    def toggle_calibration(self) -> bool:
        self.apply_calibration = not self.apply_calibration
        logger.info(f"Apply calibration: {self.apply_calibration}")
        return self.apply_calibration
