# seatview/core/config.py

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional
from seatview.core.logging import get_logger

logger = get_logger()


DEFAULTS: Dict[str, Any] = {
    'engine': {
        'version': '0.1.0',
        'max_frame_time': 0.25,
        'target_fps': 60,
    },
    'logging': {
        'level': 'INFO',
        'log_dir': None,
    },
    'gyro': {
        'enable_device_rotation': True,
        'smoothing': 0.1,
        'enable_rotation_limits': False,
        'min_vertical_angle': -80.0,
        'max_vertical_angle': 80.0,
        'calibrate_on_start': True,
        'apply_calibration': True,
        'recalibrate_touch_count': 3,
        'permission_timeout': 15.0,
        'permission_poll_interval': 0.2,
    },
    'swipe': {
        'enable_touch_rotation': True,
        'touch_sensitivity': 2.0,
        'smoothing': 0.1,
        'invert_horizontal': False,
        'invert_vertical': False,
        'enable_rotation_limits': True,
        'min_vertical_angle': -80.0,
        'max_vertical_angle': 80.0,
        'enable_horizontal_limits': False,
        'min_horizontal_angle': -360.0,
        'max_horizontal_angle': 360.0,
        'reset_on_double_tap': True,
        'double_tap_time': 0.3,
    },
    'drive_mode': {
        'default_mode': 'gyro',
    },
    'navigation': {
        'zoom_duration': 1.5,
        'zoom_curve': 'ease_in_out',
        'seat_view_size': 1.0,
        'seat_eye_height': 0.5,
        'seat_settle_delay': 0.5,
        # Overview pose; None takes it from the camera at start
        'origin': {'position': [45.0, 120.0, -0.22], 'size': 5.0, 'rotation': [70.0, 270.0, 0.0]},
        'sections': {
            'MainSection': {'position': [0.0, 5.0, -10.0], 'size': 3.0, 'rotation': 0.0},
            'LeftSection': {'position': [-5.0, 5.0, -10.0], 'size': 3.0, 'rotation': 90.0},
            'RightSection': {'position': [5.0, 5.0, -10.0], 'size': 3.0, 'rotation': -90.0},
            'BackSection': {'position': [0.0, 5.0, 10.0], 'size': 3.0, 'rotation': 180.0},
        },
    },
    'commands': {
        'default_mode': 'gyro',
        'mode_switch_delay': 1.0,
        'seat_refs': {
            'premium': 'premium',
            'standard': 'standard',
            'back': 'back',
        },
    },
}


class Config:
    """
    Engine configuration management.
    Defaults deep-merged with an optional JSON file.
    """

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        self.config_path = Path(config_path) if config_path else None
        self.defaults = copy.deepcopy(DEFAULTS)
        self.data: Dict[str, Any] = {}

        self.load()

        if overrides:
            self.data = self._deep_merge(self.data, overrides)

    def load(self):
        """Load configuration from file."""
        if self.config_path is None:
            self.data = copy.deepcopy(self.defaults)
            return

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    loaded_data = json.load(f)

                # Loaded values override defaults
                self.data = self._deep_merge(copy.deepcopy(self.defaults), loaded_data)
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load configuration from {self.config_path}: {e}")
                self.data = copy.deepcopy(self.defaults)
        else:
            self.data = copy.deepcopy(self.defaults)
            logger.info(f"Configuration file not found, using defaults and creating {self.config_path}")
            self.save()

    def save(self):
        """Save configuration to file."""
        if self.config_path is None:
            return

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
            logger.info(f"Saved configuration to {self.config_path}")
        except OSError as e:
            logger.error(f"Failed to save configuration to {self.config_path}: {e}")

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get configuration value by path.
        Example: config.get('swipe.touch_sensitivity')
        """
        keys = path.split('.')
        value = self.data

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, path: str, value: Any):
        """
        Set configuration value by path.
        Example: config.set('navigation.zoom_duration', 0.75)
        """
        keys = path.split('.')
        data = self.data

        for key in keys[:-1]:
            if key not in data:
                data[key] = {}
            data = data[key]

        data[keys[-1]] = value

    def section(self, name: str) -> Dict[str, Any]:
        """Get a copy of a top-level section."""
        return copy.deepcopy(self.data.get(name, {}))

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Recursively merge override dict into base dict."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
