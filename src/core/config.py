"""
Configuration for the target-lock tracking engine.

A single immutable TrackingConfig is built once and handed to every
component at construction. Values can come from the dataclass defaults,
a plain dictionary, or a YAML file (camelCase or snake_case keys).
"""

import dataclasses
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


logger = logging.getLogger("TrackingConfig")


@dataclass(frozen=True)
class KalmanConfig:
    """Noise terms for the per-axis estimators."""
    r: float = 0.004  # Measurement noise
    q: float = 0.01   # Process noise (kept for reference, see process_noise)
    process_noise: float = 0.1

    def __post_init__(self):
        for name in ("r", "q", "process_noise"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"Invalid kalman.{name}: {value}. Must be >= 0")


@dataclass(frozen=True)
class TrackingConfig:
    """All tunables of the tracking/pointing loop."""

    # Motion controller
    drag_force: float = 5.0
    max_distance: float = 99999.0
    long_range_multiplier: float = 1.2
    smoothing_factor: float = 0.5
    snap_threshold: float = 0.0014
    velocity_threshold: float = 0.1
    enable_snap: bool = True

    # Recoil compensation
    recoil_compensation: bool = True
    recoil_factor: float = 0.8

    # Prediction
    max_prediction_time_ms: float = 150.0
    prediction_weight: float = 0.3
    kalman: KalmanConfig = field(default_factory=KalmanConfig)

    # Target selection
    head_lock_only: bool = True
    preferred_category: str = "head"
    instant_switch: bool = False
    switch_delay_ms: float = 200.0
    target_timeout_ms: float = 2000.0
    max_target_distance: float = 99999.0
    max_targets: int = 32

    # Action trigger
    fire_on_lock: bool = True
    min_lock_time_s: float = 0.01
    fire_rate_ms: float = 60.0
    max_fire_distance: float = 99999.0
    min_accuracy: float = 0.0

    # Loop
    max_fps: float = 144.0
    status_interval_s: float = 1.0

    def __post_init__(self):
        """Validate configuration parameters."""
        if isinstance(self.kalman, dict):
            object.__setattr__(self, "kalman", KalmanConfig(**_snake_keys(self.kalman)))

        if self.max_fps <= 0:
            raise ValueError(f"Invalid max_fps: {self.max_fps}. Must be > 0")
        if self.max_targets < 1:
            raise ValueError(f"Invalid max_targets: {self.max_targets}. Must be >= 1")
        if not 0.0 <= self.smoothing_factor <= 1.0:
            raise ValueError(
                f"Invalid smoothing_factor: {self.smoothing_factor}. Must be in [0, 1]"
            )

        non_negative = (
            "drag_force", "max_distance", "long_range_multiplier",
            "snap_threshold", "velocity_threshold", "recoil_factor",
            "max_prediction_time_ms", "prediction_weight",
            "switch_delay_ms", "target_timeout_ms", "max_target_distance",
            "min_lock_time_s", "fire_rate_ms", "max_fire_distance",
            "min_accuracy", "status_interval_s",
        )
        for name in non_negative:
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"Invalid {name}: {value}. Must be >= 0")

    # Millisecond fields in seconds
    @property
    def max_prediction_time_s(self) -> float:
        return self.max_prediction_time_ms / 1000.0

    @property
    def switch_delay_s(self) -> float:
        return self.switch_delay_ms / 1000.0

    @property
    def target_timeout_s(self) -> float:
        return self.target_timeout_ms / 1000.0

    @property
    def fire_rate_s(self) -> float:
        return self.fire_rate_ms / 1000.0

    @property
    def tick_interval_s(self) -> float:
        return 1.0 / self.max_fps

    def replace(self, **changes) -> "TrackingConfig":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackingConfig":
        """
        Build a config from a dictionary, ignoring unknown keys.

        Args:
            data: Mapping with camelCase or snake_case keys

        Returns:
            Validated TrackingConfig
        """
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in _snake_keys(data).items():
            if key not in known:
                logger.warning(f"Unknown config key ignored: {key}")
                continue
            kwargs[key] = value
        return cls(**kwargs)


# Keys whose camelCase spelling does not map 1:1 onto a field name
_KEY_ALIASES = {
    "max_prediction_time": "max_prediction_time_ms",
    "switch_delay": "switch_delay_ms",
    "target_timeout": "target_timeout_ms",
    "fire_rate": "fire_rate_ms",
    "min_lock_time": "min_lock_time_s",
    "min_lock_time_seconds": "min_lock_time_s",
    "max_f_p_s": "max_fps",
    "max_fp_s": "max_fps",
}


def _to_snake(key: str) -> str:
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()
    return _KEY_ALIASES.get(snake, snake)


def _snake_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {_to_snake(k): v for k, v in data.items()}


def load_config(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> TrackingConfig:
    """
    Load configuration from a YAML file and merge it onto the defaults.

    Args:
        path: Path to the YAML file (defaults only if None or missing)
        overrides: Optional values applied on top of the file contents

    Returns:
        Validated TrackingConfig
    """
    data: Dict[str, Any] = {}

    if path is not None:
        try:
            with open(path, 'r') as f:
                loaded = yaml.safe_load(f) or {}
            data.update(_snake_keys(loaded))
            logger.info(f"Configuration loaded from {path}")
        except FileNotFoundError:
            logger.warning(f"Config file {path} not found, using defaults")

    if overrides:
        data.update(_snake_keys(overrides))

    return TrackingConfig.from_dict(data)
