"""
Tests for configuration loading and validation.
"""

import pytest
import yaml
import sys
import os
from pathlib import Path

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.config import KalmanConfig, TrackingConfig, load_config


REPO_CONFIG = Path(__file__).parent.parent / "config" / "tracking.yaml"


class TestValidation:
    """Test construction-time validation."""

    def test_defaults_are_valid(self):
        """Test default configuration"""
        config = TrackingConfig()
        assert config.max_fps == 144.0
        assert config.kalman == KalmanConfig()
        assert config.tick_interval_s == pytest.approx(1.0 / 144.0)

    def test_millisecond_properties(self):
        """Test ms to s conversions"""
        config = TrackingConfig(
            switch_delay_ms=200.0, target_timeout_ms=2000.0,
            fire_rate_ms=60.0, max_prediction_time_ms=150.0
        )
        assert config.switch_delay_s == pytest.approx(0.2)
        assert config.target_timeout_s == pytest.approx(2.0)
        assert config.fire_rate_s == pytest.approx(0.06)
        assert config.max_prediction_time_s == pytest.approx(0.15)

    @pytest.mark.parametrize("field, value", [
        ("max_fps", 0.0),
        ("max_fps", -10.0),
        ("snap_threshold", -0.1),
        ("velocity_threshold", -1.0),
        ("fire_rate_ms", -5.0),
        ("switch_delay_ms", -1.0),
        ("target_timeout_ms", -1.0),
        ("smoothing_factor", 1.5),
        ("max_targets", 0),
    ])
    def test_invalid_values_rejected(self, field, value):
        """Test fail-fast on impossible values"""
        with pytest.raises(ValueError):
            TrackingConfig(**{field: value})

    def test_invalid_kalman_rejected(self):
        """Test negative noise terms"""
        with pytest.raises(ValueError):
            KalmanConfig(r=-0.1)

    def test_config_is_immutable(self):
        """Test frozen dataclass"""
        config = TrackingConfig()
        with pytest.raises(Exception):
            config.max_fps = 60.0

    def test_replace(self):
        """Test deriving a modified copy"""
        config = TrackingConfig().replace(instant_switch=True)
        assert config.instant_switch
        assert not TrackingConfig().instant_switch


class TestFromDict:
    """Test dictionary conversion."""

    def test_camel_case_keys(self):
        """Test keys in the original payload spelling"""
        config = TrackingConfig.from_dict({
            "dragForce": 3.0,
            "maxFPS": 60,
            "headLockOnly": False,
            "switchDelayMs": 100,
            "minLockTimeSeconds": 0.5,
            "kalman": {"R": 0.5, "Q": 0.2},
        })
        assert config.drag_force == 3.0
        assert config.max_fps == 60
        assert config.head_lock_only is False
        assert config.switch_delay_ms == 100
        assert config.min_lock_time_s == 0.5
        assert config.kalman.r == 0.5
        assert config.kalman.q == 0.2

    def test_unknown_keys_ignored(self):
        """Test that unknown keys do not fail"""
        config = TrackingConfig.from_dict({"aimSensitivity": 4.5, "max_fps": 90})
        assert config.max_fps == 90

    def test_dict_round_trip(self):
        """Test to_dict/from_dict"""
        config = TrackingConfig(max_targets=4, kalman=KalmanConfig(r=0.2))
        assert TrackingConfig.from_dict(config.to_dict()) == config


class TestLoadConfig:
    """Test YAML loading."""

    def test_repository_config_matches_defaults(self):
        """Test the shipped YAML payload"""
        assert load_config(REPO_CONFIG) == TrackingConfig()

    def test_load_from_file(self, tmp_path):
        """Test loading values from a YAML file"""
        path = tmp_path / "tracking.yaml"
        path.write_text(yaml.safe_dump({
            "maxFPS": 60,
            "instantSwitch": True,
            "kalman": {"r": 0.1},
        }))

        config = load_config(path)

        assert config.max_fps == 60
        assert config.instant_switch is True
        assert config.kalman.r == 0.1
        assert config.drag_force == TrackingConfig().drag_force

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test fallback when the file does not exist"""
        assert load_config(tmp_path / "missing.yaml") == TrackingConfig()

    def test_overrides_win(self, tmp_path):
        """Test overrides applied on top of the file"""
        path = tmp_path / "tracking.yaml"
        path.write_text(yaml.safe_dump({"max_fps": 60}))

        config = load_config(path, overrides={"maxFPS": 30})
        assert config.max_fps == 30

    def test_invalid_file_value_rejected(self, tmp_path):
        """Test validation applies to loaded values"""
        path = tmp_path / "tracking.yaml"
        path.write_text(yaml.safe_dump({"max_fps": 0}))

        with pytest.raises(ValueError):
            load_config(path)
