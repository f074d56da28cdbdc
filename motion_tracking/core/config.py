"""Configuration management for inertial motion tracking."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os

import yaml

CONFIG_ENV_VAR = "MOTION_TRACKING_CONFIG"


@dataclass
class CalibrationConfig:
    """Accelerometer bias calibration configuration."""
    num_samples: int = 100
    gravity_magnitude: float = 9.81
    max_std: float = 0.5  # Above this the device was probably moving


@dataclass
class KalmanConfig:
    """Kalman filter noise configuration.

    Noise values are placed on the diagonal of the respective matrices.
    """
    process_noise: float = 0.001
    measurement_noise: float = 0.01
    initial_covariance: float = 1.0
    covariance_update: str = "predict_only"  # or "standard"


@dataclass
class LimitsConfig:
    """Plausibility limits applied after bias correction."""
    max_acceleration: float = 50.0  # m/s^2
    max_angular_velocity: float = 20.0  # rad/s


@dataclass
class StepDetectionConfig:
    """Pedometer configuration."""
    step_threshold: float = 10.0  # m/s^2
    time_threshold_ms: float = 250.0
    max_threshold_ratio: float = 2.0


@dataclass
class IntegrationConfig:
    """Orientation and dead-reckoning integration configuration."""
    fixed_dt_s: float = 0.01
    use_sample_time: bool = False
    low_pass_alpha: float = 0.1
    gravity_magnitude: float = 9.81
    damping_factor: float = 0.98
    velocity_zero_threshold: float = 0.01


@dataclass
class TimestampValidationConfig:
    """Timestamp validation configuration."""
    max_dt_s: float = 0.1
    min_dt_s: float = 0.001


@dataclass
class ValidationConfig:
    """Validation configuration."""
    timestamp: TimestampValidationConfig = field(default_factory=TimestampValidationConfig)


@dataclass
class SourceConfig:
    """Host-side sample delivery configuration."""
    update_interval_ms: float = 20.0
    velocity_smoothing_alpha: float = 0.8
    max_path_points: int = 1000
    map_scale_deg_per_m: float = 0.00001


@dataclass
class MonitoringConfig:
    """Performance monitoring configuration."""
    target_hz: int = 50
    jitter_warning_ms: float = 5.0
    window_size: int = 1000
    log_interval_s: float = 10.0


@dataclass
class Config:
    """Complete configuration for motion tracking."""
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    kalman: KalmanConfig = field(default_factory=KalmanConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    step_detection: StepDetectionConfig = field(default_factory=StepDetectionConfig)
    integration: IntegrationConfig = field(default_factory=IntegrationConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


def _dict_to_dataclass(data: dict, cls: type) -> object:
    """Recursively convert dictionary to dataclass, ignoring unknown keys."""
    if not hasattr(cls, "__dataclass_fields__"):
        return data

    defaults = cls()
    kwargs = {}

    for name in cls.__dataclass_fields__:
        if name not in data:
            continue
        value = data[name]
        default_value = getattr(defaults, name)
        if hasattr(default_value, "__dataclass_fields__") and isinstance(value, dict):
            kwargs[name] = _dict_to_dataclass(value, type(default_value))
        else:
            kwargs[name] = value

    return cls(**kwargs)


def default_config_path() -> Path:
    """Location of the configuration file shipped with the package."""
    return Path(__file__).parent.parent / "config" / "default.yaml"


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file. If None, uses the
            MOTION_TRACKING_CONFIG environment variable, then the
            packaged default.

    Returns:
        Configuration object with all settings.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
        ValueError: If the file does not contain a mapping.
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            config_path = env_path
        else:
            default_path = default_config_path()
            if default_path.exists():
                config_path = str(default_path)
            else:
                return Config()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return Config()

    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")

    return _dict_to_dataclass(data, Config)
