"""
Configuration management for trajectory repair.

Provides centralized configuration handling with validation and defaults.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any
import json
from pathlib import Path


@dataclass
class RepairConfig:
    """Configuration class for the trajectory repair passes."""

    # Timestamp sequence correction
    time_outlier_scale: float = 3.0  # IQR multiple for the two-sided time residual rule
    robust_max_iter: int = 200  # IRLS iterations of the robust time fit

    # Location sequence correction
    location_outlier_scale: float = 6.0  # IQR multiple for the one-sided location residual rule
    local_fit_span: float = 0.05  # Fraction of points in each local fit
    local_fit_degree: int = 2  # Degree of the local polynomial

    # Shared settings
    min_observations: int = 4  # Minimum points for the regression based passes
    use_spline_interpolation: bool = False  # Cubic spline instead of linear interpolation
    verbose: bool = False  # Enable verbose logging

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_config()

    def _validate_config(self):
        """Validate configuration parameters."""
        if self.time_outlier_scale <= 0:
            raise ValueError("time_outlier_scale must be positive")

        if self.location_outlier_scale <= 0:
            raise ValueError("location_outlier_scale must be positive")

        if not 0 < self.local_fit_span <= 1:
            raise ValueError("local_fit_span must be between 0 and 1")

        if self.local_fit_degree not in [1, 2]:
            raise ValueError("local_fit_degree must be 1 or 2")

        if self.robust_max_iter < 1:
            raise ValueError("robust_max_iter must be at least 1")

        if self.min_observations < 4:
            raise ValueError("min_observations must be at least 4")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'RepairConfig':
        """
        Build a configuration from a dictionary, ignoring unknown keys.

        Args:
            config_dict: Dictionary of configuration values

        Returns:
            RepairConfig instance
        """
        known = {key: value for key, value in config_dict.items()
                 if key in cls.__dataclass_fields__}
        return cls(**known)

    @classmethod
    def from_file(cls, config_path: str) -> 'RepairConfig':
        """
        Load configuration from JSON file.

        Args:
            config_path: Path to JSON configuration file

        Returns:
            RepairConfig instance
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r') as f:
            config_dict = json.load(f)

        return cls(**config_dict)

    def to_file(self, config_path: str):
        """
        Save configuration to JSON file.

        Args:
            config_path: Path where to save the configuration
        """
        path = Path(config_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration as a plain dictionary."""
        return asdict(self)
