import json
import logging
import math
from pathlib import Path
from typing import Dict, Any, Optional

# Smallest normal float32, the entropy tables are float32
FLOAT32_TINY = 1.1754943508222875e-38

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR
}


class Config:
    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        self.config_path = Path(config_path) if config_path is not None else None
        self.config_data = self._load_config(self.config_path) if self.config_path is not None else {}
        if overrides:
            self.config_data.update(overrides)
        self._init_estimator_defaults()
        self._validate_histogram_config()
        self._validate_cost_config()
        self._validate_logging_config()

    def _load_config(self, config_path: Path) -> Dict[str, Any]:
        with open(config_path, 'r', encoding='utf-8') as config_file:
            config_data = json.load(config_file)

        self._process_string_formatting(config_data)
        return config_data

    def _process_string_formatting(self, config_data: Dict[str, Any]) -> None:
        """Replace {case_name} in string values with the configured case name."""
        case_name = config_data.get("case_name", "")

        for key, value in config_data.items():
            if isinstance(value, str) and "{case_name}" in value:
                config_data[key] = value.format(case_name=case_name)

    def _init_estimator_defaults(self) -> None:
        """Fill in defaults for every estimator parameter the file leaves out."""
        defaults = {
            # Histogram
            "max_pixel_value": 255,
            "max_histogram_value": 255,
            # Parzen window smoothing, 3 is recommended in the paper
            "smoothing_radius": 3,
            # Floor substituted for zero probabilities, None means float32 eps
            "eps": None,
            # Disparity input
            "min_disparity": 0,
            "invalid_disparity": 255,
            # Quantized cost table
            "max_cost": 2047,
            # Logging
            "log_level": "INFO",
            "log_file": None
        }
        for k, v in defaults.items():
            self.config_data.setdefault(k, v)

    def _validate_histogram_config(self) -> None:
        """Validate histogram resolution parameters."""
        max_pixel_value = self.config_data["max_pixel_value"]
        max_histogram_value = self.config_data["max_histogram_value"]

        for key in ("max_pixel_value", "max_histogram_value", "smoothing_radius"):
            value = self.config_data[key]
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{key} must be a positive integer, got {value!r}")

        if max_histogram_value > max_pixel_value:
            raise ValueError(f"max_histogram_value ({max_histogram_value}) can't exceed "
                             f"max_pixel_value ({max_pixel_value})")

        eps = self.config_data["eps"]
        # Smaller values round to zero in the float32 entropy tables
        if eps is not None and (not isinstance(eps, (int, float)) or not math.isfinite(eps)
                                or eps < FLOAT32_TINY):
            raise ValueError(f"eps must be a finite number of at least {FLOAT32_TINY:.3e}, got {eps!r}")

    def _validate_cost_config(self) -> None:
        """Validate disparity and cost table parameters."""
        max_cost = self.config_data["max_cost"]
        if not isinstance(max_cost, int) or max_cost <= 0:
            raise ValueError(f"max_cost must be a positive integer, got {max_cost!r}")

        for key in ("min_disparity", "invalid_disparity"):
            if not isinstance(self.config_data[key], int):
                raise ValueError(f"{key} must be an integer, got {self.config_data[key]!r}")

    def _validate_logging_config(self) -> None:
        """Validate the logging level name."""
        log_level = self.config_data["log_level"]
        if log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(LOG_LEVELS)}, got {log_level!r}")

    def get_log_level(self) -> int:
        """Numeric logging level for LoggerConfig."""
        return LOG_LEVELS[self.config_data["log_level"]]

    def get_estimator_config(self) -> Dict[str, Any]:
        """Keyword arguments for the StereoMutualInformation constructor."""
        estimator_config = {
            "max_pixel_value": self.config_data["max_pixel_value"],
            "max_histogram_value": self.config_data["max_histogram_value"],
            "smoothing_radius": self.config_data["smoothing_radius"]
        }
        if self.config_data["eps"] is not None:
            estimator_config["eps"] = float(self.config_data["eps"])
        return estimator_config

    def get_config_summary(self) -> str:
        """One line summary of the estimator configuration."""
        return (f"histogram {self.max_histogram_value + 1} bins for pixels up to {self.max_pixel_value}, "
                f"smoothing radius {self.smoothing_radius}, max cost {self.max_cost}")

    def __getattr__(self, name: str) -> Any:
        if name != "config_data" and name in self.__dict__.get("config_data", {}):
            return self.config_data[name]
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")
