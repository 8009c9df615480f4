"""
Configuration management for cmbemu.

Provides utilities for loading and validating YAML/JSON configuration files
for the emulator viewer: which model package to open, the default spectrum
and the multipole axis mapping.
"""

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, Optional, Union
import logging

try:
    import yaml

    HAS_YAML = True
except ImportError:
    HAS_YAML = False

from cmbemu.core import constants

logger = logging.getLogger(__name__)


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters
    ----------
    config_path : str or Path
        Path to configuration file (.yaml, .yml, or .json)

    Returns
    -------
    dict
        Configuration dictionary

    Raises
    ------
    FileNotFoundError
        If config file does not exist
    ValueError
        If file format is not supported
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, "r") as f:
        if suffix in [".yaml", ".yml"]:
            if not HAS_YAML:
                raise ImportError(
                    "PyYAML is required for YAML config files. " "Install with: pip install pyyaml"
                )
            config = yaml.safe_load(f)
        elif suffix == ".json":
            config = json.load(f)
        else:
            raise ValueError(
                f"Unsupported config file format: {suffix}. " "Use .yaml, .yml, or .json"
            )

    logger.info(f"Loaded configuration from {config_path}")
    return config if config is not None else {}


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> None:
    """
    Save configuration to YAML or JSON file.

    Parameters
    ----------
    config : dict
        Configuration dictionary
    config_path : str or Path
        Path to output file (.yaml, .yml, or .json)
    """
    config_path = Path(config_path)
    suffix = config_path.suffix.lower()

    with open(config_path, "w") as f:
        if suffix in [".yaml", ".yml"]:
            if not HAS_YAML:
                raise ImportError(
                    "PyYAML is required for YAML config files. " "Install with: pip install pyyaml"
                )
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)
        elif suffix == ".json":
            json.dump(config, f, indent=2)
        else:
            raise ValueError(
                f"Unsupported config file format: {suffix}. " "Use .yaml, .yml, or .json"
            )

    logger.info(f"Saved configuration to {config_path}")


@dataclass
class EmulatorConfig:
    """
    Settings for an emulator session.

    Attributes
    ----------
    package_path : str, optional
        Model package opened at start-up
    spectrum : str
        Initially selected spectrum label
    log_scale_bound : float
        Multipole below which the axis is logarithmic
    transition_fraction : float
        Fraction of the display axis taken by the logarithmic part
    min_coordinate : float
        Smallest multipole on the axis
    max_coordinate : float
        Largest multipole on the axis
    num_threads : int, optional
        Threads handed to the interpreter
    log_level : str
        Logging level for the command line
    """

    package_path: Optional[str] = None
    spectrum: str = constants.DEFAULT_SPECTRUM
    log_scale_bound: float = constants.LOG_SCALE_BOUND
    transition_fraction: float = constants.TRANSITION_FRACTION
    min_coordinate: float = constants.MIN_COORDINATE
    max_coordinate: float = constants.MAX_COORDINATE
    num_threads: Optional[int] = None
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "EmulatorConfig":
        """
        Load emulator configuration from a YAML or JSON file.

        The file must contain an ``emulator`` section; missing keys take
        their defaults.

        Parameters
        ----------
        config_path : str or Path
            Path to configuration file

        Returns
        -------
        EmulatorConfig
            Configuration instance
        """
        config = load_config(config_path)

        if "emulator" not in config:
            raise ValueError("Configuration must contain 'emulator' section")

        section = config["emulator"] or {}
        return cls(
            package_path=section.get("package_path"),
            spectrum=str(section.get("spectrum", constants.DEFAULT_SPECTRUM)).upper(),
            log_scale_bound=float(section.get("log_scale_bound", constants.LOG_SCALE_BOUND)),
            transition_fraction=float(
                section.get("transition_fraction", constants.TRANSITION_FRACTION)
            ),
            min_coordinate=float(section.get("min_coordinate", constants.MIN_COORDINATE)),
            max_coordinate=float(section.get("max_coordinate", constants.MAX_COORDINATE)),
            num_threads=section.get("num_threads"),
            log_level=section.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration as an ``emulator`` section."""
        return {"emulator": asdict(self)}

    def validate(self) -> bool:
        """
        Validate configuration.

        Returns
        -------
        bool
            True if valid

        Raises
        ------
        ValueError
            If configuration is invalid
        """
        if self.package_path is not None and not Path(self.package_path).exists():
            raise ValueError(f"Model package not found: {self.package_path}")

        if not self.spectrum:
            raise ValueError("spectrum must not be empty")

        if self.min_coordinate <= 0:
            raise ValueError("min_coordinate must be positive")

        if not self.min_coordinate < self.log_scale_bound < self.max_coordinate:
            raise ValueError(
                "Invalid axis bounds: require min_coordinate < log_scale_bound < max_coordinate"
            )

        if not 0.0 < self.transition_fraction < 1.0:
            raise ValueError("transition_fraction must lie in (0, 1)")

        if self.num_threads is not None and self.num_threads < 1:
            raise ValueError("num_threads must be >= 1")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of: {valid_levels}")

        return True
