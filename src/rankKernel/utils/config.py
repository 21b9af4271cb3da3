"""
Configuration management for rankKernel.

This module loads and saves experiment configurations as YAML or JSON.
"""

from typing import Any, Dict, Union
import yaml
import json
from pathlib import Path
from dataclasses import fields

from .logger import get_logger
from ..core.base import ExperimentConfig

# option names as they appear in shared experiment descriptions
OPTION_ALIASES = {
    "Cgrid": "c_grid",
    "kGrid": "k_grid",
    "innerFolds": "inner_folds",
    "outerFolds": "outer_folds",
    "outerRepeats": "outer_repeats",
    "noiseWindowGrid": "noise_window_grid",
    "mcDrawCounts": "mc_draw_counts",
}


class ConfigManager:
    """Configuration manager for rankKernel."""

    def __init__(self):
        self.logger = get_logger("ConfigManager")
        self.config = ExperimentConfig()
        self._field_names = {f.name for f in fields(ExperimentConfig)}

    def load_from_file(self, config_path: Union[str, Path]) -> 'ConfigManager':
        """
        Load configuration from a file.

        Args:
            config_path: Path to configuration file

        Returns:
            Self for method chaining
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        self.logger.info(f"Loading configuration from {config_path}")

        suffix = config_path.suffix.lower()
        with open(config_path, 'r', encoding='utf-8') as f:
            if suffix in ('.yaml', '.yml'):
                config_data = yaml.safe_load(f) or {}
            elif suffix == '.json':
                config_data = json.load(f)
            else:
                raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        # accept the nested layout of DEFAULT_CONFIG as well as a flat mapping
        if isinstance(config_data.get("experiment"), dict):
            config_data = config_data["experiment"]

        self.update_config(**config_data)
        self.logger.info("Configuration loaded successfully")
        return self

    def save_to_file(self, config_path: Union[str, Path]) -> None:
        """
        Save configuration to a file.

        Args:
            config_path: Path to save configuration file
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        self.logger.info(f"Saving configuration to {config_path}")

        config_data = self.config.to_dict()
        suffix = config_path.suffix.lower()

        if suffix in ('.yaml', '.yml'):
            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config_data, f, default_flow_style=False, indent=2)
        elif suffix == '.json':
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=2)
        else:
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        self.logger.info("Configuration saved successfully")

    def get_config(self) -> ExperimentConfig:
        """Get the current configuration, validated."""
        return self.config.validate()

    def update_config(self, **kwargs) -> 'ConfigManager':
        """
        Update configuration with new values.

        Args:
            **kwargs: Configuration parameters to update (aliases accepted)

        Returns:
            Self for method chaining
        """
        values: Dict[str, Any] = self.config.to_dict()
        for key, value in kwargs.items():
            key = OPTION_ALIASES.get(key, key)
            if key in self._field_names:
                values[key] = value
            else:
                self.logger.warning(f"Unknown configuration key: {key}")

        self.config = ExperimentConfig(**values)
        return self
