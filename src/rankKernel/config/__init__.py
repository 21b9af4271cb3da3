"""
Configuration modules for rankKernel.

This module contains default configurations and the model battery.
"""

from .default_config import DEFAULT_CONFIG
from .model_configs import MODEL_CONFIGS, DEFAULT_MODELS, create_model_spec, create_model_battery

__all__ = [
    "DEFAULT_CONFIG",
    "MODEL_CONFIGS",
    "DEFAULT_MODELS",
    "create_model_spec",
    "create_model_battery",
]
