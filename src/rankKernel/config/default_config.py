"""
Default configuration for rankKernel.

This module contains the default configuration settings.
"""

from typing import Dict, Any

DEFAULT_CONFIG: Dict[str, Any] = {
    # Evaluation protocol and hyperparameter grids
    "experiment": {
        "c_grid": [0.01, 0.1, 1.0, 10.0, 100.0],
        "k_grid": [1, 3, 5, 7, 9],
        "inner_folds": 5,
        "outer_folds": 5,
        "outer_repeats": 10,
        "seed": 42,
        "noise_window_grid": [0.5, 1.0, 2.0],
        "mc_draw_counts": [1, 5, 10, 50, 100],
        "n_jobs": 1,
        "backend": "loky",
        "disjoint_pairs": False,
        "kfd_regularization": 1e-3,
    },

    # Data configuration
    "data": {
        "label_column": "Group",
    },

    # Output configuration
    "output": {
        "directory": "./results",
    },

    # Logging configuration
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s | %(levelname)s | %(name)s:%(lineno)d | %(message)s",
        "file": "run.log"
    }
}
