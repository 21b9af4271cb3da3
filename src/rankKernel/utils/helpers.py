"""
Helper utilities for rankKernel.
"""

from typing import Union
from pathlib import Path
import numpy as np


def ensure_directory(path: Union[str, Path]) -> Path:
    """Ensure directory exists, create if it doesn't."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def derive_seed(seed: int, *keys: int) -> int:
    """
    Deterministic sub-seed for a unit of work.

    The same (seed, keys) always gives the same value, independent of which
    worker runs the unit or in what order units are scheduled.
    """
    sequence = np.random.SeedSequence(int(seed), spawn_key=tuple(int(k) for k in keys))
    return int(sequence.generate_state(1, dtype=np.uint32)[0])


def format_time(seconds: float) -> str:
    """Format time in seconds to human readable format."""
    if seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.2f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.2f}h"
