"""
Path utilities for the analysis.

Handles timestamped run directories and input file expansion.
"""

import glob
import os
from datetime import datetime


def create_timestamped_run_dir(base_output_dir: str, run_name: str = None) -> str:
    """
    Create a timestamped directory for the current analysis run.

    Args:
        base_output_dir: Base output directory (e.g., "./output")
        run_name: Optional run name to include in directory

    Returns:
        Path to the timestamped run directory

    Example:
        create_timestamped_run_dir("./output", "rho4pi")
        -> "./output/rho4pi_20260216_211730"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if run_name:
        dir_name = f"{run_name}_{timestamp}"
    else:
        dir_name = f"run_{timestamp}"

    run_dir = os.path.join(base_output_dir, dir_name)
    os.makedirs(run_dir, exist_ok=True)

    return run_dir


def expand_input_paths(patterns: list[str]) -> list[str]:
    """
    Expand glob patterns into a sorted, de-duplicated list of files.

    Patterns without a match are kept as given so that remote URLs
    (root://, https://) reach the reader untouched.
    """
    files = []
    for pattern in patterns:
        matches = sorted(glob.glob(pattern))
        files.extend(matches or [pattern])
    return list(dict.fromkeys(files))
