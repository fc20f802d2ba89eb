"""
Utility modules for the analysis.
"""

from .paths import (
    create_timestamped_run_dir,
    expand_input_paths,
)

__all__ = [
    "create_timestamped_run_dir",
    "expand_input_paths",
]
