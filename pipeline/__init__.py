"""
Pipeline execution layer.

The per-event analysis and the executor that runs it over input files.
"""

from .analysis import RhoTo4PiAnalysis
from .executor import PipelineExecutor

__all__ = ["RhoTo4PiAnalysis", "PipelineExecutor"]
