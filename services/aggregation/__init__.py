"""
Histogram accumulation and record emission.
"""

from .histograms import HistogramRegistry
from .sinks import RecordSink, ListSink, RootTreeSink
from .record_builder import build_derived_record, build_generated_record

__all__ = [
    "HistogramRegistry",
    "RecordSink",
    "ListSink",
    "RootTreeSink",
    "build_derived_record",
    "build_generated_record",
]
