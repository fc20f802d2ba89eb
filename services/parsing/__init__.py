"""
Parsing services.

Services responsible for reading event trees from ROOT files.
"""

from .event_reader import EventReader, event_from_row

__all__ = [
    "EventReader",
    "event_from_row",
]
