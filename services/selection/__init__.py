"""
Event, track and particle-identification selection.
"""

from .pid import PIDClassifier, n_sigma, species_index
from .track_selector import accept_track, failed_cuts, dca_xy_limit
from .event_selector import accept_event, accept_vertex, classify_gap
from .truth import classify_origin, matches_pdg

__all__ = [
    "PIDClassifier",
    "n_sigma",
    "species_index",
    "accept_track",
    "failed_cuts",
    "dca_xy_limit",
    "accept_event",
    "accept_vertex",
    "classify_gap",
    "classify_origin",
    "matches_pdg",
]
