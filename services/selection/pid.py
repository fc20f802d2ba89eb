"""
Particle identification from TPC and TOF nσ responses.

A track is compatible with a species hypothesis when its TPC response is
within the TPC cut and, if the track reached TOF, its TOF response is
within the TOF cut. Tracks without TOF follow the configured TofPolicy.
"""
import math
from typing import Optional

from domain.config import PIDCuts, TofPolicy
from domain.events import Detector, Track
from domain.species import Species


def n_sigma(track: Track, species: Species, detector: Detector) -> float:
    """Stored nσ of `track` for `species`; NaN when there is no response."""
    responses = track.tpc_n_sigma if detector is Detector.TPC else track.tof_n_sigma
    value = responses.get(species)
    if value is None:
        return math.nan
    return float(value)


def species_index(species: Species) -> int:
    return species.index


def _within(value: float, cut: float) -> bool:
    # NaN compares False
    return abs(value) < cut


class PIDClassifier:
    """Non-exclusive species tagging of tracks."""

    def __init__(self, cuts: PIDCuts):
        self.cuts = cuts

    def is_hypothesis(
        self,
        track: Track,
        species: Species,
        n_sigma_tpc_cut: Optional[float] = None,
        n_sigma_tof_cut: Optional[float] = None
    ) -> bool:
        tpc_cut = self.cuts.n_sigma_tpc_max if n_sigma_tpc_cut is None else n_sigma_tpc_cut
        tof_cut = self.cuts.n_sigma_tof_max if n_sigma_tof_cut is None else n_sigma_tof_cut

        if not _within(n_sigma(track, species, Detector.TPC), tpc_cut):
            return False
        if not self.cuts.use_tof:
            return True
        if track.has_tof:
            return _within(n_sigma(track, species, Detector.TOF), tof_cut)
        return self.cuts.tof_policy is TofPolicy.TPC_FALLBACK

    def is_signal_candidate(self, track: Track) -> bool:
        return self.is_hypothesis(track, self.cuts.signal_species)

    def hypotheses(self, track: Track) -> list[Species]:
        """All enabled species the track is compatible with."""
        return [
            species for species in Species
            if self.cuts.is_enabled(species) and self.is_hypothesis(track, species)
        ]
