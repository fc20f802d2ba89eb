"""
Track quality and kinematic selection.
"""
import math

from domain.config import TrackCuts
from domain.events import Track
from services.calculations import consts


def dca_xy_limit(track: Track, cuts: TrackCuts) -> float:
    """DCAxy limit: the configured value, or the pT-dependent cut when it is 0."""
    if cuts.dca_xy_max > 0:
        return cuts.dca_xy_max
    pt = track.pt
    if pt == 0.0:
        return math.inf
    return consts.DCA_XY_PT_CONST + consts.DCA_XY_PT_SLOPE / pt ** consts.DCA_XY_PT_EXPONENT


def failed_cuts(track: Track, cuts: TrackCuts) -> list[str]:
    """Names of every track cut the track fails; empty when it passes."""
    checks = {
        "pv_contributor": track.is_pv_contributor or not cuts.require_pv_contributor,
        "dca_z": abs(track.dca_z) < cuts.dca_z_max,
        "dca_xy": abs(track.dca_xy) < dca_xy_limit(track, cuts),
        "tpc_chi2_ncl": track.tpc_chi2_ncl < cuts.tpc_chi2_ncl_max,
        "tpc_ncls_findable": track.tpc_ncls_findable > cuts.tpc_ncls_findable_min,
        "its_chi2_ncl": track.its_chi2_ncl < cuts.its_chi2_ncl_max,
        "eta": abs(track.eta) < cuts.eta_max,
        "pt": track.pt > cuts.pt_min,
    }
    return [name for name, passed in checks.items() if not passed]


def accept_track(track: Track, cuts: TrackCuts) -> bool:
    return not failed_cuts(track, cuts)
