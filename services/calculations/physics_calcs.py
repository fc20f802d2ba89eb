"""
Columnar four-pion calculations.

Vectorised counterpart of the per-event path for quick mass spectra:
event and track cuts are applied as awkward masks over whole batches and the
four-pion system is built with vector.
"""
import awkward as ak
import numpy as np
import vector

from domain.config import AnalysisConfig, TofPolicy
from domain.species import Species
from services.calculations import consts
from services.parsing import schemas

vector.register_awkward()


def track_vectors(arrays: ak.Array) -> ak.Array:
    """Pion-mass Lorentz vectors of every track, jagged per event."""
    px = arrays[schemas.track_branch("px")]
    return vector.zip({
        "px": px,
        "py": arrays[schemas.track_branch("py")],
        "pz": arrays[schemas.track_branch("pz")],
        "mass": ak.full_like(px, consts.PION_MASS, dtype=np.float64),
    })


def _branch_or(arrays: ak.Array, branch: str, like: ak.Array, default) -> ak.Array:
    if branch in arrays.fields:
        return arrays[branch]
    return ak.full_like(like, default)


def event_mask(arrays: ak.Array, config: AnalysisConfig) -> ak.Array:
    """Vertex, contributor, forward-detector and ZDC vetoes."""
    cuts = config.event_cuts
    pos_z = arrays["posZ"]
    mask = abs(pos_z) < cuts.vertex_z_max
    mask = mask & (arrays["numContrib"] == cuts.required_contributors)
    mask = mask & (_branch_or(arrays, "totalFV0AmplitudeA", pos_z, 0.0) < cuts.fv0a_max)
    mask = mask & (_branch_or(arrays, "totalFT0AmplitudeA", pos_z, 0.0) < cuts.ft0a_max)
    mask = mask & (_branch_or(arrays, "totalFT0AmplitudeC", pos_z, 0.0) < cuts.ft0c_max)
    mask = mask & (_branch_or(arrays, "energyCommonZNA", pos_z, 0.0) < cuts.zdc_max)
    mask = mask & (_branch_or(arrays, "energyCommonZNC", pos_z, 0.0) < cuts.zdc_max)
    return mask


def track_mask(arrays: ak.Array, config: AnalysisConfig) -> ak.Array:
    """Track quality cuts plus the pion nσ selection, TOF policy included."""
    cuts = config.track_cuts
    vectors = track_vectors(arrays)
    pt = vectors.pt
    tb = schemas.track_branch

    mask = (pt > cuts.pt_min) & (abs(vectors.eta) < cuts.eta_max)
    mask = mask & (abs(_branch_or(arrays, tb("dcaZ"), pt, 0.0)) < cuts.dca_z_max)

    if cuts.dca_xy_max > 0:
        dca_xy_limit = cuts.dca_xy_max
    else:
        dca_xy_limit = consts.DCA_XY_PT_CONST + consts.DCA_XY_PT_SLOPE / pt ** consts.DCA_XY_PT_EXPONENT
    mask = mask & (abs(_branch_or(arrays, tb("dcaXY"), pt, 0.0)) < dca_xy_limit)

    mask = mask & (_branch_or(arrays, tb("tpcChi2NCl"), pt, 0.0) < cuts.tpc_chi2_ncl_max)
    mask = mask & (_branch_or(arrays, tb("tpcNClsFindable"), pt, 0.0) > cuts.tpc_ncls_findable_min)
    mask = mask & (_branch_or(arrays, tb("itsChi2NCl"), pt, 0.0) < cuts.its_chi2_ncl_max)
    if cuts.require_pv_contributor:
        mask = mask & (_branch_or(arrays, tb("isPVContributor"), pt, True) != 0)

    pid_cuts = config.pid_cuts
    tpc_branch = tb(schemas.n_sigma_branch("tpc", Species.PION))
    mask = mask & (abs(_branch_or(arrays, tpc_branch, pt, np.nan)) < pid_cuts.n_sigma_tpc_max)
    if not pid_cuts.use_tof:
        return mask

    has_tof = _branch_or(arrays, tb("hasTOF"), pt, 0) != 0
    tof_branch = tb(schemas.n_sigma_branch("tof", Species.PION))
    tof_ok = abs(_branch_or(arrays, tof_branch, pt, np.nan)) < pid_cuts.n_sigma_tof_max
    if pid_cuts.tof_policy is TofPolicy.TPC_FALLBACK:
        return mask & (~has_tof | tof_ok)
    return mask & has_tof & tof_ok


def fast_four_pion_kinematics(tracks: ak.Array, charges: ak.Array) -> ak.Array:
    """
    Four-pion system of every event with exactly four tracks.

    Args:
        tracks: Jagged Lorentz vectors of preselected tracks
        charges: Jagged track charges, same structure as `tracks`

    Returns:
        Record array with pt, rapidity, mass and a neutral flag per
        four-track event
    """
    if len(tracks) == 0:
        empty = np.array([], dtype=np.float64)
        return ak.zip({"pt": empty, "rapidity": empty, "mass": empty, "neutral": np.array([], dtype=bool)})

    four_track = ak.num(tracks, axis=1) == consts.N_PIONS
    tracks = tracks[four_track]
    charges = charges[four_track]

    # Sum components explicitly so every vector backend agrees
    energy = np.sqrt(tracks.px ** 2 + tracks.py ** 2 + tracks.pz ** 2 + tracks.mass ** 2)
    system = vector.zip({
        "px": ak.sum(tracks.px, axis=1),
        "py": ak.sum(tracks.py, axis=1),
        "pz": ak.sum(tracks.pz, axis=1),
        "E": ak.sum(energy, axis=1),
    })

    n_positive = ak.sum(charges > 0, axis=1)
    n_negative = ak.sum(charges < 0, axis=1)
    neutral = (n_positive == 2) & (n_negative == 2)

    return ak.zip({
        "pt": system.pt,
        "rapidity": system.rapidity,
        "mass": system.mass,
        "neutral": neutral,
    })


def select_fast_candidates(arrays: ak.Array, config: AnalysisConfig) -> ak.Array:
    """Apply the columnar event/track cuts and build the four-pion systems."""
    arrays = arrays[event_mask(arrays, config)]
    if len(arrays) == 0:
        return fast_four_pion_kinematics(ak.Array([]), ak.Array([]))

    mask = track_mask(arrays, config)
    tracks = track_vectors(arrays)[mask]
    charges = arrays[schemas.track_branch("sign")][mask]
    return fast_four_pion_kinematics(tracks, charges)
