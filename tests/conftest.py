"""
Shared fixtures for the analysis tests.

Histogram binnings are kept small so that booking every registry stays cheap.
"""

import pytest

from domain.config import AnalysisConfig, AxisBinning, HistogramBinning
from domain.events import Event, McParticle, Track
from domain.species import Species

SMALL_BINNING = HistogramBinning(
    n_bins_pt=50,
    n_bins_invariant_mass=50,
    n_bins_rapidity=50,
    n_bins_phi=36,
    n_bins_cos_theta=20,
    tof_pt=AxisBinning(20, 0.0, 20.0),
    tof_n_sigma=AxisBinning(20, -50.0, 50.0),
    tof_eta=AxisBinning(10, -4.0, 4.0),
)

# Two positive and two negative pions: summed pz is exactly 0 and summed
# pT is 0.05 GeV/c, so the candidate sits at y = 0 in pT domain A.
SIGNAL_MOMENTA = [
    (1, 0.4, 0.0, 0.1),
    (1, -0.35, 0.0, -0.1),
    (-1, 0.0, 0.4, 0.05),
    (-1, 0.0, -0.4, -0.05),
]


def _track(charge, px, py, pz, **overrides) -> Track:
    fields = dict(
        charge=charge,
        px=px,
        py=py,
        pz=pz,
        dca_xy=0.001,
        dca_z=0.01,
        tpc_chi2_ncl=1.0,
        tpc_ncls_findable=120.0,
        its_chi2_ncl=2.0,
        is_pv_contributor=True,
        has_tof=False,
        tpc_signal=80.0,
        tpc_n_sigma={Species.PION: 0.5},
    )
    fields.update(overrides)
    return Track(**fields)


def _event(tracks, **overrides) -> Event:
    fields = dict(
        pos_x=0.01,
        pos_y=-0.02,
        pos_z=1.0,
        num_contributors=4,
        tracks=tuple(tracks),
    )
    fields.update(overrides)
    return Event(**fields)


@pytest.fixture
def make_track():
    return _track


@pytest.fixture
def make_event():
    return _event


@pytest.fixture
def signal_tracks():
    return [_track(*momentum) for momentum in SIGNAL_MOMENTA]


@pytest.fixture
def background_tracks():
    charges = (1, 1, 1, -1)
    return [
        _track(charge, px, py, pz)
        for charge, (_, px, py, pz) in zip(charges, SIGNAL_MOMENTA)
    ]


@pytest.fixture
def signal_particles():
    """Generator-level rho' daughters matching SIGNAL_MOMENTA."""
    return [
        McParticle(
            pdg_code=211 * charge,
            px=px,
            py=py,
            pz=pz,
            mother_pdg_codes=(30113,),
        )
        for charge, px, py, pz in SIGNAL_MOMENTA
    ]


@pytest.fixture
def small_config():
    return AnalysisConfig(binning=SMALL_BINNING)


@pytest.fixture
def config_factory():
    def factory(**switches) -> AnalysisConfig:
        return AnalysisConfig(binning=SMALL_BINNING, **switches)
    return factory
