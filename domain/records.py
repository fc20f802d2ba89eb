"""
Derived record domain models.

Flat, immutable output rows emitted once per accepted event.
"""

import math
from dataclasses import dataclass, field, fields
from enum import Enum

N_TRACKS = 4


class RecordKind(Enum):
    """Which output table a record belongs to."""

    SIGNAL = "signalData"
    BACKGROUND = "bkgroundData"
    MC_GENERATED = "MCgen"
    MC_RECONSTRUCTED = "SignalMCreco"


@dataclass(frozen=True)
class FourBodyKinematics:
    """Combined four-body system observables."""

    pt: float
    eta: float
    phi: float
    rapidity: float
    mass: float


@dataclass(frozen=True)
class CollinsSoperAngles:
    """Collins-Soper (phi, cos theta) of the two opposite-sign pairings."""

    phi_pair_1: float = math.nan
    phi_pair_2: float = math.nan
    cos_theta_pair_1: float = math.nan
    cos_theta_pair_2: float = math.nan


def _check_length(name: str, values: tuple) -> None:
    if len(values) != N_TRACKS:
        raise ValueError(f"{name} must have {N_TRACKS} entries, got {len(values)}")


@dataclass(frozen=True)
class TrackKinematics:
    """Per-track kinematic arrays, ordered (+, +, -, -) for neutral candidates."""

    pt: tuple[float, ...]
    eta: tuple[float, ...]
    phi: tuple[float, ...]
    rapidity: tuple[float, ...]

    def __post_init__(self):
        for f in fields(self):
            _check_length(f.name, getattr(self, f.name))


@dataclass(frozen=True)
class GeneratedRecord:
    """Generator-level four-pion candidate."""

    tracks: TrackKinematics
    system: FourBodyKinematics
    pair_masses: tuple[float, ...]
    angles: CollinsSoperAngles = field(default_factory=CollinsSoperAngles)

    def __post_init__(self):
        _check_length("pair_masses", self.pair_masses)

    def to_row(self) -> dict:
        """Flatten into a column-name -> value mapping."""
        return {
            **_track_kinematics_columns(self.tracks),
            **_system_columns(self.system),
            **_angle_columns(self.angles),
        }


@dataclass(frozen=True)
class DerivedRecord:
    """
    Reconstructed four-track candidate.

    Event descriptors, per-track quality and PID arrays, combined
    kinematics, pair masses and Collins-Soper angles.
    """

    kind: RecordKind

    # Vertex
    pos_x: float
    pos_y: float
    pos_z: float

    # Forward detectors
    fv0a_amplitude: float
    ft0a_amplitude: float
    ft0c_amplitude: float
    fdda_amplitude: float
    fddc_amplitude: float
    fv0a_time: float
    ft0a_time: float
    ft0c_time: float
    fdda_time: float
    fddc_time: float
    zna_time: float
    znc_time: float

    # Per-track arrays
    dca_xy: tuple[float, ...]
    dca_z: tuple[float, ...]
    tpc_n_sigma: dict[str, tuple[float, ...]]
    tof_n_sigma: dict[str, tuple[float, ...]]
    tpc_chi2: tuple[float, ...]
    tpc_ncls_findable: tuple[float, ...]
    its_chi2: tuple[float, ...]
    tracks: TrackKinematics

    # Combined
    system: FourBodyKinematics
    pair_masses: tuple[float, ...]
    angles: CollinsSoperAngles = field(default_factory=CollinsSoperAngles)

    def __post_init__(self):
        """Validate the record is fully populated."""
        for name in ("dca_xy", "dca_z", "tpc_chi2", "tpc_ncls_findable", "its_chi2", "pair_masses"):
            _check_length(name, getattr(self, name))
        for species, values in {**self.tpc_n_sigma, **self.tof_n_sigma}.items():
            _check_length(f"n_sigma[{species}]", values)

    @property
    def is_signal(self) -> bool:
        return self.kind in (RecordKind.SIGNAL, RecordKind.MC_RECONSTRUCTED)

    def to_row(self) -> dict:
        """Flatten into a column-name -> value mapping."""
        row = {
            "posX": self.pos_x,
            "posY": self.pos_y,
            "posZ": self.pos_z,
            "fv0signal": self.fv0a_amplitude,
            "ft0asignal": self.ft0a_amplitude,
            "ft0csignal": self.ft0c_amplitude,
            "fddasignal": self.fdda_amplitude,
            "fddcsignal": self.fddc_amplitude,
            "timeFv0": self.fv0a_time,
            "timeFt0a": self.ft0a_time,
            "timeFt0c": self.ft0c_time,
            "timeFdda": self.fdda_time,
            "timeFddc": self.fddc_time,
            "timeZna": self.zna_time,
            "timeZnc": self.znc_time,
            "dcaxy": list(self.dca_xy),
            "dcaz": list(self.dca_z),
        }
        for species, values in self.tpc_n_sigma.items():
            row[f"tpcNsigma{species}"] = list(values)
        for species, values in self.tof_n_sigma.items():
            row[f"tofNsigma{species}"] = list(values)
        row["tpcChi2"] = list(self.tpc_chi2)
        row["tpcNClsFindable"] = list(self.tpc_ncls_findable)
        row["itsChi2"] = list(self.its_chi2)
        row.update(_track_kinematics_columns(self.tracks))
        row.update(_system_columns(self.system))
        if self.kind is not RecordKind.BACKGROUND:
            row.update(_angle_columns(self.angles))
        return row


def _track_kinematics_columns(tracks: TrackKinematics) -> dict:
    return {
        "pionPt": list(tracks.pt),
        "pionEta": list(tracks.eta),
        "pionPhi": list(tracks.phi),
        "pionRapidity": list(tracks.rapidity),
    }


def _system_columns(system: FourBodyKinematics) -> dict:
    return {
        "fourPionPt": system.pt,
        "fourPionEta": system.eta,
        "fourPionPhi": system.phi,
        "fourPionRapidity": system.rapidity,
        "fourPionMass": system.mass,
    }


def _angle_columns(angles: CollinsSoperAngles) -> dict:
    return {
        "fourPionPhiPair1": angles.phi_pair_1,
        "fourPionPhiPair2": angles.phi_pair_2,
        "fourPionCosThetaPair1": angles.cos_theta_pair_1,
        "fourPionCosThetaPair2": angles.cos_theta_pair_2,
    }
