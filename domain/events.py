"""
Event-related domain models.

Immutable data structures representing reconstructed collisions, their
tracks and the generator-level particles they are linked to.
"""

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional

from .species import Species


class GapSide(IntEnum):
    """Rapidity-gap topology of an ultra-peripheral event."""

    NONE = -1
    A = 0
    C = 1
    DOUBLE = 2

    @classmethod
    def from_code(cls, code: Optional[int]) -> Optional['GapSide']:
        if code is None:
            return None
        try:
            return cls(int(code))
        except ValueError:
            return cls.NONE

    def __str__(self) -> str:
        return self.name


class Detector(Enum):
    """Detector providing a PID response."""

    TPC = "tpc"
    TOF = "tof"


class ProductionProcess(IntEnum):
    """Generator production process codes used by the truth classification."""

    PRIMARY = 0
    DECAY = 4


class ParticleOrigin(Enum):
    """Truth-level origin of a reconstructed track."""

    PRIMARY = "prm"
    SECONDARY_WEAK_DECAY = "str"
    SECONDARY_MATERIAL = "mat"


@dataclass(frozen=True)
class McParticle:
    """Generator-level particle."""

    pdg_code: int
    px: float
    py: float
    pz: float
    is_physical_primary: bool = True
    process: int = ProductionProcess.PRIMARY
    mother_pdg_codes: tuple[int, ...] = field(default_factory=tuple)

    @property
    def has_mothers(self) -> bool:
        return len(self.mother_pdg_codes) > 0


@dataclass(frozen=True)
class Track:
    """
    Reconstructed track as delivered by the event source.

    nσ values are keyed by species; a species missing from a map has no
    response for that detector.
    """

    charge: int
    px: float
    py: float
    pz: float
    dca_xy: float = 0.0
    dca_z: float = 0.0
    tpc_chi2_ncl: float = 0.0
    tpc_ncls_findable: float = 0.0
    its_chi2_ncl: float = 0.0
    is_pv_contributor: bool = True
    has_tof: bool = False
    tpc_signal: float = 0.0
    tof_beta: float = -1.0
    tpc_n_sigma: dict[Species, float] = field(default_factory=dict)
    tof_n_sigma: dict[Species, float] = field(default_factory=dict)
    mc_particle: Optional[McParticle] = None

    def __post_init__(self):
        """Validate the track."""
        if abs(self.charge) > 2:
            raise ValueError(f"charge must be in [-2, 2], got {self.charge}")
        if self.tpc_ncls_findable < 0:
            raise ValueError(f"tpc_ncls_findable must be non-negative, got {self.tpc_ncls_findable}")

    @property
    def pt(self) -> float:
        return math.hypot(self.px, self.py)

    @property
    def p(self) -> float:
        return math.sqrt(self.px * self.px + self.py * self.py + self.pz * self.pz)

    @property
    def eta(self) -> float:
        pt = self.pt
        if pt == 0.0:
            return 0.0 if self.pz == 0.0 else math.copysign(math.inf, self.pz)
        return math.asinh(self.pz / pt)

    @property
    def has_mc_particle(self) -> bool:
        return self.mc_particle is not None


@dataclass(frozen=True)
class Event:
    """A reconstructed collision with its global observables and tracks."""

    pos_x: float
    pos_y: float
    pos_z: float
    num_contributors: int
    tracks: tuple[Track, ...] = field(default_factory=tuple)

    # Forward detector amplitudes
    fv0a_amplitude: float = 0.0
    ft0a_amplitude: float = 0.0
    ft0c_amplitude: float = 0.0
    fdda_amplitude: float = 0.0
    fddc_amplitude: float = 0.0

    # Forward detector timings
    fv0a_time: float = 0.0
    ft0a_time: float = 0.0
    ft0c_time: float = 0.0
    fdda_time: float = 0.0
    fddc_time: float = 0.0
    zna_time: float = 0.0
    znc_time: float = 0.0

    # ZDC common energies
    zna_energy: float = 0.0
    znc_energy: float = 0.0

    gap_side: Optional[GapSide] = None
    has_mc_collision: bool = False

    # Generator particles of the associated simulated collision
    mc_particles: tuple[McParticle, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate the event."""
        if self.num_contributors < 0:
            raise ValueError(f"num_contributors must be non-negative, got {self.num_contributors}")
        if not isinstance(self.tracks, tuple):
            object.__setattr__(self, "tracks", tuple(self.tracks))
        if not isinstance(self.mc_particles, tuple):
            object.__setattr__(self, "mc_particles", tuple(self.mc_particles))

    @property
    def track_count(self) -> int:
        return len(self.tracks)
