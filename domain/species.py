"""
Particle species domain model.

Fixed enumeration of the PID hypotheses with a lookup table of
per-species constants, indexed by the enumeration.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class SpeciesInfo:
    """Static properties of a particle species hypothesis."""

    pdg_code: int
    mass: float  # GeV/c^2
    label: str
    short_name: str

    def __post_init__(self):
        if self.mass < 0:
            raise ValueError(f"mass must be non-negative, got {self.mass}")


class Species(Enum):
    """
    PID hypotheses, in binning order.

    The enumeration value is the histogram/array index of the species.
    """

    ELECTRON = 0
    MUON = 1
    PION = 2
    KAON = 3
    PROTON = 4
    DEUTERON = 5
    TRITON = 6
    HELIUM3 = 7
    ALPHA = 8

    @property
    def info(self) -> SpeciesInfo:
        return SPECIES_TABLE[self]

    @property
    def index(self) -> int:
        return self.value

    @property
    def pdg_code(self) -> int:
        return SPECIES_TABLE[self].pdg_code

    @property
    def mass(self) -> float:
        return SPECIES_TABLE[self].mass

    @property
    def short_name(self) -> str:
        return SPECIES_TABLE[self].short_name

    @classmethod
    def from_short_name(cls, name: str) -> 'Species':
        """Look up a species by its short name ("Pi", "Ka", ...) or enum name."""
        for species, info in SPECIES_TABLE.items():
            if name in (info.short_name, species.name, species.name.lower()):
                return species
        raise ValueError(f"Unknown species: {name}")

    @classmethod
    def from_pdg(cls, pdg_code: int) -> 'Species':
        """Look up a species by PDG code, ignoring the sign."""
        for species, info in SPECIES_TABLE.items():
            if info.pdg_code == abs(pdg_code):
                return species
        raise ValueError(f"No species with PDG code {pdg_code}")

    def __str__(self) -> str:
        return self.short_name


SPECIES_TABLE = {
    Species.ELECTRON: SpeciesInfo(11, 0.000510998950, "e", "El"),
    Species.MUON: SpeciesInfo(13, 0.1056583755, "#mu", "Mu"),
    Species.PION: SpeciesInfo(211, 0.13957039, "#pi", "Pi"),
    Species.KAON: SpeciesInfo(321, 0.493677, "K", "Ka"),
    Species.PROTON: SpeciesInfo(2212, 0.93827208816, "p", "Pr"),
    Species.DEUTERON: SpeciesInfo(1000010020, 1.87561294257, "d", "De"),
    Species.TRITON: SpeciesInfo(1000010030, 2.80892113298, "t", "Tr"),
    Species.HELIUM3: SpeciesInfo(1000020030, 2.80839160743, "^{3}He", "He"),
    Species.ALPHA: SpeciesInfo(1000020040, 3.7273794066, "#alpha", "Al"),
}

# Species whose nσ values are stored per track in the derived tables.
RECORDED_SPECIES = (
    Species.PION,
    Species.KAON,
    Species.PROTON,
    Species.ELECTRON,
    Species.MUON,
)
