"""
Domain models for the exclusive four-pion analysis.

Pure data structures with validation, no business logic.
"""

from .species import Species, SpeciesInfo, SPECIES_TABLE, RECORDED_SPECIES
from .events import (
    Event,
    Track,
    McParticle,
    GapSide,
    Detector,
    ParticleOrigin,
    ProductionProcess,
)
from .records import (
    RecordKind,
    DerivedRecord,
    GeneratedRecord,
    FourBodyKinematics,
    TrackKinematics,
    CollinsSoperAngles,
)
from .statistics import SelectionStatistics, EventOutcome
from .config import (
    AnalysisConfig,
    TrackCuts,
    PIDCuts,
    EventCuts,
    BeamConfig,
    HistogramBinning,
    AxisBinning,
    InputConfig,
    TofPolicy,
    PdgSignMode,
)

__all__ = [
    "Species",
    "SpeciesInfo",
    "SPECIES_TABLE",
    "RECORDED_SPECIES",
    "Event",
    "Track",
    "McParticle",
    "GapSide",
    "Detector",
    "ParticleOrigin",
    "ProductionProcess",
    "RecordKind",
    "DerivedRecord",
    "GeneratedRecord",
    "FourBodyKinematics",
    "TrackKinematics",
    "CollinsSoperAngles",
    "SelectionStatistics",
    "EventOutcome",
    "AnalysisConfig",
    "TrackCuts",
    "PIDCuts",
    "EventCuts",
    "BeamConfig",
    "HistogramBinning",
    "AxisBinning",
    "InputConfig",
    "TofPolicy",
    "PdgSignMode",
]
