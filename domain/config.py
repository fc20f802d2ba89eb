"""
Configuration domain models.

Validated, immutable configuration objects for the analysis. Built once
from the YAML configuration and shared read-only by every component.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum

from .events import GapSide
from .species import Species


class TofPolicy(Enum):
    """What to do with the TOF requirement when a track has no TOF match."""

    TPC_FALLBACK = "tpc_fallback"
    REQUIRE_TOF = "require_tof"


class PdgSignMode(Enum):
    """Which charge states of a PDG code are matched."""

    ANY = 0
    PARTICLE = 1
    ANTIPARTICLE = 2


@dataclass(frozen=True)
class TrackCuts:
    """Track quality and kinematic cuts. All comparisons are strict."""

    require_pv_contributor: bool = True
    dca_z_max: float = 2.0
    dca_xy_max: float = 0.0  # 0 selects the pT-dependent cut
    tpc_chi2_ncl_max: float = 4.0
    tpc_ncls_findable_min: float = 70.0
    its_chi2_ncl_max: float = 36.0
    eta_max: float = 0.9
    pt_min: float = 0.15

    def __post_init__(self):
        """Validate track cuts."""
        if self.dca_z_max <= 0:
            raise ValueError(f"dca_z_max must be positive, got {self.dca_z_max}")
        if self.dca_xy_max < 0:
            raise ValueError(f"dca_xy_max must be non-negative, got {self.dca_xy_max}")
        if self.eta_max <= 0:
            raise ValueError(f"eta_max must be positive, got {self.eta_max}")
        if self.pt_min < 0:
            raise ValueError(f"pt_min must be non-negative, got {self.pt_min}")
        if self.tpc_ncls_findable_min < 0:
            raise ValueError(f"tpc_ncls_findable_min must be non-negative, got {self.tpc_ncls_findable_min}")


@dataclass(frozen=True)
class PIDCuts:
    """nσ cuts and species configuration for the PID classifier."""

    n_sigma_tpc_max: float = 3.0
    n_sigma_tof_max: float = 3.0
    use_tof: bool = True
    tof_policy: TofPolicy = TofPolicy.TPC_FALLBACK
    signal_species: Species = Species.PION
    enabled_species: tuple[Species, ...] = (Species.PION,)
    pdg_sign: PdgSignMode = PdgSignMode.ANY
    check_primaries: bool = True

    def __post_init__(self):
        """Validate PID cuts."""
        if self.n_sigma_tpc_max <= 0:
            raise ValueError(f"n_sigma_tpc_max must be positive, got {self.n_sigma_tpc_max}")
        if self.n_sigma_tof_max <= 0:
            raise ValueError(f"n_sigma_tof_max must be positive, got {self.n_sigma_tof_max}")

    def is_enabled(self, species: Species) -> bool:
        return species in self.enabled_species


@dataclass(frozen=True)
class EventCuts:
    """Vertex and forward-detector (gap topology) cuts."""

    vertex_z_max: float = 10.0
    required_contributors: int = 4
    fv0a_max: float = 50.0
    ft0a_max: float = 150.0
    ft0c_max: float = 50.0
    zdc_max: float = 1.0
    required_gap: GapSide = GapSide.DOUBLE
    rapidity_max: float = 0.5
    domain_a_pt_max: float = 0.15
    domain_c_pt_min: float = 0.80
    tof_qa_eta_min: float = -0.8
    tof_qa_eta_max: float = 0.8

    def __post_init__(self):
        """Validate event cuts."""
        if self.vertex_z_max <= 0:
            raise ValueError(f"vertex_z_max must be positive, got {self.vertex_z_max}")
        if self.required_contributors < 0:
            raise ValueError(f"required_contributors must be non-negative, got {self.required_contributors}")
        if self.domain_a_pt_max >= self.domain_c_pt_min:
            raise ValueError(
                f"domain_a_pt_max ({self.domain_a_pt_max}) must be below "
                f"domain_c_pt_min ({self.domain_c_pt_min})"
            )
        if self.tof_qa_eta_min >= self.tof_qa_eta_max:
            raise ValueError("tof_qa_eta_min must be below tof_qa_eta_max")


@dataclass(frozen=True)
class BeamConfig:
    """
    Colliding-beam kinematics for the Collins-Soper frame.

    Defaults are Pb-208 beams at 5.36 TeV per nucleon pair.
    """

    energy_per_nucleon: float = 2680.0  # GeV
    mass_number: int = 208
    nucleus_mass: float = 193.6823  # GeV/c^2

    def __post_init__(self):
        """Validate beam configuration."""
        if self.mass_number <= 0:
            raise ValueError(f"mass_number must be positive, got {self.mass_number}")
        if self.energy_per_nucleon <= 0:
            raise ValueError(f"energy_per_nucleon must be positive, got {self.energy_per_nucleon}")
        if self.beam_energy ** 2 - self.nucleus_mass ** 2 < 0:
            raise ValueError(
                f"beam energy ({self.beam_energy} GeV) is below the nucleus mass "
                f"({self.nucleus_mass} GeV): beam momentum is undefined"
            )

    @property
    def beam_energy(self) -> float:
        """Total energy of one beam nucleus."""
        return self.energy_per_nucleon * self.mass_number

    @property
    def beam_momentum(self) -> float:
        return math.sqrt(self.beam_energy ** 2 - self.nucleus_mass ** 2)


@dataclass(frozen=True)
class AxisBinning:
    """Regular binning of one histogram axis."""

    bins: int
    low: float
    high: float

    def __post_init__(self):
        if self.bins <= 0:
            raise ValueError(f"bins must be positive, got {self.bins}")
        if self.low >= self.high:
            raise ValueError(f"axis low ({self.low}) must be below high ({self.high})")

    @classmethod
    def from_value(cls, value) -> 'AxisBinning':
        if isinstance(value, AxisBinning):
            return value
        if isinstance(value, dict):
            return cls(bins=int(value["bins"]), low=float(value["low"]), high=float(value["high"]))
        bins, low, high = value
        return cls(bins=int(bins), low=float(low), high=float(high))


@dataclass(frozen=True)
class HistogramBinning:
    """Configurable histogram binning."""

    n_bins_pt: int = 1000
    n_bins_invariant_mass: int = 1000
    invariant_mass_min: float = 0.8
    invariant_mass_max: float = 2.5
    n_bins_rapidity: int = 1000
    n_bins_phi: int = 360
    n_bins_cos_theta: int = 360
    tof_pt: AxisBinning = AxisBinning(2000, 0.0, 20.0)
    tof_n_sigma: AxisBinning = AxisBinning(2000, -50.0, 50.0)
    tof_eta: AxisBinning = AxisBinning(100, -4.0, 4.0)

    def __post_init__(self):
        """Validate binning."""
        for name in ("n_bins_pt", "n_bins_invariant_mass", "n_bins_rapidity", "n_bins_phi", "n_bins_cos_theta"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.invariant_mass_min >= self.invariant_mass_max:
            raise ValueError(
                f"invariant_mass_min ({self.invariant_mass_min}) must be below "
                f"invariant_mass_max ({self.invariant_mass_max})"
            )


@dataclass(frozen=True)
class InputConfig:
    """Where and how events are read."""

    files: tuple[str, ...] = field(default_factory=tuple)
    tree_name: str = "UDEvents"
    step_size: int = 10_000
    threads: int = 1
    show_progress_bar: bool = True

    def __post_init__(self):
        if self.step_size <= 0:
            raise ValueError(f"step_size must be positive, got {self.step_size}")
        if self.threads <= 0:
            raise ValueError(f"threads must be positive, got {self.threads}")


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Complete analysis configuration.

    Immutable configuration object validated at creation.
    """

    track_cuts: TrackCuts = field(default_factory=TrackCuts)
    pid_cuts: PIDCuts = field(default_factory=PIDCuts)
    event_cuts: EventCuts = field(default_factory=EventCuts)
    beam: BeamConfig = field(default_factory=BeamConfig)
    binning: HistogramBinning = field(default_factory=HistogramBinning)
    input: InputConfig = field(default_factory=InputConfig)

    # Process switches
    do_data: bool = True
    do_fast: bool = False
    do_mc_gen: bool = False
    do_mc_reco: bool = False
    do_tof_qa: bool = False

    # Run metadata
    run_name: str = "rho4pi_run"
    output_filename: str = "analysis_results.root"
    make_plots: bool = True

    def __post_init__(self):
        """Validate analysis configuration."""
        if not any([self.do_data, self.do_fast, self.do_mc_gen, self.do_mc_reco, self.do_tof_qa]):
            raise ValueError("At least one process must be enabled")
        if not self.output_filename.endswith(".root"):
            raise ValueError(f"output_filename must be a .root file, got {self.output_filename}")

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'AnalysisConfig':
        """
        Create AnalysisConfig from a dictionary (e.g., loaded from YAML).

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Validated AnalysisConfig instance
        """
        track_dict = dict(config_dict.get("track_cuts", {}))
        track_cuts = TrackCuts(**track_dict)

        pid_dict = dict(config_dict.get("pid_cuts", {}))
        if "tof_policy" in pid_dict:
            pid_dict["tof_policy"] = TofPolicy(pid_dict["tof_policy"])
        if "signal_species" in pid_dict:
            pid_dict["signal_species"] = Species.from_short_name(pid_dict["signal_species"])
        if "enabled_species" in pid_dict:
            pid_dict["enabled_species"] = tuple(
                Species.from_short_name(name) for name in pid_dict["enabled_species"]
            )
        if "pdg_sign" in pid_dict:
            pid_dict["pdg_sign"] = PdgSignMode(int(pid_dict["pdg_sign"]))
        pid_cuts = PIDCuts(**pid_dict)

        event_dict = dict(config_dict.get("event_cuts", {}))
        if "required_gap" in event_dict:
            event_dict["required_gap"] = GapSide(int(event_dict["required_gap"]))
        event_cuts = EventCuts(**event_dict)

        beam = BeamConfig(**config_dict.get("beam", {}))

        binning_dict = dict(config_dict.get("binning", {}))
        for axis_name in ("tof_pt", "tof_n_sigma", "tof_eta"):
            if axis_name in binning_dict:
                binning_dict[axis_name] = AxisBinning.from_value(binning_dict[axis_name])
        binning = HistogramBinning(**binning_dict)

        input_dict = dict(config_dict.get("input", {}))
        input_config = InputConfig(
            files=tuple(input_dict.get("files", [])),
            tree_name=input_dict.get("tree_name", "UDEvents"),
            step_size=input_dict.get("step_size", 10_000),
            threads=input_dict.get("threads", 1),
            show_progress_bar=input_dict.get("show_progress_bar", True),
        )

        processes = config_dict.get("processes", {})
        run_metadata = config_dict.get("run_metadata", {})

        return cls(
            track_cuts=track_cuts,
            pid_cuts=pid_cuts,
            event_cuts=event_cuts,
            beam=beam,
            binning=binning,
            input=input_config,
            do_data=processes.get("do_data", True),
            do_fast=processes.get("do_fast", False),
            do_mc_gen=processes.get("do_mc_gen", False),
            do_mc_reco=processes.get("do_mc_reco", False),
            do_tof_qa=processes.get("do_tof_qa", False),
            run_name=run_metadata.get("run_name", "rho4pi_run"),
            output_filename=run_metadata.get("output_filename", "analysis_results.root"),
            make_plots=run_metadata.get("make_plots", True),
        )

    def with_input_files(self, files: list[str]) -> 'AnalysisConfig':
        """Return a copy reading from the given files."""
        return replace(self, input=replace(self.input, files=tuple(files)))
