"""
Histogram booking for each analysis process.
"""
from domain.config import HistogramBinning
from domain.species import RECORDED_SPECIES, Species
from services.aggregation.histograms import HistogramRegistry

PT_TRACK_AXIS_MAX = 2.0
PT_NSIGMA_AXIS_MAX = 10.0
RAPIDITY_AXIS = (-2.5, 2.5)
N_SIGMA_AXIS = (300, -15.0, 15.0)
PHI_AXIS = (-3.2, 3.2)
COS_THETA_AXIS = (-1.0, 1.0)
PAIR_MASS_AXIS = (5000, 0.0, 5.0)
MOMENTUM_AXIS = (500, 0.0, 10.0)
TPC_SIGNAL_AXIS = (5000, 0.0, 5000.0)
BETA_AXIS = (500, 0.0, 1.0)
TOF_QA_BETA_AXIS = (1000, 0.0, 1.2)
GAP_SIDE_AXIS = (4, -1.5, 2.5)
COUNTS_AXIS = (10, 0.0, 10.0)

DOMAINS = ("domainA", "domainB", "domainC")
CHARGE_TAGS = ("0charge", "non0charge")


def _mass_axis(binning: HistogramBinning) -> tuple:
    return (binning.n_bins_invariant_mass, binning.invariant_mass_min, binning.invariant_mass_max)


def book_reconstruction(registry: HistogramRegistry, binning: HistogramBinning, signal: Species) -> None:
    """Event, track and candidate histograms of the reconstructed-event selection."""
    pid_tag = f"WTS_PID_{signal.short_name}"
    pt_nsigma = (binning.n_bins_pt, 0.0, PT_NSIGMA_AXIS_MAX)
    pt_track = (binning.n_bins_pt, 0.0, PT_TRACK_AXIS_MAX)
    rapidity = (binning.n_bins_rapidity, *RAPIDITY_AXIS)
    phi = (binning.n_bins_phi, *PHI_AXIS)
    cos_theta = (binning.n_bins_cos_theta, *COS_THETA_AXIS)
    mass = _mass_axis(binning)

    # Event level
    registry.add_1d("GapSide", "Gap Side; Events", GAP_SIDE_AXIS)
    registry.add_1d("TrueGapSide", "Gap Side; Events", GAP_SIDE_AXIS)
    registry.add_1d("EventCounts", "Total Events; Events", COUNTS_AXIS)
    registry.add_1d("vertexZ", "Vertex Z; Vertex Z [cm]; Counts", (1000, -20.0, 20.0))
    registry.add_1d("FT0A", "T0A amplitude", (2000, 0.0, 500.0))
    registry.add_1d("FT0C", "T0C amplitude", (2000, 0.0, 500.0))
    registry.add_1d("ZDC_A", "ZDC amplitude", (1000, 0.0, 15.0))
    registry.add_1d("ZDC_C", "ZDC amplitude", (1000, 0.0, 15.0))
    registry.add_1d("V0A", "V0A amplitude", (1000, 0.0, 100.0))

    # Track quality
    registry.add_1d("dcaXY", "dcaXY; dcaXY [cm]; Counts", (10000, -5.0, 5.0))
    registry.add_1d("dcaZ", "dcaZ; dcaZ [cm]; Counts", (10000, -10.0, 10.0))
    registry.add_1d("tpcChi2NCl", "TPC Chi2/NCl; Chi2/NCl; Counts", (200, 0.0, 200.0))
    registry.add_1d("itsChi2NCl", "ITS Chi2/NCl; Chi2/NCl; Counts", (200, 0.0, 200.0))
    registry.add_1d("tpcNClsFindable", "TPC N Cls Findable; N Cls Findable; Counts", (200, 0.0, 200.0))

    # PID responses per selection stage
    short = signal.short_name
    for detector in ("tpc", "tof"):
        for stage in ("WOTS", "WTS", pid_tag):
            registry.add_2d(
                f"{detector}NSigma{short}_{stage}",
                f"{detector.upper()} nSigma {short} {stage}",
                N_SIGMA_AXIS,
                pt_nsigma,
            )
        for species in RECORDED_SPECIES:
            if species is signal:
                continue
            registry.add_2d(
                f"{detector}NSigma{species.short_name}_{pid_tag}",
                f"{detector.upper()} nSigma {species.short_name} {pid_tag}",
                N_SIGMA_AXIS,
                pt_nsigma,
            )
    registry.add_2d("tpcSignal", "TPC dEdx vs p; p [GeV/c]; dEdx [a.u.]", MOMENTUM_AXIS, TPC_SIGNAL_AXIS)
    registry.add_2d(f"tpcSignal_{short}", "TPC dEdx vs p; p [GeV/c]; dEdx [a.u.]", MOMENTUM_AXIS, TPC_SIGNAL_AXIS)
    registry.add_2d("tofBeta", "TOF beta vs p; p [GeV/c]; #beta", MOMENTUM_AXIS, BETA_AXIS)
    registry.add_2d(f"tofBeta_{short}", "TOF beta vs p; p [GeV/c]; #beta", MOMENTUM_AXIS, BETA_AXIS)

    # Track kinematics per stage
    for stage in ("WOTS", "WTS", pid_tag, f"{pid_tag}_contributed"):
        registry.add_1d(f"pT_track_{stage}", f"pT {stage}; pT [GeV/c]; Counts", pt_track)
        registry.add_1d(f"rapidity_track_{stage}", f"Rapidity {stage}; y; Counts", rapidity)

    # Four-track candidates
    for charge in CHARGE_TAGS:
        registry.add_1d(f"pT_event_{charge}_{pid_tag}", f"Event pT {charge}; pT [GeV/c]; Events", pt_track)
        for domain in DOMAINS:
            registry.add_1d(f"rapidity_event_{charge}_{pid_tag}_{domain}", f"Rapidity {charge} {domain}; y; Events", rapidity)
            registry.add_1d(f"invMass_event_{charge}_{pid_tag}_{domain}", f"Invariant Mass {charge} {domain}; m [GeV/c^2]", mass)

    for i in range(1, 5):
        registry.add_1d(f"invMass_pair_{i}", f"Invariant Mass of pair {i}; m [GeV/c^2]", PAIR_MASS_AXIS)
    for i in (1, 2):
        registry.add_1d(f"CS_phi_pair_{i}", "#phi Distribution; #phi; Events", phi)
        registry.add_1d(f"CS_costheta_pair_{i}", "#theta Distribution; cos(#theta); Counts", cos_theta)
        registry.add_2d(f"phi_cosTheta_pair_{i}", "Phi vs cosTheta; #phi; cos(#theta)", phi, cos_theta)


def book_generated(registry: HistogramRegistry, binning: HistogramBinning) -> None:
    pt_wide = (binning.n_bins_pt, 0.0, 10.0)
    pt_event = (binning.n_bins_pt, 0.0, 2.0)
    rapidity = (binning.n_bins_rapidity, *RAPIDITY_AXIS)
    phi = (binning.n_bins_phi, *PHI_AXIS)
    cos_theta = (binning.n_bins_cos_theta, *COS_THETA_AXIS)

    registry.add_1d("rhoPrimeCounts", "Events with rho' daughters; Events", COUNTS_AXIS)
    registry.add_1d("MCgen_particle_pT", "Generated pT; pT [GeV/c]; Events", pt_wide)
    registry.add_1d("MCgen_particle_pT_contributed", "Generated pT; pT [GeV/c]; Events", pt_wide)
    registry.add_1d("MCgen_particle_rapidity", "Generated Rapidity; y; Events", rapidity)
    registry.add_1d("MCgen_particle_rapidity_contributed", "Generated Rapidity; y; Events", rapidity)
    for i in range(1, 5):
        registry.add_1d(f"MCgen_invMass_pair_{i}", f"Invariant Mass of pair {i}; m [GeV/c^2]", PAIR_MASS_AXIS)
    registry.add_1d("MCgen_4pion_pT", "Generated pT; pT [GeV/c]; Events", pt_event)
    registry.add_1d("MCgen_4pion_rapidity", "Generated Rapidity; y; Events", rapidity)
    registry.add_1d("MCgen_4pion_invmass", "Invariant Mass of 4-Pions; m(4-pion); Events", _mass_axis(binning))
    for i in (1, 2):
        registry.add_1d(f"MCgen_CS_phi_pair_{i}", "#phi Distribution; #phi; Events", phi)
        registry.add_1d(f"MCgen_CS_costheta_pair_{i}", "#theta Distribution; cos(#theta); Events", cos_theta)
        registry.add_2d(f"MCgen_phi_cosTheta_pair_{i}", "Phi vs cosTheta; #phi; cos(#theta)", phi, cos_theta)


def book_fast(registry: HistogramRegistry, binning: HistogramBinning) -> None:
    mass = _mass_axis(binning)
    registry.add_1d("4PionMassWithCut", "", mass)
    registry.add_1d("4PionMassFull", "", mass)
    registry.add_1d("4PionPt", "", (binning.n_bins_pt, 0.0, 10.0))
    registry.add_1d("4PionRapidity", "", (binning.n_bins_rapidity, -1.0, 1.0))


def book_tof_qa(registry: HistogramRegistry, binning: HistogramBinning, species: tuple[Species, ...]) -> None:
    """β vs p per truth origin and TOF nσ vs pT per species hypothesis."""
    registry.add_1d("event/vertexz", ";Vtx_{z} (cm);Entries", (100, -20.0, 20.0))
    registry.add_2d("event/tofbeta", "All", binning.tof_pt, TOF_QA_BETA_AXIS)
    registry.add_2d("event/tofbetaPrm", "Primaries", binning.tof_pt, TOF_QA_BETA_AXIS)
    registry.add_2d("event/tofbetaStr", "Secondaries from weak decays", binning.tof_pt, TOF_QA_BETA_AXIS)
    registry.add_2d("event/tofbetaMat", "Secondaries from material", binning.tof_pt, TOF_QA_BETA_AXIS)

    for prefix, title in (
        ("nsigma", ""),
        ("nsigmaprm", "Primary"),
        ("nsigmastr", "Secondary from decay"),
        ("nsigmamat", "Secondary from material"),
    ):
        registry.add_species_2d(prefix, species, title, binning.tof_pt, binning.tof_n_sigma)
    registry.add_species_2d("signalMC", species, "", binning.tof_pt, TOF_QA_BETA_AXIS)
    for sp in species:
        registry.add_1d(f"tracketa/{sp.short_name}", sp.info.label, binning.tof_eta)
