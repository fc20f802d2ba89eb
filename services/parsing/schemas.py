"""
Branch layout of the ultra-peripheral event trees.

Each tree holds one entry per collision: scalar event branches, jagged
track branches (prefix "track_") and, for simulated samples, jagged
generator-particle branches (prefix "mc_").
"""
from domain.species import Species

DEFAULT_TREE_NAMES = ["UDEvents", "O2udcollision", "events"]

# Event branch -> Event field
EVENT_BRANCHES = {
    "posX": "pos_x",
    "posY": "pos_y",
    "posZ": "pos_z",
    "numContrib": "num_contributors",
    "totalFV0AmplitudeA": "fv0a_amplitude",
    "totalFT0AmplitudeA": "ft0a_amplitude",
    "totalFT0AmplitudeC": "ft0c_amplitude",
    "totalFDDAmplitudeA": "fdda_amplitude",
    "totalFDDAmplitudeC": "fddc_amplitude",
    "timeFV0A": "fv0a_time",
    "timeFT0A": "ft0a_time",
    "timeFT0C": "ft0c_time",
    "timeFDDA": "fdda_time",
    "timeFDDC": "fddc_time",
    "timeZNA": "zna_time",
    "timeZNC": "znc_time",
    "energyCommonZNA": "zna_energy",
    "energyCommonZNC": "znc_energy",
}

# Required event branches; everything else defaults to 0
REQUIRED_EVENT_BRANCHES = ["posX", "posY", "posZ", "numContrib"]

GAP_SIDE_BRANCH = "gapSide"
HAS_MC_COLLISION_BRANCH = "hasMcCollision"

TRACK_PREFIX = "track_"

# Track branch suffix -> Track field
TRACK_BRANCHES = {
    "px": "px",
    "py": "py",
    "pz": "pz",
    "sign": "charge",
    "dcaXY": "dca_xy",
    "dcaZ": "dca_z",
    "tpcChi2NCl": "tpc_chi2_ncl",
    "tpcNClsFindable": "tpc_ncls_findable",
    "itsChi2NCl": "its_chi2_ncl",
    "isPVContributor": "is_pv_contributor",
    "hasTOF": "has_tof",
    "tpcSignal": "tpc_signal",
    "beta": "tof_beta",
}

REQUIRED_TRACK_BRANCHES = ["px", "py", "pz", "sign"]

TRACK_MC_INDEX_BRANCH = "mcIndex"

MC_PREFIX = "mc_"

# Generator particle branch suffix -> McParticle field
MC_BRANCHES = {
    "pdgCode": "pdg_code",
    "px": "px",
    "py": "py",
    "pz": "pz",
    "isPhysicalPrimary": "is_physical_primary",
    "process": "process",
}

MC_MOTHER_PDG_BRANCH = "motherPdg"


def n_sigma_branch(detector: str, species: Species) -> str:
    """e.g. n_sigma_branch("tpc", Species.PION) -> "tpcNSigmaPi"."""
    return f"{detector}NSigma{species.short_name}"


def track_branch(suffix: str) -> str:
    return f"{TRACK_PREFIX}{suffix}"


def mc_branch(suffix: str) -> str:
    return f"{MC_PREFIX}{suffix}"


def all_track_suffixes() -> list[str]:
    suffixes = list(TRACK_BRANCHES)
    for species in Species:
        suffixes.append(n_sigma_branch("tpc", species))
        suffixes.append(n_sigma_branch("tof", species))
    suffixes.append(TRACK_MC_INDEX_BRANCH)
    return suffixes


def select_available(tree_branches: set[str]) -> list[str]:
    """Every known branch present in the tree."""
    wanted = list(EVENT_BRANCHES) + [GAP_SIDE_BRANCH, HAS_MC_COLLISION_BRANCH]
    wanted += [track_branch(s) for s in all_track_suffixes()]
    wanted += [mc_branch(s) for s in list(MC_BRANCHES) + [MC_MOTHER_PDG_BRANCH]]
    return [branch for branch in wanted if branch in tree_branches]


def missing_required(tree_branches: set[str]) -> list[str]:
    required = REQUIRED_EVENT_BRANCHES + [track_branch(s) for s in REQUIRED_TRACK_BRANCHES]
    return [branch for branch in required if branch not in tree_branches]
