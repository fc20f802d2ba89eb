"""
EventReader service - Single responsibility: read event trees.

Reads ultra-peripheral event trees with uproot and turns each entry into
an immutable Event. No selection logic.
"""

import logging
from typing import Iterator, Optional

import awkward as ak
import uproot

from domain.events import Event, GapSide, McParticle, Track
from domain.species import Species
from services.parsing import schemas


class EventReader:
    """
    Service for reading event trees from ROOT files.

    Stateless apart from the read settings.
    """

    def __init__(self, tree_names: Optional[list[str]] = None, step_size: int = 10_000):
        self.tree_names = tree_names or list(schemas.DEFAULT_TREE_NAMES)
        self.step_size = step_size
        self.logger = logging.getLogger(self.__class__.__name__)

    def read_file(self, file_path: str) -> Optional[list[Event]]:
        """
        Read every event of a file.

        Returns:
            List of events, or None if the file could not be read
        """
        try:
            return list(self.iter_events(file_path))
        except Exception as e:
            logging.warning(f"Failed to read file {file_path}: {e}")
            return None

    def read_arrays(self, file_path: str) -> Optional[ak.Array]:
        """Read the raw branches of a file as one awkward array, or None on failure."""
        try:
            batches = list(self.iter_arrays(file_path))
        except Exception as e:
            logging.warning(f"Failed to read file {file_path}: {e}")
            return None
        if not batches:
            return None
        return ak.concatenate(batches)

    def iter_arrays(self, file_path: str) -> Iterator[ak.Array]:
        with uproot.open(file_path) as root_file:
            tree = root_file[self._get_tree_name(root_file.keys())]
            tree_branches = set(tree.keys())

            missing = schemas.missing_required(tree_branches)
            if missing:
                raise KeyError(f"Tree '{tree.name}' lacks required branches: {missing}")

            branches = schemas.select_available(tree_branches)
            self.logger.debug(f"Reading {len(branches)} branches from {file_path}")
            for batch in tree.iterate(branches, step_size=self.step_size, library="ak"):
                yield batch

    def iter_events(self, file_path: str) -> Iterator[Event]:
        for batch in self.iter_arrays(file_path):
            for row in ak.to_list(batch):
                yield event_from_row(row)

    def _get_tree_name(self, root_file_keys: list[str]) -> str:
        available_trees = [key.split(";")[0] for key in root_file_keys]
        for tree_name in self.tree_names:
            if tree_name in available_trees:
                return tree_name
        raise KeyError(f"None of the trees {self.tree_names} found, file has {available_trees}")


def _n_sigma_map(row: dict, detector: str, index: int) -> dict[Species, float]:
    responses = {}
    for species in Species:
        branch = schemas.track_branch(schemas.n_sigma_branch(detector, species))
        if branch in row:
            responses[species] = float(row[branch][index])
    return responses


def particles_from_row(row: dict) -> list[McParticle]:
    """Generator particles of one entry; empty for real data."""
    pdg_branch = schemas.mc_branch("pdgCode")
    if pdg_branch not in row:
        return []

    mother_branch = schemas.mc_branch(schemas.MC_MOTHER_PDG_BRANCH)
    particles = []
    for i in range(len(row[pdg_branch])):
        fields = {
            field: row[schemas.mc_branch(branch)][i]
            for branch, field in schemas.MC_BRANCHES.items()
            if schemas.mc_branch(branch) in row
        }
        mother = row[mother_branch][i] if mother_branch in row else 0
        particles.append(McParticle(
            pdg_code=int(fields["pdg_code"]),
            px=float(fields.get("px", 0.0)),
            py=float(fields.get("py", 0.0)),
            pz=float(fields.get("pz", 0.0)),
            is_physical_primary=bool(fields.get("is_physical_primary", True)),
            process=int(fields.get("process", 0)),
            mother_pdg_codes=(int(mother),) if mother else (),
        ))
    return particles


def tracks_from_row(row: dict, particles: list[McParticle]) -> list[Track]:
    n_tracks = len(row[schemas.track_branch("px")])
    mc_index_branch = schemas.track_branch(schemas.TRACK_MC_INDEX_BRANCH)

    tracks = []
    for i in range(n_tracks):
        fields = {
            field: row[schemas.track_branch(suffix)][i]
            for suffix, field in schemas.TRACK_BRANCHES.items()
            if schemas.track_branch(suffix) in row
        }
        fields["charge"] = int(fields["charge"])
        for flag in ("is_pv_contributor", "has_tof"):
            if flag in fields:
                fields[flag] = bool(fields[flag])

        mc_particle = None
        if mc_index_branch in row:
            mc_index = int(row[mc_index_branch][i])
            if 0 <= mc_index < len(particles):
                mc_particle = particles[mc_index]

        tracks.append(Track(
            **fields,
            tpc_n_sigma=_n_sigma_map(row, "tpc", i),
            tof_n_sigma=_n_sigma_map(row, "tof", i),
            mc_particle=mc_particle,
        ))
    return tracks


def event_from_row(row: dict) -> Event:
    """Build an Event from one entry converted with ak.to_list."""
    fields = {
        field: row[branch]
        for branch, field in schemas.EVENT_BRANCHES.items()
        if branch in row
    }
    fields["num_contributors"] = int(fields["num_contributors"])

    particles = particles_from_row(row)
    gap_code = row.get(schemas.GAP_SIDE_BRANCH)

    return Event(
        **fields,
        tracks=tuple(tracks_from_row(row, particles)),
        gap_side=GapSide.from_code(gap_code),
        has_mc_collision=bool(row.get(schemas.HAS_MC_COLLISION_BRANCH, False)),
        mc_particles=tuple(particles),
    )
