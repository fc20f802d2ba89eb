"""
Monte Carlo truth helpers.

Origin classification of reconstructed tracks and PDG matching for the
generator-level selection.
"""
from domain.config import PdgSignMode
from domain.events import McParticle, ParticleOrigin, ProductionProcess
from domain.species import Species


def classify_origin(particle: McParticle) -> ParticleOrigin:
    if particle.is_physical_primary:
        return ParticleOrigin.PRIMARY
    if particle.process == ProductionProcess.DECAY:
        return ParticleOrigin.SECONDARY_WEAK_DECAY
    return ParticleOrigin.SECONDARY_MATERIAL


def matches_pdg(particle: McParticle, species: Species, mode: PdgSignMode = PdgSignMode.ANY) -> bool:
    """Whether the particle is `species`, honouring the particle/antiparticle mode."""
    pdg = species.pdg_code
    if mode is PdgSignMode.PARTICLE:
        return particle.pdg_code == pdg
    if mode is PdgSignMode.ANTIPARTICLE:
        return particle.pdg_code == -pdg
    return abs(particle.pdg_code) == pdg


def has_mother(particle: McParticle, mother_pdg: int) -> bool:
    return mother_pdg in particle.mother_pdg_codes


def true_species(particle: McParticle):
    """Species of the particle, or None for anything outside the species table."""
    try:
        return Species.from_pdg(particle.pdg_code)
    except ValueError:
        return None
