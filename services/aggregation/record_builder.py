"""
Builders turning selected four-track candidates into output records.
"""
from domain.config import BeamConfig
from domain.events import Detector, Event, Track
from domain.records import (
    CollinsSoperAngles,
    DerivedRecord,
    FourBodyKinematics,
    GeneratedRecord,
    RecordKind,
    TrackKinematics,
)
from domain.species import RECORDED_SPECIES
from services.calculations import consts
from services.calculations.collins_soper import cs_angles
from services.calculations.four_vector import FourVector
from services.selection.pid import n_sigma


def order_by_charge(tracks: list[Track]) -> list[Track]:
    """Positive tracks first, then negative, each in input order."""
    positives = [t for t in tracks if t.charge > 0]
    others = [t for t in tracks if t.charge <= 0]
    return positives + others


def pion_vectors(tracks: list[Track]) -> list[FourVector]:
    return [FourVector.from_cartesian(t.px, t.py, t.pz, consts.PION_MASS) for t in tracks]


def system_kinematics(system: FourVector) -> FourBodyKinematics:
    return FourBodyKinematics(
        pt=system.pt,
        eta=system.eta,
        phi=system.phi,
        rapidity=system.rapidity,
        mass=system.mass,
    )


def track_kinematics(vectors: list[FourVector]) -> TrackKinematics:
    return TrackKinematics(
        pt=tuple(v.pt for v in vectors),
        eta=tuple(v.eta for v in vectors),
        phi=tuple(v.phi for v in vectors),
        rapidity=tuple(v.rapidity for v in vectors),
    )


def pair_masses(vectors: list[FourVector]) -> tuple[float, ...]:
    """Masses of (1,3), (1,4), (2,3), (2,4) for vectors ordered (+, +, -, -)."""
    return tuple((vectors[i] + vectors[j]).mass for i, j in consts.PAIR_MASS_INDICES)


def collins_soper_angles(vectors: list[FourVector], beam: BeamConfig) -> CollinsSoperAngles:
    """CS angles of the first pair in each of the two neutral pairings."""
    system = FourVector.sum(vectors)
    angles = []
    for (a1, a2), (b1, b2) in consts.PAIRINGS:
        pair_a = vectors[a1] + vectors[a2]
        pair_b = vectors[b1] + vectors[b2]
        angles.append(cs_angles(pair_a, pair_b, system, beam))
    (phi_1, cos_1), (phi_2, cos_2) = angles
    return CollinsSoperAngles(
        phi_pair_1=phi_1,
        phi_pair_2=phi_2,
        cos_theta_pair_1=cos_1,
        cos_theta_pair_2=cos_2,
    )


def build_derived_record(
    event: Event,
    tracks: list[Track],
    kind: RecordKind,
    beam: BeamConfig
) -> DerivedRecord:
    """
    Flatten an event and its four selected tracks into a record.

    Tracks are reordered (+, +, -, -) before anything is computed. Collins-Soper
    angles are only computed for neutral candidates; background records carry
    NaN there.

    Background records are reordered too: the per-track columns of the
    bkgroundData tree list positive tracks first (stable within each charge),
    not the order in which the tracks passed the selection.
    """
    ordered = order_by_charge(tracks)
    vectors = pion_vectors(ordered)
    system = FourVector.sum(vectors)

    if kind is RecordKind.BACKGROUND:
        angles = CollinsSoperAngles()
    else:
        angles = collins_soper_angles(vectors, beam)

    return DerivedRecord(
        kind=kind,
        pos_x=event.pos_x,
        pos_y=event.pos_y,
        pos_z=event.pos_z,
        fv0a_amplitude=event.fv0a_amplitude,
        ft0a_amplitude=event.ft0a_amplitude,
        ft0c_amplitude=event.ft0c_amplitude,
        fdda_amplitude=event.fdda_amplitude,
        fddc_amplitude=event.fddc_amplitude,
        fv0a_time=event.fv0a_time,
        ft0a_time=event.ft0a_time,
        ft0c_time=event.ft0c_time,
        fdda_time=event.fdda_time,
        fddc_time=event.fddc_time,
        zna_time=event.zna_time,
        znc_time=event.znc_time,
        dca_xy=tuple(t.dca_xy for t in ordered),
        dca_z=tuple(t.dca_z for t in ordered),
        tpc_n_sigma={
            sp.short_name: tuple(n_sigma(t, sp, Detector.TPC) for t in ordered)
            for sp in RECORDED_SPECIES
        },
        tof_n_sigma={
            sp.short_name: tuple(n_sigma(t, sp, Detector.TOF) for t in ordered)
            for sp in RECORDED_SPECIES
        },
        tpc_chi2=tuple(t.tpc_chi2_ncl for t in ordered),
        tpc_ncls_findable=tuple(t.tpc_ncls_findable for t in ordered),
        its_chi2=tuple(t.its_chi2_ncl for t in ordered),
        tracks=track_kinematics(vectors),
        system=system_kinematics(system),
        pair_masses=pair_masses(vectors),
        angles=angles,
    )


def build_generated_record(vectors: list[FourVector], beam: BeamConfig) -> GeneratedRecord:
    """Record for four generated pions ordered (+, +, -, -)."""
    return GeneratedRecord(
        tracks=track_kinematics(vectors),
        system=system_kinematics(FourVector.sum(vectors)),
        pair_masses=pair_masses(vectors),
        angles=collins_soper_angles(vectors, beam),
    )
