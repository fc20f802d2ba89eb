"""
Collins-Soper frame angles.

The polar axis bisects the directions of the two beams in the rest frame
of the decaying system; the y axis is normal to the beam plane. Angles are
those of the first pair's momentum in that frame.
"""
import math

from domain.config import BeamConfig
from services.calculations.four_vector import FourVector

Vector3 = tuple[float, float, float]

_NAN3 = (math.nan, math.nan, math.nan)


def beam_four_vectors(beam: BeamConfig) -> tuple[FourVector, FourVector]:
    """Projectile moving towards -z and target moving towards +z."""
    p_beam = beam.beam_momentum
    energy = beam.beam_energy
    projectile = FourVector(0.0, 0.0, -p_beam, energy)
    target = FourVector(0.0, 0.0, p_beam, energy)
    return projectile, target


def _norm(v: Vector3) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def _unit(v: Vector3) -> Vector3:
    norm = _norm(v)
    if norm == 0.0 or math.isnan(norm):
        return _NAN3
    return (v[0] / norm, v[1] / norm, v[2] / norm)


def _sub(a: Vector3, b: Vector3) -> Vector3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _dot(a: Vector3, b: Vector3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _cross(a: Vector3, b: Vector3) -> Vector3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _frame(pair_a: FourVector, system: FourVector, beam: BeamConfig):
    projectile, target = beam_four_vectors(beam)
    direction = _unit(pair_a.boost_to_rest_frame_of(system).momentum)
    beam_1 = _unit(projectile.boost_to_rest_frame_of(system).momentum)
    beam_2 = _unit(target.boost_to_rest_frame_of(system).momentum)

    z_axis = _unit(_sub(beam_1, beam_2))
    y_axis = _unit(_cross(beam_1, beam_2))
    x_axis = _unit(_cross(y_axis, z_axis))
    return direction, x_axis, y_axis, z_axis


def cs_angles(
    pair_a: FourVector,
    pair_b: FourVector,
    system: FourVector,
    beam: BeamConfig
) -> tuple[float, float]:
    """
    Collins-Soper (phi, cos theta) of `pair_a` in the rest frame of `system`.

    `pair_b` is the recoiling pair; it only fixes the decay topology and
    does not enter the angles.

    Degenerate geometries give NaN rather than raising: a pair at rest in
    the system frame yields NaN for both angles, and a system without
    transverse momentum leaves the beams collinear so phi is NaN while
    cos theta is still defined.
    """
    direction, x_axis, y_axis, z_axis = _frame(pair_a, system, beam)
    cos_theta = _dot(z_axis, direction)
    phi = math.atan2(_dot(y_axis, direction), _dot(x_axis, direction))
    return phi, cos_theta


def cos_theta_cs(pair_a: FourVector, pair_b: FourVector, system: FourVector, beam: BeamConfig) -> float:
    return cs_angles(pair_a, pair_b, system, beam)[1]


def phi_cs(pair_a: FourVector, pair_b: FourVector, system: FourVector, beam: BeamConfig) -> float:
    return cs_angles(pair_a, pair_b, system, beam)[0]
