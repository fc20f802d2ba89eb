"""
Kinematics: four-vectors, Collins-Soper angles and the columnar fast path.
"""

from .four_vector import FourVector
from .collins_soper import cs_angles, cos_theta_cs, phi_cs, beam_four_vectors

__all__ = [
    "FourVector",
    "cs_angles",
    "cos_theta_cs",
    "phi_cs",
    "beam_four_vectors",
]
