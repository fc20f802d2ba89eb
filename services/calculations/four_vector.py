"""
Four-vector algebra for single candidates.

Immutable (px, py, pz, E) Lorentz vectors with the derived kinematics used
by the event-level selection. Boundary values (collinear tracks, massless
or null vectors) return NaN / inf sentinels instead of raising.
"""
import math
from dataclasses import dataclass
from typing import Iterable

import vector


@dataclass(frozen=True)
class FourVector:
    px: float
    py: float
    pz: float
    e: float

    @classmethod
    def from_cartesian(cls, px: float, py: float, pz: float, mass: float) -> 'FourVector':
        """Build from 3-momentum and mass, E = sqrt(p^2 + m^2)."""
        energy = math.sqrt(px * px + py * py + pz * pz + mass * mass)
        return cls(px, py, pz, energy)

    @classmethod
    def from_pt_eta_phi_m(cls, pt: float, eta: float, phi: float, mass: float) -> 'FourVector':
        px = pt * math.cos(phi)
        py = pt * math.sin(phi)
        if math.isinf(eta):
            pz = math.copysign(math.inf, eta) if pt > 0 else 0.0
        else:
            pz = pt * math.sinh(eta)
        return cls.from_cartesian(px, py, pz, mass)

    @classmethod
    def from_vector(cls, vec) -> 'FourVector':
        return cls(float(vec.px), float(vec.py), float(vec.pz), float(vec.E))

    @classmethod
    def sum(cls, vectors: Iterable['FourVector']) -> 'FourVector':
        total = cls(0.0, 0.0, 0.0, 0.0)
        for vec in vectors:
            total = total + vec
        return total

    def add(self, other: 'FourVector') -> 'FourVector':
        return FourVector(
            self.px + other.px,
            self.py + other.py,
            self.pz + other.pz,
            self.e + other.e,
        )

    def __add__(self, other: 'FourVector') -> 'FourVector':
        if not isinstance(other, FourVector):
            return NotImplemented
        return self.add(other)

    @property
    def pt(self) -> float:
        return math.hypot(self.px, self.py)

    @property
    def p(self) -> float:
        return math.sqrt(self.px * self.px + self.py * self.py + self.pz * self.pz)

    @property
    def phi(self) -> float:
        """Azimuth in (-pi, pi]."""
        phi = math.atan2(self.py, self.px)
        return math.pi if phi == -math.pi else phi

    @property
    def eta(self) -> float:
        """
        Pseudorapidity.

        Returns +-inf along the beam axis (sign of pz) and 0 for the null
        vector.
        """
        pt = self.pt
        if pt == 0.0:
            return 0.0 if self.pz == 0.0 else math.copysign(math.inf, self.pz)
        return math.asinh(self.pz / pt)

    @property
    def rapidity(self) -> float:
        """
        Rapidity 0.5 * ln((E + pz) / (E - pz)).

        Returns +-inf when E == |pz| > 0, 0 when E == pz == 0 and NaN for
        unphysical vectors with E < |pz|.
        """
        if self.e == 0.0 and self.pz == 0.0:
            return 0.0
        if self.e < abs(self.pz):
            return math.nan
        if self.e == abs(self.pz):
            return math.copysign(math.inf, self.pz)
        return 0.5 * math.log((self.e + self.pz) / (self.e - self.pz))

    @property
    def mass(self) -> float:
        m2 = self.e * self.e - (self.px * self.px + self.py * self.py + self.pz * self.pz)
        return math.sqrt(max(m2, 0.0))

    @property
    def beta3(self) -> tuple[float, float, float]:
        """Velocity 3-vector p / E."""
        if self.e == 0.0:
            return (math.nan, math.nan, math.nan)
        return (self.px / self.e, self.py / self.e, self.pz / self.e)

    @property
    def momentum(self) -> tuple[float, float, float]:
        return (self.px, self.py, self.pz)

    def to_vector(self):
        return vector.obj(px=self.px, py=self.py, pz=self.pz, E=self.e)

    def boost_to_rest_frame_of(self, system: 'FourVector') -> 'FourVector':
        """Lorentz boost into the rest frame of `system`."""
        if system.e <= 0.0 or system.p >= system.e:
            return FourVector(math.nan, math.nan, math.nan, math.nan)
        if system.p == 0.0:
            return self
        boosted = self.to_vector().boostCM_of_p4(system.to_vector())
        return FourVector.from_vector(boosted)
