"""
Tests for the four-vector algebra.
"""

import math

import pytest

from services.calculations import consts
from services.calculations.four_vector import FourVector


def _approx_equal(a: FourVector, b: FourVector):
    assert a.px == pytest.approx(b.px)
    assert a.py == pytest.approx(b.py)
    assert a.pz == pytest.approx(b.pz)
    assert a.e == pytest.approx(b.e)


class TestFourVectorConstruction:
    """Tests for FourVector constructors."""

    def test_energy_from_mass(self):
        """Test E = sqrt(p^2 + m^2)."""
        vec = FourVector.from_cartesian(0.3, 0.4, 0.0, 1.2)
        assert vec.e == pytest.approx(math.sqrt(0.25 + 1.44))
        assert vec.mass == pytest.approx(1.2)

    def test_pt_eta_phi_round_trip(self):
        """Test cylindrical construction reproduces its inputs."""
        vec = FourVector.from_pt_eta_phi_m(0.7, -0.4, 2.1, consts.PION_MASS)
        assert vec.pt == pytest.approx(0.7)
        assert vec.eta == pytest.approx(-0.4)
        assert vec.phi == pytest.approx(2.1)
        assert vec.mass == pytest.approx(consts.PION_MASS)

    def test_from_vector(self):
        """Test conversion back from a vector object."""
        vec = FourVector.from_cartesian(0.1, -0.2, 0.3, consts.PION_MASS)
        _approx_equal(FourVector.from_vector(vec.to_vector()), vec)


class TestFourVectorAddition:
    """Tests for four-vector addition."""

    def test_add_is_componentwise(self):
        """Test addition sums every component."""
        total = FourVector(1.0, 2.0, 3.0, 10.0) + FourVector(-0.5, 0.5, 1.0, 2.0)
        assert total == FourVector(0.5, 2.5, 4.0, 12.0)

    def test_add_commutative(self):
        """Test a + b == b + a."""
        a = FourVector.from_cartesian(0.4, 0.1, -0.3, consts.PION_MASS)
        b = FourVector.from_cartesian(-0.2, 0.6, 0.5, consts.PION_MASS)
        _approx_equal(a + b, b + a)

    def test_add_associative(self):
        """Test (a + b) + c == a + (b + c)."""
        a = FourVector.from_cartesian(0.4, 0.1, -0.3, consts.PION_MASS)
        b = FourVector.from_cartesian(-0.2, 0.6, 0.5, consts.PION_MASS)
        c = FourVector.from_cartesian(0.05, -0.7, 0.2, consts.PION_MASS)
        _approx_equal((a + b) + c, a + (b + c))

    def test_sum_of_empty_is_null(self):
        """Test that summing nothing gives the null vector."""
        assert FourVector.sum([]) == FourVector(0.0, 0.0, 0.0, 0.0)

    def test_add_rejects_other_types(self):
        """Test that adding a non-vector raises TypeError."""
        with pytest.raises(TypeError):
            FourVector(1.0, 0.0, 0.0, 1.0) + 1.0


class TestFourVectorKinematics:
    """Tests for derived kinematics and their sentinels."""

    def test_four_pions_at_rest(self):
        """Test four pions at rest combine into a system of mass 4 m_pi at rest."""
        pion = FourVector.from_cartesian(0.0, 0.0, 0.0, consts.PION_MASS)
        system = FourVector.sum([pion] * 4)
        assert system.mass == pytest.approx(4 * consts.PION_MASS)
        assert system.pt == 0.0
        assert system.rapidity == 0.0
        assert system.eta == 0.0

    def test_rapidity_along_light_cone(self):
        """Test E == |pz| > 0 gives signed infinity."""
        assert FourVector(0.0, 0.0, 1.0, 1.0).rapidity == math.inf
        assert FourVector(0.0, 0.0, -1.0, 1.0).rapidity == -math.inf

    def test_rapidity_of_null_vector(self):
        """Test E == pz == 0 gives 0."""
        assert FourVector(0.0, 0.0, 0.0, 0.0).rapidity == 0.0

    def test_rapidity_unphysical_is_nan(self):
        """Test E < |pz| gives NaN, which fails a rapidity window."""
        rapidity = FourVector(0.0, 0.0, 2.0, 1.0).rapidity
        assert math.isnan(rapidity)
        assert not abs(rapidity) < 0.5

    def test_eta_along_beam(self):
        """Test pseudorapidity on the beam axis is signed infinity."""
        assert FourVector(0.0, 0.0, 3.0, 4.0).eta == math.inf
        assert FourVector(0.0, 0.0, -3.0, 4.0).eta == -math.inf

    def test_phi_range(self):
        """Test phi of the negative x axis is +pi, never -pi."""
        assert FourVector(-1.0, -0.0, 0.0, 2.0).phi == math.pi
        assert FourVector(0.0, -1.0, 0.0, 2.0).phi == pytest.approx(-math.pi / 2)

    def test_mass_clamped_for_spacelike(self):
        """Test negative m^2 from rounding clamps to zero."""
        assert FourVector(1.0, 0.0, 0.0, 0.999999).mass == 0.0

    def test_beta3(self):
        """Test the velocity is p / E and undefined for zero energy."""
        assert FourVector(0.3, -0.6, 1.2, 2.0).beta3 == pytest.approx((0.15, -0.3, 0.6))
        assert all(math.isnan(b) for b in FourVector(0.0, 0.0, 0.0, 0.0).beta3)


class TestBoost:
    """Tests for the rest-frame boost."""

    def test_boost_into_own_rest_frame(self):
        """Test a system boosted into its own rest frame is at rest."""
        system = FourVector.from_cartesian(0.3, -0.2, 0.8, 1.5)
        boosted = system.boost_to_rest_frame_of(system)
        assert boosted.p == pytest.approx(0.0, abs=1e-9)
        assert boosted.e == pytest.approx(1.5)

    def test_boost_into_rest_frame_at_rest_is_identity(self):
        """Test boosting into a system at rest leaves vectors unchanged."""
        system = FourVector(0.0, 0.0, 0.0, 2.0)
        vec = FourVector.from_cartesian(0.1, 0.2, 0.3, consts.PION_MASS)
        _approx_equal(vec.boost_to_rest_frame_of(system), vec)

    def test_boost_into_lightlike_system_is_nan(self):
        """Test that a massless system has no rest frame."""
        vec = FourVector.from_cartesian(0.1, 0.2, 0.3, consts.PION_MASS)
        boosted = vec.boost_to_rest_frame_of(FourVector(0.0, 0.0, 1.0, 1.0))
        assert math.isnan(boosted.e)
