"""
Tests for track, event and PID selection.
"""

import math

import pytest

from domain.config import EventCuts, PIDCuts, PdgSignMode, TofPolicy, TrackCuts
from domain.events import Detector, GapSide, McParticle, ParticleOrigin, ProductionProcess
from domain.species import Species
from services.selection.event_selector import (
    accept_contributors,
    accept_event,
    accept_vertex,
    accept_vertex_z,
    classify_gap,
)
from services.selection.pid import PIDClassifier, n_sigma, species_index
from services.selection.track_selector import accept_track, dca_xy_limit, failed_cuts
from services.selection.truth import classify_origin, has_mother, matches_pdg, true_species


class TestPIDClassifier:
    """Tests for the nσ-based PID classifier."""

    def test_tpc_only_track_with_fallback(self, make_track):
        """Test a track without TOF passes on TPC alone under TPC_FALLBACK."""
        classifier = PIDClassifier(PIDCuts(tof_policy=TofPolicy.TPC_FALLBACK))
        track = make_track(1, 0.5, 0.0, 0.0, has_tof=False)
        assert classifier.is_hypothesis(track, Species.PION) is True

    def test_tpc_only_track_requiring_tof(self, make_track):
        """Test a track without TOF fails under REQUIRE_TOF."""
        classifier = PIDClassifier(PIDCuts(tof_policy=TofPolicy.REQUIRE_TOF))
        track = make_track(1, 0.5, 0.0, 0.0, has_tof=False)
        assert classifier.is_hypothesis(track, Species.PION) is False

    def test_tof_response_outside_cut(self, make_track):
        """Test a TOF response beyond the cut rejects the hypothesis."""
        classifier = PIDClassifier(PIDCuts())
        track = make_track(1, 0.5, 0.0, 0.0, has_tof=True, tof_n_sigma={Species.PION: 4.5})
        assert classifier.is_hypothesis(track, Species.PION) is False

    def test_tof_response_inside_cut(self, make_track):
        """Test a TOF response within the cut keeps the hypothesis."""
        classifier = PIDClassifier(PIDCuts())
        track = make_track(1, 0.5, 0.0, 0.0, has_tof=True, tof_n_sigma={Species.PION: -1.0})
        assert classifier.is_hypothesis(track, Species.PION) is True

    def test_tof_ignored_when_disabled(self, make_track):
        """Test use_tof=False ignores a bad TOF response."""
        classifier = PIDClassifier(PIDCuts(use_tof=False))
        track = make_track(1, 0.5, 0.0, 0.0, has_tof=True, tof_n_sigma={Species.PION: 10.0})
        assert classifier.is_hypothesis(track, Species.PION) is True

    def test_cut_is_strict(self, make_track):
        """Test |nσ| equal to the cut is rejected."""
        classifier = PIDClassifier(PIDCuts(n_sigma_tpc_max=3.0))
        track = make_track(1, 0.5, 0.0, 0.0, tpc_n_sigma={Species.PION: -3.0})
        assert classifier.is_hypothesis(track, Species.PION) is False

    def test_missing_response_is_rejected(self, make_track):
        """Test a species without a stored response never passes."""
        classifier = PIDClassifier(PIDCuts())
        track = make_track(1, 0.5, 0.0, 0.0)
        assert math.isnan(n_sigma(track, Species.KAON, Detector.TPC))
        assert classifier.is_hypothesis(track, Species.KAON) is False

    def test_explicit_cut_overrides_config(self, make_track):
        """Test per-call cuts take precedence over the configured ones."""
        classifier = PIDClassifier(PIDCuts(n_sigma_tpc_max=3.0))
        track = make_track(1, 0.5, 0.0, 0.0, tpc_n_sigma={Species.PION: 2.0})
        assert classifier.is_hypothesis(track, Species.PION, n_sigma_tpc_cut=1.0) is False

    def test_hypotheses_are_not_exclusive(self, make_track):
        """Test a track can be compatible with several species."""
        cuts = PIDCuts(enabled_species=(Species.PION, Species.KAON, Species.PROTON))
        track = make_track(1, 0.5, 0.0, 0.0, tpc_n_sigma={Species.PION: 0.5, Species.KAON: 2.0, Species.PROTON: 8.0})
        assert PIDClassifier(cuts).hypotheses(track) == [Species.PION, Species.KAON]

    def test_disabled_species_never_reported(self, make_track):
        """Test species switched off in the config are skipped."""
        cuts = PIDCuts(enabled_species=(Species.KAON,))
        track = make_track(1, 0.5, 0.0, 0.0, tpc_n_sigma={Species.PION: 0.5, Species.KAON: 0.5})
        assert cuts.is_enabled(Species.KAON) and not cuts.is_enabled(Species.PION)
        assert PIDClassifier(cuts).hypotheses(track) == [Species.KAON]

    def test_species_index_follows_table_order(self):
        """Test the binning index is the position in the species table."""
        assert [species_index(s) for s in Species] == list(range(len(Species)))
        assert species_index(Species.ELECTRON) == 0
        assert species_index(Species.PION) == 2
        assert species_index(Species.ALPHA) == 8


class TestTrackSelector:
    """Tests for the track quality cuts."""

    def test_good_track_passes(self, make_track):
        """Test a track inside every cut is accepted."""
        assert accept_track(make_track(1, 0.5, 0.1, 0.2), TrackCuts()) is True

    def test_pt_cut_is_strict(self, make_track):
        """Test a track exactly at pt_min is rejected."""
        assert failed_cuts(make_track(1, 0.15, 0.0, 0.0), TrackCuts(pt_min=0.15)) == ["pt"]

    def test_forward_track_fails_eta(self, make_track):
        """Test a track outside the eta acceptance is rejected."""
        assert "eta" in failed_cuts(make_track(1, 0.3, 0.0, 2.0), TrackCuts())

    def test_eta_just_inside_acceptance(self, make_track):
        """Test a track at |eta| = eta_max - 1e-9 is accepted."""
        eta = 0.9 - 1e-9
        track = make_track(1, 0.5, 0.0, -0.5 * math.sinh(eta))
        assert track.eta == pytest.approx(-eta, abs=1e-14)
        assert accept_track(track, TrackCuts(eta_max=0.9)) is True

    def test_eta_cut_is_strict(self, make_track):
        """Test a track exactly at eta_max is rejected."""
        track = make_track(1, 0.5, 0.0, 0.5 * math.sinh(0.9))
        assert failed_cuts(track, TrackCuts(eta_max=abs(track.eta))) == ["eta"]

    def test_pt_dependent_dca_xy(self, make_track):
        """Test the parametrised DCAxy limit when the configured value is 0."""
        track = make_track(1, 1.0, 0.0, 0.0)
        assert dca_xy_limit(track, TrackCuts(dca_xy_max=0.0)) == pytest.approx(0.0105 + 0.035)

    def test_fixed_dca_xy(self, make_track):
        """Test a positive dca_xy_max replaces the parametrisation."""
        track = make_track(1, 1.0, 0.0, 0.0, dca_xy=0.05)
        assert dca_xy_limit(track, TrackCuts(dca_xy_max=0.2)) == 0.2
        assert accept_track(track, TrackCuts(dca_xy_max=0.2)) is True
        assert "dca_xy" in failed_cuts(track, TrackCuts(dca_xy_max=0.0))

    def test_pv_contributor_required(self, make_track):
        """Test non-contributors fail only when contribution is required."""
        track = make_track(1, 0.5, 0.0, 0.0, is_pv_contributor=False)
        assert failed_cuts(track, TrackCuts()) == ["pv_contributor"]
        assert accept_track(track, TrackCuts(require_pv_contributor=False)) is True

    def test_reports_every_failed_cut(self, make_track):
        """Test failed_cuts lists all failures, not only the first."""
        track = make_track(1, 0.5, 0.0, 0.0, tpc_chi2_ncl=9.0, tpc_ncls_findable=10.0, its_chi2_ncl=50.0)
        assert failed_cuts(track, TrackCuts()) == ["tpc_chi2_ncl", "tpc_ncls_findable", "its_chi2_ncl"]


class TestEventSelector:
    """Tests for vertex and gap selection."""

    @pytest.mark.parametrize("amplitudes, expected", [
        ({}, GapSide.DOUBLE),
        ({"ft0a_amplitude": 200.0}, GapSide.C),
        ({"zna_energy": 5.0}, GapSide.C),
        ({"ft0c_amplitude": 80.0}, GapSide.A),
        ({"fv0a_amplitude": 60.0, "znc_energy": 2.0}, GapSide.NONE),
    ])
    def test_gap_classification(self, make_event, amplitudes, expected):
        """Test the gap topology derived from forward-detector activity."""
        event = make_event([], **amplitudes)
        assert classify_gap(event, EventCuts()) is expected

    def test_reported_single_gap_confirmed(self, make_event):
        """Test a reported A gap with a quiet A side stays A."""
        event = make_event([], gap_side=GapSide.A, ft0c_amplitude=500.0)
        assert classify_gap(event, EventCuts()) is GapSide.A

    def test_reported_single_gap_vetoed(self, make_event):
        """Test a reported C gap with an active C side becomes NONE."""
        event = make_event([], gap_side=GapSide.C, ft0c_amplitude=500.0)
        assert classify_gap(event, EventCuts()) is GapSide.NONE

    def test_accept_event_uses_required_gap(self, make_event):
        """Test accept_event compares against the configured gap."""
        event = make_event([], ft0a_amplitude=200.0)
        assert accept_event(event, EventCuts(required_gap=GapSide.DOUBLE)) is False
        assert accept_event(event, EventCuts(required_gap=GapSide.C)) is True

    def test_vertex_z_is_strict(self, make_event):
        """Test |z| equal to the cut is rejected."""
        cuts = EventCuts(vertex_z_max=10.0)
        assert accept_vertex_z(make_event([], pos_z=-10.0), cuts) is False
        assert accept_vertex_z(make_event([], pos_z=9.99), cuts) is True

    def test_contributors_must_match(self, make_event):
        """Test the contributor count must equal the requirement."""
        cuts = EventCuts(required_contributors=4)
        assert accept_contributors(make_event([], num_contributors=5), cuts) is False
        assert accept_vertex(make_event([], num_contributors=4), cuts) is True


class TestTruth:
    """Tests for generator-truth helpers."""

    def test_origin_classification(self):
        """Test primary, weak-decay and material origins."""
        primary = McParticle(211, 0.1, 0.0, 0.0, is_physical_primary=True)
        decay = McParticle(211, 0.1, 0.0, 0.0, is_physical_primary=False, process=ProductionProcess.DECAY)
        material = McParticle(211, 0.1, 0.0, 0.0, is_physical_primary=False, process=20)
        assert classify_origin(primary) is ParticleOrigin.PRIMARY
        assert classify_origin(decay) is ParticleOrigin.SECONDARY_WEAK_DECAY
        assert classify_origin(material) is ParticleOrigin.SECONDARY_MATERIAL

    def test_pdg_sign_modes(self):
        """Test particle, antiparticle and sign-blind matching."""
        pi_minus = McParticle(-211, 0.1, 0.0, 0.0)
        assert matches_pdg(pi_minus, Species.PION, PdgSignMode.ANY) is True
        assert matches_pdg(pi_minus, Species.PION, PdgSignMode.PARTICLE) is False
        assert matches_pdg(pi_minus, Species.PION, PdgSignMode.ANTIPARTICLE) is True
        assert matches_pdg(pi_minus, Species.KAON) is False

    def test_mother_lookup(self, signal_particles):
        """Test rho' daughters report their mother."""
        assert has_mother(signal_particles[0], 30113) is True
        assert has_mother(signal_particles[0], 113) is False

    def test_true_species(self):
        """Test species lookup from a PDG code, None when unknown."""
        assert true_species(McParticle(-2212, 0.0, 0.0, 1.0)) is Species.PROTON
        assert true_species(McParticle(22, 0.0, 0.0, 1.0)) is None
