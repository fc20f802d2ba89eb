"""
Exclusive rho' -> 4 pion analysis.

Per-event core: event selection, track selection, pion identification,
candidate building and routing into histograms and record sinks. One
instance owns its registries, sinks and statistics; nothing is shared.
"""

import logging
import math
from typing import Optional

import awkward as ak
import numpy as np

from domain.config import AnalysisConfig
from domain.events import Detector, Event, McParticle, ParticleOrigin, Track
from domain.records import RecordKind
from domain.species import RECORDED_SPECIES
from domain.statistics import EventOutcome, SelectionStatistics
from services.aggregation import booking
from services.aggregation.histograms import HistogramRegistry
from services.aggregation.record_builder import build_derived_record, build_generated_record
from services.aggregation.sinks import RecordSink, RootTreeSink
from services.calculations import consts
from services.calculations.four_vector import FourVector
from services.calculations.physics_calcs import select_fast_candidates
from services.selection import event_selector, track_selector
from services.selection.pid import PIDClassifier, n_sigma
from services.selection.truth import classify_origin, has_mother, matches_pdg

ORIGIN_SUFFIX = {
    ParticleOrigin.PRIMARY: "prm",
    ParticleOrigin.SECONDARY_WEAK_DECAY: "str",
    ParticleOrigin.SECONDARY_MATERIAL: "mat",
}


def _finite(*values) -> bool:
    return not any(math.isnan(v) for v in values)


def _sink_or_tree(sink: Optional[RecordSink], kind: RecordKind) -> RecordSink:
    return RootTreeSink(kind.value) if sink is None else sink


class RhoTo4PiAnalysis:
    """
    Four-pion selection over reconstructed, generated and fast inputs.

    Registries are named after the process that fills them: histosData,
    histosMCreco, histosMCgen, histosFast and histosTOFQA.
    """

    def __init__(
        self,
        config: AnalysisConfig,
        signal_sink: Optional[RecordSink] = None,
        background_sink: Optional[RecordSink] = None,
        generated_sink: Optional[RecordSink] = None,
        mc_reco_sink: Optional[RecordSink] = None
    ):
        self.config = config
        self.pid = PIDClassifier(config.pid_cuts)
        self.signal_species = config.pid_cuts.signal_species
        self.pid_tag = f"WTS_PID_{self.signal_species.short_name}"
        self.logger = logging.getLogger(self.__class__.__name__)

        self.signal_sink = _sink_or_tree(signal_sink, RecordKind.SIGNAL)
        self.background_sink = _sink_or_tree(background_sink, RecordKind.BACKGROUND)
        self.generated_sink = _sink_or_tree(generated_sink, RecordKind.MC_GENERATED)
        self.mc_reco_sink = _sink_or_tree(mc_reco_sink, RecordKind.MC_RECONSTRUCTED)

        binning = config.binning
        self.histos_data = HistogramRegistry("histosData")
        self.histos_mc_reco = HistogramRegistry("histosMCreco")
        self.histos_mc_gen = HistogramRegistry("histosMCgen")
        self.histos_fast = HistogramRegistry("histosFast")
        self.histos_tof_qa = HistogramRegistry("histosTOFQA")
        # Only enabled processes get bookings
        if config.do_data:
            booking.book_reconstruction(self.histos_data, binning, self.signal_species)
        if config.do_mc_reco:
            booking.book_reconstruction(self.histos_mc_reco, binning, self.signal_species)
        if config.do_mc_gen:
            booking.book_generated(self.histos_mc_gen, binning)
        if config.do_fast:
            booking.book_fast(self.histos_fast, binning)
        if config.do_tof_qa:
            booking.book_tof_qa(self.histos_tof_qa, binning, config.pid_cuts.enabled_species)

        self.statistics = {
            "data": SelectionStatistics(),
            "mc_reco": SelectionStatistics(),
            "mc_gen": SelectionStatistics(),
            "fast": SelectionStatistics(),
        }

    @property
    def registries(self) -> list[HistogramRegistry]:
        """All registries, including empty ones of disabled processes."""
        return [
            self.histos_data,
            self.histos_mc_reco,
            self.histos_mc_gen,
            self.histos_fast,
            self.histos_tof_qa,
        ]

    @property
    def sinks(self) -> list[RecordSink]:
        return [self.signal_sink, self.background_sink, self.generated_sink, self.mc_reco_sink]

    # ------------------------------------------------------------------
    # Reconstructed events
    # ------------------------------------------------------------------

    def process_event(self, event: Event) -> EventOutcome:
        """Run the data selection on one event and route the candidate."""
        outcome = self._process_reconstructed(
            event,
            self.histos_data,
            self.signal_sink,
            self.background_sink,
            require_truth=False,
        )
        self.statistics["data"].record(outcome)
        return outcome

    def process_reconstructed_mc(self, event: Event) -> EventOutcome:
        """
        Data selection on simulated events.

        Requires a matched generator collision and tracks linked to a
        generator particle. Only neutral candidates are emitted.
        """
        outcome = self._process_reconstructed(
            event,
            self.histos_mc_reco,
            self.mc_reco_sink,
            None,
            require_truth=True,
        )
        self.statistics["mc_reco"].record(outcome)
        return outcome

    def _process_reconstructed(
        self,
        event: Event,
        histos: HistogramRegistry,
        signal_sink: RecordSink,
        background_sink: Optional[RecordSink],
        require_truth: bool
    ) -> EventOutcome:
        cuts = self.config.event_cuts

        if not event_selector.accept_vertex_z(event, cuts):
            return EventOutcome.REJECTED_VERTEX_Z
        if require_truth and not event.has_mc_collision:
            return EventOutcome.REJECTED_NO_MC_COLLISION

        true_gap = event_selector.classify_gap(event, cuts)
        if event.gap_side is not None:
            histos.fill("GapSide", int(event.gap_side))
        histos.fill("TrueGapSide", int(true_gap))
        histos.fill("EventCounts", 1)
        if true_gap is not cuts.required_gap:
            return EventOutcome.REJECTED_GAP

        histos.fill("vertexZ", event.pos_z)
        histos.fill("V0A", event.fv0a_amplitude)
        histos.fill("FT0A", event.ft0a_amplitude)
        histos.fill("FT0C", event.ft0c_amplitude)
        histos.fill("ZDC_A", event.zna_energy)
        histos.fill("ZDC_C", event.znc_energy)

        if not event_selector.accept_contributors(event, cuts):
            return EventOutcome.REJECTED_CONTRIBUTORS

        identified = self._select_tracks(event.tracks, histos, require_truth)
        if len(identified) != consts.N_PIONS:
            return EventOutcome.REJECTED_TRACK_COUNT

        n_positive = sum(1 for t in identified if t.charge > 0)
        n_negative = sum(1 for t in identified if t.charge < 0)

        if n_positive == 2 and n_negative == 2:
            record = build_derived_record(
                event,
                identified,
                RecordKind.MC_RECONSTRUCTED if require_truth else RecordKind.SIGNAL,
                self.config.beam,
            )
            signal_sink.write(record)
            for pt, rapidity in zip(record.tracks.pt, record.tracks.rapidity):
                histos.fill(f"pT_track_{self.pid_tag}_contributed", pt)
                histos.fill(f"rapidity_track_{self.pid_tag}_contributed", rapidity)
            self._fill_candidate(histos, record, "0charge")
            return EventOutcome.SIGNAL

        record = build_derived_record(event, identified, RecordKind.BACKGROUND, self.config.beam)
        if background_sink is not None:
            background_sink.write(record)
        self._fill_candidate(histos, record, "non0charge")
        return EventOutcome.BACKGROUND

    def _select_tracks(self, tracks: tuple[Track, ...], histos: HistogramRegistry, require_truth: bool) -> list[Track]:
        """Track selection and identification, filling each stage's histograms."""
        stats = self.statistics["mc_reco" if require_truth else "data"]
        identified = []
        for track in tracks:
            stats.tracks_seen += 1
            self._fill_track_stage(histos, track, "WOTS")

            if not track_selector.accept_track(track, self.config.track_cuts):
                continue
            if require_truth and not track.has_mc_particle:
                continue
            stats.tracks_selected += 1
            self._fill_track_stage(histos, track, "WTS")
            self._fill_track_quality(histos, track)

            if not self.pid.is_signal_candidate(track):
                continue
            stats.tracks_identified += 1
            self._fill_track_stage(histos, track, self.pid_tag)
            self._fill_identified(histos, track)
            identified.append(track)
        return identified

    def _fill_track_stage(self, histos: HistogramRegistry, track: Track, stage: str) -> None:
        short = self.signal_species.short_name
        pt = track.pt
        for detector in Detector:
            value = n_sigma(track, self.signal_species, detector)
            if _finite(value):
                histos.fill(f"{detector.value}NSigma{short}_{stage}", value, pt)
        vec = FourVector.from_cartesian(track.px, track.py, track.pz, self.signal_species.mass)
        histos.fill(f"pT_track_{stage}", pt)
        histos.fill(f"rapidity_track_{stage}", vec.rapidity)

    def _fill_track_quality(self, histos: HistogramRegistry, track: Track) -> None:
        p = track.p
        histos.fill("tpcSignal", p, track.tpc_signal)
        histos.fill("tofBeta", p, track.tof_beta)
        histos.fill("itsChi2NCl", track.its_chi2_ncl)
        histos.fill("tpcChi2NCl", track.tpc_chi2_ncl)
        histos.fill("tpcNClsFindable", track.tpc_ncls_findable)
        histos.fill("dcaXY", track.dca_xy)
        histos.fill("dcaZ", track.dca_z)

    def _fill_identified(self, histos: HistogramRegistry, track: Track) -> None:
        short = self.signal_species.short_name
        p = track.p
        pt = track.pt
        histos.fill(f"tpcSignal_{short}", p, track.tpc_signal)
        histos.fill(f"tofBeta_{short}", p, track.tof_beta)
        for species in RECORDED_SPECIES:
            if species is self.signal_species:
                continue
            for detector in Detector:
                value = n_sigma(track, species, detector)
                if _finite(value):
                    histos.fill(f"{detector.value}NSigma{species.short_name}_{self.pid_tag}", value, pt)

    def _fill_candidate(self, histos: HistogramRegistry, record, charge_tag: str) -> None:
        """Rapidity window, then exactly one pT domain."""
        cuts = self.config.event_cuts
        system = record.system
        if not abs(system.rapidity) < cuts.rapidity_max:
            return

        tag = f"{charge_tag}_{self.pid_tag}"
        histos.fill(f"pT_event_{tag}", system.pt)

        if system.pt < cuts.domain_a_pt_max:
            domain = "domainA"
        elif cuts.domain_a_pt_max < system.pt < cuts.domain_c_pt_min:
            domain = "domainB"
        elif system.pt > cuts.domain_c_pt_min:
            domain = "domainC"
        else:
            return

        histos.fill(f"rapidity_event_{tag}_{domain}", system.rapidity)
        histos.fill(f"invMass_event_{tag}_{domain}", system.mass)

        if domain != "domainA" or charge_tag != "0charge":
            return
        for i, mass in enumerate(record.pair_masses, start=1):
            histos.fill(f"invMass_pair_{i}", mass)
        self._fill_angles(histos, record.angles, prefix="")

    @staticmethod
    def _fill_angles(histos: HistogramRegistry, angles, prefix: str) -> None:
        pairs = (
            (angles.phi_pair_1, angles.cos_theta_pair_1),
            (angles.phi_pair_2, angles.cos_theta_pair_2),
        )
        for i, (phi, cos_theta) in enumerate(pairs, start=1):
            if _finite(phi):
                histos.fill(f"{prefix}CS_phi_pair_{i}", phi)
            if _finite(cos_theta):
                histos.fill(f"{prefix}CS_costheta_pair_{i}", cos_theta)
            if _finite(phi, cos_theta):
                histos.fill(f"{prefix}phi_cosTheta_pair_{i}", phi, cos_theta)

    # ------------------------------------------------------------------
    # Generator level
    # ------------------------------------------------------------------

    def process_generated(self, particles: list[McParticle]) -> EventOutcome:
        """
        Generator-level four-pion candidate from rho' daughters.

        Exactly two positive and two negative pion daughters are required.
        """
        histos = self.histos_mc_gen
        stats = self.statistics["mc_gen"]
        stats.generated_events += 1

        positives, negatives = [], []
        found_mother = False
        for particle in particles:
            if not particle.has_mothers or not has_mother(particle, consts.RHO_PRIME_PDG):
                continue
            found_mother = True
            if particle.pdg_code == consts.PION_PDG:
                positives.append(particle)
            elif particle.pdg_code == -consts.PION_PDG:
                negatives.append(particle)
            else:
                continue
            vec = FourVector.from_cartesian(particle.px, particle.py, particle.pz, consts.PION_MASS)
            histos.fill("MCgen_particle_pT", vec.pt)
            histos.fill("MCgen_particle_rapidity", vec.rapidity)

        if found_mother:
            histos.fill("rhoPrimeCounts", 1)

        if len(positives) != 2 or len(negatives) != 2:
            stats.record(EventOutcome.REJECTED_TRACK_COUNT)
            return EventOutcome.REJECTED_TRACK_COUNT

        vectors = [
            FourVector.from_cartesian(p.px, p.py, p.pz, consts.PION_MASS)
            for p in positives + negatives
        ]
        record = build_generated_record(vectors, self.config.beam)
        self.generated_sink.write(record)
        stats.generated_candidates += 1
        stats.record(EventOutcome.SIGNAL)

        for pt, rapidity in zip(record.tracks.pt, record.tracks.rapidity):
            histos.fill("MCgen_particle_pT_contributed", pt)
            histos.fill("MCgen_particle_rapidity_contributed", rapidity)
        histos.fill("MCgen_4pion_pT", record.system.pt)
        histos.fill("MCgen_4pion_rapidity", record.system.rapidity)
        histos.fill("MCgen_4pion_invmass", record.system.mass)
        for i, mass in enumerate(record.pair_masses, start=1):
            histos.fill(f"MCgen_invMass_pair_{i}", mass)
        self._fill_angles(histos, record.angles, prefix="MCgen_")
        return EventOutcome.SIGNAL

    # ------------------------------------------------------------------
    # Columnar fast path
    # ------------------------------------------------------------------

    def process_fast(self, arrays: ak.Array) -> int:
        """Fill the fast-path spectra from raw branch arrays; returns the neutral candidates found."""
        candidates = select_fast_candidates(arrays, self.config)
        neutral = candidates[candidates.neutral]
        cuts = self.config.event_cuts

        pt = ak.to_numpy(neutral.pt)
        rapidity = ak.to_numpy(neutral.rapidity)
        mass = ak.to_numpy(neutral.mass)

        self.histos_fast.fill("4PionPt", pt)
        self.histos_fast.fill("4PionRapidity", rapidity)
        self.histos_fast.fill("4PionMassFull", mass)
        with_cut = (pt < cuts.domain_a_pt_max) & (np.abs(rapidity) < cuts.rapidity_max)
        self.histos_fast.fill("4PionMassWithCut", mass[with_cut])

        stats = self.statistics["fast"]
        stats.events_seen += len(arrays)
        stats.signal += len(neutral)
        stats.background += len(candidates) - len(neutral)
        return len(neutral)

    # ------------------------------------------------------------------
    # TOF QA
    # ------------------------------------------------------------------

    def fill_tof_qa(self, event: Event) -> None:
        """TOF β and nσ by truth origin for tracks with TOF inside the eta window."""
        histos = self.histos_tof_qa
        cuts = self.config.event_cuts
        pid_cuts = self.config.pid_cuts

        histos.fill("event/vertexz", event.pos_z)
        for track in event.tracks:
            if not track.has_tof:
                continue
            eta = track.eta
            if eta < cuts.tof_qa_eta_min or eta > cuts.tof_qa_eta_max:
                continue

            p = track.p
            histos.fill("event/tofbeta", p, track.tof_beta)
            particle = track.mc_particle
            if particle is None:
                continue

            origin = classify_origin(particle)
            histos.fill(f"event/tofbeta{ORIGIN_SUFFIX[origin].capitalize()}", p, track.tof_beta)

            for species in pid_cuts.enabled_species:
                value = n_sigma(track, species, Detector.TOF)
                if not _finite(value):
                    continue
                histos.fill_species("nsigma", species, track.pt, value)
                if pid_cuts.check_primaries:
                    histos.fill_species(f"nsigma{ORIGIN_SUFFIX[origin]}", species, track.pt, value)

                if not matches_pdg(particle, species, pid_cuts.pdg_sign):
                    continue
                histos.fill(f"tracketa/{species.short_name}", eta)
                histos.fill_species("signalMC", species, p, track.tof_beta)

    # ------------------------------------------------------------------

    def process(self, event: Event) -> None:
        """Run every enabled per-event process on one event."""
        if self.config.do_data:
            self.process_event(event)
        if self.config.do_mc_reco:
            self.process_reconstructed_mc(event)
        if self.config.do_mc_gen and event.mc_particles:
            self.process_generated(list(event.mc_particles))
        if self.config.do_tof_qa:
            self.fill_tof_qa(event)

    def merge(self, other: 'RhoTo4PiAnalysis') -> 'RhoTo4PiAnalysis':
        """Fold the histograms, records and counters of another instance into this one."""
        for mine, theirs in zip(self.registries, other.registries):
            mine.merge(theirs)
        for mine, theirs in zip(self.sinks, other.sinks):
            mine.extend(theirs)
        for key, stats in other.statistics.items():
            self.statistics[key].merge(stats)
        return self
