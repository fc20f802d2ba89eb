"""
Event-level selection: primary vertex and rapidity-gap topology.

The gap topology reported by the skimming step is re-evaluated against the
forward-detector thresholds. A side is quiet when all of its detectors are
below threshold: FV0A, FT0A and ZNA on the A side, FT0C and ZNC on the C
side.
"""
from domain.config import EventCuts
from domain.events import Event, GapSide


def is_a_side_quiet(event: Event, cuts: EventCuts) -> bool:
    return (
        event.fv0a_amplitude < cuts.fv0a_max
        and event.ft0a_amplitude < cuts.ft0a_max
        and event.zna_energy < cuts.zdc_max
    )


def is_c_side_quiet(event: Event, cuts: EventCuts) -> bool:
    return event.ft0c_amplitude < cuts.ft0c_max and event.znc_energy < cuts.zdc_max


def classify_gap(event: Event, cuts: EventCuts) -> GapSide:
    """Refined gap topology of the event."""
    a_quiet = is_a_side_quiet(event, cuts)
    c_quiet = is_c_side_quiet(event, cuts)

    reported = event.gap_side
    if reported is None or reported is GapSide.DOUBLE:
        if a_quiet and c_quiet:
            return GapSide.DOUBLE
        if a_quiet:
            return GapSide.A
        if c_quiet:
            return GapSide.C
        return GapSide.NONE
    if reported is GapSide.A:
        return GapSide.A if a_quiet else GapSide.NONE
    if reported is GapSide.C:
        return GapSide.C if c_quiet else GapSide.NONE
    return GapSide.NONE


def accept_event(event: Event, cuts: EventCuts) -> bool:
    return classify_gap(event, cuts) is cuts.required_gap


def accept_vertex_z(event: Event, cuts: EventCuts) -> bool:
    return abs(event.pos_z) < cuts.vertex_z_max


def accept_contributors(event: Event, cuts: EventCuts) -> bool:
    return event.num_contributors == cuts.required_contributors


def accept_vertex(event: Event, cuts: EventCuts) -> bool:
    return accept_vertex_z(event, cuts) and accept_contributors(event, cuts)
