"""
Packed back-pointer tracks for the repeat HMM.

A track is a 32-bit value stored in every DP cell:

    bits 24-31  state       predecessor state of the cell's best path
    bits 16-23  component   which part of the model the cell refers to
    bits  8-15  counter     number of times the path wrapped around the motif
    bits  0-7   position    1-based position within the motif (0 = none)
"""

from enum import IntEnum
from typing import NamedTuple


class State(IntEnum):
    S = 0
    M = 1
    D = 2
    I = 3
    Z = 4
    E = 5
    N = 6
    TBD = 7


class Component(IntEnum):
    MOTIF = 0
    READ = 1
    UNMODELED = 2
    UNCERTAIN = 3


class MatchType(IntEnum):
    MATCH = 0
    READ_ONLY = 1
    PROBE_ONLY = 2


S, M, D, I, Z, E, N, TBD = (int(s) for s in State)
MOTIF, READ, UNMODELED, UNCERTAIN = (int(c) for c in Component)

NSTATES = 6
# States taking part in the recurrence
DP_STATES = (S, M, D, I, Z)

FIELD_MASK = 0xFF


def make_track(state: int, component: int, counter: int, position: int) -> int:
    return ((state & FIELD_MASK) << 24) | ((component & FIELD_MASK) << 16) \
        | ((counter & FIELD_MASK) << 8) | (position & FIELD_MASK)


def track_get_state(t: int) -> int:
    return (t >> 24) & FIELD_MASK


def track_get_component(t: int) -> int:
    return (t >> 16) & FIELD_MASK


def track_get_counter(t: int) -> int:
    return (t >> 8) & FIELD_MASK


def track_get_position(t: int) -> int:
    return t & FIELD_MASK


def track_set_state(t: int, state: int) -> int:
    return (t & 0x00FFFFFF) | ((state & FIELD_MASK) << 24)


def track_set_component(t: int, component: int) -> int:
    return (t & 0xFF00FFFF) | ((component & FIELD_MASK) << 16)


def track_set_counter(t: int, counter: int) -> int:
    return (t & 0xFFFF00FF) | ((counter & FIELD_MASK) << 8)


def track_set_position(t: int, position: int) -> int:
    return (t & 0xFFFFFF00) | (position & FIELD_MASK)


def track_valid(t: int) -> bool:
    """True when the track denotes an actual motif base."""
    return track_get_component(t) == MOTIF and track_get_position(t) != 0


# [N|!|4|0] no predecessor
NULL_TRACK = make_track(N, UNMODELED, 4, 0)
# [N|m|0|0] DP origin
START_TRACK = make_track(N, MOTIF, 0, 0)
# [N|!|0|0] row 0 and column 0
BOUNDARY_TRACK = make_track(N, UNMODELED, 0, 0)
# [*|?|0|0] not computed yet
UNCERTAIN_TRACK = make_track(TBD, UNCERTAIN, 0, 0)


class Track(NamedTuple):
    """Readable form of a packed track."""
    state: int
    component: int
    counter: int
    position: int

    def pack(self) -> int:
        return make_track(self.state, self.component, self.counter, self.position)

    @classmethod
    def unpack(cls, t: int) -> 'Track':
        t = int(t)
        return cls(track_get_state(t), track_get_component(t),
                   track_get_counter(t), track_get_position(t))

    @property
    def valid(self) -> bool:
        return self.component == MOTIF and self.position != 0

    def __str__(self) -> str:
        return track2string(self.pack())


_STATE_STRINGS = {S: 'S', M: 'M', D: 'D', I: 'I', Z: 'Z', E: 'E', N: 'N', TBD: '*'}
_COMPONENT_STRINGS = {MOTIF: 'm', READ: 's', UNMODELED: '!', UNCERTAIN: '?'}


def state2string(state: int) -> str:
    return _STATE_STRINGS.get(state, '!')


def state2cigar(state: int) -> str:
    """CIGAR-like symbol for a path element in the given state."""
    return _STATE_STRINGS.get(state, '!')


def component2string(component: int) -> str:
    return _COMPONENT_STRINGS.get(component, '!')


def track2string(t: int) -> str:
    t = int(t)
    return (f"{state2string(track_get_state(t))}|"
            f"{component2string(track_get_component(t))}|"
            f"{track_get_counter(t)}|"
            f"{track_get_position(t)}")


__all__ = [
    'State', 'Component', 'MatchType',
    'S', 'M', 'D', 'I', 'Z', 'E', 'N', 'TBD',
    'MOTIF', 'READ', 'UNMODELED', 'UNCERTAIN',
    'NSTATES', 'DP_STATES',
    'make_track', 'track_get_state', 'track_get_component', 'track_get_counter',
    'track_get_position', 'track_set_state', 'track_set_component',
    'track_set_counter', 'track_set_position', 'track_valid',
    'NULL_TRACK', 'START_TRACK', 'BOUNDARY_TRACK', 'UNCERTAIN_TRACK',
    'Track', 'state2string', 'state2cigar', 'component2string', 'track2string',
]
