"""
Move table of the repeat HMM.

One function per legal (source, destination) edge. A move takes the track
stored in the source cell and the read offset being consumed, and returns
the track to store in the destination cell. The motif is circular: moving
past its last base wraps to position 1 and bumps the repeat counter.

The state field of the returned track is the source state, which is what
traceback follows to find the previous cell.
"""

from typing import Callable, List, Optional

from ..core.track import (
    S, M, D, I, Z, NSTATES, DP_STATES,
    MOTIF, READ,
    NULL_TRACK, START_TRACK,
    make_track,
    track_get_state,
    track_get_counter,
    track_get_position,
    state2string,
)

MAX_COUNTER = 0xFF

Move = Callable[[int, int], int]


class MoveTable:
    """
    Dense (source, destination) dispatch table over a motif of fixed length.

    Args:
        motif_length: Length of the repeat unit
    """

    def __init__(self, motif_length: int):
        if motif_length < 1:
            raise ValueError(f"Motif length must be positive, got {motif_length}")
        self.mlen = motif_length

        self.table: List[List[Optional[Move]]] = [[None] * NSTATES for _ in range(NSTATES)]

        self.table[S][M] = self.move_S_M
        self.table[M][M] = self.move_M_M
        self.table[D][M] = self.move_D_M
        self.table[I][M] = self.move_I_M
        self.table[S][D] = self.move_S_D
        self.table[M][D] = self.move_M_D
        self.table[D][D] = self.move_D_D
        self.table[S][I] = self.move_S_I
        self.table[M][I] = self.move_M_I
        self.table[I][I] = self.move_I_I

        self.table[M][Z] = self.move_M_Z
        self.table[D][Z] = self.move_D_Z
        self.table[I][Z] = self.move_I_Z
        self.table[Z][Z] = self.move_Z_Z

    def __getitem__(self, state: int) -> List[Optional[Move]]:
        return self.table[state]

    def move(self, a: int, b: int, t: int, j: int) -> int:
        fn = self.table[a][b]
        if fn is None:
            raise KeyError(f"No move defined for {state2string(a)}->{state2string(b)}")
        return fn(t, j)

    def edges(self):
        """All legal (source, destination) pairs."""
        return [(a, b) for a in range(NSTATES) for b in range(NSTATES) if self.table[a][b] is not None]

    # helpers ------------------------------------------------------------------------------------

    def _advance(self, src: int, t: int) -> int:
        """Next motif position, wrapping past the end of the motif."""
        p = track_get_position(t)
        c = track_get_counter(t)
        if p == self.mlen:
            p = 1
            c = min(c + 1, MAX_COUNTER)
        else:
            p += 1
        return make_track(src, MOTIF, c, p)

    @staticmethod
    def _hold(src: int, t: int) -> int:
        return make_track(src, READ, track_get_counter(t), track_get_position(t))

    @staticmethod
    def _from_start(t: int, j: int) -> bool:
        return j >= 0 and t == START_TRACK

    @staticmethod
    def _from_model(t: int, j: int) -> bool:
        # boundary, uncertain and null tracks all carry a state outside the recurrence
        return j >= 0 and track_get_state(t) in DP_STATES

    # M ------------------------------------------------------------------------------------------

    def move_S_M(self, t: int, j: int) -> int:
        if not self._from_start(t, j):
            return NULL_TRACK
        return self._advance(S, t)

    def move_M_M(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._advance(M, t)

    def move_D_M(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._advance(D, t)

    def move_I_M(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._advance(I, t)

    # D ------------------------------------------------------------------------------------------

    def move_S_D(self, t: int, j: int) -> int:
        if not self._from_start(t, j):
            return NULL_TRACK
        return self._advance(S, t)

    def move_M_D(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._advance(M, t)

    def move_D_D(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._advance(D, t)

    # I ------------------------------------------------------------------------------------------

    def move_S_I(self, t: int, j: int) -> int:
        if not self._from_start(t, j):
            return NULL_TRACK
        return self._hold(S, t)

    def move_M_I(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._hold(M, t)

    def move_I_I(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._hold(I, t)

    # Z ------------------------------------------------------------------------------------------

    def move_M_Z(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._hold(M, t)

    def move_D_Z(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._hold(D, t)

    def move_I_Z(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._hold(I, t)

    def move_Z_Z(self, t: int, j: int) -> int:
        if not self._from_model(t, j):
            return NULL_TRACK
        return self._hold(Z, t)


__all__ = ['MoveTable', 'Move', 'MAX_COUNTER']
