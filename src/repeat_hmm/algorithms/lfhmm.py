"""
Viterbi aligner of a read against a circular repeat motif.

Scores live in log10 space. For every scoring state the aligner keeps a
score matrix ``V`` and a track matrix ``U``; row i is the number of model
positions consumed, column j the number of read bases consumed. The extra
column ``rlen + 1`` holds the terminal Z cells that close the alignment
once the whole read has been consumed.
"""

import logging
from typing import List, Optional

import numpy as np

from ..core.track import (
    S, M, D, I, Z, TBD, NSTATES, DP_STATES,
    MatchType,
    MOTIF,
    NULL_TRACK, START_TRACK, BOUNDARY_TRACK, UNCERTAIN_TRACK,
    make_track,
    track_get_state,
    track_get_position,
    track_set_state,
    state2string,
    track2string,
)
from ..core.log_tool import LogTool, PHRED_OFFSET
from ..errors import InputTooLong, InvalidInput, TracebackInvariantViolation
from .moves import MoveTable
from .transitions import TransitionModel

logger = logging.getLogger(__name__)

MAXLEN = 256
MAX_MOTIF_LEN = MAXLEN - 2
PATH_CAPACITY = MAXLEN << 2

NEG_INF = -np.inf

MATCH = int(MatchType.MATCH)
READ_ONLY = int(MatchType.READ_ONLY)
PROBE_ONLY = int(MatchType.PROBE_ONLY)

# (source states, destination) in the order they are tried for each cell
_INCOMING = {
    M: (S, M, D, I),
    D: (S, M, D),
    I: (S, M, I),
    Z: (M, D, I, Z),
}


class LFHMM:
    """
    Left flank / repeat / right flank HMM for one motif.

    Args:
        motif: Repeat unit, traversed circularly
        log_tool: Phred conversion helper, shared between instances
        transitions: Transition model; defaults to the standard priors
        dump_matrices: Log the filled matrices at DEBUG after each alignment
    """

    def __init__(
        self,
        motif: str,
        log_tool: Optional[LogTool] = None,
        transitions: Optional[TransitionModel] = None,
        dump_matrices: bool = False
    ):
        if not motif:
            raise InvalidInput("Motif is empty", suggestion="Provide at least one base")
        if len(motif) > MAX_MOTIF_LEN:
            raise InputTooLong("motif", len(motif), MAX_MOTIF_LEN)

        self._motif = motif.upper()
        self.mlen = len(self._motif)
        self.lt = log_tool if log_tool is not None else LogTool()
        self.transitions = transitions if transitions is not None else TransitionModel()
        self.dump_matrices = dump_matrices

        self.moves = MoveTable(self.mlen)

        shape = (MAXLEN + 1, MAXLEN + 2)
        self.V = [np.empty(shape, dtype=np.float64) for _ in range(NSTATES)]
        self.U = [np.empty(shape, dtype=np.uint32) for _ in range(NSTATES)]

        self.path = np.zeros(PATH_CAPACITY, dtype=np.uint32)

        self.read = ''
        self.qual = ''
        self.rlen = 0
        self.plen = 0

        self.initialize()

    # =========================
    # Setup
    # =========================

    def initialize(self):
        """Reset scores, tracks and the traced path in place."""
        for state in DP_STATES:
            self.V[state].fill(NEG_INF)

        self.U[S].fill(NULL_TRACK)
        for state in (M, D, I, Z):
            u = self.U[state]
            u.fill(UNCERTAIN_TRACK)
            u[0, :] = BOUNDARY_TRACK
            u[:, 0] = BOUNDARY_TRACK

        self.V[S][0, 0] = 0.0
        self.U[S][0, 0] = START_TRACK

        self.optimal_score = NEG_INF
        self.optimal_track = NULL_TRACK
        self.optimal_state = TBD
        self.optimal_probe_len = 0
        self.optimal_path_ptr = PATH_CAPACITY
        self.optimal_path_len = 0
        self.optimal_path_traced = False

    # =========================
    # Scoring
    # =========================

    def log10_emission_odds(self, probe_base: str, read_base: str, pl: int) -> float:
        """
        Emission log odds of a read base against a model base.

        ``pl2log10_varp`` is the log10 probability of a miscall, so a match
        scores its negation (positive) and a mismatch scores it as is.
        """
        if probe_base == 'N' or read_base == 'N':
            return NEG_INF

        if probe_base != read_base:
            return self.lt.pl2log10_varp(pl)
        return -self.lt.pl2log10_varp(pl)

    def proc_comp(self, A: int, B: int, index1, j: int, match_type: int):
        """
        Score edge A->B into the current cell.

        ``index1`` is the (row, column) of the source cell and ``j`` the
        read offset the edge consumes. Updates the running maximum of the
        cell being filled.
        """
        t = self.moves.table[A][B](int(self.U[A][index1]), j)
        valid = NEG_INF if t == NULL_TRACK else 0.0

        emission = 0.0
        if match_type == MATCH and valid == 0.0:
            emission = self.log10_emission_odds(
                self._motif[track_get_position(t) - 1],
                self.read[j],
                ord(self.qual[j]) - PHRED_OFFSET,
            )

        score = self.V[A][index1] + self.transitions.T[A][B] + emission + valid

        if score > self.max_score:
            self.max_score = score
            self.max_track = t

    def _fill(self, B: int, i: int, j: int, src, offset: int, match_type: int):
        self.max_score = NEG_INF
        self.max_track = NULL_TRACK
        for A in _INCOMING[B]:
            self.proc_comp(A, B, src, offset, match_type)
        self.V[B][i, j] = self.max_score
        self.U[B][i, j] = self.max_track

    # =========================
    # Alignment
    # =========================

    def align(self, read: str, qual: str):
        """
        Align ``read`` with phred+33 qualities ``qual`` and trace the best path.

        Raises:
            InvalidInput: Empty read or quality length mismatch
            InputTooLong: Read longer than MAXLEN
            TracebackInvariantViolation: No path reaches the start state
        """
        if not read:
            raise InvalidInput("Read is empty", suggestion="Skip empty records before aligning")
        if qual is None or len(qual) != len(read):
            raise InvalidInput(
                f"Quality length {0 if qual is None else len(qual)} does not match read length {len(read)}",
                suggestion="Provide one phred+33 quality character per read base",
            )
        if len(read) > MAXLEN:
            raise InputTooLong("read", len(read), MAXLEN)

        self.initialize()

        self.read = read.upper()
        self.qual = qual
        self.rlen = len(read)
        self.plen = self.rlen

        rlen, plen = self.rlen, self.plen

        for i in range(1, plen + 1):
            for j in range(1, rlen + 1):
                self._fill(M, i, j, (i - 1, j - 1), j - 1, MATCH)
                self._fill(D, i, j, (i - 1, j), j, PROBE_ONLY)
                self._fill(I, i, j, (i, j - 1), j - 1, READ_ONLY)
                self._fill(Z, i, j, (i, j - 1), j - 1, READ_ONLY)

        # terminal column, entered once the read is exhausted
        for i in range(0, plen + 1):
            self._fill(Z, i, rlen + 1, (i, rlen), rlen, READ_ONLY)

        logger.debug(f"Filled {plen + 1}x{rlen + 2} matrices for read of length {rlen}")

        if self.dump_matrices:
            self.log_matrices()

        self.trace_path()

    def trace_path(self):
        """Follow tracks back from the best terminal Z cell to the start state."""
        rlen, plen = self.rlen, self.plen
        end = rlen + 1

        self.optimal_score = NEG_INF

        z_scores = self.V[Z]
        for i in range(0, plen + 1):
            if z_scores[i, end] >= self.optimal_score:
                self.optimal_score = float(z_scores[i, end])
                self.optimal_track = int(self.U[Z][i, end])
                self.optimal_state = Z
                self.optimal_probe_len = i

        if self.optimal_score == NEG_INF:
            raise TracebackInvariantViolation("no terminal cell is reachable", (plen, end))

        path = self.path
        ptr = PATH_CAPACITY
        i, j = self.optimal_probe_len, end

        last_t = make_track(Z, MOTIF, 0, self.mlen + 1)
        while True:
            u = track_get_state(last_t)
            last_t = int(self.U[u][i, j])
            if track_get_state(last_t) not in DP_STATES:
                raise TracebackInvariantViolation(
                    f"reached {track2string(last_t)} from state {state2string(u)}", (i, j))

            if ptr == 0:
                raise TracebackInvariantViolation("path exceeds buffer capacity", (i, j))
            ptr -= 1
            path[ptr] = track_set_state(last_t, u)

            if u == M:
                i -= 1
                j -= 1
            elif u == D:
                i -= 1
            else:
                j -= 1

            if track_get_state(last_t) == S:
                break

        self.optimal_path_ptr = ptr
        self.optimal_path_len = PATH_CAPACITY - ptr
        self.optimal_path_traced = True

        logger.debug(f"Traced path of length {self.optimal_path_len}, "
                     f"score {self.optimal_score:.4f}, probe length {self.optimal_probe_len}")

    # =========================
    # Accessors
    # =========================

    @property
    def motif(self) -> str:
        return self._motif

    @property
    def T(self) -> np.ndarray:
        return self.transitions.T

    @property
    def optimal_path(self) -> List[int]:
        if not self.optimal_path_traced:
            raise RuntimeError("No path traced yet; call align() first")
        return [int(t) for t in self.path[self.optimal_path_ptr:]]

    def path_states(self) -> str:
        """Path as a string of state letters, e.g. ``MMMMMMZ``."""
        return ''.join(state2string(track_get_state(t)) for t in self.optimal_path)

    # =========================
    # Debug output
    # =========================

    def format_scores(self, state: int) -> str:
        v = self.V[state]
        rows = []
        for i in range(self.plen + 1):
            rows.append(''.join(f"{v[i, j]:8.1f}" for j in range(self.rlen + 2)))
        return '\n'.join(rows)

    def format_tracks(self, state: int) -> str:
        u = self.U[state]
        rows = []
        for i in range(self.plen + 1):
            rows.append('  '.join(f"{track2string(u[i, j]):>9}" for j in range(self.rlen + 2)))
        return '\n'.join(rows)

    def log_matrices(self):
        logger.debug(f"Transition table:\n{self.transitions.format_table()}")
        for state in DP_STATES:
            name = state2string(state)
            logger.debug(f"V[{name}]:\n{self.format_scores(state)}")
            logger.debug(f"U[{name}]:\n{self.format_tracks(state)}")


__all__ = ['LFHMM', 'MAXLEN', 'MAX_MOTIF_LEN', 'PATH_CAPACITY']
