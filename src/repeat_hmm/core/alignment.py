"""
Turns a traced repeat HMM path into a base-level alignment.
"""

from dataclasses import dataclass, field, asdict
from typing import List

from .track import (
    M, D, I, Z,
    Track,
    track_get_state,
    track_get_counter,
    track_get_position,
    state2string,
    track2string,
)


@dataclass
class AlignmentResult:
    """Rendered alignment of one read against the repeat motif."""
    motif: str
    read: str
    model: str
    aligned_read: str
    cigar_ops: str
    repeat_track: str
    score: float
    probe_len: int
    repeat_copies: int
    motif_bases: int
    path: List[int] = field(default_factory=list)

    @property
    def states(self) -> str:
        return ''.join(state2string(track_get_state(t)) for t in self.path)

    def consumed_read(self) -> str:
        """Read bases in path order, gaps removed."""
        return self.aligned_read.replace('-', '')

    def tracks(self) -> List[Track]:
        return [Track.unpack(t) for t in self.path]

    def to_dict(self) -> dict:
        d = asdict(self)
        d['path'] = [track2string(t) for t in self.path]
        return d

    def format(self, pad: str = '\t') -> str:
        """Multi-line text block in the style of a pairwise alignment."""
        return '\n'.join([
            f"{pad}repeat motif : {self.motif}",
            f"{pad}read         : {self.read}",
            f"{pad}score        : {self.score:.4f}",
            f"{pad}probe len    : {self.probe_len}",
            f"{pad}copies       : {self.repeat_copies}",
            "",
            f"{pad}Model:  {self.model}",
            f"{pad}       S{self.cigar_ops}E",
            f"{pad}        {self.repeat_track}",
            f"{pad}Read:   {self.aligned_read}",
        ])


def render_alignment(hmm) -> AlignmentResult:
    """
    Render the optimal path of an aligner that has already run ``align``.

    The last path element is the terminal Z cell; it consumes no read base.
    """
    path = hmm.optimal_path
    motif = hmm.motif
    read = hmm.read

    model_row = []
    read_row = []
    ops = []
    repeat_row = []
    max_counter = -1
    motif_bases = 0

    j = 0
    last = len(path) - 1
    for k, t in enumerate(path):
        u = track_get_state(t)
        counter = track_get_counter(t)

        if u == M or u == D:
            base = motif[track_get_position(t) - 1]
            model_row.append(base)
            motif_bases += 1
            max_counter = max(max_counter, counter)
        else:
            model_row.append('-')

        if u == M:
            read_row.append(read[j])
            ops.append('M' if read[j] == base else '*')
            j += 1
        elif u == D:
            read_row.append('-')
            ops.append('D')
        elif u == I:
            read_row.append(read[j])
            ops.append('I')
            j += 1
        elif u == Z:
            if k == last:
                read_row.append('-')
            else:
                read_row.append(read[j])
                j += 1
            ops.append('Z')

        if u in (M, D, I):
            repeat_row.append('+' if counter % 2 == 0 else 'o')
        else:
            repeat_row.append(' ')

    return AlignmentResult(
        motif=motif,
        read=read,
        model=''.join(model_row),
        aligned_read=''.join(read_row),
        cigar_ops=''.join(ops),
        repeat_track=''.join(repeat_row),
        score=float(hmm.optimal_score),
        probe_len=hmm.optimal_probe_len,
        repeat_copies=max_counter + 1,
        motif_bases=motif_bases,
        path=list(path),
    )


__all__ = ['AlignmentResult', 'render_alignment']
