"""
Phred-scale log probability conversions.
"""

import numpy as np

PHRED_OFFSET = 33
MAX_PL = 255


class LogTool:
    """Converts phred scaled qualities to log10 probabilities.

    Values are precomputed once for PL 0..MAX_PL; an instance can be
    shared by any number of aligners.
    """

    def __init__(self, max_pl: int = MAX_PL):
        self.max_pl = max_pl
        self._pl2log10_varp = -np.arange(max_pl + 1, dtype=np.float64) / 10.0
        self._pl2log10_varp.flags.writeable = False

    def pl2log10_varp(self, pl: int) -> float:
        """log10 probability that a call with phred quality ``pl`` is a variant of the true base."""
        if pl < 0:
            raise ValueError(f"Phred quality must be non-negative, got {pl}")
        if pl > self.max_pl:
            return -pl / 10.0
        return float(self._pl2log10_varp[pl])

    def pl2prob(self, pl: int) -> float:
        return 10.0 ** self.pl2log10_varp(pl)

    @staticmethod
    def phred(ch: str) -> int:
        """Decode a phred+33 quality character."""
        return ord(ch) - PHRED_OFFSET


__all__ = ['LogTool', 'PHRED_OFFSET', 'MAX_PL']
