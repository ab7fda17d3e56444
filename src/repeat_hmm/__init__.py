"""
Profile HMM aligner for reads spanning tandem repeats.
"""

__version__ = "1.0.0"
__description__ = "Log-space profile HMM alignment of reads against circular repeat motifs"
__license__ = "MIT"

from .errors import (
    RepeatHMMError,
    InputTooLong,
    InvalidInput,
    TracebackInvariantViolation,
    ConfigError,
)
from .core import LogTool, AlignmentResult, render_alignment
from .algorithms import LFHMM, TransitionModel, MoveTable, MAXLEN


def get_version():
    """Get the package version."""
    return __version__


def align_read(motif: str, read: str, qual: str, transitions=None) -> AlignmentResult:
    """Align one read against ``motif`` and return the rendered alignment."""
    hmm = LFHMM(motif, transitions=transitions)
    hmm.align(read, qual)
    return render_alignment(hmm)


__all__ = [
    # Metadata
    '__version__',
    '__description__',
    '__license__',
    'get_version',

    # Errors
    'RepeatHMMError',
    'InputTooLong',
    'InvalidInput',
    'TracebackInvariantViolation',
    'ConfigError',

    # Alignment
    'LogTool',
    'LFHMM',
    'TransitionModel',
    'MoveTable',
    'MAXLEN',
    'AlignmentResult',
    'render_alignment',
    'align_read',
]
