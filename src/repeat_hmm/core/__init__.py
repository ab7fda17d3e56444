"""
Core modules of the repeat HMM: track codec, phred helper and path rendering.
"""

from .track import (
    State,
    Component,
    MatchType,
    Track,
    make_track,
    track2string,
    state2string,
    NULL_TRACK,
    START_TRACK,
    BOUNDARY_TRACK,
    UNCERTAIN_TRACK,
)
from .log_tool import LogTool
from .alignment import AlignmentResult, render_alignment
from .utilities import (
    build_cigar,
    parse_cigar,
    compute_alignment_stats,
    validate_alignment,
)

__all__ = [
    # Tracks
    'State',
    'Component',
    'MatchType',
    'Track',
    'make_track',
    'track2string',
    'state2string',
    'NULL_TRACK',
    'START_TRACK',
    'BOUNDARY_TRACK',
    'UNCERTAIN_TRACK',

    # Scoring helper
    'LogTool',

    # Rendering
    'AlignmentResult',
    'render_alignment',
    'build_cigar',
    'parse_cigar',
    'compute_alignment_stats',
    'validate_alignment',
]
