"""
Utility functions for repeat alignments.
"""

import re
from typing import Dict, List, Tuple

# Per-element alignment ops produced by render_alignment
OP_NAMES = {
    'M': 'Match',
    '*': 'Mismatch',
    'D': 'Deletion',
    'I': 'Insertion',
    'Z': 'Flank',
}

CIGAR_RE = re.compile(r'(\d+)([MDIZ*])')


def build_cigar(ops: str) -> str:
    """
    Run-length encode an op string.

    CIGAR operations:
    - M: read base matches the motif
    - *: read base differs from the motif
    - D: motif base with no read base
    - I: read base inserted inside the repeat
    - Z: trailing flank and terminal state
    """
    cigar = []
    last_op = None
    count = 0

    for op in ops:
        if op == last_op:
            count += 1
        else:
            if last_op is not None:
                cigar.append(f"{count}{last_op}")
            last_op = op
            count = 1

    if last_op:
        cigar.append(f"{count}{last_op}")

    return ''.join(cigar)


def parse_cigar(cigar: str) -> List[Tuple[int, str]]:
    """Split a CIGAR string into (count, op) pairs."""
    return [(int(count), op) for count, op in CIGAR_RE.findall(cigar)]


def expand_cigar(cigar: str) -> str:
    return ''.join(op * count for count, op in parse_cigar(cigar))


def compute_alignment_stats(result) -> Dict:
    """
    Compute alignment statistics of a rendered alignment.

    Returns:
        Dictionary with matches, mismatches, insertions, deletions,
        flank bases, identity and the number of repeat copies
    """
    ops = result.cigar_ops
    # the last Z closes the path and consumes nothing
    flank = max(ops.count('Z') - 1, 0)

    matches = ops.count('M')
    mismatches = ops.count('*')
    insertions = ops.count('I')
    deletions = ops.count('D')

    total = matches + mismatches + insertions + deletions
    identity = matches / total if total else 0

    return {
        "matches": matches,
        "mismatches": mismatches,
        "insertions": insertions,
        "deletions": deletions,
        "flank_bases": flank,
        "total_aligned": total,
        "identity": identity,
        "repeat_copies": result.repeat_copies,
        "motif_bases": result.motif_bases,
    }


def validate_alignment(result) -> Tuple[bool, List[str]]:
    """
    Validate a rendered alignment for consistency.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    rows = (result.model, result.aligned_read, result.cigar_ops, result.repeat_track)
    if len({len(r) for r in rows}) != 1:
        errors.append(f"Row length mismatch: {[len(r) for r in rows]}")

    if result.consumed_read() != result.read:
        errors.append("Read bases along the path do not reconstruct the read")

    if not result.cigar_ops.endswith('Z'):
        errors.append("Path does not end in the terminal state")

    if len(result.model.replace('-', '')) != result.probe_len:
        errors.append(f"Motif bases {result.motif_bases} != probe length {result.probe_len}")

    return len(errors) == 0, errors


__all__ = [
    'OP_NAMES',
    'build_cigar',
    'parse_cigar',
    'expand_cigar',
    'compute_alignment_stats',
    'validate_alignment',
]
