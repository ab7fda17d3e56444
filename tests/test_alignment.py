"""
Tests for alignment rendering and CIGAR utilities.
"""
import pytest

from repeat_hmm import align_read
from repeat_hmm.algorithms.lfhmm import LFHMM
from repeat_hmm.core.alignment import render_alignment
from repeat_hmm.core.utilities import (
    build_cigar,
    parse_cigar,
    expand_cigar,
    compute_alignment_stats,
    validate_alignment,
)


def test_render_worked_example():
    """A perfect repeat renders as matches closed by the terminal state."""
    aln = align_read("AT", "ATATAT", "IIIIII")

    assert aln.model == "ATATAT-"
    assert aln.aligned_read == "ATATAT-"
    assert aln.cigar_ops == "MMMMMMZ"
    assert aln.repeat_track == "++oo++ "
    assert aln.repeat_copies == 3
    assert aln.motif_bases == 6
    assert aln.probe_len == 6
    assert aln.states == "MMMMMMZ"
    assert build_cigar(aln.cigar_ops) == "6M1Z"


def test_render_trailing_flank():
    """Bases after the repeat are shown as flank."""
    aln = align_read("AT", "ATATAG", "IIIIII")

    assert aln.cigar_ops == "MMMMMZZ"
    assert aln.model == "ATATA--"
    assert aln.aligned_read == "ATATAG-"
    assert build_cigar(aln.cigar_ops) == "5M2Z"


def test_render_mismatch():
    """A wrong base inside the repeat is marked as a mismatch."""
    aln = align_read("CAG", "CAGCTGCAGCAG", "I" * 12)

    assert aln.cigar_ops == "MMMM*MMMMMMMZ"
    assert aln.model == "CAGCAGCAGCAG-"
    assert aln.repeat_copies == 4

    stats = compute_alignment_stats(aln)
    assert stats['matches'] == 11
    assert stats['mismatches'] == 1
    assert stats['flank_bases'] == 0
    assert stats['identity'] == pytest.approx(11 / 12)


@pytest.mark.parametrize("motif,read", [
    ("CAG", "CAGCAGCAGTTTT"),
    ("CAGT", "CAGTCAGTCGTCAGTCAGT"),
    ("GGC", "TTTTTT"),
    ("A", "AAAACAAAA"),
])
def test_rendered_read_reconstructs_input(motif, read):
    """Read bases along the rendered path spell the read."""
    hmm = LFHMM(motif)
    hmm.align(read, "5" * len(read))
    aln = render_alignment(hmm)

    assert aln.consumed_read() == read
    ok, errors = validate_alignment(aln)
    assert ok, errors


def test_validate_alignment_reports_problems():
    """Inconsistent rows are reported."""
    aln = align_read("AT", "ATAT", "IIII")
    aln.aligned_read = "ATA--"
    ok, errors = validate_alignment(aln)
    assert not ok
    assert any("reconstruct" in e for e in errors)


def test_cigar_helpers():
    """Run-length encoding and decoding of op strings."""
    assert build_cigar("") == ""
    assert build_cigar("MMMMZ") == "4M1Z"
    assert build_cigar("MM*MDDIZZ") == "2M1*1M2D1I2Z"
    assert parse_cigar("2M1*1M2D1I2Z") == [(2, 'M'), (1, '*'), (1, 'M'), (2, 'D'), (1, 'I'), (2, 'Z')]
    assert expand_cigar("2M1*1M2D1I2Z") == "MM*MDDIZZ"


def test_to_dict_and_format():
    """The result serialises with readable tracks and prints an alignment block."""
    aln = align_read("AT", "ATAT", "IIII")
    d = aln.to_dict()
    assert d['path'] == ["M|m|0|1", "M|m|0|2", "M|m|1|1", "M|m|1|2", "Z|s|1|2"]
    assert d['cigar_ops'] == "MMMMZ"

    text = aln.format()
    assert "Model:  ATAT-" in text
    assert "Read:   ATAT-" in text
    assert "SMMMMZE" in text
