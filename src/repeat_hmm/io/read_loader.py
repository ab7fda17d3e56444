"""
Loading of sequencing reads from FASTQ and FASTA files.
"""

import os
from typing import Iterator, NamedTuple, Tuple, Dict

from Bio import SeqIO

from ..core.log_tool import PHRED_OFFSET

SUPPORTED_FORMATS = ('fastq', 'fasta')

# phred 40 for reads without qualities
DEFAULT_QUALITY_CHAR = 'I'

VALID_BASES = set('ACGTN')


class ReadRecord(NamedTuple):
    name: str
    sequence: str
    quality: str


def _check_format(fmt: str) -> str:
    fmt = fmt.lower()
    if fmt == 'fq':
        fmt = 'fastq'
    elif fmt in ('fa', 'fna'):
        fmt = 'fasta'
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported reads format '{fmt}', expected one of {SUPPORTED_FORMATS}")
    return fmt


def guess_format(filepath: str) -> str:
    """Reads format from the file extension, ignoring a trailing .gz."""
    name = os.path.basename(filepath).lower()
    if name.endswith('.gz'):
        name = name[:-3]
    ext = os.path.splitext(name)[1].lstrip('.')
    return _check_format(ext) if ext else 'fastq'


def validate_reads_file(filepath: str, fmt: str = "fastq") -> Tuple[bool, str]:
    """
    Validate if a file is a readable FASTQ or FASTA file.

    Args:
        filepath: Path to the reads file
        fmt: 'fastq' or 'fasta'

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not os.path.exists(filepath):
        return False, f"File does not exist: {filepath}"

    if not os.path.isfile(filepath):
        return False, f"Not a file: {filepath}"

    if os.path.getsize(filepath) == 0:
        return False, f"File is empty: {filepath}"

    try:
        fmt = _check_format(fmt)
    except ValueError as e:
        return False, str(e)

    marker = '@' if fmt == 'fastq' else '>'
    try:
        with open(filepath, 'r') as f:
            first_line = f.readline().strip()
            if not first_line.startswith(marker):
                return False, f"File does not start with '{marker}' character: {filepath}"
    except UnicodeDecodeError:
        return False, f"File is not a valid text file: {filepath}"

    try:
        count = 0
        for count, record in enumerate(SeqIO.parse(filepath, fmt), start=1):
            if len(record.seq) == 0:
                return False, f"Read {count} is empty in file: {filepath}"

            invalid_chars = set(str(record.seq).upper()) - VALID_BASES
            if invalid_chars:
                return False, f"Read {count} contains invalid characters: {invalid_chars}"

        if count == 0:
            return False, f"No reads found in file: {filepath}"

        return True, f"Valid {fmt.upper()} file with {count} read(s)"

    except ValueError as e:
        return False, f"Error parsing {fmt.upper()} file: {str(e)}"


def read_sequencing_reads(filepath: str, fmt: str = "fastq") -> Iterator[ReadRecord]:
    """
    Iterate over the reads of a FASTQ or FASTA file.

    FASTA reads carry no qualities and get a uniform default quality.

    Args:
        filepath: Path to reads file
        fmt: 'fastq' or 'fasta'

    Yields:
        ReadRecord with upper-cased sequence and phred+33 quality string
    """
    fmt = _check_format(fmt)
    for record in SeqIO.parse(filepath, fmt):
        seq = str(record.seq).upper()
        if fmt == 'fastq':
            qual = ''.join(chr(q + PHRED_OFFSET) for q in record.letter_annotations['phred_quality'])
        else:
            qual = DEFAULT_QUALITY_CHAR * len(seq)
        yield ReadRecord(record.id, seq, qual)


def get_reads_stats(filepath: str, fmt: str = "fastq") -> Dict:
    """
    Get statistics about a reads file.

    Returns:
        Dictionary with file statistics
    """
    stats = {
        'filepath': filepath,
        'filename': os.path.basename(filepath),
        'size_bytes': os.path.getsize(filepath),
        'num_reads': 0,
        'total_length': 0,
        'min_length': 0,
        'max_length': 0,
        'avg_length': 0,
    }

    lengths = [len(r.sequence) for r in read_sequencing_reads(filepath, fmt)]
    if lengths:
        stats['num_reads'] = len(lengths)
        stats['total_length'] = sum(lengths)
        stats['min_length'] = min(lengths)
        stats['max_length'] = max(lengths)
        stats['avg_length'] = stats['total_length'] / len(lengths)

    return stats


__all__ = [
    'ReadRecord',
    'SUPPORTED_FORMATS',
    'DEFAULT_QUALITY_CHAR',
    'guess_format',
    'validate_reads_file',
    'read_sequencing_reads',
    'get_reads_stats',
]
