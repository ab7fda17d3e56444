"""
Input and configuration validation.
"""

from pathlib import Path
from typing import Tuple, Dict, List, Optional

from ..algorithms.lfhmm import MAXLEN, MAX_MOTIF_LEN
from ..core.log_tool import PHRED_OFFSET
from ..errors import InvalidInput, InputTooLong

MOTIF_BASES = set('ACGT')
READ_BASES = set('ACGTN')


def validate_motif(motif: Optional[str]) -> str:
    """
    Check a repeat motif and return it upper-cased.

    Raises:
        InvalidInput: Empty motif or non-ACGT characters
        InputTooLong: Motif longer than the aligner supports
    """
    if not motif:
        raise InvalidInput("No repeat motif given", suggestion="Set alignment.motif or pass --motif")

    motif = motif.upper()
    invalid = set(motif) - MOTIF_BASES
    if invalid:
        raise InvalidInput(f"Motif {motif} contains invalid characters: {sorted(invalid)}",
                           suggestion="Use only A, C, G and T in the motif")

    if len(motif) > MAX_MOTIF_LEN:
        raise InputTooLong("motif", len(motif), MAX_MOTIF_LEN)

    return motif


def validate_read(sequence: str, quality: str, max_length: int = MAXLEN):
    """
    Check one read and its phred+33 quality string.

    Raises:
        InvalidInput: Empty read, bad characters or quality length mismatch
        InputTooLong: Read longer than ``max_length``
    """
    if not sequence:
        raise InvalidInput("Read is empty")

    if len(sequence) > max_length:
        raise InputTooLong("read", len(sequence), max_length)

    invalid = set(sequence.upper()) - READ_BASES
    if invalid:
        raise InvalidInput(f"Read contains invalid characters: {sorted(invalid)}")

    if len(quality) != len(sequence):
        raise InvalidInput(f"Quality length {len(quality)} does not match read length {len(sequence)}")

    if any(ord(ch) < PHRED_OFFSET for ch in quality):
        raise InvalidInput("Quality string has characters below '!'",
                           suggestion="Qualities must be phred+33 encoded")


def validate_inputs(reads_file: str, config: Dict) -> Tuple[bool, List[str]]:
    """
    Validate all pipeline inputs.

    Args:
        reads_file: Path to FASTQ or FASTA reads
        config: Pipeline configuration

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []

    try:
        validate_motif(config.get('alignment', {}).get('motif'))
    except (InvalidInput, InputTooLong) as e:
        errors.append(f"Motif: {e.message}")

    from ..io.read_loader import validate_reads_file

    fmt = config.get('io', {}).get('reads_format', 'fastq')
    valid, msg = validate_reads_file(reads_file, fmt)
    if not valid:
        errors.append(f"Reads file: {msg}")

    output_dir = config.get('io', {}).get('output_dir', 'results')
    try:
        Path(output_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        errors.append(f"Cannot create output directory {output_dir}: {e}")

    max_length = config.get('alignment', {}).get('max_read_length', MAXLEN)
    if max_length > MAXLEN:
        errors.append(f"max_read_length {max_length} exceeds the {MAXLEN} supported by the aligner")

    return len(errors) == 0, errors


def validate_configuration(config: Dict) -> Tuple[bool, List[str]]:
    """
    Validate pipeline configuration.

    Args:
        config: Pipeline configuration

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []

    required_sections = ['model', 'alignment', 'io']
    for section in required_sections:
        if section not in config:
            errors.append(f"Missing configuration section: {section}")

    if 'model' in config:
        from ..algorithms.transitions import TransitionModel
        from ..errors import ConfigError
        try:
            TransitionModel.from_config(config['model'])
        except ConfigError as e:
            errors.append(f"model.{e.param_name}: {e.value} (expected {e.expected})")
        except (TypeError, ValueError) as e:
            errors.append(f"model: {e}")

    max_fraction = config.get('validation', {}).get('max_invalid_fraction', 0.1)
    if not 0.0 <= max_fraction <= 1.0:
        errors.append(f"max_invalid_fraction {max_fraction} should lie in [0, 1]")

    return len(errors) == 0, errors


__all__ = [
    'validate_motif',
    'validate_read',
    'validate_inputs',
    'validate_configuration',
]
