from .read_loader import (
    ReadRecord,
    guess_format,
    validate_reads_file,
    read_sequencing_reads,
    get_reads_stats
)

from .results_writer import (
    save_all_results,
    save_performance_report,
    save_configuration
)

__all__ = [
    # Read loader functions
    'ReadRecord',
    'guess_format',
    'validate_reads_file',
    'read_sequencing_reads',
    'get_reads_stats',

    # Results writer functions
    'save_all_results',
    'save_performance_report',
    'save_configuration',
]
