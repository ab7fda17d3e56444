"""
Diagnostic modules for the repeat HMM pipeline.
"""

from .version_checker import check_versions, print_version_report
from .performance import PerformanceMonitor
from .validation import validate_motif, validate_read, validate_inputs, validate_configuration

__all__ = [
    'check_versions',
    'print_version_report',
    'PerformanceMonitor',
    'validate_motif',
    'validate_read',
    'validate_inputs',
    'validate_configuration',
]
