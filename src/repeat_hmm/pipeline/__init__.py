from .main_pipeline import main, load_config, setup_logging, align_reads, run_alignment_pipeline

# Alias for convenience
run_pipeline = main

__all__ = [
    'main',
    'run_pipeline',
    'load_config',
    'setup_logging',
    'align_reads',
    'run_alignment_pipeline',
]
