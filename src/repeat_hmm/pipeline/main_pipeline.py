"""
Pipeline aligning a file of reads against one repeat motif.
"""

import logging
from pathlib import Path
from typing import Dict, Any, Optional, List

import yaml

from ..algorithms.lfhmm import LFHMM, MAXLEN
from ..algorithms.transitions import TransitionModel
from ..config.config_loader import DEFAULT_CONFIG_PATH, get_default_config, merge_config
from ..core.alignment import render_alignment
from ..core.log_tool import LogTool
from ..core.utilities import build_cigar, validate_alignment
from ..errors import InputTooLong, InvalidInput, TracebackInvariantViolation

LOGGER_NAME = 'repeat_hmm'


def load_config(config_path: str = None) -> Dict[str, Any]:
    """Load configuration from YAML file. Fails if file does not exist."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict):
        raise ValueError(f"Invalid YAML format in {config_path}")

    config['_source'] = str(config_path.resolve())
    return config


def setup_logging(config: Dict[str, Any]) -> logging.Logger:
    """Setup logging configuration."""
    log_dir = Path(config['io']['logs_dir'])
    log_dir.mkdir(parents=True, exist_ok=True)

    log_level_str = config['debug'].get('log_level', 'INFO')
    if config['debug'].get('verbose') and log_level_str.upper() == 'INFO':
        log_level_str = 'DEBUG'
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Remove existing handlers
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    # File handler
    fh = logging.FileHandler(log_dir / 'pipeline.log')
    fh.setLevel(log_level)

    # Console handler
    ch = logging.StreamHandler()
    ch.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    fh.setFormatter(formatter)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)

    return logger


def align_reads(
    hmm: LFHMM,
    reads,
    logger: logging.Logger,
    validate: bool = True,
    max_length: int = MAXLEN,
    perf_monitor=None
) -> List[Dict[str, Any]]:
    """
    Align reads one after the other with a single aligner.

    Reads that are too long or malformed, or that have no finite path,
    are logged and recorded as skipped; any other error propagates.
    """
    from ..diagnostics.validation import validate_read

    results = []
    for record in reads:
        entry = {
            'name': record.name,
            'length': len(record.sequence),
            'status': 'aligned',
            'message': None,
            'alignment': None,
        }
        try:
            if validate:
                validate_read(record.sequence, record.quality, max_length)
            hmm.align(record.sequence, record.quality)
        except (InputTooLong, InvalidInput) as e:
            logger.warning(f"Skipping read {record.name}: {e.message}")
            entry['status'] = 'skipped'
            entry['message'] = e.message
            results.append(entry)
            continue
        except TracebackInvariantViolation as e:
            # no finite path, e.g. the read starts with N
            logger.warning(f"Read {record.name} could not be aligned: {e.message}")
            entry['status'] = 'unaligned'
            entry['message'] = e.message
            results.append(entry)
            continue

        aln = render_alignment(hmm)
        ok, problems = validate_alignment(aln)
        if not ok:
            for problem in problems:
                logger.warning(f"Read {record.name}: {problem}")

        logger.debug(f"{record.name}: score={aln.score:.4f} copies={aln.repeat_copies} "
                     f"cigar={build_cigar(aln.cigar_ops)}")

        entry['alignment'] = aln
        results.append(entry)

        if perf_monitor is not None:
            perf_monitor.record_reads()

    return results


def run_alignment_pipeline(config: Dict[str, Any], logger: logging.Logger) -> int:
    """
    Core alignment pipeline logic.

    Args:
        config: Configuration dictionary
        logger: Logger instance

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    from ..diagnostics.validation import validate_inputs, validate_configuration, validate_motif
    from ..diagnostics.version_checker import check_versions
    from ..diagnostics.performance import PerformanceMonitor
    from ..io.read_loader import read_sequencing_reads
    from ..io.results_writer import save_all_results, save_performance_report

    check_versions()

    reads_file = config['io'].get('reads_file')
    if not reads_file:
        logger.error("No reads file given. Set io.reads_file or pass --reads.")
        return 1

    ok, errors = validate_configuration(config)
    if not ok:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    validate = config.get('validation', {}).get('validate_inputs', True)
    if validate:
        ok, errors = validate_inputs(reads_file, config)
        if not ok:
            for error in errors:
                logger.error(f"Validation error: {error}")
            return 1

    motif = validate_motif(config['alignment'].get('motif'))
    transitions = TransitionModel.from_config(config.get('model', {}))
    logger.info(f"Motif: {motif}")
    logger.info(f"Transition model: {transitions}")

    hmm = LFHMM(
        motif,
        log_tool=LogTool(),
        transitions=transitions,
        dump_matrices=config['debug'].get('dump_matrices', False),
    )

    fmt = config['io'].get('reads_format', 'fastq')
    max_length = config['alignment'].get('max_read_length', MAXLEN)
    logger.info(f"Aligning reads from {reads_file} ({fmt})")

    perf_config = config.get('performance', {})
    perf_monitor = None
    if perf_config.get('monitor', True):
        perf_monitor = PerformanceMonitor(perf_config.get('sampling_interval', 1.0))

    try:
        if perf_monitor is not None:
            perf_monitor.start()
        results = align_reads(
            hmm,
            read_sequencing_reads(reads_file, fmt),
            logger,
            validate=validate,
            max_length=max_length,
            perf_monitor=perf_monitor,
        )
    finally:
        if perf_monitor is not None:
            perf_monitor.stop()

    aligned = sum(1 for e in results if e['alignment'] is not None)
    skipped = len(results) - aligned
    logger.info(f"Aligned {aligned} of {len(results)} reads ({skipped} skipped)")

    max_invalid = config.get('validation', {}).get('max_invalid_fraction', 0.1)
    if results and skipped / len(results) > max_invalid:
        logger.warning(f"{skipped / len(results):.1%} of reads were skipped, "
                       f"above the {max_invalid:.1%} threshold")

    output_dir = config['io'].get('output_dir', 'results')
    base_name = config['io'].get('base_name')
    saved = save_all_results(results, motif, output_dir, base_name, config)
    for key, path in saved.items():
        logger.info(f"  {key}: {path}")

    if perf_monitor is not None:
        report = perf_monitor.get_report()
        save_performance_report(report, output_dir, base_name)
        logger.info(f"\n{perf_monitor.format_report()}")

    logger.info("Pipeline completed successfully!")
    return 0


def main(config_path: Optional[str] = None, overrides: Optional[Dict] = None) -> int:
    """Main pipeline entry point."""
    try:
        config = merge_config(get_default_config(), load_config(config_path))
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"ERROR loading configuration: {e}")
        return 1

    config = merge_config(config, overrides)

    logger = setup_logging(config)
    logger.info("Starting repeat HMM pipeline")
    logger.info(f"Configuration loaded from {config.get('_source', 'default')}")

    try:
        return run_alignment_pipeline(config, logger)
    except Exception as e:
        logger.error(f"Pipeline failed with error: {e}", exc_info=True)
        return 1


# Alias for backward compatibility
run_pipeline = main
