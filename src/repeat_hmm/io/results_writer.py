"""
Results writing utilities for the repeat HMM pipeline.
"""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, List

from ..core.utilities import build_cigar, compute_alignment_stats, OP_NAMES, parse_cigar

logger = logging.getLogger(__name__)

TSV_COLUMNS = ['name', 'length', 'score', 'probe_len', 'copies', 'cigar', 'status']


def _output_path(output_dir: str, base_name: Optional[str]) -> Path:
    output_path = Path(output_dir)
    if base_name:
        output_path = output_path / base_name
    output_path.mkdir(parents=True, exist_ok=True)
    return output_path


def result_row(entry: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten one per-read result into a TSV row."""
    aln = entry.get('alignment')
    if aln is None:
        return {
            'name': entry['name'],
            'length': entry['length'],
            'score': '',
            'probe_len': '',
            'copies': '',
            'cigar': '',
            'status': entry['status'],
        }
    return {
        'name': entry['name'],
        'length': entry['length'],
        'score': f"{aln.score:.4f}",
        'probe_len': aln.probe_len,
        'copies': aln.repeat_copies,
        'cigar': build_cigar(aln.cigar_ops),
        'status': entry['status'],
    }


def save_all_results(
    results: List[Dict[str, Any]],
    motif: str,
    output_dir: str = "results",
    base_name: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None
) -> Dict[str, str]:
    """
    Save per-read alignment results in TSV, JSON and text form.

    Args:
        results: One dict per read with name, length, status, message and
            the rendered alignment (None for skipped reads)
        motif: Repeat motif the reads were aligned against
        output_dir: Base output directory
        base_name: Optional sub-directory and file prefix
        config: Optional configuration dictionary

    Returns:
        Dictionary of saved file paths
    """
    output_path = _output_path(output_dir, base_name)
    file_prefix = base_name if base_name else f"{motif}_alignments"

    saved_files = {}

    tsv_path = output_path / f"{file_prefix}.tsv"
    json_path = output_path / f"{file_prefix}_results.json"
    summary_path = output_path / f"{file_prefix}_summary.txt"

    # TSV, one row per read
    with open(tsv_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=TSV_COLUMNS, delimiter='\t')
        writer.writeheader()
        for entry in results:
            writer.writerow(result_row(entry))
    saved_files['tsv'] = str(tsv_path)

    # JSON with alignment rows
    aligned = [e for e in results if e.get('alignment') is not None]
    json_results = {
        'metadata': {
            'timestamp': datetime.now().isoformat(),
            'motif': motif,
            'base_name': base_name,
            'num_reads': len(results),
            'num_aligned': len(aligned),
            'num_skipped': len(results) - len(aligned),
        },
        'reads': [],
    }
    for entry in results:
        aln = entry.get('alignment')
        record = {
            'name': entry['name'],
            'length': entry['length'],
            'status': entry['status'],
        }
        if entry.get('message'):
            record['message'] = entry['message']
        if aln is not None:
            record['score'] = aln.score
            record['probe_len'] = aln.probe_len
            record['repeat_copies'] = aln.repeat_copies
            record['cigar'] = build_cigar(aln.cigar_ops)
            record['statistics'] = compute_alignment_stats(aln)
            record['alignment'] = {
                'model': aln.model,
                'ops': aln.cigar_ops,
                'repeat': aln.repeat_track,
                'read': aln.aligned_read,
            }
        json_results['reads'].append(record)

    if config:
        json_results['configuration'] = {
            k: v for k, v in config.items()
            if k not in ['_source'] and not k.startswith('__')
        }

    with open(json_path, 'w') as f:
        json.dump(json_results, f, indent=2)
    saved_files['json'] = str(json_path)

    write_run_summary(str(summary_path), results, motif)
    saved_files['summary'] = str(summary_path)

    # Manifest
    files_list_path = output_path / "file_manifest.txt"
    with open(files_list_path, 'w') as f:
        f.write("Repeat HMM Results Manifest\n")
        f.write("=" * 40 + "\n")
        f.write(f"Generated: {datetime.now().isoformat()}\n")
        f.write(f"Motif: {motif}\n")
        f.write("=" * 40 + "\n\n")
        for key, path in saved_files.items():
            f.write(f"{key}: {Path(path).name}\n")
    saved_files['manifest'] = str(files_list_path)

    logger.info(f"Saved {len(saved_files)} result files to {output_path}")
    for key, path in saved_files.items():
        logger.debug(f"  {key}: {Path(path).name}")

    return saved_files


def write_run_summary(path: str, results: List[Dict[str, Any]], motif: str):
    """Write a text summary over all reads of a run."""
    aligned = [e['alignment'] for e in results if e.get('alignment') is not None]

    totals = {op: 0 for op in OP_NAMES}
    for aln in aligned:
        for count, op in parse_cigar(build_cigar(aln.cigar_ops)):
            totals[op] += count

    with open(path, "w") as f:
        f.write("=" * 60 + "\n")
        f.write("REPEAT ALIGNMENT SUMMARY\n")
        f.write("=" * 60 + "\n\n")

        f.write(f"Motif: {motif}\n")
        f.write(f"Reads: {len(results)}\n")
        f.write(f"Aligned: {len(aligned)}\n")
        f.write(f"Skipped: {len(results) - len(aligned)}\n\n")

        if aligned:
            scores = [a.score for a in aligned]
            copies = [a.repeat_copies for a in aligned]
            f.write("Alignment Statistics:\n")
            f.write("-" * 40 + "\n")
            f.write(f"Mean score: {sum(scores) / len(scores):.4f}\n")
            f.write(f"Best score: {max(scores):.4f}\n")
            f.write(f"Mean repeat copies: {sum(copies) / len(copies):.2f}\n")
            f.write(f"Max repeat copies: {max(copies)}\n\n")

            f.write("Operations:\n")
            f.write("-" * 40 + "\n")
            for op, count in totals.items():
                f.write(f"  {OP_NAMES[op]}: {count}\n")

        skipped = [e for e in results if e.get('alignment') is None]
        if skipped:
            f.write("\nSkipped Reads:\n")
            f.write("-" * 40 + "\n")
            for e in skipped:
                f.write(f"  {e['name']}: {e.get('message', e['status'])}\n")

        f.write("\n" + "=" * 60 + "\n")


def save_performance_report(
    report: dict,
    output_dir: str = "results",
    base_name: Optional[str] = None
) -> str:
    """
    Save performance report.
    """
    output_path = _output_path(output_dir, base_name)

    report_path = output_path / "performance_report.json"
    with open(report_path, 'w') as f:
        json.dump(report, f, indent=2)

    summary_path = output_path / "performance_summary.txt"
    with open(summary_path, 'w') as f:
        f.write("Performance Report\n")
        f.write("=" * 40 + "\n")
        f.write(f"Total time: {report.get('total_time_seconds', 0):.2f} seconds\n")
        f.write(f"Peak memory: {report.get('peak_memory_mb', 0):.1f} MB\n")
        f.write(f"CPU usage: {report.get('avg_cpu_percent', 0):.1f}%\n")
        if 'reads_per_second' in report:
            f.write(f"Throughput: {report['reads_per_second']:.2f} reads/s\n")

    return str(report_path)


def save_configuration(
    config: dict,
    output_dir: str = "results",
    base_name: Optional[str] = None
) -> str:
    """
    Save pipeline configuration.
    """
    output_path = _output_path(output_dir, base_name)

    config_copy = {}
    for key, value in config.items():
        if key not in ['_source'] and not key.startswith('__'):
            try:
                json.dumps(value)
                config_copy[key] = value
            except TypeError:
                config_copy[key] = str(type(value))

    config_path = output_path / "pipeline_config.json"
    with open(config_path, 'w') as f:
        json.dump(config_copy, f, indent=2)

    return str(config_path)


__all__ = [
    'TSV_COLUMNS',
    'result_row',
    'save_all_results',
    'write_run_summary',
    'save_performance_report',
    'save_configuration',
]
