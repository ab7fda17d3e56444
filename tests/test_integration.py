"""
Integration tests for the repeat HMM pipeline.
"""
import csv
import json
import logging
import os
import tempfile
from pathlib import Path

import pytest
import yaml

from repeat_hmm.errors import (
    RepeatHMMError,
    InputTooLong,
    InvalidInput,
    TracebackInvariantViolation,
    ConfigError,
)


def create_test_fastq(filename, reads):
    """Create a test FASTQ file from (name, sequence, quality) tuples."""
    with open(filename, 'w') as f:
        for name, seq, qual in reads:
            f.write(f"@{name}\n{seq}\n+\n{qual}\n")


def create_test_fasta(filename, reads):
    """Create a test FASTA file from (name, sequence) tuples."""
    with open(filename, 'w') as f:
        for name, seq in reads:
            f.write(f">{name}\n{seq}\n")


def write_config(path, tmpdir, **sections):
    config = {
        'io': {
            'output_dir': os.path.join(tmpdir, 'results'),
            'logs_dir': os.path.join(tmpdir, 'logs'),
        },
        'performance': {'monitor': True, 'sampling_interval': 0.05},
    }
    for key, value in sections.items():
        config.setdefault(key, {}).update(value)
    with open(path, 'w') as f:
        yaml.safe_dump(config, f)
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Close handlers the pipeline attaches to the package logger."""
    yield
    logger = logging.getLogger('repeat_hmm')
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_error_taxonomy():
    """Errors share a base class and keep their standard library parents."""
    e = InputTooLong("read", 300, 256)
    assert isinstance(e, RepeatHMMError)
    assert isinstance(e, ValueError)
    assert "300" in str(e) and "256" in str(e)
    assert "Suggestion" in e.formatted()

    assert isinstance(InvalidInput("bad"), ValueError)
    assert isinstance(TracebackInvariantViolation("stuck", (1, 2)), RuntimeError)
    assert "(1, 2)" in str(TracebackInvariantViolation("stuck", (1, 2)))

    c = ConfigError('delta', 2.0, "a probability")
    assert c.param_name == 'delta'
    assert "Expected: a probability" in str(c)


def test_config_loader_defaults():
    """The packaged YAML file and the built-in defaults agree."""
    from repeat_hmm.config.config_loader import ConfigLoader, DEFAULT_CONFIG_PATH

    assert DEFAULT_CONFIG_PATH.exists()
    loader = ConfigLoader()
    assert loader.get_model_params() == loader._get_default_config()['model']
    assert loader.get_alignment_params()['max_read_length'] == 256
    assert loader.get_io_params()['reads_format'] == 'fastq'
    assert loader.get_debug_params()['log_level'] == 'INFO'


def test_config_loader_missing_file(caplog):
    """A missing file falls back to defaults with a warning."""
    from repeat_hmm.config.config_loader import ConfigLoader

    with caplog.at_level(logging.WARNING):
        loader = ConfigLoader("/nonexistent/config.yaml")
    assert loader.get_model_params()['delta'] == 0.001
    assert "not found" in caplog.text


def test_merge_config():
    """Overrides replace keys within a section and keep the rest."""
    from repeat_hmm.config.config_loader import merge_config

    base = {'model': {'delta': 0.001, 'tau': 0.01}, 'io': {'output_dir': 'results'}}
    merged = merge_config(base, {'model': {'tau': 0.02}, 'extra': 1})
    assert merged['model'] == {'delta': 0.001, 'tau': 0.02}
    assert merged['io'] == {'output_dir': 'results'}
    assert merged['extra'] == 1
    assert base['model']['tau'] == 0.01


def test_load_config_strict():
    """The pipeline loader raises on a missing file and records the source."""
    from repeat_hmm.pipeline.main_pipeline import load_config

    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/config.yaml")

    config = load_config()
    assert config['_source'].endswith("default_config.yaml")


def test_read_loading():
    """FASTQ qualities are kept and FASTA reads get a default quality."""
    from repeat_hmm.io.read_loader import (
        read_sequencing_reads,
        validate_reads_file,
        get_reads_stats,
        guess_format,
    )

    with tempfile.TemporaryDirectory() as tmpdir:
        fq = os.path.join(tmpdir, "reads.fastq")
        create_test_fastq(fq, [("r1", "catcat", "IIII##"), ("r2", "CATCATCAT", "5" * 9)])

        records = list(read_sequencing_reads(fq, "fastq"))
        assert [r.name for r in records] == ["r1", "r2"]
        assert records[0].sequence == "CATCAT"
        assert records[0].quality == "IIII##"

        ok, msg = validate_reads_file(fq, "fastq")
        assert ok, msg
        assert "2 read(s)" in msg

        stats = get_reads_stats(fq, "fastq")
        assert stats['num_reads'] == 2
        assert stats['max_length'] == 9

        fa = os.path.join(tmpdir, "reads.fa")
        create_test_fasta(fa, [("r1", "ACGT")])
        records = list(read_sequencing_reads(fa, "fasta"))
        assert records[0].quality == "IIII"
        assert guess_format(fa) == "fasta"
        assert guess_format(fq + ".gz") == "fastq"

        ok, msg = validate_reads_file(fa, "fastq")
        assert not ok

        bad = os.path.join(tmpdir, "bad.fa")
        create_test_fasta(bad, [("r1", "ACGX")])
        ok, msg = validate_reads_file(bad, "fasta")
        assert not ok
        assert "invalid characters" in msg

        ok, msg = validate_reads_file(os.path.join(tmpdir, "missing.fq"))
        assert not ok


def test_validation_helpers():
    """Motif and read checks raise the matching errors."""
    from repeat_hmm.diagnostics.validation import validate_motif, validate_read, validate_configuration
    from repeat_hmm.config.config_loader import get_default_config

    assert validate_motif("cag") == "CAG"
    with pytest.raises(InvalidInput):
        validate_motif(None)
    with pytest.raises(InvalidInput):
        validate_motif("CNG")
    with pytest.raises(InputTooLong):
        validate_motif("A" * 300)

    validate_read("ACGT", "IIII")
    with pytest.raises(InvalidInput):
        validate_read("ACGT", "III")
    with pytest.raises(InvalidInput):
        validate_read("ACXT", "IIII")
    with pytest.raises(InputTooLong):
        validate_read("A" * 20, "I" * 20, max_length=10)

    config = get_default_config()
    ok, errors = validate_configuration(config)
    assert ok, errors

    config['model']['delta'] = 2.0
    ok, errors = validate_configuration(config)
    assert not ok
    assert errors[0].startswith("model.delta")


def test_end_to_end_pipeline():
    """A FASTQ run writes TSV, JSON, summary and performance files."""
    from repeat_hmm.pipeline.main_pipeline import main

    with tempfile.TemporaryDirectory() as tmpdir:
        fq = os.path.join(tmpdir, "reads.fastq")
        create_test_fastq(fq, [
            ("perfect", "ATATAT", "IIIIII"),
            ("flank", "ATATAG", "IIIIII"),
            ("too_long", "AT" * 200, "I" * 400),
            ("leading_n", "NATAT", "IIIII"),
        ])
        config_path = write_config(
            os.path.join(tmpdir, "config.yaml"), tmpdir,
            alignment={'motif': 'AT'},
            io={'reads_file': fq, 'base_name': 'run1'},
        )

        assert main(config_path) == 0

        out = Path(tmpdir) / "results" / "run1"
        with open(out / "run1.tsv") as f:
            rows = list(csv.DictReader(f, delimiter='\t'))
        assert [r['name'] for r in rows] == ["perfect", "flank", "too_long", "leading_n"]
        assert rows[0]['cigar'] == "6M1Z"
        assert rows[0]['copies'] == "3"
        assert rows[1]['cigar'] == "5M2Z"
        assert rows[2]['status'] == "skipped"
        assert rows[3]['status'] == "unaligned"

        with open(out / "run1_results.json") as f:
            results = json.load(f)
        assert results['metadata']['motif'] == "AT"
        assert results['metadata']['num_aligned'] == 2
        assert results['reads'][0]['alignment']['model'] == "ATATAT-"
        assert results['configuration']['alignment']['motif'] == "AT"

        assert (out / "run1_summary.txt").exists()
        assert (out / "file_manifest.txt").exists()
        assert (out / "performance_report.json").exists()
        assert (Path(tmpdir) / "logs" / "pipeline.log").exists()
        assert "PERFORMANCE REPORT" in (Path(tmpdir) / "logs" / "pipeline.log").read_text()


def test_pipeline_fasta_with_overrides():
    """Overrides select the motif, format and model priors."""
    from repeat_hmm.pipeline.main_pipeline import main

    with tempfile.TemporaryDirectory() as tmpdir:
        fa = os.path.join(tmpdir, "reads.fa")
        create_test_fasta(fa, [("r1", "CAGCAGCAG"), ("r2", "CAGCAGCTG")])
        config_path = write_config(os.path.join(tmpdir, "config.yaml"), tmpdir)

        overrides = {
            'alignment': {'motif': 'CAG'},
            'io': {'reads_file': fa, 'reads_format': 'fasta'},
            'model': {'close_insertions': True},
            'performance': {'monitor': False},
        }
        assert main(config_path, overrides) == 0

        with open(Path(tmpdir) / "results" / "CAG_alignments.tsv") as f:
            rows = list(csv.DictReader(f, delimiter='\t'))
        assert rows[0]['cigar'] == "9M1Z"
        assert all(r['status'] == "aligned" for r in rows)


def test_pipeline_failures():
    """Missing inputs and invalid configuration end with exit code 1."""
    from repeat_hmm.pipeline.main_pipeline import main

    assert main("/nonexistent/config.yaml") == 1

    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = write_config(os.path.join(tmpdir, "config.yaml"), tmpdir)
        assert main(config_path) == 1

        fq = os.path.join(tmpdir, "reads.fastq")
        create_test_fastq(fq, [("r1", "ACGT", "IIII")])
        assert main(config_path, {'io': {'reads_file': fq}}) == 1
        assert main(config_path, {'io': {'reads_file': fq},
                                  'alignment': {'motif': 'AC'},
                                  'model': {'tau': 5.0}}) == 1


def test_invalid_motif_leaves_no_monitor_running():
    """A motif rejected after input checks are skipped stops the run without a live sampler."""
    import threading

    from repeat_hmm.diagnostics.performance import MONITOR_THREAD_NAME
    from repeat_hmm.pipeline.main_pipeline import main

    with tempfile.TemporaryDirectory() as tmpdir:
        fq = os.path.join(tmpdir, "reads.fastq")
        create_test_fastq(fq, [("r1", "ATAT", "IIII")])
        config_path = write_config(
            os.path.join(tmpdir, "config.yaml"), tmpdir,
            validation={'validate_inputs': False},
        )

        assert main(config_path, {'io': {'reads_file': fq},
                                  'alignment': {'motif': 'XYZ'}}) == 1

    alive = [t for t in threading.enumerate() if t.name == MONITOR_THREAD_NAME and t.is_alive()]
    assert alive == []


def test_cli_single_read(capsys):
    """Single read mode prints the alignment block and CIGAR."""
    from repeat_hmm.scripts.run_pipeline import main

    assert main(["--motif", "AT", "--read", "ATATAT"]) == 0
    out = capsys.readouterr().out
    assert "Model:  ATATAT-" in out
    assert "CIGAR:  6M1Z" in out

    assert main(["--read", "ATAT"]) == 1
    assert main(["--motif", "AT", "--read", "ATAT", "--qual", "II"]) == 1


def test_cli_builds_overrides():
    """Command line options map onto config sections."""
    from repeat_hmm.scripts.run_pipeline import build_parser, build_overrides

    args = build_parser().parse_args([
        "--motif", "CAG", "--reads", "r.fq", "--format", "fastq",
        "--output-dir", "out", "--delta", "0.002", "--close-insertions", "--debug",
    ])
    overrides = build_overrides(args)
    assert overrides['alignment'] == {'motif': 'CAG'}
    assert overrides['io'] == {'reads_file': 'r.fq', 'reads_format': 'fastq', 'output_dir': 'out'}
    assert overrides['model'] == {'delta': 0.002, 'close_insertions': True}
    assert overrides['debug'] == {'log_level': 'DEBUG'}


def test_cli_pipeline_run():
    """The console entry point runs the file pipeline."""
    from repeat_hmm.scripts.run_pipeline import main

    with tempfile.TemporaryDirectory() as tmpdir:
        fq = os.path.join(tmpdir, "reads.fastq")
        create_test_fastq(fq, [("r1", "GGCGGCGGC", "I" * 9)])
        config_path = write_config(os.path.join(tmpdir, "config.yaml"), tmpdir)

        assert main(["--config", config_path, "--motif", "GGC", "--reads", fq]) == 0
        assert (Path(tmpdir) / "results" / "GGC_alignments.tsv").exists()


def test_diagnostics():
    """Version checks and the performance monitor report sensible values."""
    from repeat_hmm.diagnostics.version_checker import check_versions
    from repeat_hmm.diagnostics.performance import PerformanceMonitor

    results = check_versions()
    assert results['python']['ok']
    assert results['required_packages']['numpy']['ok']
    assert results['required_packages']['PyYAML']['ok']

    monitor = PerformanceMonitor(sampling_interval=0.01)
    monitor.start()
    monitor.record_reads(3)
    monitor.stop()
    report = monitor.get_report()
    assert report['reads_processed'] == 3
    assert report['total_time_seconds'] >= 0
    assert "PERFORMANCE REPORT" in monitor.format_report()
