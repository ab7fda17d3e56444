"""
Command-line interface for the repeat HMM aligner.
"""

import sys
import argparse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Repeat HMM - align sequencing reads against a circular tandem repeat motif",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Align every read of a FASTQ file
  %(prog)s --motif CAG --reads reads.fastq

  # FASTA reads get a uniform quality
  %(prog)s --motif AT --reads reads.fa --format fasta

  # Align a single read and print the alignment
  %(prog)s --motif AT --read ATATAT --qual IIIIII

  # Other options
  %(prog)s --config my_config.yaml --verbose
  %(prog)s --version
        """
    )

    parser.add_argument(
        '--motif',
        type=str,
        help='Repeat motif, e.g. CAG'
    )

    parser.add_argument(
        '--reads',
        type=str,
        help='Path to FASTQ or FASTA reads file'
    )

    parser.add_argument(
        '--format',
        type=str,
        choices=['fastq', 'fasta'],
        help='Reads file format (default: from config)'
    )

    # Single read mode
    parser.add_argument(
        '--read',
        type=str,
        help='Align a single read given on the command line'
    )

    parser.add_argument(
        '--qual',
        type=str,
        help='Phred+33 qualities of --read (default: all I)'
    )

    # Configuration
    parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration YAML file'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        help='Output directory'
    )

    # Model priors
    parser.add_argument('--delta', type=float, help='Deletion/insertion opening rate')
    parser.add_argument('--epsilon', type=float, help='Per-base error rate')
    parser.add_argument('--tau', type=float, help='Termination rate into the trailing flank')
    parser.add_argument('--eta', type=float, help='Read boundary rate of the null model')

    parser.add_argument(
        '--close-insertions',
        action='store_true',
        help='Allow insertions to return to match states'
    )

    parser.add_argument(
        '--version',
        action='store_true',
        help='Show version information'
    )

    # Debug
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode'
    )

    return parser


def build_overrides(args) -> dict:
    """Config overrides from parsed arguments."""
    config_overrides = {}

    if args.motif:
        config_overrides.setdefault('alignment', {})['motif'] = args.motif

    if args.reads:
        config_overrides.setdefault('io', {})['reads_file'] = args.reads

    if args.format:
        config_overrides.setdefault('io', {})['reads_format'] = args.format

    if args.output_dir:
        config_overrides.setdefault('io', {})['output_dir'] = args.output_dir

    for prior in ('delta', 'epsilon', 'tau', 'eta'):
        value = getattr(args, prior)
        if value is not None:
            config_overrides.setdefault('model', {})[prior] = value

    if args.close_insertions:
        config_overrides.setdefault('model', {})['close_insertions'] = True

    if args.verbose:
        config_overrides.setdefault('debug', {})['verbose'] = True

    if args.debug:
        config_overrides.setdefault('debug', {})['log_level'] = 'DEBUG'

    return config_overrides


def align_single_read(args) -> int:
    """Align --read against --motif and print the alignment."""
    from repeat_hmm.algorithms.lfhmm import LFHMM
    from repeat_hmm.algorithms.transitions import TransitionModel
    from repeat_hmm.core.alignment import render_alignment
    from repeat_hmm.core.utilities import build_cigar
    from repeat_hmm.errors import RepeatHMMError

    if not args.motif:
        print("ERROR: --read requires --motif", file=sys.stderr)
        return 1

    qual = args.qual if args.qual is not None else 'I' * len(args.read)

    try:
        transitions = TransitionModel.from_config(build_overrides(args).get('model', {}))
        hmm = LFHMM(args.motif, transitions=transitions)
        hmm.align(args.read, qual)
    except RepeatHMMError as e:
        print(e.formatted(), file=sys.stderr)
        return 1

    aln = render_alignment(hmm)
    print(aln.format())
    print(f"\tCIGAR:  {build_cigar(aln.cigar_ops)}")
    return 0


def main(argv=None):
    parser = build_parser()

    # Parse the arguments - this will handle --help automatically and exit
    args = parser.parse_args(argv)

    if args.version:
        from repeat_hmm import __version__
        from repeat_hmm.diagnostics.version_checker import print_version_report
        print(f"repeat-hmm {__version__}")
        print_version_report()
        return 0

    if args.read:
        return align_single_read(args)

    config_overrides = build_overrides(args)

    from repeat_hmm.pipeline.main_pipeline import main as pipeline_main

    return pipeline_main(config_path=args.config, overrides=config_overrides)


if __name__ == "__main__":
    sys.exit(main())
