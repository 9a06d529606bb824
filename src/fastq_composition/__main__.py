import argparse
import logging
import sys

from .cmd import run_extract, run_plot, run_sample
from .errors import FastqCompositionError

logger = logging.getLogger("fastq_composition")


def add_io_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input", "-i", default=None, help="Input FASTQ file (stdin if omitted)")
    parser.add_argument(
        "--output", "-o", default=None, help="Output file, appended to (stdout if omitted)"
    )
    parser.add_argument(
        "--gzip", "-C", action="store_true", help="Decompress gzipped input"
    )


def add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("target_count", type=int, help="Target sample count")
    parser.add_argument(
        "--min", "-m", dest="min_quality", type=int, default=0,
        help="Minimum average Phred+33 quality of kept reads",
    )
    parser.add_argument(
        "--n-content", "-n", type=int, default=None, help="Maximum number of N's in kept reads"
    )
    parser.add_argument(
        "--trim", "-t", type=int, default=None, help="Trim each kept read to this length"
    )
    parser.add_argument(
        "--direct", action="store_true",
        help="Take the first reads instead of a random sample",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for the random sample"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fastq_composition",
        description="Per-position base composition of FASTQ reads",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log every skipped read"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract", help="Extract base composition of a FASTQ file as JSON or TSV"
    )
    add_filter_arguments(extract_parser)
    add_io_arguments(extract_parser)
    extract_parser.add_argument("--tsv", action="store_true", help="Write TSV instead of JSON")
    extract_parser.set_defaults(func=run_extract)

    sample_parser = subparsers.add_parser(
        "sample", help="Write a filtered sample of FASTQ records"
    )
    add_filter_arguments(sample_parser)
    add_io_arguments(sample_parser)
    sample_parser.add_argument("--skip-header", action="store_true", help="Leave out header lines")
    sample_parser.add_argument("--skip-seq", action="store_true", help="Leave out sequence lines")
    sample_parser.add_argument("--skip-mid", action="store_true", help="Leave out '+' lines")
    sample_parser.add_argument("--skip-quals", action="store_true", help="Leave out quality lines")
    sample_parser.set_defaults(func=run_sample)

    plot_parser = subparsers.add_parser(
        "plot", help="Plot base composition of a JSON file"
    )
    plot_parser.add_argument("input", help="Composition JSON from the extract command")
    plot_parser.add_argument(
        "--libs", "-l", nargs="*", default=[],
        help="Other composition JSON files of the library for comparison",
    )
    plot_parser.add_argument("--output", "-o", required=True, help="Image file to write")
    plot_parser.set_defaults(func=run_plot)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        args.func(args)
    except FastqCompositionError as exc:
        logger.error(str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
