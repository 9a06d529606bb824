import argparse
import itertools
import logging
import time
from pathlib import Path
from typing import Iterable, Iterator

import numpy as np

from .composition import CompositionAggregator, format_json, format_tsv
from .errors import ColorspaceDetected
from .io import FastQReader, FastQWriter, open_input, open_output
from .plot import plot_composition, read_composition
from .sampling import ReservoirSampler
from .types import BaseComposition, FastqRecord, FilterConfig
from .validate import ReadValidator

logger = logging.getLogger(__name__)

MODES = ("sample", "direct")


class AcceptedReads:
    """
    The records of a reader that pass validation, trimmed.

    Iterating yields trimmed sequences; :meth:`records` yields whole records.
    Colorspace input ends the stream early instead of raising, and
    ``stop_reason`` tells the two endings apart.
    """
    def __init__(self, reader: FastQReader, validator: ReadValidator):
        self.reader = reader
        self.validator = validator
        self.stop_reason: str | None = None

    def records(self) -> Iterator[FastqRecord]:
        for record in self.reader:
            try:
                accepted = self.validator.check(record)
            except ColorspaceDetected as exc:
                logger.info(f"{exc} - stopping")
                self.stop_reason = "colorspace"
                return
            if accepted:
                yield self.validator.trim(record)
        self.stop_reason = "eof"

    def __iter__(self) -> Iterator[str]:
        for record in self.records():
            yield record.sequence


def select_reads(
    stream: Iterable, target_count: int, mode: str, rng: np.random.Generator | None = None
) -> Iterable:
    """
    Choose which accepted items go downstream.

    ``sample`` keeps a uniform random sample of ``target_count`` items.
    ``direct`` takes items in input order and stops once the item at index
    ``target_count`` has been taken, so the bound is inclusive.
    """
    if mode == "sample":
        return ReservoirSampler(target_count, rng).sample(stream)
    if mode == "direct":
        return itertools.islice(stream, target_count + 1)
    raise ValueError(f"Unknown mode {mode!r}, expected one of {MODES}")


def run_core(
    reader: FastQReader,
    config: FilterConfig,
    mode: str = "sample",
    rng: np.random.Generator | None = None,
) -> tuple[CompositionAggregator, int]:
    """Return the finalized aggregator and the number of reads it holds."""
    validator = ReadValidator(config)
    stream = AcceptedReads(reader, validator)
    aggregator = CompositionAggregator()
    for sequence in select_reads(stream, config.target_count, mode, rng):
        aggregator.extract(sequence)
    aggregator.percentage()

    logger.info(
        f"Extracted {aggregator.reads_extracted:,} reads from {reader.records_read:,} records "
        f"({validator.rejected:,} rejected, {aggregator.length} positions)"
    )
    return aggregator, aggregator.reads_extracted


def run_json(
    reader: FastQReader,
    config: FilterConfig,
    mode: str = "sample",
    rng: np.random.Generator | None = None,
) -> tuple[str, int]:
    aggregator, n_reads = run_core(reader, config, mode, rng)
    return format_json(aggregator.table()), n_reads


def run_tsv(
    reader: FastQReader,
    config: FilterConfig,
    mode: str = "sample",
    rng: np.random.Generator | None = None,
) -> tuple[str, int]:
    aggregator, n_reads = run_core(reader, config, mode, rng)
    return format_tsv(aggregator.table()), n_reads


def sample_fastq(
    reader: FastQReader,
    config: FilterConfig,
    writer: FastQWriter,
    mode: str = "sample",
    rng: np.random.Generator | None = None,
) -> int:
    """Write the selected, trimmed records and return how many were written."""
    stream = AcceptedReads(reader, ReadValidator(config)).records()
    for record in select_reads(stream, config.target_count, mode, rng):
        writer.write(record)
    return writer.written


def build_config(args: argparse.Namespace) -> FilterConfig:
    return FilterConfig(
        target_count=args.target_count,
        min_avg_quality=args.min_quality,
        max_n_count=args.n_content,
        trim_length=args.trim,
    )


def _optional_path(value: str | None) -> Path | None:
    return Path(value) if value is not None else None


def run_extract(args: argparse.Namespace) -> None:
    """Extract base composition from a FASTQ file."""
    start = time.time()
    config = build_config(args)
    logger.info(f"Arguments received: {config}")
    rng = np.random.default_rng(args.seed)
    mode = "direct" if args.direct else "sample"
    output_path = _optional_path(args.output)

    with open_input(_optional_path(args.input), args.gzip) as handle:
        with FastQReader(handle, config.trim_length) as reader:
            if args.tsv:
                result, n_reads = run_tsv(reader, config, mode, rng)
            else:
                result, n_reads = run_json(reader, config, mode, rng)

    with open_output(output_path) as out:
        out.write(f"{result}\n")

    logger.info(f"Wrote composition of {n_reads:,} reads to {output_path or 'stdout'}")
    logger.info(f"Time elapsed: {time.time() - start:.2g} seconds")


def run_sample(args: argparse.Namespace) -> None:
    """Write a sample of filtered FASTQ records."""
    start = time.time()
    config = build_config(args)
    logger.info(f"Arguments received: {config}")
    rng = np.random.default_rng(args.seed)
    mode = "direct" if args.direct else "sample"
    output_path = _optional_path(args.output)

    with open_input(_optional_path(args.input), args.gzip) as handle, \
            open_output(output_path) as out:
        reader = FastQReader(handle, config.trim_length)
        with FastQWriter(
            out,
            header=not args.skip_header,
            sequence=not args.skip_seq,
            separator=not args.skip_mid,
            quality=not args.skip_quals,
        ) as writer:
            written = sample_fastq(reader, config, writer, mode, rng)

    logger.info(f"Wrote {written:,} of {reader.records_read:,} records to {output_path or 'stdout'}")
    logger.info(f"Time elapsed: {time.time() - start:.2g} seconds")


def run_plot(args: argparse.Namespace) -> None:
    """Plot base composition from JSON files."""
    input_path = Path(args.input)
    output_path = Path(args.output)
    _, table = read_composition(input_path)
    libs: list[list[BaseComposition]] = [read_composition(Path(lib))[1] for lib in args.libs]
    plot_composition(table, libs, output_path)
    logger.info(
        f"Plotted {len(table):,} positions with {len(libs)} comparison libraries to {output_path}"
    )
