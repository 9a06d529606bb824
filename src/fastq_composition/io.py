import gzip
import logging
import sys
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, TextIO

from .errors import FastqFormatError, InconsistentLengthError
from .types import FastqRecord

logger = logging.getLogger(__name__)


class FastQReader:
    """
    A streaming FASTQ reader that yields one 4-line record at a time.

    Sequence and quality lengths are checked against the previous record.
    A change in length is only tolerated when a trim length at or below the
    previous length will cut every read down to the same size anyway.
    """
    def __init__(self, handle: BinaryIO | TextIO, trim_length: int | None = None):
        self.handle = handle
        self.trim_length = trim_length
        self.records_read = 0
        self._line_number = 0
        self._sequence_length: int | None = None
        self._quality_length: int | None = None

    def _readline(self) -> str | None:
        try:
            line = self.handle.readline()
            if isinstance(line, bytes):
                line = line.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FastqFormatError(
                f"Error reading line {self._line_number + 1}. Make sure the input is UTF-8"
            ) from exc
        if not line:
            return None
        self._line_number += 1
        return line.rstrip("\r\n")

    def read_next(self) -> FastqRecord | None:
        """Read the next record, or return None once the stream is exhausted."""
        lines: list[str] = []
        for _ in range(4):
            line = self._readline()
            if line is None:
                if lines:
                    logger.debug(f"Dropping incomplete record of {len(lines)} line(s) at end of input")
                else:
                    logger.debug("Input reading finished")
                return None
            lines.append(line)

        record = FastqRecord(*lines)
        self._check_lengths(record)
        self.records_read += 1
        return record

    def _check_lengths(self, record: FastqRecord) -> None:
        new_lengths = (len(record.sequence), len(record.quality))
        previous_lengths = (self._sequence_length, self._quality_length)
        self._sequence_length, self._quality_length = new_lengths

        # First record sets the reference lengths
        if self.records_read == 0:
            return

        for previous, new in zip(previous_lengths, new_lengths):
            if previous == new or self._fixable_by_trimming(previous):
                continue
            raise InconsistentLengthError(record.sequence, record.quality, previous, new)

    def _fixable_by_trimming(self, previous_length: int) -> bool:
        return self.trim_length is not None and self.trim_length <= previous_length

    def __iter__(self) -> Iterator[FastqRecord]:
        while True:
            record = self.read_next()
            if record is None:
                break
            yield record

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        pass


class FastQWriter:
    """
    A FASTQ writer that can leave out any of the four lines of a record.
    """
    def __init__(
        self,
        handle: TextIO,
        *,
        header: bool = True,
        sequence: bool = True,
        separator: bool = True,
        quality: bool = True,
    ):
        self.handle = handle
        self.fields = (header, sequence, separator, quality)
        self.written = 0

    def write(self, record: FastqRecord):
        lines = (record.header, record.sequence, record.separator, record.quality)
        for keep, line in zip(self.fields, lines):
            if keep:
                self.handle.write(f"{line}\n")
        self.written += 1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.handle.flush()


@contextmanager
def open_input(path: Path | None, compressed: bool = False) -> Iterator[BinaryIO]:
    """Yield a binary stream over a file, or stdin when no path is given."""
    with ExitStack() as stack:
        if path is None:
            raw = sys.stdin.buffer
        else:
            raw = stack.enter_context(open(path, "rb"))
        if compressed:
            raw = stack.enter_context(gzip.GzipFile(fileobj=raw, mode="rb"))

        # FastQReader decodes line by line so decode errors keep their line number
        yield raw


@contextmanager
def open_output(path: Path | None) -> Iterator[TextIO]:
    """Yield a text stream appending to a file, or stdout when no path is given."""
    if path is None:
        yield sys.stdout
        sys.stdout.flush()
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        yield handle
