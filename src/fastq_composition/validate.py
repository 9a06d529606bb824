import logging
import re

from .errors import ColorspaceDetected
from .types import FastqRecord, FilterConfig

logger = logging.getLogger(__name__)

PHRED_OFFSET = 33


def count_n(sequence: str) -> int:
    return sequence.count("N")


def average_quality(quality: str) -> int:
    """
    Integer mean of a Phred+33 encoded quality string.

    :param quality: Quality line of a FASTQ record.
    :returns: Truncated mean score, 0 for an empty string.
    """
    if not quality:
        return 0
    total = sum(ord(char) - PHRED_OFFSET for char in quality)
    return total // len(quality)


class ReadValidator:
    """
    Decides whether a FASTQ record is kept, applying in order: trimming,
    colorspace detection, N-content and average quality.
    """

    def __init__(self, config: FilterConfig):
        self.config = config
        self._colorspace = re.compile(r"\d")
        self.accepted = 0
        self.rejected = 0

    def is_colorspace(self, sequence: str) -> bool:
        """Return True if the sequence holds any digit."""
        return self._colorspace.search(sequence) is not None

    def trim(self, record: FastqRecord, config: FilterConfig | None = None) -> FastqRecord | None:
        """
        Cut sequence and quality to the configured trim length.

        :param record: Record to trim.
        :param config: Settings to use instead of the validator's own.
        :returns: The trimmed record, or None when the read is too short.
        """
        length = (config or self.config).trim_length
        if length is None:
            return record
        if len(record.sequence) < length or len(record.quality) < length:
            return None
        return FastqRecord(
            header=record.header,
            sequence=record.sequence[:length],
            separator=record.separator,
            quality=record.quality[:length],
        )

    def check(self, record: FastqRecord, config: FilterConfig | None = None) -> bool:
        """Return True if the record passes every filter.

        Raises ColorspaceDetected when the read contains digits, which ends the run.
        """
        config = config or self.config
        trimmed = self.trim(record, config)
        if trimmed is None:
            logger.debug(
                f"Read of length {len(record.sequence)} shorter than "
                f"trim length {config.trim_length} - skipping"
            )
            self.rejected += 1
            return False

        if self.is_colorspace(trimmed.sequence):
            raise ColorspaceDetected(trimmed.sequence)

        if config.max_n_count is not None:
            n_count = count_n(trimmed.sequence)
            if n_count > config.max_n_count:
                logger.debug(f"N count of current read ({n_count}) too high - skipping")
                self.rejected += 1
                return False

        quality = average_quality(trimmed.quality)
        if quality < config.min_avg_quality:
            logger.debug(f"Average quality {quality} too low - skipping")
            self.rejected += 1
            return False

        self.accepted += 1
        return True
