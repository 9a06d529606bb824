class FastqCompositionError(ValueError):
    """Base class for fatal errors raised on malformed input."""


class FastqFormatError(FastqCompositionError):
    """The input does not decode as UTF-8 FASTQ text."""


class InconsistentLengthError(FastqCompositionError):
    """A record's length differs from the previous one and trimming cannot fix it."""

    def __init__(self, sequence: str, quality: str, expected: int, found: int):
        self.sequence = sequence
        self.quality = quality
        self.expected = expected
        self.found = found
        super().__init__(
            f"Reads have inconsistent lengths. Offending read:\n{sequence}\n{quality}\n"
            f"Expected length {expected} but found {found}"
        )


class InvalidBaseError(FastqCompositionError):
    """A sequence holds a symbol outside A, T, G, C and N."""

    def __init__(self, symbol: str, position: int):
        self.symbol = symbol
        self.position = position
        super().__init__(f"Invalid character {symbol!r} found in read at position {position}")


class InvalidConfigError(FastqCompositionError):
    """A filter setting is out of range."""


class AggregatorStateError(RuntimeError):
    """The composition aggregator was used after it was finalized."""


class ColorspaceDetected(Exception):
    """Raised when a read looks like colorspace data; ends the run cleanly."""

    def __init__(self, sequence: str):
        self.sequence = sequence
        super().__init__(f"Found numbers in read {sequence!r}, this is probably colorspace")
