from .cmd import AcceptedReads, run_core, run_json, run_tsv, sample_fastq
from .composition import (
    AggregatorState,
    CompositionAggregator,
    format_json,
    format_tsv,
    load_json,
    to_percentages,
)
from .errors import (
    AggregatorStateError,
    ColorspaceDetected,
    FastqCompositionError,
    FastqFormatError,
    InconsistentLengthError,
    InvalidBaseError,
    InvalidConfigError,
)
from .io import FastQReader, FastQWriter, open_input, open_output
from .sampling import ReservoirSampler, SamplePool
from .types import BASES, BaseComposition, FastqRecord, FilterConfig
from .validate import ReadValidator, average_quality, count_n
