import enum
import json
from typing import Sequence

import numpy as np

from .errors import AggregatorStateError, InvalidBaseError
from .types import BASES, BaseComposition

# Row index of each base in the count table, -1 for anything else
_BASE2IDX = np.full(256, -1, dtype=np.int8)
for i, b in enumerate(b"ATGCN"):
    _BASE2IDX[b] = i


class AggregatorState(enum.Enum):
    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"


def to_percentages(counts: np.ndarray) -> np.ndarray:
    """
    Convert base counts to whole percentages of their column total.

    Works on a single column of five counts or on a table of columns. Halves
    round away from zero. A column with no observations stays all zero.

    :param counts: Array whose last axis holds the A, T, G, C, N counts.
    :returns: Integer array of the same shape.
    """
    counts = np.asarray(counts, dtype=np.int64)
    totals = counts.sum(axis=-1, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        scaled = np.where(totals > 0, counts / totals * 100, 0.0)
    return np.floor(scaled + 0.5).astype(np.int64)


class CompositionAggregator:
    """
    Per-position base counts over a set of reads.

    Columns are added as longer reads arrive and are never removed. Once
    :meth:`percentage` has run the aggregator is finalized and refuses any
    further extraction.
    """

    def __init__(self, length: int = 0):
        self._counts = np.zeros((length, len(BASES)), dtype=np.int64)
        self._percentages: np.ndarray | None = None
        self.reads_extracted = 0

    @property
    def state(self) -> AggregatorState:
        if self._percentages is not None:
            return AggregatorState.FINALIZED
        if self.reads_extracted:
            return AggregatorState.ACCUMULATING
        return AggregatorState.EMPTY

    @property
    def length(self) -> int:
        return self._counts.shape[0]

    def _ensure_open(self) -> None:
        if self._percentages is not None:
            raise AggregatorStateError("Composition already converted to percentages")

    def reserve(self, length: int) -> None:
        """Make sure at least ``length`` columns exist."""
        self._ensure_open()
        current = self._counts.shape[0]
        if length <= current:
            return
        grown = np.zeros((length, len(BASES)), dtype=np.int64)
        grown[:current] = self._counts
        self._counts = grown

    def extract(self, sequence: str) -> None:
        """Count every base of ``sequence`` into the column at its position."""
        self._ensure_open()
        try:
            raw = sequence.encode("ascii")
        except UnicodeEncodeError as exc:
            raise InvalidBaseError(sequence[exc.start], exc.start + 1) from exc

        idx = _BASE2IDX[np.frombuffer(raw, dtype=np.uint8)]
        invalid = np.flatnonzero(idx < 0)
        if invalid.size:
            position = int(invalid[0])
            raise InvalidBaseError(sequence[position], position + 1)

        self.reserve(len(idx))
        self._counts[np.arange(len(idx)), idx] += 1
        self.reads_extracted += 1

    def counts(self) -> np.ndarray:
        """Return a copy of the raw count table, one row per position."""
        return self._counts.copy()

    def column(self, pos: int) -> dict[str, int]:
        """Return the raw counts at 1-based position ``pos``."""
        if not 1 <= pos <= self.length:
            raise IndexError(f"Position {pos} outside 1..{self.length}")
        return dict(zip(BASES, (int(v) for v in self._counts[pos - 1])))

    def percentage(self) -> list[BaseComposition]:
        """Finalize the counts into percentages. May only be called once."""
        self._ensure_open()
        self._percentages = to_percentages(self._counts)
        return self.table()

    def table(self) -> list[BaseComposition]:
        if self._percentages is None:
            raise AggregatorStateError("Percentages have not been computed yet")
        return [
            BaseComposition(pos, *(int(v) for v in row))
            for pos, row in enumerate(self._percentages, start=1)
        ]


def format_json(table: Sequence[BaseComposition]) -> str:
    document = {"lib": [column.to_dict() for column in table], "len": len(table)}
    return json.dumps(document, separators=(",", ":"))


def format_tsv(table: Sequence[BaseComposition]) -> str:
    return "\t".join(str(value) for column in table for value in column.values())


def load_json(text: str) -> tuple[int, list[BaseComposition]]:
    """Parse a composition JSON document into its length and rows sorted by position."""
    document = json.loads(text)
    if not isinstance(document, dict) or "lib" not in document:
        raise ValueError("Composition JSON must be an object with a 'lib' list")

    table: list[BaseComposition] = []
    for entry in document["lib"]:
        bases = entry["bases"]
        missing = set(BASES) - set(bases)
        if missing:
            raise ValueError(f"Position {entry.get('pos')} is missing bases: {sorted(missing)}")
        table.append(BaseComposition(int(entry["pos"]), *(int(bases[b]) for b in BASES)))
    table.sort(key=lambda column: column.pos)
    return int(document.get("len", len(table))), table
