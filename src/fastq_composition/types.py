from dataclasses import dataclass

from .errors import InvalidConfigError

BASES = ("A", "T", "G", "C", "N")


@dataclass(slots=True)
class FastqRecord:
    """A single 4-line FASTQ record."""
    header: str
    sequence: str
    separator: str
    quality: str


@dataclass(frozen=True, slots=True)
class FilterConfig:
    """Read selection settings, fixed for the duration of one run."""
    target_count: int
    min_avg_quality: int = 0
    max_n_count: int | None = None
    trim_length: int | None = None

    def __post_init__(self):
        for name in ("target_count", "min_avg_quality", "max_n_count", "trim_length"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise InvalidConfigError(f"{name} must be non-negative, got {value}")


@dataclass(slots=True)
class BaseComposition:
    """Percentages of each base at one 1-based position."""
    pos: int
    A: int
    T: int
    G: int
    C: int
    N: int

    def values(self) -> tuple[int, int, int, int, int]:
        return (self.A, self.T, self.G, self.C, self.N)

    def to_dict(self) -> dict:
        return {"pos": self.pos, "bases": dict(zip(BASES, self.values()))}
