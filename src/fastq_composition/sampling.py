import math
from typing import Generic, Iterable, Iterator, TypeVar

import numpy as np

T = TypeVar("T")

# Marks a slot the sampler never filled; no real read compares identical to it
_EMPTY = object()


class SamplePool(Generic[T]):
    """
    Fixed-capacity pool of sampled items, filled in stream order and then
    overwritten in place by the sampler.
    """
    def __init__(self, capacity: int):
        self.capacity = capacity
        self._slots: list = [_EMPTY] * capacity
        self.filled = 0

    def append(self, item: T) -> None:
        if self.filled >= self.capacity:
            raise IndexError("Sample pool is full")
        self._slots[self.filled] = item
        self.filled += 1

    def replace(self, index: int, item: T) -> None:
        if not 0 <= index < self.filled:
            raise IndexError(f"Slot {index} is not filled")
        self._slots[index] = item

    def items(self) -> Iterator[T]:
        """Yield sampled items, stopping at the first unfilled slot."""
        for item in self._slots:
            if item is _EMPTY:
                break
            yield item

    def __iter__(self) -> Iterator[T]:
        return self.items()

    def __len__(self) -> int:
        return self.filled


class ReservoirSampler:
    """
    Uniform fixed-size sampling over a stream of unknown length (Algorithm L).

    The first ``capacity`` items fill the pool. After that the sampler jumps
    ahead by a geometrically distributed number of items and overwrites a
    random slot, so the number of random draws grows with
    ``capacity * log(n / capacity)`` rather than with ``n``.
    """

    def __init__(self, capacity: int, rng: np.random.Generator | None = None):
        """
        :param capacity: Number of items to keep.
        :param rng: Random source; pass a seeded generator for reproducible samples.
        """
        if capacity < 0:
            raise ValueError(f"Sample size must be non-negative, got {capacity}")
        self.capacity = capacity
        self.rng = rng if rng is not None else np.random.default_rng()
        self.seen = 0
        self.replacements = 0

    def _uniform(self) -> float:
        # log() needs a value in the open interval (0, 1)
        u = self.rng.random()
        while u == 0.0:
            u = self.rng.random()
        return u

    def _scale(self) -> float:
        return math.exp(math.log(self._uniform()) / self.capacity)

    def _skip(self, items: Iterator[T], count: int) -> bool:
        """Consume ``count`` items, returning False if the stream ran out."""
        for _ in range(count):
            if next(items, _EMPTY) is _EMPTY:
                return False
            self.seen += 1
        return True

    def sample(self, stream: Iterable[T]) -> SamplePool[T]:
        pool: SamplePool[T] = SamplePool(self.capacity)
        if self.capacity == 0:
            return pool

        items = iter(stream)
        for item in items:
            pool.append(item)
            self.seen += 1
            if pool.filled == self.capacity:
                break
        else:
            return pool

        weight = self._scale()
        while True:
            if weight <= 0.0:
                # Nothing further would ever be picked; drain the stream
                for _ in items:
                    self.seen += 1
                break

            gap = math.floor(math.log(self._uniform()) / math.log1p(-weight))
            if not self._skip(items, gap):
                break
            item = next(items, _EMPTY)
            if item is _EMPTY:
                break
            self.seen += 1

            pool.replace(int(self.rng.integers(self.capacity)), item)
            self.replacements += 1
            weight *= self._scale()

        return pool
