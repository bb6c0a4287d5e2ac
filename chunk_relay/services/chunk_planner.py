"""Chunk planning: split a byte count into fixed-size ranges."""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Iterator, Tuple
from ..core.exceptions import InvalidChunkIndex, InvalidSize


@dataclass(frozen=True)
class ChunkPlan:
    """Fixed-size chunk layout for one file."""

    total_size: int
    chunk_size: int
    total_chunks: int

    def byte_range(self, index: int) -> Tuple[int, int]:
        """Return the half-open byte range [start, end) of chunk ``index``."""
        if not 0 <= index < self.total_chunks:
            raise InvalidChunkIndex(
                chunk=index, total_chunks=self.total_chunks
            )
        start = index * self.chunk_size
        end = min(start + self.chunk_size, self.total_size)
        return start, end

    def ranges(self) -> Iterator[Tuple[int, int]]:
        """Iterate over every chunk range in order."""
        for index in range(self.total_chunks):
            yield self.byte_range(index)


def _is_positive_integer(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    if isinstance(value, int):
        return value > 0
    if not math.isfinite(value) or value <= 0:
        return False
    return float(value).is_integer()


def plan_chunks(total_size, chunk_size) -> ChunkPlan:
    """
    Compute the chunk layout for ``total_size`` bytes.
    Raises InvalidSize when either size is not a positive finite integer.
    """
    if not _is_positive_integer(total_size):
        raise InvalidSize(size=str(total_size))
    if not _is_positive_integer(chunk_size):
        raise InvalidSize("Invalid chunk size", chunk_size=str(chunk_size))

    total_size = int(total_size)
    chunk_size = int(chunk_size)
    return ChunkPlan(
        total_size=total_size,
        chunk_size=chunk_size,
        total_chunks=(total_size + chunk_size - 1) // chunk_size,
    )
