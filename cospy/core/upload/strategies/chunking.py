"""
Slice planning strategies.

Implements Strategy Pattern for splitting a file into upload slices.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ...api.config import DEFAULT_SLICE_SIZE, check_slice_size
from ..models import Slice


class BaseChunkingStrategy(ABC):
    """Abstract base class for slice planning strategies."""

    @abstractmethod
    def plan(self, file_size: int, slice_size: Optional[int] = None) -> List[Slice]:
        """Compute the slice plan."""
        pass

    def calculate_chunks(self, file_size: int) -> List[Tuple[int, int]]:
        """Slice boundaries as (offset, length) tuples."""
        return [(s.offset, s.length) for s in self.plan(file_size)]


class FixedSizeChunkingStrategy(BaseChunkingStrategy):
    """
    Fixed-size slicing.

    Every slice has slice_size bytes except the last one, which holds the
    remainder. A zero-byte file has no slices.

    Example:
        >>> FixedSizeChunkingStrategy(3).calculate_chunks(7)
        [(0, 3), (3, 3), (6, 1)]
    """

    DEFAULT_CHUNK_SIZE = DEFAULT_SLICE_SIZE

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize with slice size.

        Args:
            chunk_size: Default size of each slice in bytes
        """
        check_slice_size(chunk_size)
        self.chunk_size = chunk_size

    def plan(self, file_size: int, slice_size: Optional[int] = None) -> List[Slice]:
        """
        Calculate fixed-size slices.

        Args:
            file_size: Total file size in bytes
            slice_size: Overrides the strategy's slice size

        Returns:
            ceil(file_size / slice_size) contiguous slices
        """
        size = self.chunk_size if slice_size is None else slice_size
        check_slice_size(size)
        if file_size < 0:
            raise ValueError("File size must not be negative")

        slices = []
        offset = 0
        while offset < file_size:
            length = min(size, file_size - offset)
            slices.append(Slice(index=len(slices), offset=offset, length=length))
            offset += length

        return slices


SliceSplitter = FixedSizeChunkingStrategy
