"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
"""
from typing import Protocol, Dict, Any, List, Tuple, Optional, Mapping, Callable

from .models import Slice

ProgressCallback = Callable[[float], None]


class ChunkingStrategy(Protocol):
    """
    Protocol for slice planning strategies.
    """

    def plan(self, file_size: int, slice_size: Optional[int] = None) -> List[Slice]:
        """
        Compute the ordered slice plan of a file.

        Args:
            file_size: Total file size in bytes
            slice_size: Slice size, strategy default when None

        Returns:
            Slices in increasing offset order
        """
        ...

    def calculate_chunks(self, file_size: int) -> List[Tuple[int, int]]:
        """
        Calculate slice boundaries with the strategy's slice size.

        Returns:
            List of (offset, length) tuples
        """
        ...


class SliceSource(Protocol):
    """
    Uniform random-access reader over an upload source.

    Implemented by file handles and in-memory buffers so the uploader does not
    care where bytes come from.
    """

    @property
    def size(self) -> int:
        """Total size in bytes."""
        ...

    async def open(self) -> None:
        """Acquire underlying resources."""
        ...

    async def read_range(self, offset: int, length: int) -> bytes:
        """
        Read a byte range.

        Args:
            offset: Start position in bytes
            length: Number of bytes

        Returns:
            Exactly `length` bytes (fewer only at end of source)
        """
        ...

    async def close(self) -> None:
        """Release underlying resources."""
        ...


class SignedRequestProtocol(Protocol):
    """Transport capability: one request, decoded JSON response."""

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
        json_data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> Dict[str, Any]:
        ...
