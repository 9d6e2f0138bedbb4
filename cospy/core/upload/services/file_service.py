"""
Local source validation, reading and hashing.

Single Responsibility: each class handles one specific task.
"""
from pathlib import Path
from typing import Union
import hashlib
import logging
import aiofiles

from ...exceptions import FileNotExistError

HASH_BLOCK_SIZE = 1024 * 1024

SourceLike = Union[str, Path, bytes, bytearray, memoryview]


def sha1_hex(data: bytes) -> str:
    """SHA-1 hex digest of a byte string."""
    return hashlib.sha1(data).hexdigest()


async def sha1_of(source, block_size: int = HASH_BLOCK_SIZE) -> str:
    """
    SHA-1 hex digest of a whole slice source, read block by block.

    Args:
        source: Object implementing SliceSource
        block_size: Read size per step

    Returns:
        Hex digest
    """
    digest = hashlib.sha1()
    offset = 0
    while offset < source.size:
        block = await source.read_range(offset, min(block_size, source.size - offset))
        if not block:
            break
        digest.update(block)
        offset += len(block)
    return digest.hexdigest()


class FileSliceSource:
    """
    Slice source backed by a local file.

    Uses aiofiles for non-blocking I/O and keeps one handle open for the
    whole upload. Usable as an async context manager so the handle is closed
    on every exit path.
    """

    def __init__(self, file_path: Path):
        """
        Initialize file source.

        Args:
            file_path: Path to an existing regular file
        """
        self._path = Path(file_path)
        self._size = self._path.stat().st_size
        self._handle = None
        self._logger = logging.getLogger('cospy.upload.file')

    @property
    def path(self) -> Path:
        return self._path

    @property
    def size(self) -> int:
        return self._size

    @property
    def closed(self) -> bool:
        return self._handle is None

    async def open(self) -> None:
        """Open file for reading. Re-opening an open source is a no-op."""
        if self._handle is None:
            self._handle = await aiofiles.open(self._path, 'rb')

    async def read_range(self, offset: int, length: int) -> bytes:
        """
        Read a byte range, opening the file on first use.

        Raises:
            OSError: If the file cannot be read
        """
        if self._handle is None:
            await self.open()
        await self._handle.seek(offset)
        data = await self._handle.read(length)
        self._logger.debug(f"Read range: {offset}-{offset + len(data)} ({len(data)} bytes)")
        return data

    async def close(self) -> None:
        """Close the file handle."""
        if self._handle is not None:
            await self._handle.close()
            self._handle = None

    async def __aenter__(self) -> 'FileSliceSource':
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return f"FileSliceSource({str(self._path)!r}, size={self._size})"


class BytesSliceSource:
    """Slice source backed by an in-memory buffer."""

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._data = memoryview(bytes(data))
        self._closed = True

    @property
    def size(self) -> int:
        return len(self._data)

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> None:
        self._closed = False

    async def read_range(self, offset: int, length: int) -> bytes:
        return self._data[offset:offset + length].tobytes()

    async def close(self) -> None:
        self._closed = True

    async def __aenter__(self) -> 'BytesSliceSource':
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return f"BytesSliceSource(size={self.size})"


class FileValidator:
    """
    Validates upload sources before any network call.

    Responsibilities:
    - Check local file existence
    - Verify the path is a regular file
    - Wrap the source in a SliceSource
    """

    def validate(self, file_path: Union[str, Path]) -> Path:
        """
        Validate a local file for upload.

        Args:
            file_path: Path to the file

        Returns:
            Validated Path

        Raises:
            FileNotExistError: If the path does not exist or is not a regular file
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.exists():
            raise FileNotExistError(str(path))

        if not path.is_file():
            raise FileNotExistError(f"{path} (not a regular file)")

        return path

    def open_source(self, source):
        """
        Turn a path, a byte buffer or a ready SliceSource into a SliceSource.

        Args:
            source: str/Path of a local file, bytes-like data, or a SliceSource

        Raises:
            FileNotExistError: Local path missing
        """
        if isinstance(source, (str, Path)):
            slice_source = FileSliceSource(self.validate(source))
        elif isinstance(source, (bytes, bytearray, memoryview)):
            slice_source = BytesSliceSource(source)
        elif hasattr(source, 'read_range') and hasattr(source, 'size'):
            slice_source = source
        else:
            raise TypeError(f"Unsupported upload source: {type(source).__name__}")
        return slice_source
