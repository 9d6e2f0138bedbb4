"""Upload strategies module."""
from .chunking import BaseChunkingStrategy, FixedSizeChunkingStrategy, SliceSplitter

__all__ = [
    'BaseChunkingStrategy',
    'FixedSizeChunkingStrategy',
    'SliceSplitter',
]
