"""
Upload module for sliced COS uploads.

Splits a source into fixed-size slices, obtains or resumes a server session
and uploads the slices in order.
"""
from .coordinator import MultipartOrchestrator
from .models import (
    UploadOptions,
    UploadSession,
    Slice,
    SliceAck,
    UploadProgress,
    UploadResult,
    UploadState,
    UploadStatus
)
from .protocols import (
    ChunkingStrategy,
    SliceSource,
    SignedRequestProtocol,
    ProgressCallback
)
from .services import (
    FileValidator,
    FileSliceSource,
    BytesSliceSource,
    SessionController,
    SliceUploader
)
from .strategies import FixedSizeChunkingStrategy, SliceSplitter

__all__ = [
    # Main classes
    'MultipartOrchestrator',
    'SessionController',
    'SliceUploader',
    'SliceSplitter',
    'FixedSizeChunkingStrategy',

    # Sources
    'FileValidator',
    'FileSliceSource',
    'BytesSliceSource',

    # Models
    'UploadOptions',
    'UploadSession',
    'Slice',
    'SliceAck',
    'UploadProgress',
    'UploadResult',
    'UploadState',
    'UploadStatus',

    # Protocols
    'ChunkingStrategy',
    'SliceSource',
    'SignedRequestProtocol',
    'ProgressCallback',
]
