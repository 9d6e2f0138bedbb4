"""Upload models."""
from .upload_models import (
    UploadOptions,
    UploadSession,
    Slice,
    SliceAck,
    UploadStatus,
    UploadState,
    UploadProgress,
    UploadResult,
    is_completed_response
)

__all__ = [
    'UploadOptions',
    'UploadSession',
    'Slice',
    'SliceAck',
    'UploadStatus',
    'UploadState',
    'UploadProgress',
    'UploadResult',
    'is_completed_response'
]
