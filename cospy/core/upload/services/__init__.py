"""Upload services module."""
from .file_service import (
    FileValidator,
    FileSliceSource,
    BytesSliceSource,
    sha1_hex,
    sha1_of
)
from .session_service import SessionController
from .slice_service import SliceUploader

__all__ = [
    'FileValidator',
    'FileSliceSource',
    'BytesSliceSource',
    'sha1_hex',
    'sha1_of',
    'SessionController',
    'SliceUploader',
]
