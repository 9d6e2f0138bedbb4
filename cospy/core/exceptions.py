"""
Custom exceptions for COS storage operations.

This module defines exception classes raised by path validation and the
sliced upload subsystem.
"""
from typing import Optional


class CosException(Exception):
    """Base exception for all COS-related errors."""

    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class InvalidFilePathError(CosException):
    """Raised when a path that must denote a file ends with the separator."""

    def __init__(self, path: str = '') -> None:
        self.path = path
        super().__init__(f"Invalid file path: {path!r}")


class InvalidFolderPathError(CosException):
    """Raised when a path that must denote a folder lacks the trailing separator."""

    def __init__(self, path: str = '') -> None:
        self.path = path
        super().__init__(f"Invalid folder path: {path!r}")


class MissingBucketError(CosException):
    """Raised when neither the call nor the configuration names a bucket."""

    def __init__(self) -> None:
        super().__init__("No bucket given and no default bucket configured")


class FileNotExistError(CosException):
    """Raised when the local upload source does not exist."""

    def __init__(self, path: str = '') -> None:
        self.path = path
        super().__init__(f"Local file does not exist: {path}")


class MissingSessionIdError(CosException):
    """Raised when a resume is requested without a session id."""

    def __init__(self) -> None:
        super().__init__("Resume requested but no session id was supplied")


class UploadError(CosException):
    """Base class for errors that abort a sliced upload mid-sequence."""

    def __init__(
        self,
        message: str,
        session_id: Optional[str] = None,
        offset: Optional[int] = None,
        error_code: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            session_id: Upload session the failure belongs to
            offset: Offset of the failing slice
            error_code: Server error code (if available)
        """
        self.session_id = session_id
        self.offset = offset
        super().__init__(message, error_code)


class SessionInitError(UploadError):
    """Raised when the server rejects or fails the slice-upload init call."""
    pass


class SliceTransportError(UploadError):
    """Raised on a network or protocol failure while uploading a slice."""
    pass


class SliceIntegrityError(UploadError):
    """Raised when the server reports a hash mismatch for a slice."""
    pass


class UploadCancelledError(UploadError):
    """Raised when an upload is cancelled between slices."""
    pass


class SourceChangedError(UploadError):
    """Raised when the local source returns fewer bytes than planned for a slice."""
    pass
