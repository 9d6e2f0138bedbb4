"""
Data models for upload module.

Uses dataclasses for type-safe data structures.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Any, Optional, Union, FrozenSet, Set

from ...api.config import check_slice_size


@dataclass(frozen=True)
class UploadOptions:
    """
    Options recognised by a sliced upload.

    Attributes:
        bucket: Target bucket, defaults to the configured bucket
        biz_attr: Opaque caller metadata passed through unmodified
        session: Session id of a previous upload to resume
        slice_size: Slice size in bytes, defaults to the configured size
        resume: Resume explicitly requested (requires session)
        insert_only: Refuse to overwrite an existing object
        uploaded_offsets: Offsets the caller knows the server already holds
    """
    bucket: Optional[str] = None
    biz_attr: Optional[Union[str, int]] = None
    session: Optional[str] = None
    slice_size: Optional[int] = None
    resume: bool = False
    insert_only: bool = True
    uploaded_offsets: FrozenSet[int] = frozenset()

    def __post_init__(self):
        if self.slice_size is not None:
            check_slice_size(self.slice_size)
        if not isinstance(self.uploaded_offsets, frozenset):
            object.__setattr__(self, 'uploaded_offsets', frozenset(self.uploaded_offsets))

    @property
    def is_resume(self) -> bool:
        """True when a session id or an explicit resume was given."""
        return self.resume or self.session is not None

    def with_defaults(self, slice_size: int, bucket: Optional[str] = None) -> 'UploadOptions':
        """Return a copy with the slice size (and bucket) filled in."""
        return replace(
            self,
            slice_size=self.slice_size or slice_size,
            bucket=self.bucket or bucket
        )


@dataclass
class UploadSession:
    """
    Server-side state of one sliced upload.

    Mutated as slices are acknowledged; frozen once the upload completes.
    """
    session_id: Optional[str]
    file_size: int
    sha: str
    slice_size: int
    uploaded_offsets: Set[int] = field(default_factory=set)
    resumed: bool = False
    completed: bool = False
    init_response: Dict[str, Any] = field(default_factory=dict)

    def mark_uploaded(self, offset: int) -> None:
        """Record an acknowledged slice offset."""
        if self.completed:
            raise RuntimeError(f"Session {self.session_id} is already complete")
        self.uploaded_offsets.add(offset)

    def is_uploaded(self, offset: int) -> bool:
        return offset in self.uploaded_offsets

    def complete(self) -> None:
        self.completed = True


@dataclass(frozen=True)
class Slice:
    """
    A contiguous byte range of the source uploaded as one request.

    Attributes:
        index: Slice index
        offset: Start position in bytes
        length: Slice size in bytes
    """
    index: int
    offset: int
    length: int

    @property
    def end(self) -> int:
        """Returns the exclusive end position."""
        return self.offset + self.length


@dataclass(frozen=True)
class SliceAck:
    """Server acknowledgement of one slice."""
    offset: int
    length: int
    sha: str
    response: Dict[str, Any] = field(default_factory=dict)

    @property
    def data(self) -> Dict[str, Any]:
        data = self.response.get('data')
        return data if isinstance(data, dict) else {}

    @property
    def is_final(self) -> bool:
        """True when the response carries completed-file metadata."""
        return is_completed_response(self.response)


class UploadStatus(str, Enum):
    SUCCESS = 'success'
    PARTIAL = 'partial'
    FAILED = 'failed'


class UploadState(str, Enum):
    """States of the sliced upload state machine."""
    INIT = 'init'
    SESSIONED = 'sessioned'
    UPLOADING = 'uploading'
    FINALIZING = 'finalizing'
    DONE = 'done'
    FAILED = 'failed'


@dataclass
class UploadProgress:
    """
    Upload progress information.

    Attributes:
        total_slices: Total number of slices
        uploaded_slices: Number of uploaded slices
        total_bytes: Total file size
        uploaded_bytes: Bytes uploaded so far (end of the last acknowledged slice)
    """
    total_slices: int
    uploaded_slices: int = 0
    total_bytes: int = 0
    uploaded_bytes: int = 0

    @property
    def fraction(self) -> float:
        """Completion in [0, 1]; exactly 1.0 once every byte is acknowledged."""
        if self.total_bytes == 0:
            return 1.0 if self.uploaded_slices >= self.total_slices else 0.0
        if self.uploaded_bytes >= self.total_bytes:
            return 1.0
        return self.uploaded_bytes / self.total_bytes

    @property
    def percentage(self) -> float:
        """Returns upload progress as percentage."""
        return self.fraction * 100

    @property
    def is_complete(self) -> bool:
        """Returns True if upload is complete."""
        return self.uploaded_slices >= self.total_slices


@dataclass(frozen=True)
class UploadResult:
    """
    Terminal value of a sliced upload.

    Attributes:
        status: SUCCESS, PARTIAL or FAILED
        server_response: Last server response (final slice or init)
        session_id: Session id, usable to resume a failed upload
        error: Error that moved the upload to FAILED
        file_size: Size of the uploaded source
    """
    status: UploadStatus
    server_response: Dict[str, Any] = field(default_factory=dict)
    session_id: Optional[str] = None
    error: Optional[Exception] = None
    file_size: int = 0

    @property
    def ok(self) -> bool:
        return self.status == UploadStatus.SUCCESS

    @property
    def data(self) -> Dict[str, Any]:
        data = self.server_response.get('data')
        return data if isinstance(data, dict) else {}

    @property
    def access_url(self) -> Optional[str]:
        return self.data.get('access_url')

    def raise_for_error(self) -> 'UploadResult':
        """Raise the attached error of a FAILED result, return self otherwise."""
        if self.status == UploadStatus.FAILED and self.error is not None:
            raise self.error
        return self


def is_completed_response(response: Dict[str, Any]) -> bool:
    """A response describes a completed file when its data has an access_url."""
    data = response.get('data') if isinstance(response, dict) else None
    return isinstance(data, dict) and bool(data.get('access_url'))
