"""
Listing entries.

Folder listings return 'infos' items; items with a file size are files,
the rest are folders.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


@dataclass(frozen=True)
class CosObject:
    """
    Common attributes of a listing entry.

    Attributes:
        name: Entry name, without the parent path
        biz_attr: Caller metadata
        ctime: Creation time (Unix timestamp)
        mtime: Modification time (Unix timestamp)
        raw: Entry as returned by the server
    """
    name: str
    biz_attr: str = ''
    ctime: Optional[int] = None
    mtime: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_folder(self) -> bool:
        return False

    @property
    def is_file(self) -> bool:
        return not self.is_folder


@dataclass(frozen=True)
class FolderObject(CosObject):
    """A folder entry."""

    @property
    def is_folder(self) -> bool:
        return True


@dataclass(frozen=True)
class FileObject(CosObject):
    """A file entry."""
    size: int = 0
    sha: Optional[str] = None
    access_url: Optional[str] = None


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def object_from_info(info: Dict[str, Any]) -> CosObject:
    """Build a FileObject or FolderObject from one listing item."""
    name = str(info.get('name', '')).rstrip('/')
    common = {
        'name': name,
        'biz_attr': info.get('biz_attr') or '',
        'ctime': _as_int(info.get('ctime')),
        'mtime': _as_int(info.get('mtime')),
        'raw': dict(info),
    }
    if 'filesize' in info or 'filelen' in info:
        return FileObject(
            size=_as_int(info.get('filesize', info.get('filelen'))) or 0,
            sha=info.get('sha'),
            access_url=info.get('access_url'),
            **common
        )
    return FolderObject(**common)
