"""
Remote path helpers.

Normalises object paths, checks file/folder shape and builds REST URLs.
"""
from typing import Optional
from urllib.parse import quote

from .exceptions import InvalidFilePathError, InvalidFolderPathError, MissingBucketError

SEPARATOR = '/'

FILE_ONLY = 'file_only'
FOLDER_ONLY = 'folder_only'
BOTH = 'both'


def fixed_path(path: str) -> str:
    """Prefix the path with the separator if it is missing."""
    path = str(path)
    if not path.startswith(SEPARATOR):
        path = SEPARATOR + path
    return path


def is_folder_path(path: str) -> bool:
    """A path denotes a folder when it ends with the separator."""
    return str(path).endswith(SEPARATOR)


def url_encode(path: str) -> str:
    """Percent-encode every path segment, keeping the separators."""
    return quote(path, safe=SEPARATOR)


def validate_path(path: str, mode: str = FILE_ONLY) -> str:
    """
    Check the shape of a remote path.

    Args:
        path: Remote path
        mode: FILE_ONLY, FOLDER_ONLY or BOTH

    Returns:
        The fixed path

    Raises:
        InvalidFilePathError: FILE_ONLY and the path is a folder path
        InvalidFolderPathError: FOLDER_ONLY and the path is a file path
        ValueError: Unknown mode
    """
    path = fixed_path(path)
    if mode == FILE_ONLY:
        if is_folder_path(path):
            raise InvalidFilePathError(path)
    elif mode == FOLDER_ONLY:
        if not is_folder_path(path):
            raise InvalidFolderPathError(path)
    elif mode != BOTH:
        raise ValueError(f"Unknown path mode: {mode}")
    return path


def resolve_bucket(bucket: Optional[str], default: Optional[str]) -> str:
    """Pick the per-call bucket, falling back to the configured one."""
    resolved = bucket or default
    if not resolved:
        raise MissingBucketError()
    return resolved


def build_rest_url(endpoint: str, app_id: str, bucket: str, path: str) -> str:
    """
    Build the REST URL of an object.

    Example:
        >>> build_rest_url('http://web.file.myqcloud.com/files/v1/', '1000', 'pics', '/a b.jpg')
        'http://web.file.myqcloud.com/files/v1/1000/pics/a%20b.jpg'
    """
    if not endpoint.endswith(SEPARATOR):
        endpoint += SEPARATOR
    return f"{endpoint}{app_id}/{bucket}{url_encode(fixed_path(path))}"


def resource_path(app_id: str, bucket: str, path: str) -> str:
    """Resource string used for single-use signatures."""
    return f"/{app_id}/{bucket}{url_encode(fixed_path(path))}"
