"""
cospy - Async Python SDK for COS object storage.

Usage:
    >>> from cospy import CosClient, APIConfig, StaticSigner
    >>>
    >>> config = APIConfig(app_id='1000', bucket='pics')
    >>> async with CosClient(config, StaticSigner(signature)) as cos:
    ...     result = await cos.upload_slice('/backup/db.tar', 'db.tar')
    ...     print(result.status, result.access_url)
"""
import logging
from .client import CosClient

# Configuration
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    AsyncAPIClient,
    SignerProtocol,
    StaticSigner,
    CosAPIError,
    CosTransportError,
)

# Sliced upload
from .core.upload import (
    MultipartOrchestrator,
    UploadOptions,
    UploadResult,
    UploadStatus,
    UploadProgress,
)

from .core.exceptions import (
    CosException,
    InvalidFilePathError,
    InvalidFolderPathError,
    MissingBucketError,
    FileNotExistError,
    MissingSessionIdError,
    UploadError,
    SessionInitError,
    SliceTransportError,
    SliceIntegrityError,
    UploadCancelledError,
    SourceChangedError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for cospy modules.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'cospy',
        'cospy.api',
        'cospy.client',
        'cospy.upload',
        'cospy.upload.coordinator',
        'cospy.upload.session',
        'cospy.upload.slice',
        'cospy.upload.file',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'CosClient',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'AsyncAPIClient',
    'SignerProtocol',
    'StaticSigner',
    'CosAPIError',
    'CosTransportError',
    'MultipartOrchestrator',
    'UploadOptions',
    'UploadResult',
    'UploadStatus',
    'UploadProgress',
    'CosException',
    'InvalidFilePathError',
    'InvalidFolderPathError',
    'MissingBucketError',
    'FileNotExistError',
    'MissingSessionIdError',
    'UploadError',
    'SessionInitError',
    'SliceTransportError',
    'SliceIntegrityError',
    'UploadCancelledError',
    'SourceChangedError',
    'setup_logging',
    '__version__',
]
