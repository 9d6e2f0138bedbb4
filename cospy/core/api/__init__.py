"""COS API module: transport, configuration, signing and errors."""
from .async_client import AsyncAPIClient
from .config import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    DEFAULT_ENDPOINT,
    DEFAULT_SLICE_SIZE,
)
from .errors import CosAPIError, CosTransportError, APIErrorCodes
from .signer import SignerProtocol, StaticSigner

__all__ = [
    # Client
    'AsyncAPIClient',

    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'DEFAULT_ENDPOINT',
    'DEFAULT_SLICE_SIZE',

    # Errors
    'CosAPIError',
    'CosTransportError',
    'APIErrorCodes',

    # Signing
    'SignerProtocol',
    'StaticSigner',
]
