"""
API configuration module.

Provides configuration for the COS API client and the sliced uploader.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple, Union
import os
import ssl

import aiohttp

DEFAULT_ENDPOINT = 'http://web.file.myqcloud.com/files/v1/'
DEFAULT_SLICE_SIZE = 3 * 1024 * 1024


def check_slice_size(size) -> None:
    """Raise ValueError unless size is a positive int (bool excluded)."""
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise ValueError(f"slice_size must be a positive integer, got {size!r}")


@dataclass
class ProxyConfig:
    """HTTP(S) proxy, with optional basic-auth credentials."""
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def to_aiohttp_proxy(self) -> Optional[str]:
        """Proxy URL for aiohttp, credentials embedded when set."""
        if not self.url or not (self.username and self.password) or '://' not in self.url:
            return self.url or None
        scheme, host = self.url.split('://', 1)
        return f"{scheme}://{self.username}:{self.password}@{host}"


@dataclass
class SSLConfig:
    """TLS settings for the connector."""
    verify: bool = True
    ca_file: Optional[str] = None
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """SSLContext for aiohttp, or False when verification is off."""
        if not self.verify:
            return False

        context = ssl.create_default_context(cafile=self.ca_file)
        if self.cert_file:
            context.load_cert_chain(self.cert_file, keyfile=self.key_file)
        context.check_hostname = self.check_hostname
        return context


@dataclass
class TimeoutConfig:
    """
    Request timeouts in seconds.

    Each slice request carries up to a few MiB, so reads get a long budget.
    """
    total: float = 300.0
    connect: float = 30.0
    sock_read: float = 120.0
    sock_connect: float = 30.0

    def to_aiohttp_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class APIConfig:
    """
    Complete API configuration.

    Centralizes the account, endpoint and transport options for the COS client.
    """
    app_id: str = ''
    bucket: Optional[str] = None
    endpoint: str = DEFAULT_ENDPOINT

    user_agent: str = 'cospy/1.0.0'

    # Default slice size for sliced uploads, the server may override it
    slice_size: int = DEFAULT_SLICE_SIZE

    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)

    extra_headers: Dict[str, str] = field(default_factory=dict)

    # Server codes that signal a slice hash mismatch
    integrity_error_codes: Tuple[int, ...] = ()

    log_level: int = 20  # logging.INFO

    limit_per_host: int = 10
    limit: int = 100

    def __post_init__(self):
        self.app_id = str(self.app_id)
        check_slice_size(self.slice_size)

    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'APIConfig':
        """Create configuration with proxy."""
        return cls(
            proxy=ProxyConfig(url=proxy_url),
            **kwargs
        )

    @classmethod
    def insecure(cls, **kwargs) -> 'APIConfig':
        """Create configuration with SSL verification disabled."""
        return cls(
            ssl=SSLConfig(verify=False, check_hostname=False),
            **kwargs
        )

    @classmethod
    def from_env(cls, **kwargs) -> 'APIConfig':
        """
        Create configuration from COS_APP_ID, COS_BUCKET and COS_ENDPOINT.

        Explicit keyword arguments win over the environment.
        """
        env = {
            'app_id': os.environ.get('COS_APP_ID'),
            'bucket': os.environ.get('COS_BUCKET'),
            'endpoint': os.environ.get('COS_ENDPOINT'),
        }
        values = {k: v for k, v in env.items() if v}
        values.update(kwargs)
        return cls(**values)

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
