"""
Async COS API client.

Thin aiohttp transport: sends one request, decodes the JSON body and turns
transport-level failures into CosTransportError. Signing is done by callers.
"""
import json
import asyncio
import logging
from typing import Dict, Optional, Any, Mapping
import aiohttp

from .config import APIConfig
from .errors import CosTransportError
from ..logging import get_logger


class AsyncAPIClient:
    """
    Asynchronous COS API client.

    Features:
    - Full async/await support
    - Configurable proxy, SSL, timeouts
    - Connection pooling (one ClientSession per client)
    - multipart/form-data and JSON bodies

    Example:
        >>> config = APIConfig(app_id='1000', bucket='pics')
        >>> async with AsyncAPIClient(config) as client:
        ...     result = await client.request('GET', url, params={'op': 'stat'})
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize async API client.

        Args:
            config: API configuration (uses defaults if not provided)
            session: Optional externally owned aiohttp session
        """
        self._config = config or APIConfig.default()
        self._session = session
        self._owns_session = session is None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._closed = False

        self._logger = get_logger('cospy.api')
        # Only set level if root logger has no handlers (basicConfig not called)
        if not logging.getLogger().handlers:
            self._logger.setLevel(self._config.log_level)

    @property
    def config(self) -> APIConfig:
        """Get current configuration."""
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> 'AsyncAPIClient':
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or self._session.closed:
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                **self._config.get_session_kwargs()
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close client and release resources."""
        self._closed = True

        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

        if self._connector and not self._connector.closed:
            await self._connector.close()
        self._connector = None

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
        json_data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query string parameters (None values are dropped)
            form: multipart/form-data fields; bytes values are sent as file parts
            json_data: JSON body (ignored when form is given)
            headers: Extra headers, typically Authorization

        Returns:
            Decoded response object

        Raises:
            CosTransportError: Connection error, timeout, non-2xx status or
                a body that is not a JSON object
        """
        if self._closed:
            raise CosTransportError("Client is closed")

        session = await self._ensure_session()
        request_headers = dict(headers or {})
        kwargs: Dict[str, Any] = {}

        if params:
            kwargs['params'] = self._clean(params)
        if form is not None:
            kwargs['data'] = self._build_form(form)
        elif json_data is not None:
            kwargs['data'] = json.dumps(json_data)
            request_headers.setdefault('Content-Type', 'application/json')

        proxy = self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None
        method = method.upper()

        self._logger.debug(f"{method} {url} params={kwargs.get('params')}")

        try:
            async with session.request(
                method,
                url,
                headers=request_headers,
                proxy=proxy,
                **kwargs
            ) as response:
                status = response.status
                response_text = await response.text()
        except asyncio.TimeoutError as e:
            self._logger.error(f"Request timed out: {method} {url}")
            raise CosTransportError(f"Request timed out: {method} {url}") from e
        except aiohttp.ClientError as e:
            self._logger.error(f"Network error: {e}")
            raise CosTransportError(f"Network error: {e}") from e

        self._logger.debug(
            f"Response {status}: {response_text[:1000] if len(response_text) > 1000 else response_text}"
        )
        return self._parse_response(response_text, status)

    @staticmethod
    def _clean(params: Mapping[str, Any]) -> Dict[str, str]:
        return {key: str(value) for key, value in params.items() if value is not None}

    @staticmethod
    def _build_form(form: Mapping[str, Any]) -> aiohttp.FormData:
        data = aiohttp.FormData()
        for key, value in form.items():
            if value is None:
                continue
            if isinstance(value, (bytes, bytearray, memoryview)):
                data.add_field(
                    key,
                    bytes(value),
                    filename=key,
                    content_type='application/octet-stream'
                )
            else:
                data.add_field(key, str(value))
        return data

    @staticmethod
    def _parse_response(response_text: str, status: int) -> Dict[str, Any]:
        """Decode a JSON object body, raising CosTransportError when unusable."""
        try:
            payload = json.loads(response_text) if response_text else None
        except ValueError:
            payload = None

        if status >= 400:
            body = payload if isinstance(payload, dict) else {}
            raise CosTransportError(
                f"HTTP {status}: {body.get('message') or response_text[:200]}",
                status=status,
                code=body.get('code'),
                response=body
            )

        if not isinstance(payload, dict):
            raise CosTransportError(
                f"Empty or invalid response (HTTP {status})",
                status=status
            )
        return payload
