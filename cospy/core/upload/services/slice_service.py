"""
Slice upload service.

Handles uploading individual slices to COS.
"""
from typing import Any, Optional
import logging
import time

from ...api.config import APIConfig
from ...api.errors import APIErrorCodes, CosTransportError
from ...api.signer import SignerProtocol
from ...path import build_rest_url, resolve_bucket
from ...exceptions import SliceIntegrityError, SliceTransportError
from ..models import SliceAck, UploadOptions
from ..protocols import SignedRequestProtocol
from .file_service import sha1_hex


class SliceUploader:
    """
    Uploads one slice per call.

    Responsibilities:
    - Hash the slice so the server can verify it
    - Send offset, session id and bytes in one request
    - Classify failures as transport or integrity errors

    No retries happen here.
    """

    def __init__(
        self,
        api_client: SignedRequestProtocol,
        signer: SignerProtocol,
        config: APIConfig
    ):
        """
        Initialize slice uploader.

        Args:
            api_client: Transport used for slice requests
            signer: Produces the Authorization header
            config: API configuration
        """
        self._api = api_client
        self._signer = signer
        self._config = config
        self._integrity_codes = {int(c) for c in config.integrity_error_codes}
        self._logger = logging.getLogger('cospy.upload.slice')

    async def upload_one(
        self,
        path: str,
        session_id: str,
        offset: int,
        data: bytes,
        options: Optional[UploadOptions] = None
    ) -> SliceAck:
        """
        Upload a single slice.

        Args:
            path: Fixed destination path
            session_id: Upload session id
            offset: Slice offset in the file
            data: Slice bytes
            options: Upload options (bucket)

        Returns:
            SliceAck with the parsed server response

        Raises:
            ValueError: If the slice is empty
            SliceTransportError: Network failure, non-2xx or non-zero code
            SliceIntegrityError: Server reported a hash mismatch
        """
        if not data:
            raise ValueError(f"Cannot upload empty slice at offset {offset}")

        options = options or UploadOptions()
        bucket = resolve_bucket(options.bucket, self._config.bucket)
        url = build_rest_url(self._config.endpoint, self._config.app_id, bucket, path)
        sha = sha1_hex(data)
        form = {
            'op': 'upload_slice',
            'session': session_id,
            'offset': offset,
            'sha': sha,
            'filecontent': data,
        }
        headers = {'Authorization': self._signer.sign(bucket, 'post', path)}

        size_kb = len(data) / 1024
        upload_start = time.time()
        self._logger.debug(f"Uploading slice at offset {offset} ({size_kb:.1f} KB)")

        try:
            response = await self._api.request('POST', url, form=form, headers=headers)
        except CosTransportError as e:
            upload_time = time.time() - upload_start
            self._logger.error(f"Slice at offset {offset} failed after {upload_time:.2f}s: {e}")
            if self._is_integrity_failure(e.code, e.server_message):
                raise SliceIntegrityError(
                    f"Hash mismatch for slice at offset {offset}: {e}",
                    session_id=session_id, offset=offset, error_code=e.code
                ) from e
            raise SliceTransportError(
                f"Slice at offset {offset} failed: {e}",
                session_id=session_id, offset=offset, error_code=e.code
            ) from e

        self._check_response(response, session_id, offset)

        upload_time = time.time() - upload_start
        speed_kbps = (size_kb / upload_time) if upload_time > 0 else 0
        self._logger.debug(
            f"Slice at offset {offset} uploaded in {upload_time:.2f}s ({speed_kbps:.1f} KB/s)"
        )
        return SliceAck(offset=offset, length=len(data), sha=sha, response=response)

    def _check_response(self, response: dict, session_id: str, offset: int) -> None:
        """Raise when the response carries a non-success code."""
        code = response.get('code')
        if APIErrorCodes.is_success(code):
            return

        message = APIErrorCodes.get_message(code, response.get('message'))
        self._logger.error(f"Server returned error for slice at offset {offset}: {message}")
        if self._is_integrity_failure(code, response.get('message')):
            raise SliceIntegrityError(message, session_id=session_id, offset=offset, error_code=code)
        raise SliceTransportError(message, session_id=session_id, offset=offset, error_code=code)

    def _is_integrity_failure(self, code: Any, message: Optional[str]) -> bool:
        try:
            if code is not None and int(code) in self._integrity_codes:
                return True
        except (TypeError, ValueError):
            pass
        text = (message or '').lower()
        return 'sha' in text and any(word in text for word in ('mismatch', 'not match', 'check'))
