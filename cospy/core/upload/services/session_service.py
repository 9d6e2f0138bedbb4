"""
Upload session service.

Obtains a new slice-upload session from the server or resumes a known one.
"""
from typing import Dict, Any
import logging

from ...api.config import APIConfig, check_slice_size
from ...api.errors import APIErrorCodes, CosTransportError
from ...api.signer import SignerProtocol
from ...path import build_rest_url, resolve_bucket
from ...exceptions import SessionInitError
from ..models import UploadOptions, UploadSession, is_completed_response
from ..protocols import SignedRequestProtocol


class SessionController:
    """
    Creates or resumes UploadSession objects.

    Responsibilities:
    - Send the slice-upload init call (file size + whole-file sha)
    - Honour the slice size and session id chosen by the server
    - Build resumed sessions locally, without an init call
    """

    def __init__(
        self,
        api_client: SignedRequestProtocol,
        signer: SignerProtocol,
        config: APIConfig
    ):
        """
        Initialize session controller.

        Args:
            api_client: Transport used for the init call
            signer: Produces the Authorization header
            config: API configuration (endpoint, app id, default bucket)
        """
        self._api = api_client
        self._signer = signer
        self._config = config
        self._logger = logging.getLogger('cospy.upload.session')

    async def request_init(
        self,
        path: str,
        file_size: int,
        sha: str,
        options: UploadOptions
    ) -> Dict[str, Any]:
        """
        Send the raw init call.

        Returns:
            Decoded server response

        Raises:
            CosTransportError: On transport failure
        """
        bucket = resolve_bucket(options.bucket, self._config.bucket)
        url = build_rest_url(self._config.endpoint, self._config.app_id, bucket, path)
        form = {
            'op': 'upload_slice',
            'filesize': file_size,
            'sha': sha,
            'slice_size': options.slice_size,
            'biz_attr': options.biz_attr,
            'session': options.session,
            'insertOnly': 1 if options.insert_only else 0,
        }
        headers = {'Authorization': self._signer.sign(bucket, 'post', path)}
        return await self._api.request('POST', url, form=form, headers=headers)

    async def init_or_resume(
        self,
        path: str,
        file_size: int,
        sha: str,
        options: UploadOptions
    ) -> UploadSession:
        """
        Obtain the session for one upload.

        A session id in options means resume: no init call is made and the
        server stays the source of truth for stored ranges.

        Args:
            path: Fixed destination path
            file_size: Source size in bytes
            sha: Whole-source SHA-1 hex digest
            options: Upload options with defaults applied

        Returns:
            UploadSession

        Raises:
            SessionInitError: Transport failure, server rejection or malformed init response
        """
        slice_size = options.slice_size or self._config.slice_size

        if options.session:
            self._logger.info(f"Resuming upload session {options.session} for {path}")
            return UploadSession(
                session_id=options.session,
                file_size=file_size,
                sha=sha,
                slice_size=slice_size,
                uploaded_offsets=set(options.uploaded_offsets),
                resumed=True
            )

        self._logger.info(f"Initialising sliced upload of {path} ({file_size} bytes)")
        try:
            response = await self.request_init(path, file_size, sha, options)
        except CosTransportError as e:
            self._logger.error(f"Init call for {path} failed: {e}")
            raise SessionInitError(f"Init call failed: {e}", error_code=e.code) from e

        code = response.get('code')
        if not APIErrorCodes.is_success(code):
            message = APIErrorCodes.get_message(code, response.get('message'))
            self._logger.error(f"Server rejected init for {path}: {message}")
            raise SessionInitError(message, error_code=code)

        data = response.get('data') or {}
        try:
            server_slice_size = int(data.get('slice_size') or slice_size)
            check_slice_size(server_slice_size)
        except (TypeError, ValueError) as e:
            self._logger.error(f"Init response for {path} has slice_size {data.get('slice_size')!r}")
            raise SessionInitError(
                "Init response carries an invalid slice_size", error_code=code
            ) from e

        session = UploadSession(
            session_id=data.get('session'),
            file_size=file_size,
            sha=sha,
            slice_size=server_slice_size,
            init_response=response
        )

        if is_completed_response(response):
            # Content already known to the server
            self._logger.info(f"Server already holds {path}, nothing to upload")
            session.complete()
        elif not session.session_id:
            raise SessionInitError("Init response carries no session id", error_code=code)
        else:
            self._logger.debug(
                f"Session {session.session_id} opened (slice_size={session.slice_size})"
            )

        return session
