"""
CosClient - High-level async client for COS object storage.

Example:
    >>> config = APIConfig(app_id='1000', bucket='pics')
    >>> async with CosClient(config, StaticSigner(signature)) as cos:
    ...     await cos.create_folder('/photos/')
    ...     result = await cos.upload_slice('/photos/big.jpg', 'big.jpg')
    ...     print(result.access_url)
"""
import asyncio
from pathlib import Path
from typing import Optional, List, Dict, Any, Union, Callable

import aiofiles

from .core.api import (
    AsyncAPIClient,
    APIConfig,
    APIErrorCodes,
    CosAPIError,
    SignerProtocol,
)
from .core.exceptions import InvalidFilePathError
from .core.logging import get_logger
from .core.objects import CosObject, FolderObject, object_from_info
from .core.path import (
    BOTH,
    FILE_ONLY,
    FOLDER_ONLY,
    build_rest_url,
    resolve_bucket,
    resource_path,
    validate_path,
)
from .core.upload import (
    MultipartOrchestrator,
    SessionController,
    SliceUploader,
    UploadOptions,
    UploadResult,
)
from .core.upload.services import FileValidator, sha1_hex

LIST_PAGE_SIZE = 199


class CosClient:
    """
    Async client for folder and file operations.

    Simple operations return the decoded server response and raise
    CosAPIError when the response code is not 0. Sliced uploads return an
    UploadResult.
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        signer: Optional[SignerProtocol] = None,
        api_client: Optional[AsyncAPIClient] = None
    ):
        """
        Initialize client.

        Args:
            config: API configuration (app id, default bucket, endpoint)
            signer: Produces Authorization headers
            api_client: Optional transport, created from config when omitted
        """
        if signer is None:
            raise ValueError("A signer is required")
        self._config = config or APIConfig.default()
        self._signer = signer
        self._api = api_client or AsyncAPIClient(self._config)
        self._validator = FileValidator()
        self._logger = get_logger('cospy.client')

    @property
    def config(self) -> APIConfig:
        return self._config

    @property
    def api(self) -> AsyncAPIClient:
        return self._api

    async def __aenter__(self) -> 'CosClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the underlying transport."""
        await self._api.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _bucket(self, bucket: Optional[str]) -> str:
        return resolve_bucket(bucket, self._config.bucket)

    def _url(self, bucket: str, path: str) -> str:
        return build_rest_url(self._config.endpoint, self._config.app_id, bucket, path)

    def _resource(self, bucket: str, path: str) -> str:
        return resource_path(self._config.app_id, bucket, path)

    @staticmethod
    def _check(response: Dict[str, Any]) -> Dict[str, Any]:
        if not APIErrorCodes.is_success(response.get('code')):
            raise CosAPIError.from_response(response)
        return response

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    async def create_folder(
        self,
        path: str,
        biz_attr: Optional[Union[str, int]] = None,
        bucket: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a folder (parents are created as needed).

        Args:
            path: Folder path, must end with '/'
            biz_attr: Caller metadata returned with the folder info
            bucket: Bucket, defaults to the configured one

        Raises:
            InvalidFolderPathError: Path does not end with '/'
        """
        path = validate_path(path, FOLDER_ONLY)
        bucket = self._bucket(bucket)

        body: Dict[str, Any] = {'op': 'create'}
        if biz_attr is not None:
            body['biz_attr'] = str(biz_attr)

        headers = {'Authorization': self._signer.sign(bucket, 'post', path)}
        self._logger.info(f"Creating folder {path} in {bucket}")
        response = await self._api.request(
            'POST', self._url(bucket, path), json_data=body, headers=headers
        )
        return self._check(response)

    async def list_folder(
        self,
        path: str = '/',
        num: int = LIST_PAGE_SIZE,
        context: Optional[str] = None,
        prefix: Optional[str] = None,
        bucket: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        List one page of a folder.

        Args:
            path: Folder path, must end with '/'
            num: Page size
            context: Paging context from the previous page
            prefix: Only entries whose name starts with prefix
            bucket: Bucket, defaults to the configured one

        Returns:
            Response whose data holds 'infos', 'context' and 'listover'
        """
        path = validate_path(path, FOLDER_ONLY)
        bucket = self._bucket(bucket)
        target = path + (prefix or '')

        params = {'op': 'list', 'num': num, 'context': context}
        headers = {'Authorization': self._signer.sign(bucket, 'get', path)}
        response = await self._api.request(
            'GET', self._url(bucket, target), params=params, headers=headers
        )
        return self._check(response)

    async def list_all(
        self,
        path: str = '/',
        prefix: Optional[str] = None,
        bucket: Optional[str] = None
    ) -> List[CosObject]:
        """Follow the paging context and return every entry of a folder."""
        objects: List[CosObject] = []
        context = None

        while True:
            response = await self.list_folder(path, context=context, prefix=prefix, bucket=bucket)
            data = response.get('data') or {}
            objects.extend(object_from_info(info) for info in data.get('infos') or [])
            context = data.get('context')
            if data.get('listover', True) or not context:
                break

        return objects

    async def delete_folder(
        self,
        path: str,
        recursive: bool = False,
        bucket: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Delete a folder.

        Args:
            path: Folder path, must end with '/'
            recursive: Delete the folder's content first
            bucket: Bucket, defaults to the configured one

        Raises:
            InvalidFolderPathError: Path does not end with '/'
        """
        path = validate_path(path, FOLDER_ONLY)

        if recursive:
            for obj in await self.list_all(path, bucket=bucket):
                if isinstance(obj, FolderObject):
                    await self.delete_folder(f"{path}{obj.name}/", recursive=True, bucket=bucket)
                else:
                    await self.delete_file(f"{path}{obj.name}", bucket=bucket)

        return await self.delete(path, bucket=bucket)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def upload(
        self,
        path: str,
        data: Union[bytes, str, Path],
        biz_attr: Optional[Union[str, int]] = None,
        bucket: Optional[str] = None,
        insert_only: bool = True
    ) -> Dict[str, Any]:
        """
        Upload a small file in a single request.

        Args:
            path: Remote file path
            data: File content, or a local file path
            biz_attr: Caller metadata
            bucket: Bucket, defaults to the configured one
            insert_only: Refuse to overwrite an existing object

        Raises:
            InvalidFilePathError: Path ends with '/'
            FileNotExistError: Local file missing
        """
        path = validate_path(path, FILE_ONLY)
        bucket = self._bucket(bucket)

        if isinstance(data, (str, Path)):
            local = self._validator.validate(data)
            async with aiofiles.open(local, 'rb') as f:
                content = await f.read()
        else:
            content = bytes(data)

        form = {
            'op': 'upload',
            'sha': sha1_hex(content),
            'biz_attr': biz_attr,
            'insertOnly': 1 if insert_only else 0,
            'filecontent': content,
        }
        headers = {'Authorization': self._signer.sign(bucket, 'post', path)}
        self._logger.info(f"Uploading {path} ({len(content)} bytes) in one request")
        response = await self._api.request(
            'POST', self._url(bucket, path), form=form, headers=headers
        )
        return self._check(response)

    create = upload

    async def upload_slice(
        self,
        dst_path: str,
        src_path: Union[str, Path, bytes],
        options: Optional[UploadOptions] = None,
        progress_callback: Optional[Callable[[float], None]] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> UploadResult:
        """
        Upload a file in slices.

        Args:
            dst_path: Remote file path
            src_path: Local file path (or bytes)
            options: bucket, biz_attr, session, slice_size, ...
            progress_callback: Called with the completed fraction after each slice
            cancel_event: Set to stop between slices

        Returns:
            UploadResult (SUCCESS, PARTIAL or FAILED with error attached)

        Raises:
            InvalidFilePathError: dst_path ends with '/'
            FileNotExistError: Local file missing
            MissingSessionIdError: Resume requested without a session id

        Example:
            >>> result = await cos.upload_slice('/data/test.log', 'test.log',
            ...                                 progress_callback=lambda f: print(f"{f:.0%}"))
        """
        orchestrator = MultipartOrchestrator(self._api, self._signer, self._config)
        return await orchestrator.upload(
            dst_path, src_path, options, progress_callback, cancel_event
        )

    async def init_slice_upload(
        self,
        path: str,
        filesize: int,
        sha: str,
        options: Optional[UploadOptions] = None
    ) -> Dict[str, Any]:
        """
        Send the raw slice-upload init call.

        Returns:
            Response whose data holds 'session' and 'slice_size', or the file
            metadata when the server already holds the content
        """
        path = validate_path(path, FILE_ONLY)
        options = (options or UploadOptions()).with_defaults(self._config.slice_size)
        controller = SessionController(self._api, self._signer, self._config)
        return self._check(await controller.request_init(path, filesize, sha, options))

    async def upload_part(
        self,
        path: str,
        session: str,
        offset: int,
        content: bytes,
        bucket: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Upload one slice of a session.

        Raises:
            SliceTransportError: Transport or protocol failure
            SliceIntegrityError: Server reported a hash mismatch
        """
        path = validate_path(path, FILE_ONLY)
        uploader = SliceUploader(self._api, self._signer, self._config)
        ack = await uploader.upload_one(path, session, offset, content, UploadOptions(bucket=bucket))
        return ack.response

    async def delete_file(self, path: str, bucket: Optional[str] = None) -> Dict[str, Any]:
        """
        Delete a file.

        Raises:
            InvalidFilePathError: Path ends with '/'
        """
        if str(path).endswith('/'):
            raise InvalidFilePathError(path)
        return await self.delete(path, bucket=bucket)

    # ------------------------------------------------------------------
    # Files and folders
    # ------------------------------------------------------------------

    async def update(
        self,
        path: str,
        biz_attr: Union[str, int],
        bucket: Optional[str] = None
    ) -> Dict[str, Any]:
        """Replace the biz_attr of a file or folder."""
        path = validate_path(path, BOTH)
        bucket = self._bucket(bucket)

        body = {'op': 'update', 'biz_attr': str(biz_attr)}
        headers = {'Authorization': self._signer.sign_once(bucket, self._resource(bucket, path))}
        response = await self._api.request(
            'POST', self._url(bucket, path), json_data=body, headers=headers
        )
        return self._check(response)

    async def delete(self, path: str, bucket: Optional[str] = None) -> Dict[str, Any]:
        """Delete a file or an empty folder."""
        path = validate_path(path, BOTH)
        bucket = self._bucket(bucket)

        headers = {'Authorization': self._signer.sign_once(bucket, self._resource(bucket, path))}
        self._logger.info(f"Deleting {path} from {bucket}")
        response = await self._api.request(
            'POST', self._url(bucket, path), json_data={'op': 'delete'}, headers=headers
        )
        return self._check(response)

    async def stat(self, path: str, bucket: Optional[str] = None) -> Dict[str, Any]:
        """Get the info of a file or folder."""
        path = validate_path(path, BOTH)
        bucket = self._bucket(bucket)

        headers = {'Authorization': self._signer.sign(bucket, 'get', path)}
        response = await self._api.request(
            'GET', self._url(bucket, path), params={'op': 'stat'}, headers=headers
        )
        return self._check(response)

    def __repr__(self) -> str:
        return f"CosClient(app_id={self._config.app_id!r}, bucket={self._config.bucket!r})"
