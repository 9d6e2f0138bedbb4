"""
Sliced upload orchestrator.

Drives init -> slices -> finalize using injected services.
"""
import asyncio
from typing import Optional

from ..api.config import APIConfig
from ..api.signer import SignerProtocol
from ..exceptions import (
    MissingSessionIdError,
    SessionInitError,
    SliceIntegrityError,
    SliceTransportError,
    SourceChangedError,
    UploadCancelledError,
    UploadError,
)
from ..logging import get_logger
from ..path import FILE_ONLY, resolve_bucket, validate_path
from .models import (
    UploadOptions,
    UploadProgress,
    UploadResult,
    UploadSession,
    UploadState,
    UploadStatus,
)
from .protocols import ChunkingStrategy, ProgressCallback, SignedRequestProtocol
from .services import FileValidator, SessionController, SliceUploader, sha1_of
from .strategies import FixedSizeChunkingStrategy

logger = get_logger('cospy.upload.coordinator')


class MultipartOrchestrator:
    """
    Coordinates one sliced upload.

    Slices go out strictly one after another in offset order; the progress
    callback sees one increasing fraction per acknowledged slice. A slice
    failure ends the upload as FAILED; resuming is an explicit new call with
    the same session id.

    An instance serves one upload at a time.
    """

    def __init__(
        self,
        api_client: SignedRequestProtocol,
        signer: SignerProtocol,
        config: Optional[APIConfig] = None,
        chunking_strategy: Optional[ChunkingStrategy] = None,
        session_controller: Optional[SessionController] = None,
        slice_uploader: Optional[SliceUploader] = None,
        validator: Optional[FileValidator] = None
    ):
        """
        Initialize orchestrator.

        Args:
            api_client: Transport implementing SignedRequestProtocol
            signer: Request signer
            config: API configuration
            chunking_strategy: Slice planner
            session_controller: Session init/resume service
            slice_uploader: Single-slice upload service
            validator: Local source validator
        """
        self._config = config or APIConfig.default()
        self._chunking = chunking_strategy or FixedSizeChunkingStrategy(self._config.slice_size)
        self._sessions = session_controller or SessionController(api_client, signer, self._config)
        self._uploader = slice_uploader or SliceUploader(api_client, signer, self._config)
        self._validator = validator or FileValidator()
        self._state = UploadState.INIT
        self._progress: Optional[UploadProgress] = None

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def progress(self) -> Optional[UploadProgress]:
        """Progress of the current or last upload."""
        return self._progress

    async def upload(
        self,
        dst_path: str,
        source,
        options: Optional[UploadOptions] = None,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> UploadResult:
        """
        Upload a source in slices.

        Args:
            dst_path: Remote file path
            source: Local file path, bytes, or a SliceSource
            options: Upload options
            progress_callback: Called with the completed fraction after each slice
            cancel_event: Checked between slices; set it to stop the upload

        Returns:
            UploadResult; FAILED results carry the error that stopped the upload

        Raises:
            InvalidFilePathError: dst_path denotes a folder
            FileNotExistError: Local source missing
            MissingSessionIdError: Resume requested without a session id
            MissingBucketError: No bucket available
            Exception: Whatever the progress callback raises
        """
        self._state = UploadState.INIT
        self._progress = None

        options = (options or UploadOptions()).with_defaults(self._config.slice_size)
        path = validate_path(dst_path, FILE_ONLY)
        if options.is_resume and not options.session:
            raise MissingSessionIdError()
        resolve_bucket(options.bucket, self._config.bucket)
        slice_source = self._validator.open_source(source)
        file_size = slice_source.size

        logger.info(f"Starting sliced upload: {path} ({file_size / (1024 * 1024):.2f} MB)")

        await slice_source.open()
        try:
            return await self._run(path, slice_source, file_size, options, progress_callback, cancel_event)
        except BaseException:
            self._state = UploadState.FAILED
            raise
        finally:
            await slice_source.close()

    async def _run(
        self,
        path: str,
        slice_source,
        file_size: int,
        options: UploadOptions,
        progress_callback: Optional[ProgressCallback],
        cancel_event: Optional[asyncio.Event]
    ) -> UploadResult:
        sha = await sha1_of(slice_source)
        logger.debug(f"Source sha1: {sha}")

        try:
            session = await self._sessions.init_or_resume(path, file_size, sha, options)
        except SessionInitError as e:
            return self._fail(e, None, file_size)
        self._state = UploadState.SESSIONED

        slices = self._chunking.plan(file_size, session.slice_size)
        self._progress = UploadProgress(total_slices=len(slices), total_bytes=file_size)

        if session.completed or not slices:
            # Instant upload or empty source: the init response is final
            self._state = UploadState.FINALIZING
            self._report(progress_callback, 1.0)
            return self._finish(session, session.init_response, file_size, UploadStatus.SUCCESS)

        if session.resumed:
            logger.info(
                f"Resuming session {session.session_id}: "
                f"{len(session.uploaded_offsets)} of {len(slices)} slices already stored"
            )
        else:
            logger.info(
                f"Uploading {len(slices)} slices of {session.slice_size} bytes "
                f"(session {session.session_id})"
            )
        self._state = UploadState.UPLOADING
        last = slices[-1]
        ack = None

        for piece in slices:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Upload of {path} cancelled before offset {piece.offset}")
                return self._fail(
                    UploadCancelledError(
                        f"Upload cancelled before offset {piece.offset}",
                        session_id=session.session_id, offset=piece.offset
                    ),
                    session, file_size
                )

            if piece is not last and session.is_uploaded(piece.offset):
                logger.debug(f"Skipping slice at offset {piece.offset}, already stored")
                continue

            data = await slice_source.read_range(piece.offset, piece.length)
            if len(data) != piece.length:
                return self._fail(
                    SourceChangedError(
                        f"Short read at offset {piece.offset}: {len(data)} of {piece.length} bytes",
                        session_id=session.session_id, offset=piece.offset
                    ),
                    session, file_size
                )

            try:
                ack = await self._uploader.upload_one(
                    path, session.session_id, piece.offset, data, options
                )
            except (SliceTransportError, SliceIntegrityError) as e:
                return self._fail(e, session, file_size)
            del data

            session.mark_uploaded(piece.offset)
            self._progress.uploaded_slices += 1
            self._progress.uploaded_bytes = piece.end
            self._report(progress_callback, piece.end / file_size)

        self._state = UploadState.FINALIZING
        status = UploadStatus.SUCCESS if ack.is_final else UploadStatus.PARTIAL
        if status == UploadStatus.PARTIAL:
            logger.warning(f"Last slice of {path} acknowledged without file metadata")
        return self._finish(session, ack.response, file_size, status)

    def _report(self, progress_callback: Optional[ProgressCallback], fraction: float) -> None:
        logger.debug(f"Progress: {fraction * 100:.1f}%")
        if progress_callback is not None:
            progress_callback(fraction)

    def _finish(
        self,
        session: UploadSession,
        response: dict,
        file_size: int,
        status: UploadStatus
    ) -> UploadResult:
        if not session.completed:
            session.complete()
        self._state = UploadState.DONE
        logger.info(f"Sliced upload finished: {status.value} (session {session.session_id})")
        return UploadResult(
            status=status,
            server_response=response,
            session_id=session.session_id,
            file_size=file_size
        )

    def _fail(
        self,
        error: UploadError,
        session: Optional[UploadSession],
        file_size: int
    ) -> UploadResult:
        self._state = UploadState.FAILED
        session_id = session.session_id if session else None
        if error.session_id is None:
            error.session_id = session_id
        logger.error(f"Sliced upload failed: {error}")
        return UploadResult(
            status=UploadStatus.FAILED,
            session_id=session_id,
            error=error,
            file_size=file_size
        )
