"""Tests for upload services."""
import hashlib
import tempfile
from pathlib import Path

import pytest

from conftest import RecordingTransport, ok, init_ok, final_ok
from cospy.core.api.errors import CosTransportError
from cospy.core.exceptions import (
    FileNotExistError,
    SessionInitError,
    SliceIntegrityError,
    SliceTransportError,
)
from cospy.core.upload.models import UploadOptions
from cospy.core.upload.services import (
    BytesSliceSource,
    FileSliceSource,
    FileValidator,
    SessionController,
    SliceUploader,
    sha1_hex,
    sha1_of,
)


class TestFileValidator:
    """Test suite for FileValidator."""

    @pytest.fixture
    def validator(self):
        return FileValidator()

    def test_validate_existing_file(self, validator, temp_file):
        assert validator.validate(temp_file) == temp_file

    def test_validate_string_path(self, validator, temp_file):
        assert validator.validate(str(temp_file)) == temp_file

    def test_validate_nonexistent_file(self, validator):
        with pytest.raises(FileNotExistError):
            validator.validate(Path("/nonexistent/file.txt"))

    def test_validate_directory(self, validator):
        with pytest.raises(FileNotExistError):
            validator.validate(Path(tempfile.gettempdir()))

    def test_open_source_path(self, validator, temp_file):
        source = validator.open_source(temp_file)

        assert isinstance(source, FileSliceSource)
        assert source.size == 20

    def test_open_source_bytes(self, validator):
        source = validator.open_source(b"abc")

        assert isinstance(source, BytesSliceSource)
        assert source.size == 3

    def test_open_source_passthrough(self, validator):
        source = BytesSliceSource(b"abc")
        assert validator.open_source(source) is source

    def test_open_source_unsupported(self, validator):
        with pytest.raises(TypeError):
            validator.open_source(42)


class TestSliceSources:
    """Test suite for file and in-memory sources."""

    @pytest.mark.asyncio
    async def test_file_read_range(self, temp_file):
        async with FileSliceSource(temp_file) as source:
            assert await source.read_range(0, 10) == b"0123456789"
            assert await source.read_range(5, 10) == b"56789ABCDE"
            assert await source.read_range(16, 10) == b"GHIJ"

    @pytest.mark.asyncio
    async def test_file_closed_on_exit(self, temp_file):
        source = FileSliceSource(temp_file)
        async with source:
            assert not source.closed
        assert source.closed

    @pytest.mark.asyncio
    async def test_file_opens_lazily(self, temp_file):
        source = FileSliceSource(temp_file)
        assert await source.read_range(0, 3) == b"012"
        await source.close()
        assert source.closed

    @pytest.mark.asyncio
    async def test_bytes_read_range(self):
        async with BytesSliceSource(b"hello world") as source:
            assert await source.read_range(6, 5) == b"world"
            assert await source.read_range(6, 50) == b"world"

    @pytest.mark.asyncio
    async def test_sha1_of_matches_hashlib(self, temp_file):
        expected = hashlib.sha1(b"0123456789ABCDEFGHIJ").hexdigest()

        async with FileSliceSource(temp_file) as source:
            assert await sha1_of(source, block_size=3) == expected
        assert await sha1_of(BytesSliceSource(b"0123456789ABCDEFGHIJ")) == expected

    def test_sha1_hex(self):
        assert sha1_hex(b"abc") == "a9993e364706816aba3e25717850c26c9cd0d89d"


class TestSessionController:
    """Test suite for SessionController."""

    @pytest.mark.asyncio
    async def test_init_call(self, config, signer):
        transport = RecordingTransport([init_ok('sess-1', slice_size=8)])
        controller = SessionController(transport, signer, config)

        session = await controller.init_or_resume(
            '/a.bin', 20, 'deadbeef', UploadOptions(slice_size=4, biz_attr='x')
        )

        assert session.session_id == 'sess-1'
        assert session.slice_size == 8  # server decides
        assert session.file_size == 20
        assert session.sha == 'deadbeef'
        assert not session.resumed
        assert not session.completed

        call = transport.calls[0]
        assert call['method'] == 'POST'
        assert call['url'] == 'http://cos.test/files/v1/1000/pics/a.bin'
        assert call['headers'] == {'Authorization': 'multi-sig'}
        assert call['form']['op'] == 'upload_slice'
        assert call['form']['filesize'] == 20
        assert call['form']['sha'] == 'deadbeef'
        assert call['form']['slice_size'] == 4
        assert call['form']['biz_attr'] == 'x'
        assert call['form']['insertOnly'] == 1

    @pytest.mark.asyncio
    async def test_resume_skips_init(self, config, signer):
        transport = RecordingTransport()
        controller = SessionController(transport, signer, config)

        session = await controller.init_or_resume(
            '/a.bin', 20, 'sha', UploadOptions(session='abc', uploaded_offsets={0, 4})
        )

        assert transport.calls == []
        assert session.session_id == 'abc'
        assert session.resumed
        assert session.uploaded_offsets == {0, 4}
        assert session.slice_size == config.slice_size

    @pytest.mark.asyncio
    async def test_instant_upload(self, config, signer):
        transport = RecordingTransport([final_ok()])
        controller = SessionController(transport, signer, config)

        session = await controller.init_or_resume('/a.bin', 20, 'sha', UploadOptions(slice_size=4))

        assert session.completed
        assert session.init_response['data']['access_url']

    @pytest.mark.asyncio
    async def test_transport_error(self, config, signer):
        transport = RecordingTransport([CosTransportError("Network error", status=502)])
        controller = SessionController(transport, signer, config)

        with pytest.raises(SessionInitError):
            await controller.init_or_resume('/a.bin', 20, 'sha', UploadOptions(slice_size=4))

    @pytest.mark.asyncio
    async def test_server_rejection(self, config, signer):
        transport = RecordingTransport([{'code': -177, 'message': 'file exists'}])
        controller = SessionController(transport, signer, config)

        with pytest.raises(SessionInitError) as exc_info:
            await controller.init_or_resume('/a.bin', 20, 'sha', UploadOptions(slice_size=4))
        assert exc_info.value.error_code == -177

    @pytest.mark.asyncio
    async def test_missing_session_id(self, config, signer):
        transport = RecordingTransport([ok({})])
        controller = SessionController(transport, signer, config)

        with pytest.raises(SessionInitError, match="no session id"):
            await controller.init_or_resume('/a.bin', 20, 'sha', UploadOptions(slice_size=4))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("server_size", ['abc', -8, [4]])
    async def test_invalid_server_slice_size(self, config, signer, server_size):
        transport = RecordingTransport([ok({'session': 's', 'slice_size': server_size})])
        controller = SessionController(transport, signer, config)

        with pytest.raises(SessionInitError, match="invalid slice_size") as exc_info:
            await controller.init_or_resume('/a.bin', 20, 'sha', UploadOptions(slice_size=4))
        assert exc_info.value.error_code == 0


class TestSliceUploader:
    """Test suite for SliceUploader."""

    @pytest.mark.asyncio
    async def test_upload_one(self, config, signer):
        transport = RecordingTransport([ok({'offset': 4})])
        uploader = SliceUploader(transport, signer, config)

        ack = await uploader.upload_one('/a.bin', 'sess-1', 4, b"4567")

        assert ack.offset == 4
        assert ack.length == 4
        assert ack.sha == sha1_hex(b"4567")
        assert not ack.is_final

        form = transport.calls[0]['form']
        assert form == {
            'op': 'upload_slice',
            'session': 'sess-1',
            'offset': 4,
            'sha': sha1_hex(b"4567"),
            'filecontent': b"4567",
        }

    @pytest.mark.asyncio
    async def test_bucket_from_options(self, config, signer):
        transport = RecordingTransport([final_ok()])
        uploader = SliceUploader(transport, signer, config)

        ack = await uploader.upload_one('/a.bin', 's', 0, b"x", UploadOptions(bucket='docs'))

        assert ack.is_final
        assert transport.calls[0]['url'] == 'http://cos.test/files/v1/1000/docs/a.bin'

    @pytest.mark.asyncio
    async def test_empty_slice_raises(self, config, signer):
        uploader = SliceUploader(RecordingTransport(), signer, config)

        with pytest.raises(ValueError, match="empty"):
            await uploader.upload_one('/a.bin', 's', 0, b"")

    @pytest.mark.asyncio
    async def test_transport_failure(self, config, signer):
        transport = RecordingTransport([CosTransportError("Network error: reset")])
        uploader = SliceUploader(transport, signer, config)

        with pytest.raises(SliceTransportError) as exc_info:
            await uploader.upload_one('/a.bin', 'sess-1', 8, b"89AB")

        assert exc_info.value.session_id == 'sess-1'
        assert exc_info.value.offset == 8

    @pytest.mark.asyncio
    async def test_protocol_failure(self, config, signer):
        transport = RecordingTransport([{'code': -1, 'message': 'internal error'}])
        uploader = SliceUploader(transport, signer, config)

        with pytest.raises(SliceTransportError):
            await uploader.upload_one('/a.bin', 's', 0, b"0123")

    @pytest.mark.asyncio
    async def test_integrity_failure_by_message(self, config, signer):
        transport = RecordingTransport([{'code': -1, 'message': 'slice sha mismatch'}])
        uploader = SliceUploader(transport, signer, config)

        with pytest.raises(SliceIntegrityError):
            await uploader.upload_one('/a.bin', 's', 0, b"0123")

    @pytest.mark.asyncio
    async def test_integrity_failure_by_code(self, signer):
        from cospy.core.api import APIConfig
        config = APIConfig(app_id='1', bucket='b', integrity_error_codes=(-288,))
        transport = RecordingTransport([
            CosTransportError("HTTP 400", status=400, code=-288, response={'code': -288})
        ])
        uploader = SliceUploader(transport, signer, config)

        with pytest.raises(SliceIntegrityError):
            await uploader.upload_one('/a.bin', 's', 0, b"0123")
