"""Tests for upload models."""
import pytest
from cospy.core.exceptions import SliceTransportError
from cospy.core.upload.models import (
    UploadOptions,
    UploadSession,
    Slice,
    SliceAck,
    UploadProgress,
    UploadResult,
    UploadStatus,
    is_completed_response
)


class TestUploadOptions:
    """Test suite for UploadOptions."""

    def test_defaults(self):
        options = UploadOptions()

        assert options.bucket is None
        assert options.session is None
        assert options.slice_size is None
        assert options.insert_only is True
        assert options.is_resume is False

    def test_invalid_slice_size(self):
        with pytest.raises(ValueError):
            UploadOptions(slice_size=0)

    @pytest.mark.parametrize("size", [2.5, True, "4"])
    def test_non_integer_slice_size(self, size):
        with pytest.raises(ValueError, match="positive integer"):
            UploadOptions(slice_size=size)

    def test_explicit_resume_flag(self):
        assert UploadOptions(resume=True).is_resume is True

    def test_with_defaults_fills_missing(self):
        options = UploadOptions(bucket='b').with_defaults(1024, bucket='other')

        assert options.slice_size == 1024
        assert options.bucket == 'b'

    def test_with_defaults_keeps_explicit(self):
        options = UploadOptions(slice_size=10).with_defaults(1024, bucket='pics')

        assert options.slice_size == 10
        assert options.bucket == 'pics'

    def test_session_means_resume(self):
        assert UploadOptions(session='abc').is_resume is True

    def test_offsets_are_frozen(self):
        options = UploadOptions(uploaded_offsets=[0, 4])
        assert options.uploaded_offsets == frozenset({0, 4})


class TestUploadSession:
    """Test suite for UploadSession."""

    def test_mark_uploaded(self):
        session = UploadSession('s', file_size=10, sha='x', slice_size=4)
        session.mark_uploaded(0)

        assert session.is_uploaded(0)
        assert not session.is_uploaded(4)

    def test_frozen_after_complete(self):
        session = UploadSession('s', file_size=10, sha='x', slice_size=4)
        session.complete()

        with pytest.raises(RuntimeError):
            session.mark_uploaded(0)


class TestSlice:

    def test_end(self):
        assert Slice(index=1, offset=4, length=3).end == 7


class TestSliceAck:

    def test_final_when_access_url(self):
        ack = SliceAck(0, 4, 'sha', {'code': 0, 'data': {'access_url': 'http://x'}})
        assert ack.is_final
        assert ack.data['access_url'] == 'http://x'

    def test_intermediate(self):
        ack = SliceAck(0, 4, 'sha', {'code': 0, 'data': {'session': 's'}})
        assert not ack.is_final


class TestUploadProgress:
    """Test suite for UploadProgress."""

    def test_fraction(self):
        progress = UploadProgress(total_slices=3, uploaded_slices=1, total_bytes=10, uploaded_bytes=4)

        assert progress.fraction == pytest.approx(0.4)
        assert progress.percentage == pytest.approx(40.0)
        assert not progress.is_complete

    def test_complete_is_exactly_one(self):
        progress = UploadProgress(total_slices=3, uploaded_slices=3, total_bytes=10, uploaded_bytes=10)

        assert progress.fraction == 1.0
        assert progress.is_complete

    def test_empty(self):
        assert UploadProgress(total_slices=0).fraction == 1.0


class TestUploadResult:
    """Test suite for UploadResult."""

    def test_success(self):
        result = UploadResult(
            status=UploadStatus.SUCCESS,
            server_response={'code': 0, 'data': {'access_url': 'http://x'}},
            session_id='s'
        )

        assert result.ok
        assert result.access_url == 'http://x'
        assert result.raise_for_error() is result

    def test_failed_raises(self):
        error = SliceTransportError('boom', session_id='s', offset=4)
        result = UploadResult(status=UploadStatus.FAILED, session_id='s', error=error)

        assert not result.ok
        assert result.access_url is None
        with pytest.raises(SliceTransportError):
            result.raise_for_error()


def test_is_completed_response():
    assert is_completed_response({'data': {'access_url': 'u'}})
    assert not is_completed_response({'data': {'session': 's'}})
    assert not is_completed_response({'data': []})
    assert not is_completed_response({})
