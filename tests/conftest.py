"""Pytest fixtures for cospy tests."""
import os
import tempfile
from pathlib import Path

import pytest

from cospy.core.api import APIConfig, StaticSigner


class RecordingTransport:
    """
    SignedRequest double.

    Records every call and answers from a queue of responses; an Exception
    in the queue is raised instead of returned.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []
        self.closed = False

    async def request(self, method, url, params=None, form=None, json_data=None, headers=None):
        self.calls.append({
            'method': method,
            'url': url,
            'params': dict(params) if params else None,
            'form': dict(form) if form is not None else None,
            'json_data': dict(json_data) if json_data is not None else None,
            'headers': dict(headers or {}),
        })
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        self.closed = True

    def ops(self):
        """The 'op' of every recorded call."""
        ops = []
        for call in self.calls:
            body = call['form'] or call['json_data'] or call['params'] or {}
            ops.append(body.get('op'))
        return ops

    def slice_offsets(self):
        return [
            call['form']['offset'] for call in self.calls
            if call['form'] and 'session' in call['form'] and 'filecontent' in call['form']
        ]


@pytest.fixture
def config():
    """Config with a tiny default slice size."""
    return APIConfig(app_id='1000', bucket='pics', endpoint='http://cos.test/files/v1/', slice_size=4)


@pytest.fixture
def signer():
    return StaticSigner('multi-sig', once_signature='once-sig')


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def temp_file():
    """Create a 20-byte temporary file with known content."""
    fd, path = tempfile.mkstemp()
    os.write(fd, b"0123456789ABCDEFGHIJ")
    os.close(fd)
    yield Path(path)
    os.unlink(path)


@pytest.fixture
def make_file():
    """Factory for temporary files of a given content."""
    paths = []

    def _make(content: bytes) -> Path:
        fd, path = tempfile.mkstemp()
        os.write(fd, content)
        os.close(fd)
        paths.append(path)
        return Path(path)

    yield _make
    for path in paths:
        os.unlink(path)


def ok(data=None):
    """Successful COS response."""
    return {'code': 0, 'message': 'SUCCESS', 'data': data or {}}


def init_ok(session='sess-1', slice_size=None):
    data = {'session': session}
    if slice_size is not None:
        data['slice_size'] = slice_size
    return ok(data)


def final_ok(url='http://pics-1000.cos.test/file.bin'):
    return ok({'access_url': url, 'resource_path': '/1000/pics/file.bin', 'url': url})
