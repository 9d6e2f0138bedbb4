"""
Request signing protocol.

The signature algorithm lives outside this package; callers inject any
object implementing SignerProtocol.
"""
from typing import Protocol, Optional, runtime_checkable


@runtime_checkable
class SignerProtocol(Protocol):
    """Produces Authorization header values."""

    def sign(self, bucket: str, method: str = 'post', path: Optional[str] = None) -> str:
        """
        Multi-use signature for a bucket.

        Args:
            bucket: Bucket name
            method: HTTP method of the request being signed
            path: Object path, for signers that scope signatures to a path

        Returns:
            Authorization token
        """
        ...

    def sign_once(self, bucket: str, resource: str) -> str:
        """
        Single-use signature bound to one resource (update/delete).

        Args:
            bucket: Bucket name
            resource: Resource string, '/<app_id>/<bucket><path>'

        Returns:
            Authorization token
        """
        ...


class StaticSigner:
    """
    Hands out pre-issued signatures.

    Useful when a backend issues signatures to the client, or in tests.
    The single-use signature falls back to the multi-use one.
    """

    def __init__(self, signature: str, once_signature: Optional[str] = None):
        if not signature:
            raise ValueError("signature must not be empty")
        self._signature = signature
        self._once_signature = once_signature or signature

    def sign(self, bucket: str, method: str = 'post', path: Optional[str] = None) -> str:
        return self._signature

    def sign_once(self, bucket: str, resource: str) -> str:
        return self._once_signature

    def __repr__(self) -> str:
        return "StaticSigner(signature=***)"
