"""COS API errors and exceptions."""
from typing import Any, Dict, Optional


class APIErrorCodes:
    """COS response codes."""

    SUCCESS = 0

    @classmethod
    def is_success(cls, code: Any) -> bool:
        """Responses without a code or with code 0 are successful."""
        if code is None:
            return True
        try:
            return int(code) == cls.SUCCESS
        except (TypeError, ValueError):
            return False

    @classmethod
    def get_message(cls, code: int, message: Optional[str] = None) -> str:
        """Gets error message for error code."""
        if message:
            return f"COS error {code}: {message}"
        return f"Unknown COS error: {code}"


class CosAPIError(Exception):
    """Exception raised when the server answers with a non-zero code."""

    def __init__(self, code: int, message: Optional[str] = None, response: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = APIErrorCodes.get_message(code, message)
        self.response = response or {}
        super().__init__(self.message)

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> 'CosAPIError':
        return cls(response.get('code'), response.get('message'), response)


class CosTransportError(Exception):
    """
    Exception raised when a request does not produce a usable response.

    Covers connection errors, timeouts, non-2xx statuses and bodies that are
    not JSON objects. When a non-2xx body is still JSON its code and message
    are kept.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[int] = None,
        response: Optional[Dict[str, Any]] = None
    ):
        self.status = status
        self.code = code
        self.response = response or {}
        super().__init__(message)

    @property
    def server_message(self) -> str:
        return str(self.response.get('message', ''))
