"""
Core HTTP client for the linux-fs API.

Handles authentication, request construction, envelope unwrapping, and
mapping of error responses to typed exceptions.
"""

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from email.message import Message
from typing import Any

from linuxfs_cli.core.types import ApiResponse

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 60
API_PREFIX = "/api/v1"


class ClientError(Exception):
    """Base error class for client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class APIError(ClientError):
    """API error with HTTP status, server error code and message."""

    def __init__(
        self,
        message: str,
        status: int = 0,
        code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status = status
        self.code = status if code is None else code

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        if self.code:
            result["code"] = self.code
        return result


class NotFoundError(APIError):
    """The requested resource does not exist (HTTP 404)."""


class ConflictError(APIError):
    """The request conflicts with the current server state (HTTP 409)."""


class ValidationError(ClientError):
    """Validation error for local input/data issues (not API errors)."""


def api_error_for(status: int, code: int, message: str, details: dict | None = None) -> APIError:
    """Pick the error kind for an HTTP status."""
    if status == 404:
        return NotFoundError(message, status=status, code=code, details=details)
    if status == 409:
        return ConflictError(message, status=status, code=code, details=details)
    return APIError(message, status=status, code=code, details=details)


def parse_model(model: Any, data: Any, method: str, path: str) -> Any:
    """Build a typed record from a payload, raising ClientError when its shape is wrong."""
    try:
        return model.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ClientError(f"Failed to deserialize response from {method} {path}.") from e


def encode_path(path: str) -> str:
    """
    Encode a file path for use in a URL.

    The leading slash is trimmed and every segment is percent-encoded on
    its own, so separators survive while everything else is escaped.
    """
    segments = path.lstrip("/").split("/")
    return "/".join(urllib.parse.quote(segment, safe="") for segment in segments)


def build_query(params: dict[str, Any] | None) -> str:
    """Build a query string, skipping None values. Returns '' when empty."""
    if not params:
        return ""
    pairs = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        pairs.append((key, str(value)))
    if not pairs:
        return ""
    return "?" + urllib.parse.urlencode(pairs)


@dataclass
class RawResponse:
    """Status, headers and undecoded body of a completed request."""

    status: int
    headers: Message = field(default_factory=Message)
    content: bytes = b""


class APIClient:
    """
    Low-level HTTP client for the linux-fs API.

    Handles:
    - Authentication via the X-API-Key header
    - HTTP methods (GET, HEAD, POST, PATCH, DELETE)
    - The {data, error} response envelope
    - Mapping error responses to NotFoundError / ConflictError / APIError
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the API client.

        Args:
            api_key: linux-fs API key (or LINUXFS_API_KEY env var)
            base_url: Server base URL (or LINUXFS_BASE_URL env var)
            timeout: Default request timeout in seconds (or LINUXFS_TIMEOUT env var)

        """
        self.api_key = api_key or os.environ.get("LINUXFS_API_KEY")
        env_base_url = os.environ.get("LINUXFS_BASE_URL", DEFAULT_BASE_URL)
        self.base_url = (base_url or env_base_url).rstrip("/")
        if timeout is None:
            try:
                timeout = float(os.environ.get("LINUXFS_TIMEOUT", DEFAULT_TIMEOUT))
            except ValueError as e:
                raise ValidationError("LINUXFS_TIMEOUT must be a number") from e
        self.timeout = timeout

    def _ensure_api_key(self) -> str:
        """Ensure API key is configured."""
        if not self.api_key:
            raise ClientError("LINUXFS_API_KEY environment variable not set")
        return self.api_key

    def _build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Build full URL from path and query parameters."""
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        return f"{url}{build_query(params)}"

    def _make_request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        accept_status: tuple[int, ...] = (),
    ) -> RawResponse:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method
            path: API path (e.g., /api/v1/repos/{id})
            params: Query parameters; None values are dropped
            body: Encoded request body
            headers: Extra request headers
            timeout: Request timeout override
            accept_status: Non-2xx statuses returned instead of raised

        Returns:
            RawResponse with status, headers and body bytes

        Raises:
            APIError: On an error status
            ClientError: On connection failure or timeout

        """
        request_headers = {"Accept": "application/json"}
        if path.startswith(API_PREFIX):
            request_headers["X-API-Key"] = self._ensure_api_key()
        elif self.api_key:
            request_headers["X-API-Key"] = self.api_key
        request_headers.update(headers or {})

        url = self._build_url(path, params)
        request_timeout = timeout or self.timeout
        logger.debug("%s %s", method, url)

        try:
            req = urllib.request.Request(url, data=body, headers=request_headers, method=method)
            with urllib.request.urlopen(req, timeout=request_timeout) as response:
                raw = RawResponse(status=response.status, headers=response.headers, content=response.read())
                logger.debug("%s %s -> %d", method, url, raw.status)
                return raw

        except urllib.error.HTTPError as e:
            logger.debug("%s %s -> %d", method, url, e.code)
            with e:
                if e.code in accept_status:
                    return RawResponse(status=e.code, headers=e.headers, content=b"")
                raise self._error_from_response(e) from e

        except urllib.error.URLError as e:
            if isinstance(e.reason, TimeoutError):
                raise ClientError(f"Request timed out after {request_timeout} seconds") from e
            raise ClientError(f"Connection error: {e.reason}") from e

        except TimeoutError as e:
            raise ClientError(f"Request timed out after {request_timeout} seconds") from e

    @staticmethod
    def _error_from_response(error: urllib.error.HTTPError) -> APIError:
        """Translate an error status into a typed APIError."""
        status = error.code
        try:
            error_body = error.read().decode("utf-8", errors="replace")
        except OSError:
            return api_error_for(status, status, error.reason or "Unknown error")

        try:
            error_data = json.loads(error_body)
        except json.JSONDecodeError:
            error_data = None

        error_field = error_data.get("error") if isinstance(error_data, dict) else None
        if isinstance(error_field, dict):
            try:
                envelope = ApiResponse.from_dict(error_data)
            except (TypeError, ValueError):
                envelope = None
            if envelope is not None:
                logger.debug("API error %d: %s", status, envelope.error.message)
                return api_error_for(status, envelope.error.code, envelope.error.message)

        # Not an envelope, keep the raw body
        logger.debug("API error %d with unparsed body", status)
        return api_error_for(status, status, error_body)

    # =========================================================================
    # Envelope handling
    # =========================================================================

    def _decode_json(self, method: str, path: str, raw: RawResponse) -> Any:
        """Decode a JSON body, raising ClientError if it is not a JSON object."""
        try:
            decoded = json.loads(raw.content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ClientError(f"Failed to deserialize response from {method} {path}.") from e
        if not isinstance(decoded, dict):
            raise ClientError(f"Failed to deserialize response from {method} {path}.")
        return decoded

    def _unwrap(self, method: str, path: str, raw: RawResponse) -> Any:
        """Unwrap {data, error}; a non-null error wins even on a 2xx status."""
        envelope = parse_model(ApiResponse, self._decode_json(method, path, raw), method, path)
        if envelope.error is not None:
            raise api_error_for(envelope.error.code, envelope.error.code, envelope.error.message)
        if envelope.data is None:
            raise ClientError(f"Failed to deserialize response from {method} {path}.")
        return envelope.data

    def request_json(
        self,
        method: str,
        path: str,
        data: dict | None = None,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send an optional JSON body and return the envelope's data payload."""
        body = None
        headers = {}
        if data is not None:
            body = json.dumps(data).encode("utf-8")
            headers["Content-Type"] = "application/json"
        raw = self._make_request(method, path, params=params, body=body, headers=headers, timeout=timeout)
        return self._unwrap(method, path, raw)

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str, params: dict[str, Any] | None = None, timeout: float | None = None) -> Any:
        """Make a GET request and unwrap the envelope."""
        return self.request_json("GET", path, params=params, timeout=timeout)

    def get_plain(self, path: str, timeout: float | None = None) -> dict[str, Any]:
        """Make a GET request to an endpoint that does not use the envelope."""
        raw = self._make_request("GET", path, timeout=timeout)
        return self._decode_json("GET", path, raw)

    def post(self, path: str, data: dict | None = None, timeout: float | None = None) -> Any:
        """Make a POST request and unwrap the envelope."""
        return self.request_json("POST", path, data, timeout=timeout)

    def patch(self, path: str, data: dict | None = None, timeout: float | None = None) -> Any:
        """Make a PATCH request and unwrap the envelope."""
        return self.request_json("PATCH", path, data, timeout=timeout)

    def delete(self, path: str, timeout: float | None = None) -> None:
        """Make a DELETE request; the body of a 204 is never parsed."""
        self._make_request("DELETE", path, timeout=timeout)

    def head(self, path: str, timeout: float | None = None) -> RawResponse:
        """Make a HEAD request and return the raw response."""
        return self._make_request("HEAD", path, headers={"Accept": "*/*"}, timeout=timeout)

    def post_bytes(
        self,
        path: str,
        content: bytes,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """POST a binary body and unwrap the envelope of the reply."""
        request_headers = {"Content-Type": "application/octet-stream"}
        request_headers.update(headers or {})
        raw = self._make_request("POST", path, body=content, headers=request_headers, timeout=timeout)
        return self._unwrap("POST", path, raw)

    def fetch_bytes(
        self,
        method: str,
        path: str,
        data: dict | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        accept_status: tuple[int, ...] = (),
    ) -> RawResponse:
        """Make a request whose successful reply is a binary body."""
        request_headers = {"Accept": "*/*"}
        body = None
        if data is not None:
            body = json.dumps(data).encode("utf-8")
            request_headers["Content-Type"] = "application/json"
        request_headers.update(headers or {})
        return self._make_request(
            method,
            path,
            body=body,
            headers=request_headers,
            timeout=timeout,
            accept_status=accept_status,
        )

    # =========================================================================
    # Repo-scoped helpers
    # =========================================================================

    def repo_path(self, repo_id: Any) -> str:
        """Get the path prefix for a repository."""
        repo_id = str(repo_id)
        if not repo_id:
            raise ValidationError("Repository ID required")
        return f"{API_PREFIX}/repos/{urllib.parse.quote(repo_id, safe='')}"

    def file_path(self, repo_id: Any, path: str) -> str:
        """Get the path of a file endpoint within a repository."""
        if not path or not path.strip("/"):
            raise ValidationError("File path required")
        return f"{self.repo_path(repo_id)}/files/{encode_path(path)}"
