"""Pytest configuration - loads .env and provides a scripted local linux-fs server."""

import json
import threading
import urllib.parse
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from linuxfs_cli.sdk import LinuxFsClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

API_KEY = "test-api-key"


def ok(data: Any) -> dict[str, Any]:
    """Wrap a payload in a success envelope."""
    return {"data": data, "error": None}


def err(code: int, message: str) -> dict[str, Any]:
    """Build an error envelope."""
    return {"data": None, "error": {"code": code, "message": message}}


@dataclass
class RecordedRequest:
    """A request as the server received it."""

    method: str
    path: str
    query: dict[str, list[str]]
    headers: dict[str, str]
    body: bytes

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


@dataclass
class ScriptedResponse:
    status: int = 200
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)


class FakeServer:
    """Routes (method, raw path) to scripted responses and records every request."""

    def __init__(self) -> None:
        self.url = ""
        self.routes: dict[tuple[str, str], ScriptedResponse] = {}
        self.requests: list[RecordedRequest] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.routes[(method, path)] = ScriptedResponse(status, body, headers or {})

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]

    def respond(self, handler: BaseHTTPRequestHandler) -> None:
        split = urllib.parse.urlsplit(handler.path)
        length = int(handler.headers.get("Content-Length") or 0)
        body = handler.rfile.read(length) if length else b""
        self.requests.append(
            RecordedRequest(
                method=handler.command,
                path=split.path,
                query=urllib.parse.parse_qs(split.query),
                headers={k.lower(): v for k, v in handler.headers.items()},
                body=body,
            )
        )

        scripted = self.routes.get((handler.command, split.path))
        if scripted is None:
            scripted = ScriptedResponse(404, err(404, f"No route for {handler.command} {split.path}"))

        if isinstance(scripted.body, bytes):
            payload = scripted.body
            content_type = "application/octet-stream"
        elif isinstance(scripted.body, str):
            payload = scripted.body.encode("utf-8")
            content_type = "text/plain"
        elif scripted.body is None:
            payload = b""
            content_type = None
        else:
            payload = json.dumps(scripted.body).encode("utf-8")
            content_type = "application/json"

        handler.send_response(scripted.status)
        headers = dict(scripted.headers)
        if content_type and "Content-Type" not in headers:
            headers["Content-Type"] = content_type
        if "Content-Length" not in headers:
            headers["Content-Length"] = str(len(payload))
        for name, value in headers.items():
            handler.send_header(name, value)
        handler.end_headers()
        if handler.command != "HEAD" and payload:
            handler.wfile.write(payload)


class _Handler(BaseHTTPRequestHandler):
    def _dispatch(self) -> None:
        self.server.fake.respond(self)

    do_GET = _dispatch
    do_HEAD = _dispatch
    do_POST = _dispatch
    do_PATCH = _dispatch
    do_DELETE = _dispatch

    def log_message(self, format: str, *args: Any) -> None:
        pass


@pytest.fixture
def server():
    """Run a scripted HTTP server on a free local port."""
    fake = FakeServer()
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    httpd.fake = fake
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    fake.url = f"http://127.0.0.1:{httpd.server_address[1]}"
    yield fake
    httpd.shutdown()
    httpd.server_close()


@pytest.fixture
def client(server, monkeypatch):
    """A LinuxFsClient pointed at the scripted server."""
    monkeypatch.delenv("LINUXFS_API_KEY", raising=False)
    monkeypatch.delenv("LINUXFS_BASE_URL", raising=False)
    return LinuxFsClient(api_key=API_KEY, base_url=server.url, timeout=5)


REPO_ID = "3f2b8c1e-9d4a-4e6b-8a7c-1b2c3d4e5f60"

REPO = {
    "id": REPO_ID,
    "name": "scratch",
    "max_size_bytes": 10485760,
    "current_size_bytes": 2048,
    "file_count": 2,
    "created_at": "2026-01-02T03:04:05Z",
    "updated_at": "2026-01-02T03:04:06Z",
    "last_accessed_at": "2026-01-02T03:04:07Z",
    "default_ttl_seconds": 3600,
    "tags": {"team": "infra"},
}

FILE = {
    "repo_id": REPO_ID,
    "path": "docs/readme.txt",
    "size_bytes": 5,
    "etag": "5d41402abc4b2a76b9719d911017c592",
    "content_type": "text/plain",
    "created_at": "2026-01-02T03:04:05Z",
    "updated_at": "2026-01-02T03:04:05Z",
    "last_accessed_at": "2026-01-02T03:04:05Z",
    "access_count": 1,
    "expires_at": "2026-01-02T04:04:05Z",
}
