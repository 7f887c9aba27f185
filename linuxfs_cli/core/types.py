"""
Core types mirroring the linux-fs REST API wire format.

These dataclasses provide type safety and IDE support for API requests and
responses. Wire keys are snake_case, so field names map one to one.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None so optional fields stay off the wire."""
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# Envelope
# =============================================================================


T = TypeVar("T")


@dataclass
class ApiErrorBody:
    """Error details carried in the response envelope."""

    code: int
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApiErrorBody":
        """Create from API response dict."""
        return cls(
            code=int(data.get("code", 0)),
            message=data.get("message") or "",
        )


@dataclass
class ApiResponse(Generic[T]):
    """The {data, error} envelope every API response uses."""

    data: T | None = None
    error: ApiErrorBody | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApiResponse[Any]":
        """Create from API response dict, leaving data unparsed."""
        error = data.get("error")
        return cls(
            data=data.get("data"),
            error=ApiErrorBody.from_dict(error) if isinstance(error, dict) else None,
        )


# =============================================================================
# Health Types
# =============================================================================


@dataclass
class HealthResponse:
    """Health check result."""

    status: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HealthResponse":
        """Create from API response dict."""
        return cls(status=data.get("status", ""))

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"


@dataclass
class StatusResponse:
    """Server status information."""

    repo_count: int = 0
    total_size_bytes: int = 0
    uptime_seconds: int = 0
    version: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StatusResponse":
        """Create from API response dict."""
        return cls(
            repo_count=data.get("repo_count", 0),
            total_size_bytes=data.get("total_size_bytes", 0),
            uptime_seconds=data.get("uptime_seconds", 0),
            version=data.get("version", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "repo_count": self.repo_count,
            "total_size_bytes": self.total_size_bytes,
            "uptime_seconds": self.uptime_seconds,
            "version": self.version,
        }


# =============================================================================
# Repository Types
# =============================================================================


@dataclass
class RepoMeta:
    """A repository: a named storage namespace with a size quota."""

    id: str
    name: str
    max_size_bytes: int = 0
    current_size_bytes: int = 0
    file_count: int = 0
    created_at: str | None = None
    updated_at: str | None = None
    last_accessed_at: str | None = None
    default_ttl_seconds: int | None = None
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def usage_ratio(self) -> float:
        """Fraction of the quota in use (0.0 when the quota is unset)."""
        if not self.max_size_bytes:
            return 0.0
        return self.current_size_bytes / self.max_size_bytes

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RepoMeta":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            max_size_bytes=data.get("max_size_bytes", 0),
            current_size_bytes=data.get("current_size_bytes", 0),
            file_count=data.get("file_count", 0),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            last_accessed_at=data.get("last_accessed_at"),
            default_ttl_seconds=data.get("default_ttl_seconds"),
            tags=dict(data.get("tags") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire dict."""
        return _compact(
            {
                "id": self.id,
                "name": self.name,
                "max_size_bytes": self.max_size_bytes,
                "current_size_bytes": self.current_size_bytes,
                "file_count": self.file_count,
                "created_at": self.created_at,
                "updated_at": self.updated_at,
                "last_accessed_at": self.last_accessed_at,
                "default_ttl_seconds": self.default_ttl_seconds,
                "tags": dict(self.tags),
            }
        )


@dataclass
class GetRepoResponse:
    """A single repository with its file count."""

    repo: RepoMeta
    file_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GetRepoResponse":
        """Create from API response dict."""
        return cls(
            repo=RepoMeta.from_dict(data["repo"]),
            file_count=data.get("file_count", 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"repo": self.repo.to_dict(), "file_count": self.file_count}


@dataclass
class ListReposResponse:
    """One page of repositories."""

    repos: list[RepoMeta] = field(default_factory=list)
    page: int = 1
    per_page: int = 20
    total: int = 0

    @property
    def has_more(self) -> bool:
        """Check if there are more pages after this one."""
        return (self.page - 1) * self.per_page + len(self.repos) < self.total

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListReposResponse":
        """Create from API response dict."""
        return cls(
            repos=[RepoMeta.from_dict(r) for r in data.get("repos") or []],
            page=data.get("page", 1),
            per_page=data.get("per_page", 20),
            total=data.get("total", 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "repos": [r.to_dict() for r in self.repos],
            "page": self.page,
            "per_page": self.per_page,
            "total": self.total,
        }


@dataclass
class CreateRepoRequest:
    """Request body for creating a repository."""

    name: str
    max_size_bytes: int | None = None
    default_ttl_seconds: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return _compact(
            {
                "name": self.name,
                "max_size_bytes": self.max_size_bytes,
                "default_ttl_seconds": self.default_ttl_seconds,
            }
        )


@dataclass
class UpdateRepoRequest:
    """
    Request body for a PATCH on a repository.

    Every field is optional; None leaves the server value unchanged.
    For default_ttl_seconds, 0 clears the TTL and a positive value sets it.
    """

    name: str | None = None
    max_size_bytes: int | None = None
    default_ttl_seconds: int | None = None
    tags: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return _compact(
            {
                "name": self.name,
                "max_size_bytes": self.max_size_bytes,
                "default_ttl_seconds": self.default_ttl_seconds,
                "tags": self.tags,
            }
        )


# =============================================================================
# File Types
# =============================================================================


@dataclass
class FileMeta:
    """Metadata for a file within a repository."""

    repo_id: str
    path: str
    size_bytes: int = 0
    etag: str = ""
    content_type: str = ""
    created_at: str | None = None
    updated_at: str | None = None
    last_accessed_at: str | None = None
    access_count: int = 0
    expires_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileMeta":
        """Create from API response dict."""
        return cls(
            repo_id=data.get("repo_id", ""),
            path=data["path"],
            size_bytes=data.get("size_bytes", 0),
            etag=data.get("etag", ""),
            content_type=data.get("content_type", ""),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            last_accessed_at=data.get("last_accessed_at"),
            access_count=data.get("access_count", 0),
            expires_at=data.get("expires_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire dict."""
        return _compact(
            {
                "repo_id": self.repo_id,
                "path": self.path,
                "size_bytes": self.size_bytes,
                "etag": self.etag,
                "content_type": self.content_type,
                "created_at": self.created_at,
                "updated_at": self.updated_at,
                "last_accessed_at": self.last_accessed_at,
                "access_count": self.access_count,
                "expires_at": self.expires_at,
            }
        )


@dataclass
class ListFilesResponse:
    """One page of files in a repository."""

    files: list[FileMeta] = field(default_factory=list)
    page: int = 1
    per_page: int = 100

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListFilesResponse":
        """Create from API response dict."""
        return cls(
            files=[FileMeta.from_dict(f) for f in data.get("files") or []],
            page=data.get("page", 1),
            per_page=data.get("per_page", 100),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": [f.to_dict() for f in self.files],
            "page": self.page,
            "per_page": self.per_page,
        }


@dataclass
class FileHeadResponse:
    """File metadata read from the headers of a HEAD request."""

    content_type: str = ""
    content_length: int = 0
    etag: str | None = None
    last_modified: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "content_type": self.content_type,
            "content_length": self.content_length,
            "etag": self.etag,
            "last_modified": self.last_modified.isoformat() if self.last_modified else None,
        }


@dataclass
class MoveFileRequest:
    """Request body for moving a file within a repository."""

    source: str
    destination: str

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source, "destination": self.destination}


@dataclass
class CopyFileRequest:
    """Request body for copying a file within a repository."""

    source: str
    destination: str

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source, "destination": self.destination}


# =============================================================================
# Shell Types
# =============================================================================


@dataclass
class ExecRequest:
    """Request body for running a whitelisted command inside a repository."""

    command: str
    args: list[str] = field(default_factory=list)
    timeout_seconds: int | None = None
    max_output_bytes: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return _compact(
            {
                "command": self.command,
                "args": list(self.args),
                "timeout_seconds": self.timeout_seconds,
                "max_output_bytes": self.max_output_bytes,
            }
        )


@dataclass
class ExecResponse:
    """Result of a command run."""

    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    truncated: bool = False

    @property
    def ok(self) -> bool:
        """Check if the command exited successfully."""
        return self.exit_code == 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExecResponse":
        """Create from API response dict."""
        return cls(
            exit_code=data.get("exit_code", 0),
            stdout=data.get("stdout") or "",
            stderr=data.get("stderr") or "",
            duration_ms=data.get("duration_ms", 0),
            truncated=data.get("truncated", False),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "duration_ms": self.duration_ms,
            "truncated": self.truncated,
        }


# =============================================================================
# Archive Types
# =============================================================================


@dataclass
class ArchiveRequest:
    """Request body for archiving repository contents."""

    path: str | None = None
    format: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"path": self.path, "format": self.format})
