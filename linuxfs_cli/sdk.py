"""
linux-fs SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for every linux-fs operation.
Built on top of the core APIClient.
"""

import builtins
import logging
from collections.abc import Iterator
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Any

from linuxfs_cli.core.client import APIClient, NotFoundError, RawResponse, ValidationError, parse_model
from linuxfs_cli.core.types import (
    ArchiveRequest,
    CopyFileRequest,
    CreateRepoRequest,
    ExecRequest,
    ExecResponse,
    FileHeadResponse,
    FileMeta,
    GetRepoResponse,
    HealthResponse,
    ListFilesResponse,
    ListReposResponse,
    MoveFileRequest,
    RepoMeta,
    StatusResponse,
    UpdateRepoRequest,
)

logger = logging.getLogger(__name__)


class LinuxFsClient:
    """
    High-level linux-fs API client with typed methods.

    Example:
        client = LinuxFsClient(api_key="secret", base_url="http://localhost:8080")

        repo = client.repos.create("scratch", max_size_bytes=10 * 1024 * 1024)
        client.files.upload(repo.id, "docs/readme.txt", b"hello")
        result = client.shell.exec(repo.id, "ls", ["-la", "docs"])
        archive = client.archives.create(repo.id)

    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the linux-fs client.

        Args:
            api_key: linux-fs API key (or LINUXFS_API_KEY env var)
            base_url: Server base URL (or LINUXFS_BASE_URL env var)
            timeout: Default request timeout in seconds (or LINUXFS_TIMEOUT env var)

        """
        self._client = APIClient(api_key=api_key, base_url=base_url, timeout=timeout)

        # Sub-clients for different domains
        self.repos = RepoOperations(self._client)
        self.files = FileOperations(self._client)
        self.shell = ShellOperations(self._client)
        self.archives = ArchiveOperations(self._client)

    @property
    def base_url(self) -> str:
        """Get the server base URL."""
        return self._client.base_url

    def health(self, timeout: float | None = None) -> HealthResponse:
        """
        Call the public health endpoint. No API key is needed.

        Returns:
            HealthResponse, status "ok" when the server is up

        """
        result = self._client.get_plain("/health", timeout=timeout)
        return parse_model(HealthResponse, result, "GET", "/health")

    def status(self, timeout: float | None = None) -> StatusResponse:
        """
        Get server status: repository count, total size, uptime and version.

        Returns:
            StatusResponse

        """
        result = self._client.get("/api/v1/status", timeout=timeout)
        return parse_model(StatusResponse, result, "GET", "/api/v1/status")


# =============================================================================
# Repository Operations
# =============================================================================


class RepoOperations:
    """Operations for managing repositories."""

    def __init__(self, client: APIClient):
        self._client = client

    def create(
        self,
        name: str,
        max_size_bytes: int | None = None,
        default_ttl_seconds: int | None = None,
        timeout: float | None = None,
    ) -> RepoMeta:
        """
        Create a new repository.

        Args:
            name: Repository name
            max_size_bytes: Size quota (server default when omitted)
            default_ttl_seconds: TTL applied to uploaded files (none when omitted)

        Returns:
            The created RepoMeta

        Raises:
            ConflictError: If a repository with this name already exists

        """
        request = CreateRepoRequest(
            name=name,
            max_size_bytes=max_size_bytes,
            default_ttl_seconds=default_ttl_seconds,
        )
        result = self._client.post("/api/v1/repos", request.to_dict(), timeout=timeout)
        return parse_model(RepoMeta, result, "POST", "/api/v1/repos")

    def list(
        self,
        page: int | None = None,
        per_page: int | None = None,
        sort: str | None = None,
        timeout: float | None = None,
    ) -> ListReposResponse:
        """
        List one page of repositories.

        Args:
            page: 1-based page number
            per_page: Page size (the server caps it at 100)
            sort: Server-side sort key

        Returns:
            ListReposResponse with repos and paging info

        """
        result = self._client.get(
            "/api/v1/repos",
            {"page": page, "per_page": per_page, "sort": sort},
            timeout=timeout,
        )
        return parse_model(ListReposResponse, result, "GET", "/api/v1/repos")

    def iterate(self, per_page: int = 100, sort: str | None = None) -> Iterator[RepoMeta]:
        """
        Iterate through every repository, one page at a time.

        Yields:
            RepoMeta objects

        """
        page = 1
        while True:
            response = self.list(page=page, per_page=per_page, sort=sort)
            yield from response.repos
            if not response.repos or not response.has_more:
                break
            page += 1

    def list_all(self, per_page: int = 100, sort: str | None = None) -> builtins.list[RepoMeta]:
        """
        List all repositories.

        Returns:
            List of all RepoMeta

        """
        return builtins.list(self.iterate(per_page=per_page, sort=sort))

    def get(self, repo_id: Any, timeout: float | None = None) -> GetRepoResponse:
        """
        Get a repository by ID.

        Args:
            repo_id: The repository ID (str or UUID)

        Returns:
            GetRepoResponse with repo metadata and file count

        Raises:
            NotFoundError: If the repository does not exist

        """
        path = self._client.repo_path(repo_id)
        result = self._client.get(path, timeout=timeout)
        return parse_model(GetRepoResponse, result, "GET", path)

    def update(
        self,
        repo_id: Any,
        name: str | None = None,
        max_size_bytes: int | None = None,
        default_ttl_seconds: int | None = None,
        tags: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> RepoMeta:
        """
        Update a repository. Arguments left as None are not sent.

        Args:
            repo_id: The repository ID
            name: New name
            max_size_bytes: New size quota
            default_ttl_seconds: New default TTL, 0 to clear it
            tags: Replacement tag map

        Returns:
            The updated RepoMeta

        """
        request = UpdateRepoRequest(
            name=name,
            max_size_bytes=max_size_bytes,
            default_ttl_seconds=default_ttl_seconds,
            tags=tags,
        )
        path = self._client.repo_path(repo_id)
        result = self._client.patch(path, request.to_dict(), timeout=timeout)
        return parse_model(RepoMeta, result, "PATCH", path)

    def delete(self, repo_id: Any, timeout: float | None = None) -> None:
        """
        Delete a repository and all of its files.

        Args:
            repo_id: The repository ID

        """
        self._client.delete(self._client.repo_path(repo_id), timeout=timeout)
        logger.info("Deleted repository %s", repo_id)


# =============================================================================
# File Operations
# =============================================================================


class FileOperations:
    """Operations for files inside a repository."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(
        self,
        repo_id: Any,
        prefix: str | None = None,
        recursive: bool | None = None,
        page: int | None = None,
        per_page: int | None = None,
        timeout: float | None = None,
    ) -> ListFilesResponse:
        """
        List files in a repository.

        Args:
            repo_id: The repository ID
            prefix: Only include paths starting with this prefix
            recursive: Descend into sub-directories (server default: true)
            page: 1-based page number
            per_page: Page size (the server caps it at 1000)

        Returns:
            ListFilesResponse with files and paging info

        """
        path = f"{self._client.repo_path(repo_id)}/files"
        result = self._client.get(
            path,
            {"prefix": prefix, "recursive": recursive, "page": page, "per_page": per_page},
            timeout=timeout,
        )
        return parse_model(ListFilesResponse, result, "GET", path)

    def upload(
        self,
        repo_id: Any,
        path: str,
        content: bytes,
        ttl_seconds: int | None = None,
        timeout: float | None = None,
    ) -> FileMeta:
        """
        Upload (create or overwrite) a file.

        Args:
            repo_id: The repository ID
            path: Destination path inside the repository
            content: File bytes
            ttl_seconds: Expire the file after this many seconds

        Returns:
            FileMeta for the stored file

        """
        headers = {}
        if ttl_seconds is not None:
            headers["X-File-TTL"] = str(ttl_seconds)
        endpoint = self._client.file_path(repo_id, path)
        result = self._client.post_bytes(endpoint, content, headers=headers, timeout=timeout)
        return parse_model(FileMeta, result, "POST", endpoint)

    def upload_file(
        self,
        repo_id: Any,
        path: str,
        local_path: str | Path,
        ttl_seconds: int | None = None,
        timeout: float | None = None,
    ) -> FileMeta:
        """Upload the contents of a local file."""
        try:
            content = Path(local_path).read_bytes()
        except FileNotFoundError as e:
            raise ValidationError(f"File not found: {local_path}") from e
        except OSError as e:
            raise ValidationError(f"Cannot read {local_path}: {e.strerror}") from e
        return self.upload(repo_id, path, content, ttl_seconds=ttl_seconds, timeout=timeout)

    def download(
        self,
        repo_id: Any,
        path: str,
        if_none_match: str | None = None,
        timeout: float | None = None,
    ) -> bytes:
        """
        Download a file.

        Args:
            repo_id: The repository ID
            path: File path inside the repository
            if_none_match: ETag from a previous download

        Returns:
            File bytes, or b"" when the server answers 304 Not Modified

        """
        headers = {}
        if if_none_match:
            headers["If-None-Match"] = if_none_match
        raw = self._client.fetch_bytes(
            "GET",
            self._client.file_path(repo_id, path),
            headers=headers,
            timeout=timeout,
            accept_status=(304,),
        )
        if raw.status == 304:
            return b""
        return raw.content

    def download_to(
        self,
        repo_id: Any,
        path: str,
        local_path: str | Path,
        timeout: float | None = None,
    ) -> int:
        """
        Download a file to a local path.

        Returns:
            Number of bytes written

        """
        content = self.download(repo_id, path, timeout=timeout)
        return _write_local(local_path, content)

    def head(self, repo_id: Any, path: str, timeout: float | None = None) -> FileHeadResponse:
        """
        Read file metadata without downloading the body.

        Args:
            repo_id: The repository ID
            path: File path inside the repository

        Returns:
            FileHeadResponse built from the response headers

        """
        raw = self._client.head(self._client.file_path(repo_id, path), timeout=timeout)
        return _head_response(raw)

    def exists(self, repo_id: Any, path: str, timeout: float | None = None) -> bool:
        """Check whether a file exists."""
        try:
            self.head(repo_id, path, timeout=timeout)
        except NotFoundError:
            return False
        return True

    def delete(self, repo_id: Any, path: str, timeout: float | None = None) -> None:
        """
        Delete a file.

        Raises:
            NotFoundError: If the file does not exist

        """
        self._client.delete(self._client.file_path(repo_id, path), timeout=timeout)

    def move(self, repo_id: Any, source: str, destination: str, timeout: float | None = None) -> FileMeta:
        """
        Move (rename) a file within a repository.

        Returns:
            FileMeta at the destination

        """
        request = MoveFileRequest(source=source, destination=destination)
        path = f"{self._client.repo_path(repo_id)}/files-move"
        result = self._client.post(path, request.to_dict(), timeout=timeout)
        return parse_model(FileMeta, result, "POST", path)

    def copy(self, repo_id: Any, source: str, destination: str, timeout: float | None = None) -> FileMeta:
        """
        Copy a file within a repository.

        Returns:
            FileMeta of the copy

        """
        request = CopyFileRequest(source=source, destination=destination)
        path = f"{self._client.repo_path(repo_id)}/files-copy"
        result = self._client.post(path, request.to_dict(), timeout=timeout)
        return parse_model(FileMeta, result, "POST", path)


def _write_local(local_path: str | Path, content: bytes) -> int:
    try:
        return Path(local_path).write_bytes(content)
    except OSError as e:
        raise ValidationError(f"Cannot write {local_path}: {e.strerror}") from e


def _head_response(raw: RawResponse) -> FileHeadResponse:
    content_type = raw.headers.get("Content-Type") or ""
    last_modified = None
    if raw.headers.get("Last-Modified"):
        try:
            last_modified = parsedate_to_datetime(raw.headers["Last-Modified"])
        except (TypeError, ValueError):
            logger.debug("Unparseable Last-Modified header: %s", raw.headers["Last-Modified"])
    return FileHeadResponse(
        content_type=content_type.split(";")[0].strip(),
        content_length=int(raw.headers.get("Content-Length") or 0),
        etag=raw.headers.get("ETag"),
        last_modified=last_modified,
    )


# =============================================================================
# Shell Operations
# =============================================================================


class ShellOperations:
    """Run sandboxed commands inside a repository."""

    def __init__(self, client: APIClient):
        self._client = client

    def exec(
        self,
        repo_id: Any,
        command: str,
        args: list[str] | None = None,
        timeout_seconds: int | None = None,
        max_output_bytes: int | None = None,
        timeout: float | None = None,
    ) -> ExecResponse:
        """
        Execute a command with the repository as working directory.

        Args:
            repo_id: The repository ID
            command: Command name (must be whitelisted by the server)
            args: Command arguments
            timeout_seconds: Server-side execution limit
            max_output_bytes: Truncate stdout/stderr beyond this size
            timeout: HTTP request timeout

        Returns:
            ExecResponse with exit code and captured output

        """
        request = ExecRequest(
            command=command,
            args=args or [],
            timeout_seconds=timeout_seconds,
            max_output_bytes=max_output_bytes,
        )
        path = f"{self._client.repo_path(repo_id)}/exec"
        result = self._client.post(path, request.to_dict(), timeout=timeout)
        return parse_model(ExecResponse, result, "POST", path)


# =============================================================================
# Archive Operations
# =============================================================================


class ArchiveOperations:
    """Download repository contents as an archive."""

    def __init__(self, client: APIClient):
        self._client = client

    def create(
        self,
        repo_id: Any,
        path: str | None = None,
        format: str | None = None,
        timeout: float | None = None,
    ) -> bytes:
        """
        Build an archive of a repository, or of one path inside it.

        Args:
            repo_id: The repository ID
            path: Sub-path to archive (whole repository when omitted)
            format: Archive format (server default "tar.gz")

        Returns:
            Archive bytes

        """
        request = ArchiveRequest(path=path, format=format)
        raw = self._client.fetch_bytes(
            "POST",
            f"{self._client.repo_path(repo_id)}/archive",
            request.to_dict(),
            timeout=timeout,
        )
        return raw.content

    def save(
        self,
        repo_id: Any,
        local_path: str | Path,
        path: str | None = None,
        format: str | None = None,
        timeout: float | None = None,
    ) -> int:
        """
        Build an archive and write it to a local file.

        Returns:
            Number of bytes written

        """
        content = self.create(repo_id, path=path, format=format, timeout=timeout)
        return _write_local(local_path, content)
