"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses matching the linux-fs wire format
- Low-level HTTP client with auth, envelope unwrapping and error mapping
"""

from linuxfs_cli.core.client import (
    APIClient,
    APIError,
    ClientError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from linuxfs_cli.core.types import (
    ApiErrorBody,
    ApiResponse,
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

__all__ = [
    "APIClient",
    "APIError",
    "ApiErrorBody",
    "ApiResponse",
    "ArchiveRequest",
    "ClientError",
    "ConflictError",
    "CopyFileRequest",
    "CreateRepoRequest",
    "ExecRequest",
    "ExecResponse",
    "FileHeadResponse",
    "FileMeta",
    "GetRepoResponse",
    "HealthResponse",
    "ListFilesResponse",
    "ListReposResponse",
    "MoveFileRequest",
    "NotFoundError",
    "RepoMeta",
    "StatusResponse",
    "UpdateRepoRequest",
    "ValidationError",
]
