"""
linux-fs client - Three-layer client for the linux-fs file repository API.

Layers:
- core: Raw types and HTTP client
- sdk: High-level LinuxFsClient with nice ergonomics
- cli: Opinionated command-line interface
"""

from linuxfs_cli.core.client import APIError, ClientError, ConflictError, NotFoundError, ValidationError
from linuxfs_cli.sdk import LinuxFsClient

__version__ = "0.1.0"
__all__ = [
    "APIError",
    "ClientError",
    "ConflictError",
    "LinuxFsClient",
    "NotFoundError",
    "ValidationError",
]
