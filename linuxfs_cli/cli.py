"""
linux-fs CLI - Opinionated command-line interface.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- Pretty formatting for human output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import sys
from typing import Any

from linuxfs_cli.core.client import ClientError, ValidationError
from linuxfs_cli.sdk import LinuxFsClient

logger = logging.getLogger(__name__)

# =============================================================================
# Output Helpers
# =============================================================================


def setup_logging(level: str = "WARNING") -> None:
    """Send log records to stderr so stdout stays parseable."""
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    logging.basicConfig(level=log_level, handlers=[handler])


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: ClientError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


def human_size(size: int) -> str:
    """Format a byte count for humans."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def parse_tags(pairs: list[str] | None) -> dict[str, str] | None:
    """Parse repeated --tag key=value options."""
    if not pairs:
        return None
    tags = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValidationError(f"Invalid tag '{pair}', expected key=value")
        tags[key] = value
    return tags


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_health(client: LinuxFsClient, _args: argparse.Namespace) -> None:
    """Check server health."""
    try:
        health = client.health()
        success_output({"status": health.status})
    except ClientError as e:
        error_output(e)


def cmd_status(client: LinuxFsClient, _args: argparse.Namespace) -> None:
    """Show server status."""
    try:
        status = client.status()
        if is_tty():
            print(f"Version: {status.version}")
            print(f"Repositories: {status.repo_count}")
            print(f"Total size: {human_size(status.total_size_bytes)}")
            print(f"Uptime: {status.uptime_seconds}s")
        else:
            success_output(status.to_dict())
    except ClientError as e:
        error_output(e)


def cmd_repos_list(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """List repositories."""
    try:
        response = client.repos.list(page=args.page, per_page=args.per_page, sort=args.sort)

        if is_tty():
            if not response.repos:
                print("No repositories found.")
                return

            table_output(
                ["ID", "Name", "Files", "Used", "Quota"],
                [
                    [
                        r.id,
                        r.name,
                        str(r.file_count),
                        human_size(r.current_size_bytes),
                        human_size(r.max_size_bytes),
                    ]
                    for r in response.repos
                ],
                [36, 30, 8, 10, 10],
            )

            if response.has_more:
                print(f"\nShowing page {response.page} ({len(response.repos)} of {response.total} repositories)")
        else:
            success_output(response.to_dict())
    except ClientError as e:
        error_output(e)


def cmd_repos_get(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Get a repository by ID."""
    try:
        response = client.repos.get(args.repo_id)
        success_output(response.to_dict())
    except ClientError as e:
        error_output(e)


def cmd_repos_create(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Create a repository."""
    try:
        repo = client.repos.create(
            args.name,
            max_size_bytes=args.max_size,
            default_ttl_seconds=args.ttl,
        )
        success_output(repo.to_dict())
    except ClientError as e:
        error_output(e)


def cmd_repos_update(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Update a repository."""
    try:
        repo = client.repos.update(
            args.repo_id,
            name=args.name,
            max_size_bytes=args.max_size,
            default_ttl_seconds=args.ttl,
            tags=parse_tags(args.tag),
        )
        success_output(repo.to_dict())
    except ClientError as e:
        error_output(e)


def cmd_repos_delete(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Delete a repository."""
    try:
        client.repos.delete(args.repo_id)
        success_output({"success": True, "message": f"Repository {args.repo_id} deleted"})
    except ClientError as e:
        error_output(e)


def cmd_files_list(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """List files in a repository."""
    try:
        response = client.files.list(
            args.repo_id,
            prefix=args.prefix,
            recursive=args.recursive,
            page=args.page,
            per_page=args.per_page,
        )

        if is_tty():
            if not response.files:
                print("No files found.")
                return

            table_output(
                ["Path", "Size", "Type", "Expires"],
                [
                    [f.path, human_size(f.size_bytes), f.content_type, f.expires_at or ""]
                    for f in response.files
                ],
                [50, 10, 24, 25],
            )
        else:
            success_output(response.to_dict())
    except ClientError as e:
        error_output(e)


def cmd_files_upload(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Upload a local file (or stdin)."""
    try:
        if args.local == "-":
            content = sys.stdin.buffer.read()
            meta = client.files.upload(args.repo_id, args.path, content, ttl_seconds=args.ttl)
        else:
            meta = client.files.upload_file(args.repo_id, args.path, args.local, ttl_seconds=args.ttl)
        success_output(meta.to_dict())
    except ClientError as e:
        error_output(e)


def cmd_files_download(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Download a file to --output or stdout."""
    try:
        if args.output:
            written = client.files.download_to(args.repo_id, args.path, args.output)
            success_output({"success": True, "path": args.output, "bytes": written})
        else:
            content = client.files.download(args.repo_id, args.path)
            sys.stdout.buffer.write(content)
            sys.stdout.buffer.flush()
    except ClientError as e:
        error_output(e)


def cmd_files_head(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Show file metadata from a HEAD request."""
    try:
        head = client.files.head(args.repo_id, args.path)
        success_output(head.to_dict())
    except ClientError as e:
        error_output(e)


def cmd_files_delete(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Delete a file."""
    try:
        client.files.delete(args.repo_id, args.path)
        success_output({"success": True, "message": f"File {args.path} deleted"})
    except ClientError as e:
        error_output(e)


def cmd_files_move(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Move a file."""
    try:
        meta = client.files.move(args.repo_id, args.source, args.destination)
        success_output(meta.to_dict())
    except ClientError as e:
        error_output(e)


def cmd_files_copy(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Copy a file."""
    try:
        meta = client.files.copy(args.repo_id, args.source, args.destination)
        success_output(meta.to_dict())
    except ClientError as e:
        error_output(e)


def cmd_exec(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Run a command in a repository; exit with its exit code."""
    try:
        result = client.shell.exec(
            args.repo_id,
            args.exec_command,
            args.exec_args,
            timeout_seconds=args.timeout,
            max_output_bytes=args.max_output,
        )
    except ClientError as e:
        error_output(e)
        return

    if is_tty():
        sys.stdout.write(result.stdout)
        sys.stderr.write(result.stderr)
        if result.truncated:
            print("\n[output truncated]", file=sys.stderr)
    else:
        success_output(result.to_dict())
    sys.exit(result.exit_code)


def cmd_archive(client: LinuxFsClient, args: argparse.Namespace) -> None:
    """Save a repository archive to a local file."""
    try:
        written = client.archives.save(args.repo_id, args.output, path=args.path, format=args.format)
        success_output({"success": True, "path": args.output, "bytes": written})
    except ClientError as e:
        error_output(e)


# =============================================================================
# Main CLI
# =============================================================================


def create_parser() -> argparse.ArgumentParser:  # noqa: PLR0915
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="linuxfs",
        description="linux-fs CLI - Command-line interface for the linux-fs API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output Modes:
  TTY (human):  Pretty tables
  Pipe:         JSON

Examples:
  linuxfs repos create scratch --max-size 10485760
  linuxfs files upload <repo_id> docs/readme.txt ./README.md
  linuxfs files list <repo_id> --prefix docs/ | jq '.files[].path'
  linuxfs exec <repo_id> ls -- -la docs
  linuxfs archive <repo_id> --output repo.tar.gz
""",
    )
    parser.add_argument("--base-url", help="Server URL (overrides LINUXFS_BASE_URL)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log HTTP requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Health ==========
    health = subparsers.add_parser("health", help="Check server health")
    health.set_defaults(func=cmd_health)

    status = subparsers.add_parser("status", help="Show server status")
    status.set_defaults(func=cmd_status)

    # ========== Repositories ==========
    repos = subparsers.add_parser("repos", help="List and manage repositories")
    repos.set_defaults(func=lambda _c, _a: repos.print_help())
    repos_sub = repos.add_subparsers(dest="subcommand")

    r_list = repos_sub.add_parser("list", help="List repositories")
    r_list.add_argument("--page", "-p", type=int, help="Page number (1-based)")
    r_list.add_argument("--per-page", type=int, help="Results per page")
    r_list.add_argument("--sort", "-s", help="Sort key")
    r_list.set_defaults(func=cmd_repos_list)

    r_get = repos_sub.add_parser("get", help="Get repository details")
    r_get.add_argument("repo_id", help="Repository ID")
    r_get.set_defaults(func=cmd_repos_get)

    r_create = repos_sub.add_parser("create", help="Create a repository")
    r_create.add_argument("name", help="Repository name")
    r_create.add_argument("--max-size", type=int, help="Size quota in bytes")
    r_create.add_argument("--ttl", type=int, help="Default file TTL in seconds")
    r_create.set_defaults(func=cmd_repos_create)

    r_update = repos_sub.add_parser("update", help="Update a repository")
    r_update.add_argument("repo_id", help="Repository ID")
    r_update.add_argument("--name", help="New name")
    r_update.add_argument("--max-size", type=int, help="New size quota in bytes")
    r_update.add_argument("--ttl", type=int, help="New default TTL in seconds (0 clears it)")
    r_update.add_argument("--tag", action="append", help="Tag as key=value (repeatable, replaces all tags)")
    r_update.set_defaults(func=cmd_repos_update)

    r_delete = repos_sub.add_parser("delete", help="Delete a repository")
    r_delete.add_argument("repo_id", help="Repository ID")
    r_delete.set_defaults(func=cmd_repos_delete)

    # ========== Files ==========
    files = subparsers.add_parser("files", help="Manage files in a repository")
    files.set_defaults(func=lambda _c, _a: files.print_help())
    files_sub = files.add_subparsers(dest="subcommand")

    f_list = files_sub.add_parser("list", help="List files")
    f_list.add_argument("repo_id", help="Repository ID")
    f_list.add_argument("--prefix", help="Only paths starting with this prefix")
    f_list.add_argument(
        "--recursive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Descend into sub-directories (server default: yes)",
    )
    f_list.add_argument("--page", "-p", type=int, help="Page number (1-based)")
    f_list.add_argument("--per-page", type=int, help="Results per page")
    f_list.set_defaults(func=cmd_files_list)

    f_upload = files_sub.add_parser("upload", help="Upload a file")
    f_upload.add_argument("repo_id", help="Repository ID")
    f_upload.add_argument("path", help="Destination path in the repository")
    f_upload.add_argument("local", help="Local file (or - for stdin)")
    f_upload.add_argument("--ttl", type=int, help="Expire the file after this many seconds")
    f_upload.set_defaults(func=cmd_files_upload)

    f_download = files_sub.add_parser("download", help="Download a file")
    f_download.add_argument("repo_id", help="Repository ID")
    f_download.add_argument("path", help="File path in the repository")
    f_download.add_argument("--output", "-o", help="Write to this file instead of stdout")
    f_download.set_defaults(func=cmd_files_download)

    f_head = files_sub.add_parser("head", help="Show file metadata")
    f_head.add_argument("repo_id", help="Repository ID")
    f_head.add_argument("path", help="File path in the repository")
    f_head.set_defaults(func=cmd_files_head)

    f_delete = files_sub.add_parser("delete", help="Delete a file")
    f_delete.add_argument("repo_id", help="Repository ID")
    f_delete.add_argument("path", help="File path in the repository")
    f_delete.set_defaults(func=cmd_files_delete)

    f_move = files_sub.add_parser("mv", help="Move a file")
    f_move.add_argument("repo_id", help="Repository ID")
    f_move.add_argument("source", help="Source path")
    f_move.add_argument("destination", help="Destination path")
    f_move.set_defaults(func=cmd_files_move)

    f_copy = files_sub.add_parser("cp", help="Copy a file")
    f_copy.add_argument("repo_id", help="Repository ID")
    f_copy.add_argument("source", help="Source path")
    f_copy.add_argument("destination", help="Destination path")
    f_copy.set_defaults(func=cmd_files_copy)

    # ========== Exec ==========
    exec_parser = subparsers.add_parser("exec", help="Run a command inside a repository")
    exec_parser.add_argument("repo_id", help="Repository ID")
    exec_parser.add_argument("exec_command", metavar="command", help="Command to run")
    exec_parser.add_argument("exec_args", metavar="args", nargs="*", help="Command arguments")
    exec_parser.add_argument("--timeout", "-t", type=int, help="Server-side timeout in seconds")
    exec_parser.add_argument("--max-output", type=int, help="Truncate output beyond this many bytes")
    exec_parser.set_defaults(func=cmd_exec)

    # ========== Archive ==========
    archive = subparsers.add_parser("archive", help="Download a repository archive")
    archive.add_argument("repo_id", help="Repository ID")
    archive.add_argument("--output", "-o", required=True, help="Archive file to write")
    archive.add_argument("--path", help="Only archive this path")
    archive.add_argument("--format", "-f", help="Archive format (default: tar.gz)")
    archive.set_defaults(func=cmd_archive)

    return parser


def main() -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging("DEBUG" if args.verbose else "WARNING")

    if not args.command:
        parser.print_help()
        sys.exit(0)

    # Create client
    try:
        client = LinuxFsClient(base_url=args.base_url)
    except ClientError as e:
        error_output(e)

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
