"""
stylestore CLI - manual access to a remote style store.

Provides subcommands:
- stylestore upload: Upload a local file, creating remote directories
- stylestore delete: Delete remote files and prune empty parents
- stylestore exists: Check whether a remote file exists
- stylestore download: Copy a remote file to the local disk
- stylestore version: Display version information
"""

import argparse
import os
import sys
from typing import Optional

from loguru import logger

from stylestore.config import ENV_PREFIX, SftpOptions, load_options_from_env
from stylestore.errors import StyleStoreError
from stylestore.storage.sftp import SftpStorage

CLI_STYLE = "original"


def get_version() -> str:
    """Get the package version."""
    try:
        from importlib.metadata import version

        return version("stylestore")
    except Exception:
        return "0.1.0"


class RemotePathAttachment:
    """Attachment with a single style mapped to one explicit remote path."""

    default_style = CLI_STYLE

    def __init__(self, remote_path: str):
        self.remote_path = remote_path

    @property
    def original_filename(self) -> Optional[str]:
        return os.path.basename(self.remote_path)

    def path(self, style: str) -> str:
        return self.remote_path

    def after_flush_writes(self) -> None:
        pass


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _load_options(args) -> SftpOptions:
    env = dict(os.environ)
    for flag, name in (("host", "HOST"), ("user", "USER"), ("port", "PORT")):
        value = getattr(args, flag, None)
        if value:
            env[f"{ENV_PREFIX}{name}"] = str(value)
    if getattr(args, "key", None):
        env[f"{ENV_PREFIX}KEYS"] = ",".join(args.key)
    return load_options_from_env(env)


def _storage_for(remote_path: str, options: SftpOptions) -> SftpStorage:
    return SftpStorage(RemotePathAttachment(remote_path), options)


def cmd_version(args) -> int:
    """Handle the 'version' subcommand."""
    print(f"stylestore version {get_version()}")
    print(f"Python {sys.version}")
    return 0


def cmd_upload(args) -> int:
    storage = _storage_for(args.remote, _load_options(args))
    storage.queue_write(CLI_STYLE, args.local)
    results = storage.flush_writes()
    for result in results:
        print(f"{result.path}: {result.status.value}")
    return 0 if all(r.ok for r in results) else 1


def cmd_delete(args) -> int:
    storage = _storage_for(args.remote[0], _load_options(args))
    for remote_path in args.remote:
        storage.queue_delete(remote_path)
    results = storage.flush_deletes()
    for result in results:
        print(f"{result.path}: {result.status.value}")
    return 0 if all(r.ok for r in results) else 1


def cmd_exists(args) -> int:
    storage = _storage_for(args.remote, _load_options(args))
    found = storage.exists()
    print("yes" if found else "no")
    return 0 if found else 1


def cmd_download(args) -> int:
    storage = _storage_for(args.remote, _load_options(args))
    return 0 if storage.copy_to_local(CLI_STYLE, args.local) else 1


def _add_connection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--host", type=str, default=None, help=f"SFTP host (default: ${ENV_PREFIX}HOST)"
    )
    parser.add_argument(
        "--user", type=str, default=None, help=f"SFTP user (default: ${ENV_PREFIX}USER)"
    )
    parser.add_argument(
        "--port", type=int, default=None, help=f"SFTP port (default: ${ENV_PREFIX}PORT or 22)"
    )
    parser.add_argument(
        "--key",
        action="append",
        default=None,
        help="Private key file, may be repeated (default: $STYLESTORE_SFTP_KEYS)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log every remote call"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stylestore",
        description="stylestore - store attachment styles on an SFTP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stylestore upload ./thumb.png /srv/media/1/thumb/a.png --host files.local --user deploy
  stylestore delete /srv/media/1/thumb/a.png /srv/media/1/original/a.png
  stylestore exists /srv/media/1/thumb/a.png
  STYLESTORE_SFTP_PASSWORD=secret stylestore download /srv/media/1/thumb/a.png ./a.png
        """,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    upload_parser = subparsers.add_parser("upload", help="Upload a local file")
    upload_parser.add_argument("local", help="Local file to upload")
    upload_parser.add_argument("remote", help="Absolute remote destination path")
    _add_connection_args(upload_parser)
    upload_parser.set_defaults(func=cmd_upload)

    delete_parser = subparsers.add_parser(
        "delete", help="Delete remote files and prune empty directories"
    )
    delete_parser.add_argument("remote", nargs="+", help="Absolute remote paths")
    _add_connection_args(delete_parser)
    delete_parser.set_defaults(func=cmd_delete)

    exists_parser = subparsers.add_parser("exists", help="Check a remote file exists")
    exists_parser.add_argument("remote", help="Absolute remote path")
    _add_connection_args(exists_parser)
    exists_parser.set_defaults(func=cmd_exists)

    download_parser = subparsers.add_parser(
        "download", help="Copy a remote file to the local disk"
    )
    download_parser.add_argument("remote", help="Absolute remote path")
    download_parser.add_argument("local", help="Local destination path")
    _add_connection_args(download_parser)
    download_parser.set_defaults(func=cmd_download)

    version_parser = subparsers.add_parser(
        "version",
        help="Display version information",
        description="Display stylestore version and Python version",
    )
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    _configure_logging(getattr(args, "verbose", False))

    try:
        return args.func(args)
    except StyleStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
