import posixpath
from pathlib import Path
from typing import Optional

from loguru import logger
from paramiko import SFTPClient

from stylestore.config import SftpOptions
from stylestore.storage.backend import Attachment, FlushResult, LocalFile
from stylestore.errors import RemoteStatusError
from stylestore.storage.remote_dirs import (
    ensure_dir,
    prune_empty_parents,
    remote_file_exists,
)
from stylestore.storage.session import SftpSessionProvider
from stylestore.storage.status import RemoteStatus, attempt


class SftpStorage:
    """Stores the styles of one attachment on a remote SFTP server."""

    def __init__(
        self,
        attachment: Attachment,
        options: SftpOptions,
        session_provider: Optional[SftpSessionProvider] = None,
    ):
        self.attachment = attachment
        self.options = options
        self.session_provider = session_provider or SftpSessionProvider(options)
        self._queued_for_write: dict[str, Path] = {}
        self._queued_for_delete: list[str] = []

    @property
    def queued_for_write(self) -> dict[str, Path]:
        return dict(self._queued_for_write)

    @property
    def queued_for_delete(self) -> list[str]:
        return list(self._queued_for_delete)

    def queue_write(self, style: str, local_file: LocalFile) -> None:
        self._queued_for_write[style] = Path(local_file)

    def queue_delete(self, remote_path: str) -> None:
        if remote_path not in self._queued_for_delete:
            self._queued_for_delete.append(remote_path)

    def queue_delete_style(self, style: str) -> None:
        self.queue_delete(self.attachment.path(style))

    def exists(self, style: Optional[str] = None) -> bool:
        if not self.attachment.original_filename:
            return False

        remote_path = self.attachment.path(style or self.attachment.default_style)
        with self.session_provider.session() as sftp:
            return remote_file_exists(sftp, remote_path)

    def copy_to_local(self, style: str, local_dest_path: LocalFile) -> bool:
        remote_path = self.attachment.path(style)
        logger.info(f"Copying {remote_path} to local file {local_dest_path}")

        with self.session_provider.session() as sftp:
            result = attempt(sftp.get, remote_path, str(local_dest_path))

        if not result.ok:
            logger.warning(
                f"{result.error} - cannot copy {remote_path} to local file {local_dest_path}"
            )
            Path(local_dest_path).unlink(missing_ok=True)
            return False
        return True

    def flush_writes(self) -> list[FlushResult]:
        entries, self._queued_for_write = self._queued_for_write, {}
        if not entries:
            return []
        return self.write_batch(entries)

    def flush_deletes(self) -> list[FlushResult]:
        paths, self._queued_for_delete = self._queued_for_delete, []
        if not paths:
            return []
        return self.delete_batch(paths)

    def write_batch(self, entries: dict[str, Path]) -> list[FlushResult]:
        results = []
        with self.session_provider.session() as sftp:
            for style, local_file in entries.items():
                results.append(self._write_one(sftp, style, local_file))

        self.attachment.after_flush_writes()

        failed = sum(1 for r in results if not r.ok)
        logger.info(f"Flushed {len(results)} writes ({failed} failed)")
        return results

    def _write_one(self, sftp: SFTPClient, style: str, local_file: Path) -> FlushResult:
        remote_path = self.attachment.path(style)
        try:
            ensure_dir(sftp, posixpath.dirname(remote_path))
        except RemoteStatusError as e:
            logger.warning(f"Cannot create directory for {remote_path}: {e}")
            return FlushResult(remote_path, e.status, str(e), style)

        logger.debug(f"Uploading {local_file} to {remote_path}")
        uploaded = attempt(sftp.put, str(local_file), remote_path)
        if not uploaded.ok:
            logger.warning(f"Upload of {local_file} to {remote_path} failed: {uploaded.error}")
            return FlushResult(remote_path, uploaded.status, uploaded.error, style)

        chmod = attempt(sftp.chmod, remote_path, self.options.permissions)
        if not chmod.ok:
            logger.warning(f"Cannot set permissions on {remote_path}: {chmod.error}")
            return FlushResult(remote_path, chmod.status, chmod.error, style)

        return FlushResult(remote_path, RemoteStatus.OK, style=style)

    def delete_batch(self, paths: list[str]) -> list[FlushResult]:
        results = []
        with self.session_provider.session() as sftp:
            for remote_path in paths:
                results.append(self._delete_one(sftp, remote_path))

        logger.info(f"Flushed {len(results)} deletes")
        return results

    def _delete_one(self, sftp: SFTPClient, remote_path: str) -> FlushResult:
        logger.debug(f"Deleting file {remote_path}")
        removed = attempt(sftp.remove, remote_path)

        status, error = removed.status, removed.error
        # already gone counts as deleted
        if status is RemoteStatus.NOT_FOUND:
            status, error = RemoteStatus.OK, None
        elif status is not RemoteStatus.OK:
            logger.debug(f"Ignoring failed delete of {remote_path}: {error}")

        prune_empty_parents(sftp, remote_path, self.options.root)
        return FlushResult(remote_path, status, error)
