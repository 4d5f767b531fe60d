import posixpath

from loguru import logger
from paramiko import SFTPClient

from stylestore.errors import RemoteStatusError
from stylestore.storage.status import RemoteStatus, attempt

ROOT = "/"


def ensure_dir(sftp: SFTPClient, remote_directory: str) -> list[str]:
    """Create every missing segment of ``remote_directory``, root first.

    Each segment costs one listing of its parent; a segment is created only
    when the listing does not contain it, so re-running on an existing tree
    issues no ``mkdir`` calls. Returns the directories that were created.
    """
    logger.debug(f"Ensuring remote directory {remote_directory}")
    created = []
    current = ROOT
    for segment in remote_directory.split("/"):
        if not segment:
            continue
        listing = attempt(sftp.listdir, current)
        if not listing.ok:
            raise RemoteStatusError(current, listing.status, listing.error)
        target = f"{current}{segment}"
        if segment not in listing.value:
            made = attempt(sftp.mkdir, target)
            if not made.ok:
                raise RemoteStatusError(target, made.status, made.error)
            logger.debug(f"Created remote directory {target}")
            created.append(target)
        current = f"{target}/"
    return created


def remote_file_exists(sftp: SFTPClient, remote_path: str) -> bool:
    parent = posixpath.dirname(remote_path) or ROOT
    listing = attempt(sftp.listdir, parent)
    if listing.status is RemoteStatus.NOT_FOUND:
        return False
    if not listing.ok:
        raise RemoteStatusError(parent, listing.status, listing.error)
    return posixpath.basename(remote_path) in listing.value


def _is_within(directory: str, root: str) -> bool:
    if root == ROOT:
        return directory.startswith(ROOT)
    return directory == root or directory.startswith(root + "/")


def prune_empty_parents(
    sftp: SFTPClient, remote_path: str, root: str = ROOT
) -> list[str]:
    """Remove now-empty ancestors of ``remote_path``, deepest first.

    Entries starting with ``.`` do not count when deciding emptiness. The
    walk ends at the first ancestor with visible entries, at the first
    failed listing or ``rmdir``, and never touches ``root`` or anything
    above it.
    """
    root = posixpath.normpath(root)
    removed = []
    directory = posixpath.dirname(posixpath.normpath(remote_path))

    while directory and directory != root and _is_within(directory, root):
        listing = attempt(sftp.listdir, directory)
        if not listing.ok:
            logger.debug(f"Stopped pruning at {directory}: {listing.status.value}")
            break
        if [name for name in listing.value if not name.startswith(".")]:
            break

        result = attempt(sftp.rmdir, directory)
        if not result.ok:
            logger.debug(f"Stopped pruning at {directory}: {result.status.value}")
            break
        logger.debug(f"Removed empty remote directory {directory}")
        removed.append(directory)

        parent = posixpath.dirname(directory)
        if parent == directory:
            break
        directory = parent

    return removed
