import errno
import posixpath
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import pytest

from stylestore.config import SftpOptions
from stylestore.storage.sftp import SftpStorage


class FakeSftp:
    """In-memory SFTP server raising the errors paramiko raises."""

    def __init__(self):
        self.dirs: set[str] = {"/"}
        self.files: dict[str, bytes] = {}
        self.modes: dict[str, int] = {}
        self.protected: set[str] = set()
        self.calls: list[tuple] = []

    @staticmethod
    def _norm(path: str) -> str:
        return posixpath.normpath(path) if path not in ("", "/") else "/"

    def add_file(self, path: str, content: bytes = b"data") -> None:
        path = self._norm(path)
        parent = posixpath.dirname(path)
        while parent not in self.dirs:
            self.dirs.add(parent)
            parent = posixpath.dirname(parent)
        self.files[path] = content

    def add_dir(self, path: str) -> None:
        path = self._norm(path)
        while path not in self.dirs:
            self.dirs.add(path)
            path = posixpath.dirname(path)

    def _children(self, path: str) -> list[str]:
        entries = [p for p in self.dirs | set(self.files) if p != "/"]
        return sorted(
            posixpath.basename(p) for p in entries if posixpath.dirname(p) == path
        )

    def listdir(self, path: str = ".") -> list[str]:
        path = self._norm(path)
        self.calls.append(("listdir", path))
        if path in self.protected:
            raise IOError(errno.EACCES, "Permission denied")
        if path not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")
        return self._children(path)

    def mkdir(self, path: str, mode: int = 0o777) -> None:
        path = self._norm(path)
        self.calls.append(("mkdir", path))
        if posixpath.dirname(path) in self.protected:
            raise IOError(errno.EACCES, "Permission denied")
        if path in self.dirs or path in self.files:
            raise IOError("Failure")
        if posixpath.dirname(path) not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")
        self.dirs.add(path)

    def rmdir(self, path: str) -> None:
        path = self._norm(path)
        self.calls.append(("rmdir", path))
        if path == "/" or path in self.protected:
            raise IOError(errno.EACCES, "Permission denied")
        if path not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")
        if self._children(path):
            raise IOError("Failure")
        self.dirs.remove(path)

    def remove(self, path: str) -> None:
        path = self._norm(path)
        self.calls.append(("remove", path))
        if posixpath.dirname(path) in self.protected:
            raise IOError(errno.EACCES, "Permission denied")
        if path not in self.files:
            raise IOError(errno.ENOENT, "No such file")
        del self.files[path]
        self.modes.pop(path, None)

    def put(self, localpath: str, remotepath: str) -> None:
        remotepath = self._norm(remotepath)
        self.calls.append(("put", localpath, remotepath))
        if posixpath.dirname(remotepath) in self.protected:
            raise IOError(errno.EACCES, "Permission denied")
        if posixpath.dirname(remotepath) not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")
        self.files[remotepath] = Path(localpath).read_bytes()

    def get(self, remotepath: str, localpath: str) -> None:
        remotepath = self._norm(remotepath)
        self.calls.append(("get", remotepath, localpath))
        with open(localpath, "wb") as f:
            if remotepath not in self.files:
                raise IOError(errno.ENOENT, "No such file")
            f.write(self.files[remotepath])

    def chmod(self, path: str, mode: int) -> None:
        path = self._norm(path)
        self.calls.append(("chmod", path, mode))
        if path not in self.files and path not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")
        self.modes[path] = mode

    def calls_named(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]


class FakeSessionProvider:
    def __init__(self, sftp: FakeSftp, error: Optional[Exception] = None):
        self.sftp = sftp
        self.error = error
        self.opened = 0
        self.closed = 0

    @contextmanager
    def session(self):
        if self.error is not None:
            raise self.error
        self.opened += 1
        try:
            yield self.sftp
        finally:
            self.closed += 1


class FakeAttachment:
    default_style = "original"

    def __init__(self, paths: dict[str, str], original_filename: Optional[str] = "a.png"):
        self.paths = paths
        self.original_filename = original_filename
        self.flushed = 0

    def path(self, style: str) -> str:
        return self.paths[style]

    def after_flush_writes(self) -> None:
        self.flushed += 1


@pytest.fixture
def fake_sftp():
    return FakeSftp()


@pytest.fixture
def options():
    return SftpOptions(host="files.example.com", user="deploy", password="secret")


@pytest.fixture
def attachment():
    return FakeAttachment(
        {
            "original": "/media/42/original/a.png",
            "thumb": "/media/42/thumb/a.png",
        }
    )


@pytest.fixture
def provider(fake_sftp):
    return FakeSessionProvider(fake_sftp)


@pytest.fixture
def storage(attachment, options, provider):
    return SftpStorage(attachment, options, session_provider=provider)


@pytest.fixture
def local_file(tmp_path):
    path = tmp_path / "upload.png"
    path.write_bytes(b"png-bytes")
    return path
