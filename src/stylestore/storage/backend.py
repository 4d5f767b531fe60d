from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

from stylestore.storage.status import RemoteStatus

LocalFile = Union[str, Path]


@runtime_checkable
class Attachment(Protocol):
    """What the host framework provides about one attached file."""

    default_style: str

    @property
    def original_filename(self) -> Optional[str]: ...

    def path(self, style: str) -> str: ...

    def after_flush_writes(self) -> None: ...


@dataclass
class FlushResult:
    path: str
    status: RemoteStatus
    error: Optional[str] = None
    style: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is RemoteStatus.OK


@runtime_checkable
class StyleStorage(Protocol):
    def exists(self, style: Optional[str] = None) -> bool: ...

    def copy_to_local(self, style: str, local_dest_path: LocalFile) -> bool: ...

    def queue_write(self, style: str, local_file: LocalFile) -> None: ...

    def queue_delete(self, remote_path: str) -> None: ...

    def flush_writes(self) -> list[FlushResult]: ...

    def flush_deletes(self) -> list[FlushResult]: ...
