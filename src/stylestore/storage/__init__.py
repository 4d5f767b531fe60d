from stylestore.storage.backend import Attachment, FlushResult, StyleStorage
from stylestore.errors import (
    ConfigurationError,
    RemoteStatusError,
    SftpConnectionError,
    StyleStoreError,
)
from stylestore.storage.sftp import SftpStorage
from stylestore.storage.status import RemoteResult, RemoteStatus

__all__ = [
    "Attachment",
    "FlushResult",
    "StyleStorage",
    "SftpStorage",
    "RemoteResult",
    "RemoteStatus",
    "StyleStoreError",
    "ConfigurationError",
    "SftpConnectionError",
    "RemoteStatusError",
]
