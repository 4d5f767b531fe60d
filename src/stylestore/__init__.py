from stylestore.config import SftpOptions, load_options_from_env
from stylestore.storage import (
    Attachment,
    FlushResult,
    RemoteStatus,
    SftpStorage,
    StyleStorage,
)

__all__ = [
    "Attachment",
    "FlushResult",
    "RemoteStatus",
    "SftpOptions",
    "SftpStorage",
    "StyleStorage",
    "load_options_from_env",
]
