import errno
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from stylestore.errors import SftpConnectionError


class RemoteStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"


@dataclass
class RemoteResult:
    status: RemoteStatus
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is RemoteStatus.OK


def classify(exc: BaseException) -> RemoteStatus:
    """Map an SFTP error to a status.

    paramiko raises IOError(errno.ENOENT) for SSH_FX_NO_SUCH_FILE and
    IOError(errno.EACCES) for SSH_FX_PERMISSION_DENIED; everything else
    arrives as a bare IOError or EOFError.
    """
    code = getattr(exc, "errno", None)
    if isinstance(exc, FileNotFoundError) or code == errno.ENOENT:
        return RemoteStatus.NOT_FOUND
    if isinstance(exc, PermissionError) or code in (errno.EACCES, errno.EPERM):
        return RemoteStatus.PERMISSION_DENIED
    return RemoteStatus.OTHER


def _channel_closed(fn: Callable) -> bool:
    client = getattr(fn, "__self__", None)
    get_channel = getattr(client, "get_channel", None)
    if get_channel is None:
        return False
    channel = get_channel()
    return channel is not None and channel.closed is True


def attempt(fn: Callable, *args, **kwargs) -> RemoteResult:
    """Run one SFTP call, turning status errors into a ``RemoteResult``.

    Transport failures (reset, timeout, a closed channel) are not statuses
    of the call and raise ``SftpConnectionError``.
    """
    try:
        return RemoteResult(RemoteStatus.OK, fn(*args, **kwargs))
    except (ConnectionError, TimeoutError) as e:
        raise SftpConnectionError(None, str(e) or type(e).__name__) from e
    except (OSError, EOFError) as e:
        if _channel_closed(fn):
            raise SftpConnectionError(None, str(e) or type(e).__name__) from e
        return RemoteResult(classify(e), error=str(e) or type(e).__name__)
