from typing import Optional


class StyleStoreError(Exception):
    pass


class ConfigurationError(StyleStoreError):
    pass


class SftpConnectionError(StyleStoreError):
    """Raised when an SFTP session cannot be opened or authenticated."""

    def __init__(self, host: Optional[str], message: str):
        if host is None:
            super().__init__(f"SFTP connection lost: {message}")
        else:
            super().__init__(f"Cannot connect to {host}: {message}")
        self.host = host


class RemoteStatusError(StyleStoreError):
    """A single remote call failed with a status other than success."""

    def __init__(self, path: str, status, message: str = ""):
        detail = f": {message}" if message else ""
        super().__init__(f"{status.value} for {path}{detail}")
        self.path = path
        self.status = status
