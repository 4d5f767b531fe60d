import socket
from contextlib import contextmanager
from typing import Iterator

try:
    import paramiko
except ImportError as e:
    raise ImportError(
        "SFTP storage requires paramiko (you may need to run: pip install paramiko)"
    ) from e

from loguru import logger

from stylestore.config import SftpOptions
from stylestore.errors import SftpConnectionError


class SftpSessionProvider:
    """Opens one authenticated SFTP session per ``session()`` block.

    Sessions are never cached: every block connects, hands the client to the
    caller and closes the connection on exit, whether the block returns or
    raises.
    """

    def __init__(self, options: SftpOptions):
        self.options = options

    def _get_connect_kwargs(self) -> dict:
        kwargs = {
            "hostname": self.options.host,
            "port": self.options.port,
            "username": self.options.user,
            "password": self.options.password,
        }
        if self.options.keys:
            kwargs["key_filename"] = list(self.options.keys)
            kwargs["look_for_keys"] = False
        kwargs.update(self.options.connect_kwargs)
        return kwargs

    def _connect(self) -> paramiko.SSHClient:
        client = paramiko.SSHClient()
        client.load_system_host_keys()
        if self.options.strict_host_keys:
            client.set_missing_host_key_policy(paramiko.RejectPolicy())
        else:
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        try:
            client.connect(**self._get_connect_kwargs())
        except (paramiko.SSHException, socket.error) as e:
            client.close()
            logger.error(f"SFTP connection to {self.options.host} failed: {e}")
            raise SftpConnectionError(self.options.host, str(e)) from e
        return client

    @contextmanager
    def session(self) -> Iterator[paramiko.SFTPClient]:
        client = self._connect()
        try:
            try:
                sftp = client.open_sftp()
            except paramiko.SSHException as e:
                raise SftpConnectionError(self.options.host, str(e)) from e
            logger.debug(f"Opened SFTP session to {self.options.host}:{self.options.port}")
            try:
                yield sftp
            finally:
                sftp.close()
        finally:
            client.close()
            logger.debug(f"Closed SFTP session to {self.options.host}")
