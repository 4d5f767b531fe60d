import os
from dataclasses import dataclass, field, fields
from typing import Mapping, Optional

from stylestore.errors import ConfigurationError

DEFAULT_PORT = 22
DEFAULT_PERMISSIONS = 0o644
DEFAULT_ROOT = "/"

ENV_PREFIX = "STYLESTORE_SFTP_"


def _parse_port(value) -> int:
    if value is None or value == "":
        return DEFAULT_PORT
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid SFTP port: {value!r}") from None
    if not 0 < port < 65536:
        raise ConfigurationError(f"Invalid SFTP port: {value!r}")
    return port


@dataclass
class SftpOptions:
    host: str
    user: Optional[str] = None
    password: Optional[str] = None
    port: int = DEFAULT_PORT
    keys: list[str] = field(default_factory=list)
    permissions: int = DEFAULT_PERMISSIONS
    root: str = DEFAULT_ROOT
    strict_host_keys: bool = True
    connect_kwargs: dict = field(default_factory=dict)

    def __post_init__(self):
        if not self.host:
            raise ConfigurationError("SFTP host is required")
        if not self.root.startswith("/"):
            raise ConfigurationError(f"Pruning root must be absolute: {self.root}")
        self.port = _parse_port(self.port)

    def __repr__(self) -> str:
        password = "***" if self.password else None
        return (
            f"SftpOptions(host={self.host!r}, user={self.user!r}, "
            f"password={password!r}, port={self.port}, keys={self.keys!r}, "
            f"root={self.root!r})"
        )

    @classmethod
    def from_dict(cls, options: Mapping) -> "SftpOptions":
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in options.items() if k in known}
        extra = {k: v for k, v in options.items() if k not in known}
        if extra:
            kwargs["connect_kwargs"] = {**extra, **kwargs.get("connect_kwargs", {})}
        if "host" not in kwargs:
            raise ConfigurationError("SFTP host is required")
        if isinstance(kwargs.get("keys"), str):
            kwargs["keys"] = [kwargs["keys"]]
        return cls(**kwargs)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off")


def load_options_from_env(environ: Optional[Mapping[str, str]] = None) -> SftpOptions:
    env = os.environ if environ is None else environ

    host = env.get(f"{ENV_PREFIX}HOST")
    if not host:
        raise ConfigurationError(f"{ENV_PREFIX}HOST is not set")

    keys = env.get(f"{ENV_PREFIX}KEYS", "")
    return SftpOptions(
        host=host,
        user=env.get(f"{ENV_PREFIX}USER"),
        password=env.get(f"{ENV_PREFIX}PASSWORD"),
        port=_parse_port(env.get(f"{ENV_PREFIX}PORT")),
        keys=[k.strip() for k in keys.split(",") if k.strip()],
        root=env.get(f"{ENV_PREFIX}ROOT", DEFAULT_ROOT),
        strict_host_keys=_parse_bool(env.get(f"{ENV_PREFIX}STRICT_HOST_KEYS", "true")),
    )
