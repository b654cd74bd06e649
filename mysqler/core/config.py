"""Connection settings for the single database connection."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .errors import ValidationError

DEFAULT_CHARSET = "utf8mb4"
DEFAULT_PORT = 3306
DEFAULT_CONNECT_TIMEOUT = 10

_REQUIRED_KEYS = ("hostname", "username", "password", "database")


@dataclass(frozen=True)
class ConnectionSettings:
    """Where and how to open the connection.

    `charset` is applied right after connecting. Timeouts are in seconds;
    `None` leaves the driver default in place.
    """

    hostname: str
    username: str
    password: str
    database: str
    port: int = DEFAULT_PORT
    charset: str = DEFAULT_CHARSET
    connect_timeout: Optional[float] = DEFAULT_CONNECT_TIMEOUT
    read_timeout: Optional[float] = None
    write_timeout: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConnectionSettings":
        """Build settings from a `hostname/username/password/database` mapping.

        Optional keys: `port`, `charset`, `connect_timeout`, `read_timeout`,
        `write_timeout`.
        """

        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise ValidationError(
                f"Connection settings missing required keys: {', '.join(missing)}."
            )
        return cls(
            hostname=str(data["hostname"]),
            username=str(data["username"]),
            password=str(data["password"]),
            database=str(data["database"]),
            port=int(data.get("port", DEFAULT_PORT)),
            charset=str(data.get("charset", DEFAULT_CHARSET)),
            connect_timeout=_optional_float(
                data.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT)
            ),
            read_timeout=_optional_float(data.get("read_timeout")),
            write_timeout=_optional_float(data.get("write_timeout")),
        )

    @classmethod
    def from_env(cls, prefix: str = "MYSQLER_") -> "ConnectionSettings":
        """Build settings from `<prefix>HOST`, `<prefix>USER`, ... variables."""

        def env(name: str, default: Optional[str] = None) -> Optional[str]:
            return os.getenv(f"{prefix}{name}", default)

        return cls(
            hostname=env("HOST", "localhost") or "localhost",
            username=env("USER", "root") or "root",
            password=env("PASSWORD", "") or "",
            database=env("DATABASE", "") or "",
            port=int(env("PORT", str(DEFAULT_PORT)) or DEFAULT_PORT),
            charset=env("CHARSET", DEFAULT_CHARSET) or DEFAULT_CHARSET,
            connect_timeout=_optional_float(
                env("CONNECT_TIMEOUT", str(DEFAULT_CONNECT_TIMEOUT))
            ),
            read_timeout=_optional_float(env("READ_TIMEOUT")),
            write_timeout=_optional_float(env("WRITE_TIMEOUT")),
        )

    def to_connect_kwargs(self) -> Dict[str, Any]:
        """Return keyword arguments for `pymysql.connect`."""

        kwargs: Dict[str, Any] = {
            "host": self.hostname,
            "user": self.username,
            "password": self.password,
            "database": self.database,
            "port": self.port,
            "charset": self.charset,
            "autocommit": True,
        }
        for name in ("connect_timeout", "read_timeout", "write_timeout"):
            value = getattr(self, name)
            if value is not None:
                kwargs[name] = value
        return kwargs


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Timeout must be a number of seconds; got {value!r}.") from None
