"""Location and engine settings of the order-line record store."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_flag, optional_env_var

APP_DIR_NAME: Final[str] = "shipsync"
DEFAULT_DB_FILENAME: Final[str] = "shipsync.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Record store URI plus engine options.

    Without ``DATABASE_URI`` the store is a SQLite file in the shipsync data
    directory, which is created on demand.
    """

    uri: str
    echo: bool = False


def platform_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def data_dir() -> Path:
    configured = optional_env_var("SHIPSYNC_DATA_DIR")
    return Path(configured).expanduser().resolve() if configured else platform_data_dir()


def sqlite_uri(directory: Path, filename: str = DEFAULT_DB_FILENAME) -> str:
    directory.mkdir(parents=True, exist_ok=True)
    return f"sqlite+pysqlite:///{directory / filename}"


def get_database_config(
    *,
    uri: str | None = None,
    directory: Path | None = None,
) -> DatabaseConfig:
    """Resolve the record store: explicit ``uri``, then ``DATABASE_URI``, then SQLite."""

    uri = uri or optional_env_var("DATABASE_URI") or sqlite_uri(directory or data_dir())
    return DatabaseConfig(uri=uri, echo=env_flag("SHIPSYNC_SQL_ECHO", default=False))


def get_database_uri() -> str:
    return get_database_config().uri
