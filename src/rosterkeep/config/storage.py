"""Location of the document store database."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "rosterkeep"
DEFAULT_DB_FILENAME: Final[str] = "rosterkeep.db"
DATA_DIR_ENV: Final[str] = "ROSTERKEEP_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """SQLite file under ``data_dir`` unless ``database_uri_override`` names another database."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME
    database_uri_override: str | None = None

    @property
    def database_path(self) -> Path:
        return self.data_dir.expanduser().resolve() / self.database_filename

    def database_uri(self) -> str:
        if self.database_uri_override:
            return self.database_uri_override
        path = self.database_path
        path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{path}"


def _platform_data_home() -> Path:
    if sys.platform == "win32":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv(DATA_DIR_ENV)
    data_dir = Path(env_dir) if env_dir else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(
        data_dir=data_dir,
        database_uri_override=os.getenv(DATABASE_URI_ENV) or None,
    )
