# retail_pos/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .constants import (
    ACTIVATION_FILE_NAME,
    ACTIVATION_SECRET_ENV,
    DATA_DIR_ENV,
    DB_FILE_NAME,
    DEFAULT_ACTIVATION_SECRET,
    DEFAULT_DATA_DIR,
    IMAGES_DIR,
    LOG_FILE_NAME,
    LOG_LEVEL_ENV,
    LOGS_DIR,
    RECEIPTS_DIR,
)


@dataclass(frozen=True)
class Settings:
    """
    Resolved locations and secrets for one running instance.

    Everything lives under `data_path`; tests point it at a temp dir.
    """

    data_path: Path
    activation_secret: str = DEFAULT_ACTIVATION_SECRET
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.data_path / DB_FILE_NAME

    @property
    def images_path(self) -> Path:
        return self.data_path / IMAGES_DIR

    @property
    def receipts_path(self) -> Path:
        return self.data_path / RECEIPTS_DIR

    @property
    def log_path(self) -> Path:
        return self.data_path / LOGS_DIR / LOG_FILE_NAME

    @property
    def activation_path(self) -> Path:
        return self.data_path / ACTIVATION_FILE_NAME

    @classmethod
    def from_env(cls) -> "Settings":
        raw = os.environ.get(DATA_DIR_ENV)
        data_path = Path(raw).expanduser() if raw else Path.home() / DEFAULT_DATA_DIR
        return cls(
            data_path=data_path.resolve(),
            activation_secret=os.environ.get(ACTIVATION_SECRET_ENV) or DEFAULT_ACTIVATION_SECRET,
            log_level=(os.environ.get(LOG_LEVEL_ENV) or "INFO").upper(),
        )

    def ensure_dirs(self) -> None:
        for p in (self.data_path, self.images_path, self.receipts_path, self.log_path.parent):
            p.mkdir(parents=True, exist_ok=True)
