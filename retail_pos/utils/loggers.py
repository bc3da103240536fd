# retail_pos/utils/loggers.py
"""
Logging setup.

Public API
----------
- get_logger(name) -> logging.Logger            console logger, no duplicate handlers
- configure_file_logging(path, level)           JSON-lines file for the whole package
- log_event(logger, op, phase, message, extra)  structured operational line
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

__all__ = ["get_logger", "configure_file_logging", "log_event"]

ROOT_LOGGER_NAME = "retail_pos"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    logger = logging.getLogger(name)
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        root.setLevel(logging.INFO)
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(ch)
    return logger


class _JsonLineFormatter(logging.Formatter):
    """
    {"ts":"2025-09-16T12:00:01.123Z","level":"INFO","name":"retail_pos.sales","msg":"...","extra":{...}}
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "extra_payload") and isinstance(record.extra_payload, dict):
            payload["extra"] = record.extra_payload
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_file_logging(path: Path | str, level: int | str = logging.INFO) -> logging.Logger:
    """
    Attach an append-only JSON-lines file handler to the package logger.
    Calling it again with the same path does not add a second handler.
    """
    logger = get_logger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    log_file = Path(path)
    for h in logger.handlers:
        if isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_file.resolve():
            return logger

    log_file.parent.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(str(log_file), mode="a", encoding="utf-8", delay=True)
    fh.setLevel(level)
    fh.setFormatter(_JsonLineFormatter())
    logger.addHandler(fh)
    return logger


def log_event(
    logger: logging.Logger,
    op: str,
    phase: str,
    message: str,
    extra: Optional[Dict[str, object]] = None,
    level: int = logging.INFO,
) -> None:
    """
    Log a structured event line.

    Args:
        logger: any logger under the package logger.
        op: operation name, e.g. "sale", "receipt", "schema".
        phase: phase within the operation, e.g. "registered", "cancelled", "failed".
        message: short human-readable text.
        extra: additional key/values (ids, totals, paths).
        level: logging level (default INFO).
    """
    extra_payload: Dict[str, object] = {"op": op, "phase": phase}
    if extra:
        for k, v in extra.items():
            if k not in extra_payload:
                extra_payload[k] = v
    logger.log(level, message, extra={"extra_payload": extra_payload})
