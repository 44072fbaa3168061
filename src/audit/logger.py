"""Audit logger: JSON Lines relay outcomes in a size-rotated file.

Records outcome metadata only. Message text and reply tokens are never
written here.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from src.models import AuditEvent


class AuditLogger:
    """One JSON document per line, rotated at ``max_bytes``."""

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._handler = RotatingFileHandler(
            self.log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
            delay=True,
        )

    @classmethod
    def from_env(cls, log_path: str) -> AuditLogger:
        """Create AuditLogger with rotation settings from environment variables."""
        max_bytes = int(os.environ.get("AUDIT_LOG_MAX_BYTES", "10485760"))
        backup_count = int(os.environ.get("AUDIT_LOG_BACKUP_COUNT", "5"))
        return cls(log_path=log_path, max_bytes=max_bytes, backup_count=backup_count)

    def log(self, event: AuditEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        record = logging.makeLogRecord({
            "name": "src.audit",
            "levelno": logging.INFO,
            "levelname": "INFO",
            "msg": event.model_dump_json(),
        })
        self._handler.handle(record)

    def close(self) -> None:
        self._handler.close()
