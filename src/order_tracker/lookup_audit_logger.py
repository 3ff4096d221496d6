"""
Order Tracker Audit Logger
Writes one structured JSON line per lookup, with file rotation.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from . import tracker_config as cfg
from .models import LookupResult, LookupStatus
from .tracker_logger import mask_order_code


class LookupAuditLogger:
    """Per-lookup audit trail for the order tracker."""

    def __init__(
        self,
        log_dir: Optional[str] = None,
        max_mb: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        self.log_dir = log_dir or cfg.LOG_DIR
        self.max_mb = max_mb or cfg.AUDIT_LOG_MAX_MB
        self.backup_count = backup_count or cfg.AUDIT_LOG_BACKUP_COUNT

        Path(self.log_dir).mkdir(parents=True, exist_ok=True)

        self._logger = self._create_logger()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def log_lookup(
        self,
        result: LookupResult,
        force_refresh: bool = False,
        elapsed_seconds: float = 0.0,
    ) -> Dict[str, Any]:
        """Log a single lookup outcome and return the entry written."""
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": "ERROR" if result.status == LookupStatus.ERROR else "INFO",
            "sequence": result.sequence,
            "order_code_masked": mask_order_code(result.code),
            "status": result.status.value,
            "found": result.found,
            "pricing_status": result.pricing_status.value,
            "force_refresh": force_refresh,
            "processing_time_seconds": round(elapsed_seconds, 3),
        }
        if result.decoded is not None:
            entry["package_id"] = result.decoded.package_id
        if result.invoice is not None:
            entry["total"] = result.invoice.total
            entry["revision_fee"] = result.invoice.revision.fee
        if result.error:
            entry["error"] = result.error
            entry["error_code"] = result.error_code

        line = json.dumps(entry, ensure_ascii=False)
        if entry["level"] == "ERROR":
            self._logger.error(line)
        else:
            self._logger.info(line)
        return entry

    def get_log_path(self) -> str:
        return os.path.join(self.log_dir, "lookup_audit.log")

    def close(self) -> None:
        for handler in list(self._logger.handlers):
            handler.close()
            self._logger.removeHandler(handler)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _create_logger(self) -> logging.Logger:
        """Create a structured rotating-file logger."""
        logger = logging.getLogger(f"order_tracker_audit_{id(self)}")
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.handlers.clear()

        handler = RotatingFileHandler(
            self.get_log_path(),
            maxBytes=self.max_mb * 1024 * 1024,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(logging.DEBUG)
        # Entries are already structured JSON
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

        return logger
