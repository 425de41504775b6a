"""
Structured logging of download events.
Emits each event both to the standard logger and, optionally, as a JSON line.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Logger that outputs both human-readable and machine-parseable events.

    Usage:
        logger = StructuredLogger("nzb_gateway.events")
        logger.info("fetch_completed", search_result_id=42, elapsed_ms=120)
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_console: bool = True,
    ):
        """
        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_console: Forward events to the standard logger
        """
        self.name = name
        self.enable_console = enable_console
        self._logger = logging.getLogger(name)

        self._json_file = None
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            json_log_path = log_dir / f"nzb_gateway_{timestamp}.jsonl"
            self._json_file = open(json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
        }

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        parts.extend(f"{key}={value}" for key, value in context.items())
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }
        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, ValueError) as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _emit(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            self._logger.log(level, self._format_message(event, **context))
        self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        self._emit(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._emit(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        self._emit(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        self._emit(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class DownloadEventLogger:
    """Named events emitted by the download handler and the ZIP bundler."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def lookup_miss(self, search_result_id: int):
        self.logger.warning("lookup_miss", search_result_id=search_result_id)

    def fetch_started(self, search_result_id: int, indexer: str):
        self.logger.debug(
            "fetch_started", search_result_id=search_result_id, indexer=indexer
        )

    def fetch_completed(self, search_result_id: int, size_bytes: int, elapsed_ms: float):
        self.logger.info(
            "fetch_completed",
            search_result_id=search_result_id,
            size_bytes=size_bytes,
            elapsed_ms=round(elapsed_ms, 1),
        )

    def fetch_failed(self, search_result_id: int, error: str, elapsed_ms: float):
        self.logger.error(
            "fetch_failed",
            search_result_id=search_result_id,
            error=error,
            elapsed_ms=round(elapsed_ms, 1),
        )

    def audit_written(self, search_result_id: int, result: str, stored: bool):
        self.logger.debug(
            "audit_written",
            search_result_id=search_result_id,
            result=result,
            stored=stored,
        )

    def bundle_summary(self, bundled: int, requested: int, size_bytes: int):
        self.logger.info(
            "bundle_summary",
            bundled=bundled,
            requested=requested,
            size_bytes=size_bytes,
        )


def create_event_logger(
    log_dir: Path | None = None, enable_console: bool = False
) -> DownloadEventLogger:
    """
    Create the download event logger.

    Console output is off by default; the handler already logs human-readable
    messages for the same events.
    """
    base = StructuredLogger(
        "nzb_gateway.events", log_dir=log_dir, enable_console=enable_console
    )
    return DownloadEventLogger(base)
