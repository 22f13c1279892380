import json
import os
import datetime
import threading
from typing import Dict, Any, List

from utils.logger import get_logger

logger = get_logger("error_manager")


class ErrorManager:
    """
    Centralized manager for logging and retrieving generation failures.

    Transient failures never reach the user; they are recorded here so that
    degraded (fallback) output can be traced back to the call that failed.
    Photo fallbacks are logged from worker threads, so every file access
    goes through _lock.
    """

    LOG_FILE = "outputs/generation_errors.log"
    MAX_ENTRIES = 100
    _lock = threading.Lock()

    @classmethod
    def configure(cls, log_file: str):
        """Point the manager at a different log file."""
        cls.LOG_FILE = log_file

    @classmethod
    def log_error(
        cls,
        service: str,
        error_message: str,
        details: Any = None,
        severity: str = "error"
    ):
        """
        Log an error to the log file.

        Args:
            service: Name of the stage (e.g., "SegmentCharacterStage")
            error_message: Brief error description
            details: Additional context (exception text, raw response excerpt)
            severity: Error severity ("warning", "error", "critical")
        """
        entry = {
            "timestamp": datetime.datetime.now().isoformat(),
            "service": service,
            "message": error_message,
            "details": str(details) if details else None,
            "severity": severity
        }

        try:
            with cls._lock:
                cls._append(entry)
        except OSError as e:
            logger.error(f"Failed to write to error log {cls.LOG_FILE}: {e}")

        log = logger.warning if severity == "warning" else logger.error
        log(f"{service}: {error_message}")

    @classmethod
    def _append(cls, entry: Dict[str, Any]):
        """read → append → trim → write (호출자가 _lock 보유)."""
        log_dir = os.path.dirname(cls.LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        logs = []
        if os.path.exists(cls.LOG_FILE):
            try:
                with open(cls.LOG_FILE, 'r', encoding='utf-8') as f:
                    file_content = f.read()
                    if file_content.strip():
                        logs = json.loads(file_content)
            except json.JSONDecodeError:
                logs = []  # Reset if corrupted

        logs.append(entry)

        if len(logs) > cls.MAX_ENTRIES:
            logs = logs[-cls.MAX_ENTRIES:]

        with open(cls.LOG_FILE, 'w', encoding='utf-8') as f:
            json.dump(logs, f, indent=2, ensure_ascii=False)

    @classmethod
    def get_recent_errors(cls, limit: int = 20) -> List[Dict]:
        """Get recent error logs, newest first."""
        with cls._lock:
            if not os.path.exists(cls.LOG_FILE):
                return []

            try:
                with open(cls.LOG_FILE, 'r', encoding='utf-8') as f:
                    logs = json.load(f)
            except (OSError, json.JSONDecodeError):
                return []

        return sorted(logs, key=lambda x: x['timestamp'], reverse=True)[:limit]

    @classmethod
    def clear_logs(cls):
        """Clear the error log file."""
        with cls._lock:
            if os.path.exists(cls.LOG_FILE):
                os.remove(cls.LOG_FILE)
