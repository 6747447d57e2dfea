"""
Structured logging

JSON-line log output shared by the router, tool and A/B testing modules:
- context propagation (request_id, user_id, agent)
- configurable level
- sensitive value masking
- performance timing

Usage:
    logger = get_logger("IntentClassifier")
    logger.info("Classification started", query_length=42)
    logger.error("LLM call failed", error=str(e), request_id=req_id)
"""

import json
import logging
import re
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Thread-local storage for context propagation
_context = threading.local()


class SensitiveDataFilter:
    """Masks values whose key looks like a credential"""

    SENSITIVE_PATTERNS = [
        r'api[_-]?key',
        r'secret',
        r'password',
        r'token',
        r'auth',
        r'credential',
        r'access[_-]?key'
    ]

    @classmethod
    def mask(cls, data: Any) -> Any:
        """
        Recursively mask sensitive values

        Args:
            data: Raw data (dict, list, scalar)

        Returns:
            Masked copy of the data
        """
        if isinstance(data, dict):
            return {k: cls._mask_value(k, v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls.mask(item) for item in data]
        else:
            return data

    @classmethod
    def _mask_value(cls, key: str, value: Any) -> Any:
        key_lower = str(key).lower()
        is_sensitive = any(re.search(pattern, key_lower) for pattern in cls.SENSITIVE_PATTERNS)

        if is_sensitive:
            if isinstance(value, str):
                if len(value) <= 8:
                    return "***"
                # Keep first and last 4 characters
                return f"{value[:4]}...{value[-4:]}"
            return "***"
        return cls.mask(value)


class LogContext:
    """Per-thread log context"""

    @staticmethod
    def set(key: str, value: Any):
        if not hasattr(_context, 'data'):
            _context.data = {}
        _context.data[key] = value

    @staticmethod
    def get(key: str, default: Any = None) -> Any:
        if not hasattr(_context, 'data'):
            return default
        return _context.data.get(key, default)

    @staticmethod
    def clear():
        if hasattr(_context, 'data'):
            _context.data.clear()

    @staticmethod
    def get_all() -> Dict[str, Any]:
        if not hasattr(_context, 'data'):
            return {}
        return _context.data.copy()


class StructuredLogger:
    """
    Structured logger emitting one JSON object per line

    Example:
        logger = StructuredLogger("ToolAssembler")

        LogContext.set("request_id", "req_67890")
        logger.info("Tools assembled", agent="seo-aeo", count=12)
        LogContext.clear()
    """

    def __init__(
        self,
        name: str,
        level: str = "INFO",
        log_file: Optional[str] = None,
        enable_console: bool = True,
        enable_masking: bool = True
    ):
        """
        Args:
            name: Logger name (usually the component name)
            level: DEBUG/INFO/WARNING/ERROR/CRITICAL
            log_file: Optional file path for a second handler
            enable_console: Emit to stderr
            enable_masking: Mask sensitive fields
        """
        self.name = name
        self.enable_masking = enable_masking

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.handlers.clear()

        if enable_console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(file_handler)

    def _format_log_entry(self, level: str, message: str, **kwargs) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "logger": self.name,
            "message": message
        }

        context = LogContext.get_all()
        if context:
            entry["context"] = context

        if kwargs:
            if self.enable_masking:
                kwargs = SensitiveDataFilter.mask(kwargs)
            entry["data"] = kwargs

        return json.dumps(entry, ensure_ascii=False, default=str)

    def debug(self, message: str, **kwargs):
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._format_log_entry("DEBUG", message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_log_entry("INFO", message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_log_entry("WARNING", message, **kwargs))

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_log_entry("ERROR", message, **kwargs))

    def critical(self, message: str, **kwargs):
        self.logger.critical(self._format_log_entry("CRITICAL", message, **kwargs))

    def log_performance(
        self,
        operation: str,
        duration_ms: float,
        success: bool = True,
        **kwargs
    ):
        """
        Record a timing measurement

        Args:
            operation: Operation name
            duration_ms: Elapsed time in milliseconds
            success: Whether the operation succeeded
            **kwargs: Extra fields
        """
        level = "INFO" if success else "WARNING"

        perf_data = {
            "operation": operation,
            "duration_ms": round(duration_ms, 2),
            "success": success,
            **kwargs
        }

        log_entry = self._format_log_entry(level, f"Performance: {operation}", **perf_data)

        if success:
            self.logger.info(log_entry)
        else:
            self.logger.warning(log_entry)


class LogTimer:
    """
    Timing context manager

    Example:
        with LogTimer(logger, "intent_classification", model="haiku"):
            result = router.classify_intent(query)
    """

    def __init__(self, logger: StructuredLogger, operation: str, **kwargs):
        self.logger = logger
        self.operation = operation
        self.extra_data = kwargs
        self.start_time = None
        self.success = True

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (time.time() - self.start_time) * 1000

        if exc_type is not None:
            self.success = False
            self.extra_data["error"] = str(exc_val)

        self.logger.log_performance(
            operation=self.operation,
            duration_ms=duration_ms,
            success=self.success,
            **self.extra_data
        )

        # Never suppress the exception
        return False


_logger_cache: Dict[str, StructuredLogger] = {}


def get_logger(
    name: str,
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    enable_console: bool = True
) -> StructuredLogger:
    """
    Get or create a cached logger

    Args:
        name: Logger name
        level: Log level (defaults to LOG_LEVEL from config)
        log_file: Optional log file path
        enable_console: Emit to console

    Returns:
        StructuredLogger instance
    """
    if level is None:
        from .config import get_config
        level = get_config().log_level

    cache_key = f"{name}:{level}:{log_file}:{enable_console}"

    if cache_key not in _logger_cache:
        _logger_cache[cache_key] = StructuredLogger(
            name=name,
            level=level,
            log_file=log_file,
            enable_console=enable_console
        )

    return _logger_cache[cache_key]
