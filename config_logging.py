#!/usr/bin/env python3
"""
DocCompare Configuration & Logging Module
=========================================
Centralized configuration, structured logging, and error types shared by
the comparison engine and its HTTP surface.
"""

import os
import sys
import json
import logging
import uuid
import time
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from pathlib import Path
from dataclasses import dataclass, field
from contextlib import contextmanager
import threading

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
DEFAULT_SIMILARITY_THRESHOLD = 0.6  # Fuzzy pass floor (strictly greater than)
DEFAULT_DIFF_TIMEOUT = 2.0          # diff-match-patch Diff_Timeout, seconds
DEFAULT_DIFF_EDIT_COST = 4          # diff-match-patch Diff_EditCost
DEFAULT_PREVIEW_LENGTH = 80         # Placeholder preview length in characters
MIN_PREVIEW_LENGTH = 8
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                # Number of log backup files to keep

LOG_FORMATS = ('json', 'text')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

__version__ = "2.0.0"
VERSION = __version__
APP_NAME = "DocCompare"


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == 'true'


# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

@dataclass
class AppConfig:
    """Comparison engine configuration with conservative defaults."""

    # Alignment and diffing
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    diff_timeout: float = DEFAULT_DIFF_TIMEOUT
    diff_edit_cost: int = DEFAULT_DIFF_EDIT_COST
    preview_length: int = DEFAULT_PREVIEW_LENGTH
    fast_path: bool = True  # Skip the pipeline for structurally identical trees

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # Options: json, text
    log_to_file: bool = False
    log_to_console: bool = True
    log_dir: Path = field(default_factory=lambda: Path(__file__).parent / 'logs')

    def __post_init__(self):
        """Normalize values and prepare the log directory."""
        self.log_level = self.log_level.upper()
        self.log_format = self.log_format.lower()

        if self.log_to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        # Production deployments only log warnings and above
        if os.environ.get('DC_ENV', 'development').lower() == 'production':
            self.log_level = "WARNING"

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load configuration from environment variables."""
        kwargs = {}
        log_dir = os.environ.get('DC_LOG_DIR')
        if log_dir:
            kwargs['log_dir'] = Path(log_dir)
        return cls(
            similarity_threshold=float(os.environ.get(
                'DC_SIMILARITY_THRESHOLD', str(DEFAULT_SIMILARITY_THRESHOLD))),
            diff_timeout=float(os.environ.get('DC_DIFF_TIMEOUT', str(DEFAULT_DIFF_TIMEOUT))),
            diff_edit_cost=int(os.environ.get('DC_DIFF_EDIT_COST', str(DEFAULT_DIFF_EDIT_COST))),
            preview_length=int(os.environ.get('DC_PREVIEW_LENGTH', str(DEFAULT_PREVIEW_LENGTH))),
            fast_path=_env_bool('DC_FAST_PATH', 'true'),
            log_level=os.environ.get('DC_LOG_LEVEL', 'INFO'),
            log_format=os.environ.get('DC_LOG_FORMAT', 'json'),
            log_to_file=_env_bool('DC_LOG_TO_FILE', 'false'),
            log_to_console=_env_bool('DC_LOG_TO_CONSOLE', 'true'),
            **kwargs
        )

    def validate(self) -> tuple:
        """Validate configuration and return (is_valid, errors)."""
        errors = []

        if not 0.0 < self.similarity_threshold <= 1.0:
            errors.append("similarity_threshold must be in (0, 1]")

        if self.diff_timeout < 0:
            errors.append("diff_timeout cannot be negative")

        if self.diff_edit_cost < 0:
            errors.append("diff_edit_cost cannot be negative")

        if self.preview_length < MIN_PREVIEW_LENGTH:
            errors.append(f"preview_length must be at least {MIN_PREVIEW_LENGTH}")

        if self.log_format not in LOG_FORMATS:
            errors.append(f"Invalid log_format: {self.log_format}. Must be one of {LOG_FORMATS}")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"Invalid log_level: {self.log_level}")

        return (len(errors) == 0, errors)


# Global config instance
_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config():
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

class StructuredLogger:
    """Thread-safe structured JSON logger with correlation IDs."""

    _local = threading.local()

    def __init__(self, name: str, config: Optional[AppConfig] = None):
        self.name = name
        self.config = config or get_config()
        self._setup_logger()

    def _setup_logger(self):
        """Configure the underlying Python logger."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))
        self.logger.handlers.clear()

        if self.config.log_format == 'json':
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            )

        if self.config.log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if self.config.log_to_file:
            from logging.handlers import RotatingFileHandler
            log_file = self.config.log_dir / f"{self.name.lower()}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        """Set correlation ID for current thread."""
        cls._local.correlation_id = correlation_id

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get correlation ID for current thread."""
        return getattr(cls._local, 'correlation_id', None) or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs):
        kwargs.setdefault('correlation_id', self.get_correlation_id())
        self.logger.log(level, message, exc_info=exc_info, extra=kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.time()
        self.debug(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
            duration_ms = (time.time() - start_time) * 1000
            self.info(f"{operation} completed", operation=operation, status='completed',
                      duration_ms=round(duration_ms, 2), **context)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=round(duration_ms, 2), exc_info=True, **context)
            raise


_RESERVED_RECORD_KEYS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'thread', 'threadName', 'exc_info', 'exc_text',
    'message', 'taskName',
))


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        # Extra fields passed through StructuredLogger
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, get_config())


# =============================================================================
# ERROR HANDLING
# =============================================================================

class DocCompareError(Exception):
    """Base exception for DocCompare."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 status_code: int = 500, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self, correlation_id: Optional[str] = None) -> Dict[str, Any]:
        """Convert to API response dict."""
        error: Dict[str, Any] = {
            'code': self.code,
            'message': self.message,
            'details': self.details
        }
        if correlation_id is not None:
            error['correlation_id'] = correlation_id
        return {'success': False, 'error': error}


class ValidationError(DocCompareError):
    """Input validation error."""
    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400,
                         details={'field': field, **kwargs})
