"""
MoodMusic Logging Configuration

Structured logging for the MoodMusic engine and backend:
- structlog over the stdlib logging tree
- Rotating main and error log files
- Colored console output for development
- Component-specific log levels
- Performance, API request and error helpers
"""

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

NOISY_EXTERNAL_LOGGERS = ["aiohttp.access", "aiohttp.client", "urllib3", "httpx", "uvicorn.access"]


class MoodMusicLogger:
    """
    Centralized logging configuration for MoodMusic.

    The per-turn engine logs its decisions at DEBUG; INFO keeps session and
    adapter lifecycle events only.
    """

    def __init__(
        self,
        log_dir: str = "logs",
        log_level: str = "INFO",
        enable_console: bool = True,
        max_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5
    ):
        """
        Initialize the logging system.

        Args:
            log_dir: Directory to store log files
            log_level: Default log level name
            enable_console: Whether to enable console logging
            max_file_size: Maximum size per log file before rotation
            backup_count: Number of rotated files to keep
        """
        self.log_dir = Path(log_dir)
        self.log_level = getattr(logging, log_level.upper(), logging.INFO)
        self.enable_console = enable_console
        self.max_file_size = max_file_size
        self.backup_count = backup_count

        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.component_levels = {
            "moodmusic.services.components": logging.INFO,  # per-pass scoring chatter
            "external": logging.WARNING,
        }

        self._setup_logging()

    def _setup_logging(self):
        """Configure the complete logging system."""
        root_logger = logging.getLogger()
        root_logger.handlers.clear()

        self._configure_structlog()
        self._setup_file_handlers()
        if self.enable_console:
            self._setup_console_handler()
        self._configure_component_loggers()

        root_logger.setLevel(self.log_level)

    def _configure_structlog(self):
        shared_processors = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

        structlog.configure(
            processors=shared_processors + [
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def _setup_file_handlers(self):
        """Main log captures everything at the configured level; errors.log only errors."""
        root_logger = logging.getLogger()
        root_logger.addHandler(self._create_rotating_file_handler("moodmusic.log", self.log_level))
        root_logger.addHandler(self._create_rotating_file_handler("errors.log", logging.ERROR))

    def _create_rotating_file_handler(
        self,
        filename: str,
        level: int
    ) -> logging.handlers.RotatingFileHandler:
        handler = logging.handlers.RotatingFileHandler(
            filename=self.log_dir / filename,
            maxBytes=self.max_file_size,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        handler.setLevel(level)
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
        ))
        return handler

    def _setup_console_handler(self):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
        ))
        logging.getLogger().addHandler(console_handler)

    def _configure_component_loggers(self):
        """Quiet HTTP libraries always; quiet scoring internals unless debugging."""
        for ext_module in NOISY_EXTERNAL_LOGGERS:
            logging.getLogger(ext_module).setLevel(self.component_levels["external"])

        if self.log_level == logging.DEBUG:
            return

        components = "moodmusic.services.components"
        logging.getLogger(components).setLevel(max(self.component_levels[components], self.log_level))

    def get_logger(self, name: str) -> structlog.stdlib.BoundLogger:
        """Get a structured logger for a specific component."""
        return structlog.get_logger(name)

    def set_request_context(self, request_id: str, session_id: Optional[str] = None):
        """Bind request-scoped fields to every log line of the current request."""
        clear_contextvars()
        bind_contextvars(
            request_id=request_id,
            session_id=session_id,
            request_started=datetime.now(timezone.utc).isoformat()
        )

    def log_performance(self, operation: str, duration: float, **kwargs):
        self.get_logger("performance").info(
            "performance_metric",
            operation=operation,
            duration_seconds=duration,
            **kwargs
        )

    def log_api_request(
        self,
        method: str,
        url: str,
        status_code: int,
        duration: float,
        **kwargs
    ):
        self.get_logger("api").info(
            "api_request",
            method=method,
            url=url,
            status_code=status_code,
            duration_seconds=duration,
            **kwargs
        )

    def log_error(self, error: Exception, context: Dict[str, Any], **kwargs):
        """Log errors with full context."""
        self.get_logger("errors").error(
            "error_occurred",
            error_type=type(error).__name__,
            error_message=str(error),
            context=context,
            **kwargs
        )


_logger_instance: Optional[MoodMusicLogger] = None


def setup_logging(
    log_dir: str = "logs",
    log_level: str = "INFO",
    enable_console: bool = True,
    **kwargs
) -> MoodMusicLogger:
    """
    Setup the global logging configuration.

    Args:
        log_dir: Directory to store log files
        log_level: Default log level
        enable_console: Whether to enable console logging
        **kwargs: Additional arguments for MoodMusicLogger

    Returns:
        Configured logger instance
    """
    global _logger_instance

    _logger_instance = MoodMusicLogger(
        log_dir=log_dir,
        log_level=log_level,
        enable_console=enable_console,
        **kwargs
    )
    return _logger_instance


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for a specific component.

    Raises:
        RuntimeError: If logging hasn't been setup
    """
    if _logger_instance is None:
        raise RuntimeError("Logging not setup. Call setup_logging() first.")
    return _logger_instance.get_logger(name)


def log_performance(operation: str, duration: float, **kwargs):
    """Log performance metrics."""
    if _logger_instance:
        _logger_instance.log_performance(operation, duration, **kwargs)


def log_api_request(method: str, url: str, status_code: int, duration: float, **kwargs):
    """Log API request details."""
    if _logger_instance:
        _logger_instance.log_api_request(method, url, status_code, duration, **kwargs)


def log_error(error: Exception, context: Dict[str, Any], **kwargs):
    """Log errors with full context."""
    if _logger_instance:
        _logger_instance.log_error(error, context, **kwargs)


def set_request_context(request_id: str, session_id: Optional[str] = None):
    """Set context for the current request."""
    if _logger_instance:
        _logger_instance.set_request_context(request_id, session_id)
