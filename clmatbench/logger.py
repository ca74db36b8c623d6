"""Logging setup with a Rich console handler and an optional JSON file handler.

Console logging goes to stderr so the report lines on stdout stay clean.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Global stderr console instance
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the shared Rich console bound to stderr."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def is_tty() -> bool:
    """Check if stderr is a TTY (interactive terminal)."""
    return sys.stderr.isatty()


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    log_format: str = "text",  # "text" or "json"
    use_rich: Optional[bool] = None
) -> None:
    """Setup logging configuration.
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to log file
        log_format: Format for file logging ("text" or "json")
        use_rich: Whether to use Rich for console output (auto-detects TTY if None)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    
    if use_rich is None:
        use_rich = is_tty()
    
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)
    
    console_handler: Union[RichHandler, logging.Handler]
    if use_rich:
        console_handler = RichHandler(
            console=get_console(),
            show_time=False,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)
    
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        if log_format == "json":
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.
    
    Args:
        name: Logger name (typically __name__)
    
    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_stage_start(logger: logging.Logger, stage: str, detail: Optional[str] = None) -> None:
    """Log the start of a run stage.
    
    Args:
        logger: Logger instance
        stage: Stage name ('reference', 'accelerator', ...)
        detail: Optional extra context
    """
    suffix = f" ({detail})" if detail else ""
    logger.info(f"Starting {stage}{suffix}")


def log_stage_complete(logger: logging.Logger, stage: str, elapsed_ms: float) -> None:
    """Log stage completion with its elapsed time.
    
    Args:
        logger: Logger instance
        stage: Stage name
        elapsed_ms: Elapsed time in milliseconds
    """
    logger.info(f"Completed {stage} - {elapsed_ms:.3f} ms")


def log_stage_error(logger: logging.Logger, stage: str, error: str) -> None:
    """Log a stage failure.
    
    Args:
        logger: Logger instance
        stage: Stage name
        error: Error message
    """
    logger.error(f"Failed: {stage} - {error}")
