"""Logging configuration for OC Swapper.

Provides configurable logging with:
- File-based logging with rotation
- Console output for real-time debugging
- Performance timing for hash and install operations

Environment Variables:
    OC_SWAPPER_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    OC_SWAPPER_LOG_FILE: Path to log file (default: ~/.oc_swapper/oc_swapper.log)
    OC_SWAPPER_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    OC_SWAPPER_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from oc_swapper.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("hash")
    def file_hash(path):
        ...

    with timed_section("install", target="openvr_api.dll"):
        ...
"""
import functools
import logging
import os
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("oc_swapper.perf")
main_logger = logging.getLogger("oc_swapper")


def get_home_dir() -> Path:
    """Get the directory for logs and the audit trail."""
    default_path = Path.home() / ".oc_swapper"
    return Path(os.environ.get("OC_SWAPPER_HOME", str(default_path)))


def get_log_level() -> int:
    """Get log level from environment."""
    level_str = os.environ.get("OC_SWAPPER_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = get_home_dir() / "oc_swapper.log"
    path_str = os.environ.get("OC_SWAPPER_LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging(level: Optional[int] = None) -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (INFO+ by default, respects OC_SWAPPER_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)
    - Performance logger for timing metrics (file only)

    Args:
        level: Console level override (e.g. from a --verbose flag)
    """
    log_level = level if level is not None else get_log_level()
    log_file = get_log_file()
    max_size_mb = int(os.environ.get("OC_SWAPPER_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("OC_SWAPPER_LOG_BACKUPS", "5"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-28s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    perf_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | PERF | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    perf_log_file = log_file.parent / "oc_swapper-perf.log"
    perf_handler = RotatingFileHandler(
        perf_log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    perf_handler.setLevel(logging.DEBUG)
    perf_handler.setFormatter(perf_format)

    # Repeated setup (tests, re-entrant CLI calls) must not stack handlers
    main_logger.handlers.clear()
    main_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    main_logger.addHandler(console_handler)
    main_logger.addHandler(file_handler)

    # Timing lines go to their own file, not the console
    perf_logger.handlers.clear()
    perf_logger.setLevel(logging.DEBUG)
    perf_logger.addHandler(perf_handler)
    perf_logger.propagate = False

    main_logger.debug(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")


def _format_timing(operation: str, subject: Optional[str], elapsed: float, status: str) -> str:
    return f"{operation:16s} | {subject or 'N/A':30s} | {elapsed:8.2f}ms | {status}"


def timed(operation: str) -> Callable:
    """Decorator to log execution time of a function.

    The first positional argument, when it is a path, is logged as the subject.

    Args:
        operation: Name of the operation (e.g., "hash", "install")

    Usage:
        @timed("hash")
        def file_hash(path):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            subject = None
            if args and isinstance(args[0], (str, os.PathLike)):
                subject = Path(args[0]).name

            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                elapsed = (time.perf_counter() - start) * 1000  # ms
                perf_logger.info(_format_timing(operation, subject, elapsed, "OK"))
                return result
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.warning(_format_timing(operation, subject, elapsed, f"FAIL: {e}"))
                raise

        return wrapper

    return decorator


@contextmanager
def timed_section(operation: str, target: Optional[str] = None, **extra):
    """Context manager for timing code sections.

    Args:
        operation: Name of the operation
        target: File the section operates on
        **extra: Additional context to log

    Usage:
        with timed_section("swap", target=str(path), to="opencomposite"):
            ...
    """
    start = time.perf_counter()
    extra_str = " | ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    subject = Path(target).name if target else None

    try:
        yield
        elapsed = (time.perf_counter() - start) * 1000
        msg = _format_timing(operation, subject, elapsed, "OK")
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.info(msg)
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        msg = _format_timing(operation, subject, elapsed, f"FAIL: {e}")
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.warning(msg)
        raise
