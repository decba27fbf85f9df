"""Utility modules for logging, auditing, retries and atomic file writes."""
from .atomic_write import atomic_copy, atomic_write_text
from .audit_log import SwapRecord, get_recent_swaps, log_swap, setup_audit_logging
from .logging_config import (
    setup_logging,
    timed,
    timed_section,
    perf_logger,
)
from .retry import with_retry, RETRYABLE_EXCEPTIONS

__all__ = [
    "atomic_copy",
    "atomic_write_text",
    "SwapRecord",
    "get_recent_swaps",
    "log_swap",
    "setup_audit_logging",
    "setup_logging",
    "timed",
    "timed_section",
    "perf_logger",
    "with_retry",
    "RETRYABLE_EXCEPTIONS",
]
