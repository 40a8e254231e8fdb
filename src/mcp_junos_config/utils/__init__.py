"""Utility modules for logging, retries and auditing."""
from .audit_log import ChangeRecord, ChangeTracker, get_recent_changes, setup_audit_logging
from .connection import RETRYABLE_EXCEPTIONS, with_retry
from .logging_config import (
    setup_logging,
    timed,
    timed_section,
    timed_section_sync,
    perf_logger,
    PerfStats,
    global_stats,
)

__all__ = [
    "ChangeRecord",
    "ChangeTracker",
    "get_recent_changes",
    "setup_audit_logging",
    "RETRYABLE_EXCEPTIONS",
    "with_retry",
    "setup_logging",
    "timed",
    "timed_section",
    "timed_section_sync",
    "perf_logger",
    "PerfStats",
    "global_stats",
]
