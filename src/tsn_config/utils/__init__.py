"""Utility modules for retries, logging and auditing."""
from .connection import connect_retry, with_retry, RETRYABLE_EXCEPTIONS
from .logging_config import setup_logging, timed_section_sync, perf_logger
from .audit_log import setup_audit_logging, record_push, get_recent_pushes, PushRecord

__all__ = [
    "connect_retry",
    "with_retry",
    "RETRYABLE_EXCEPTIONS",
    "setup_logging",
    "timed_section_sync",
    "perf_logger",
    "setup_audit_logging",
    "record_push",
    "get_recent_pushes",
    "PushRecord",
]
