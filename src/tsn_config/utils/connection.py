"""Retry policy for NETCONF session establishment.

Only opening a session is retried. An edit-config that fails half way may
already have changed the device, so RPCs are never replayed.
"""
import logging
import socket
from typing import Any, Callable, Optional

import paramiko
from ncclient.transport.errors import SSHError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# Authentication failures are deliberately absent
RETRYABLE_EXCEPTIONS = (
    ConnectionRefusedError,
    ConnectionResetError,
    TimeoutError,
    socket.timeout,
    EOFError,
    SSHError,
    paramiko.SSHException,
)


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
    exceptions: tuple = RETRYABLE_EXCEPTIONS,
) -> Callable:
    """Retry the decorated call with exponential backoff.

    The last exception is re-raised once ``max_attempts`` is exhausted.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def connect_retry(settings: Optional[Any] = None) -> Callable:
    """with_retry configured from Settings (connect_retries, retry_*_wait)."""
    if settings is None:
        return with_retry()
    return with_retry(
        max_attempts=settings.connect_retries,
        min_wait=settings.retry_min_wait,
        max_wait=settings.retry_max_wait,
    )
