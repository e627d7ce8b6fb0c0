"""Tests for connection retry utilities."""
import paramiko
import pytest
from ncclient.transport.errors import SSHError

from tsn_config.config.settings import Settings
from tsn_config.utils.connection import RETRYABLE_EXCEPTIONS, connect_retry, with_retry


class TestWithRetry:
    """Tests for retry decorator."""

    def test_success_no_retry(self):
        """Successful function doesn't retry."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0, max_wait=0)
        def succeeding_func():
            nonlocal call_count
            call_count += 1
            return "success"

        assert succeeding_func() == "success"
        assert call_count == 1

    def test_retry_on_connection_error(self):
        """Retries on connection errors."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0, max_wait=0)
        def failing_then_success():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ConnectionRefusedError("Connection refused")
            return "success"

        assert failing_then_success() == "success"
        assert call_count == 3

    def test_max_retries_exceeded(self):
        """Raises the last error after max retries."""
        call_count = 0

        @with_retry(max_attempts=2, min_wait=0, max_wait=0)
        def always_fails():
            nonlocal call_count
            call_count += 1
            raise TimeoutError("Timeout")

        with pytest.raises(TimeoutError):
            always_fails()
        assert call_count == 2

    def test_non_retryable_exception(self):
        """Non-retryable exceptions propagate immediately."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0, max_wait=0)
        def raises_value_error():
            nonlocal call_count
            call_count += 1
            raise ValueError("Not retryable")

        with pytest.raises(ValueError):
            raises_value_error()
        assert call_count == 1

    def test_retryable_exceptions_cover_ssh(self):
        """SSH-level failures are retryable."""
        assert paramiko.SSHException in RETRYABLE_EXCEPTIONS
        assert SSHError in RETRYABLE_EXCEPTIONS
        assert ConnectionResetError in RETRYABLE_EXCEPTIONS


class TestConnectRetry:
    """Tests for the settings-driven retry policy."""

    def test_attempts_from_settings(self):
        """connect_retries bounds the attempts."""
        call_count = 0

        @connect_retry(Settings(connect_retries=4, retry_min_wait=0, retry_max_wait=0))
        def always_refused():
            nonlocal call_count
            call_count += 1
            raise ConnectionRefusedError()

        with pytest.raises(ConnectionRefusedError):
            always_refused()
        assert call_count == 4
