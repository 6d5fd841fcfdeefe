"""Tests for the retry helpers."""

import errno
from unittest.mock import patch

import pytest

from rlmdoc.utils.retry import is_transient_io_error, retry_call, with_retry


def flaky(failures: int, error: Exception):
    calls = []

    def func():
        calls.append(1)
        if len(calls) <= failures:
            raise error
        return "ok"

    return func, calls


class TestIsTransient:
    """Test which errors are worth retrying."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (OSError(errno.EIO, "io"), True),
            (OSError(errno.EAGAIN, "again"), True),
            (FileNotFoundError(errno.ENOENT, "missing"), False),
            (PermissionError(errno.EACCES, "denied"), False),
            (OSError(errno.ENOSPC, "full"), False),
            (ValueError("bad"), False),
        ],
    )
    def test_classification(self, error, expected):
        """Test transient and permanent errors."""
        assert is_transient_io_error(error) is expected


class TestRetryCall:
    """Test retry_call."""

    @patch("rlmdoc.utils.retry.time.sleep")
    def test_succeeds_after_failures(self, mock_sleep):
        """Test exponential delays between attempts."""
        func, calls = flaky(2, OSError(errno.EIO, "io"))

        assert retry_call(func, attempts=3, delay=0.1) == "ok"
        assert len(calls) == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == pytest.approx([0.1, 0.2])

    @patch("rlmdoc.utils.retry.time.sleep")
    def test_exhausted(self, mock_sleep):
        """Test that the last error is raised after all attempts."""
        func, calls = flaky(5, OSError(errno.EIO, "io"))

        with pytest.raises(OSError):
            retry_call(func, attempts=3)
        assert len(calls) == 3

    @patch("rlmdoc.utils.retry.time.sleep")
    def test_not_retryable(self, mock_sleep):
        """Test that non-retryable errors propagate at once."""
        func, calls = flaky(1, ValueError("bad"))

        with pytest.raises(ValueError):
            retry_call(func)
        assert len(calls) == 1
        mock_sleep.assert_not_called()

    @patch("rlmdoc.utils.retry.time.sleep")
    def test_max_delay(self, mock_sleep):
        """Test that delays are capped."""
        func, _ = flaky(3, OSError(errno.EIO, "io"))

        retry_call(func, attempts=4, delay=1.0, backoff=10.0, max_delay=2.0)
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0, 2.0]


class TestWithRetry:
    """Test the decorator."""

    @patch("rlmdoc.utils.retry.time.sleep")
    def test_decorator(self, mock_sleep):
        """Test that arguments pass through and failures are retried."""
        calls = []

        @with_retry(attempts=2)
        def read(value):
            calls.append(value)
            if len(calls) == 1:
                raise OSError(errno.EIO, "io")
            return value * 2

        assert read(21) == 42
        assert calls == [21, 21]
        assert read.__name__ == "read"
