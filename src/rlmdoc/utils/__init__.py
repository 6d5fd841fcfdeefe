"""Utility functions for rlmdoc."""

from rlmdoc.utils.binary import decode_text, detect_binary, is_binary_content, is_binary_extension
from rlmdoc.utils.retry import is_transient_io_error, retry_call, with_retry

__all__ = [
    "decode_text",
    "detect_binary",
    "is_binary_content",
    "is_binary_extension",
    "is_transient_io_error",
    "retry_call",
    "with_retry",
]
