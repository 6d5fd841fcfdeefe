"""rlmdoc - chunk, navigate and aggregate documents larger than a context window."""

__version__ = "0.1.0"
