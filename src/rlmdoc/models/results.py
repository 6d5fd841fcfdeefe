"""Combining stored partial results into one answer."""

from dataclasses import dataclass, field
from typing import Mapping

DEFAULT_SEPARATOR = "\n\n---\n\n"

FINAL_SIGNAL = "FINAL"
PARTIAL_SIGNAL = "PARTIAL"


@dataclass(frozen=True)
class Aggregate:
    """Snapshot of the result buffer, ordered by key."""

    result_count: int
    combined: str
    results: dict[str, str] = field(default_factory=dict)
    signal: str = PARTIAL_SIGNAL

    @property
    def is_final(self) -> bool:
        return self.signal == FINAL_SIGNAL


def combine(results: Mapping[str, str], separator: str = DEFAULT_SEPARATOR) -> str:
    """Join ``[key]\\nvalue`` blocks in ascending key order."""
    return separator.join(f"[{key}]\n{results[key]}" for key in sorted(results))


def aggregate(
    results: Mapping[str, str],
    final: bool = False,
    separator: str = DEFAULT_SEPARATOR,
) -> Aggregate:
    """Aggregate stored results without modifying them.

    Args:
        results: Result map of the session
        final: Mark the aggregate as the final answer rather than a status check
        separator: Text placed between result blocks

    Returns:
        Aggregate with the count, the combined text and a copy of the map
    """
    return Aggregate(
        result_count=len(results),
        combined=combine(results, separator),
        results=dict(results),
        signal=FINAL_SIGNAL if final else PARTIAL_SIGNAL,
    )
