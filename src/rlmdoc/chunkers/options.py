"""Options records for each chunking strategy.

``StrategyOptions`` is a closed union: every strategy has exactly one
options dataclass, and ``rlmdoc.chunkers.segment`` dispatches on its type.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from rlmdoc.config import Settings, get_settings
from rlmdoc.errors import ConfigurationError


class Strategy(str, Enum):
    """Names of the segmentation strategies."""

    UNIFORM = "uniform"
    FILTERING = "filter"
    SEMANTIC = "semantic"
    TOKEN = "token"
    RECURSIVE = "recursive"
    AUTO = "auto"


_ALIASES = {
    "filtering": Strategy.FILTERING,
    "tokens": Strategy.TOKEN,
    "token-based": Strategy.TOKEN,
}


def parse_strategy(name: str) -> Strategy:
    """Resolve a strategy name (case-insensitive, with aliases)."""
    key = name.strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return Strategy(key)
    except ValueError:
        choices = ", ".join(s.value for s in Strategy)
        raise ConfigurationError(f"Unknown strategy '{name}'. Choose one of: {choices}") from None


def compile_pattern(pattern: str, ignore_case: bool = True, label: str = "pattern") -> re.Pattern:
    """Compile a user-supplied regex, reporting failures as configuration errors."""
    if not pattern:
        raise ConfigurationError(f"The {label} must not be empty")
    try:
        return re.compile(pattern, re.IGNORECASE if ignore_case else 0)
    except re.error as e:
        raise ConfigurationError(f"Invalid regex {label} '{pattern}': {e}") from e


@dataclass(frozen=True)
class UniformOptions:
    """Fixed-size character windows."""

    size: int = 50_000
    overlap: int = 0

    def validate(self) -> None:
        if self.size <= 0:
            raise ConfigurationError(f"Chunk size must be positive, got {self.size}")
        if self.overlap < 0:
            raise ConfigurationError(f"Overlap must not be negative, got {self.overlap}")
        if self.overlap >= self.size:
            raise ConfigurationError(
                f"Overlap ({self.overlap}) must be smaller than the chunk size ({self.size})"
            )


@dataclass(frozen=True)
class FilteringOptions:
    """Regex matches with surrounding context."""

    pattern: str = ""
    context_window: int = 500
    ignore_case: bool = True

    def validate(self) -> None:
        compile_pattern(self.pattern, self.ignore_case)
        if self.context_window < 0:
            raise ConfigurationError(
                f"Context window must not be negative, got {self.context_window}"
            )


@dataclass(frozen=True)
class SemanticOptions:
    """Markdown header sections."""

    min_level: int = 1
    max_level: int = 6
    min_size: int = 0
    merge_small: bool = False
    filter_pattern: Optional[str] = None
    max_size: int = 0

    def validate(self) -> None:
        if not 1 <= self.min_level <= self.max_level <= 6:
            raise ConfigurationError(
                f"Header levels must satisfy 1 <= min ({self.min_level}) "
                f"<= max ({self.max_level}) <= 6"
            )
        if self.min_size < 0:
            raise ConfigurationError(f"Minimum size must not be negative, got {self.min_size}")
        if self.max_size < 0:
            raise ConfigurationError(f"Maximum size must not be negative, got {self.max_size}")
        if self.filter_pattern is not None:
            compile_pattern(self.filter_pattern, label="filter pattern")


@dataclass(frozen=True)
class TokenOptions:
    """Token-budgeted chunks measured by an exact tokenizer."""

    max_tokens: int = 512
    granularity: str = "paragraph"

    def validate(self) -> None:
        if self.max_tokens <= 0:
            raise ConfigurationError(f"Token budget must be positive, got {self.max_tokens}")
        if self.granularity not in ("paragraph", "line"):
            raise ConfigurationError(
                f"Granularity must be 'paragraph' or 'line', got '{self.granularity}'"
            )


@dataclass(frozen=True)
class RecursiveOptions:
    """Semantic sections, oversized ones re-split by size or tokens."""

    target_size: int = 50_000
    overlap: int = 0
    max_tokens: Optional[int] = None
    semantic: SemanticOptions = field(default_factory=SemanticOptions)

    def validate(self) -> None:
        if self.target_size <= 0:
            raise ConfigurationError(f"Target size must be positive, got {self.target_size}")
        self.semantic.validate()
        if self.max_tokens is not None:
            TokenOptions(max_tokens=self.max_tokens).validate()
        else:
            UniformOptions(size=self.target_size, overlap=self.overlap).validate()


@dataclass(frozen=True)
class AutoOptions:
    """Heuristic choice among the other strategies."""

    query: Optional[str] = None
    default_size: int = 50_000
    semantic_min_size: int = 1_000
    large_document_threshold: int = 200_000
    recursive_target_size: int = 50_000
    context_window: int = 500

    @classmethod
    def from_settings(cls, query: Optional[str] = None, settings: Settings | None = None) -> "AutoOptions":
        settings = settings or get_settings()
        return cls(
            query=query,
            default_size=settings.default_chunk_size,
            semantic_min_size=settings.semantic_min_size,
            large_document_threshold=settings.large_document_threshold,
            recursive_target_size=settings.recursive_target_size,
            context_window=settings.filter_context,
        )

    def validate(self) -> None:
        UniformOptions(size=self.default_size).validate()
        if self.semantic_min_size < 0 or self.context_window < 0:
            raise ConfigurationError("Auto defaults must not be negative")
        if self.large_document_threshold <= 0 or self.recursive_target_size <= 0:
            raise ConfigurationError("Auto thresholds must be positive")


StrategyOptions = Union[
    UniformOptions,
    FilteringOptions,
    SemanticOptions,
    TokenOptions,
    RecursiveOptions,
    AutoOptions,
]


def _first_set(*values):
    return next(v for v in values if v is not None)


def build_options(
    strategy: str | Strategy,
    settings: Settings | None = None,
    *,
    size: Optional[int] = None,
    overlap: Optional[int] = None,
    pattern: Optional[str] = None,
    context: Optional[int] = None,
    min_level: int = 1,
    max_level: int = 6,
    min_size: int = 0,
    merge_small: bool = False,
    max_size: int = 0,
    max_tokens: Optional[int] = None,
    granularity: str = "paragraph",
    target_size: Optional[int] = None,
    query: Optional[str] = None,
) -> StrategyOptions:
    """Build the options record for a strategy from flat, surface-level parameters.

    Unset sizes fall back to the configured defaults.

    Raises:
        ConfigurationError: If the strategy is unknown or a required value is missing
    """
    settings = settings or get_settings()
    if not isinstance(strategy, Strategy):
        strategy = parse_strategy(strategy)

    semantic = SemanticOptions(
        min_level=min_level,
        max_level=max_level,
        min_size=min_size,
        merge_small=merge_small,
        max_size=max_size,
        filter_pattern=pattern if strategy is Strategy.SEMANTIC and pattern else None,
    )

    match strategy:
        case Strategy.UNIFORM:
            return UniformOptions(
                size=size if size is not None else settings.default_chunk_size,
                overlap=overlap if overlap is not None else settings.default_overlap,
            )
        case Strategy.FILTERING:
            if not pattern:
                raise ConfigurationError("The filter strategy requires a pattern")
            return FilteringOptions(
                pattern=pattern,
                context_window=context if context is not None else settings.filter_context,
            )
        case Strategy.SEMANTIC:
            return semantic
        case Strategy.TOKEN:
            return TokenOptions(
                max_tokens=max_tokens if max_tokens is not None else settings.max_tokens,
                granularity=granularity,
            )
        case Strategy.RECURSIVE:
            return RecursiveOptions(
                target_size=_first_set(target_size, size, settings.recursive_target_size),
                overlap=overlap if overlap is not None else 0,
                max_tokens=max_tokens,
                semantic=semantic,
            )
        case Strategy.AUTO:
            return AutoOptions.from_settings(query=query or pattern, settings=settings)
