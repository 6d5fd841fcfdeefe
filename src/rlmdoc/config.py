"""Configuration management using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from RLMDOC_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RLMDOC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Session storage
    session_dir: Path = Field(
        default_factory=Path.home,
        description="Directory holding the per-session JSON files",
    )
    retry_attempts: int = Field(default=3, ge=1, description="Attempts per session file operation")
    retry_base_delay: float = Field(
        default=0.1, ge=0, description="First retry delay in seconds, doubled per attempt"
    )

    # Chunking defaults
    default_chunk_size: int = Field(default=50_000, gt=0, description="Uniform window size")
    default_overlap: int = Field(default=0, ge=0, description="Uniform window overlap")
    filter_context: int = Field(default=500, ge=0, description="Characters around each match")
    semantic_min_size: int = Field(
        default=1_000, ge=0, description="Minimum section size when auto merges small sections"
    )
    large_document_threshold: int = Field(
        default=200_000, gt=0, description="Length above which auto picks the recursive strategy"
    )
    recursive_target_size: int = Field(
        default=50_000, gt=0, description="Section size above which recursive re-splits"
    )
    max_tokens: int = Field(default=512, gt=0, description="Token budget per chunk")
    token_encoding: str = Field(default="cl100k_base", description="tiktoken encoding name")

    # Validation limits
    max_document_bytes: int = Field(default=5 * 1024 * 1024, gt=0)
    max_line_count: int = Field(default=100_000, gt=0)

    # Application
    log_level: str = Field(default="WARNING", description="Logging level")


# Global settings instance - lazy loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
