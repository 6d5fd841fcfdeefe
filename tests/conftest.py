"""Shared fixtures for the rlmdoc test suite."""

import pytest

from rlmdoc.config import reset_settings
from rlmdoc.models import Document, DocumentMetadata


class WhitespaceTokenizer:
    """Counts whitespace-separated words, so tests need no tiktoken download."""

    name = "whitespace"

    def count_tokens(self, text: str) -> int:
        return len(text.split())


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point session storage at a temp dir and re-read settings for every test."""
    session_dir = tmp_path / "sessions"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RLMDOC_SESSION_DIR", str(session_dir))
    monkeypatch.setenv("RLMDOC_RETRY_BASE_DELAY", "0")
    reset_settings()
    yield session_dir
    reset_settings()


@pytest.fixture
def tokenizer():
    return WhitespaceTokenizer()


def make_document(content: str, source: str = "doc.md", **fields) -> Document:
    return Document(id=source, content=content, metadata=DocumentMetadata.describe(source, content, **fields))
