"""Helpers shared by the loaders: decoding, content types and merging."""

import json
import logging
from pathlib import PurePath
from typing import Optional

from rlmdoc.errors import LoaderError
from rlmdoc.models import Document, DocumentMetadata
from rlmdoc.utils.binary import decode_text, detect_binary

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".txt": "text/plain",
    ".json": "application/json",
    ".xml": "application/xml",
    ".html": "text/html",
    ".htm": "text/html",
    ".csv": "text/csv",
    ".yaml": "text/yaml",
    ".yml": "text/yaml",
}

MERGE_SEPARATOR = "\n\n---\n\n"

# Directory names never loaded from folders or archives
SKIP_PARTS = {
    "__pycache__",
    "node_modules",
    "venv",
    "env",
    "dist",
    "build",
    "__MACOSX",
}


def content_type_for(name: str) -> Optional[str]:
    return CONTENT_TYPES.get(PurePath(name).suffix.lower())


def should_skip(relative: PurePath) -> bool:
    """Skip hidden files, version control and common build artifacts."""
    parts = relative.parts
    if any(part.startswith(".") for part in parts):
        return True
    return any(part in SKIP_PARTS or part.endswith(".egg-info") for part in parts)


def pretty_json(text: str) -> tuple[str, Optional[int]]:
    """Re-indent JSON for readability; returns the text unchanged if it does not parse.

    Returns:
        The (possibly reformatted) text and the top-level element count
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.debug("Content is not valid JSON, loading as text")
        return text, None
    count = len(data) if isinstance(data, (dict, list)) else 1
    return json.dumps(data, indent=2, ensure_ascii=False), count


def document_from_bytes(name: str, raw: bytes, source: str) -> Document:
    """Decode raw file bytes into a document.

    Args:
        name: File name (or archive member) used as document id and for type detection
        raw: File content
        source: Where the content came from, recorded in metadata

    Raises:
        LoaderError: If the content is binary
    """
    if detect_binary(name, raw):
        raise LoaderError(f"{name} is a binary file and cannot be loaded as text")

    content = decode_text(raw)
    content_type = content_type_for(name)
    extra: dict[str, str] = {}
    if content_type == "application/json":
        content, element_count = pretty_json(content)
        if element_count is not None:
            extra["elementCount"] = str(element_count)

    metadata = DocumentMetadata.describe(source, content, content_type=content_type, extra=extra)
    return Document(id=PurePath(name).name, content=content, metadata=metadata)


def merge_documents(documents: list[Document], source: str) -> Document:
    """Join several documents into one, each under a ``# {id}`` header."""
    if len(documents) == 1:
        return documents[0]

    content = MERGE_SEPARATOR.join(f"# {doc.id}\n\n{doc.content}" for doc in documents)
    word_count = sum(doc.metadata.word_count or 0 for doc in documents)
    metadata = DocumentMetadata.describe(
        source,
        content,
        content_type="text/markdown",
        word_count=word_count or None,
        extra={"fileCount": str(len(documents))},
    )
    return Document(id=f"merged-{len(documents)}-documents", content=content, metadata=metadata)
