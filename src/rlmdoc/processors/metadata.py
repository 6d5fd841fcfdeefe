"""Metadata extraction from document content."""

import re
from typing import Optional

from rlmdoc.chunkers.structure import find_code_blocks, find_headers, parse_frontmatter
from rlmdoc.models import Document

WORD_RE = re.compile(r"\b\w+\b")
WORDS_PER_MINUTE = 200

# First match wins
DOCUMENT_TYPES = [
    ("api-documentation", re.compile(r"\b(endpoint|api|request|response|http|get|post|put|delete)\b", re.I)),
    ("configuration", re.compile(r"\b(config|setting|option|parameter|environment|variable)\b", re.I)),
    ("tutorial", re.compile(r"\b(step\s+\d|tutorial|how\s+to|guide|walkthrough)\b", re.I)),
    ("changelog", re.compile(r"\b(changelog|release\s+notes|version\s+\d|breaking\s+change)\b", re.I)),
    ("specification", re.compile(r"\b(specification|spec|requirement|must|shall|should)\b", re.I)),
]


def detect_document_type(content: str) -> Optional[str]:
    for name, pattern in DOCUMENT_TYPES:
        if pattern.search(content):
            return name
    return None


class MetadataExtractor:
    """Processor that derives title, counts and frontmatter from the content.

    YAML frontmatter is removed from the content and its pairs kept in
    ``metadata.extra``; a ``title`` key there wins over the first H1.
    """

    name = "metadata"

    def __init__(self, strip_frontmatter: bool = True):
        self.strip_frontmatter = strip_frontmatter

    def process(self, document: Document) -> Document:
        content = document.content
        frontmatter, body_start = parse_frontmatter(content)
        if frontmatter and self.strip_frontmatter:
            content = content[body_start:].lstrip()

        headers = find_headers(content)
        blocks = find_code_blocks(content)
        word_count = len(WORD_RE.findall(content))

        title = frontmatter.get("title")
        if title is None:
            title = next((h.text for h in headers if h.level == 1), document.metadata.title)

        extra = {**document.metadata.extra, **frontmatter}
        detected = detect_document_type(content)
        if detected:
            extra["detectedType"] = detected

        return document.with_content(
            content,
            title=title,
            word_count=word_count,
            header_count=len(headers),
            code_block_count=len(blocks) or None,
            code_languages=tuple(dict.fromkeys(b.language for b in blocks if b.language)),
            reading_time_minutes=max(1, word_count // WORDS_PER_MINUTE),
            extra=extra,
        )
