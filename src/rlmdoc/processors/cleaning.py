"""Content normalization."""

import re

from rlmdoc.models import Document

HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
EMPTY_LINK_RE = re.compile(r"\[([^\]]*)\]\(\s*\)|\[\s*\]\([^)]*\)")
BLANK_LINES_RE = re.compile(r"\n{3,}")
SPACES_RE = re.compile(r"[ \t]{2,}")


def clean_content(content: str) -> str:
    """Strip HTML comments and empty links, collapse runs of blank lines and spaces, trim lines."""
    content = HTML_COMMENT_RE.sub("", content)
    content = EMPTY_LINK_RE.sub("", content)
    content = SPACES_RE.sub(" ", content)
    content = "\n".join(line.strip() for line in content.split("\n"))
    # After trimming, whitespace-only lines are empty and collapse with the rest
    content = BLANK_LINES_RE.sub("\n\n", content)
    return content.strip()


class ContentCleaner:
    """Processor that normalizes whitespace and removes Markdown noise.

    Indentation is removed too, so do not clean source code you want to
    keep verbatim.
    """

    name = "cleaning"

    def process(self, document: Document) -> Document:
        return document.with_content(clean_content(document.content))
