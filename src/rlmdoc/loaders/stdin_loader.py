"""Loader for text piped on standard input."""

import sys
from pathlib import Path
from typing import Optional, TextIO

from rlmdoc.models import Document, DocumentMetadata

STDIN_SOURCE = "-"


class StdinLoader:
    """Loader for ``-``, reading the whole of standard input."""

    source_type = "stdin"

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream

    def can_handle(self, source: Path | str) -> bool:
        return str(source) == STDIN_SOURCE

    def load(self, source: Path | str = STDIN_SOURCE) -> Optional[Document]:
        content = (self.stream or sys.stdin).read().replace("\r\n", "\n")
        metadata = DocumentMetadata.describe("stdin", content)
        return Document(id="stdin", content=content, metadata=metadata)
