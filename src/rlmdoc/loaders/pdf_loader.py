"""Loader that extracts the text of PDF files."""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from rlmdoc.errors import LoaderError
from rlmdoc.loaders.file_loader import FileLoader
from rlmdoc.models import Document, DocumentMetadata

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


class PdfLoader(FileLoader):
    """Loader for ``.pdf`` files.

    Page texts are joined by blank lines. Title, author and page count
    come from the document information dictionary.
    """

    source_type = "pdf"
    suffixes = frozenset({".pdf"})

    def convert(self, name: str, raw: bytes, source: str) -> Document:
        try:
            reader = PdfReader(io.BytesIO(raw))
            if reader.is_encrypted:
                raise LoaderError(f"{name} is encrypted and cannot be read")
            pages = [(page.extract_text() or "").strip() for page in reader.pages]
            info = reader.metadata
        except PyPdfError as e:
            raise LoaderError(f"Cannot parse PDF {name}: {e}") from e

        content = PAGE_SEPARATOR.join(text for text in pages if text)
        if content:
            content += "\n"
        else:
            logger.warning("No text found in %s; it may be a scanned document", name)

        extra = {"pageCount": str(len(pages))}
        title = None
        if info is not None:
            title = info.title or None
            if info.author:
                extra["author"] = info.author

        metadata = DocumentMetadata.describe(
            source,
            content,
            content_type="application/pdf",
            title=title,
            extra=extra,
        )
        return Document(id=name, content=content, metadata=metadata)
