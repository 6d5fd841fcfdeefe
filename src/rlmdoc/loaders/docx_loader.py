"""Loader for Word documents."""

import io
import re
import zipfile

import docx
from docx.opc.exceptions import PackageNotFoundError

from rlmdoc.errors import LoaderError
from rlmdoc.loaders.file_loader import FileLoader
from rlmdoc.models import Document, DocumentMetadata

HEADING_STYLE_RE = re.compile(r"^Heading (\d)$")

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def paragraph_markdown(paragraph) -> str:
    """Paragraph text, with heading styles turned into Markdown headers."""
    text = paragraph.text.strip()
    if not text:
        return ""
    style = paragraph.style.name if paragraph.style is not None else ""
    if style == "Title":
        return f"# {text}"
    match = HEADING_STYLE_RE.match(style or "")
    if match:
        return f"{'#' * min(int(match.group(1)), 6)} {text}"
    return text


class DocxLoader(FileLoader):
    """Loader for ``.docx`` files.

    Paragraphs become Markdown blocks, then each table row is added as
    ``cell | cell``.
    """

    source_type = "docx"
    suffixes = frozenset({".docx"})

    def convert(self, name: str, raw: bytes, source: str) -> Document:
        try:
            document = docx.Document(io.BytesIO(raw))
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError) as e:
            raise LoaderError(f"Cannot parse Word document {name}: {e}") from e

        blocks = [text for text in map(paragraph_markdown, document.paragraphs) if text]
        for table in document.tables:
            for row in table.rows:
                row_text = " | ".join(cell.text.strip() for cell in row.cells if cell.text.strip())
                if row_text:
                    blocks.append(row_text)

        content = "\n\n".join(blocks) + "\n" if blocks else ""
        properties = document.core_properties
        extra = {"originalFormat": DOCX_CONTENT_TYPE}
        if properties.author:
            extra["author"] = properties.author

        metadata = DocumentMetadata.describe(
            source,
            content,
            content_type="text/markdown",
            title=properties.title or None,
            extra=extra,
        )
        return Document(id=name, content=content, metadata=metadata)
