"""Loader that converts HTML pages to Markdown."""

import logging
from typing import Iterator, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from rlmdoc.loaders.file_loader import FileLoader
from rlmdoc.models import Document, DocumentMetadata
from rlmdoc.utils.binary import decode_text

logger = logging.getLogger(__name__)

# Never part of the readable page
DROPPED_TAGS = ["script", "style", "noscript", "template", "head"]

HEADINGS = {f"h{level}": level for level in range(1, 7)}


def inline_text(element: Tag) -> str:
    return " ".join(element.get_text(" ").split())


def code_language(pre: Tag) -> str:
    code = pre.find("code")
    classes = code.get("class", []) if isinstance(code, Tag) else []
    for cls in classes:
        if cls.startswith("language-"):
            return cls[len("language-"):]
    return ""


def markdown_blocks(element: Tag) -> Iterator[str]:
    """Yield one Markdown block per heading, paragraph, list, table or code block."""
    for child in element.children:
        if isinstance(child, NavigableString):
            # Comments, doctypes and CDATA are PreformattedString subclasses
            if not isinstance(child, PreformattedString) and child.strip():
                yield " ".join(child.split())
            continue
        if not isinstance(child, Tag):
            continue

        name = child.name
        if name in HEADINGS:
            text = inline_text(child)
            if text:
                yield f"{'#' * HEADINGS[name]} {text}"
        elif name == "pre":
            code = child.get_text().rstrip("\n")
            yield f"```{code_language(child)}\n{code}\n```"
        elif name in ("ul", "ol"):
            items = [inline_text(li) for li in child.find_all("li", recursive=False)]
            lines = [
                f"{i}. {text}" if name == "ol" else f"- {text}"
                for i, text in enumerate((t for t in items if t), start=1)
            ]
            if lines:
                yield "\n".join(lines)
        elif name == "table":
            rows = []
            for tr in child.find_all("tr"):
                cells = [inline_text(cell) for cell in tr.find_all(["th", "td"])]
                row = " | ".join(cell for cell in cells if cell)
                if row:
                    rows.append(row)
            if rows:
                yield "\n".join(rows)
        elif name == "blockquote":
            text = inline_text(child)
            if text:
                yield f"> {text}"
        elif name == "hr":
            yield "---"
        elif name in ("p", "dt", "dd", "figcaption", "caption"):
            text = inline_text(child)
            if text:
                yield text
        else:
            yield from markdown_blocks(child)


def extract_title(soup: BeautifulSoup) -> Optional[str]:
    """The ``<title>``, or the first ``<h1>``."""
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(strip=True)
    h1 = soup.find("h1")
    if isinstance(h1, Tag):
        return inline_text(h1) or None
    return None


def html_to_markdown(html: str) -> tuple[str, Optional[str]]:
    """Convert an HTML page to Markdown, keeping its heading structure.

    Returns:
        The Markdown text and the page title, if any
    """
    soup = BeautifulSoup(html, "html.parser")
    title = extract_title(soup)
    for tag in soup(DROPPED_TAGS):
        tag.decompose()

    blocks = list(markdown_blocks(soup.body or soup))
    return ("\n\n".join(blocks) + "\n" if blocks else ""), title


class HtmlLoader(FileLoader):
    """Loader for ``.html`` files; the document holds the page as Markdown."""

    source_type = "html"
    suffixes = frozenset({".html", ".htm"})

    def convert(self, name: str, raw: bytes, source: str) -> Document:
        markdown, title = html_to_markdown(decode_text(raw))
        logger.debug("Converted %s to %d chars of Markdown", name, len(markdown))
        metadata = DocumentMetadata.describe(
            source,
            markdown,
            content_type="text/markdown",
            title=title,
            extra={"originalFormat": "text/html"},
        )
        return Document(id=name, content=markdown, metadata=metadata)
