"""Document loaders for files, folders, archives and stdin."""

import logging
from pathlib import Path
from typing import Optional

from rlmdoc.errors import LoaderError
from rlmdoc.loaders.docx_loader import DocxLoader
from rlmdoc.loaders.file_loader import FileLoader
from rlmdoc.loaders.folder_loader import FolderLoader
from rlmdoc.loaders.formats import FORMAT_LOADERS, file_loader_for
from rlmdoc.loaders.html_loader import HtmlLoader
from rlmdoc.loaders.pdf_loader import PdfLoader
from rlmdoc.loaders.stdin_loader import STDIN_SOURCE, StdinLoader
from rlmdoc.loaders.zip_loader import ZipLoader
from rlmdoc.models import Document
from rlmdoc.protocols import Loader

logger = logging.getLogger(__name__)

# Registry of available loaders, most specific first
_LOADERS: list[Loader] = [
    StdinLoader(),
    ZipLoader(),
    FolderLoader(),
    *FORMAT_LOADERS,
    FileLoader(),
]


def get_loader(source: Path | str) -> Optional[Loader]:
    """Find a loader that can handle the given source.

    Args:
        source: ``-`` for stdin, or a path to a file, folder or zip archive

    Returns:
        A Loader instance that can handle the source, or None
    """
    for loader in _LOADERS:
        if loader.can_handle(source):
            return loader
    return None


def register_loader(loader: Loader) -> None:
    """Register a custom loader (e.g. for spreadsheets).

    Registered loaders are consulted before the built-in file loader.

    Args:
        loader: An object implementing the Loader protocol
    """
    _LOADERS.insert(len(_LOADERS) - 1, loader)


def load_source(source: Path | str, pattern: Optional[str] = None, merge: bool = True) -> Document:
    """Load a source into a single document.

    Args:
        source: ``-`` for stdin, or a path to a file, folder or zip archive
        pattern: Glob pattern selecting files inside a folder or archive
        merge: Combine multiple files into one document

    Raises:
        LoaderError: If no loader handles the source or nothing could be loaded
    """
    loader = get_loader(source)
    if loader is None:
        raise LoaderError(f"Cannot read source: {source}")

    if isinstance(loader, (FolderLoader, ZipLoader)):
        document = loader.load(source, pattern=pattern, merge=merge)
    else:
        document = loader.load(source)

    if document is None:
        detail = f" matching '{pattern}'" if pattern else ""
        raise LoaderError(f"No documents found{detail} in: {source}")
    logger.debug("Loaded %s via %s loader", document.id, loader.source_type)
    return document


__all__ = [
    "get_loader",
    "register_loader",
    "load_source",
    "file_loader_for",
    "FileLoader",
    "HtmlLoader",
    "PdfLoader",
    "DocxLoader",
    "FolderLoader",
    "ZipLoader",
    "StdinLoader",
    "STDIN_SOURCE",
]
