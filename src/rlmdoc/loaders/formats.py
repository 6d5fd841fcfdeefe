"""File loaders by format, for single files and for members of folders and archives."""

from pathlib import PurePath

from rlmdoc.loaders.docx_loader import DocxLoader
from rlmdoc.loaders.file_loader import FileLoader
from rlmdoc.loaders.html_loader import HtmlLoader
from rlmdoc.loaders.pdf_loader import PdfLoader

FORMAT_LOADERS: list[FileLoader] = [HtmlLoader(), PdfLoader(), DocxLoader()]

_TEXT_LOADER = FileLoader()


def file_loader_for(name: str | PurePath) -> FileLoader:
    """Pick the loader converting files with this name; plain text otherwise."""
    suffix = PurePath(name).suffix.lower()
    for loader in FORMAT_LOADERS:
        if suffix in loader.suffixes:
            return loader
    return _TEXT_LOADER
