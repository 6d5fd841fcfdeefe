"""Loader for single text files."""

from pathlib import Path
from typing import Optional

from rlmdoc.errors import LoaderError
from rlmdoc.loaders.base import document_from_bytes
from rlmdoc.models import Document
from rlmdoc.utils.retry import with_retry


@with_retry()
def read_bytes(path: Path) -> bytes:
    return path.read_bytes()


class FileLoader:
    """Loader for a single file on the local filesystem.

    Subclasses that convert a specific format set ``suffixes`` and
    override ``convert``; the base class decodes any text file.
    """

    source_type = "file"
    suffixes: frozenset[str] = frozenset()

    def can_handle(self, source: Path | str) -> bool:
        """Check if this is an existing file with a suffix this loader converts."""
        path = Path(source)
        if self.suffixes and path.suffix.lower() not in self.suffixes:
            return False
        return path.is_file()

    def convert(self, name: str, raw: bytes, source: str) -> Document:
        """Turn file bytes into a document.

        Raises:
            LoaderError: If the content cannot be converted
        """
        return document_from_bytes(name, raw, source)

    def load(self, source: Path | str) -> Optional[Document]:
        """Read and convert a file.

        Raises:
            LoaderError: If the file cannot be read or converted
        """
        path = Path(source)
        try:
            raw = read_bytes(path)
        except OSError as e:
            raise LoaderError(f"Cannot read {path}: {e}") from e
        return self.convert(path.name, raw, str(path.resolve()))
