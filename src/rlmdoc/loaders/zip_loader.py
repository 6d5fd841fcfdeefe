"""Loader for ZIP archive files."""

import fnmatch
import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import Optional

from rlmdoc.errors import LoaderError
from rlmdoc.loaders.base import merge_documents, should_skip
from rlmdoc.loaders.formats import file_loader_for
from rlmdoc.models import Document

logger = logging.getLogger(__name__)


class ZipLoader:
    """Loader for ZIP archive files; readable members are merged into one document."""

    source_type = "zip"

    def can_handle(self, source: Path | str) -> bool:
        """Check if this is a zip file."""
        path = Path(source)
        return path.suffix.lower() == ".zip" and path.is_file()

    def load_all(self, source: Path | str, pattern: Optional[str] = None) -> list[Document]:
        """Load every text member of the archive matching ``pattern``."""
        path = Path(source)
        documents = []
        try:
            with zipfile.ZipFile(path, "r") as zf:
                for info in sorted(zf.infolist(), key=lambda i: i.filename):
                    member = PurePosixPath(info.filename)
                    if info.is_dir() or should_skip(member):
                        continue
                    if pattern and not fnmatch.fnmatch(info.filename, pattern):
                        continue
                    try:
                        raw = zf.read(info.filename)
                        document = file_loader_for(info.filename).convert(
                            info.filename, raw, f"{path.resolve()}!{info.filename}"
                        )
                    except LoaderError as e:
                        logger.debug("Skipping %s: %s", info.filename, e)
                        continue
                    documents.append(document.with_id(info.filename))
        except (OSError, zipfile.BadZipFile) as e:
            raise LoaderError(f"Cannot read archive {path}: {e}") from e
        return documents

    def load(
        self,
        source: Path | str,
        pattern: Optional[str] = None,
        merge: bool = True,
    ) -> Optional[Document]:
        documents = self.load_all(source, pattern)
        if not documents:
            return None
        if not merge and len(documents) > 1:
            logger.warning("Found %d files, loaded only the first. Merge to combine all.", len(documents))
            return documents[0]
        return merge_documents(documents, str(Path(source).resolve()))
