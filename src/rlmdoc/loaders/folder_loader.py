"""Loader for local folders."""

import logging
from pathlib import Path
from typing import Optional

from rlmdoc.errors import LoaderError
from rlmdoc.loaders.base import merge_documents, should_skip
from rlmdoc.loaders.formats import file_loader_for
from rlmdoc.models import Document

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "**/*"


class FolderLoader:
    """Loader for local filesystem folders.

    Files matching the glob pattern are read in path order and converted
    by format; binary files and hidden or build directories are skipped.
    """

    source_type = "folder"

    def can_handle(self, source: Path | str) -> bool:
        """Check if this is an existing directory."""
        return Path(source).is_dir()

    def load_all(self, source: Path | str, pattern: Optional[str] = None) -> list[Document]:
        """Load every matching text file in the folder.

        Args:
            source: Path to the folder
            pattern: Glob pattern relative to the folder, e.g. ``*.md`` or ``**/*.txt``

        Returns:
            One document per file, its id the path relative to the folder
        """
        root = Path(source)
        documents = []
        for path in sorted(root.glob(pattern or DEFAULT_PATTERN)):
            relative = path.relative_to(root)
            if not path.is_file() or should_skip(relative):
                continue
            try:
                document = file_loader_for(path.name).load(path)
            except LoaderError as e:
                logger.debug("Skipping %s: %s", relative, e)
                continue
            if document is not None:
                documents.append(document.with_id(relative.as_posix()))
        return documents

    def load(
        self,
        source: Path | str,
        pattern: Optional[str] = None,
        merge: bool = True,
    ) -> Optional[Document]:
        """Load a folder as one document.

        With ``merge`` all files are combined under ``# {path}`` headers;
        otherwise only the first file is loaded.

        Returns:
            The document, or None if no file matched
        """
        documents = self.load_all(source, pattern)
        if not documents:
            return None
        logger.info("Found %d files in %s", len(documents), source)
        if not merge and len(documents) > 1:
            logger.warning("Found %d files, loaded only the first. Merge to combine all.", len(documents))
            return documents[0]
        return merge_documents(documents, str(Path(source).resolve()))
