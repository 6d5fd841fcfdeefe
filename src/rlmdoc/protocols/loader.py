"""Protocol for document source handlers."""

from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from rlmdoc.models import Document


@runtime_checkable
class Loader(Protocol):
    """Protocol for document source handlers.

    Implementations handle different sources (file, folder, zip, stdin).
    Uses structural subtyping - no inheritance required.
    """

    @property
    def source_type(self) -> str:
        """Return identifier for this source type (e.g., 'file', 'folder')."""
        ...

    def can_handle(self, source: Path | str) -> bool:
        """Check if this loader can process the given source."""
        ...

    def load(self, source: Path | str) -> Optional[Document]:
        """Return a normalized document, or None when nothing usable was found."""
        ...
