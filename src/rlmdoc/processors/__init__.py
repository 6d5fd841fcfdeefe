"""Document processors applied after loading."""

from rlmdoc.models import Document
from rlmdoc.processors.cleaning import ContentCleaner, clean_content
from rlmdoc.processors.metadata import MetadataExtractor, detect_document_type


def process_document(document: Document, clean: bool = False) -> Document:
    """Run the default processor chain: optional cleaning, then metadata extraction."""
    processors = [ContentCleaner()] if clean else []
    processors.append(MetadataExtractor())
    for processor in processors:
        document = processor.process(document)
    return document


__all__ = [
    "process_document",
    "ContentCleaner",
    "MetadataExtractor",
    "clean_content",
    "detect_document_type",
]
