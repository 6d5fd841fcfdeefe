"""Content sanity checks: binary data, encoding, fences and line length."""

from rlmdoc.chunkers.structure import find_code_blocks
from rlmdoc.models import Document, ValidationResult

REPLACEMENT_CHAR = "�"
LONG_LINE = 10_000
SAMPLE_SIZE = 1_000


def contains_binary(content: str) -> bool:
    """Null characters, or more than 10% control characters in the first 1000."""
    if not content:
        return False
    if "\x00" in content:
        return True
    sample = content[:SAMPLE_SIZE]
    control = sum(1 for c in sample if ord(c) < 32 and c not in "\t\n\r\f")
    return control > len(sample) * 0.1


def is_markdown(document: Document) -> bool:
    source = document.metadata.source.lower()
    return document.metadata.content_type == "text/markdown" or source.endswith((".md", ".markdown"))


def max_line_length(content: str) -> int:
    return max((len(line) for line in content.split("\n")), default=0)


class SyntacticValidator:
    """Check that a document is plausible text."""

    def validate(self, document: Document) -> ValidationResult:
        content = document.content
        warnings: list[str] = []

        if contains_binary(content):
            return ValidationResult.failure(
                ["Document appears to contain binary content. Only text documents are supported."]
            )

        if REPLACEMENT_CHAR in content:
            warnings.append("Document contains invalid UTF-8 sequences (replaced with U+FFFD).")

        if is_markdown(document):
            blocks = find_code_blocks(content)
            if blocks and not blocks[-1].closed:
                warnings.append(
                    f"Unbalanced code blocks detected: {len(blocks)} opening, {len(blocks) - 1} closing."
                )

        longest = max_line_length(content)
        if longest > LONG_LINE:
            warnings.append(
                f"Document contains very long lines (max: {longest:,} chars). This may be minified content."
            )

        return ValidationResult.success(warnings)
