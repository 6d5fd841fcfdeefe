"""Markdown section chunking strategy."""

from dataclasses import dataclass, field

from rlmdoc.chunkers.base import finalize, make_chunk
from rlmdoc.chunkers.options import SemanticOptions, compile_pattern
from rlmdoc.chunkers.structure import find_headers, header_chains
from rlmdoc.chunkers.token import PARAGRAPH_BREAK, split_units
from rlmdoc.models import Chunk, Document

PATH_SEPARATOR = " > "


@dataclass
class Section:
    """A header and the content that follows it, as offsets into the document."""

    start: int
    end: int
    header: str
    level: int
    chain: tuple[str, ...] = ()
    merged_headers: list[str] = field(default_factory=list)
    part: int = 0
    part_count: int = 0

    @property
    def size(self) -> int:
        return self.end - self.start

    @property
    def path(self) -> str:
        return PATH_SEPARATOR.join(self.chain)

    @property
    def parent(self) -> tuple[str, ...]:
        return self.chain[:-1]

    def metadata(self) -> dict[str, str]:
        meta = {
            "sectionHeader": self.header,
            "headerLevel": str(self.level),
            "headerPath": self.path,
        }
        if len(self.merged_headers) > 1:
            meta["mergedSections"] = str(len(self.merged_headers))
            meta["mergedHeaders"] = " + ".join(self.merged_headers)
        if self.part_count > 1:
            meta["partNumber"] = str(self.part)
            meta["partCount"] = str(self.part_count)
        return meta


class SemanticChunker:
    """Split on Markdown headers, preserving the section hierarchy.

    Use for document structure analysis and section-based comparison.
    Sections partition the content: joining the chunks gives back the
    document unless ``filter_pattern`` drops sections.
    """

    name = "semantic"

    def __init__(self, options: SemanticOptions | None = None):
        self.options = options or SemanticOptions()
        self.options.validate()

    def chunk(self, document: Document) -> list[Chunk]:
        content = document.content
        chunks = [
            make_chunk(content, s.start, s.end, document.id, self.name, **s.metadata())
            for s in self.sections(content)
        ]
        return finalize(chunks)

    def sections(self, content: str) -> list[Section]:
        """Return the (filtered, merged) sections of ``content``."""
        if not content:
            return []

        headers = find_headers(content, self.options.min_level, self.options.max_level)
        if not headers:
            return [Section(0, len(content), header="", level=0)]

        chains = header_chains(headers)
        sections = []
        for i, (header, chain) in enumerate(zip(headers, chains)):
            end = headers[i + 1].start if i + 1 < len(headers) else len(content)
            sections.append(Section(header.start, end, header.text, header.level, chain, [header.text]))

        # Text before the first header
        first_start = headers[0].start
        if first_start > 0:
            if content[:first_start].strip():
                sections.insert(0, Section(0, first_start, header="", level=0))
            else:
                sections[0].start = 0

        if self.options.filter_pattern:
            regex = compile_pattern(self.options.filter_pattern, label="filter pattern")
            sections = [s for s in sections if regex.search(content, s.start, s.end)]

        if self.options.merge_small and self.options.min_size > 0:
            sections = merge_small_sections(sections, self.options.min_size)

        if self.options.max_size > 0:
            sections = split_large_sections(sections, content, self.options.max_size)

        return sections


def merge_small_sections(sections: list[Section], min_size: int) -> list[Section]:
    """Absorb following siblings into a section while it is smaller than ``min_size``.

    Only adjacent sections with the same level and parent are merged; the
    result keeps the header and path of its first section.
    """
    merged: list[Section] = []
    for section in sections:
        if merged:
            acc = merged[-1]
            if (
                acc.size < min_size
                and acc.level == section.level
                and acc.parent == section.parent
                and acc.end == section.start
            ):
                acc.end = section.end
                acc.merged_headers.extend(section.merged_headers)
                continue
        merged.append(
            Section(
                section.start,
                section.end,
                section.header,
                section.level,
                section.chain,
                list(section.merged_headers),
            )
        )
    return merged


def split_large_sections(sections: list[Section], content: str, max_size: int) -> list[Section]:
    """Split sections longer than ``max_size`` at paragraph breaks.

    Paragraphs are packed greedily, so a part only exceeds ``max_size``
    when a single paragraph does. Parts keep exact offsets and the path
    of their section; their header gets a ``(Part n)`` suffix.
    """
    result: list[Section] = []
    for section in sections:
        if section.size <= max_size:
            result.append(section)
            continue

        parts: list[tuple[int, int]] = []
        part_start = part_end = section.start
        for unit_start, unit_end in split_units(content, section.start, section.end, PARAGRAPH_BREAK):
            if part_end > part_start and unit_end - part_start > max_size:
                parts.append((part_start, part_end))
                part_start = unit_start
            part_end = unit_end
        parts.append((part_start, part_end))

        if len(parts) == 1:
            result.append(section)
            continue

        for number, (start, end) in enumerate(parts, start=1):
            result.append(
                Section(
                    start,
                    end,
                    f"{section.header} (Part {number})".lstrip(),
                    section.level,
                    section.chain,
                    list(section.merged_headers),
                    part=number,
                    part_count=len(parts),
                )
            )
    return result
