"""Regex filtering strategy for needle-in-haystack tasks."""

from dataclasses import dataclass, field

from rlmdoc.chunkers.base import finalize, make_chunk
from rlmdoc.chunkers.options import FilteringOptions, compile_pattern
from rlmdoc.models import Chunk, Document


@dataclass
class _Segment:
    start: int
    end: int
    terms: list[str] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.terms)


class FilteringChunker:
    """Return only the regions around regex matches.

    Each match is widened by ``context_window`` characters on both sides
    (clamped to the content); windows that overlap or touch are merged so
    no text appears in two chunks. No matches means no chunks.
    """

    name = "filter"

    def __init__(self, options: FilteringOptions):
        self.options = options
        self.options.validate()
        self.regex = compile_pattern(options.pattern, options.ignore_case)

    def chunk(self, document: Document) -> list[Chunk]:
        content = document.content
        segments = self._merge_windows(content)

        chunks = []
        for segment in segments:
            terms = list(dict.fromkeys(segment.terms))
            chunks.append(
                make_chunk(
                    content,
                    segment.start,
                    segment.end,
                    document.id,
                    self.name,
                    matchedTerms=", ".join(terms),
                    matchCount=str(segment.match_count),
                )
            )
        return finalize(chunks)

    def _merge_windows(self, content: str) -> list[_Segment]:
        context = self.options.context_window
        merged: list[_Segment] = []

        # finditer scans left to right, so windows arrive sorted by start
        for match in self.regex.finditer(content):
            start = max(0, match.start() - context)
            end = min(len(content), match.end() + context)
            if end <= start:
                continue

            if merged and start <= merged[-1].end:
                last = merged[-1]
                last.end = max(last.end, end)
                last.terms.append(match.group(0))
            else:
                merged.append(_Segment(start, end, [match.group(0)]))

        return merged
