"""Token-budgeted chunking strategy."""

import re

from rlmdoc.chunkers.base import finalize, make_chunk
from rlmdoc.chunkers.options import TokenOptions
from rlmdoc.errors import ConfigurationError
from rlmdoc.models import Chunk, Document
from rlmdoc.protocols.tokenizer import Tokenizer

PARAGRAPH_BREAK = re.compile(r"\n(?:[ \t]*\n)+")
LINE_BREAK = re.compile(r"\n")

_LEVELS = {
    "paragraph": (PARAGRAPH_BREAK, LINE_BREAK),
    "line": (LINE_BREAK,),
}


def split_units(content: str, start: int, end: int, separator: re.Pattern) -> list[tuple[int, int]]:
    """Cut ``content[start:end]`` after every separator; units cover the range exactly."""
    units = []
    position = start
    for match in separator.finditer(content, start, end):
        if match.end() > position:
            units.append((position, match.end()))
            position = match.end()
    if position < end:
        units.append((position, end))
    return units


class TokenChunker:
    """Greedily pack paragraphs (or lines) while they fit in ``max_tokens``.

    Counts come from an exact tokenizer, measured on the text of the chunk
    being built. A unit that is too large on its own is split at line
    breaks, then character-proportionally.
    """

    name = "token"

    def __init__(self, options: TokenOptions, tokenizer: Tokenizer):
        self.options = options
        self.options.validate()
        self.tokenizer = tokenizer

    def chunk(self, document: Document) -> list[Chunk]:
        content = document.content
        if not content:
            return []

        pieces = self._pack(content, 0, len(content), _LEVELS[self.options.granularity])
        chunks = [
            make_chunk(
                content,
                start,
                end,
                document.id,
                self.name,
                tokenCount=str(tokens),
                tokenizer=self.tokenizer.name,
            )
            for start, end, tokens in pieces
        ]
        return finalize(chunks)

    def _count(self, content: str, start: int, end: int) -> int:
        return self.tokenizer.count_tokens(content[start:end])

    def _pack(
        self, content: str, start: int, end: int, levels: tuple[re.Pattern, ...]
    ) -> list[tuple[int, int, int]]:
        if not levels:
            return self._split_proportionally(content, start, end)

        budget = self.options.max_tokens
        pieces: list[tuple[int, int, int]] = []
        current: tuple[int, int, int] | None = None

        for unit_start, unit_end in split_units(content, start, end, levels[0]):
            if current is not None:
                tokens = self._count(content, current[0], unit_end)
                if tokens <= budget:
                    current = (current[0], unit_end, tokens)
                    continue
                pieces.append(current)
                current = None

            tokens = self._count(content, unit_start, unit_end)
            if tokens <= budget:
                current = (unit_start, unit_end, tokens)
            else:
                pieces.extend(self._pack(content, unit_start, unit_end, levels[1:]))

        if current is not None:
            pieces.append(current)
        return pieces

    def _split_proportionally(self, content: str, start: int, end: int) -> list[tuple[int, int, int]]:
        budget = self.options.max_tokens
        pieces = []
        position = start

        while position < end:
            tokens = self._count(content, position, end)
            if tokens <= budget:
                pieces.append((position, end, tokens))
                break

            take = max(1, (end - position) * budget // tokens)
            tokens = self._count(content, position, position + take)
            while tokens > budget:
                if take == 1:
                    raise ConfigurationError(
                        f"Token budget of {budget} cannot hold a single character "
                        f"at offset {position}"
                    )
                take = max(1, min(take - 1, take * budget // tokens))
                tokens = self._count(content, position, position + take)

            pieces.append((position, position + take, tokens))
            position += take

        return pieces
