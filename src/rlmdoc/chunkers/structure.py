"""Markdown structure parsing shared by the chunkers and processors.

These are pure functions over a content string; strategies work on the
returned positions instead of re-scanning raw text.
"""

import re
from dataclasses import dataclass

HEADER_RE = re.compile(r"^(#{1,6})[ \t]+(\S.*?)[ \t]*$", re.MULTILINE)
CLOSING_HASHES_RE = re.compile(r"[ \t]+#+$")
FENCE_RE = re.compile(r"^[ \t]{0,3}(`{3,}|~{3,})[ \t]*([\w+#.-]*)[^\n]*$", re.MULTILINE)
FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n(.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)


@dataclass(frozen=True)
class Header:
    """A Markdown ATX header line."""

    level: int
    text: str
    start: int  # offset of the '#' that opens the line
    end: int  # offset just past the header text (before the newline)


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block, fences included."""

    language: str
    start: int
    end: int
    closed: bool = True


def find_code_blocks(content: str) -> list[CodeBlock]:
    """Find fenced code blocks (``` or ~~~).

    An unclosed fence runs to the end of the content.
    """
    blocks: list[CodeBlock] = []
    opening = None
    for match in FENCE_RE.finditer(content):
        fence = match.group(1)
        if opening is None:
            opening = (match, fence)
            continue
        open_match, open_fence = opening
        # A closing fence uses the same character, is at least as long and has no info string
        if fence[0] == open_fence[0] and len(fence) >= len(open_fence) and not match.group(2):
            blocks.append(CodeBlock(open_match.group(2), open_match.start(), match.end()))
            opening = None
    if opening is not None:
        open_match, _ = opening
        blocks.append(CodeBlock(open_match.group(2), open_match.start(), len(content), closed=False))
    return blocks


def find_headers(content: str, min_level: int = 1, max_level: int = 6) -> list[Header]:
    """Find ATX headers between ``min_level`` and ``max_level``, skipping code blocks."""
    blocks = find_code_blocks(content)
    headers = []
    for match in HEADER_RE.finditer(content):
        level = len(match.group(1))
        if not min_level <= level <= max_level:
            continue
        start = match.start()
        if any(block.start <= start < block.end for block in blocks):
            continue
        text = CLOSING_HASHES_RE.sub("", match.group(2)) or match.group(2)
        headers.append(Header(level=level, text=text, start=start, end=match.end()))
    return headers


def header_chains(headers: list[Header]) -> list[tuple[str, ...]]:
    """Return the ancestor chain of every header, the header itself last."""
    stack: list[Header] = []
    chains = []
    for header in headers:
        while stack and stack[-1].level >= header.level:
            stack.pop()
        stack.append(header)
        chains.append(tuple(h.text for h in stack))
    return chains


def header_paths(headers: list[Header], separator: str = " > ") -> list[str]:
    """Return the ancestor path of every header, e.g. ``"Intro > Background"``."""
    return [separator.join(chain) for chain in header_chains(headers)]


def parse_frontmatter(content: str) -> tuple[dict[str, str], int]:
    """Parse simple ``key: value`` YAML frontmatter.

    Returns:
        The parsed pairs and the offset where the body starts (0 if none)
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}, 0

    values: dict[str, str] = {}
    for line in match.group(1).split("\n"):
        line = line.strip()
        if not line or line.startswith("#") or ":" not in line:
            continue
        key, _, value = line.partition(":")
        key, value = key.strip(), value.strip().strip("\"'")
        if key and value:
            values[key] = value
    return values, match.end()
