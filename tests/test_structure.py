"""Tests for Markdown structure parsing."""

from rlmdoc.chunkers.structure import (
    find_code_blocks,
    find_headers,
    header_paths,
    parse_frontmatter,
)


class TestFindHeaders:
    """Test ATX header detection."""

    def test_levels_and_text(self):
        """Test header level and text extraction."""
        headers = find_headers("# Title\ntext\n### Deep\n")
        assert [(h.level, h.text) for h in headers] == [(1, "Title"), (3, "Deep")]
        assert headers[0].start == 0

    def test_skips_code_blocks(self):
        """Test that '#' lines inside fences are not headers."""
        content = "# Title\n```\n# not a header\n```\n## Sub\n"
        assert [h.text for h in find_headers(content)] == ["Title", "Sub"]

    def test_closing_hashes_removed(self):
        """Test that trailing closing hashes are dropped but '#' in text is kept."""
        assert find_headers("## C# ##\n")[0].text == "C#"

    def test_requires_space(self):
        """Test that '#word' is not a header."""
        assert find_headers("#NoSpace\n#hashtag") == []

    def test_level_range(self):
        """Test min and max level filtering."""
        content = "# A\n## B\n### C\n"
        assert [h.text for h in find_headers(content, min_level=2, max_level=2)] == ["B"]


class TestHeaderPaths:
    """Test ancestor path construction."""

    def test_paths(self):
        """Test that siblings and deeper levels get the right ancestors."""
        headers = find_headers("# A\n## B\n### C\n## D\n# E\n")
        assert header_paths(headers) == ["A", "A > B", "A > B > C", "A > D", "E"]


class TestCodeBlocks:
    """Test fenced code block detection."""

    def test_languages(self):
        """Test backtick and tilde fences with info strings."""
        blocks = find_code_blocks("```python\nx = 1\n```\n~~~\ny\n~~~\n")
        assert [b.language for b in blocks] == ["python", ""]
        assert all(b.closed for b in blocks)

    def test_mismatched_fence_does_not_close(self):
        """Test that a tilde fence does not close a backtick block."""
        blocks = find_code_blocks("```\na\n~~~\nb\n```\n")
        assert len(blocks) == 1
        assert blocks[0].closed

    def test_unclosed_block(self):
        """Test that an unclosed fence runs to the end."""
        content = "text\n```js\nfoo()"
        blocks = find_code_blocks(content)
        assert len(blocks) == 1
        assert blocks[0].language == "js"
        assert blocks[0].end == len(content)
        assert not blocks[0].closed


class TestFrontmatter:
    """Test simple YAML frontmatter parsing."""

    def test_parse(self):
        """Test key/value pairs and the body offset."""
        content = "---\ntitle: Hello\nauthor: 'Me'\n---\n# Body\n"
        values, offset = parse_frontmatter(content)

        assert values == {"title": "Hello", "author": "Me"}
        assert content[offset:] == "# Body\n"

    def test_absent(self):
        """Test content without frontmatter."""
        assert parse_frontmatter("# Just a doc\n") == ({}, 0)
