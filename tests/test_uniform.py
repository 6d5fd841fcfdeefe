"""Tests for fixed-size chunking."""

import pytest

from conftest import make_document
from rlmdoc.chunkers import UniformChunker, UniformOptions, segment
from rlmdoc.chunkers.uniform import window_bounds
from rlmdoc.errors import ConfigurationError


class TestUniformChunker:
    """Test fixed-size windows."""

    def test_chunk_count_and_sizes(self):
        """Test that all but the last window have the full size."""
        chunks = segment(make_document("a" * 250), UniformOptions(size=100))

        assert len(chunks) == 3
        assert [c.length for c in chunks] == [100, 100, 50]
        assert [c.index for c in chunks] == [0, 1, 2]

    def test_offsets_are_contiguous(self):
        """Test that windows without overlap tile the content."""
        content = "".join(chr(ord("a") + i % 26) for i in range(1000))
        chunks = segment(make_document(content), UniformOptions(size=64))

        assert chunks[0].start_offset == 0
        assert chunks[-1].end_offset == len(content)
        for prev, cur in zip(chunks, chunks[1:]):
            assert prev.end_offset == cur.start_offset
        assert "".join(c.content for c in chunks) == content

    def test_overlap(self):
        """Test that each window starts overlap characters before the previous end."""
        assert window_bounds(250, 100, 20) == [(0, 100), (80, 180), (160, 250)]

    def test_exact_multiple(self):
        """Test content that is an exact multiple of the size."""
        chunks = segment(make_document("x" * 200), UniformOptions(size=100))
        assert [c.length for c in chunks] == [100, 100]

    def test_empty_content(self):
        """Test that empty content yields no chunks."""
        assert segment(make_document(""), UniformOptions(size=10)) == []

    def test_short_content_is_one_chunk(self):
        """Test content shorter than the size."""
        chunks = segment(make_document("hello"), UniformOptions(size=100))
        assert len(chunks) == 1
        assert chunks[0].content == "hello"

    def test_metadata(self):
        """Test the common metadata keys."""
        chunks = UniformChunker(UniformOptions(size=100)).chunk(make_document("a" * 250, source="notes.txt"))

        for chunk in chunks:
            assert chunk.metadata["documentId"] == "notes.txt"
            assert chunk.metadata["strategy"] == "uniform"
            assert chunk.metadata["totalChunks"] == "3"

    @pytest.mark.parametrize(
        "size,overlap,message",
        [
            (0, 0, "Chunk size must be positive"),
            (-5, 0, "Chunk size must be positive"),
            (100, -1, "Overlap must not be negative"),
            (100, 100, "must be smaller than the chunk size"),
        ],
    )
    def test_invalid_options(self, size, overlap, message):
        """Test that bad sizes are configuration errors."""
        with pytest.raises(ConfigurationError, match=message):
            segment(make_document("abc"), UniformOptions(size=size, overlap=overlap))
