"""Tests for automatic strategy selection and chunk statistics."""

from conftest import make_document
from rlmdoc.chunkers import (
    AutoOptions,
    FilteringOptions,
    RecursiveOptions,
    SemanticOptions,
    UniformOptions,
    enrich_statistics,
    segment,
    select_strategy,
)
from rlmdoc.chunkers.auto import query_pattern
from rlmdoc.models import Chunk


class TestSelectStrategy:
    """Test the selection rules in order."""

    def test_query_selects_filter(self):
        """Test that a query wins over every other rule."""
        selected = select_strategy("# A\n# B\n", AutoOptions(query="error", context_window=42))
        assert selected == FilteringOptions(pattern="error", context_window=42)

    def test_invalid_query_is_escaped(self):
        """Test that a query that is not a valid regex is matched literally."""
        assert query_pattern("foo(") == "foo\\("
        assert query_pattern("err(or)?") == "err(or)?"

    def test_blank_query_ignored(self):
        """Test that a whitespace-only query does not select filter."""
        assert isinstance(select_strategy("plain", AutoOptions(query="  ")), UniformOptions)

    def test_headers_select_semantic(self):
        """Test that structured Markdown selects merged semantic sections."""
        selected = select_strategy("# A\nx\n## B\ny\n", AutoOptions(semantic_min_size=300))
        assert selected == SemanticOptions(merge_small=True, min_size=300)

    def test_single_header_is_not_structure(self):
        """Test that one header is not enough for semantic."""
        assert isinstance(select_strategy("# A\ntext", AutoOptions()), UniformOptions)

    def test_large_selects_recursive(self):
        """Test that large unstructured content selects recursive."""
        selected = select_strategy("x" * 150, AutoOptions(large_document_threshold=100, recursive_target_size=40))
        assert selected == RecursiveOptions(target_size=40)

    def test_default_uniform(self):
        """Test the fallback."""
        assert select_strategy("small", AutoOptions(default_size=123)) == UniformOptions(size=123)

    def test_segment_marks_auto(self):
        """Test that auto chunks record the selection."""
        chunks = segment(make_document("# A\nfoo\n# B\nbar\n"), AutoOptions(semantic_min_size=0))

        assert len(chunks) == 2
        assert all(c.metadata["autoSelected"] == "true" for c in chunks)
        assert all(c.metadata["strategy"] == "semantic" for c in chunks)


class TestStatistics:
    """Test per-chunk statistics."""

    def test_enrich(self):
        """Test word, line and character counts."""
        chunk = Chunk(index=0, content="hello world\nfoo", start_offset=0, end_offset=15, metadata={"a": "b"})
        (enriched,) = enrich_statistics([chunk])

        assert enriched.metadata == {
            "a": "b",
            "wordCount": "3",
            "lineCount": "2",
            "charCount": "15",
            "charCountNoWhitespace": "13",
        }
        assert chunk.metadata == {"a": "b"}
