"""FastMCP server implementation for rlmdoc."""

from collections.abc import Callable
from typing import Optional

from mcp.server.fastmcp import FastMCP

from rlmdoc.chunkers import build_options
from rlmdoc.errors import LoaderError, RlmError
from rlmdoc.loaders import load_source
from rlmdoc.models import Chunk
from rlmdoc.processors import process_document
from rlmdoc.session import Session, parse_jump_target
from rlmdoc.storage import SessionStore
from rlmdoc.validation import validate_document


def format_chunk(chunk: Chunk, session: Session) -> str:
    """Render a chunk with a short header for the model."""
    header = [f"[Chunk {chunk.index + 1}/{session.chunk_count}]"]
    if chunk.metadata.get("headerPath"):
        header.append(f"Section: {chunk.metadata['headerPath']}")
    if chunk.metadata.get("matchedTerms"):
        header.append(f"Matches: {chunk.metadata['matchedTerms']}")
    if not session.has_more_chunks:
        header.append("(last chunk)")
    return " ".join(header) + "\n\n" + chunk.content


def create_mcp_server(store: SessionStore, session_id: Optional[str] = None) -> FastMCP:
    """Create an MCP server bound to one session.

    Design: 1 process = 1 session. Every tool loads the session, changes
    it and saves it, exactly like a CLI invocation.

    Args:
        store: Session store holding the session files
        session_id: Session to operate on (None for the default session)

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(
        name="rlmdoc",
    )

    def run(operation: Callable[[Session], str], save: bool = True) -> str:
        try:
            if not save:
                return operation(store.load(session_id))
            with store.session(session_id) as session:
                return operation(session)
        except RlmError as e:
            return f"Error: {e}"

    @mcp.tool()
    def load(source: str, pattern: Optional[str] = None, clean: bool = False) -> str:
        """Load a document into the session.

        Args:
            source: Path to a file, folder or zip archive
            pattern: Glob selecting files inside a folder or archive (e.g. "**/*.md")
            clean: Normalize whitespace and remove HTML comments

        Returns:
            Summary of the loaded document
        """

        def operation(session: Session) -> str:
            document = process_document(load_source(source, pattern=pattern), clean=clean)
            result = validate_document(document)
            if not result.is_valid:
                raise LoaderError("Validation failed: " + " ".join(result.errors))
            session.load_document(document)
            meta = document.metadata
            lines = [
                f"Loaded {document.id}: {meta.total_length:,} chars, "
                f"~{meta.token_estimate:,} tokens, {meta.line_count:,} lines"
            ]
            lines.extend(f"Warning: {w}" for w in result.warnings)
            return "\n".join(lines)

        return run(operation)

    @mcp.tool()
    def chunk(
        strategy: str = "auto",
        size: Optional[int] = None,
        pattern: Optional[str] = None,
        max_tokens: Optional[int] = None,
        query: Optional[str] = None,
        max_size: int = 0,
    ) -> str:
        """Split the loaded document into chunks and show the first one.

        Strategies: "uniform" (fixed size), "filter" (regex matches with context),
        "semantic" (Markdown sections), "token" (token budget), "recursive"
        (sections re-split by size) and "auto" (picked from the content).

        Args:
            strategy: Chunking strategy name
            size: Chunk size in characters for uniform / recursive
            pattern: Regex for filter, or to keep matching sections for semantic
            max_tokens: Token budget per chunk for token / recursive
            query: What you are looking for; makes auto filter on it
            max_size: Split semantic sections larger than this at paragraph breaks

        Returns:
            Chunk count and the first chunk
        """

        def operation(session: Session) -> str:
            options = build_options(
                strategy, size=size, pattern=pattern, max_tokens=max_tokens, query=query, max_size=max_size
            )
            chunks = session.chunk(options)
            if not chunks:
                return "No chunks created. Check your pattern or document content."
            used = chunks[0].metadata.get("strategy", strategy)
            return f"Created {len(chunks)} chunk(s) using {used}.\n\n" + format_chunk(chunks[0], session)

        return run(operation)

    @mcp.tool()
    def next_chunk() -> str:
        """Advance to the next chunk and return it.

        Returns:
            The next chunk, or a notice that all chunks have been processed
        """

        def operation(session: Session) -> str:
            current = session.next_chunk()
            if current is None:
                return (
                    f"No more chunks. All {session.chunk_count} chunks have been processed; "
                    f"{len(session.results)} results stored."
                )
            return format_chunk(current, session)

        return run(operation)

    @mcp.tool()
    def skip(count: int, min_length: int = 0) -> str:
        """Move forward (or backward, with a negative count) through the chunks.

        Args:
            count: Number of chunks to move
            min_length: Keep moving past chunks shorter than this

        Returns:
            The chunk now under the cursor
        """
        return run(lambda session: format_chunk(session.skip(count, min_length=min_length), session))

    @mcp.tool()
    def jump(target: str) -> str:
        """Jump to a chunk by 1-based number ("3") or percentage ("50%").

        Returns:
            The chunk jumped to
        """
        return run(lambda session: format_chunk(session.jump(parse_jump_target(target, one_based=True)), session))

    @mcp.tool()
    def store_result(key: str, value: str) -> str:
        """Store a partial result, e.g. your findings for the current chunk.

        Args:
            key: Result name; keys are combined in sorted order (e.g. "chunk_0")
            value: Result text; an existing key is overwritten

        Returns:
            Confirmation with the number of stored results
        """

        def operation(session: Session) -> str:
            session.store(key, value)
            return f"Stored '{key}'. Total results: {len(session.results)}"

        return run(operation)

    @mcp.tool()
    def aggregate(final: bool = False) -> str:
        """Combine all stored results in key order.

        Args:
            final: Mark the combined text as the final answer

        Returns:
            The combined results, wrapped in FINAL(...) when final
        """

        def operation(session: Session) -> str:
            result = session.aggregate(final=final)
            if not result.result_count:
                return "No results to aggregate."
            if result.is_final:
                return f"FINAL(\n{result.combined}\n)"
            return result.combined

        return run(operation, save=False)

    @mcp.tool()
    def info() -> str:
        """Show the session state and progress.

        Returns:
            Document, chunk and result counts
        """

        def operation(session: Session) -> str:
            summary = session.progress()
            if not session.has_document:
                return "No document loaded."
            lines = [
                f"Source: {summary['source']}",
                f"Length: {summary['totalLength']:,} chars",
                f"State: {summary['state']}",
            ]
            if session.has_chunks:
                lines.append(
                    f"Chunk {session.current_chunk_index + 1} of {summary['chunkCount']} "
                    f"({summary['percentComplete']:.1f}%, {summary['remainingChunks']} remaining)"
                )
            lines.append(f"Results: {summary['resultCount']}")
            lines.append(f"Recursion depth: {summary['recursionDepth']}")
            return "\n".join(lines)

        return run(operation, save=False)

    @mcp.tool()
    def clear() -> str:
        """Clear the session: document, chunks, results and recursion depth."""

        def operation(session: Session) -> str:
            session.clear()
            return "Session cleared."

        return run(operation)

    return mcp
