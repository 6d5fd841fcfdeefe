"""CLI entry point for rlmdoc.

Every command loads the session, changes it, and saves it again, so an
agent can work through a large document over many invocations.
"""

import argparse
import glob
import json
import logging
import sys
from typing import Literal, Optional, cast

from rlmdoc import __version__
from rlmdoc.chunkers import FilteringOptions, build_options
from rlmdoc.config import get_settings
from rlmdoc.errors import ChunkNotFoundError, ConfigurationError, LoaderError, RlmError
from rlmdoc.loaders import load_source
from rlmdoc.models import Chunk
from rlmdoc.processors import process_document
from rlmdoc.session import Session, import_results, parse_jump_target
from rlmdoc.storage import SessionStore
from rlmdoc.validation import validate_document

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 200


def chunk_to_dict(chunk: Chunk, session: Session, **extra) -> dict:
    """JSON form of a chunk for ``--json`` output."""
    return {
        "index": chunk.index,
        "totalChunks": session.chunk_count,
        "startOffset": chunk.start_offset,
        "endOffset": chunk.end_offset,
        "length": chunk.length,
        "tokenEstimate": chunk.token_estimate,
        "tokenCount": chunk.token_count,
        "hasMore": session.has_more_chunks,
        "content": chunk.content,
        "metadata": {**chunk.metadata, **extra},
    }


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def print_chunk(chunk: Chunk, session: Session, as_json: bool = False, **extra) -> None:
    if as_json:
        print_json(chunk_to_dict(chunk, session, **extra))
        return

    total = session.chunk_count
    print(f"Chunk {chunk.index + 1} of {total}")
    print(f"  Position: {chunk.start_offset:,}..{chunk.end_offset:,}")
    print(f"  Length: {chunk.length:,} chars")
    if chunk.token_count is not None:
        print(f"  Tokens: {chunk.token_count:,}")
    else:
        print(f"  Tokens (est): ~{chunk.token_estimate:,}")
    if "headerPath" in chunk.metadata:
        print(f"  Section: {chunk.metadata['headerPath'] or '(preamble)'}")
    if "matchedTerms" in chunk.metadata:
        print(f"  Matches: {chunk.metadata['matchedTerms']}")
    remaining = total - chunk.index - 1
    print(f"  Remaining: {remaining}" if remaining else "  Remaining: last chunk")
    print("")
    print(chunk.content)


def load(
    store: SessionStore,
    session_id: Optional[str],
    source: str,
    pattern: Optional[str] = None,
    merge: bool = True,
    clean: bool = False,
    validate: bool = True,
) -> int:
    """Load a file, folder, archive or stdin into the session.

    Args:
        source: Path, or ``-`` for stdin
        pattern: Glob pattern for folders and archives
        merge: Combine multiple files into one document
        clean: Normalize whitespace and strip Markdown noise
        validate: Reject binary, empty or oversized documents
    """
    document = process_document(load_source(source, pattern=pattern, merge=merge), clean=clean)

    if validate:
        result = validate_document(document)
        for warning in result.warnings:
            logger.warning("Warning: %s", warning)
        if not result.is_valid:
            raise LoaderError("Validation failed: " + " ".join(result.errors))

    with store.session(session_id) as session:
        session.load_document(document)

    meta = document.metadata
    print(f"Loaded {document.id}")
    print(f"  Source: {meta.source}")
    print(f"  Length: {meta.total_length:,} chars")
    print(f"  Tokens (est): ~{meta.token_estimate:,}")
    print(f"  Lines: {meta.line_count:,}")
    if "fileCount" in meta.extra:
        print(f"  Files: {meta.extra['fileCount']}")
    if meta.content_type:
        print(f"  Content type: {meta.content_type}")
    if meta.title:
        print(f"  Title: {meta.title}")
    return 0


def chunk(store: SessionStore, session_id: Optional[str], strategy: str, as_json: bool = False, **params) -> int:
    """Chunk the loaded document with the named strategy."""
    options = build_options(strategy, **params)

    with store.session(session_id) as session:
        chunks = session.chunk(options)

    if as_json:
        print_json({"chunkCount": len(chunks), "chunks": [chunk_to_dict(c, session) for c in chunks[:1]]})
        return 0

    if not chunks:
        print("No chunks created. Check your pattern or document content.")
        return 0

    sizes = [c.length for c in chunks]
    used = chunks[0].metadata.get("strategy", strategy)
    auto = " (auto-selected)" if chunks[0].metadata.get("autoSelected") == "true" else ""
    print(f"Created {len(chunks)} chunk(s) using {used} strategy{auto}.")
    print(f"Stats: avg={sum(sizes) // len(sizes):,}, min={min(sizes):,}, max={max(sizes):,} chars")
    print("")
    print_chunk(chunks[0], session)
    return 0


def next_chunk(store: SessionStore, session_id: Optional[str], as_json: bool = False, raw: bool = False) -> int:
    """Advance to the next chunk and print it."""
    with store.session(session_id) as session:
        current = session.next_chunk()

    if current is None:
        if raw:
            return 0
        if as_json:
            print_json({"done": True, "message": "No more chunks"})
            return 0
        print("No more chunks. All chunks have been processed.")
        print(f"Total chunks: {session.chunk_count}")
        print(f"Stored results: {len(session.results)}")
        print("Use 'rlmdoc aggregate' to combine results.")
        return 0

    if raw:
        print(current.content)
    else:
        print_chunk(current, session, as_json)
    return 0


def current_chunk(store: SessionStore, session_id: Optional[str], as_json: bool = False, raw: bool = False) -> int:
    """Print the chunk under the cursor without moving."""
    session = store.load(session_id)
    current = session.current_chunk
    if current is None:
        raise ChunkNotFoundError("No chunks available. Use 'rlmdoc chunk' first.")
    if raw:
        print(current.content)
    else:
        print_chunk(current, session, as_json)
    return 0


def skip(store: SessionStore, session_id: Optional[str], count: int, min_length: int = 0, as_json: bool = False) -> int:
    """Move the cursor forward (or back, when negative)."""
    with store.session(session_id) as session:
        previous = session.current_chunk_index
        target = session.skip(count, min_length=min_length)

    if not as_json:
        print(f"Skipped from chunk {previous + 1} to {target.index + 1}")
        print("")
    print_chunk(target, session, as_json, skippedFrom=str(previous + 1))
    return 0


def jump(store: SessionStore, session_id: Optional[str], target: str, as_json: bool = False) -> int:
    """Jump to a 1-based chunk number or a percentage."""
    parsed = parse_jump_target(target, one_based=True)
    with store.session(session_id) as session:
        previous = session.current_chunk_index
        current = session.jump(parsed)

    if not as_json:
        print(f"Jumped from chunk {previous + 1} to {current.index + 1}")
        print("")
    print_chunk(current, session, as_json, jumpedFrom=str(previous + 1))
    return 0


def slice_content(store: SessionStore, session_id: Optional[str], range_text: str) -> int:
    """Print a character range of the loaded content."""
    session = store.load(session_id)
    text = session.slice(range_text)
    print(text)
    return 0


def filter_chunks(store: SessionStore, session_id: Optional[str], pattern: str, context: Optional[int] = None) -> int:
    """Shortcut for ``chunk --strategy filter``."""
    options = FilteringOptions(
        pattern=pattern,
        context_window=context if context is not None else get_settings().filter_context,
    )
    with store.session(session_id) as session:
        chunks = session.chunk(options)

    if not chunks:
        print(f"No matches for '{pattern}'.")
        return 0
    matches = sum(int(c.metadata.get("matchCount", "0")) for c in chunks)
    print(f"Found {matches} match(es) in {len(chunks)} chunk(s).")
    print("")
    print_chunk(chunks[0], session)
    return 0


def store_result(store: SessionStore, session_id: Optional[str], key: str, value: str) -> int:
    """Store a partial result; ``-`` reads the value from stdin."""
    if value == "-":
        value = sys.stdin.read()
    with store.session(session_id) as session:
        session.store(key, value)
    print(f"Stored result '{key}' ({len(value):,} chars). Total results: {len(session.results)}")
    return 0


def results(store: SessionStore, session_id: Optional[str], key: Optional[str] = None, as_json: bool = False) -> int:
    """List stored results, or print one."""
    session = store.load(session_id)
    if key is not None:
        value = session.get_result(key)
        if value is None:
            raise ConfigurationError(f"No result stored under '{key}'")
        if as_json:
            print_json({key: value})
        else:
            print(value)
        return 0

    if as_json:
        print_json(session.results)
        return 0
    if not session.results:
        print("No results stored.")
        return 0
    print(f"Stored results: {len(session.results)}")
    for name in sorted(session.results):
        value = session.results[name]
        preview = value[:PREVIEW_CHARS].replace("\n", " ")
        print(f"  {name}: {preview}{'...' if len(value) > PREVIEW_CHARS else ''}")
    return 0


def import_files(store: SessionStore, session_id: Optional[str], pattern: str) -> int:
    """Store the files matching a glob as results keyed by file stem."""
    paths = glob.glob(pattern, recursive=True)
    if not paths:
        raise LoaderError(f"No files match '{pattern}'")
    with store.session(session_id) as session:
        keys = import_results(session, paths)
    print(f"Imported {len(keys)} result(s): {', '.join(keys)}")
    return 0


def aggregate(
    store: SessionStore,
    session_id: Optional[str],
    final: bool = False,
    separator: Optional[str] = None,
    as_json: bool = False,
    raw: bool = False,
) -> int:
    """Combine stored results in key order."""
    session = store.load(session_id)
    if separator is not None:
        # Allow \n and \t escapes on the command line
        separator = separator.replace("\\n", "\n").replace("\\t", "\t")
        result = session.aggregate(final=final, separator=separator)
    else:
        result = session.aggregate(final=final)

    if as_json:
        print_json(
            {
                "resultCount": result.result_count,
                "combined": result.combined,
                "results": result.results,
                "signal": result.signal,
            }
        )
        return 0
    if not result.result_count:
        if not raw:
            print("No results to aggregate. Use 'rlmdoc store <key> <value>' first.")
        return 0
    if raw:
        print(result.combined)
        return 0

    print(f"Aggregating {result.result_count} results")
    print("")
    if result.is_final:
        print("FINAL(")
        print(result.combined)
        print(")")
    else:
        print(result.combined)
    return 0


def info(store: SessionStore, session_id: Optional[str], progress: bool = False, as_json: bool = False) -> int:
    """Show what the session holds."""
    session = store.load(session_id)
    summary = session.progress()

    if as_json:
        print_json(summary)
        return 0
    if not session.has_document:
        print("No document loaded. Use 'rlmdoc load <file>' to load a document.")
        return 0

    meta = session.metadata
    print(f"Session: {session_id or 'default'} ({store.path_for(session_id)})")
    if meta is not None:
        print(f"  Source: {meta.source}")
        print(f"  Loaded: {meta.loaded_at.isoformat(timespec='seconds')}")
        print(f"  Tokens (est): ~{meta.token_estimate:,}")
    print(f"  Length: {summary['totalLength']:,} chars")
    if session.has_chunks:
        print(f"  Chunks: {summary['chunkCount']}, at chunk {session.current_chunk_index + 1}")
        print(f"  Remaining: {summary['remainingChunks']} chunks")
    print(f"  Recursion depth: {session.recursion_depth}")
    print(f"  Stored results: {summary['resultCount']}")
    for key in sorted(session.results)[:5]:
        print(f"    - {key}")
    if len(session.results) > 5:
        print(f"    ... and {len(session.results) - 5} more")

    if progress and session.has_chunks:
        print("")
        print(f"Progress: {summary['percentComplete']:.1f}%")
        print(f"  Characters: {summary['processedChars']:,} / {summary['totalLength']:,} processed")
        print(f"  Est. tokens remaining: ~{summary['remainingTokenEstimate']:,}")
    return 0


def depth(store: SessionStore, session_id: Optional[str], action: str) -> int:
    """Enter or exit one recursion level."""
    with store.session(session_id) as session:
        if action == "enter":
            session.descend()
        else:
            session.exit_recursion()
    print(f"Recursion depth: {session.recursion_depth}")
    return 0


def clear(store: SessionStore, session_id: Optional[str], all_sessions: bool = False) -> int:
    """Delete the session (or every session)."""
    if all_sessions:
        removed = store.delete_all()
        print(f"Cleared {removed} session(s).")
        return 0
    store.delete(session_id)
    print(f"Session {session_id or 'default'} cleared.")
    return 0


def serve(store: SessionStore, session_id: Optional[str], transport: str = "stdio") -> int:
    """Start the MCP server over the session store."""
    # Import here to avoid loading MCP unless needed
    from rlmdoc.server import create_mcp_server

    logger.info("Serving session %s via %s", session_id or "default", transport)
    mcp = create_mcp_server(store, session_id)
    mcp.run(transport=cast(Literal["stdio", "sse", "streamable-http"], transport))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rlmdoc",
        description="rlmdoc - work through documents larger than your context window",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--session", "-S", default=None, help="Session id (default: the global session)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def json_flag(p: argparse.ArgumentParser) -> None:
        p.add_argument("--json", "-j", action="store_true", help="Output JSON for machine parsing")

    # load command
    load_parser = subparsers.add_parser("load", help="Load a file, folder, zip archive or stdin (-)")
    load_parser.add_argument("source", help="File path, folder path, zip file, or '-' for stdin")
    load_parser.add_argument("--pattern", "-p", help="Glob for folders and archives (e.g. '**/*.md')")
    load_parser.add_argument("--no-merge", action="store_true", help="Load only the first file of a folder")
    load_parser.add_argument("--clean", action="store_true", help="Normalize whitespace and strip comments")
    load_parser.add_argument("--no-validate", action="store_true", help="Skip size and content checks")

    # chunk command
    chunk_parser = subparsers.add_parser("chunk", help="Split the loaded document into chunks")
    chunk_parser.add_argument(
        "--strategy",
        "-s",
        default="uniform",
        help="uniform, filter, semantic, token, recursive or auto (default: uniform)",
    )
    chunk_parser.add_argument("--size", type=int, help="Chunk size in characters")
    chunk_parser.add_argument("--overlap", type=int, help="Overlap between uniform chunks")
    chunk_parser.add_argument("--pattern", "-p", help="Regex for filter (or hybrid semantic) chunking")
    chunk_parser.add_argument("--context", "-c", type=int, help="Characters of context around matches")
    chunk_parser.add_argument("--min-level", type=int, default=1, help="Shallowest header level to split at")
    chunk_parser.add_argument("--max-level", type=int, default=6, help="Deepest header level to split at")
    chunk_parser.add_argument("--min-size", type=int, default=0, help="Merge sections smaller than this")
    chunk_parser.add_argument("--merge-small", action="store_true", help="Merge small sibling sections")
    chunk_parser.add_argument(
        "--max-size", type=int, default=0, help="Split sections larger than this at paragraph breaks (0 = no limit)"
    )
    chunk_parser.add_argument("--max-tokens", type=int, help="Token budget per chunk")
    chunk_parser.add_argument("--granularity", choices=["paragraph", "line"], default="paragraph")
    chunk_parser.add_argument("--target-size", type=int, help="Section size the recursive strategy re-splits above")
    chunk_parser.add_argument("--query", "-q", help="Query that steers the auto strategy towards filtering")
    json_flag(chunk_parser)

    # navigation commands
    next_parser = subparsers.add_parser("next", help="Advance to the next chunk")
    json_flag(next_parser)
    next_parser.add_argument("--raw", action="store_true", help="Print only the chunk content")

    current_parser = subparsers.add_parser("current", help="Show the current chunk")
    json_flag(current_parser)
    current_parser.add_argument("--raw", action="store_true", help="Print only the chunk content")

    skip_parser = subparsers.add_parser("skip", help="Skip chunks forward or (negative) backward")
    skip_parser.add_argument("count", type=int, help="Number of chunks to skip")
    skip_parser.add_argument("--min-length", type=int, default=0, help="Also skip chunks shorter than this")
    skip_parser.add_argument(
        "--skip-empty", action="store_const", const=100, dest="min_length", help="Same as --min-length 100"
    )
    json_flag(skip_parser)

    jump_parser = subparsers.add_parser("jump", help="Jump to a chunk number (1-based) or percentage")
    jump_parser.add_argument("target", help="Chunk number or percentage, e.g. 3 or 50%%")
    json_flag(jump_parser)

    slice_parser = subparsers.add_parser("slice", help="Print a character range of the document")
    slice_parser.add_argument("range", help="start:end, negatives count from the end (e.g. -500:)")

    filter_parser = subparsers.add_parser("filter", help="Chunk around regex matches")
    filter_parser.add_argument("pattern", help="Regular expression")
    filter_parser.add_argument("--context", "-c", type=int, help="Characters of context around matches")

    # results commands
    store_parser = subparsers.add_parser("store", help="Store a partial result")
    store_parser.add_argument("key", help="Result key, e.g. chunk_0")
    store_parser.add_argument("value", help="Result text, or '-' to read stdin")

    results_parser = subparsers.add_parser("results", help="List stored results or show one")
    results_parser.add_argument("key", nargs="?", help="Key of the result to show")
    json_flag(results_parser)

    import_parser = subparsers.add_parser("import", help="Store files as results keyed by file name")
    import_parser.add_argument("pattern", help="Glob of result files, e.g. 'out/*.txt'")

    aggregate_parser = subparsers.add_parser("aggregate", help="Combine stored results")
    aggregate_parser.add_argument("--final", action="store_true", help="Mark the output as the final answer")
    aggregate_parser.add_argument("--separator", help="Text between results (default: '\\n\\n---\\n\\n')")
    aggregate_parser.add_argument("--raw", action="store_true", help="Print only the combined text")
    json_flag(aggregate_parser)

    # session commands
    info_parser = subparsers.add_parser("info", help="Show session information")
    info_parser.add_argument("--progress", action="store_true", help="Show processing progress")
    json_flag(info_parser)

    depth_parser = subparsers.add_parser("depth", help="Track recursive decomposition depth")
    depth_parser.add_argument("action", choices=["enter", "exit"])

    clear_parser = subparsers.add_parser("clear", help="Clear the session")
    clear_parser.add_argument("--all", action="store_true", help="Clear every session")

    serve_parser = subparsers.add_parser("serve", help="Start an MCP server over the session")
    serve_parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )

    return parser


def dispatch(args: argparse.Namespace, store: SessionStore) -> int:
    session_id = args.session
    as_json = getattr(args, "json", False)

    if args.command == "load":
        return load(
            store,
            session_id,
            args.source,
            pattern=args.pattern,
            merge=not args.no_merge,
            clean=args.clean,
            validate=not args.no_validate,
        )
    elif args.command == "chunk":
        return chunk(
            store,
            session_id,
            args.strategy,
            as_json=as_json,
            size=args.size,
            overlap=args.overlap,
            pattern=args.pattern,
            context=args.context,
            min_level=args.min_level,
            max_level=args.max_level,
            min_size=args.min_size,
            merge_small=args.merge_small,
            max_size=args.max_size,
            max_tokens=args.max_tokens,
            granularity=args.granularity,
            target_size=args.target_size,
            query=args.query,
        )
    elif args.command == "next":
        return next_chunk(store, session_id, as_json=as_json, raw=args.raw)
    elif args.command == "current":
        return current_chunk(store, session_id, as_json=as_json, raw=args.raw)
    elif args.command == "skip":
        return skip(store, session_id, args.count, min_length=args.min_length, as_json=as_json)
    elif args.command == "jump":
        return jump(store, session_id, args.target, as_json=as_json)
    elif args.command == "slice":
        return slice_content(store, session_id, args.range)
    elif args.command == "filter":
        return filter_chunks(store, session_id, args.pattern, context=args.context)
    elif args.command == "store":
        return store_result(store, session_id, args.key, args.value)
    elif args.command == "results":
        return results(store, session_id, args.key, as_json=as_json)
    elif args.command == "import":
        return import_files(store, session_id, args.pattern)
    elif args.command == "aggregate":
        return aggregate(
            store, session_id, final=args.final, separator=args.separator, as_json=as_json, raw=args.raw
        )
    elif args.command == "info":
        return info(store, session_id, progress=args.progress, as_json=as_json)
    elif args.command == "depth":
        return depth(store, session_id, args.action)
    elif args.command == "clear":
        return clear(store, session_id, all_sessions=args.all)
    elif args.command == "serve":
        return serve(store, session_id, args.transport)
    raise ConfigurationError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(message)s",
    )

    try:
        store = SessionStore.from_settings(settings)
        return dispatch(args, store)
    except RlmError as e:
        if getattr(args, "json", False):
            print_json({"error": str(e)})
        else:
            print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
