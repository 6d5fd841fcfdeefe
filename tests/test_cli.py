"""End-to-end tests for the command line interface."""

import io
import json

import pytest

from rlmdoc.cli import build_parser, main
from rlmdoc.session import MAX_RECURSION_DEPTH
from rlmdoc.storage import SessionStore


@pytest.fixture
def doc(tmp_path):
    path = tmp_path / "doc.md"
    path.write_text("# A\nfoo\n# B\nbar\n", encoding="utf-8")
    return path


def run(capsys, *argv: str) -> tuple[int, str, str]:
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


class TestWorkflow:
    """Test the load, chunk, store, aggregate loop."""

    def test_semantic_workflow(self, capsys, doc):
        """Test two sections processed into one aggregate."""
        code, out, _ = run(capsys, "load", str(doc))
        assert code == 0
        assert "Loaded doc.md" in out
        assert "Title: A" in out

        code, out, _ = run(capsys, "chunk", "--strategy", "semantic")
        assert code == 0
        assert "Created 2 chunk(s) using semantic strategy." in out
        assert "foo" in out

        assert run(capsys, "store", "chunk_0", "result-A")[0] == 0
        code, out, _ = run(capsys, "next", "--raw")
        assert out == "# B\nbar\n\n"
        assert run(capsys, "store", "chunk_1", "result-B")[0] == 0

        code, out, _ = run(capsys, "aggregate", "--raw")
        assert code == 0
        assert out == "[chunk_0]\nresult-A\n\n---\n\n[chunk_1]\nresult-B\n"

        code, out, _ = run(capsys, "aggregate", "--final")
        assert "FINAL(\n[chunk_0]" in out

        code, out, _ = run(capsys, "next")
        assert code == 0
        assert "No more chunks" in out

    def test_json_output(self, capsys, doc):
        """Test machine-readable chunk and jump output."""
        run(capsys, "load", str(doc))

        code, out, _ = run(capsys, "chunk", "-s", "semantic", "--json")
        data = json.loads(out)
        assert data["chunkCount"] == 2
        assert data["chunks"][0]["content"] == "# A\nfoo\n"

        code, out, _ = run(capsys, "jump", "100%", "--json")
        data = json.loads(out)
        assert data["index"] == 1
        assert data["hasMore"] is False
        assert data["metadata"]["jumpedFrom"] == "1"

        code, out, _ = run(capsys, "info", "--json")
        assert json.loads(out)["currentIndex"] == 1

    def test_navigation(self, capsys, tmp_path):
        """Test skip, jump and slice on uniform chunks."""
        path = tmp_path / "long.txt"
        path.write_text("".join(str(i % 10) for i in range(500)), encoding="utf-8")
        run(capsys, "load", str(path))
        run(capsys, "chunk", "--size", "100")

        code, out, _ = run(capsys, "skip", "100")
        assert "Skipped from chunk 1 to 5" in out

        code, out, _ = run(capsys, "jump", "2")
        assert "Jumped from chunk 5 to 2" in out

        code, out, _ = run(capsys, "slice", "0:5")
        assert out == "01234\n"

    def test_filter(self, capsys, tmp_path):
        """Test the filter shortcut."""
        path = tmp_path / "log.txt"
        path.write_text("ok\n" * 200 + "ERROR disk full\n" + "ok\n" * 200, encoding="utf-8")
        run(capsys, "load", str(path))

        code, out, _ = run(capsys, "filter", "error", "--context", "10")
        assert code == 0
        assert "Found 1 match(es) in 1 chunk(s)." in out

    def test_filter_strategy_name(self, capsys, tmp_path):
        """Test that chunking with the filter strategy reports it by the name it was given."""
        path = tmp_path / "log.txt"
        path.write_text("ok\n" * 200 + "ERROR disk full\n" + "ok\n" * 200, encoding="utf-8")
        run(capsys, "load", str(path))

        code, out, _ = run(capsys, "chunk", "-s", "filter", "-p", "error", "--json")
        assert code == 0
        assert json.loads(out)["chunks"][0]["metadata"]["strategy"] == "filter"

        code, out, _ = run(capsys, "chunk", "-s", "filter", "-p", "error")
        assert "using filter strategy" in out

    def test_chunk_max_size(self, capsys, tmp_path):
        """Test that --max-size splits a long section into parts."""
        path = tmp_path / "doc.md"
        path.write_text("# A\n" + "\n\n".join(["word " * 20] * 5) + "\n", encoding="utf-8")
        run(capsys, "load", str(path))

        code, out, _ = run(capsys, "chunk", "-s", "semantic", "--max-size", "150", "--json")
        assert code == 0
        data = json.loads(out)
        assert data["chunkCount"] > 1
        assert data["chunks"][0]["metadata"]["sectionHeader"] == "A (Part 1)"

    def test_store_from_stdin(self, capsys, monkeypatch):
        """Test that '-' reads the value from stdin."""
        monkeypatch.setattr("sys.stdin", io.StringIO("piped result"))
        run(capsys, "store", "k", "-")

        code, out, _ = run(capsys, "results", "k")
        assert out == "piped result\n"

    def test_import(self, capsys, tmp_path):
        """Test importing result files."""
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        (out_dir / "part1.txt").write_text("one", encoding="utf-8")
        (out_dir / "part2.txt").write_text("two", encoding="utf-8")

        code, out, _ = run(capsys, "import", str(out_dir / "*.txt"))
        assert "Imported 2 result(s): part1, part2" in out


class TestSessions:
    """Test session isolation and clearing."""

    def test_named_sessions(self, capsys, isolated_settings):
        """Test that named sessions have their own files."""
        run(capsys, "-S", "work", "store", "k", "v")

        store = SessionStore(isolated_settings)
        assert (isolated_settings / "rlm-session-work.json").exists()
        assert store.load("work").results == {"k": "v"}
        assert store.load().results == {}

    def test_clear(self, capsys, isolated_settings):
        """Test that clear removes the session file."""
        run(capsys, "store", "k", "v")
        code, out, _ = run(capsys, "clear")
        assert code == 0
        assert not (isolated_settings / ".rlm-session.json").exists()

    def test_depth_limit(self, capsys):
        """Test that entering past the maximum depth fails."""
        for _ in range(MAX_RECURSION_DEPTH):
            assert run(capsys, "depth", "enter")[0] == 0
        code, _, err = run(capsys, "depth", "enter")
        assert code == 1
        assert "Maximum recursion depth" in err

        code, out, _ = run(capsys, "depth", "exit")
        assert out == f"Recursion depth: {MAX_RECURSION_DEPTH - 1}\n"


class TestErrors:
    """Test error reporting."""

    def test_next_without_chunks(self, capsys):
        """Test that state errors print a message and exit 1."""
        code, _, err = run(capsys, "-S", "fresh", "next")
        assert code == 1
        assert "Error: No chunks available" in err

    def test_json_error(self, capsys):
        """Test that errors are JSON in JSON mode."""
        code, out, _ = run(capsys, "next", "--json")
        assert code == 1
        assert "No chunks available" in json.loads(out)["error"]

    def test_invalid_strategy_keeps_session(self, capsys, doc):
        """Test that a bad chunk configuration leaves the session as it was."""
        run(capsys, "load", str(doc))
        run(capsys, "chunk", "-s", "semantic")

        code, _, err = run(capsys, "chunk", "-s", "uniform", "--size", "0")
        assert code == 1
        assert "Chunk size must be positive" in err

        code, out, _ = run(capsys, "info", "--json")
        assert json.loads(out)["chunkCount"] == 2

    def test_missing_file(self, capsys, tmp_path):
        """Test loading a missing file."""
        code, _, err = run(capsys, "load", str(tmp_path / "nope.md"))
        assert code == 1
        assert "Cannot read source" in err

    def test_invalid_session_id(self, capsys):
        """Test that unsafe session ids are rejected."""
        code, _, err = run(capsys, "-S", "../x", "info")
        assert code == 1
        assert "Invalid session id" in err

    def test_command_required(self):
        """Test that a subcommand is required."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
