"""Tests for JSON session persistence."""

import errno
import json
import logging
from pathlib import Path

import pytest

from conftest import make_document
from rlmdoc.chunkers import SemanticOptions
from rlmdoc.errors import ConfigurationError, PersistenceError
from rlmdoc.session import Session
from rlmdoc.storage import DEFAULT_SESSION_FILE, SCHEMA_VERSION, SessionStore, session_from_dict, session_to_dict


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "store", base_delay=0)


def populated_session() -> Session:
    session = Session()
    document = make_document(
        "# A\nfoo\n# B\nbar\n",
        title="Doc",
        content_type="text/markdown",
        code_languages=("python",),
        extra={"author": "me"},
    )
    session.load_document(document)
    session.chunk(SemanticOptions())
    session.next_chunk()
    session.store("chunk_0", "result-A")
    session.enter_recursion()
    session.enter_recursion()
    return session


class TestPaths:
    """Test session file naming."""

    def test_default_and_named(self, store):
        """Test default and named session files."""
        assert store.path_for().name == DEFAULT_SESSION_FILE
        assert store.path_for("work").name == "rlm-session-work.json"

    @pytest.mark.parametrize("session_id", ["../escape", "a/b", "..", "sp ace"])
    def test_invalid_id(self, store, session_id):
        """Test that ids that could leave the directory are rejected."""
        with pytest.raises(ConfigurationError, match="Invalid session id"):
            store.path_for(session_id)

    def test_from_settings(self, isolated_settings):
        """Test that the store follows the configured directory."""
        assert SessionStore.from_settings().directory == isolated_settings


class TestSaveLoad:
    """Test persistence round trips."""

    def test_round_trip(self, store):
        """Test that a saved session loads back equal."""
        session = populated_session()
        store.save(session, "work")
        assert store.load("work") == session

    def test_dict_round_trip(self):
        """Test the schema functions without touching disk."""
        session = populated_session()
        assert session_from_dict(json.loads(json.dumps(session_to_dict(session)))) == session

    def test_camel_case_on_disk(self, store):
        """Test the on-disk field names."""
        path = store.save(populated_session())
        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["version"] == SCHEMA_VERSION
        assert data["recursionDepth"] == 2
        assert data["currentChunkIndex"] == 1
        assert data["chunkBuffer"][1]["startOffset"] == 8
        assert data["metadata"]["totalLength"] == 16
        assert data["results"] == {"chunk_0": "result-A"}

    def test_missing_file(self, store):
        """Test that a missing file is a fresh session."""
        assert store.load() == Session()

    def test_corrupt_json(self, store, caplog):
        """Test that invalid JSON is logged and replaced by a fresh session."""
        path = store.path_for()
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            assert store.load() == Session()
        assert "Invalid JSON" in caplog.text

    def test_schema_mismatch(self, store, caplog):
        """Test that well-formed JSON with the wrong shape is a fresh session."""
        path = store.path_for()
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"chunkBuffer": "nope"}), encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            assert store.load() == Session()
        assert "schema validation" in caplog.text

    def test_cursor_clamped_on_load(self, store):
        """Test that an out-of-range cursor in the file is clamped."""
        session = populated_session()
        data = session_to_dict(session)
        data["currentChunkIndex"] = 10
        path = store.path_for()
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps(data), encoding="utf-8")

        assert store.load().current_chunk_index == 1

    def test_no_temp_files_left(self, store):
        """Test that atomic saves clean up after themselves."""
        store.save(populated_session())
        store.save(Session())
        assert [p.name for p in store.directory.iterdir()] == [DEFAULT_SESSION_FILE]

    def test_sessions_are_isolated(self, store):
        """Test that named sessions do not share state."""
        store.save(Session(results={"a": "1"}), "one")
        store.save(Session(results={"b": "2"}), "two")
        assert store.load("one").results == {"a": "1"}
        assert store.load("two").results == {"b": "2"}
        assert store.list_sessions() == ["one", "two"]


class TestRetry:
    """Test retries on transient read and write failures."""

    def test_transient_failure_retried(self, store, monkeypatch):
        """Test that a write succeeding on the third attempt is saved."""
        calls = []
        real_write = SessionStore._write_atomic

        def flaky(path, payload):
            calls.append(path)
            if len(calls) < 3:
                raise OSError(errno.EIO, "I/O error")
            real_write(path, payload)

        monkeypatch.setattr(store, "_write_atomic", flaky)
        store.save(Session(results={"k": "v"}))

        assert len(calls) == 3
        assert store.load().results == {"k": "v"}

    def test_exhausted(self, store, monkeypatch):
        """Test that persistent transient failures become a persistence error."""
        calls = []

        def failing(path, payload):
            calls.append(path)
            raise OSError(errno.EIO, "I/O error")

        monkeypatch.setattr(store, "_write_atomic", failing)
        with pytest.raises(PersistenceError, match="Could not save session"):
            store.save(Session())
        assert len(calls) == 3

    def test_permanent_not_retried(self, store, monkeypatch):
        """Test that permission errors fail immediately."""
        calls = []

        def denied(path, payload):
            calls.append(path)
            raise PermissionError(errno.EACCES, "denied")

        monkeypatch.setattr(store, "_write_atomic", denied)
        with pytest.raises(PersistenceError):
            store.save(Session())
        assert len(calls) == 1

    def test_read_retried(self, store, monkeypatch):
        """Test that a read succeeding on the third attempt loads the session."""
        store.save(Session(results={"k": "v"}))
        calls = []
        real_read = Path.read_bytes

        def flaky(self):
            calls.append(self)
            if len(calls) < 3:
                raise OSError(errno.EIO, "I/O error")
            return real_read(self)

        monkeypatch.setattr(Path, "read_bytes", flaky)
        assert store.load().results == {"k": "v"}
        assert len(calls) == 3

    def test_read_failure_keeps_file(self, store, monkeypatch):
        """Test that an unreadable session file raises and is not overwritten."""
        path = store.save(Session(results={"k": "v"}))
        before = path.read_bytes()

        def failing(self):
            raise OSError(errno.EIO, "I/O error")

        monkeypatch.setattr(Path, "read_bytes", failing)
        with pytest.raises(PersistenceError, match="Could not read session file"):
            store.load()
        with pytest.raises(PersistenceError):
            with store.session() as session:
                session.store("k", "new")
        monkeypatch.undo()

        assert path.read_bytes() == before
        assert store.load().results == {"k": "v"}


class TestSessionContext:
    """Test the load-modify-save context manager."""

    def test_saves_on_success(self, store):
        """Test that changes inside the block are persisted."""
        with store.session("work") as session:
            session.store("k", "v")
        assert store.load("work").results == {"k": "v"}

    def test_no_save_on_error(self, store):
        """Test that a failing block leaves the stored session untouched."""
        store.save(Session(results={"k": "old"}))
        with pytest.raises(RuntimeError):
            with store.session() as session:
                session.store("k", "new")
                raise RuntimeError("boom")
        assert store.load().results == {"k": "old"}


class TestDelete:
    """Test session removal."""

    def test_delete(self, store):
        """Test deleting a session file."""
        store.save(Session(), "work")
        assert store.delete("work") is True
        assert store.delete("work") is False

    def test_delete_all(self, store):
        """Test deleting the default and every named session."""
        store.save(Session())
        store.save(Session(), "a")
        store.save(Session(), "b")
        assert store.delete_all() == 3
        assert store.list_sessions() == []
        assert not store.path_for().exists()
