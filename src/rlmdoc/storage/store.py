"""JSON file storage for sessions, one file per session identifier."""

import json
import logging
import os
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from pydantic import ValidationError

from rlmdoc.config import Settings, get_settings
from rlmdoc.errors import ConfigurationError, PersistenceError
from rlmdoc.session import Session
from rlmdoc.storage.schema import SCHEMA_VERSION, session_from_dict, session_to_dict
from rlmdoc.utils.retry import retry_call

logger = logging.getLogger(__name__)

DEFAULT_SESSION_FILE = ".rlm-session.json"
SESSION_FILE_PREFIX = "rlm-session-"
SESSION_ID_RE = re.compile(r"^[A-Za-z0-9._-]+$")


class SessionStore:
    """Loads and saves sessions as JSON files in one directory.

    The default session lives in ``.rlm-session.json``; named sessions in
    ``rlm-session-{id}.json``. Saves are atomic and file operations are
    retried on transient I/O errors.
    """

    def __init__(
        self,
        directory: Path | str | None = None,
        attempts: int = 3,
        base_delay: float = 0.1,
    ):
        self.directory = Path(directory) if directory is not None else Path.home()
        self.attempts = attempts
        self.base_delay = base_delay

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SessionStore":
        settings = settings or get_settings()
        return cls(
            directory=settings.session_dir,
            attempts=settings.retry_attempts,
            base_delay=settings.retry_base_delay,
        )

    def path_for(self, session_id: Optional[str] = None) -> Path:
        """Return the file backing a session.

        Raises:
            ConfigurationError: If the id contains anything but letters, digits, '.', '_' or '-'
        """
        if not session_id:
            return self.directory / DEFAULT_SESSION_FILE
        if not SESSION_ID_RE.match(session_id) or session_id in (".", ".."):
            raise ConfigurationError(
                f"Invalid session id '{session_id}'. Use letters, digits, '.', '_' or '-'"
            )
        return self.directory / f"{SESSION_FILE_PREFIX}{session_id}.json"

    def _retry(self, func, description: str):
        return retry_call(
            func,
            attempts=self.attempts,
            delay=self.base_delay,
            description=description,
        )

    def load(self, session_id: Optional[str] = None) -> Session:
        """Load a session, or a fresh one if the file is missing or unusable.

        Malformed or schema-invalid files are logged and replaced by an
        empty session rather than raised.

        Raises:
            PersistenceError: If the file exists but cannot be read after retrying
        """
        path = self.path_for(session_id)
        if not path.exists():
            logger.debug("No session file at %s", path)
            return Session()

        try:
            raw = self._retry(path.read_bytes, f"reading {path.name}")
        except OSError as e:
            raise PersistenceError(f"Could not read session file {path}: {e}") from e

        try:
            data = json.loads(raw.decode("utf-8"))
            if isinstance(data, dict) and data.get("version", SCHEMA_VERSION) > SCHEMA_VERSION:
                logger.warning(
                    "Session file %s has newer schema version %s (supported: %d)",
                    path,
                    data.get("version"),
                    SCHEMA_VERSION,
                )
            return session_from_dict(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Invalid JSON in session file %s, starting fresh: %s", path, e)
        except (ValidationError, TypeError) as e:
            logger.warning("Session file %s failed schema validation, starting fresh: %s", path, e)
        return Session()

    def save(self, session: Session, session_id: Optional[str] = None) -> Path:
        """Atomically write a session.

        Raises:
            PersistenceError: If the write still fails after retrying
        """
        path = self.path_for(session_id)
        payload = json.dumps(session_to_dict(session), ensure_ascii=False, indent=2)

        try:
            self._retry(lambda: self._write_atomic(path, payload), f"writing {path.name}")
        except OSError as e:
            raise PersistenceError(f"Could not save session to {path}: {e}") from e
        logger.debug("Session saved to %s", path)
        return path

    @staticmethod
    def _write_atomic(path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Temp file in the same directory so the rename stays on one filesystem
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    @contextmanager
    def session(self, session_id: Optional[str] = None) -> Iterator[Session]:
        """Context manager that loads a session and saves it if the block succeeds.

        An exception inside the block leaves the stored session untouched.
        """
        session = self.load(session_id)
        yield session
        self.save(session, session_id)

    def delete(self, session_id: Optional[str] = None) -> bool:
        """Delete a session file; returns False if there was none.

        Raises:
            PersistenceError: If the file exists but cannot be removed
        """
        path = self.path_for(session_id)
        if not path.exists():
            return False
        try:
            self._retry(lambda: path.unlink(missing_ok=True), f"deleting {path.name}")
        except OSError as e:
            raise PersistenceError(f"Could not delete session file {path}: {e}") from e
        return True

    def list_sessions(self) -> list[str]:
        """Return the ids of the named sessions in the directory."""
        if not self.directory.is_dir():
            return []
        ids = (
            p.name[len(SESSION_FILE_PREFIX) : -len(".json")]
            for p in self.directory.glob(f"{SESSION_FILE_PREFIX}*.json")
        )
        return sorted(i for i in ids if SESSION_ID_RE.match(i))

    def delete_all(self) -> int:
        """Delete the default session and every named session; returns how many were removed."""
        removed = int(self.delete())
        for session_id in self.list_sessions():
            removed += int(self.delete(session_id))
        return removed
