"""Session persistence."""

from rlmdoc.storage.schema import SCHEMA_VERSION, session_from_dict, session_to_dict
from rlmdoc.storage.store import DEFAULT_SESSION_FILE, SessionStore

__all__ = [
    "SessionStore",
    "session_to_dict",
    "session_from_dict",
    "SCHEMA_VERSION",
    "DEFAULT_SESSION_FILE",
]
