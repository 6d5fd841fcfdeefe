"""Exception types raised by rlmdoc."""


class RlmError(Exception):
    """Base class for all rlmdoc errors."""


class ConfigurationError(RlmError, ValueError):
    """Invalid strategy options, session identifier or argument value."""


class StateError(RlmError):
    """The session is not in the state an operation requires."""


class DocumentNotLoadedError(StateError):
    """The operation needs a loaded document."""


class ChunkNotFoundError(StateError):
    """The operation needs a non-empty chunk buffer."""


class RecursionLimitError(RlmError):
    """Further decomposition would exceed the maximum recursion depth."""


class PersistenceError(RlmError):
    """A session could not be written or removed."""


class LoaderError(RlmError):
    """A source could not be turned into a document."""
