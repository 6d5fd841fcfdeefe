"""Protocol definitions for extensible components."""

from rlmdoc.protocols.chunker import ChunkingStrategy
from rlmdoc.protocols.loader import Loader
from rlmdoc.protocols.tokenizer import Tokenizer
from rlmdoc.protocols.validator import Validator

__all__ = ["Loader", "Tokenizer", "ChunkingStrategy", "Validator"]
